"""
deployment config, loaded from a json file shaped like:

    {"functionName": "my-fn",
     "handler": "handler.main",
     "role": "arn:aws:iam::123456789012:role/my-fn",
     "timeout": 30,
     "memorySize": 256,
     "runtime": "python3.12",
     "region": "us-east-1",
     "eventSource": {"EventSourceArn": "arn:aws:kinesis:...", "BatchSize": 100},
     "pushSource": [{"TopicArn": "arn:aws:sns:...:my-topic", "StatementId": "my-topic-invoke"}],
     "logging": {"LambdaFunctionName": "log-shipper", "Principal": "logs.us-east-1.amazonaws.com", "Arn": "arn:aws:lambda:...:log-shipper"},
     "rule": {"name": "nightly", "scheduleExpression": "cron(0 20 * * ? *)", "isEnabled": true, "role": "arn:aws:iam::..."}}
"""
import dataclasses
import json
from typing import Any, List, Optional

default_timeout = 10
default_memory = 128
default_runtime = 'python3.12'

@dataclasses.dataclass
class EventSourceSpec:
    arn: str
    batch_size: int
    starting_position: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        assert 'EventSourceArn' in data, f'eventSource requires EventSourceArn: {data}'
        assert 'BatchSize' in data, f'eventSource requires BatchSize: {data}'
        position = data.get('StartingPosition')
        return cls(data['EventSourceArn'], int(data['BatchSize']), position.upper() if position else None)

@dataclasses.dataclass
class PushSubscription:
    topic_arn: str
    statement_id: str

    @classmethod
    def from_dict(cls, data):
        assert 'TopicArn' in data and 'StatementId' in data, f'pushSource entries require TopicArn and StatementId: {data}'
        assert data['TopicArn'].startswith('arn:'), f'TopicArn should be a full arn: {data["TopicArn"]}'
        return cls(data['TopicArn'], data['StatementId'])

    @property
    def topic_name(self):
        return self.topic_arn.split(':')[-1]

@dataclasses.dataclass
class LoggingSpec:
    function_name: str
    principal: str
    destination_arn: str

    @classmethod
    def from_dict(cls, data):
        for k in ['LambdaFunctionName', 'Principal', 'Arn']:
            assert k in data, f'logging requires {k}: {data}'
        return cls(data['LambdaFunctionName'], data['Principal'], data['Arn'])

    @property
    def statement_id(self):
        return f'{self.function_name}LoggingId'

@dataclasses.dataclass
class ScheduleRule:
    name: str
    schedule_expression: str
    enabled: bool
    role: str
    target_input: Any = None

    @classmethod
    def from_dict(cls, data):
        for k in ['name', 'scheduleExpression', 'isEnabled', 'role']:
            assert k in data, f'rule is required to have: name, scheduleExpression, isEnabled, role. missing: {k}'
        assert isinstance(data['isEnabled'], bool), f'rule isEnabled should be true or false: {data["isEnabled"]!r}'
        expression = data['scheduleExpression']
        assert expression.startswith(('cron(', 'rate(')) and expression.endswith(')'), f'scheduleExpression should be cron(...) or rate(...): {expression}'
        return cls(data['name'], expression, data['isEnabled'], data['role'], data.get('targetInput'))

    @property
    def state(self):
        return 'ENABLED' if self.enabled else 'DISABLED'

@dataclasses.dataclass
class DeploymentConfig:
    function_name: str
    handler: str
    description: str = ''
    role: Optional[str] = None
    timeout: int = default_timeout
    memory_size: int = default_memory
    runtime: str = default_runtime
    region: Optional[str] = None
    profile: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    reserved_concurrency: Optional[int] = None
    event_source: Optional[EventSourceSpec] = None
    push_source: List[PushSubscription] = dataclasses.field(default_factory=list)
    logging: Optional[LoggingSpec] = None
    rule: Optional[ScheduleRule] = None

    @classmethod
    def from_dict(cls, data):
        for k in data:
            assert k in keys, f'unknown config key: "{k}"'
        assert data.get('functionName'), 'functionName is required'
        assert data.get('handler'), 'handler is required'
        return cls(function_name=data['functionName'],
                   handler=data['handler'],
                   description=data.get('description') or '',
                   role=data.get('role'),
                   timeout=int(data.get('timeout') or default_timeout),
                   memory_size=int(data.get('memorySize') or default_memory),
                   runtime=data.get('runtime') or default_runtime,
                   region=data.get('region'),
                   profile=data.get('profile'),
                   access_key_id=data.get('accessKeyId'),
                   secret_access_key=data.get('secretAccessKey'),
                   reserved_concurrency=data.get('reservedConcurrency'),
                   event_source=EventSourceSpec.from_dict(data['eventSource']) if data.get('eventSource') else None,
                   push_source=[PushSubscription.from_dict(x) for x in data.get('pushSource') or []],
                   logging=LoggingSpec.from_dict(data['logging']) if data.get('logging') else None,
                   rule=ScheduleRule.from_dict(data['rule']) if data.get('rule') else None)

    def function_params(self):
        return {
            'FunctionName': self.function_name,
            'Description': self.description,
            'Handler': self.handler,
            'Role': self.role,
            'Timeout': self.timeout,
            'MemorySize': self.memory_size,
            'Runtime': self.runtime,
        }

keys = {
    'functionName',
    'description',
    'handler',
    'role',
    'timeout',
    'memorySize',
    'runtime',
    'region',
    'profile',
    'accessKeyId',
    'secretAccessKey',
    'reservedConcurrency',
    'eventSource',
    'pushSource',
    'logging',
    'rule',
}

def load(path):
    with open(path) as f:
        data = json.load(f)
    assert isinstance(data, dict), f'config should be a json object: {path}'
    return DeploymentConfig.from_dict(data)
