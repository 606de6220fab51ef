import json
import pytest
import aws_deploy.config
import aws_deploy.events
from conftest import function_name, function_arn

rule_arn = 'arn:aws:events:us-east-1:123456789012:rule/nightly'
rule_role = 'arn:aws:iam::123456789012:role/events'

@pytest.fixture
def conf(conf_dict):
    conf_dict['rule'] = {'name': 'nightly', 'scheduleExpression': 'cron(0 20 * * ? *)', 'isEnabled': True, 'role': rule_role, 'targetInput': {'kind': 'nightly'}}
    return aws_deploy.config.DeploymentConfig.from_dict(conf_dict)

def expect_rule(events, state='ENABLED'):
    events.add_response('put_rule', {'RuleArn': rule_arn}, {'Name': 'nightly', 'ScheduleExpression': 'cron(0 20 * * ? *)', 'RoleArn': rule_role, 'State': state})

def test_no_rule_is_noop(clients, stub, conf_dict):
    stub('events')
    assert aws_deploy.events.ensure_schedule(clients, aws_deploy.config.DeploymentConfig.from_dict(conf_dict), function_arn) is None

def test_schedule(clients, stub, conf):
    events, lamda = stub('events'), stub('lambda')
    expect_rule(events)
    lamda.add_client_error('get_policy', 'ResourceNotFoundException', 'no policy', 404)
    lamda.add_response('add_permission', {'Statement': '{}'}, {'FunctionName': function_name,
                                                                'StatementId': 'events-amazonaws-com__rule__nightly',
                                                                'Action': 'lambda:InvokeFunction',
                                                                'Principal': 'events.amazonaws.com',
                                                                'SourceArn': rule_arn})
    events.add_response('put_targets', {'FailedEntryCount': 0, 'FailedEntries': []},
                        {'Rule': 'nightly', 'Targets': [{'Id': f'{function_name}-nightly', 'Arn': function_arn, 'Input': json.dumps({'kind': 'nightly'})}]})
    assert aws_deploy.events.ensure_schedule(clients, conf, function_arn) == rule_arn

def test_rerun_keeps_existing_permission(clients, stub, conf):
    events, lamda = stub('events'), stub('lambda')
    conf.rule.enabled = False
    conf.rule.target_input = None
    expect_rule(events, 'DISABLED')
    lamda.add_response('get_policy', {'Policy': json.dumps({'Statement': [{'Sid': 'events-amazonaws-com__rule__nightly'}]})})
    events.add_response('put_targets', {'FailedEntryCount': 0, 'FailedEntries': []},
                        {'Rule': 'nightly', 'Targets': [{'Id': f'{function_name}-nightly', 'Arn': function_arn}]})
    aws_deploy.events.ensure_schedule(clients, conf, function_arn)

def test_failed_target_entries_raise(clients, stub, conf):
    events, lamda = stub('events'), stub('lambda')
    expect_rule(events)
    lamda.add_response('get_policy', {'Policy': json.dumps({'Statement': [{'Sid': 'events-amazonaws-com__rule__nightly'}]})})
    events.add_response('put_targets', {'FailedEntryCount': 1, 'FailedEntries': [{'TargetId': f'{function_name}-nightly', 'ErrorCode': 'ConcurrentModificationException'}]})
    with pytest.raises(AssertionError, match='failed to put target'):
        aws_deploy.events.ensure_schedule(clients, conf, function_arn)
