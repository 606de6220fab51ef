import boto3
import pytest
from botocore.stub import Stubber
import aws_deploy
import aws_deploy.config
from aws_deploy import errors
from aws_deploy.retry import RetryPolicy

region = 'us-east-1'
account = '123456789012'
function_name = 'test-fn'
function_arn = f'arn:aws:lambda:{region}:{account}:function:{function_name}'
role_arn = f'arn:aws:iam::{account}:role/test-fn'
zip_bytes = b'PK\x05\x06' + b'\x00' * 18

@pytest.fixture
def clients():
    session = boto3.Session(aws_access_key_id='testing', aws_secret_access_key='testing', region_name=region)
    return aws_deploy.Clients(session=session,
                              retry=RetryPolicy(attempts=3, delay=0, backoff=0),
                              role_retry=RetryPolicy(attempts=8, delay=0, exponential=True, retryable=errors.is_role_not_ready))

@pytest.fixture
def stub(clients):
    stubbers = {}
    def stub(name):
        if name not in stubbers:
            stubbers[name] = Stubber(clients.client(name))
            stubbers[name].activate()
        return stubbers[name]
    yield stub
    for stubber in stubbers.values():
        stubber.assert_no_pending_responses()
        stubber.deactivate()

@pytest.fixture
def conf_dict():
    return {
        'functionName': function_name,
        'handler': 'handler.main',
        'role': role_arn,
    }

@pytest.fixture
def conf(conf_dict):
    return aws_deploy.config.DeploymentConfig.from_dict(conf_dict)

@pytest.fixture
def zip_path(tmp_path):
    path = tmp_path / 'lambda.zip'
    path.write_bytes(zip_bytes)
    return str(path)
