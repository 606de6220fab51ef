import pytest
from botocore.exceptions import ClientError
import aws_deploy.config
import aws_deploy.logs
from conftest import function_name

shipper_arn = 'arn:aws:lambda:us-east-1:123456789012:function:log-shipper'
duplicate = 'The statement id (log-shipperLoggingId) provided already exists. Please provide a new statement id, or remove the existing statement.'

@pytest.fixture
def conf(conf_dict):
    conf_dict['logging'] = {'LambdaFunctionName': 'log-shipper', 'Principal': 'logs.us-east-1.amazonaws.com', 'Arn': shipper_arn}
    return aws_deploy.config.DeploymentConfig.from_dict(conf_dict)

permission = {'FunctionName': 'log-shipper',
              'StatementId': 'log-shipperLoggingId',
              'Action': 'lambda:InvokeFunction',
              'Principal': 'logs.us-east-1.amazonaws.com'}

subscription = {'logGroupName': f'/aws/lambda/{function_name}',
                'filterName': f'LambdaStream_{function_name}',
                'filterPattern': '',
                'destinationArn': shipper_arn}

def test_no_logging_is_noop(clients, stub, conf_dict):
    stub('lambda')
    stub('logs')
    aws_deploy.logs.attach_logging(clients, aws_deploy.config.DeploymentConfig.from_dict(conf_dict))

def test_attach(clients, stub, conf):
    stub('lambda').add_response('add_permission', {'Statement': '{}'}, permission)
    stub('logs').add_response('put_subscription_filter', {}, subscription)
    aws_deploy.logs.attach_logging(clients, conf)

def test_existing_permission_is_success(clients, stub, conf):
    stub('lambda').add_client_error('add_permission', 'ResourceConflictException', duplicate, 409, expected_params=permission)
    stub('logs').add_response('put_subscription_filter', {}, subscription)
    aws_deploy.logs.attach_logging(clients, conf)

def test_missing_log_group_resolves_without_retry(clients, stub, conf):
    stub('lambda').add_response('add_permission', {'Statement': '{}'}, permission)
    stub('logs').add_client_error('put_subscription_filter', 'ResourceNotFoundException', 'The specified log group does not exist.', 400)
    aws_deploy.logs.attach_logging(clients, conf)

def test_rate_limited_permission_retried_then_raised(clients, stub, conf):
    for _ in range(clients.retry.attempts):
        stub('lambda').add_client_error('add_permission', 'TooManyRequestsException', 'Rate exceeded', 429)
    stub('logs')
    with pytest.raises(ClientError) as e:
        aws_deploy.logs.attach_logging(clients, conf)
    assert e.value.response['Error']['Code'] == 'TooManyRequestsException'

def test_rate_limited_once_then_attached(clients, stub, conf):
    stub('lambda').add_client_error('add_permission', 'TooManyRequestsException', 'Rate exceeded', 429)
    stub('lambda').add_response('add_permission', {'Statement': '{}'}, permission)
    stub('logs').add_response('put_subscription_filter', {}, subscription)
    aws_deploy.logs.attach_logging(clients, conf)

def test_other_error_fails_on_first_attempt(clients, stub, conf):
    stub('lambda').add_client_error('add_permission', 'ServiceException', 'boom', 500)
    stub('logs')
    with pytest.raises(ClientError) as e:
        aws_deploy.logs.attach_logging(clients, conf)
    assert e.value.response['Error']['Code'] == 'ServiceException'

def test_other_subscription_errors_propagate(clients, stub, conf):
    stub('lambda').add_response('add_permission', {'Statement': '{}'}, permission)
    stub('logs').add_client_error('put_subscription_filter', 'InvalidParameterException', 'bad destination', 400)
    with pytest.raises(ClientError):
        aws_deploy.logs.attach_logging(clients, conf)

def test_preview_calls_nothing(clients, stub, conf):
    stub('lambda')
    stub('logs')
    aws_deploy.logs.attach_logging(clients, conf, preview=True)
