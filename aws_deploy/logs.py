import logging
from botocore.exceptions import ClientError
import aws_deploy.lamda
from aws_deploy import stderr, errors

logger = logging.getLogger(__name__)

def group_name(function_name):
    return f'/aws/lambda/{function_name}'

def filter_name(function_name):
    return f'LambdaStream_{function_name}'

def grant_permission(clients, spec):
    try:
        resp = clients.client('lambda').add_permission(FunctionName=spec.function_name,
                                                       StatementId=spec.statement_id,
                                                       Action='lambda:InvokeFunction',
                                                       Principal=spec.principal)
    except ClientError as e:
        if not errors.is_duplicate_statement(e):
            raise
        stderr(' permission exists:', spec.function_name, spec.statement_id)
        return False
    else:
        logger.debug(f'add_permission: {aws_deploy.lamda.dump(resp)}')
        stderr(' permission:', spec.function_name, spec.statement_id)
        return True

def put_subscription_filter(clients, function_name, destination_arn):
    group = group_name(function_name)
    try:
        resp = clients.client('logs').put_subscription_filter(logGroupName=group,
                                                              filterName=filter_name(function_name),
                                                              filterPattern='',
                                                              destinationArn=destination_arn)
    except ClientError as e:
        if not errors.is_missing_log_group(e):
            raise
        # created by aws on first invocation, the next deploy attaches the filter
        stderr(' log group does not exist yet:', group)
        return False
    else:
        logger.debug(f'put_subscription_filter: {aws_deploy.lamda.dump(resp)}')
        stderr(' subscription filter:', group, '=>', destination_arn)
        return True

def attach_logging(clients, conf, preview=False):
    """
    grant the log processor invoke permission and subscribe it to this
    function's log group. the pair is retried as a unit while aws rate
    limits, any other error is raised on the first attempt.
    """
    spec = conf.logging
    if not spec:
        return
    stderr('\nattach logging:')
    if preview:
        stderr(' preview:', group_name(conf.function_name), '=>', spec.destination_arn)
        return
    def attach():
        grant_permission(clients, spec)
        put_subscription_filter(clients, conf.function_name, spec.destination_arn)
    clients.retry(attach)()
