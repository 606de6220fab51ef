import json
import logging
import aws_deploy.lamda
from aws_deploy import stderr

logger = logging.getLogger(__name__)

principal = 'events.amazonaws.com'

def target_id(conf):
    return f'{conf.function_name}-{conf.rule.name}'

def put_rule(clients, rule):
    resp = clients.retry(clients.client('events').put_rule)(Name=rule.name,
                                                            ScheduleExpression=rule.schedule_expression,
                                                            RoleArn=rule.role,
                                                            State=rule.state)
    logger.debug(f'put_rule: {aws_deploy.lamda.dump(resp)}')
    return resp['RuleArn']

def put_target(clients, conf, function_arn):
    target = {'Id': target_id(conf), 'Arn': function_arn}
    if conf.rule.target_input is not None:
        target['Input'] = json.dumps(conf.rule.target_input)
    resp = clients.retry(clients.client('events').put_targets)(Rule=conf.rule.name, Targets=[target])
    logger.debug(f'put_targets: {aws_deploy.lamda.dump(resp)}')
    assert not resp.get('FailedEntryCount'), f'failed to put target for rule {conf.rule.name}: {resp.get("FailedEntries")}'

def ensure_schedule(clients, conf, function_arn, preview=False):
    rule = conf.rule
    if not rule:
        return None
    stderr('\nensure schedule:')
    if preview:
        stderr(' preview:', rule.name, rule.schedule_expression, rule.state.lower())
        return None
    rule_arn = put_rule(clients, rule)
    aws_deploy.lamda.ensure_permission(clients, conf.function_name, principal, rule_arn)
    put_target(clients, conf, function_arn)
    stderr('', rule.name, rule.schedule_expression, rule.state.lower())
    return rule_arn
