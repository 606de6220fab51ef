import logging
import aws_deploy.lamda
from aws_deploy import stderr

logger = logging.getLogger(__name__)

principal = 'sns.amazonaws.com'

def topic_arns(clients):
    sns = clients.client('sns')
    arns = []
    kw = {}
    while True:
        resp = clients.retry(sns.list_topics)(**kw)
        arns += [x['TopicArn'] for x in resp['Topics']]
        if not resp.get('NextToken'):
            return arns
        kw['NextToken'] = resp['NextToken']

def ensure_topic(clients, sub):
    if sub.topic_arn in topic_arns(clients):
        return False
    resp = clients.retry(clients.client('sns').create_topic)(Name=sub.topic_name)
    assert resp['TopicArn'] == sub.topic_arn, f'created topic arn does not match config, check region and account: {resp["TopicArn"]} != {sub.topic_arn}'
    return True

def subscribe(clients, sub, function_arn):
    resp = clients.retry(clients.client('sns').subscribe)(Protocol='lambda', Endpoint=function_arn, TopicArn=sub.topic_arn)
    logger.debug(f'subscribe: {sub.topic_arn} => {resp.get("SubscriptionArn")}')

def ensure_push_subscriptions(clients, conf, function_arn, preview=False):
    """
    subscribe the function to each topic one at a time. the invoke
    permission is dropped and granted again so a changed topic arn under an
    existing statement id takes effect. a failure on one topic leaves the
    topics before it bound.
    """
    if not conf.push_source:
        return
    stderr('\nensure push subscriptions:')
    for i, sub in enumerate(conf.push_source, 1):
        logger.debug(f'topic {i} of {len(conf.push_source)}: {sub.topic_arn}')
        if preview:
            stderr(' preview:', sub.topic_arn)
            continue
        if ensure_topic(clients, sub):
            stderr(' created topic:', sub.topic_arn)
        subscribe(clients, sub, function_arn)
        aws_deploy.lamda.remove_permission(clients, conf.function_name, sub.statement_id)
        aws_deploy.lamda.add_permission(clients, conf.function_name, sub.statement_id, principal, sub.topic_arn)
        stderr('', sub.topic_arn)
