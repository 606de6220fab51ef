"""
the deploy workflow. steps run in a fixed order and the first error stops
the deploy. nothing is rolled back, deploying again converges.

    existence check
    create or update
    concurrency
    event source
    push subscriptions
    publish and prune versions, update only
    logging
    schedule
"""
import dataclasses
import aws_deploy
import aws_deploy.events
import aws_deploy.iam
import aws_deploy.lamda
import aws_deploy.logs
import aws_deploy.sns
from aws_deploy import stderr

def deploy(zip_path, conf, clients=None, preview=False):
    """create or update the function in conf from the zip at zip_path, returns its arn"""
    clients = clients or aws_deploy.Clients.from_config(conf)
    name = conf.function_name
    if not conf.role:
        conf = dataclasses.replace(conf, role=aws_deploy.iam.ensure_execution_role(clients, name, preview))
    zip_bytes = aws_deploy.lamda.read_zip(zip_path)
    found = aws_deploy.lamda.exists(clients, name)
    if found.exists:
        arn = found.arn
        aws_deploy.lamda.update(clients, conf, zip_bytes, preview)
    else:
        arn = aws_deploy.lamda.create(clients, conf, zip_bytes, preview)
    aws_deploy.lamda.set_concurrency(clients, conf, preview)
    aws_deploy.lamda.ensure_event_source(clients, conf, preview)
    aws_deploy.sns.ensure_push_subscriptions(clients, conf, arn, preview)
    if found.exists:
        aws_deploy.lamda.publish_and_prune(clients, name, preview)
    aws_deploy.logs.attach_logging(clients, conf, preview)
    aws_deploy.events.ensure_schedule(clients, conf, arn, preview)
    if preview:
        stderr('\npreview: done:', name)
    else:
        stderr('\ndone:', arn)
    return arn

def deploy_schedule(conf, clients=None, preview=False):
    """bind the rule in conf to an already deployed function, returns the rule arn"""
    assert conf.rule, 'rule is required. include a "rule" object with: name, scheduleExpression, isEnabled, role'
    clients = clients or aws_deploy.Clients.from_config(conf)
    arn = aws_deploy.lamda.arn(clients, conf.function_name)
    return aws_deploy.events.ensure_schedule(clients, conf, arn, preview)
