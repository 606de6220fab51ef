import argh
import logging
import aws_deploy
import aws_deploy.config
import aws_deploy.deploy

def deploy(config_path, zip_path, *, preview=False, verbose=False):
    """
    create or update a lambda from a zip, then ensure its event source, sns
    subscriptions, log subscription and schedule rule from the json config
    """
    if verbose:
        logging.getLogger('aws_deploy').setLevel('DEBUG')
    conf = aws_deploy.config.load(config_path)
    arn = aws_deploy.deploy.deploy(zip_path, conf, preview=preview)
    if arn:
        print(arn)

def schedule(config_path, *, preview=False, verbose=False):
    """
    ensure the schedule rule from the json config for an already deployed lambda
    """
    if verbose:
        logging.getLogger('aws_deploy').setLevel('DEBUG')
    conf = aws_deploy.config.load(config_path)
    rule_arn = aws_deploy.deploy.deploy_schedule(conf, preview=preview)
    if rule_arn:
        print(rule_arn)

def main():
    with aws_deploy.setup():
        argh.dispatch_commands([deploy, schedule])

if __name__ == '__main__':
    main()
