import boto3
import botocore.config
import botocore.exceptions
import contextlib
import traceback
import logging
import os
import sys
from aws_deploy import errors
from aws_deploy.retry import RetryPolicy, role_ready

stderr = lambda *a: print(*a, file=sys.stderr)

default_region = 'us-east-1'

class Clients:
    """
    one boto3 session and its service clients, built once per deploy and
    passed explicitly to every step. retry is the policy applied to every
    rate limit sensitive call, role_retry the policy for creating a function
    whose role may not have propagated yet. with no region in the session
    clients fall back to default_region.
    """

    def __init__(self, session=None, retry=None, role_retry=None, proxy=None, **session_kw):
        self.session = session or boto3.Session(**{k: v for k, v in session_kw.items() if v})
        self.region = self.session.region_name or default_region
        self.retry = retry or RetryPolicy()
        self.role_retry = role_retry or role_ready()
        self.config = botocore.config.Config(proxies={'https': proxy}) if proxy else None
        self._clients = {}

    @classmethod
    def from_config(cls, conf, retry=None, role_retry=None):
        kw = {'region_name': conf.region or os.environ.get('region') or os.environ.get('REGION')}
        if conf.profile:
            kw['profile_name'] = conf.profile
        else:
            kw['aws_access_key_id'] = conf.access_key_id
            kw['aws_secret_access_key'] = conf.secret_access_key
        proxy = os.environ.get('HTTPS_PROXY') or os.environ.get('https_proxy')
        return cls(retry=retry, role_retry=role_retry, proxy=proxy, **kw)

    def client(self, name):
        if name not in self._clients:
            if self.config:
                self._clients[name] = self.session.client(name, region_name=self.region, config=self.config)
            else:
                self._clients[name] = self.session.client(name, region_name=self.region)
        return self._clients[name]

@contextlib.contextmanager
def setup(level='INFO'):
    logging.basicConfig(format='%(message)s', level=level)
    logging.getLogger('botocore').setLevel('ERROR')
    try:
        yield
    except AssertionError as e:
        stderr('error: ' + (e.args[0] if e.args else traceback.format_exc().splitlines()[-2].strip()))
        sys.exit(1)
    except botocore.exceptions.ClientError as e:
        stderr(f'error: {errors.code(e)}: {errors.message(e)}')
        sys.exit(1)
