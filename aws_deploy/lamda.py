import concurrent.futures
import json
import logging
from typing import NamedTuple, Optional
from botocore.exceptions import ClientError
from aws_deploy import stderr, errors

logger = logging.getLogger(__name__)

latest = '$LATEST'

max_delete_workers = 10

class Existence(NamedTuple):
    exists: bool
    arn: Optional[str] = None

def dump(resp):
    return json.dumps({k: v for k, v in resp.items() if k != 'ResponseMetadata'}, default=str)

def read_zip(path):
    with open(path, 'rb') as f:
        return f.read()

def exists(clients, name):
    lamda = clients.client('lambda')
    try:
        resp = clients.retry(lamda.get_function)(FunctionName=name)
    except lamda.exceptions.ResourceNotFoundException:
        logger.debug(f'function not found: {name}')
        return Existence(False)
    else:
        logger.debug(f'function found: {name}')
        return Existence(True, resp['Configuration']['FunctionArn'])

def arn(clients, name):
    found = exists(clients, name)
    assert found.exists, f'no such function: {name}'
    return found.arn

def create(clients, conf, zip_bytes, preview=False):
    stderr('\ncreate function:')
    if preview:
        stderr(' preview:', conf.function_name)
        return None
    lamda = clients.client('lambda')
    create_function = clients.role_retry.including(clients.retry.retryable)(lamda.create_function)
    resp = create_function(Code={'ZipFile': zip_bytes}, **conf.function_params())
    logger.debug(f'create_function: {dump(resp)}')
    lamda.get_waiter('function_active_v2').wait(FunctionName=conf.function_name)
    stderr('', resp['FunctionArn'])
    return resp['FunctionArn']

def update(clients, conf, zip_bytes, preview=False):
    """
    code and configuration are two separate calls. if the second fails the
    function runs the new code with the old configuration until the next
    deploy.
    """
    stderr('\nupdate function:')
    if preview:
        stderr(' preview: code:', conf.function_name)
        stderr(' preview: config:', conf.function_name)
        return
    lamda = clients.client('lambda')
    resp = clients.retry(lamda.update_function_code)(FunctionName=conf.function_name, ZipFile=zip_bytes, Publish=False)
    logger.debug(f'update_function_code: {dump(resp)}')
    lamda.get_waiter('function_updated_v2').wait(FunctionName=conf.function_name)
    stderr(' code:', conf.function_name)
    resp = clients.retry(lamda.update_function_configuration)(**conf.function_params())
    logger.debug(f'update_function_configuration: {dump(resp)}')
    lamda.get_waiter('function_updated_v2').wait(FunctionName=conf.function_name)
    stderr(' config:', conf.function_name)

def set_concurrency(clients, conf, preview=False):
    concurrency = conf.reserved_concurrency
    if concurrency is not None:
        if preview:
            stderr('\npreview: concurrency:', concurrency)
        else:
            clients.retry(clients.client('lambda').put_function_concurrency)(FunctionName=conf.function_name, ReservedConcurrentExecutions=concurrency)
            stderr('\nconcurrency:', concurrency)

def ensure_event_source(clients, conf, preview=False):
    source = conf.event_source
    if not source:
        return
    stderr('\nensure event source:')
    if preview:
        stderr(' preview:', source.arn, f'batch={source.batch_size}')
        return
    lamda = clients.client('lambda')
    mappings = clients.retry(lamda.list_event_source_mappings)(FunctionName=conf.function_name, EventSourceArn=source.arn)['EventSourceMappings']
    if not mappings:
        kw = {}
        if source.starting_position:
            kw['StartingPosition'] = source.starting_position
        resp = clients.retry(lamda.create_event_source_mapping)(FunctionName=conf.function_name, EventSourceArn=source.arn, BatchSize=source.batch_size, **kw)
        logger.debug(f'create_event_source_mapping: {dump(resp)}')
        stderr(' created:', source.arn, resp['UUID'])
    else:
        for mapping in mappings:
            resp = clients.retry(lamda.update_event_source_mapping)(UUID=mapping['UUID'], BatchSize=source.batch_size)
            logger.debug(f'update_event_source_mapping: {dump(resp)}')
            stderr(' updated:', source.arn, mapping['UUID'])

def add_permission(clients, name, statement_id, principal, source_arn=None):
    kw = {}
    if source_arn:
        kw['SourceArn'] = source_arn
    lamda = clients.client('lambda')
    resp = clients.retry(lamda.add_permission)(FunctionName=name, StatementId=statement_id, Action='lambda:InvokeFunction', Principal=principal, **kw)
    logger.debug(f'add_permission: {dump(resp)}')

def remove_permission(clients, name, statement_id):
    lamda = clients.client('lambda')
    try:
        clients.retry(lamda.remove_permission)(FunctionName=name, StatementId=statement_id)
    except ClientError as e:
        if not errors.is_not_found(e):
            raise
        logger.debug(f'permission does not exist: {statement_id}')
        return False
    else:
        return True

def statement_ids(clients, name):
    lamda = clients.client('lambda')
    try:
        policy = json.loads(clients.retry(lamda.get_policy)(FunctionName=name)['Policy'])
    except lamda.exceptions.ResourceNotFoundException:
        return []
    else:
        return [x['Sid'] for x in policy['Statement']]

def permission_id(principal, arn):
    return principal.replace('.', '-') + '__' + arn.split(':')[-1].replace('-', '_').replace('/', '__').replace('*', 'ALL')

def ensure_permission(clients, name, principal, arn):
    id = permission_id(principal, arn)
    if id not in statement_ids(clients, name):
        add_permission(clients, name, id, principal, arn)
    return id

def list_versions(clients, name):
    lamda = clients.client('lambda')
    versions = []
    kw = {'FunctionName': name}
    while True:
        resp = clients.retry(lamda.list_versions_by_function)(**kw)
        versions += [x['Version'] for x in resp['Versions']]
        if not resp.get('NextMarker'):
            return versions
        kw['Marker'] = resp['NextMarker']

def stale_versions(versions):
    numbered = [v for v in versions if v != latest]
    if not numbered:
        return []
    newest = max(numbered, key=int)
    return [v for v in numbered if v != newest]

def delete_version(clients, name, version):
    lamda = clients.client('lambda')
    try:
        clients.retry(lamda.delete_function)(FunctionName=name, Qualifier=version)
    except ClientError as e:
        if not errors.is_not_found(e):
            raise
        logger.debug(f'version already deleted: {name}:{version}')
    stderr('', version)

def publish_and_prune(clients, name, preview=False):
    stderr('\npublish version:')
    if preview:
        stderr(' preview:', name)
        return None
    lamda = clients.client('lambda')
    resp = clients.retry(lamda.publish_version)(FunctionName=name)
    logger.debug(f'publish_version: {dump(resp)}')
    stderr('', resp['Version'])
    stale = stale_versions(list_versions(clients, name))
    if stale:
        stderr('\nprune versions:')
        with concurrent.futures.ThreadPoolExecutor(max_workers=min(len(stale), max_delete_workers)) as pool:
            futures = [pool.submit(delete_version, clients, name, version) for version in stale]
        for future in futures:
            future.result()
    return resp['Version']
