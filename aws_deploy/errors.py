"""
classify botocore client errors.

not found and rate limited errors drive control flow, duplicate statements
and missing log groups are expected and treated as success, anything else
is fatal.
"""
import re
from botocore.exceptions import ClientError

rate_limit_codes = {
    'TooManyRequestsException',
    'ThrottlingException',
    'Throttling',
    'RequestLimitExceeded',
}

def code(e):
    if isinstance(e, ClientError):
        return e.response.get('Error', {}).get('Code')

def message(e):
    if isinstance(e, ClientError):
        return e.response.get('Error', {}).get('Message') or ''
    return str(e)

def status(e):
    if isinstance(e, ClientError):
        return e.response.get('ResponseMetadata', {}).get('HTTPStatusCode')

def is_rate_limited(e):
    return isinstance(e, ClientError) and (status(e) == 429 or code(e) in rate_limit_codes)

def is_not_found(e):
    return isinstance(e, ClientError) and (status(e) == 404 or code(e) == 'ResourceNotFoundException')

def is_duplicate_statement(e):
    return (code(e) == 'ResourceConflictException'
            and bool(re.search(r'The statement id \(.*?\) provided already exists', message(e), re.I)))

def is_missing_log_group(e):
    return (code(e) == 'ResourceNotFoundException'
            and bool(re.search(r'The specified log group does not exist', message(e), re.I)))

def is_role_not_ready(e):
    # new iam roles take a few seconds before lambda can assume them
    return code(e) == 'InvalidParameterValueException' and 'cannot be assumed' in message(e)
