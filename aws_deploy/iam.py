import json
from aws_deploy import stderr

basic_execution_policy = 'AWSLambdaBasicExecutionRole'

def role_path(name, principal):
    return f'/{principal}/{name}-path/'

def trust_policy(principal):
    return json.dumps({"Version": "2012-10-17",
                       "Statement": [{"Effect": "Allow",
                                      "Principal": {"Service": f"{principal}.amazonaws.com"},
                                      "Action": "sts:AssumeRole"}]})

def ensure_role(clients, name, principal='lambda', preview=False):
    stderr('\nensure role:')
    iam = clients.client('iam')
    path = role_path(name, principal)
    roles = [role for page in iam.get_paginator('list_roles').paginate(PathPrefix=path) for role in page['Roles']]
    if 0 == len(roles):
        if preview:
            stderr(' preview: create:', name)
            return None
        stderr(' create:', name)
        return clients.retry(iam.create_role)(Path=path, RoleName=name, AssumeRolePolicyDocument=trust_policy(principal))['Role']['Arn']
    elif 1 == len(roles):
        stderr('', name)
        return roles[0]['Arn']
    else:
        assert False, f'there is more than 1 role under path: {path} {[role["Arn"] for role in roles]}'

def ensure_policies(clients, name, policies, preview=False):
    stderr('\nensure policies:')
    if preview:
        for policy in policies:
            stderr(' preview:', policy)
        return
    iam = clients.client('iam')
    all_policies = [policy for page in iam.get_paginator('list_policies').paginate() for policy in page['Policies']]
    for policy in policies:
        matched_policies = [x for x in all_policies if x['Arn'].split('/')[-1] == policy]
        assert matched_policies, f'didnt find any policy: {policy}'
        assert len(matched_policies) == 1, f'found more than 1 policy: {policy} {[x["Arn"] for x in matched_policies]}'
        clients.retry(iam.attach_role_policy)(RoleName=name, PolicyArn=matched_policies[0]['Arn'])
        stderr('', policy)

def ensure_execution_role(clients, name, preview=False):
    arn = ensure_role(clients, name, 'lambda', preview)
    ensure_policies(clients, name, [basic_execution_policy], preview)
    return arn
