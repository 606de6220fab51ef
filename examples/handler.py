#!/usr/bin/env python3
#
# deploy with:
#
#   cd examples && zip lambda.zip handler.py
#   aws-lambda-deploy deploy config.json lambda.zip

import json

def main(event, context):
    if 'Records' in event:
        for record in event['Records']:
            if 'Sns' in record:
                print(record['Sns']['Message'])
            else:
                print(json.dumps(record))
    else:
        print(json.dumps(event))
