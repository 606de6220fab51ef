import setuptools

setuptools.setup(
    version="0.0.1",
    license='mit',
    name='aws-lambda-deploy',
    packages=['aws_deploy'],
    python_requires='>=3.8',
    install_requires=['boto3 >1, <2',
                      'argh >=0.26',
                      'tenacity >=8'],
    extras_require={'test': ['pytest']},
    entry_points={'console_scripts': ['aws-lambda-deploy = aws_deploy.cli:main']},
    description='idempotent aws lambda deploys with triggers, sns subscriptions, log subscriptions and schedules',
)
