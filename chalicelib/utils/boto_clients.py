import os
import boto3

from botocore.config import Config

main_boto_region = os.environ.get('MAIN_BOTO_REGION', 'eu-central-1')
aws_config = Config(retries={'max_attempts': 30}, region_name=main_boto_region)
aws_config_ddb = Config(retries={'max_attempts': 30}, region_name=os.environ.get('AWS_REGION', main_boto_region))

# Clients are created on first use and reused by every request served by the same Lambda container.
_S3_CLIENT = None


def get_s3_client():
    """
    S3 Client.
    Clients provide a low-level interface to AWS services whose methods map close to 1:1 with service APIs.
    """
    global _S3_CLIENT
    if _S3_CLIENT is None:
        if os.environ.get('S3_ENDPOINT_URL'):
            _S3_CLIENT = boto3.client('s3', endpoint_url=os.environ.get('S3_ENDPOINT_URL'), config=aws_config)
        else:
            _S3_CLIENT = boto3.client('s3', config=aws_config)
    return _S3_CLIENT
