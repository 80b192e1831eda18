import os

import boto3
import pytest
from chalice.test import Client
from moto import mock_aws

from app import app
from chalicelib.utils import auth as utils_auth, boto_clients, db as utils_db, s3 as utils_s3

PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TABLE_NAME = 'food-ordering-test'
BUCKET_NAME = 'food-ordering-images-test'


@pytest.fixture(autouse=True)
def aws_environ(monkeypatch):
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', boto_clients.main_boto_region)
    monkeypatch.setenv('GEN_TABLE_NAME', TABLE_NAME)
    monkeypatch.setenv('IMAGES_BUCKET_NAME', BUCKET_NAME)
    monkeypatch.setenv('AUTH0_DOMAIN', 'food-ordering-test.eu.auth0.com')
    monkeypatch.setenv('AUTH0_AUDIENCE', 'food-ordering-api')
    monkeypatch.delenv('ENDPOINT_URL', raising=False)
    monkeypatch.delenv('S3_ENDPOINT_URL', raising=False)
    monkeypatch.delenv('MAX_IMG_WIDTH', raising=False)


@pytest.fixture
def aws(monkeypatch):
    with mock_aws():
        monkeypatch.setattr(utils_db, '_DB', None)
        monkeypatch.setattr(boto_clients, '_S3_CLIENT', None)

        boto3.resource('dynamodb', region_name=boto_clients.aws_config_ddb.region_name).create_table(
            TableName=TABLE_NAME,
            KeySchema=[
                {'AttributeName': 'partkey', 'KeyType': 'HASH'},
                {'AttributeName': 'sortkey', 'KeyType': 'RANGE'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'partkey', 'AttributeType': 'S'},
                {'AttributeName': 'sortkey', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )
        bucket_kwargs = {'Bucket': BUCKET_NAME}
        if boto_clients.main_boto_region != 'us-east-1':
            bucket_kwargs['CreateBucketConfiguration'] = {'LocationConstraint': boto_clients.main_boto_region}
        boto3.client('s3', region_name=boto_clients.main_boto_region).create_bucket(**bucket_kwargs)
        yield


@pytest.fixture
def table(aws):
    return utils_db.get_gen_table()


@pytest.fixture
def uploaded_images(monkeypatch):
    """
    Replaces the S3 upload, every call is recorded as (file_path, content_type, body)
    """
    uploads = []

    def fake_upload_file_to_s3(body, file_path, content_type):
        uploads.append((file_path, content_type, body))
        return f'https://images.test/{file_path}'

    monkeypatch.setattr(utils_s3, 'upload_file_to_s3', fake_upload_file_to_s3)
    return uploads


@pytest.fixture
def client(aws, uploaded_images, monkeypatch):
    # bearer token is the auth0 id itself
    monkeypatch.setattr(utils_auth, 'decode_access_token', lambda token: {'sub': token})
    with Client(app, stage_name='test', project_dir=PROJECT_DIR) as chalice_client:
        yield chalice_client
