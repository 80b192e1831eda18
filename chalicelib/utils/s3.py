import os
import tempfile

from chalicelib.utils.boto_clients import get_s3_client, main_boto_region
from chalicelib.utils.logger import logger


def images_bucket():
    return os.environ["IMAGES_BUCKET_NAME"]


def get_public_url(file_path: str) -> str:
    return f'https://{images_bucket()}.s3.{main_boto_region}.amazonaws.com/{file_path}'


def upload_file_to_s3(body: bytes, file_path: str, content_type: str) -> str:
    s3_client = get_s3_client()
    with tempfile.TemporaryFile() as tf:
        tf.write(body)
        tf.seek(0)
        s3_client.upload_fileobj(tf, images_bucket(), file_path, ExtraArgs={'ContentType': content_type})
        s3_client.put_object_acl(ACL='public-read', Bucket=images_bucket(), Key=file_path)
    logger.info(f'upload_file_to_s3:: SUCCESS, {file_path=}, {content_type=}')
    return get_public_url(file_path)
