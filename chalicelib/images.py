import mimetypes
import os
from email.message import Message
from io import BytesIO
from typing import Dict, List, NamedTuple, Optional, Tuple
from uuid import uuid4

from chalice.app import Request
from PIL import Image
from requests_toolbelt.multipart.decoder import MultipartDecoder

from chalicelib.constants.constants import IMAGE_FILE_FIELD, IMAGES_PREFIX, MAX_IMAGE_SIZE
from chalicelib.utils import data as utils_data, s3 as utils_s3
from chalicelib.utils.exceptions import ValidationException
from chalicelib.utils.logger import logger


class ImageFile(NamedTuple):
    content: bytes
    content_type: str
    filename: Optional[str] = None


def get_resize_width_height(image: Image, max_width: int) -> Tuple[int, int]:
    width, height = image.size
    divider = max([width, height]) / max_width
    return int(width / divider), int(height / divider)


def compress_image(image_file_obj: BytesIO, max_width: int) -> bytes:
    image: Image = Image.open(image_file_obj)
    if max(image.size) > max_width:
        image = image.resize(size=get_resize_width_height(image, max_width))
    if image.mode != 'RGB':
        image = image.convert('RGB')

    buf = BytesIO()
    image.save(buf, format='JPEG', optimize=True, quality=90)
    return buf.getvalue()


def _get_disposition_params(header_value: str) -> Dict[str, str]:
    message = Message()
    message['content-disposition'] = header_value
    return {key.lower(): value for key, value in message.get_params(header='content-disposition')[1:]}


def parse_multipart_request_data(current_request: Request) -> Tuple[Dict, Optional[ImageFile]]:
    """
    Splits a multipart/form-data body into folded form fields and the uploaded image (if any)
    """
    decoder = MultipartDecoder(current_request.raw_body, current_request.headers['content-type'])
    fields: List[Tuple[str, str]] = []
    image_file = None
    for part in decoder.parts:
        params = _get_disposition_params(part.headers[b'Content-Disposition'].decode('utf-8'))
        name = params.get('name')
        if name == IMAGE_FILE_FIELD:
            if part.content:
                image_file = ImageFile(
                    content=part.content,
                    content_type=part.headers.get(b'Content-Type', b'application/octet-stream').decode('utf-8'),
                    filename=params.get('filename')
                )
        elif name:
            fields.append((name, part.text))
    return utils_data.fold_form_fields(fields), image_file


def upload_image(image_file: ImageFile, folder: str = IMAGES_PREFIX) -> str:
    """
    Stores the image on the media host and returns its public URL.
    The object keeps the declared media type, so the URL is served as an image.
    Errors are not handled here: a failed upload fails the calling create/update.
    """
    if len(image_file.content) > MAX_IMAGE_SIZE:
        raise ValidationException(f'Image is too large, max size is {MAX_IMAGE_SIZE} bytes')
    content, content_type = image_file.content, image_file.content_type
    if os.environ.get('MAX_IMG_WIDTH'):
        content, content_type = compress_image(BytesIO(content), int(os.environ['MAX_IMG_WIDTH'])), 'image/jpeg'
    extension = mimetypes.guess_extension(content_type) or ''
    file_path = f'{folder}/{uuid4()}{extension}'
    logger.info(f'upload_image ::: uploading {image_file.filename=} as {file_path=}, {content_type=}')
    return utils_s3.upload_file_to_s3(content, file_path, content_type)
