# Upload checks for gallery images
import base64
import binascii
import io
import logging
import re

from PIL import Image
from werkzeug.utils import secure_filename

from .errors import ValidationError

ALLOWED_FORMATS = {'JPEG', 'PNG', 'WEBP'}

logger = logging.getLogger(__name__)


def sanitize_filename(name: str) -> str:
    """Lowercase and reduce to ``[a-z0-9._-]``, the same rule the admin page applies."""
    cleaned = re.sub(r'[^a-z0-9._-]', '-', name.lower())
    cleaned = re.sub(r'-+', '-', cleaned)
    return secure_filename(cleaned)


def allowed_file(filename: str, allowed_extensions) -> bool:
    if '.' not in filename:
        return False
    ext = filename.rsplit('.', 1)[1].lower()
    return ext in allowed_extensions


def decode_image(content: str, max_bytes: int) -> bytes:
    """Decode a base64 upload and make sure it is a JPEG, PNG or WEBP image.

    The browser may resize and re-encode (e.g. a .png becomes JPEG data),
    so only the detected format is checked, not that it matches the name.
    """
    # accept data URLs as well as bare base64
    if content.startswith('data:') and ',' in content:
        content = content.split(',', 1)[1]
    try:
        raw = base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError('content must be base64') from e

    if not raw:
        raise ValidationError('content is empty')
    if len(raw) > max_bytes:
        raise ValidationError(f'image exceeds {max_bytes // (1024 * 1024)} MB')

    try:
        with Image.open(io.BytesIO(raw)) as img:
            fmt = img.format
            img.verify()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        logger.debug(f'Upload rejected, not an image: {e}')
        raise ValidationError('content is not a supported image') from e

    if fmt not in ALLOWED_FORMATS:
        raise ValidationError(f'unsupported image format: {fmt}')
    logger.debug(f'Upload decoded: format={fmt}, bytes={len(raw)}')
    return raw
