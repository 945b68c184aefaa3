# All relay routes are in this one file
import time

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import HTTPException

from . import jwt
from .errors import (
    AuthenticationError,
    GalleryAdminError,
    RateLimitedError,
    UpstreamError,
    ValidationError,
)
from .gallery import decode, encode, validate_entries
from .images import allowed_file, decode_image, sanitize_filename
from .security import verify_password
from .tokens import bearer_token, issue_token, verify_token

ADMIN_SUBJECT = 'admin'

api = Blueprint('api', __name__)


def _now() -> int:
    return int(time.time())


def _store():
    return current_app.extensions['content_store']


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('JSON object body required')
    return data


def _has_valid_token() -> bool:
    secret = current_app.config['JWT_SECRET']
    if not secret:
        return False
    token = bearer_token(request.headers.get('Authorization'))
    return verify_token(token, secret, _now()) is not None


# --- Token failures: missing, malformed, badly signed and expired all look the same ---

def _unauthorized(reason: str):
    current_app.logger.info(f'{request.method} {request.path} -> 401: {reason}')
    return jsonify({'error': AuthenticationError.message}), 401


@jwt.unauthorized_loader
def missing_token(reason):
    return _unauthorized(reason)


@jwt.invalid_token_loader
def invalid_token(reason):
    return _unauthorized(reason)


@jwt.expired_token_loader
def expired_token(jwt_header, jwt_payload):
    return _unauthorized('token expired')


# --- Origin check and CORS pre-flight ---

@api.before_app_request
def check_origin():
    # Pre-flight gets the CORS headers (added by flask-cors) and no body
    if request.method == 'OPTIONS':
        return '', 204

    allowed = current_app.config['ALLOWED_ORIGIN']
    origin = request.headers.get('Origin')
    if not allowed or origin != allowed:
        current_app.logger.warning(f'Rejected origin {origin!r} for {request.method} {request.path}')
        return jsonify({'error': 'Forbidden'}), 403
    return None


# --- Error envelopes ---

@api.app_errorhandler(GalleryAdminError)
def handle_gallery_admin_error(e):
    if isinstance(e, UpstreamError):
        # upstream detail goes to the log only
        current_app.logger.error(f'{request.method} {request.path} failed: {e}')
    elif e.status_code >= 500:
        current_app.logger.error(f'{request.method} {request.path} failed: {e.message}')
    else:
        current_app.logger.info(f'{request.method} {request.path} -> {e.status_code}: {e.message}')
    return jsonify({'error': e.message}), e.status_code


@api.app_errorhandler(HTTPException)
def handle_http_exception(e):
    # An unknown path and a known path with the wrong method look the same,
    # and callers without a token cannot tell either from a protected route
    if e.code in (404, 405):
        if not _has_valid_token():
            return _unauthorized('no valid token for unmatched route')
        return jsonify({'error': 'Not found'}), 404
    return jsonify({'error': e.name}), e.code


@api.app_errorhandler(Exception)
def handle_unexpected_error(e):
    current_app.logger.exception(f'Unhandled error in {request.method} {request.path}')
    return jsonify({'error': 'Internal server error'}), 500


# --- Authentication ---

@api.route('/auth', methods=['POST'])
def authenticate():
    current_app.logger.debug('POST /auth invoked')
    limiter = current_app.extensions.get('rate_limiter')
    if limiter is not None:
        key = f'auth-rate:{request.remote_addr or "unknown"}'
        if not limiter.check_and_increment(key, _now()):
            raise RateLimitedError()

    password = _json_body().get('password')
    if not password or not isinstance(password, str):
        raise ValidationError('Password required')

    if not verify_password(password,
                           current_app.config['ADMIN_PASSWORD_HASH'],
                           current_app.config['ADMIN_PASSWORD_SALT']):
        raise AuthenticationError('Invalid password')

    token = issue_token(ADMIN_SUBJECT, current_app.config['JWT_SECRET'], _now())
    current_app.logger.info('Admin login succeeded')
    return jsonify({'token': token}), 200


# --- Images ---

def _image_path(filename: str) -> str:
    return f"{current_app.config['GALLERY_IMAGE_DIR'].strip('/')}/{filename}"


@api.route('/images', methods=['GET'])
@jwt_required()
def list_images():
    current_app.logger.debug('GET /images invoked')
    files = _store().list_dir(current_app.config['GALLERY_IMAGE_DIR'])
    images = [
        {'name': f.name, 'sha': f.sha, 'size': f.size, 'download_url': f.download_url}
        for f in files
        if f.type == 'file' and f.name != '.gitkeep'
    ]
    return jsonify(images), 200


@api.route('/upload', methods=['POST'])
@jwt_required()
def upload_image():
    current_app.logger.debug('POST /upload invoked')
    data = _json_body()
    filename = data.get('filename')
    content = data.get('content')
    if not filename or not content or not isinstance(filename, str) or not isinstance(content, str):
        raise ValidationError('filename and content (base64) required')

    name = sanitize_filename(filename)
    if not allowed_file(name, current_app.config['ALLOWED_EXTENSIONS']):
        raise ValidationError('File type not allowed')
    raw = decode_image(content, current_app.config['MAX_UPLOAD_BYTES'])

    sha = _store().write_file(_image_path(name), raw, f'Add gallery image: {name}')
    return jsonify({'sha': sha, 'name': name}), 201


@api.route('/delete-image', methods=['POST'])
@jwt_required()
def delete_image():
    current_app.logger.debug('POST /delete-image invoked')
    data = _json_body()
    filename = data.get('filename')
    sha = data.get('sha')
    if not filename or not sha or not isinstance(filename, str) or not isinstance(sha, str):
        raise ValidationError('filename and sha required')
    # any listed name is deletable; only names that leave the image directory are refused
    if '/' in filename or '\\' in filename or filename in ('.', '..'):
        raise ValidationError('Invalid filename')

    _store().delete_file(_image_path(filename), sha, f'Remove gallery image: {filename}')
    return jsonify({'success': True}), 200


# --- Gallery listing ---

@api.route('/gallery', methods=['GET'])
@jwt_required()
def get_gallery():
    current_app.logger.debug('GET /gallery invoked')
    remote = _store().read_file(current_app.config['GALLERY_DATA_PATH'])
    if remote is None:
        return jsonify({'entries': [], 'sha': None}), 200
    entries = decode(remote.content.decode('utf-8'))
    return jsonify({'entries': entries, 'sha': remote.sha}), 200


@api.route('/gallery', methods=['PUT'])
@jwt_required()
def update_gallery():
    current_app.logger.debug('PUT /gallery invoked')
    data = _json_body()
    if 'entries' in data:
        text = encode(validate_entries(data['entries']))
    elif isinstance(data.get('content'), str):
        text = data['content']
    else:
        raise ValidationError('content (listing text) required')

    sha = data.get('sha') or None
    if sha is not None and not isinstance(sha, str):
        raise ValidationError('sha must be a string')

    new_sha = _store().write_file(current_app.config['GALLERY_DATA_PATH'],
                                  text.encode('utf-8'), 'Update gallery data', sha=sha)
    return jsonify({'sha': new_sha}), 200
