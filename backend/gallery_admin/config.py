# Configuration settings
import os
from dotenv import load_dotenv

# This line loads the variables from your .env file
load_dotenv()


def _csv_set(value: str) -> set:
    return {item.strip().lower() for item in value.split(',') if item.strip()}


# This class holds all the configuration variables for the relay
class Config:
    # The single origin allowed to call the relay. Empty means every request is rejected.
    ALLOWED_ORIGIN = os.environ.get('ALLOWED_ORIGIN', '')

    # Credential record and token signing key (all hex, see backend/manage.py)
    ADMIN_PASSWORD_HASH = os.environ.get('ADMIN_PASSWORD_HASH', '')
    ADMIN_PASSWORD_SALT = os.environ.get('ADMIN_PASSWORD_SALT', '')
    JWT_SECRET = os.environ.get('JWT_SECRET', '')

    # Upstream repository coordinates
    GITHUB_TOKEN = os.environ.get('GITHUB_TOKEN', '')
    GITHUB_REPO = os.environ.get('GITHUB_REPO', '')
    GITHUB_BRANCH = os.environ.get('GITHUB_BRANCH', 'main')
    GITHUB_API_URL = os.environ.get('GITHUB_API_URL', 'https://api.github.com')
    GITHUB_TIMEOUT = float(os.environ.get('GITHUB_TIMEOUT', 30))

    GALLERY_IMAGE_DIR = os.environ.get('GALLERY_IMAGE_DIR', 'assets/images/gallery')
    GALLERY_DATA_PATH = os.environ.get('GALLERY_DATA_PATH', '_data/gallery.yml')

    # 'memory' keeps counters in-process, 'none' disables auth rate limiting
    RATE_LIMIT_STORE = os.environ.get('RATE_LIMIT_STORE', 'memory').strip().lower()

    # Proxy hops whose X-Forwarded-For is trusted for the client address
    TRUSTED_PROXY_COUNT = int(os.environ.get('TRUSTED_PROXY_COUNT', 1))

    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 16 * 1024 * 1024))
    MAX_UPLOAD_BYTES = int(os.environ.get('MAX_UPLOAD_BYTES', 10 * 1024 * 1024))
    ALLOWED_EXTENSIONS = _csv_set(os.environ.get('ALLOWED_EXTENSIONS', 'jpg,jpeg,png,webp'))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
