"""
Pytest fixtures for the relay tests.

The GitHub client is replaced by FakeContentStore, an in-memory store that
enforces the same sha rules as the Contents API.
"""

import base64
import hashlib
import io

import pytest
from PIL import Image

from gallery_admin import create_app
from gallery_admin.errors import ConflictError, UpstreamError
from gallery_admin.github_store import FileMeta, RemoteFile
from gallery_admin.security import hash_password

ORIGIN = "https://admin.example.org"
PASSWORD = "correct horse battery staple"
JWT_SECRET = "ab" * 32


# =============================================================================
# Fake content store
# =============================================================================

class FakeContentStore:
    """Dict-backed stand-in for GitHubContentStore."""

    def __init__(self):
        self.files = {}
        self.commits = []

    @staticmethod
    def _sha(path, content):
        return hashlib.sha1(path.encode() + b"\0" + content).hexdigest()

    def list_dir(self, path):
        prefix = path.strip("/") + "/"
        return [
            FileMeta(
                name=p[len(prefix):],
                path=p,
                sha=sha,
                size=len(content),
                download_url=f"https://raw.example.org/{p}",
            )
            for p, (sha, content) in sorted(self.files.items())
            if p.startswith(prefix) and "/" not in p[len(prefix):]
        ]

    def read_file(self, path):
        if path not in self.files:
            return None
        sha, content = self.files[path]
        return RemoteFile(path=path, sha=sha, content=content)

    def write_file(self, path, content, message, sha=None):
        current = self.files.get(path)
        if sha is None and current is not None:
            sha = current[0]
        if current is not None and sha != current[0]:
            raise ConflictError(f"{path} does not match {sha}", status=409)
        new_sha = self._sha(path, content)
        self.files[path] = (new_sha, content)
        self.commits.append(message)
        return new_sha

    def delete_file(self, path, sha, message):
        current = self.files.get(path)
        if current is None:
            raise UpstreamError(f"{path} not found", status=404)
        if sha != current[0]:
            raise ConflictError(f"{path} does not match {sha}", status=409)
        del self.files[path]
        self.commits.append(message)
        return True


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def credentials() -> dict:
    """PBKDF2 hash/salt for PASSWORD (derived once, it is slow on purpose)."""
    password_hash, salt = hash_password(PASSWORD)
    return {"ADMIN_PASSWORD_HASH": password_hash, "ADMIN_PASSWORD_SALT": salt}


@pytest.fixture
def store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def app_config(credentials) -> dict:
    return {
        "TESTING": True,
        "ALLOWED_ORIGIN": ORIGIN,
        "JWT_SECRET": JWT_SECRET,
        "GALLERY_IMAGE_DIR": "assets/images/gallery",
        "GALLERY_DATA_PATH": "_data/gallery.yml",
        "RATE_LIMIT_STORE": "memory",
        **credentials,
    }


@pytest.fixture
def app(app_config, store):
    return create_app(config=app_config, store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def origin_headers() -> dict:
    return {"Origin": ORIGIN}


@pytest.fixture
def auth_headers(client, origin_headers) -> dict:
    """Headers carrying a token obtained through POST /auth."""
    res = client.post("/auth", json={"password": PASSWORD}, headers=origin_headers)
    assert res.status_code == 200
    return {**origin_headers, "Authorization": f"Bearer {res.get_json()['token']}"}


# =============================================================================
# Image Fixtures
# =============================================================================

def make_image_bytes(fmt: str = "PNG", size=(4, 3)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 40, 40)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def image_bytes():
    """Factory: image_bytes("JPEG") -> encoded image."""
    return make_image_bytes


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def png_base64(png_bytes) -> str:
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def admin_password() -> str:
    return PASSWORD
