# Password hashing and verification, secret generation

import hmac
import logging

from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2
from Crypto.Random import get_random_bytes

from .errors import ConfigurationError

PBKDF2_ITERATIONS = 100_000
KEY_LENGTH = 32
SALT_LENGTH = 32

logger = logging.getLogger(__name__)

# --- Key derivation (PBKDF2-HMAC-SHA256) ---

def _derive_key(password: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS) -> bytes:
    logger.debug(f'Deriving key with PBKDF2: iterations={iterations}, salt_len={len(salt)}')
    return PBKDF2(password.encode('utf-8'), salt, dkLen=KEY_LENGTH, count=iterations, hmac_hash_module=SHA256)


def _from_hex(value: str, name: str) -> bytes:
    if not value:
        raise ConfigurationError(f'{name} is not configured')
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise ConfigurationError(f'{name} is not valid hex') from e


def hash_password(password: str, salt: bytes = None):
    """Return (hash_hex, salt_hex) for ``password``, generating a fresh salt if none is given."""
    if salt is None:
        salt = get_random_bytes(SALT_LENGTH)
    return _derive_key(password, salt).hex(), salt.hex()


def verify_password(password: str, stored_hash_hex: str, salt_hex: str) -> bool:
    """Check ``password`` against the stored PBKDF2 hash.

    A wrong password returns False. Only a missing or malformed stored
    hash/salt raises (ConfigurationError).
    """
    expected = _from_hex(stored_hash_hex, 'ADMIN_PASSWORD_HASH')
    salt = _from_hex(salt_hex, 'ADMIN_PASSWORD_SALT')
    derived = _derive_key(password, salt)
    ok = hmac.compare_digest(derived, expected)
    logger.debug(f'Password verification {"succeeded" if ok else "failed"}')
    return ok

# --- Secrets ---

def generate_token_secret() -> str:
    """Random 256-bit signing key, hex-encoded."""
    return get_random_bytes(32).hex()


def decode_secret(secret_hex: str) -> bytes:
    return _from_hex(secret_hex, 'JWT_SECRET')
