"""
test_security.py - password hashing and verification
"""

import hashlib

import pytest

from gallery_admin.errors import ConfigurationError
from gallery_admin.security import (
    PBKDF2_ITERATIONS,
    generate_token_secret,
    hash_password,
    verify_password,
)


class TestHashPassword:
    def test_matches_reference_pbkdf2(self):
        """Same parameters as hashlib's PBKDF2-HMAC-SHA256 (100k iterations, 32 bytes)."""
        salt = bytes(range(32))
        password_hash, salt_hex = hash_password("hunter2", salt=salt)

        expected = hashlib.pbkdf2_hmac("sha256", b"hunter2", salt, PBKDF2_ITERATIONS, 32)
        assert password_hash == expected.hex()
        assert salt_hex == salt.hex()

    def test_random_salt_each_call(self):
        _, salt_a = hash_password("pw")
        _, salt_b = hash_password("pw")
        assert salt_a != salt_b
        assert len(bytes.fromhex(salt_a)) == 32


class TestVerifyPassword:
    def test_correct_password(self, credentials, admin_password):
        assert verify_password(admin_password, credentials["ADMIN_PASSWORD_HASH"],
                               credentials["ADMIN_PASSWORD_SALT"]) is True

    def test_wrong_password(self, credentials):
        assert verify_password("nope", credentials["ADMIN_PASSWORD_HASH"],
                               credentials["ADMIN_PASSWORD_SALT"]) is False

    def test_wrong_salt(self, credentials, admin_password):
        assert verify_password(admin_password, credentials["ADMIN_PASSWORD_HASH"], "00" * 32) is False

    def test_truncated_hash_is_mismatch_not_error(self, credentials):
        short = credentials["ADMIN_PASSWORD_HASH"][:16]
        assert verify_password("anything", short, credentials["ADMIN_PASSWORD_SALT"]) is False

    @pytest.mark.parametrize("stored_hash, salt", [
        ("", "00" * 32),
        ("zz" * 32, "00" * 32),
        ("00" * 32, ""),
        ("00" * 32, "not hex"),
    ])
    def test_malformed_configuration_raises(self, stored_hash, salt):
        with pytest.raises(ConfigurationError):
            verify_password("pw", stored_hash, salt)


def test_generate_token_secret():
    secret = generate_token_secret()
    assert len(bytes.fromhex(secret)) == 32
    assert secret != generate_token_secret()
