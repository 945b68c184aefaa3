# Signed bearer tokens (JWT, HS256)

import logging

import jwt

from .security import decode_secret

TOKEN_LIFETIME = 2 * 60 * 60  # seconds
ALGORITHM = 'HS256'

logger = logging.getLogger(__name__)


def issue_token(subject: str, secret_hex: str, now: int) -> str:
    payload = {'sub': subject, 'iat': int(now), 'exp': int(now) + TOKEN_LIFETIME}
    logger.debug(f'Issuing token for sub={subject}, exp={payload["exp"]}')
    return jwt.encode(payload, decode_secret(secret_hex), algorithm=ALGORITHM)


def verify_token(token: str, secret_hex: str, now: int):
    """Return the payload of a valid token, or None.

    PyJWT checks the framing and the signature; expiry is checked against
    ``now`` so callers control the clock.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            decode_secret(secret_hex),
            algorithms=[ALGORITHM],
            options={'verify_exp': False, 'verify_iat': False, 'require': ['exp']},
        )
    except jwt.PyJWTError as e:
        logger.debug(f'Token rejected: {e}')
        return None

    exp = payload['exp']
    if not isinstance(exp, (int, float)) or exp <= now:
        logger.debug('Token expired')
        return None
    return payload


def bearer_token(header_value: str):
    """Pull the token out of an ``Authorization: Bearer <token>`` header."""
    if not header_value or not header_value.startswith('Bearer '):
        return None
    return header_value[len('Bearer '):].strip() or None
