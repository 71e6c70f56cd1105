"""JWT access token validation (ES256).

The registry does not log users in.  Bearer tokens come from an upstream
identity provider; the only claim the registry trusts is ``sub``, the
caller's principal.  Roles are never read from the token: they are
resolved from the identity registry on every operation.

Key management:
  - JWT_PUBLIC_KEY_PATH set: tokens are verified against that PEM key.
  - otherwise (dev/test): an ephemeral EC key pair is generated on import
    and ``create_access_token`` signs with it, so local runs and tests can
    mint their own tokens.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from credential_registry.core.config import SETTINGS

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"
ISSUER = "credential-registry"
AUDIENCE = "credential-registry"
ACCESS_TOKEN_TTL_MIN = 15

_private_key = ec.generate_private_key(ec.SECP256R1())

if SETTINGS.jwt_public_key_path:
    _public_key = load_pem_public_key(Path(SETTINGS.jwt_public_key_path).read_bytes())
    logger.info("Verifying tokens with key from %s", SETTINGS.jwt_public_key_path)
else:
    _public_key = _private_key.public_key()


def create_access_token(*, sub: str, ttl_minutes: int = ACCESS_TOKEN_TTL_MIN) -> str:
    """Sign a bearer token for ``sub`` with the local key (dev/test only)."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ttl_minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256.  Raises jwt.ExpiredSignatureError or
    jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat"]},
    )
