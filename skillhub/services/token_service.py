"""Identity-provider token validation (ES256 JWT).

The identity provider authenticates users and issues access tokens whose
`sub` claim is the stable account id.  This service only verifies them.

Key material:
  - IDP_PUBLIC_KEY_PEM set: verify against that public key (production).
  - unset (dev/test): an ephemeral EC key pair is generated on import and
    `create_access_token` can mint tokens locally, standing in for the
    provider.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from skillhub.core.config import SETTINGS

ALGORITHM = "ES256"
ISSUER = "skillhub-identity"
AUDIENCE = "skillhub-service"
ACCESS_TOKEN_TTL_MIN = 60

if SETTINGS.idp_public_key_pem:
    _private_key: ec.EllipticCurvePrivateKey | None = None
    _public_key = serialization.load_pem_public_key(
        SETTINGS.idp_public_key_pem.encode("utf-8")
    )
else:
    _private_key = ec.generate_private_key(ec.SECP256R1())
    _public_key = _private_key.public_key()


def create_access_token(
    *,
    sub: str,
    name: str = "",
    email: str = "",
    picture: str = "",
    roles: list[str] | None = None,
) -> str:
    """Mint a token the way the identity provider would (dev/test only)."""
    if _private_key is None:
        raise RuntimeError("tokens are issued by the identity provider")
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ACCESS_TOKEN_TTL_MIN),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "name": name,
        "email": email,
        "picture": picture,
        "roles": roles or ["user"],
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256; exp, iss and aud are validated by PyJWT.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat"]},
    )
