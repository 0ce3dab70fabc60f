# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JWT verification for identity-provider tokens.

Tokens carry the user id in ``sub`` and one of the roles in ``role``.
Issuing tokens is the identity provider's job; ``create_access_token``
exists for local tooling and tests.
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from attrs import frozen
from beartype import beartype

from ..models.context import RequestContext, UserRole
from .config import Settings


@frozen
class TokenPayload:
    """Immutable decoded token."""

    sub: str  # Subject (user ID)
    role: UserRole
    exp: datetime
    jti: str


@beartype
def create_access_token(
    settings: Settings,
    subject: str,
    role: UserRole,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expiration_minutes)

    payload = {
        "sub": subject,
        "role": role.value,
        "iat": now,
        "exp": now + expires_delta,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@beartype
def decode_token(settings: Settings, token: str) -> TokenPayload | None:
    """Decode and validate a token; ``None`` when invalid or expired."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        return TokenPayload(
            sub=str(payload["sub"]),
            role=UserRole(payload.get("role", UserRole.FARMER.value)),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            jti=str(payload.get("jti", "")),
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    except ValueError:
        # Unknown role
        return None


@beartype
def context_from_token(settings: Settings, token: str) -> RequestContext | None:
    """Build the request context carried by a bearer token."""
    payload = decode_token(settings, token)
    if payload is None:
        return None
    return RequestContext(user_id=payload.sub, role=payload.role)


__all__ = ["TokenPayload", "context_from_token", "create_access_token", "decode_token"]
