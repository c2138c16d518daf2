from __future__ import annotations

from typing import Any

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt

BEARER_PREFIX = "bearer "


class UserAuthError(Exception):
    def __init__(self, code: str, reason: str) -> None:
        super().__init__(reason)
        self.code = code
        self.reason = reason


def extract_bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header or not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def decode_access_token(
    token: str,
    *,
    secret: str,
    algorithm: str,
    audience: str = "",
) -> dict[str, Any]:
    options = {"verify_aud": bool(audience)}
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            audience=audience or None,
            options=options,
        )
    except ExpiredSignatureError as exc:
        raise UserAuthError("E_TOKEN_EXPIRED", "token_expired") from exc
    except JWTError as exc:
        raise UserAuthError("E_INVALID_TOKEN", "token_invalid") from exc
    return claims


def extract_subject(claims: dict[str, Any]) -> str:
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise UserAuthError("E_INVALID_TOKEN", "subject_missing")
    return subject.strip()
