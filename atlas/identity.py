"""Bearer token handling.

Tokens are issued by the identity provider; this module only signs test and
development tokens and resolves incoming ones to a user id.
"""
from __future__ import annotations

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .errors import AuthenticationError, ConfigurationError

TOKEN_SALT = "auth-token"


def _serializer(secret_key: str | None) -> URLSafeTimedSerializer:
    if not secret_key:
        raise ConfigurationError("SECRET_KEY is not set")
    return URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)


def issue_token(secret_key: str, user_id: int, **claims: object) -> str:
    return _serializer(secret_key).dumps({"user_id": user_id, **claims})


def resolve_user_id(authorization: str | None, secret_key: str | None, max_age: int) -> int:
    """Extract the user id from an ``Authorization: Bearer <token>`` header.

    Raises ``AuthenticationError`` when the header is missing or the token is
    invalid or expired.
    """
    if not authorization:
        raise AuthenticationError("No authorization header provided")
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Authorization header must use the Bearer scheme")

    token = authorization[7:].strip()
    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age)
    except SignatureExpired as exc:
        raise AuthenticationError("Authentication error: token expired") from exc
    except BadSignature as exc:
        raise AuthenticationError("Authentication error: invalid token") from exc

    user_id = payload.get("user_id") if isinstance(payload, dict) else None
    if not isinstance(user_id, int):
        raise AuthenticationError("User not authenticated")
    return user_id
