import json
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import Settings
from errors import AuthenticationFailed, Forbidden, PayloadTooLarge, ValidationFailed
from repositories import ProductRepository, UserRepository
from security import decode_token

AUTH_TOKEN_HEADER = "X-auth-token"
MAX_BODY_BYTES = 1024 * 1024

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_product_repo(request: Request) -> ProductRepository:
    return request.app.state.products


def get_user_repo(request: Request) -> UserRepository:
    return request.app.state.users


async def read_json_body(request: Request) -> Any:
    """Read the raw body, enforce the 1MB cap and decode it as JSON."""
    length = request.headers.get("content-length")
    if length and length.isdigit() and int(length) > MAX_BODY_BYTES:
        raise PayloadTooLarge("Request body too large")
    # chunked uploads carry no content-length, so count while streaming
    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > MAX_BODY_BYTES:
            raise PayloadTooLarge("Request body too large")
        chunks.append(chunk)
    body = b"".join(chunks)
    try:
        return json.loads(body)
    except ValueError:
        raise ValidationFailed("unable to parse request payload")


def _token_from_header(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    parts = value.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        return None
    return parts[1]


def require_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> dict:
    # Authorization: Bearer <t> first, then the X-auth-token header issued at login
    token = credentials.credentials if credentials else _token_from_header(request.headers.get(AUTH_TOKEN_HEADER))
    if not token:
        raise AuthenticationFailed("Missing or malformed auth token")
    return decode_token(token, settings.jwt_token_secret)


def require_authorized(claims: dict = Depends(require_token)) -> dict:
    if claims.get("authorized") is not True:
        raise Forbidden("Not authorized")
    return claims
