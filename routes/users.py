import logging

from fastapi import APIRouter, Depends, Response

from config import Settings
from dependencies import AUTH_TOKEN_HEADER, get_settings, get_user_repo
from errors import AuthenticationFailed, Conflict
from repositories import UserRepository
from schemas import UserCredentials, UserOut
from security import create_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


def _attach_token(response: Response, username: str, settings: Settings) -> None:
    token = create_token(username, settings.jwt_token_secret, settings.token_expire_minutes)
    response.headers[AUTH_TOKEN_HEADER] = "Bearer " + token


@router.post("/users", status_code=201)
def register(
    body: UserCredentials,
    response: Response,
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_settings),
) -> str:
    if repo.exists(body.username):
        logger.warning("User %s already exists", body.username)
        raise Conflict("User already exists")
    user_id = repo.insert(body.username, hash_password(body.password, settings.bcrypt_rounds))
    _attach_token(response, body.username, settings)
    return user_id


@router.post("/auth", response_model=UserOut)
def authenticate(
    body: UserCredentials,
    response: Response,
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_settings),
):
    user = repo.find_by_username(body.username)
    if user is None:
        logger.warning("User %s does not exist", body.username)
        raise AuthenticationFailed("Credentials invalid")
    if not verify_password(body.password, user.get("password", "")):
        logger.warning("Failed login attempt for user %s", body.username)
        raise AuthenticationFailed("Credentials invalid")
    _attach_token(response, user["username"], settings)
    return UserOut(username=user["username"])
