# todo_auth_api/todo_auth/api/endpoints/auth.py
from typing import Any, List
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger

from todo_auth.api.dependencies import get_current_user, get_identity_store, get_token_service
from todo_auth.core.exceptions import EmailAlreadyRegistered, TokenRotationError
from todo_auth.models.user import User as UserModel
from todo_auth.schemas.token import AuthResult, LogoutRequest, TokenRequest
from todo_auth.schemas.user import User as UserSchema, UserCreate, UserLogin
from todo_auth.services.identity import IdentityStore
from todo_auth.services.token_service import TokenPair, TokenService

router = APIRouter()


def failure_response(errors: List[str], status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    body = AuthResult(success=False, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))


def success_result(pair: TokenPair) -> AuthResult:
    return AuthResult(token=pair.access_token, refresh_token=pair.refresh_token, success=True)


@router.post("/register", response_model=AuthResult, response_model_exclude_none=True)
async def register(
    *,
    user_in: UserCreate,
    users: IdentityStore = Depends(get_identity_store),
    tokens: TokenService = Depends(get_token_service),
) -> Any:
    """
    Cria o usuário e já devolve o primeiro par de tokens.
    """
    if await users.find_by_email(user_in.email):
        return failure_response(["Email already exists."])
    try:
        new_user = await users.create(user_in)
    except EmailAlreadyRegistered:
        return failure_response(["Email already exists."])
    pair = await tokens.issue_token_pair(new_user)
    return success_result(pair)


@router.post("/login", response_model=AuthResult, response_model_exclude_none=True)
async def login(
    *,
    credentials: UserLogin,
    users: IdentityStore = Depends(get_identity_store),
    tokens: TokenService = Depends(get_token_service),
) -> Any:
    user = await users.find_by_email(credentials.email)
    # Mesma mensagem para usuário inexistente e senha errada
    if user is None or not users.verify_password(user, credentials.password):
        logger.warning(f"Tentativa de login falhou para: {credentials.email}")
        return failure_response(["Invalid email or password"])
    logger.info(f"Login bem-sucedido para usuário ID {user.id}")
    pair = await tokens.issue_token_pair(user)
    return success_result(pair)


@router.post("/refresh-token", response_model=AuthResult, response_model_exclude_none=True)
async def refresh_token(
    *,
    token_request: TokenRequest,
    tokens: TokenService = Depends(get_token_service),
) -> Any:
    """
    Troca um access token expirado + refresh token por um par novo.
    O refresh token apresentado fica marcado como usado.
    """
    try:
        pair = await tokens.rotate(token_request.token, token_request.refresh_token)
    except TokenRotationError as e:
        return failure_response([e.reason.value])
    return success_result(pair)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(*, logout_request: LogoutRequest, tokens: TokenService = Depends(get_token_service)):
    await tokens.revoke(logout_request.refresh_token)
    return None


@router.post("/logout-all")
async def logout_all(
    current_user: UserModel = Depends(get_current_user),
    tokens: TokenService = Depends(get_token_service),
) -> Any:
    revoked = await tokens.revoke_all_for_user(current_user.id)
    return {"revoked": revoked}


@router.get("/me", response_model=UserSchema)
async def read_users_me(current_user: UserModel = Depends(get_current_user)) -> Any:
    return current_user
