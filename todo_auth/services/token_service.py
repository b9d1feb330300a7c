# todo_auth_api/todo_auth/services/token_service.py
"""
Emissão e rotação de pares (access token, refresh token).

O access token é um JWT curto e sem estado. O refresh token é uma string
opaca de uso único, persistida em ``refresh_tokens`` e amarrada ao ``jti``
do access token emitido junto com ela.

A rotação recebe o access token JÁ EXPIRADO mais o refresh token e executa
a cadeia de validação em ordem, parando na primeira falha:

1. formato/assinatura e algoritmo do JWT  -> invalid_token
2. ``exp`` ainda no futuro                 -> token_not_expired
3. refresh token inexistente               -> token_not_found
4. já usado                                -> token_already_used
5. revogado                                -> token_revoked
6. registro expirado                       -> token_expired
7. ``jwt_id`` diferente do ``jti``         -> token_mismatch

Só então o registro é consumido com um compare-and-set e um novo par é
emitido. Qualquer erro inesperado vira ``invalid_token`` para o cliente e
é logado com traceback.
"""
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from todo_auth.core.exceptions import (
    InvalidTokenError, RotationFailure, TokenRotationError,
)
from todo_auth.core.security import TokenCodec, generate_refresh_token
from todo_auth.crud import crud_refresh_token
from todo_auth.models.user import User
from todo_auth.services.identity import IdentityStore


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TokenService:
    def __init__(
        self,
        db: AsyncSession,
        codec: TokenCodec,
        users: IdentityStore,
        access_token_ttl: timedelta,
        refresh_token_ttl: timedelta,
    ):
        self.db = db
        self.codec = codec
        self.users = users
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl

    async def issue_token_pair(self, user: User) -> TokenPair:
        """Emite um par novo e persiste o registro do refresh token (StoreFailure se falhar)."""
        access_token, claims = self.codec.issue(user.id, user.email, self.access_token_ttl)
        refresh_token = generate_refresh_token()
        now = utcnow_naive()
        await crud_refresh_token.create_refresh_token(
            self.db,
            user_id=user.id,
            token=refresh_token,
            jwt_id=claims["jti"],
            added_at=now,
            expires_at=now + self.refresh_token_ttl,
        )
        logger.info(f"Par de tokens emitido para usuário ID {user.id} (jti={claims['jti']})")
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def rotate(self, access_token: str, refresh_token: str) -> TokenPair:
        try:
            return await self._verify_and_regenerate(access_token, refresh_token)
        except TokenRotationError:
            raise
        except Exception:
            logger.exception("Erro inesperado durante a rotação do refresh token")
            raise TokenRotationError(RotationFailure.INVALID_TOKEN)

    async def _verify_and_regenerate(self, access_token: str, refresh_token: str) -> TokenPair:
        try:
            claims = self.codec.verify(access_token)
        except InvalidTokenError as e:
            logger.info(f"Rotação recusada: access token inválido ({e})")
            raise TokenRotationError(RotationFailure.INVALID_TOKEN)

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise TokenRotationError(RotationFailure.INVALID_TOKEN, "Token has no numeric exp claim")
        if datetime.fromtimestamp(exp, tz=timezone.utc) > datetime.now(timezone.utc):
            raise TokenRotationError(RotationFailure.TOKEN_NOT_EXPIRED)

        stored = await crud_refresh_token.get_refresh_token(self.db, token=refresh_token)
        if stored is None:
            raise TokenRotationError(RotationFailure.TOKEN_NOT_FOUND)

        if stored.is_used:
            logger.warning(
                f"Refresh token já usado apresentado novamente (user ID {stored.user_id}, "
                f"jti={stored.jwt_id}). Possível replay."
            )
            raise TokenRotationError(RotationFailure.TOKEN_ALREADY_USED)

        if stored.is_revoked:
            logger.warning(f"Refresh token revogado apresentado (user ID {stored.user_id}). Possível roubo.")
            raise TokenRotationError(RotationFailure.TOKEN_REVOKED)

        if stored.expires_at <= utcnow_naive():
            raise TokenRotationError(RotationFailure.TOKEN_EXPIRED)

        if stored.jwt_id != claims.get("jti"):
            logger.warning(f"jti do access token não corresponde ao refresh token (user ID {stored.user_id})")
            raise TokenRotationError(RotationFailure.TOKEN_MISMATCH)

        # Compare-and-set: só uma rotação concorrente consome o registro
        if not await crud_refresh_token.mark_refresh_token_used(self.db, token=refresh_token):
            logger.warning(f"Rotação concorrente perdeu a corrida (user ID {stored.user_id}, jti={stored.jwt_id})")
            raise TokenRotationError(RotationFailure.TOKEN_ALREADY_USED)

        user = await self.users.find_by_id(stored.user_id)
        if user is None:
            logger.error(f"Refresh token aponta para usuário inexistente: ID {stored.user_id}")
            raise TokenRotationError(RotationFailure.INVALID_TOKEN)

        logger.info(f"Refresh token rotacionado para usuário ID {user.id}")
        return await self.issue_token_pair(user)

    async def revoke(self, refresh_token: str) -> bool:
        revoked = await crud_refresh_token.revoke_refresh_token(self.db, token=refresh_token)
        if revoked:
            logger.info("Refresh token revogado")
        return revoked

    async def revoke_all_for_user(self, user_id: int) -> int:
        count = await crud_refresh_token.revoke_all_refresh_tokens_for_user(self.db, user_id=user_id)
        logger.info(f"Revogados {count} refresh tokens para usuário ID {user_id}")
        return count
