# todo_auth_api/todo_auth/core/security.py
import secrets
import string
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
from passlib.context import CryptContext
from jose import jwt, JWTError
from loguru import logger

from .exceptions import InvalidTokenError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

REFRESH_TOKEN_ALPHABET = string.ascii_uppercase + string.digits
REFRESH_TOKEN_RANDOM_LENGTH = 35

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        # Limita o tamanho da senha ANTES de passar para o bcrypt (evita erros > 72 bytes)
        password_bytes = plain_password.encode('utf-8')[:72]
        return pwd_context.verify(password_bytes, hashed_password)
    except ValueError as e:
        logger.warning(f"Hash de senha inválido ou não reconhecido: {e}")
        return False

def get_password_hash(password: str) -> str:
    password_bytes = password.encode('utf-8')[:72]
    return pwd_context.hash(password_bytes)


def generate_refresh_token() -> str:
    """
    Gera o valor opaco do refresh token: 35 caracteres alfanuméricos
    (CSPRNG) seguidos de um uuid4 como sufixo de unicidade.
    """
    random_part = "".join(
        secrets.choice(REFRESH_TOKEN_ALPHABET) for _ in range(REFRESH_TOKEN_RANDOM_LENGTH)
    )
    return f"{random_part}{uuid.uuid4()}"


class TokenCodec:
    """
    Emite e verifica access tokens JWT assinados com segredo simétrico.

    `verify` NÃO rejeita tokens expirados: o fluxo de rotação precisa aceitar
    um access token expirado como prova de identidade anterior. Quem chama é
    responsável por checar o `exp`.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience

    def issue(self, subject_id: Any, email: str, ttl: timedelta) -> Tuple[str, Dict[str, Any]]:
        now = datetime.now(timezone.utc)
        claims: Dict[str, Any] = {
            "sub": str(subject_id),
            "email": email,
            "jti": str(uuid.uuid4()),
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "token_type": "access",
        }
        if self.issuer:
            claims["iss"] = self.issuer
        if self.audience:
            claims["aud"] = self.audience
        encoded_jwt = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return encoded_jwt, claims

    def header_algorithm(self, token: str) -> str:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise InvalidTokenError(f"Malformed token header: {e}") from e
        alg = header.get("alg")
        if not isinstance(alg, str):
            raise InvalidTokenError("Token header has no algorithm")
        return alg

    def verify(self, token: str) -> Dict[str, Any]:
        alg = self.header_algorithm(token)
        if alg.lower() != self.algorithm.lower():
            raise InvalidTokenError(f"Unexpected signing algorithm: {alg}")
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[alg],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_exp": False, "verify_aud": self.audience is not None},
            )
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e
        if payload.get("token_type") != "access":
            raise InvalidTokenError("Not an access token")
        return payload

    def decode_active(self, token: str) -> Dict[str, Any]:
        """Verificação normal de resource server: assinatura E expiração."""
        payload = self.verify(token)
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise InvalidTokenError("Token has no numeric exp claim")
        if datetime.fromtimestamp(exp, tz=timezone.utc) <= datetime.now(timezone.utc):
            raise InvalidTokenError("Token has expired")
        return payload
