# todo_auth_api/todo_auth/core/exceptions.py
from enum import Enum


class RotationFailure(str, Enum):
    """Motivos distintos de falha na rotação do refresh token."""
    INVALID_TOKEN = "invalid_token"
    TOKEN_NOT_EXPIRED = "token_not_expired"
    TOKEN_NOT_FOUND = "token_not_found"
    TOKEN_ALREADY_USED = "token_already_used"
    TOKEN_REVOKED = "token_revoked"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_MISMATCH = "token_mismatch"


class InvalidTokenError(Exception):
    """Token malformado, com assinatura inválida ou algoritmo inesperado."""


class TokenRotationError(Exception):
    def __init__(self, reason: RotationFailure, message: str | None = None):
        self.reason = reason
        self.message = message or reason.value
        super().__init__(self.message)


class StoreFailure(Exception):
    """Falha ao persistir um refresh token; nenhum par é devolvido."""


class EmailAlreadyRegistered(Exception):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email already exists: {email}")
