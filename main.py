# todo_auth_api/main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from todo_auth.core.config import settings
from todo_auth.core.exceptions import StoreFailure
from todo_auth.db.session import dispose_engine
from todo_auth.api.endpoints import auth

# Importar modelos para Alembic/Base.metadata
from todo_auth.db.base import Base # noqa
from todo_auth.models import user, refresh_token # noqa


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

app = FastAPI(
    title="Todo Auth API",
    description="Registro, login e rotação de refresh tokens",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Payload inválido em {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"success": False, "errors": ["Invalid payload"]})


@app.exception_handler(StoreFailure)
async def store_failure_handler(request: Request, exc: StoreFailure):
    logger.error(f"Falha de persistência em {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "errors": ["store_failure"]})


api_prefix = "/api/v1"

app.include_router(auth.router, prefix=f"{api_prefix}/auth", tags=["Authentication"])


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down: Disposing database engine...")
    await dispose_engine()


@app.get("/")
def read_root():
    return {"message": "Todo Auth API is running!"}
