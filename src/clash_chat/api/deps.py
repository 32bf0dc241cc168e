"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clash_chat.application.dto.principal import Principal
from clash_chat.application.exceptions import AuthenticationError
from clash_chat.application.ports.auth import TokenVerifier
from clash_chat.application.uow import UnitOfWork
from clash_chat.config import Settings
from clash_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from clash_chat.infrastructure.auth.jwks_verifier import JWKSVerifier

_bearer_scheme = HTTPBearer()


def build_verifier(config: Settings) -> TokenVerifier:
    if config.JWT_VERIFY_MODE == "jwks":
        assert config.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(config.JWKS_URL)
    return HS256Verifier(config.JWT_SECRET, config.JWT_ALGORITHM)


async def get_uow(request: Request) -> AsyncIterator[UnitOfWork]:
    async with request.app.state.uow_factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def get_verifier(request: Request) -> TokenVerifier:
    return request.app.state.verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> Principal:
    try:
        return await verifier.verify(credentials.credentials)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
