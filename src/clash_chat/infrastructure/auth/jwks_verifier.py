from __future__ import annotations

import logging

import jwt
from jwt import PyJWKClient

from clash_chat.application.dto.principal import Principal
from clash_chat.application.exceptions import AuthenticationError
from clash_chat.infrastructure.auth._claims import principal_from_claims

logger = logging.getLogger(__name__)


class JWKSVerifier:
    """Verify access tokens against the issuer's JWKS endpoint."""

    def __init__(self, jwks_url: str, algorithms: tuple[str, ...] = ("RS256", "ES256")) -> None:
        self._jwks_url = jwks_url
        self._algorithms = list(algorithms)
        self._jwk_client = PyJWKClient(jwks_url)

    async def verify(self, token: str) -> Principal:
        try:
            signing_key = self._jwk_client.get_signing_key_from_jwt(token)
            payload = jwt.decode(token, signing_key.key, algorithms=self._algorithms)
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except jwt.PyJWTError as exc:
            logger.debug("JWKS verification failed against %s", self._jwks_url, exc_info=True)
            raise AuthenticationError(f"Invalid token: {exc}") from exc
        return principal_from_claims(payload)
