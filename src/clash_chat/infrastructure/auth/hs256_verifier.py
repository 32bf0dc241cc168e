from __future__ import annotations

import jwt

from clash_chat.application.dto.principal import Principal
from clash_chat.application.exceptions import AuthenticationError
from clash_chat.infrastructure.auth._claims import principal_from_claims


class HS256Verifier:
    """Verify access tokens signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except jwt.PyJWTError as exc:
            raise AuthenticationError(f"Invalid token: {exc}") from exc
        return principal_from_claims(payload)
