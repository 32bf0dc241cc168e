from __future__ import annotations

from typing import Any
from uuid import UUID

from clash_chat.application.dto.principal import Principal
from clash_chat.application.exceptions import AuthenticationError


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a principal from decoded JWT claims.

    The user id is read from ``sub`` and falls back to ``userId``, the claim
    name used by the token issuer.
    """
    raw_id = payload.get("sub") or payload.get("userId")
    if not raw_id:
        raise AuthenticationError("Token has no subject")
    try:
        user_id = UUID(str(raw_id))
    except ValueError as exc:
        raise AuthenticationError("Token subject is not a valid user id") from exc
    return Principal(user_id=user_id, email=payload.get("email"))
