"""Entrypoint: python -m clash_chat"""
from __future__ import annotations

import uvicorn

from clash_chat.config import settings
from clash_chat.log import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "clash_chat.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_config=None,
    )


if __name__ == "__main__":
    main()
