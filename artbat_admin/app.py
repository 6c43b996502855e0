"""ASGI entry point: ``uvicorn artbat_admin.app:app``."""
from __future__ import annotations

import os

import uvicorn

from artbat_admin.app_factory import create_app

app = create_app()


def main() -> None:
    uvicorn.run(
        "artbat_admin.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )


if __name__ == "__main__":
    main()
