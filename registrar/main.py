# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Entry point for running the Registrar API with uvicorn.

Usage:
    python -m registrar.main
"""

import uvicorn

from registrar.api.app import create_app
from registrar.core.config import get_settings

app = create_app()


def main() -> None:
    """Run the API server with settings from the environment."""
    settings = get_settings()
    uvicorn.run(
        "registrar.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers if not settings.api.reload else 1,
        reload=settings.api.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
