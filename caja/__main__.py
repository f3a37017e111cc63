"""Run the API: python -m caja"""

import os

import uvicorn

from caja.core.config import get_settings
from caja.core.logging import setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(
        "api",
        settings.log_dir,
        console_level=settings.log_level,
        file_level=settings.log_level,
    )
    uvicorn.run(
        "caja.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
