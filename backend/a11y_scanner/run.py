"""Programmatic uvicorn entry point.

Usage:
    python -m a11y_scanner.run
    a11y-scanner              # via pyproject.toml [project.scripts]
"""

import uvicorn

from a11y_scanner.core.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "a11y_scanner.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
