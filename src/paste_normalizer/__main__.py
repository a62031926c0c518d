# -*- coding: utf-8 -*-
"""
Entry point to run the service via python -m paste_normalizer.
"""
import uvicorn

from paste_normalizer.config import settings


def main():
    """Start the Uvicorn server."""
    uvicorn.run(
        "paste_normalizer.api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
