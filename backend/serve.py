"""Run the calendar gateway.

Usage:
    python -m backend.serve
"""
import logging

import uvicorn

from backend.core.config import load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    logger.info('Servidor rodando na porta %s', settings.port)
    uvicorn.run('backend.main:app', host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
