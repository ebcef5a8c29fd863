"""Serve the calendar page.

Usage:
    python -m frontend.serve
"""
import logging

import uvicorn

from frontend.config import load_ui_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_ui_settings()
    logging.basicConfig(level=settings.log_level)
    logger.info('Agenda em http://%s:%s usando o gateway %s', settings.host, settings.port, settings.gateway_url)
    uvicorn.run('frontend.page:app', host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
