import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from google.auth.exceptions import GoogleAuthError

from backend.core.config import ConfigurationError, load_settings, validate_runtime_config
from backend.routes import appointment_routes
from backend.services.calendar_gateway import CalendarGateway

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_calendar_gateway() -> None:
    try:
        settings = load_settings()
        validate_runtime_config(settings)
        app.state.settings = settings
        app.state.calendar_gateway = CalendarGateway.from_settings(settings)
    except (ConfigurationError, GoogleAuthError, OSError, ValueError):
        logger.exception('Calendar initialization failed. Check GOOGLE_CREDENTIALS or GOOGLE_CREDENTIALS_FILE.')
        return

    logger.info(
        'Using calendar %s with %s credentials',
        settings.calendar_id,
        settings.credential_source,
    )


@app.get('/')
def root():
    return {'status': 'Agenda da Clínica API Running'}


app.include_router(appointment_routes.router, prefix='/api')
