import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


CALENDAR_SCOPES = ("https://www.googleapis.com/auth/calendar",)
DEFAULT_CALENDAR_ID = "agenda-clinica@agenda-clinica-484517.iam.gserviceaccount.com"
DEFAULT_CREDENTIALS_FILE = "credentials.json"
DEFAULT_PORT = 3001


class ConfigurationError(RuntimeError):
    """Raised when the gateway cannot be configured from the environment."""


@dataclass(frozen=True)
class GatewaySettings:
    calendar_id: str = DEFAULT_CALENDAR_ID
    credentials_info: dict | None = None
    credentials_file: str = DEFAULT_CREDENTIALS_FILE
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    app_env: str = "development"
    scopes: tuple[str, ...] = field(default=CALENDAR_SCOPES)

    @property
    def credential_source(self) -> str:
        return "embedded" if self.credentials_info is not None else "file"


def _parse_credentials(raw: str | None) -> dict | None:
    if raw is None or not raw.strip():
        return None
    try:
        credentials = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError("GOOGLE_CREDENTIALS is not valid JSON.") from exc
    if not isinstance(credentials, dict):
        raise ConfigurationError("GOOGLE_CREDENTIALS must be a JSON object.")
    return credentials


def load_settings() -> GatewaySettings:
    load_dotenv()

    return GatewaySettings(
        calendar_id=os.getenv("CALENDAR_ID") or DEFAULT_CALENDAR_ID,
        credentials_info=_parse_credentials(os.getenv("GOOGLE_CREDENTIALS")),
        credentials_file=os.getenv("GOOGLE_CREDENTIALS_FILE", DEFAULT_CREDENTIALS_FILE),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT") or DEFAULT_PORT),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        app_env=os.getenv("APP_ENV", "development"),
    )


def validate_runtime_config(settings: GatewaySettings) -> None:
    if settings.app_env.lower() != "production" or settings.credential_source == "embedded":
        return
    if not Path(settings.credentials_file).is_file():
        raise ConfigurationError(
            f"Credentials file {settings.credentials_file} not found; set GOOGLE_CREDENTIALS in production."
        )
