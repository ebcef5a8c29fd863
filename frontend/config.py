import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_GATEWAY_URL = "http://localhost:3001"
DEFAULT_UI_PORT = 5173


@dataclass(frozen=True)
class UISettings:
    gateway_url: str = DEFAULT_GATEWAY_URL
    host: str = "0.0.0.0"
    port: int = DEFAULT_UI_PORT
    log_level: str = "INFO"


def load_ui_settings() -> UISettings:
    load_dotenv()

    return UISettings(
        gateway_url=(os.getenv("GATEWAY_URL") or DEFAULT_GATEWAY_URL).rstrip("/"),
        host=os.getenv("UI_HOST", "0.0.0.0"),
        port=int(os.getenv("UI_PORT") or DEFAULT_UI_PORT),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
