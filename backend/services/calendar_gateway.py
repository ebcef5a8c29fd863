"""Access to the clinic's Google Calendar through one fixed service identity."""

import logging
import threading
from datetime import datetime, timezone
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from backend.core.config import GatewaySettings

logger = logging.getLogger(__name__)


class CalendarServiceError(Exception):
    """An upstream calendar call failed; ``message`` is the upstream text."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _upstream_message(exc: Exception) -> str:
    if isinstance(exc, HttpError):
        reason = getattr(exc, 'reason', None)
        if reason:
            return str(reason)
    return str(exc) or exc.__class__.__name__


def load_credentials(settings: GatewaySettings) -> service_account.Credentials:
    if settings.credential_source == 'embedded':
        return service_account.Credentials.from_service_account_info(
            settings.credentials_info,
            scopes=list(settings.scopes),
        )
    return service_account.Credentials.from_service_account_file(
        settings.credentials_file,
        scopes=list(settings.scopes),
    )


def build_calendar_service(credentials: Any) -> Any:
    return build('calendar', 'v3', credentials=credentials, cache_discovery=False)


class CalendarGateway:
    """Lists, inserts and deletes events on a single calendar.

    The wrapped ``service`` is a Calendar v3 resource as returned by
    ``googleapiclient.discovery.build``. Request handlers run on a thread
    pool and ``httplib2.Http`` is not thread-safe, so when ``credentials`` are
    given every thread executes its requests on its own ``AuthorizedHttp``.
    """

    def __init__(self, service: Any, calendar_id: str, credentials: Any = None):
        self.service = service
        self.calendar_id = calendar_id
        self.credentials = credentials
        self._local = threading.local()

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> 'CalendarGateway':
        credentials = load_credentials(settings)
        return cls(build_calendar_service(credentials), settings.calendar_id, credentials=credentials)

    def _thread_http(self) -> AuthorizedHttp | None:
        if self.credentials is None:
            return None
        http = getattr(self._local, 'http', None)
        if http is None:
            http = AuthorizedHttp(self.credentials, http=httplib2.Http())
            self._local.http = http
        return http

    def _execute(self, operation: str, request: Any) -> Any:
        http = self._thread_http()
        try:
            return request.execute(http=http) if http is not None else request.execute()
        except (HttpError, GoogleAuthError, OSError) as exc:
            message = _upstream_message(exc)
            logger.warning('Calendar %s failed for %s: %s', operation, self.calendar_id, message)
            raise CalendarServiceError(message) from exc

    def list_upcoming(self, now: datetime | None = None) -> list[dict]:
        time_min = (now or datetime.now(timezone.utc)).isoformat()
        logger.debug('Listing events on %s from %s', self.calendar_id, time_min)

        response = self._execute(
            'list',
            self.service.events().list(
                calendarId=self.calendar_id,
                timeMin=time_min,
                singleEvents=True,
                orderBy='startTime',
            ),
        )
        return response.get('items', [])

    def insert(self, event_body: dict) -> dict:
        created = self._execute(
            'insert',
            self.service.events().insert(calendarId=self.calendar_id, body=event_body),
        )
        logger.info('Created event %s on %s', created.get('id'), self.calendar_id)
        return created

    def delete(self, event_id: str) -> None:
        self._execute(
            'delete',
            self.service.events().delete(calendarId=self.calendar_id, eventId=event_id),
        )
        logger.info('Deleted event %s from %s', event_id, self.calendar_id)
