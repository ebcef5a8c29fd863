"""Per-user scheduling workflow: browse the agenda, book a session, cancel one.

``SchedulingSession`` mirrors what the calendar page does in the browser. It
is driven by the same three user gestures (select an empty slot, activate an
event, close the modal) and talks to the gateway only through
``GatewayClient``. Blocking prompts are injected as ``alert`` and ``confirm``
callables so a headless caller (or a test) decides how they are shown.

State only changes after a successful round trip; a failed create or cancel
leaves the user on the same form with an alert.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Callable

from frontend.calendar_view import compose_timestamp, slot_time, split_title, to_calendar_event
from frontend.client import GatewayClient, GatewayRequestError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = 'Por favor, preencha os campos obrigatórios (*).'
PHONE_NOT_PROVIDED = 'Não informado'


class SessionState(enum.Enum):
    IDLE = 'idle'
    CREATING = 'creating'
    VIEWING = 'viewing'


@dataclass
class AppointmentForm:
    session_name: str = ''
    therapist_name: str = ''
    patient_phone: str = ''
    start_time: str = ''
    end_time: str = ''

    def missing_required(self) -> bool:
        return not (self.session_name and self.therapist_name and self.start_time and self.end_time)


@dataclass(frozen=True)
class SelectedSlot:
    start: datetime
    end: datetime


class SchedulingSession:
    def __init__(
        self,
        client: GatewayClient,
        alert: Callable[[str], None],
        confirm: Callable[[str], bool],
        tz: tzinfo | None = None,
    ):
        self.client = client
        self.alert = alert
        self.confirm = confirm
        self.tz = tz

        self.state = SessionState.IDLE
        self.events: list[dict] = []
        self.form = AppointmentForm()
        self.selected_slot: SelectedSlot | None = None
        self.selected_event: dict | None = None
        self.is_loading = False

    def load(self) -> None:
        self.is_loading = True
        try:
            self.events = [to_calendar_event(raw) for raw in self.client.fetch_events()]
        except GatewayRequestError as exc:
            logger.error('Erro ao buscar eventos: %s', exc.message)
        finally:
            self.is_loading = False

    def select_slot(self, start: datetime, end: datetime) -> None:
        self.selected_slot = SelectedSlot(start=start, end=end)
        self.selected_event = None
        self.form = AppointmentForm(start_time=slot_time(start), end_time=slot_time(end))
        self.state = SessionState.CREATING

    def activate_event(self, event: dict) -> None:
        title = event.get('title') or ''
        therapist, label = split_title(title)
        description = (event.get('extendedProps') or {}).get('description')

        self.selected_event = event
        self.selected_slot = None
        self.form = AppointmentForm(
            session_name=label,
            therapist_name=therapist,
            patient_phone=description or PHONE_NOT_PROVIDED,
        )
        self.state = SessionState.VIEWING

    def close(self) -> None:
        self.state = SessionState.IDLE
        self.selected_slot = None
        self.selected_event = None

    def _payload(self) -> dict:
        date_base = self.selected_slot.start.date()
        return {
            'resumo': self.form.session_name,
            'terapeuta': self.form.therapist_name,
            'telefone': self.form.patient_phone,
            'inicio': compose_timestamp(date_base, self.form.start_time, self.tz),
            'fim': compose_timestamp(date_base, self.form.end_time, self.tz),
        }

    def save(self) -> bool:
        if self.state is not SessionState.CREATING:
            raise RuntimeError('No empty slot is selected.')
        if self.selected_slot is None or self.form.missing_required():
            self.alert(REQUIRED_FIELDS_MESSAGE)
            return False

        self.is_loading = True
        try:
            self.client.create_appointment(self._payload())
        except GatewayRequestError as exc:
            self.alert(f'Erro ao salvar: {exc.message}')
            return False
        finally:
            self.is_loading = False

        self.close()
        self.load()
        return True

    def cancel_selected(self) -> bool:
        if self.state is not SessionState.VIEWING or self.selected_event is None:
            raise RuntimeError('No appointment is selected.')

        title = self.selected_event.get('title') or ''
        if not self.confirm(f'Tem certeza que deseja cancelar a sessão de {title}?'):
            return False

        self.is_loading = True
        try:
            self.client.cancel_appointment(self.selected_event['id'])
        except GatewayRequestError as exc:
            self.alert(f'Erro ao cancelar: {exc.message}')
            return False
        finally:
            self.is_loading = False

        self.close()
        self.load()
        return True
