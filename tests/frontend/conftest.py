import pytest

from frontend.client import GatewayRequestError


class FakeGateway:
    """Records the calls a scheduling session makes to the gateway."""

    def __init__(self, events=None):
        self.events = list(events or [])
        self.created: list[dict] = []
        self.cancelled: list[str] = []
        self.fail_with: str | None = None
        self.fetches = 0
        self.session = None
        self.loading_seen: list[tuple[str, bool]] = []

    def _observe(self, call: str) -> None:
        if self.session is not None:
            self.loading_seen.append((call, self.session.is_loading))

    def fetch_events(self) -> list[dict]:
        self._observe('fetch')
        self.fetches += 1
        if self.fail_with:
            raise GatewayRequestError(self.fail_with, status_code=500)
        return list(self.events)

    def create_appointment(self, payload: dict) -> dict:
        self._observe('create')
        if self.fail_with:
            raise GatewayRequestError(self.fail_with, status_code=500)
        self.created.append(payload)
        event = {
            'id': f'evt{len(self.created)}',
            'summary': f"{payload['terapeuta']} - {payload['resumo']}",
            'description': f"Telefone/Obs: {payload['telefone'] or 'Não informado'}",
            'start': {'dateTime': payload['inicio']},
            'end': {'dateTime': payload['fim']},
        }
        self.events.append(event)
        return event

    def cancel_appointment(self, event_id: str) -> dict:
        self._observe('cancel')
        if self.fail_with:
            raise GatewayRequestError(self.fail_with, status_code=500)
        self.cancelled.append(event_id)
        self.events = [event for event in self.events if event['id'] != event_id]
        return {'message': 'Cancelado.'}


class Prompts:
    def __init__(self, answer: bool = True):
        self.answer = answer
        self.alerts: list[str] = []
        self.confirmations: list[str] = []

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        return self.answer


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def prompts() -> Prompts:
    return Prompts()
