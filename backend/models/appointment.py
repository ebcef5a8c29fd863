"""Appointment model definitions."""

from pydantic import BaseModel

PHONE_PREFIX = 'Telefone/Obs: '
PHONE_NOT_PROVIDED = 'Não informado'
TITLE_SEPARATOR = ' - '


class Appointment(BaseModel):
    """A therapy session as stored in the clinic calendar.

    The calendar only has free-text ``summary`` and ``description`` fields, so
    therapist, label and phone are folded into them by ``to_event_body``.
    Values are not validated here; the calendar service decides whether the
    resulting event is acceptable.
    """

    id: str | None = None
    therapist: str | None = None
    label: str | None = None
    phone: str | None = None
    start: str | None = None
    end: str | None = None

    @property
    def summary(self) -> str:
        return f'{self.therapist}{TITLE_SEPARATOR}{self.label}'

    @property
    def description(self) -> str:
        return f'{PHONE_PREFIX}{self.phone or PHONE_NOT_PROVIDED}'

    def to_event_body(self) -> dict:
        return {
            'summary': self.summary,
            'description': self.description,
            'start': {'dateTime': self.start},
            'end': {'dateTime': self.end},
        }
