"""Calendar widget options and the conversions between widget and gateway data."""

from datetime import date, datetime, time, timezone, tzinfo

MOBILE_BREAKPOINT = 768
TITLE_SEPARATOR = ' - '

BUTTON_TEXT = {
    'today': 'Hoje',
    'month': 'Mês',
    'week': 'Semana',
    'day': 'Dia',
    'list': 'Lista',
}


def is_mobile(viewport_width: int) -> bool:
    return viewport_width < MOBILE_BREAKPOINT


def calendar_options(viewport_width: int) -> dict:
    """Options for the calendar widget, chosen once from the viewport width."""
    mobile = is_mobile(viewport_width)
    return {
        'initialView': 'timeGridDay' if mobile else 'timeGridWeek',
        'locale': 'pt-br',
        'buttonText': dict(BUTTON_TEXT),
        'slotLabelFormat': {'hour': '2-digit', 'minute': '2-digit', 'omitZeroMinute': False, 'meridiem': False},
        'eventTimeFormat': {'hour': '2-digit', 'minute': '2-digit', 'meridiem': False},
        'headerToolbar': {
            'left': 'prev,next' if mobile else 'prev,next today',
            'center': 'title',
            'right': 'dayGridMonth,timeGridDay' if mobile else 'dayGridMonth,timeGridWeek',
        },
        'selectable': True,
        'allDaySlot': False,
        'slotMinTime': '07:00:00',
        'slotMaxTime': '20:00:00',
        'height': 'auto',
        'handleWindowResize': True,
    }


def _moment(boundary: dict | None) -> str | None:
    boundary = boundary or {}
    return boundary.get('dateTime') or boundary.get('date')


def to_calendar_event(raw: dict) -> dict:
    return {
        'id': raw.get('id'),
        'title': raw.get('summary') or '',
        'start': _moment(raw.get('start')),
        'end': _moment(raw.get('end')),
        'extendedProps': {'description': raw.get('description') or ''},
    }


def split_title(title: str) -> tuple[str, str]:
    """Split ``"<therapist> - <label>"`` on the first separator.

    A title without the separator is used as both therapist and label.
    """
    therapist, separator, label = title.partition(TITLE_SEPARATOR)
    if not separator:
        return title, title
    return therapist, label or title


def slot_time(moment: datetime) -> str:
    return moment.strftime('%H:%M')


def compose_timestamp(date_base: date, clock: str, tz: tzinfo | None = None) -> str:
    """Join a calendar day and an ``HH:MM`` field into a UTC ISO 8601 string.

    Without ``tz`` the wall time is interpreted in the machine's local zone.
    """
    moment = datetime.combine(date_base, time.fromisoformat(clock))
    moment = moment.replace(tzinfo=tz) if tz is not None else moment.astimezone()
    return moment.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')
