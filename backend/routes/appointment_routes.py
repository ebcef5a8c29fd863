import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.routing import APIRoute
from pydantic import BaseModel

from backend.models.appointment import Appointment
from backend.services.calendar_gateway import CalendarGateway, CalendarServiceError

logger = logging.getLogger(__name__)


class ErrorReportingRoute(APIRoute):
    """Turns any failure inside a handler into ``500 {"error": message}``.

    The conversion happens inside the middleware stack so the response still
    carries the CORS headers the browser needs to read the message.
    """

    def get_route_handler(self) -> Callable:
        handler = super().get_route_handler()

        async def report_errors(request: Request) -> Response:
            try:
                return await handler(request)
            except (HTTPException, RequestValidationError):
                raise
            except CalendarServiceError as exc:
                return JSONResponse(status_code=500, content={'error': exc.message})
            except Exception as exc:
                logger.exception('Unhandled error on %s %s', request.method, request.url.path)
                return JSONResponse(status_code=500, content={'error': str(exc)})

        return report_errors


router = APIRouter(tags=['appointments'], route_class=ErrorReportingRoute)


class CreateAppointmentRequest(BaseModel):
    resumo: str | None = None
    terapeuta: str | None = None
    telefone: str | None = None
    inicio: str | None = None
    fim: str | None = None

    def to_appointment(self) -> Appointment:
        return Appointment(
            therapist=self.terapeuta,
            label=self.resumo,
            phone=self.telefone,
            start=self.inicio,
            end=self.fim,
        )


class CancelledResponse(BaseModel):
    message: str


def get_calendar_gateway(request: Request) -> CalendarGateway:
    gateway = getattr(request.app.state, 'calendar_gateway', None)
    if gateway is None:
        raise CalendarServiceError('Calendar credentials are not configured.')
    return gateway


@router.get('/eventos')
def list_events(gateway: CalendarGateway = Depends(get_calendar_gateway)) -> list[dict]:
    return gateway.list_upcoming()


@router.post('/agendar', status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    gateway: CalendarGateway = Depends(get_calendar_gateway),
) -> dict:
    return gateway.insert(data.to_appointment().to_event_body())


@router.delete('/agendar/{event_id}', response_model=CancelledResponse)
def cancel_appointment(event_id: str, gateway: CalendarGateway = Depends(get_calendar_gateway)):
    gateway.delete(event_id)
    return {'message': 'Cancelado.'}
