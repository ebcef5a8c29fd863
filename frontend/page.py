"""Calendar page served to clinic staff.

This page is the UI staff use. It loads the FullCalendar widget from a CDN
and drives the booking and cancellation workflow in the browser. The
agenda itself comes from ``GET /eventos`` on this app, which reads the
gateway through ``GatewayClient`` and maps each event with
``to_calendar_event`` and ``split_title``. Create and cancel go straight to
the gateway configured in ``GATEWAY_URL``, since start and end must be
composed in the browser's own time zone. The widget options come from
``calendar_options`` for both viewport classes; the script picks one set
once, at render time.
"""

import json

from fastapi import Depends, FastAPI
from fastapi.responses import HTMLResponse, JSONResponse

from frontend.calendar_view import MOBILE_BREAKPOINT, calendar_options, split_title, to_calendar_event
from frontend.client import GatewayClient, GatewayRequestError
from frontend.config import load_ui_settings
from frontend.session import PHONE_NOT_PROVIDED

FULLCALENDAR_CDN = 'https://cdn.jsdelivr.net/npm/fullcalendar@6.1.15/index.global.min.js'
FULLCALENDAR_LOCALES_CDN = 'https://cdn.jsdelivr.net/npm/@fullcalendar/core@6.1.15/locales-all.global.min.js'

PAGE_CSS = """
body { margin: 0; font-family: system-ui, sans-serif; background: #f4f6f8; color: #1f2933; }
.main-layout { max-width: 1200px; margin: 0 auto; padding: 16px; }
.header h1 { margin: 0 0 4px; font-size: 1.6rem; }
.header p { margin: 0 0 16px; color: #52606d; }
.calendar-container { background: #fff; border-radius: 8px; padding: 8px; }
.loading-overlay-global { position: fixed; inset: 0; background: rgba(255,255,255,.8); display: none;
  flex-direction: column; align-items: center; justify-content: center; z-index: 1000; }
.loading-overlay-global.active { display: flex; }
.spinner { width: 40px; height: 40px; border: 4px solid #d9e2ec; border-top-color: #2f80ed;
  border-radius: 50%; animation: spin 1s linear infinite; }
@keyframes spin { to { transform: rotate(360deg); } }
.modal-overlay { position: fixed; inset: 0; background: rgba(0,0,0,.4); display: none;
  align-items: flex-end; justify-content: center; z-index: 900; }
.modal-overlay.active { display: flex; }
.modal-content { background: #fff; width: 100%; max-width: 480px; border-radius: 12px 12px 0 0; padding: 20px; }
@media (min-width: 768px) { .modal-overlay { align-items: center; } .modal-content { border-radius: 12px; } }
.input-group { display: flex; flex-direction: column; margin-bottom: 12px; }
.time-inputs-row { display: flex; gap: 12px; }
.modal-input { padding: 8px; border: 1px solid #cbd2d9; border-radius: 6px; font-size: 1rem; }
.modal-actions { display: flex; justify-content: flex-end; gap: 8px; }
.btn-cancel, .btn-save, .btn-delete { padding: 8px 16px; border: 0; border-radius: 6px; cursor: pointer; }
.btn-save { background: #2f80ed; color: #fff; }
.btn-delete { background: #e12d39; color: #fff; }
.hidden { display: none; }
"""

PAGE_SCRIPT = """
(function () {
  const config = window.AGENDA_CONFIG;
  const mobile = window.innerWidth < config.mobileBreakpoint;
  const options = mobile ? config.options.mobile : config.options.desktop;
  const api = config.gatewayUrl + '/api';
  const $ = (id) => document.getElementById(id);

  let selectedSlot = null;
  let selectedEvent = null;

  const setLoading = (on) => $('loading').classList.toggle('active', on);
  const pad = (n) => String(n).padStart(2, '0');
  const toTime = (date) => pad(date.getHours()) + ':' + pad(date.getMinutes());

  async function request(method, path, body) {
    const response = await fetch(api + path, {
      method: method,
      headers: body ? {'Content-Type': 'application/json'} : {},
      body: body ? JSON.stringify(body) : undefined,
    });
    const payload = await response.json().catch(() => null);
    if (!response.ok) {
      throw new Error((payload && payload.error) || 'Request failed with status code ' + response.status);
    }
    return payload;
  }

  async function fetchEvents() {
    setLoading(true);
    try {
      const response = await fetch(config.eventsUrl);
      const events = await response.json();
      if (!response.ok) {
        throw new Error(events.error);
      }
      calendar.removeAllEvents();
      events.forEach((event) => calendar.addEvent(event));
    } catch (error) {
      console.error('Erro ao buscar eventos:', error);
    } finally {
      setLoading(false);
    }
  }

  function openModal(viewing) {
    $('modal-title').textContent = viewing ? 'Detalhes do Agendamento' : 'Novo Agendamento';
    $('view-mode').classList.toggle('hidden', !viewing);
    $('edit-mode').classList.toggle('hidden', viewing);
    $('btn-delete').classList.toggle('hidden', !viewing);
    $('btn-save').classList.toggle('hidden', viewing);
    $('modal').classList.add('active');
  }

  function closeModal() {
    $('modal').classList.remove('active');
    selectedSlot = null;
    selectedEvent = null;
  }

  function handleDateSelect(info) {
    selectedSlot = info;
    selectedEvent = null;
    $('session-name').value = '';
    $('therapist-name').value = '';
    $('patient-phone').value = '';
    $('start-time').value = toTime(info.start);
    $('end-time').value = toTime(info.end);
    $('modal-time').textContent = '\\u{1F4C5} ' + info.start.toLocaleDateString('pt-BR');
    openModal(false);
  }

  function handleEventClick(info) {
    const event = info.event;
    selectedEvent = event;
    selectedSlot = null;
    const clock = (date) => date ? date.toLocaleTimeString([], {hour: '2-digit', minute: '2-digit'}) : '';
    $('view-therapist').textContent = event.extendedProps.therapist;
    $('view-patient').textContent = event.extendedProps.label;
    $('view-phone').textContent = event.extendedProps.phone;
    $('view-time').textContent = clock(event.start) + ' - ' + clock(event.end);
    $('modal-time').textContent = '\\u{1F4C5} Sess\\u00e3o Agendada';
    openModal(true);
  }

  async function handleSave() {
    const sessionName = $('session-name').value;
    const therapistName = $('therapist-name').value;
    const startTime = $('start-time').value;
    const endTime = $('end-time').value;
    if (!(sessionName && therapistName && selectedSlot && startTime && endTime)) {
      alert('Por favor, preencha os campos obrigat\\u00f3rios (*).');
      return;
    }
    setLoading(true);
    try {
      const dateBase = selectedSlot.startStr.split('T')[0];
      await request('POST', '/agendar', {
        resumo: sessionName,
        terapeuta: therapistName,
        telefone: $('patient-phone').value,
        inicio: new Date(dateBase + 'T' + startTime).toISOString(),
        fim: new Date(dateBase + 'T' + endTime).toISOString(),
      });
      closeModal();
      fetchEvents();
    } catch (error) {
      alert('Erro ao salvar: ' + error.message);
      setLoading(false);
    }
  }

  async function handleDelete() {
    if (!window.confirm('Tem certeza que deseja cancelar a sess\\u00e3o de ' + selectedEvent.title + '?')) {
      return;
    }
    setLoading(true);
    try {
      await request('DELETE', '/agendar/' + encodeURIComponent(selectedEvent.id));
      closeModal();
      fetchEvents();
    } catch (error) {
      alert('Erro ao cancelar: ' + error.message);
      setLoading(false);
    }
  }

  const calendar = new FullCalendar.Calendar($('calendar'), Object.assign({}, options, {
    select: handleDateSelect,
    eventClick: handleEventClick,
  }));
  calendar.render();

  $('btn-close').addEventListener('click', closeModal);
  $('btn-save').addEventListener('click', handleSave);
  $('btn-delete').addEventListener('click', handleDelete);

  fetchEvents();
})();
"""

PAGE_BODY = """
<div class="main-layout">
  <div id="loading" class="loading-overlay-global">
    <div class="spinner"></div>
    <p>Processando...</p>
  </div>

  <header class="header">
    <h1>Agenda da Clínica</h1>
    <p>Toque no horário para marcar ou no evento para cancelar</p>
  </header>

  <div class="calendar-container"><div id="calendar"></div></div>

  <div id="modal" class="modal-overlay">
    <div class="modal-content">
      <h3 id="modal-title"></h3>
      <p id="modal-time" class="modal-time"></p>

      <div id="view-mode" class="event-details-view">
        <p><strong>Terapeuta:</strong> <span id="view-therapist"></span></p>
        <p><strong>Paciente:</strong> <span id="view-patient"></span></p>
        <p><strong>Telefone:</strong> <span id="view-phone"></span></p>
        <p><strong>Horário:</strong> <span id="view-time"></span></p>
      </div>

      <div id="edit-mode">
        <div class="time-inputs-row">
          <div class="input-group small">
            <label for="start-time">Início</label>
            <input id="start-time" type="time" class="modal-input">
          </div>
          <div class="input-group small">
            <label for="end-time">Fim</label>
            <input id="end-time" type="time" class="modal-input">
          </div>
        </div>
        <div class="input-group">
          <label for="session-name">Nome da Sessão / Paciente *</label>
          <input id="session-name" type="text" placeholder="Ex: Consulta João" class="modal-input">
        </div>
        <div class="input-group">
          <label for="patient-phone">Telefone / WhatsApp</label>
          <input id="patient-phone" type="tel" placeholder="Ex: (61) 99999-9999" class="modal-input">
        </div>
        <div class="input-group">
          <label for="therapist-name">Nome do Terapeuta *</label>
          <input id="therapist-name" type="text" placeholder="Ex: Dra. Maria" class="modal-input">
        </div>
      </div>

      <div class="modal-actions">
        <button id="btn-close" class="btn-cancel">Fechar</button>
        <button id="btn-delete" class="btn-delete">Cancelar Sessão</button>
        <button id="btn-save" class="btn-save">Confirmar</button>
      </div>
    </div>
  </div>
</div>
"""


def page_config(gateway_url: str) -> dict:
    return {
        'gatewayUrl': gateway_url,
        'eventsUrl': 'eventos',
        'mobileBreakpoint': MOBILE_BREAKPOINT,
        'options': {
            'mobile': calendar_options(MOBILE_BREAKPOINT - 1),
            'desktop': calendar_options(MOBILE_BREAKPOINT),
        },
    }


def render_page(gateway_url: str) -> str:
    config_json = json.dumps(page_config(gateway_url), ensure_ascii=False).replace('</', '<\\/')
    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Agenda da Clínica</title>
  <style>{PAGE_CSS}</style>
  <script src="{FULLCALENDAR_CDN}"></script>
  <script src="{FULLCALENDAR_LOCALES_CDN}"></script>
</head>
<body>
{PAGE_BODY}
<script>window.AGENDA_CONFIG = {config_json};</script>
<script>{PAGE_SCRIPT}</script>
</body>
</html>
"""


app = FastAPI()


@app.get('/', response_class=HTMLResponse)
def agenda_page():
    settings = load_ui_settings()
    return HTMLResponse(content=render_page(settings.gateway_url))


def agenda_event(raw: dict) -> dict:
    event = to_calendar_event(raw)
    therapist, label = split_title(event['title'])
    event['extendedProps'].update(
        therapist=therapist,
        label=label,
        phone=event['extendedProps']['description'] or PHONE_NOT_PROVIDED,
    )
    return event


def get_gateway_client():
    with GatewayClient(load_ui_settings().gateway_url) as client:
        yield client


@app.get('/eventos')
def agenda_events(client: GatewayClient = Depends(get_gateway_client)):
    try:
        raw_events = client.fetch_events()
    except GatewayRequestError as exc:
        return JSONResponse(status_code=502, content={'error': exc.message})
    return [agenda_event(raw) for raw in raw_events]
