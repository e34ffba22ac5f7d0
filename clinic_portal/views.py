"""Administrative screens: the patient table and the appointment calendar.

Both screens get the session and the API client injected. Every call result
goes through `_handle`, which logs the session out on an auth failure and
keeps the message for inline display.
"""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional
from .client import NOT_AUTHENTICATED, ClinicApiClient
from .forms import AppointmentForm, PatientForm
from .models import ApiResult, Appointment, ErrorKind, Patient, Service
from .scheduling import (
    CalendarEvent,
    find_service,
    join_appointment,
    render_event,
    resolve_reschedule,
    to_calendar_event,
)
from .session import SessionStore

logger = logging.getLogger(__name__)

SERVICE_NOT_FOUND = "Servicio no encontrado. Por favor, recarga la página."
REQUIRED_FIELDS = "Completa los campos obligatorios."
NO_OPEN_FORM = "No hay ningún formulario abierto."


class _AdminScreen:
    def __init__(self, session: SessionStore, api: ClinicApiClient):
        self.session = session
        self.api = api
        self.loading = False
        self.error: Optional[str] = None
        self.error_kind: Optional[ErrorKind] = None
        self.form = None
        self.pending_delete: Optional[str] = None

    def _handle(self, result: ApiResult, action: str) -> bool:
        """Record a failed result; an auth failure forces a logout."""
        if result.ok:
            return True
        if result.requires_logout:
            logger.warning("Forcing logout after %s", action)
            self.session.logout()
        else:
            logger.error("Error %s: %s", action, result.message)
        self._fail(result.message, result.kind)
        return False

    def _fail(self, message: str, kind: Optional[ErrorKind] = None) -> None:
        self.error = message
        self.error_kind = kind

    def _clear_error(self) -> None:
        self.error = None
        self.error_kind = None

    def close_form(self) -> None:
        self.form = None

    def request_delete(self, entity_id: str) -> None:
        """Open the confirmation step. Nothing is deleted until confirm_delete()."""
        self.pending_delete = entity_id

    def cancel_delete(self) -> None:
        self.pending_delete = None


class PatientListView(_AdminScreen):
    def __init__(self, session: SessionStore, api: ClinicApiClient):
        super().__init__(session, api)
        self.patients: list[Patient] = []
        self.search_term = ""

    async def mount(self) -> None:
        await self.refresh()

    async def refresh(self) -> None:
        self.loading = True
        self._clear_error()
        try:
            result = await self.api.list_patients(self.search_term or None)
            if self._handle(result, "fetching patients"):
                self.patients = result.value
        finally:
            self.loading = False

    async def search(self, term: str) -> None:
        """Server-side name search, run on explicit action only."""
        self.search_term = term
        await self.refresh()

    def open_create(self) -> PatientForm:
        self.form = PatientForm()
        return self.form

    def open_edit(self, patient: Patient) -> PatientForm:
        self.form = PatientForm(patient)
        return self.form

    async def save(self, form: Optional[PatientForm] = None) -> bool:
        form = form or self.form
        if form is None:
            self._fail(NO_OPEN_FORM)
            return False
        if form.validate():
            self._fail(REQUIRED_FIELDS)
            return False
        self.loading = True
        self._clear_error()
        try:
            if form.entity_id:
                result = await self.api.update_patient(form.entity_id, form.to_input())
            else:
                result = await self.api.create_patient(form.to_input())
        finally:
            self.loading = False
        if not self._handle(result, "saving patient"):
            return False
        await self.refresh()
        self.close_form()
        return True

    async def confirm_delete(self) -> bool:
        patient_id, self.pending_delete = self.pending_delete, None
        if patient_id is None:
            return False
        self.loading = True
        self._clear_error()
        try:
            result = await self.api.delete_patient(patient_id)
        finally:
            self.loading = False
        if not self._handle(result, "deleting patient"):
            return False
        await self.refresh()
        return True


class AppointmentCalendarView(_AdminScreen):
    # the toolbar search box is rendered but disabled
    search_enabled = False

    def __init__(self, session: SessionStore, api: ClinicApiClient):
        super().__init__(session, api)
        self.appointments: list[Appointment] = []
        self.patients: list[Patient] = []
        self.services: list[Service] = []

    async def mount(self) -> None:
        """Load the pickers' reference data, then the appointments.

        Appointments are only fetched once both patients and services are
        non-empty, so a clinic with neither never shows its calendar entries.
        """
        if not self.session.token:
            self._fail(NOT_AUTHENTICATED, ErrorKind.UNAUTHENTICATED)
            return
        await self.load_patients()
        if self.session.token:
            await self.load_services()
        if self.patients and self.services:
            await self.refresh()

    async def load_patients(self) -> None:
        result = await self.api.list_patients()
        if self._handle(result, "fetching patients for the appointment form"):
            self.patients = [p for p in result.value if not p.is_deleted]

    async def load_services(self) -> None:
        result = await self.api.list_services()
        if self._handle(result, "fetching services for the appointment form"):
            self.services = result.value

    async def refresh(self) -> None:
        self.loading = True
        self._clear_error()
        try:
            result = await self.api.list_appointments()
            if self._handle(result, "fetching appointments"):
                self.appointments = [join_appointment(a, self.patients, self.services) for a in result.value]
        finally:
            self.loading = False

    @property
    def events(self) -> list[CalendarEvent]:
        return [to_calendar_event(a) for a in self.appointments]

    def rendered_events(self) -> list[dict]:
        return [render_event(e) for e in self.events]

    def event_for(self, appointment_id: str) -> Optional[CalendarEvent]:
        return next((e for e in self.events if e.id == appointment_id), None)

    def open_create(self, initial_start: Optional[datetime] = None) -> AppointmentForm:
        self.form = AppointmentForm(self.patients, self.services)
        self.form.open(initial_start=initial_start)
        return self.form

    def open_edit(self, appointment: Appointment) -> AppointmentForm:
        self.form = AppointmentForm(self.patients, self.services)
        self.form.open(appointment)
        return self.form

    def select_slot(self, start: datetime) -> AppointmentForm:
        return self.open_create(initial_start=start)

    def select_event(self, event: CalendarEvent) -> AppointmentForm:
        return self.open_edit(event.resource)

    async def save(self, form: Optional[AppointmentForm] = None) -> bool:
        form = form or self.form
        if form is None:
            self._fail(NO_OPEN_FORM)
            return False
        if form.validate():
            self._fail(REQUIRED_FIELDS)
            return False
        service = find_service(self.services, form.service_id)
        if service is None:
            self._fail(SERVICE_NOT_FOUND)
            return False
        return await self._write(form.entity_id, form.to_input(service), close=True)

    async def _write(self, appointment_id: Optional[str], body, close: bool = False) -> bool:
        self.loading = True
        self._clear_error()
        try:
            if appointment_id:
                result = await self.api.update_appointment(appointment_id, body)
            else:
                result = await self.api.create_appointment(body)
        finally:
            self.loading = False
        if not self._handle(result, "saving appointment"):
            return False
        await self.refresh()
        if close:
            self.close_form()
        return True

    async def move_event(self, event: CalendarEvent, start: datetime, end: Optional[datetime] = None) -> bool:
        """Drag to a new slot. The gesture's end is ignored, see resolve_reschedule."""
        appointment = event.resource
        body = resolve_reschedule(appointment, start, self.services)
        if body is None:
            self._fail(SERVICE_NOT_FOUND)
            return False
        return await self._write(appointment.id, body)

    async def resize_event(self, event: CalendarEvent, start: datetime, end: Optional[datetime] = None) -> bool:
        # same as a move: the service duration wins over the resized edge
        return await self.move_event(event, start, end)

    async def confirm_delete(self) -> bool:
        appointment_id, self.pending_delete = self.pending_delete, None
        if appointment_id is None:
            return False
        self.loading = True
        self._clear_error()
        try:
            result = await self.api.delete_appointment(appointment_id)
        finally:
            self.loading = False
        if not self._handle(result, "deleting appointment"):
            return False
        await self.refresh()
        return True
