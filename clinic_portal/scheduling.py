"""Bridge between appointments and the calendar widget's event model."""
from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional
from pydantic import BaseModel
from .models import Appointment, AppointmentInput, Patient, Service

logger = logging.getLogger(__name__)

DEFAULT_VIEW = "week"
VIEWS = ("month", "week", "day", "agenda")
CULTURE = "es"

STATUS_CLASSES = {
    "pending": "bg-yellow-200 text-yellow-900",
    "confirmed": "bg-green-200 text-green-900",
    "cancelled": "bg-red-200 text-red-900",
    "completed": "bg-blue-200 text-blue-900",
}
DEFAULT_STATUS_CLASS = "bg-gray-200 text-gray-900"


class CalendarEvent(BaseModel):
    id: str
    title: str
    start: datetime
    end: datetime
    resource: Appointment
    all_day: bool = False


def compute_end_time(start: datetime, service: Service) -> datetime:
    return start + timedelta(minutes=service.duration)


def find_service(services: Iterable[Service], service_id: str) -> Optional[Service]:
    return next((s for s in services if s.id == service_id), None)


def join_appointment(appointment: Appointment, patients: Iterable[Patient], services: Iterable[Service]) -> Appointment:
    """Attach patient and service by local lookup, with placeholders when missing."""
    patient = next((p for p in patients if p.id == appointment.patient_id), None)
    service = find_service(services, appointment.service_id)
    return appointment.model_copy(update={
        "patient": patient or Patient.placeholder(appointment.patient_id),
        "service": service or Service.placeholder(appointment.service_id),
    })


def to_calendar_event(appointment: Appointment) -> CalendarEvent:
    patient = appointment.patient or Patient.placeholder(appointment.patient_id)
    service = appointment.service or Service.placeholder(appointment.service_id)
    return CalendarEvent(
        id=appointment.id,
        title=f"{patient.first_name} {patient.last_name} - {service.name}",
        start=appointment.start_time,
        end=appointment.end_time,
        resource=appointment,
    )


def status_class(status: str) -> str:
    return STATUS_CLASSES.get(status, DEFAULT_STATUS_CLASS)


def render_event(event: CalendarEvent) -> dict:
    """What the event cell shows: title, status colour and HH:MM range."""
    return {
        "id": event.id,
        "title": event.title,
        "class": status_class(event.resource.status),
        "time": f"{event.start:%H:%M} - {event.end:%H:%M}",
        "start": event.start.isoformat(),
        "end": event.end.isoformat(),
    }


def resolve_reschedule(appointment: Appointment, new_start: datetime, services: Iterable[Service]) -> Optional[AppointmentInput]:
    """Turn a drag or resize gesture into an update body.

    Only the new start is honoured. The end always derives from the service
    duration, so a resize that moves just the end edge changes nothing.
    Returns None when the service is not loaded.
    """
    service = find_service(services, appointment.service_id)
    if service is None:
        logger.warning("Service %s not loaded, ignoring reschedule of %s", appointment.service_id, appointment.id)
        return None
    return AppointmentInput(
        patient_id=appointment.patient_id,
        service_id=appointment.service_id,
        start_time=new_start,
        end_time=compute_end_time(new_start, service),
        status=appointment.status,
    )
