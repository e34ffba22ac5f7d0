from datetime import datetime, timedelta, timezone
from clinic_portal.models import Appointment, Patient, Service
from clinic_portal.scheduling import (
    compute_end_time,
    join_appointment,
    render_event,
    resolve_reschedule,
    status_class,
    to_calendar_event,
)
from conftest import load

UTC = timezone.utc
PATIENTS = [Patient.model_validate(p) for p in load("patients.json")["pacientes"]]
SERVICES = [Service.model_validate(s) for s in load("services.json")["servicios"]]
RAW = [Appointment.model_validate(a) for a in load("appointments.json")["citas"]]


def test_end_time_derives_from_service_duration():
    start = datetime(2025, 3, 10, 9, 0, tzinfo=UTC)
    assert compute_end_time(start, SERVICES[0]) == datetime(2025, 3, 10, 9, 30, tzinfo=UTC)
    assert compute_end_time(start, SERVICES[1]) - start == timedelta(minutes=60)


def test_join_uses_placeholders_for_unknown_references():
    known = join_appointment(RAW[0], PATIENTS, SERVICES)
    assert known.patient.first_name == "Ana"
    assert known.service.name == "Consulta General"

    unknown = join_appointment(RAW[1], PATIENTS, SERVICES)
    assert unknown.patient.id == "p9"
    assert unknown.patient.first_name == "Desconocido"
    assert unknown.patient.last_name == ""
    assert unknown.service.name == "Desconocido"
    assert unknown.service.duration == 30


def test_calendar_event_carries_the_appointment():
    appt = join_appointment(RAW[0], PATIENTS, SERVICES)
    event = to_calendar_event(appt)
    assert event.id == "a1"
    assert event.title == "Ana Ruiz - Consulta General"
    assert event.start == appt.start_time and event.end == appt.end_time
    assert event.resource is appt
    assert event.all_day is False


def test_status_classes():
    assert status_class("pending") == "bg-yellow-200 text-yellow-900"
    assert status_class("confirmed") == "bg-green-200 text-green-900"
    assert status_class("cancelled") == "bg-red-200 text-red-900"
    assert status_class("completed") == "bg-blue-200 text-blue-900"
    assert status_class("rescheduled") == "bg-gray-200 text-gray-900"


def test_render_event_shows_time_range():
    rendered = render_event(to_calendar_event(join_appointment(RAW[0], PATIENTS, SERVICES)))
    assert rendered["time"] == "09:00 - 09:30"
    assert rendered["class"] == "bg-green-200 text-green-900"


def test_reschedule_keeps_everything_but_the_time():
    appt = RAW[0]
    new_start = datetime(2025, 3, 10, 10, 0, tzinfo=UTC)
    body = resolve_reschedule(appt, new_start, SERVICES)
    assert body.start_time == new_start
    assert body.end_time == datetime(2025, 3, 10, 10, 30, tzinfo=UTC)
    assert (body.patient_id, body.service_id, body.status) == ("p1", "s1", "confirmed")


def test_reschedule_for_unloaded_service_is_dropped():
    assert resolve_reschedule(RAW[1], datetime(2025, 3, 12, 8, 0, tzinfo=UTC), SERVICES) is None
