from datetime import datetime, timezone
from clinic_portal.forms import AppointmentForm, PatientForm
from clinic_portal.models import Appointment, Patient, Service
from conftest import load

PATIENTS = [Patient.model_validate(p) for p in load("patients.json")["pacientes"]]
SERVICES = [Service.model_validate(s) for s in load("services.json")["servicios"]]


def test_new_patient_form_requires_names():
    form = PatientForm()
    assert form.title == "Crear Nuevo Paciente"
    assert form.entity_id is None
    assert form.validate() == ["first_name", "last_name"]

    form.first_name, form.last_name = "Ana", "  "
    assert form.validate() == ["last_name"]


def test_blank_optionals_are_sent_as_null():
    form = PatientForm()
    form.first_name, form.last_name, form.phone = "Ana", "Ruiz", "   "
    body = form.to_input()
    assert body.phone is None
    assert body.birth_date is None
    assert body.medical_history is None


def test_edit_form_is_seeded_from_patient():
    form = PatientForm(PATIENTS[0])
    assert form.title == "Editar Paciente"
    assert form.submit_label == "Guardar Cambios"
    assert form.entity_id == "p1"
    assert form.birth_date == "1990-05-04"
    assert form.address == ""
    assert form.to_input().birth_date == "1990-05-04"


def test_gender_is_a_bounded_choice():
    form = PatientForm(PATIENTS[0])
    form.gender = "Desconocido"
    assert form.validate() == ["gender"]


def test_appointment_picker_skips_soft_deleted_patients():
    form = AppointmentForm(PATIENTS, SERVICES)
    assert [p.id for p in form.patient_options] == ["p1", "p2"]

    form.patient_search = "GÓM"
    assert [p.id for p in form.patient_options] == ["p2"]


def test_service_options_show_duration():
    form = AppointmentForm(PATIENTS, SERVICES)
    assert form.service_options == [("s1", "Consulta General (30 min)"), ("s2", "Cardiología (60 min)")]


def test_new_appointment_defaults():
    start = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
    form = AppointmentForm(PATIENTS, SERVICES)
    form.open(initial_start=start)
    assert form.status == "pending"
    assert form.start_time == start
    assert form.title == "Crear Nueva Cita"
    assert form.validate() == ["patient_id", "service_id"]


def test_start_accepts_datetime_local_strings():
    form = AppointmentForm(PATIENTS, SERVICES)
    form.set_start("2025-03-10T09:00")
    assert form.start_time == datetime(2025, 3, 10, 9, 0)
    form.set_start("")
    assert form.start_time is None


def test_edit_form_seeded_from_appointment():
    appt = Appointment.model_validate(load("appointments.json")["citas"][0])
    form = AppointmentForm(PATIENTS, SERVICES)
    form.open(appt)
    assert (form.patient_id, form.service_id, form.status) == ("p1", "s1", "confirmed")
    assert form.entity_id == "a1"
    assert form.submit_label == "Guardar Cambios"


def test_status_must_be_known():
    form = AppointmentForm(PATIENTS, SERVICES)
    form.open(initial_start=datetime(2025, 3, 10, 9, 0))
    form.patient_id, form.service_id, form.status = "p1", "s1", "archived"
    assert form.validate() == ["status"]


def test_to_input_derives_end_time():
    form = AppointmentForm(PATIENTS, SERVICES)
    form.open(initial_start=datetime(2025, 3, 10, 9, 0))
    form.patient_id, form.service_id = "p1", "s2"
    body = form.to_input(SERVICES[1])
    assert body.end_time == datetime(2025, 3, 10, 10, 0)
