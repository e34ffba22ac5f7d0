"""Editable form state for the patient and appointment modals.

Validation mirrors what the HTML form enforces: required fields and
bounded choices. Nothing else is checked client-side.
"""
from __future__ import annotations
from datetime import datetime
from typing import Iterable, Optional, Union
from .models import (
    APPOINTMENT_STATUSES,
    GENDERS,
    Appointment,
    AppointmentInput,
    Patient,
    PatientInput,
    Service,
)
from .scheduling import compute_end_time


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class PatientForm:
    required = ("first_name", "last_name")

    def __init__(self, patient: Optional[Patient] = None):
        self.open(patient)

    def open(self, patient: Optional[Patient] = None) -> None:
        self.editing = patient
        self.first_name = patient.first_name if patient else ""
        self.last_name = patient.last_name if patient else ""
        # date inputs only take YYYY-MM-DD
        self.birth_date = patient.birth_date[:10] if patient and patient.birth_date else ""
        self.gender = (patient.gender or "") if patient else ""
        self.phone = (patient.phone or "") if patient else ""
        self.address = (patient.address or "") if patient else ""
        self.medical_history = (patient.medical_history or "") if patient else ""

    @property
    def entity_id(self) -> Optional[str]:
        return self.editing.id if self.editing else None

    @property
    def title(self) -> str:
        return "Editar Paciente" if self.editing else "Crear Nuevo Paciente"

    @property
    def submit_label(self) -> str:
        return "Guardar Cambios" if self.editing else "Crear Paciente"

    def validate(self) -> list[str]:
        """Names of fields that would block submission."""
        problems = [name for name in self.required if not getattr(self, name).strip()]
        if self.gender and self.gender not in GENDERS:
            problems.append("gender")
        return problems

    def to_input(self) -> PatientInput:
        return PatientInput(
            first_name=self.first_name,
            last_name=self.last_name,
            birth_date=_blank_to_none(self.birth_date),
            gender=_blank_to_none(self.gender),
            phone=_blank_to_none(self.phone),
            address=_blank_to_none(self.address),
            medical_history=_blank_to_none(self.medical_history),
        )


class AppointmentForm:
    required = ("patient_id", "service_id", "start_time")

    def __init__(self, patients: Iterable[Patient] = (), services: Iterable[Service] = ()):
        self.patients = [p for p in patients if not p.is_deleted]
        self.services = list(services)
        self.open()

    def open(self, appointment: Optional[Appointment] = None, initial_start: Optional[datetime] = None) -> None:
        self.editing = appointment
        self.patient_id = appointment.patient_id if appointment else ""
        self.service_id = appointment.service_id if appointment else ""
        self.start_time: Optional[datetime] = appointment.start_time if appointment else initial_start
        self.status = appointment.status if appointment else "pending"
        self.patient_search = ""

    @property
    def entity_id(self) -> Optional[str]:
        return self.editing.id if self.editing else None

    @property
    def title(self) -> str:
        return "Editar Cita" if self.editing else "Crear Nueva Cita"

    @property
    def submit_label(self) -> str:
        return "Guardar Cambios" if self.editing else "Crear Cita"

    def set_start(self, value: Union[str, datetime, None]) -> None:
        """Accept a datetime-local string (YYYY-MM-DDTHH:MM) or a datetime."""
        if isinstance(value, str):
            value = datetime.fromisoformat(value) if value else None
        self.start_time = value

    @property
    def patient_options(self) -> list[Patient]:
        term = self.patient_search.lower()
        return [
            p for p in self.patients
            if term in p.first_name.lower() or term in p.last_name.lower()
        ]

    @property
    def service_options(self) -> list[tuple[str, str]]:
        return [(s.id, f"{s.name} ({s.duration} min)") for s in self.services]

    def validate(self) -> list[str]:
        problems = [name for name in self.required if not getattr(self, name)]
        if self.status not in APPOINTMENT_STATUSES:
            problems.append("status")
        return problems

    def to_input(self, service: Service) -> AppointmentInput:
        """Build the write body; the end time derives from the chosen service."""
        return AppointmentInput(
            patient_id=self.patient_id,
            service_id=self.service_id,
            start_time=self.start_time,
            end_time=compute_end_time(self.start_time, service),
            status=self.status,
        )
