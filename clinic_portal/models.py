from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

APPOINTMENT_STATUSES = ("pending", "confirmed", "cancelled", "completed")
GENDERS = ("Masculino", "Femenino", "Otro")

UNKNOWN_LABEL = "Desconocido"
# duration shown for an appointment whose service is not loaded
PLACEHOLDER_DURATION = 30

_WIRE = {"populate_by_name": True, "coerce_numbers_to_str": True}


class Identity(BaseModel):
    id: str
    email: str
    role: str = "admin"

    model_config = _WIRE


class LoginResult(BaseModel):
    success: bool
    message: str


class Patient(BaseModel):
    id: str
    first_name: str = Field(alias="primerNombre")
    last_name: str = Field(alias="apellido")
    birth_date: Optional[str] = Field(default=None, alias="fechaNacimiento")  # ISO-8601 date or dateTime
    gender: Optional[str] = Field(default=None, alias="genero")
    phone: Optional[str] = Field(default=None, alias="telefono")
    address: Optional[str] = Field(default=None, alias="direccion")
    medical_history: Optional[str] = Field(default=None, alias="historialMedico")
    deleted_at: Optional[str] = Field(default=None, alias="deletedAt")

    model_config = _WIRE

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def placeholder(cls, patient_id: str) -> "Patient":
        return cls(id=patient_id, first_name=UNKNOWN_LABEL, last_name="")


class PatientInput(BaseModel):
    """Body sent on patient create/update. Blank optionals go out as null."""
    first_name: str = Field(alias="primerNombre")
    last_name: str = Field(alias="apellido")
    birth_date: Optional[str] = Field(default=None, alias="fechaNacimiento")
    gender: Optional[str] = Field(default=None, alias="genero")
    phone: Optional[str] = Field(default=None, alias="telefono")
    address: Optional[str] = Field(default=None, alias="direccion")
    medical_history: Optional[str] = Field(default=None, alias="historialMedico")

    model_config = _WIRE


class Service(BaseModel):
    id: str
    name: str
    duration: int  # minutes

    model_config = _WIRE

    @classmethod
    def placeholder(cls, service_id: str) -> "Service":
        return cls(id=service_id, name=UNKNOWN_LABEL, duration=PLACEHOLDER_DURATION)


class Appointment(BaseModel):
    id: str
    patient_id: str = Field(alias="patientId")
    service_id: str = Field(alias="serviceId")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    status: str = "pending"
    # joined locally after fetch, never sent back
    patient: Optional[Patient] = Field(default=None, exclude=True)
    service: Optional[Service] = Field(default=None, exclude=True)

    model_config = _WIRE


class AppointmentInput(BaseModel):
    """Body sent on appointment create/update; end_time is always derived."""
    patient_id: str = Field(alias="patientId")
    service_id: str = Field(alias="serviceId")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    status: str = "pending"

    model_config = _WIRE


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTH = "auth"
    SERVER = "server"
    NETWORK = "network"


class ApiResult(BaseModel):
    """Tagged outcome of one API call: either ok with a value or a failure kind."""
    ok: bool
    value: Any = None
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "ApiResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ApiResult":
        return cls(ok=False, kind=kind, message=message)

    @property
    def requires_logout(self) -> bool:
        return self.kind is ErrorKind.AUTH
