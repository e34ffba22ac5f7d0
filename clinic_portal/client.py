"""Async client for the clinic REST API.

Every call returns an ApiResult instead of raising, so screens can branch on
the failure kind (a 401/500 means the session must be dropped).
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional
import httpx
from . import config
from .models import (
    ApiResult,
    Appointment,
    AppointmentInput,
    ErrorKind,
    Patient,
    PatientInput,
    Service,
)

if TYPE_CHECKING:
    from .session import SessionStore

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "No autenticado. Por favor, inicie sesión."
SESSION_EXPIRED = "Tu sesión ha expirado o no estás autorizado. Por favor, inicia sesión de nuevo."
INVALID_CREDENTIALS = "Credenciales inválidas"
CONNECTION_ERROR = "Error de conexión"

# statuses that force the caller to log out
_AUTH_FAILURES = (401, 500)


def _decode(resp: httpx.Response) -> Any:
    return resp.json() if resp.content else None


def _server_message(resp: httpx.Response, fallback: str) -> str:
    try:
        payload = _decode(resp)
    except ValueError:
        payload = None
    message = payload.get("mensaje") if isinstance(payload, dict) else None
    return message or fallback.format(reason=resp.reason_phrase)


async def login(email: str, password: str, base_url: Optional[str] = None, timeout: Optional[float] = None) -> ApiResult:
    """Exchange credentials for a token. The value is the raw response body."""
    url = f"{base_url or config.API_BASE_URL}/api/auth/login"
    try:
        async with httpx.AsyncClient(http2=True, timeout=timeout or config.HTTP_TIMEOUT) as client:
            resp = await client.post(url, json={"email": email, "password": password})
        if not resp.is_success:
            return ApiResult.failure(ErrorKind.SERVER, _server_message(resp, INVALID_CREDENTIALS))
        data = _decode(resp)
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Login request failed: %s", exc)
        return ApiResult.failure(ErrorKind.NETWORK, CONNECTION_ERROR)
    if not isinstance(data, dict) or not data.get("token"):
        logger.error("Login response carried no token")
        return ApiResult.failure(ErrorKind.NETWORK, CONNECTION_ERROR)
    return ApiResult.success(data)


class ClinicApiClient:
    """Per-screen API calls bound to a session's bearer token."""

    def __init__(self, session: "SessionStore", base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.session = session
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout or config.HTTP_TIMEOUT

    async def _send(
        self,
        method: str,
        path: str,
        *,
        error_message: str,
        network_message: str,
        parse: Optional[Callable[[Any], Any]] = None,
        params: Optional[dict] = None,
        body: Optional[dict] = None,
    ) -> ApiResult:
        token = self.session.token
        if not token:
            return ApiResult.failure(ErrorKind.UNAUTHENTICATED, NOT_AUTHENTICATED)

        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(http2=True, timeout=self.timeout) as client:
                resp = await client.request(
                    method, f"{self.base_url}/api{path}", headers=headers, params=params, json=body
                )
            if resp.status_code in _AUTH_FAILURES:
                logger.warning("%s %s answered %s, session is no longer valid", method, path, resp.status_code)
                return ApiResult.failure(ErrorKind.AUTH, SESSION_EXPIRED)
            if not resp.is_success:
                message = _server_message(resp, error_message)
                logger.error("%s %s failed with %s: %s", method, path, resp.status_code, message)
                return ApiResult.failure(ErrorKind.SERVER, message)
            payload = _decode(resp)
            return ApiResult.success(parse(payload) if parse else payload)
        except (httpx.HTTPError, ValueError) as exc:
            # transport errors, undecodable bodies and payloads that fail validation
            logger.error("%s %s failed: %s", method, path, exc)
            return ApiResult.failure(ErrorKind.NETWORK, network_message)

    # Patients -----------------------------------------------------------------

    async def list_patients(self, search: Optional[str] = None) -> ApiResult:
        """Fetch patients, optionally filtered server-side by a name substring."""
        return await self._send(
            "GET",
            "/pacientes",
            params={"search": search} if search else None,
            parse=lambda data: [Patient.model_validate(p) for p in (data or {}).get("pacientes", [])],
            error_message="Error al obtener pacientes: {reason}",
            network_message="Error desconocido al cargar pacientes.",
        )

    async def create_patient(self, patient: PatientInput) -> ApiResult:
        return await self._send(
            "POST",
            "/pacientes",
            body=patient.model_dump(mode="json", by_alias=True),
            error_message="Error al guardar el paciente.",
            network_message="Error desconocido al guardar paciente.",
        )

    async def update_patient(self, patient_id: str, patient: PatientInput) -> ApiResult:
        return await self._send(
            "PUT",
            f"/pacientes/{patient_id}",
            body=patient.model_dump(mode="json", by_alias=True),
            error_message="Error al guardar el paciente.",
            network_message="Error desconocido al guardar paciente.",
        )

    async def delete_patient(self, patient_id: str) -> ApiResult:
        return await self._send(
            "DELETE",
            f"/pacientes/{patient_id}",
            error_message="Error al eliminar el paciente.",
            network_message="Error desconocido al eliminar paciente.",
        )

    # Services -----------------------------------------------------------------

    async def list_services(self) -> ApiResult:
        return await self._send(
            "GET",
            "/servicios",
            parse=lambda data: [Service.model_validate(s) for s in (data or {}).get("servicios", [])],
            error_message="Error al cargar servicios.",
            network_message="Error desconocido al cargar servicios.",
        )

    # Appointments -------------------------------------------------------------

    async def list_appointments(self) -> ApiResult:
        """Fetch all appointments; a body without `citas` means none."""
        return await self._send(
            "GET",
            "/citas",
            parse=lambda data: [Appointment.model_validate(a) for a in (data or {}).get("citas") or []],
            error_message="Error al obtener citas: {reason}",
            network_message="Error desconocido al cargar citas.",
        )

    async def create_appointment(self, appointment: AppointmentInput) -> ApiResult:
        return await self._send(
            "POST",
            "/citas",
            body=appointment.model_dump(mode="json", by_alias=True),
            error_message="Error al guardar la cita.",
            network_message="Error desconocido al guardar cita.",
        )

    async def update_appointment(self, appointment_id: str, appointment: AppointmentInput) -> ApiResult:
        return await self._send(
            "PUT",
            f"/citas/{appointment_id}",
            body=appointment.model_dump(mode="json", by_alias=True),
            error_message="Error al guardar la cita.",
            network_message="Error desconocido al guardar cita.",
        )

    async def delete_appointment(self, appointment_id: str) -> ApiResult:
        return await self._send(
            "DELETE",
            f"/citas/{appointment_id}",
            error_message="Error al eliminar la cita.",
            network_message="Error desconocido al eliminar cita.",
        )
