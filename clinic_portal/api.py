from datetime import datetime
from typing import Optional
from fastapi import Body, Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field
from . import config, content
from .forms import AppointmentForm
from .models import ErrorKind, Patient, PatientInput
from .session import SessionStore
from .shell import NavigationShell
from .storage import FileStorage
from .views import REQUIRED_FIELDS, AppointmentCalendarView, PatientListView


class LoginRequest(BaseModel):
    email: str
    password: str


class NavigateRequest(BaseModel):
    view: str


class ContactRequest(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""


class AppointmentRequest(BaseModel):
    patient_id: str = Field(alias="patientId")
    service_id: str = Field(alias="serviceId")
    start_time: datetime = Field(alias="startTime")
    status: str = "pending"

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}


class RescheduleRequest(BaseModel):
    start: datetime
    end: Optional[datetime] = None  # accepted but ignored, see scheduling.resolve_reschedule


app = FastAPI(title="Clínica Vida y Salud Portal")

_shell: Optional[NavigationShell] = None


def get_shell() -> NavigationShell:
    """Process-wide shell; this back office serves a single operator."""
    global _shell
    if _shell is None:
        config.configure_logging()
        _shell = NavigationShell(SessionStore(FileStorage(config.STORAGE_PATH)))
    return _shell


def require_admin(shell: NavigationShell = Depends(get_shell)) -> NavigationShell:
    if not shell.session.is_authenticated:
        raise HTTPException(status_code=401, detail="No autenticado. Por favor, inicie sesión.")
    if not shell.session.is_admin:
        raise HTTPException(status_code=403, detail="Acceso denegado. Solo administradores pueden ver esta página.")
    return shell


_STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.AUTH: 401,
    ErrorKind.SERVER: 400,
    ErrorKind.NETWORK: 502,
}


def _raise_for(screen) -> None:
    if screen.error == REQUIRED_FIELDS:
        raise HTTPException(status_code=422, detail=screen.error)
    raise HTTPException(status_code=_STATUS_BY_KIND.get(screen.error_kind, 400), detail=screen.error)


async def _patients(shell: NavigationShell) -> PatientListView:
    if isinstance(shell.screen, PatientListView):
        return shell.screen
    return await shell.open_admin_view("patients", mount=False)


async def _calendar(shell: NavigationShell, mount: bool = True) -> AppointmentCalendarView:
    if isinstance(shell.screen, AppointmentCalendarView):
        return shell.screen
    view = await shell.open_admin_view("appointments", mount=mount)
    if view.error:
        _raise_for(view)
    return view


# Public site ---------------------------------------------------------------

@app.get("/pages/{name}")
async def get_page(name: str):
    page = content.PAGES.get(name)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return page()


@app.post("/contact")
async def send_contact(req: ContactRequest, shell: NavigationShell = Depends(get_shell)):
    form = shell.contact_form
    form.name, form.email, form.phone, form.message = req.name, req.email, req.phone, req.message
    if form.submit() == "error":
        raise HTTPException(status_code=422, detail="Completa los campos obligatorios.")
    return {"status": form.status}


@app.get("/shell")
async def get_shell_state(shell: NavigationShell = Depends(get_shell)):
    return shell.render()


@app.post("/shell/navigate")
async def navigate(req: NavigateRequest, shell: NavigationShell = Depends(get_shell)):
    try:
        shell.navigate(req.view)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return shell.render()


# Session -------------------------------------------------------------------

@app.post("/session/login")
async def login(req: LoginRequest, shell: NavigationShell = Depends(get_shell)):
    shell.open_login()
    result = await shell.submit_login(req.email, req.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.message)
    return {**result.model_dump(), "user": shell.session.user.model_dump()}


@app.post("/session/logout", status_code=204)
async def logout(shell: NavigationShell = Depends(get_shell)):
    shell.logout()
    return None


@app.get("/session")
async def get_session(shell: NavigationShell = Depends(get_shell)):
    user = shell.session.user
    return {
        "authenticated": shell.session.is_authenticated,
        "user": user.model_dump() if user else None,
        "loading": shell.session.loading,
        "error": shell.session.error,
    }


# Patients ------------------------------------------------------------------

@app.get("/admin/patients")
async def list_patients(
    search: Optional[str] = Query(None, description="Name substring, matched by the clinic API"),
    shell: NavigationShell = Depends(require_admin),
):
    view = await _patients(shell)
    await view.search(search or "")
    if view.error:
        _raise_for(view)
    return [p.model_dump(by_alias=True) for p in view.patients]


async def _save_patient(view: PatientListView, req: PatientInput, patient: Optional[Patient] = None):
    form = view.open_edit(patient) if patient else view.open_create()
    for field, value in req.model_dump().items():
        setattr(form, field, value or "")
    if not await view.save(form):
        _raise_for(view)
    return [p.model_dump(by_alias=True) for p in view.patients]


@app.post("/admin/patients", status_code=201)
async def create_patient(req: PatientInput, shell: NavigationShell = Depends(require_admin)):
    return await _save_patient(await _patients(shell), req)


@app.put("/admin/patients/{patient_id}")
async def update_patient(patient_id: str, req: PatientInput, shell: NavigationShell = Depends(require_admin)):
    view = await _patients(shell)
    patient = next((p for p in view.patients if p.id == patient_id), None)
    if patient is None:
        await view.refresh()
        patient = next((p for p in view.patients if p.id == patient_id), None)
    if patient is None:
        raise HTTPException(status_code=404, detail="Paciente no encontrado")
    return await _save_patient(view, req, patient)


@app.delete("/admin/patients/{patient_id}", status_code=204)
async def delete_patient(
    patient_id: str,
    confirm: bool = Query(False, description="Second step of the delete confirmation"),
    shell: NavigationShell = Depends(require_admin),
):
    view = await _patients(shell)
    view.request_delete(patient_id)
    if not confirm:
        raise HTTPException(status_code=409, detail="Confirma la eliminación del paciente")
    if not await view.confirm_delete():
        _raise_for(view)
    return None


# Appointments --------------------------------------------------------------

@app.get("/admin/calendar")
async def get_calendar(shell: NavigationShell = Depends(require_admin)):
    view = await _calendar(shell, mount=False)
    await view.mount()
    if view.error:
        _raise_for(view)
    pickers = AppointmentForm(view.patients, view.services)
    return {
        "events": view.rendered_events(),
        "patients": [{"id": p.id, "label": p.full_name} for p in pickers.patient_options],
        "services": [{"id": sid, "label": label} for sid, label in pickers.service_options],
    }


def _fill(form, req: AppointmentRequest) -> None:
    form.patient_id, form.service_id, form.status = req.patient_id, req.service_id, req.status
    form.set_start(req.start_time)


@app.post("/admin/appointments", status_code=201)
async def create_appointment(req: AppointmentRequest, shell: NavigationShell = Depends(require_admin)):
    view = await _calendar(shell)
    form = view.select_slot(req.start_time)
    _fill(form, req)
    if not await view.save(form):
        _raise_for(view)
    return view.rendered_events()


def _event(view: AppointmentCalendarView, appointment_id: str):
    event = view.event_for(appointment_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Cita no encontrada")
    return event


@app.put("/admin/appointments/{appointment_id}")
async def update_appointment(appointment_id: str, req: AppointmentRequest, shell: NavigationShell = Depends(require_admin)):
    view = await _calendar(shell)
    form = view.select_event(_event(view, appointment_id))
    _fill(form, req)
    if not await view.save(form):
        _raise_for(view)
    return view.rendered_events()


@app.post("/admin/appointments/{appointment_id}/move")
async def move_appointment(appointment_id: str, req: RescheduleRequest = Body(...), shell: NavigationShell = Depends(require_admin)):
    view = await _calendar(shell)
    if not await view.move_event(_event(view, appointment_id), req.start, req.end):
        _raise_for(view)
    return view.rendered_events()


@app.post("/admin/appointments/{appointment_id}/resize")
async def resize_appointment(appointment_id: str, req: RescheduleRequest = Body(...), shell: NavigationShell = Depends(require_admin)):
    view = await _calendar(shell)
    if not await view.resize_event(_event(view, appointment_id), req.start, req.end):
        _raise_for(view)
    return view.rendered_events()


@app.delete("/admin/appointments/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: str,
    confirm: bool = Query(False, description="Second step of the delete confirmation"),
    shell: NavigationShell = Depends(require_admin),
):
    view = await _calendar(shell)
    view.request_delete(appointment_id)
    if not confirm:
        raise HTTPException(status_code=409, detail="Confirma la eliminación de la cita")
    if not await view.confirm_delete():
        _raise_for(view)
    return None
