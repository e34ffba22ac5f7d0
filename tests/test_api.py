import json
import pytest, respx
from fastapi.testclient import TestClient
from clinic_portal.api import app, get_shell
from clinic_portal.client import SESSION_EXPIRED, ClinicApiClient
from clinic_portal.session import SessionStore
from clinic_portal.shell import NavigationShell
from clinic_portal.storage import MemoryStorage
from conftest import BASE, load, signed_in_storage


def _client_for(storage) -> TestClient:
    session = SessionStore(storage, base_url=BASE)
    shell = NavigationShell(session, ClinicApiClient(session, base_url=BASE))
    app.dependency_overrides[get_shell] = lambda: shell
    return TestClient(app)


@pytest.fixture(autouse=True)
def _reset_overrides():
    yield
    app.dependency_overrides.clear()


def _mock_calendar(m):
    m.get("/api/pacientes").respond(200, json=load("patients.json"))
    m.get("/api/servicios").respond(200, json=load("services.json"))
    m.get("/api/citas").respond(200, json=load("appointments.json"))


def test_public_pages():
    client = _client_for(MemoryStorage())
    assert client.get("/pages/faq").json()["title"] == "Preguntas Frecuentes"
    assert client.get("/pages/pricing").status_code == 404

    resp = client.post("/shell/navigate", json={"view": "contact"})
    assert resp.json()["content"]["title"] == "Contáctanos"


def test_contact_form_validation():
    client = _client_for(MemoryStorage())
    assert client.post("/contact", json={"name": "Ana"}).status_code == 422
    ok = client.post("/contact", json={"name": "Ana", "email": "a@b.c", "message": "Hola"})
    assert ok.json() == {"status": "success"}


def test_admin_routes_need_an_admin_session():
    assert _client_for(MemoryStorage()).get("/admin/patients").status_code == 401
    assert _client_for(signed_in_storage(role="recepcion")).get("/admin/patients").status_code == 403


def test_login_and_logout():
    client = _client_for(MemoryStorage())
    with respx.mock(base_url=BASE) as m:
        m.post("/api/auth/login").respond(200, json={"token": "abc"})
        resp = client.post("/session/login", json={"email": "admin@clinica.test", "password": "pw"})

    assert resp.status_code == 200
    assert resp.json()["user"] == {"id": "1", "email": "admin@clinica.test", "role": "admin"}
    assert client.get("/session").json()["authenticated"] is True

    assert client.post("/session/logout").status_code == 204
    assert client.get("/session").json()["authenticated"] is False


def test_bad_credentials_are_401():
    client = _client_for(MemoryStorage())
    with respx.mock(base_url=BASE) as m:
        m.post("/api/auth/login").respond(401, json={"mensaje": "Credenciales incorrectas"})
        resp = client.post("/session/login", json={"email": "a@b.c", "password": "x"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Credenciales incorrectas"


def test_patient_search_is_forwarded():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        route = m.get("/api/pacientes").respond(200, json=load("patients.json"))
        resp = client.get("/admin/patients", params={"search": "Ruiz"})

    assert resp.status_code == 200
    assert resp.json()[0]["primerNombre"] == "Ana"
    assert route.calls.last.request.url.params["search"] == "Ruiz"


def test_create_patient_requires_names():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        resp = client.post("/admin/patients", json={"primerNombre": "Ana", "apellido": ""})
        assert not m.calls
    assert resp.status_code == 422


def test_expired_token_logs_out():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        m.get("/api/pacientes").respond(401)
        resp = client.get("/admin/patients")
    assert resp.status_code == 401
    assert client.get("/session").json()["authenticated"] is False


def test_calendar_and_move():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        _mock_calendar(m)
        update = m.put("/api/citas/a1").respond(200, json={"mensaje": "ok"})

        calendar = client.get("/admin/calendar").json()
        assert calendar["events"][0]["title"] == "Ana Ruiz - Consulta General"
        assert [p["id"] for p in calendar["patients"]] == ["p1", "p2"]

        resp = client.post("/admin/appointments/a1/move", json={"start": "2025-03-10T10:00:00Z", "end": "2025-03-10T12:00:00Z"})
        assert resp.status_code == 200

        sent = json.loads(update.calls.last.request.content)
    assert sent["startTime"].startswith("2025-03-10T10:00:00")
    assert sent["endTime"].startswith("2025-03-10T10:30:00")
    assert sent["status"] == "confirmed"


def test_appointment_delete_needs_confirm_flag():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE, assert_all_called=False) as m:
        _mock_calendar(m)
        deleted = m.delete("/api/citas/a1").respond(200, json={"mensaje": "Eliminada"})

        assert client.delete("/admin/appointments/a1").status_code == 409
        assert not deleted.called

        assert client.delete("/admin/appointments/a1", params={"confirm": "true"}).status_code == 204
        assert deleted.call_count == 1


def test_unknown_appointment_is_404():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        _mock_calendar(m)
        resp = client.put("/admin/appointments/zzz", json={"patientId": "p1", "serviceId": "s1", "startTime": "2025-03-10T09:00:00Z"})
    assert resp.status_code == 404


def test_create_appointment_derives_end_time():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        _mock_calendar(m)
        created = m.post("/api/citas").respond(201, json={"mensaje": "Cita creada"})

        resp = client.post("/admin/appointments", json={"patientId": "p2", "serviceId": "s2", "startTime": "2025-03-11T09:00:00Z"})

        sent = json.loads(created.calls.last.request.content)
    assert resp.status_code == 201
    assert sent["patientId"] == "p2"
    assert sent["serviceId"] == "s2"
    assert sent["status"] == "pending"
    assert sent["startTime"].startswith("2025-03-11T09:00:00")
    assert sent["endTime"].startswith("2025-03-11T10:00:00")


def test_update_appointment():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        _mock_calendar(m)
        update = m.put("/api/citas/a1").respond(200, json={"mensaje": "ok"})

        resp = client.put("/admin/appointments/a1", json={"patientId": "p1", "serviceId": "s2", "startTime": "2025-03-10T09:00:00Z", "status": "completed"})

        sent = json.loads(update.calls.last.request.content)
    assert resp.status_code == 200
    assert resp.json()[0]["id"] == "a1"
    assert sent["serviceId"] == "s2"
    assert sent["status"] == "completed"
    assert sent["endTime"].startswith("2025-03-10T10:00:00")


def test_resize_keeps_service_duration():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        _mock_calendar(m)
        update = m.put("/api/citas/a1").respond(200, json={"mensaje": "ok"})

        resp = client.post("/admin/appointments/a1/resize", json={"start": "2025-03-10T09:00:00Z", "end": "2025-03-10T11:00:00Z"})

        sent = json.loads(update.calls.last.request.content)
    assert resp.status_code == 200
    assert sent["startTime"].startswith("2025-03-10T09:00:00")
    assert sent["endTime"].startswith("2025-03-10T09:30:00")


@pytest.mark.parametrize("status", [401, 500])
def test_appointment_create_after_expired_token_is_401(status):
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        m.get("/api/pacientes").respond(status)
        resp = client.post("/admin/appointments", json={"patientId": "p1", "serviceId": "s1", "startTime": "2025-03-10T09:00:00Z"})
        assert len(m.calls) == 1

    assert resp.status_code == 401
    assert resp.json()["detail"] == SESSION_EXPIRED
    assert client.get("/session").json()["authenticated"] is False


def test_appointment_move_after_expired_token_is_401():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        m.get("/api/pacientes").respond(500)
        resp = client.post("/admin/appointments/a1/move", json={"start": "2025-03-10T10:00:00Z"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == SESSION_EXPIRED


def test_update_patient():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        m.get("/api/pacientes").respond(200, json=load("patients.json"))
        update = m.put("/api/pacientes/p1").respond(200, json={"mensaje": "Paciente actualizado"})

        resp = client.put("/admin/patients/p1", json={"primerNombre": "Ana María", "apellido": "Ruiz", "telefono": ""})

        sent = json.loads(update.calls.last.request.content)
    assert resp.status_code == 200
    assert sent["primerNombre"] == "Ana María"
    assert sent["apellido"] == "Ruiz"
    assert sent["telefono"] is None


def test_patient_delete_needs_confirm_flag():
    client = _client_for(signed_in_storage())
    with respx.mock(base_url=BASE) as m:
        listed = m.get("/api/pacientes").respond(200, json=load("patients.json"))
        deleted = m.delete("/api/pacientes/p2").respond(200, json={"mensaje": "Paciente eliminado"})

        assert client.delete("/admin/patients/p2").status_code == 409
        assert not deleted.called
        assert not listed.called

        assert client.delete("/admin/patients/p2", params={"confirm": "true"}).status_code == 204
        assert deleted.call_count == 1
        assert listed.call_count == 1
