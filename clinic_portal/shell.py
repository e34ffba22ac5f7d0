"""Navigation shell: which page is showing, the menus, and the admin area."""
from __future__ import annotations
import logging
from datetime import date
from typing import Optional, Union
from . import content
from .client import ClinicApiClient
from .config import CLINIC_NAME
from .models import LoginResult
from .session import SessionStore
from .views import AppointmentCalendarView, PatientListView

logger = logging.getLogger(__name__)

PUBLIC_VIEWS = ("home", "services", "contact")
ADMIN_VIEWS = ("dashboard", "patients", "appointments")
NAV_ITEMS = [("home", "Inicio"), ("services", "Servicios"), ("contact", "Contacto")]

ACCESS_DENIED = "Acceso denegado. Solo administradores pueden ver esta página."
LOADING = "Cargando..."


class NavigationShell:
    def __init__(self, session: SessionStore, api: Optional[ClinicApiClient] = None):
        self.session = session
        self.api = api or ClinicApiClient(session)
        self.view = "home"
        self.mobile_menu_open = False
        self.settings_menu_open = False
        self.login_modal_open = False
        self.login_error = ""
        self.admin_view = "dashboard"
        self.screen: Optional[Union[PatientListView, AppointmentCalendarView]] = None
        self.contact_form = content.ContactForm()
        session.subscribe(self._on_session_change)

    def _on_session_change(self, session: SessionStore) -> None:
        if not session.is_authenticated:
            self.settings_menu_open = False
            self.screen = None
            self.admin_view = "dashboard"

    # public navigation

    def navigate(self, view: str) -> None:
        if view not in PUBLIC_VIEWS and view != "admin":
            raise ValueError(f"Unknown view {view!r}")
        self.view = view
        self.mobile_menu_open = False

    def toggle_mobile_menu(self) -> None:
        self.mobile_menu_open = not self.mobile_menu_open

    # login modal and settings menu

    def open_login(self) -> None:
        self.login_error = ""
        self.login_modal_open = True

    def close_login(self) -> None:
        self.login_modal_open = False

    async def submit_login(self, email: str, password: str) -> LoginResult:
        self.login_error = ""
        result = await self.session.login(email, password)
        if result.success:
            self.close_login()
        else:
            self.login_error = result.message
        return result

    def toggle_settings_menu(self) -> None:
        self.settings_menu_open = self.session.is_authenticated and not self.settings_menu_open

    def admin_click(self) -> None:
        self.view = "admin"
        self.settings_menu_open = False
        self.mobile_menu_open = False

    def logout(self) -> None:
        self.session.logout()

    # admin area

    async def open_admin_view(self, name: str, mount: bool = True) -> Optional[Union[PatientListView, AppointmentCalendarView]]:
        """Switch the admin sub-view and, unless told otherwise, mount its screen."""
        if name not in ADMIN_VIEWS:
            raise ValueError(f"Unknown admin view {name!r}")
        self.view = "admin"
        self.admin_view = name
        if name == "patients":
            screen = PatientListView(self.session, self.api)
        elif name == "appointments":
            screen = AppointmentCalendarView(self.session, self.api)
        else:
            screen = None
        self.screen = screen
        # a forced logout during mount drops self.screen, the caller still gets the failed view
        if mount and screen is not None:
            await screen.mount()
        return screen

    def back_to_dashboard(self) -> None:
        self.admin_view = "dashboard"
        self.screen = None

    # rendering

    def _settings_menu(self) -> Optional[dict]:
        if not self.session.is_authenticated:
            return None
        user = self.session.user
        return {
            "open": self.settings_menu_open,
            "email": user.email,
            "role_label": "Administrador" if user.role == "admin" else "Usuario",
            "entries": ["Área Administrativa", "Cerrar Sesión"],
        }

    def _admin_content(self) -> dict:
        if not self.session.is_admin:
            return {"kind": "error", "message": ACCESS_DENIED}
        user = self.session.user
        body = {
            "kind": "admin",
            "view": self.admin_view,
            "title": "Gestión Administrativa",
            "welcome": f"¡Bienvenido, {user.email if user else 'Administrador'}!",
        }
        if isinstance(self.screen, PatientListView):
            body["patients"] = [p.model_dump(by_alias=True) for p in self.screen.patients]
        elif isinstance(self.screen, AppointmentCalendarView):
            body["events"] = self.screen.rendered_events()
        if self.screen is not None:
            body["loading"] = self.screen.loading
            body["error"] = self.screen.error
        return body

    def render(self) -> dict:
        if self.session.loading:
            page = {"kind": "loading", "message": LOADING}
        elif self.view == "admin":
            page = self._admin_content()
        else:
            page = {"kind": "page", **content.PAGES[self.view]()}
        return {
            "brand": CLINIC_NAME,
            "view": self.view,
            "nav": [{"view": v, "label": label, "active": v == self.view} for v, label in NAV_ITEMS],
            "mobile_menu_open": self.mobile_menu_open,
            "settings_menu": self._settings_menu(),
            "login_modal": {"open": self.login_modal_open, "error": self.login_error} if self.login_modal_open else None,
            "content": page,
            "footer": {
                "copyright": f"© {date.today().year} {CLINIC_NAME}. Todos los derechos reservados.",
                "login_button": None if self.session.is_authenticated else "Acceder",
            },
            "floating_links": content.FLOATING_LINKS,
        }
