"""Session store: the single piece of shared state every screen reads.

Holds the bearer token and the signed-in identity, mirrored to durable
storage under the `token` and `user` keys. The store never validates a
restored token; screens find out on their first call and log out themselves.
"""
from __future__ import annotations
import json
import logging
from typing import Callable, Optional
from . import client
from .models import Identity, LoginResult
from .storage import MemoryStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"
LOGIN_OK = "Inicio de sesión exitoso"


def _identity_from(data: dict, email: str) -> Identity:
    """Build the identity from whatever the login response carries."""
    user = data.get("user") or data.get("usuario")
    if not isinstance(user, dict):
        user = {}
    return Identity(
        id=str(data.get("id") or user.get("id") or "1"),
        email=data.get("email") or user.get("email") or email,
        role=data.get("role") or data.get("rol") or user.get("role") or user.get("rol") or "admin",
    )


class SessionStore:
    def __init__(self, storage: Optional[MemoryStorage] = None, base_url: Optional[str] = None):
        self.storage = storage if storage is not None else MemoryStorage()
        self.base_url = base_url
        self.user: Optional[Identity] = None
        self.token: Optional[str] = None
        self.loading = False
        self.error: Optional[str] = None
        self._listeners: list[Callable[["SessionStore"], None]] = []
        self.restore()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and bool(self.token)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.user.role == "admin"

    def subscribe(self, listener: Callable[["SessionStore"], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    def restore(self) -> bool:
        """Load token and identity from storage; both must be present."""
        token = self.storage.get_item(TOKEN_KEY)
        raw_user = self.storage.get_item(USER_KEY)
        if not token or not raw_user:
            return False
        try:
            user = Identity.model_validate(json.loads(raw_user))
        except ValueError:
            logger.warning("Stored identity is unreadable, starting signed out")
            return False
        self.token, self.user = token, user
        self._notify()
        return True

    async def login(self, email: str, password: str) -> LoginResult:
        self.loading = True
        self.error = None
        try:
            result = await client.login(email, password, base_url=self.base_url)
        finally:
            self.loading = False

        if not result.ok:
            self.error = result.message
            return LoginResult(success=False, message=result.message)

        try:
            user = _identity_from(result.value, email)
        except ValueError as exc:
            logger.error("Login response carried an unreadable identity: %s", exc)
            self.error = client.CONNECTION_ERROR
            return LoginResult(success=False, message=client.CONNECTION_ERROR)
        token = result.value["token"]
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, user.model_dump_json())
        self.user, self.token = user, token
        logger.info("Signed in as %s (%s)", user.email, user.role)
        self._notify()
        return LoginResult(success=True, message=LOGIN_OK)

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self._notify()
