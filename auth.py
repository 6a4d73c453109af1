"""Admin authentication for API clients."""
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass

from api_client import ApiError

logger = logging.getLogger(__name__)


class AuthError(Exception):
    pass


@dataclass
class Session:
    token: str
    user_id: int
    email: str
    name: str = ""
    role: str = "admin"

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            token=data["token"],
            user_id=data["user_id"],
            email=data["email"],
            name=data.get("name") or "",
            role=data.get("role") or "admin",
        )


class AuthProvider(ABC):
    """Something that can turn credentials into a ``Session``."""

    @abstractmethod
    async def login(self, credentials):
        ...


class ApiAdminAuthProvider(AuthProvider):
    def __init__(self, client):
        self.client = client

    async def login(self, credentials):
        email = (credentials.get("email") or "").strip()
        password = credentials.get("password") or ""
        if not email or not password:
            raise AuthError("Email and password are required")

        try:
            data = await self.client.post(
                "/v1/admin/login",
                {"email": email, "password": password},
                authenticated=False,
            )
        except ApiError as e:
            if e.status in (400, 401, 403):
                raise AuthError(e.message) from e
            raise

        user = data.get("user") or {}
        if not data.get("token"):
            raise AuthError("Login response did not include a token")
        return Session(
            token=data["token"],
            user_id=user.get("id"),
            email=user.get("email") or email,
            name=user.get("name") or "",
        )


class AdminAuth:
    """Keeps the admin session in a store and the client's token in sync."""

    def __init__(self, provider, store, client=None):
        self.provider = provider
        self.store = store
        self.client = client
        self.session = None

        saved = store.load()
        if saved:
            try:
                self._use(Session.from_dict(saved))
            except (KeyError, TypeError) as e:
                logger.warning("Discarding saved admin session: %s", e)
                store.clear()

    def _use(self, session):
        self.session = session
        if self.client is not None:
            self.client.token = session.token if session else None

    @property
    def is_admin(self):
        return self.session is not None and self.session.role == "admin"

    async def login(self, email, password):
        session = await self.provider.login({"email": email, "password": password})
        self._use(session)
        self.store.save(session.to_dict())
        return session

    def logout(self):
        self._use(None)
        self.store.clear()
