"""Per-request application state: backend, file storage and signed-in user."""
from dataclasses import dataclass
from typing import Optional

from src.backends.base import DirectoryBackend
from src.data.models import UserRole
from src.services.errors import AuthorizationError
from src.utils.storage import FileStorage


@dataclass
class CurrentUser:
    id: str
    role: str = UserRole.CITIZEN.value
    display_name: str = ""
    email: Optional[str] = None


@dataclass
class AppContext:
    backend: DirectoryBackend
    storage: Optional[FileStorage] = None
    user: Optional[CurrentUser] = None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.role == UserRole.ADMIN.value

    def require_user(self, message: str = "You must be signed in to do this") -> CurrentUser:
        if self.user is None or not self.user.id:
            raise AuthorizationError(message)
        return self.user

    def require_role(self, *roles: str) -> CurrentUser:
        user = self.require_user()
        allowed = {r.value if isinstance(r, UserRole) else r for r in roles}
        if user.role not in allowed:
            raise AuthorizationError(f"This action requires the {' or '.join(sorted(allowed))} role")
        return user

    def require_admin(self) -> CurrentUser:
        return self.require_role(UserRole.ADMIN)

    def require_storage(self) -> FileStorage:
        if self.storage is None:
            raise RuntimeError("File storage is not configured")
        return self.storage
