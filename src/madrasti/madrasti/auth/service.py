from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..core.constants import SYSTEM_ADMIN_PROFILE_KEY
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, RemoteStoreError
from ..storage.remote_store import RemoteStore
from ..sync.school_store import SchoolStore
from ..tenants.model import SchoolMetadata

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "بيانات الدخول غير صحيحة"


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    role: Role
    name: str
    school_id: Optional[str] = None
    teacher_id: Optional[str] = None


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash or not password:
        return False
    try:
        return check_password_hash(password_hash, password)
    except (ValueError, TypeError):
        # e.g. placeholder or corrupted hashes
        return False


class AuthService:
    """Use case: login for the system operator, school admins and teachers."""

    def __init__(
        self,
        *,
        system_username: str,
        system_password_hash: str,
        remote: Optional[RemoteStore] = None,
    ):
        self._system_username = system_username
        self._system_password_hash = system_password_hash
        self._remote = remote

    def _system_credentials(self) -> tuple[str, str]:
        if self._remote is not None:
            try:
                profile = self._remote.load_system_data(SYSTEM_ADMIN_PROFILE_KEY)
            except (RemoteStoreError, ValueError):
                logger.exception("Cannot load the operator profile; using configured credentials")
                profile = None
            if isinstance(profile, dict) and profile.get("username") and profile.get("passwordHash"):
                return str(profile["username"]), str(profile["passwordHash"])
        return self._system_username, self._system_password_hash

    def authenticate_system(self, username: str, password: str) -> SessionUser:
        valid_user, valid_hash = self._system_credentials()
        if not valid_user or username != valid_user or not verify_password(valid_hash, password):
            raise AuthenticationError(INVALID_CREDENTIALS)
        return SessionUser(role=Role.SYSTEM, name=valid_user)

    def authenticate_school_user(
        self,
        school: SchoolMetadata,
        store: SchoolStore,
        username: str,
        password: str,
    ) -> SessionUser:
        username = (username or "").strip()
        if username == school.admin_username and verify_password(school.admin_password_hash, password):
            return SessionUser(role=Role.ADMIN, name="الإدارة", school_id=school.id)

        teacher = store.teachers.find(lambda t: t.username == username)
        if teacher and verify_password(teacher.password_hash, password):
            return SessionUser(role=Role.TEACHER, name=teacher.name, school_id=school.id, teacher_id=teacher.id)

        raise AuthenticationError(INVALID_CREDENTIALS)
