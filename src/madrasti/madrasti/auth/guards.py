from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, SubscriptionError
from .service import SessionUser


def store_session(user: SessionUser) -> None:
    session.clear()
    session["role"] = user.role.value
    session["name"] = user.name
    session["school_id"] = user.school_id
    session["teacher_id"] = user.teacher_id


def current_user() -> Optional[SessionUser]:
    role = session.get("role")
    if not role:
        return None
    return SessionUser(
        role=Role(role),
        name=session.get("name") or "",
        school_id=session.get("school_id"),
        teacher_id=session.get("teacher_id"),
    )


def roles_required(*roles: Role):
    """Reject the request unless the session holds one of ``roles``.

    Raises domain errors; the app-level handlers turn them into 401/403.
    """

    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            role = session.get("role")
            if not role:
                raise AuthenticationError("يرجى تسجيل الدخول")
            if role not in allowed:
                raise AuthorizationError("غير مصرح لك بهذه العملية")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_school(container, *, allow_frozen: bool = False):
    """Open the school of the logged-in admin or teacher.

    A frozen school (expired or disabled) is read-only: writes pass
    ``allow_frozen=False`` and get a SubscriptionError.
    """

    school_id = session.get("school_id")
    if not school_id:
        raise AuthenticationError("يرجى تسجيل الدخول")
    school = container.school_service.get_school(school_id)
    if not allow_frozen and container.school_service.is_frozen(school):
        raise SubscriptionError("انتهى الاشتراك أو الحساب معطل")
    return container.open_school(school.id)


def current_teacher_id() -> str:
    teacher_id = session.get("teacher_id")
    if not teacher_id:
        raise AuthorizationError("غير مصرح لك بهذه العملية")
    return teacher_id
