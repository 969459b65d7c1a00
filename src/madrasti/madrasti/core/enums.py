from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Who is logged in, stored in the Flask session."""

    SYSTEM = "system"
    ADMIN = "admin"
    TEACHER = "teacher"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"


class MessageType(str, Enum):
    ANNOUNCEMENT = "announcement"
    DIRECT = "direct"


class SubscriptionPlan(str, Enum):
    TRIAL = "trial"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class SlotWriteStatus(str, Enum):
    """Outcome of a caller-driven slot change."""

    SAVED = "SAVED"
    SKIPPED_NOT_LOADED = "SKIPPED_NOT_LOADED"
    LOCAL_FAILED = "LOCAL_FAILED"
