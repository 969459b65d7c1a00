from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .attendance.service import AttendanceService
from .auth.service import AuthService
from .classes.service import ClassService
from .database.connection import DBConfig, DatabaseConnection
from .messages.service import MessageService
from .notifications.email_service import EmailSender, LoggingEmailSender, SmtpConfig, SmtpEmailSender
from .plans.service import PlanService
from .roster.importer import RosterImporter
from .schedules.service import ScheduleService
from .settings.service import SettingsService
from .storage.local_cache import JsonFileCache, LocalCache, MemoryCache
from .storage.mysql_remote_store import MySQLRemoteStore
from .storage.remote_store import RemoteStore
from .students.service import StudentService
from .subjects.service import SubjectService
from .sync.scheduler import Scheduler, ThreadingScheduler
from .sync.school_store import SchoolStore, SchoolStoreFactory
from .teachers.service import TeacherService
from .tenants.service import SchoolService
from .tenants.synced_registry import SyncedTenantRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchoolContext:
    """Services bound to one opened school."""

    store: SchoolStore

    settings: SettingsService
    subjects: SubjectService
    classes: ClassService
    students: StudentService
    teachers: TeacherService
    schedule: ScheduleService
    plans: PlanService
    attendance: AttendanceService
    messages: MessageService
    roster: RosterImporter


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    local_cache: LocalCache
    remote_store: Optional[RemoteStore]
    scheduler: Scheduler
    email_sender: EmailSender

    stores: SchoolStoreFactory
    registry: SyncedTenantRegistry

    school_service: SchoolService
    auth_service: AuthService

    load_timeout: float = 5.0

    def open_school(self, school_id: str, *, wait_timeout: Optional[float] = None) -> SchoolContext:
        """Services for one school, after its slots finished loading (or the timeout passed)."""

        school = self.registry.get(school_id)
        store = self.stores.open(school_id, school_name=school.name if school else "")
        timeout = self.load_timeout if wait_timeout is None else wait_timeout
        if not store.wait_until_loaded(timeout):
            logger.warning("School %s is still loading; serving local data", school_id)
        return SchoolContext(
            store=store,
            settings=SettingsService(store),
            subjects=SubjectService(store),
            classes=ClassService(store),
            students=StudentService(store),
            teachers=TeacherService(store),
            schedule=ScheduleService(store),
            plans=PlanService(store),
            attendance=AttendanceService(store),
            messages=MessageService(store),
            roster=RosterImporter(store),
        )


def _build_local_cache(settings) -> LocalCache:
    data_dir = getattr(settings, "DATA_DIR", "")
    max_bytes = int(getattr(settings, "LOCAL_CACHE_MAX_BYTES", 0))
    if not data_dir:
        return MemoryCache(max_bytes=max_bytes)
    return JsonFileCache(data_dir, max_bytes=max_bytes)


def _build_email_sender(settings) -> EmailSender:
    host = getattr(settings, "SMTP_HOST", "")
    if not host:
        return LoggingEmailSender()
    return SmtpEmailSender(
        SmtpConfig(
            host=host,
            port=int(getattr(settings, "SMTP_PORT", 587)),
            user=getattr(settings, "SMTP_USER", ""),
            password=getattr(settings, "SMTP_PASSWORD", ""),
            use_tls=bool(getattr(settings, "SMTP_USE_TLS", True)),
            sender=getattr(settings, "SMTP_SENDER", ""),
        )
    )


def build_container(
    settings,
    *,
    local_cache: Optional[LocalCache] = None,
    remote_store: Optional[RemoteStore] = None,
    scheduler: Optional[Scheduler] = None,
    email_sender: Optional[EmailSender] = None,
) -> Container:
    cloud_enabled = bool(getattr(settings, "CLOUD_ENABLED", False))

    conn = None
    if cloud_enabled and remote_store is None:
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "REMOTE_DB_CONFIG")))
        remote_store = MySQLRemoteStore(conn)
    if not cloud_enabled:
        remote_store = None

    local_cache = local_cache or _build_local_cache(settings)
    scheduler = scheduler or ThreadingScheduler()
    email_sender = email_sender or _build_email_sender(settings)

    stores = SchoolStoreFactory(
        local=local_cache,
        remote=remote_store,
        cloud_enabled=cloud_enabled,
        scheduler=scheduler,
        debounce_seconds=float(getattr(settings, "SYNC_DEBOUNCE_SECONDS", 1.0)),
    )
    registry = SyncedTenantRegistry(local_cache, remote_store, cloud_enabled=cloud_enabled)

    school_service = SchoolService(registry, email_sender, remote=remote_store)
    auth_service = AuthService(
        system_username=getattr(settings, "SYSTEM_ADMIN_USERNAME", ""),
        system_password_hash=getattr(settings, "SYSTEM_ADMIN_PASSWORD_HASH", ""),
        remote=remote_store,
    )

    return Container(
        conn=conn,
        local_cache=local_cache,
        remote_store=remote_store,
        scheduler=scheduler,
        email_sender=email_sender,
        stores=stores,
        registry=registry,
        school_service=school_service,
        auth_service=auth_service,
        load_timeout=float(getattr(settings, "SYNC_LOAD_TIMEOUT_SECONDS", 5.0)),
    )
