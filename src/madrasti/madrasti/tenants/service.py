from __future__ import annotations

import logging
import string
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.ids import activation_code, random_code
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import ANNUAL_DAYS, PRICING_REMOTE_KEY, QUARTERLY_DAYS, TRIAL_DAYS
from ..core.enums import SubscriptionPlan
from ..core.exceptions import NotFoundError, RemoteStoreError, SubscriptionError, ValidationError
from ..notifications.email_service import REGISTRATION, RENEWAL, EmailSender, build_activation_email
from ..storage.remote_store import RemoteStore
from .model import PricingConfig, SchoolMetadata
from .repository import TenantRegistry

logger = logging.getLogger(__name__)

PLAN_DAYS = {
    SubscriptionPlan.QUARTERLY.value: QUARTERLY_DAYS,
    SubscriptionPlan.ANNUAL.value: ANNUAL_DAYS,
}


class SchoolService:
    """Use cases around the school registry: signup, entry, subscriptions."""

    def __init__(
        self,
        registry: TenantRegistry,
        email_sender: EmailSender,
        *,
        remote: Optional[RemoteStore] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._registry = registry
        self._email = email_sender
        self._remote = remote
        self._clock = clock
        self._pricing = PricingConfig()

    def list_schools(self, search: str = "") -> Sequence[SchoolMetadata]:
        schools = self._registry.list()
        term = (search or "").strip()
        if not term:
            return schools
        return [s for s in schools if term in s.name or term in s.id]

    def get_school(self, school_id: str) -> SchoolMetadata:
        school = self._registry.get(school_id)
        if not school:
            raise NotFoundError("كود المدرسة غير صحيح")
        return school

    def register_school(
        self,
        *,
        name: str,
        email: str = "",
        manager_phone: str = "",
        admin_username: str = "",
        admin_password: str,
    ) -> SchoolMetadata:
        name = require_non_empty(name, "اسم المدرسة")
        require_min_length(admin_password, "كلمة المرور", 6)

        now = self._clock()
        school_id = f"sch_{random_code(5)}"
        while self._registry.get(school_id):
            school_id = f"sch_{random_code(5)}"

        school = SchoolMetadata(
            id=school_id,
            name=name,
            created_at=now,
            subscription_end=now + timedelta(days=TRIAL_DAYS),
            is_active=True,
            plan=SubscriptionPlan.TRIAL.value,
            license_key=f"KEY-{random_code(8, string.ascii_uppercase + string.digits)}",
            email=(email or "").strip() or None,
            manager_phone=(manager_phone or "").strip(),
            admin_username=(admin_username or "").strip() or "admin",
            admin_password_hash=generate_password_hash(admin_password),
            activation_code=activation_code(),
            is_paid=False,
        )
        self._registry.add(school)

        if school.email:
            subject, body = build_activation_email(school.name, school.id, REGISTRATION)
            if not self._email.send(school.email, subject, body):
                logger.warning("Registration email for %s was not delivered", school.id)

        return school

    def enter_school(self, code: str) -> SchoolMetadata:
        school = self.get_school((code or "").strip())
        if not school.is_active:
            raise SubscriptionError("هذا الحساب معطل حالياً")
        return school

    def is_frozen(self, school: SchoolMetadata) -> bool:
        return school.is_frozen(self._clock())

    def request_renewal(self, school_id: str) -> bool:
        """Email the current activation code to the school manager."""

        school = self.get_school(school_id)
        if not school.email:
            return False
        subject, body = build_activation_email(school.name, school.activation_code, RENEWAL)
        return self._email.send(school.email, subject, body)

    def upgrade_subscription(self, school_id: str, plan: str, code: str) -> bool:
        school = self.get_school(school_id)
        days = PLAN_DAYS.get(plan)
        if days is None:
            raise ValidationError("الباقة غير معروفة")
        if not code or code.strip() != school.activation_code:
            return False

        updated = replace(
            school,
            plan=plan,
            is_paid=True,
            is_active=True,
            subscription_end=self._clock() + timedelta(days=days),
            activation_code=activation_code(),
        )
        return self._registry.update(updated)

    def extend_subscription(self, school_id: str, end_date: datetime) -> SchoolMetadata:
        school = self.get_school(school_id)
        updated = replace(school, subscription_end=end_date, is_active=True, is_paid=True)
        self._registry.update(updated)
        return updated

    def toggle_status(self, school_id: str) -> SchoolMetadata:
        school = self.get_school(school_id)
        updated = replace(school, is_active=not school.is_active)
        self._registry.update(updated)
        return updated

    def delete_school(self, school_id: str) -> None:
        if not self._registry.remove(school_id):
            raise NotFoundError("كود المدرسة غير صحيح")

    def get_pricing(self) -> PricingConfig:
        if self._remote is not None:
            try:
                raw = self._remote.load_system_data(PRICING_REMOTE_KEY)
                if raw is not None:
                    self._pricing = PricingConfig.from_dict(raw)
            except (RemoteStoreError, ValueError, TypeError, AttributeError):
                logger.exception("Cannot load pricing; using last known values")
        return self._pricing

    def save_pricing(self, pricing: PricingConfig) -> None:
        if pricing.quarterly < 0 or pricing.annual < 0:
            raise ValidationError("السعر غير صالح")
        self._pricing = pricing
        if self._remote is not None:
            try:
                self._remote.save_system_data(PRICING_REMOTE_KEY, pricing.to_dict())
            except RemoteStoreError:
                logger.exception("Cannot save pricing")
