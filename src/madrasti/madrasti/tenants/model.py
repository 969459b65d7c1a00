from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import from_iso, to_iso
from ..core.enums import SubscriptionPlan


@dataclass(frozen=True)
class SchoolMetadata:
    """Registry entry of one school (tenant). ``id`` is also the login code."""

    id: str
    name: str
    created_at: datetime
    subscription_end: datetime
    is_active: bool = True
    plan: str = SubscriptionPlan.TRIAL.value
    license_key: str = ""
    email: Optional[str] = None
    manager_phone: str = ""
    admin_username: str = "admin"
    admin_password_hash: str = ""
    activation_code: str = ""
    is_paid: bool = False

    def is_expired(self, now: datetime) -> bool:
        return self.subscription_end < now

    def is_frozen(self, now: datetime) -> bool:
        return self.is_expired(now) or not self.is_active

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": to_iso(self.created_at),
            "isActive": self.is_active,
            "subscriptionEnd": to_iso(self.subscription_end),
            "plan": self.plan,
            "licenseKey": self.license_key,
            "email": self.email,
            "managerPhone": self.manager_phone,
            "adminUsername": self.admin_username,
            "adminPasswordHash": self.admin_password_hash,
            "activationCode": self.activation_code,
            "isPaid": self.is_paid,
        }

    def to_public_dict(self) -> dict:
        d = self.to_dict()
        d.pop("adminPasswordHash")
        d.pop("activationCode")
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "SchoolMetadata":
        return cls(
            id=str(d["id"]),
            name=str(d.get("name") or ""),
            created_at=from_iso(d["createdAt"]),
            subscription_end=from_iso(d["subscriptionEnd"]),
            is_active=bool(d.get("isActive", True)),
            plan=str(d.get("plan") or SubscriptionPlan.TRIAL.value),
            license_key=str(d.get("licenseKey") or ""),
            email=d.get("email") or None,
            manager_phone=str(d.get("managerPhone") or ""),
            admin_username=str(d.get("adminUsername") or "admin"),
            admin_password_hash=str(d.get("adminPasswordHash") or ""),
            activation_code=str(d.get("activationCode") or ""),
            is_paid=bool(d.get("isPaid")),
        )


@dataclass(frozen=True)
class PricingConfig:
    quarterly: float = 100
    annual: float = 300
    currency: str = "SAR"

    def to_dict(self) -> dict:
        return {"quarterly": self.quarterly, "annual": self.annual, "currency": self.currency}

    @classmethod
    def from_dict(cls, d: dict) -> "PricingConfig":
        return cls(
            quarterly=float(d.get("quarterly", 100)),
            annual=float(d.get("annual", 300)),
            currency=str(d.get("currency") or "SAR"),
        )

    def price_for(self, plan: str) -> float:
        return self.annual if plan == SubscriptionPlan.ANNUAL.value else self.quarterly
