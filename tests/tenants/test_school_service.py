from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from src.madrasti.madrasti.core.constants import PRICING_REMOTE_KEY, REGISTRY_REMOTE_KEY
from src.madrasti.madrasti.core.enums import SubscriptionPlan
from src.madrasti.madrasti.core.exceptions import NotFoundError, SubscriptionError, ValidationError
from src.madrasti.madrasti.tenants.model import PricingConfig
from src.madrasti.madrasti.tenants.service import SchoolService
from src.madrasti.madrasti.tenants.synced_registry import SyncedTenantRegistry

NOW = datetime(2024, 9, 1, 8, 0, tzinfo=timezone.utc)


@dataclass
class FakeEmailSender:
    ok: bool = True
    sent: list = field(default_factory=list)

    def send(self, to_address: str, subject: str, body: str) -> bool:
        self.sent.append((to_address, subject, body))
        return self.ok


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock():
    return Clock(NOW)


@pytest.fixture()
def email():
    return FakeEmailSender()


@pytest.fixture()
def registry(cache, remote):
    return SyncedTenantRegistry(cache, remote, cloud_enabled=True)


@pytest.fixture()
def service(registry, email, remote, clock):
    return SchoolService(registry, email, remote=remote, clock=clock)


def test_register_school_starts_trial_and_emails_code(service, email):
    school = service.register_school(name="مدرسة النور", email="head@example.com", admin_password="secret1")

    assert school.id.startswith("sch_")
    assert school.plan == SubscriptionPlan.TRIAL.value
    assert school.subscription_end == NOW + timedelta(days=7)
    assert school.license_key.startswith("KEY-")
    assert school.admin_password_hash != "secret1"
    assert email.sent[0][0] == "head@example.com"
    assert school.id in email.sent[0][2]


def test_register_requires_name_and_strong_password(service):
    with pytest.raises(ValidationError):
        service.register_school(name=" ", admin_password="secret1")
    with pytest.raises(ValidationError):
        service.register_school(name="مدرسة", admin_password="123")


def test_email_failure_does_not_block_registration(service, email, registry, caplog):
    email.ok = False
    school = service.register_school(name="مدرسة", email="x@example.com", admin_password="secret1")

    assert registry.get(school.id) == school
    assert "was not delivered" in caplog.text


def test_registry_is_mirrored_to_remote_immediately(service, remote):
    school = service.register_school(name="مدرسة", admin_password="secret1")

    saved = remote.system_data[REGISTRY_REMOTE_KEY]
    assert [s["id"] for s in saved] == [school.id]


def test_registry_refresh_prefers_remote_copy(cache, remote, service):
    school = service.register_school(name="مدرسة", admin_password="secret1")

    fresh = SyncedTenantRegistry(cache, remote, cloud_enabled=True)
    remote.system_data[REGISTRY_REMOTE_KEY] = []
    assert fresh.get(school.id) is not None

    assert fresh.refresh_from_remote() is True
    assert fresh.list() == []


def test_registry_survives_remote_outage(cache, remote):
    remote.fail_reads = True
    remote.fail_writes = True
    registry = SyncedTenantRegistry(cache, remote, cloud_enabled=True)
    service = SchoolService(registry, FakeEmailSender(), clock=Clock(NOW))

    school = service.register_school(name="مدرسة", admin_password="secret1")

    assert registry.refresh_from_remote() is False
    assert SyncedTenantRegistry(cache, None).get(school.id) == school


def test_enter_school_rejects_unknown_and_disabled(service):
    with pytest.raises(NotFoundError):
        service.enter_school("sch_nope")

    school = service.register_school(name="مدرسة", admin_password="secret1")
    service.toggle_status(school.id)

    with pytest.raises(SubscriptionError):
        service.enter_school(school.id)


def test_school_freezes_when_trial_ends(service, clock):
    school = service.register_school(name="مدرسة", admin_password="secret1")
    assert service.is_frozen(school) is False

    clock.now = NOW + timedelta(days=8)

    assert service.is_frozen(service.get_school(school.id)) is True


def test_upgrade_needs_current_activation_code(service, clock):
    school = service.register_school(name="مدرسة", admin_password="secret1")
    clock.now = NOW + timedelta(days=30)

    assert service.upgrade_subscription(school.id, SubscriptionPlan.ANNUAL.value, "0000") is False

    assert service.upgrade_subscription(school.id, SubscriptionPlan.ANNUAL.value, school.activation_code) is True
    upgraded = service.get_school(school.id)
    assert upgraded.is_paid is True
    assert upgraded.subscription_end == clock.now + timedelta(days=365)
    assert upgraded.activation_code != school.activation_code


def test_upgrade_rejects_unknown_plan(service):
    school = service.register_school(name="مدرسة", admin_password="secret1")
    with pytest.raises(ValidationError):
        service.upgrade_subscription(school.id, "lifetime", school.activation_code)


def test_request_renewal_sends_activation_code(service, email):
    school = service.register_school(name="مدرسة", email="head@example.com", admin_password="secret1")

    assert service.request_renewal(school.id) is True
    assert school.activation_code in email.sent[-1][2]


def test_request_renewal_without_email(service):
    school = service.register_school(name="مدرسة", admin_password="secret1")
    assert service.request_renewal(school.id) is False


def test_extend_and_delete(service):
    school = service.register_school(name="مدرسة", admin_password="secret1")
    end = NOW + timedelta(days=100)

    assert service.extend_subscription(school.id, end).subscription_end == end

    service.delete_school(school.id)
    with pytest.raises(NotFoundError):
        service.get_school(school.id)


def test_search_matches_name_or_id(service):
    a = service.register_school(name="مدرسة النور", admin_password="secret1")
    service.register_school(name="مدرسة الفجر", admin_password="secret1")

    assert [s.id for s in service.list_schools("النور")] == [a.id]
    assert [s.id for s in service.list_schools(a.id)] == [a.id]
    assert len(service.list_schools()) == 2


def test_pricing_is_saved_remotely(service, remote):
    service.save_pricing(PricingConfig(quarterly=150, annual=400))

    assert remote.system_data[PRICING_REMOTE_KEY]["annual"] == 400
    assert service.get_pricing().price_for(SubscriptionPlan.QUARTERLY.value) == 150

    with pytest.raises(ValidationError):
        service.save_pricing(PricingConfig(quarterly=-1))


@pytest.mark.parametrize(
    "bad_registry",
    [
        [{"name": "no id"}],
        [{"id": "sch_x", "createdAt": "not a date", "subscriptionEnd": "2024-01-01T00:00:00"}],
        "not a list of schools",
        [None],
    ],
)
def test_malformed_remote_registry_keeps_local_list(cache, remote, service, bad_registry, caplog):
    school = service.register_school(name="مدرسة", admin_password="secret1")
    remote.system_data[REGISTRY_REMOTE_KEY] = bad_registry

    fresh = SyncedTenantRegistry(cache, remote, cloud_enabled=True)

    assert fresh.refresh_from_remote() is False
    assert fresh.get(school.id) == school
    assert "keeping the local list" in caplog.text


def test_malformed_remote_pricing_falls_back(service, remote):
    remote.system_data[PRICING_REMOTE_KEY] = {"quarterly": "free"}

    assert service.get_pricing() == PricingConfig()
