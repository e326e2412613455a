from __future__ import annotations

from decimal import Decimal

import pytest

from src.labour_portal.labour_portal.core.enums import Role
from src.labour_portal.labour_portal.core.exceptions import AuthorizationError, ValidationError
from src.labour_portal.labour_portal.settings.model import WorkSettings
from src.labour_portal.labour_portal.settings.service import WorkSettingsService


def test_defaults_give_standard_policy():
    svc = WorkSettingsService()
    policy = svc.policy()
    assert (policy.normal_start, policy.normal_end, policy.overtime_end) == ("09:00", "17:00", "22:00")
    assert svc.current().to_dict()["overtimeRate"] == "35.00"


def test_update_merges_only_given_fields():
    svc = WorkSettingsService()

    updated = svc.update(current_role=Role.ADMIN, data={"normalEndTime": "16:00", "overtimeStartTime": "16:00"})

    assert updated.normal_end_time == "16:00"
    assert updated.normal_start_time == "09:00"
    assert svc.policy().normal_end == "16:00"


def test_policy_snapshot_is_not_changed_by_later_updates():
    svc = WorkSettingsService()
    snapshot = svc.policy()

    svc.update(current_role=Role.ADMIN, data={"overtimeEndTime": "23:00"})

    assert snapshot.overtime_end == "22:00"
    assert svc.policy().overtime_end == "23:00"


@pytest.mark.parametrize(
    "data",
    [
        {"normalStartTime": "9:00"},
        {"normalStartTime": "18:00"},
        {"overtimeStartTime": "16:00"},
        {"overtimeRate": "-5"},
    ],
)
def test_invalid_settings_are_rejected_and_not_applied(data):
    svc = WorkSettingsService()
    with pytest.raises(ValidationError):
        svc.update(current_role=Role.ADMIN, data=data)
    assert svc.current() == WorkSettings()


def test_only_admin_reads_or_changes_settings():
    svc = WorkSettingsService()
    with pytest.raises(AuthorizationError):
        svc.get(current_role=Role.CANDIDATE)
    with pytest.raises(AuthorizationError):
        svc.update(current_role=Role.CLIENT, data={})


def test_from_mapping_applies_configured_defaults():
    settings = WorkSettings.from_mapping({"normalRate": "18.50", "normalStartTime": "08:00"})
    assert settings.normal_rate == Decimal("18.50")
    assert settings.policy().normal_start == "08:00"
