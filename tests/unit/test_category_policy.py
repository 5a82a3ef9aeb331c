from datetime import datetime, timedelta, timezone

import pytest

from civicflow.models.category import Category
from civicflow.services.category_policy import (
    CUSTOM_REPORT_POLICY,
    LEGACY_LABELS,
    all_policies,
    category_for_label,
    deadline_days_for,
    policy_of,
    severity_label,
)


EXPECTED_DEADLINE_DAYS = {5: 1, 4: 2, 3: 4, 2: 7, 1: 14}


def test_every_category_has_a_policy():
    assert len(Category) == 28
    assert [category for category, _ in all_policies()] == list(Category)


@pytest.mark.parametrize("category", list(Category))
def test_deadline_follows_severity_table(category):
    policy = policy_of(category)
    assert 1 <= policy.severity <= 5
    assert policy.deadline_days == EXPECTED_DEADLINE_DAYS[policy.severity]


@pytest.mark.parametrize("category", list(Category))
def test_policy_is_deterministic(category):
    assert policy_of(category) == policy_of(category)


def test_unlisted_severities_get_the_default_window():
    assert deadline_days_for(0) == 14
    assert deadline_days_for(99) == 14


@pytest.mark.parametrize("category,severity", [
    (Category.MEDICAL_EMERGENCY, 5),
    (Category.ACCIDENT, 5),
    (Category.FIRE_HAZARD, 5),
    (Category.GAS_LEAK, 4),
    (Category.FLOODING, 4),
    (Category.CRIME, 4),
    (Category.BLOCKED_ROAD, 3),
    (Category.POWER_OUTAGE, 3),
    (Category.SEWAGE_LEAK, 3),
    (Category.POTHOLE, 2),
    (Category.BROKEN_STREETLIGHT, 2),
    (Category.WATER_LEAK, 2),
    (Category.GRAFFITI, 1),
    (Category.TRASH, 1),
    (Category.OTHER, 1),
])
def test_base_severities(category, severity):
    assert policy_of(category).severity == severity


def test_pothole_policy():
    policy = policy_of(Category.POTHOLE)
    assert policy.label == "Pothole"
    assert policy.color == "brown"
    assert policy.deadline_days == 7


def test_policy_accepts_enum_values():
    assert policy_of("medical_emergency") == policy_of(Category.MEDICAL_EMERGENCY)


def test_deadline_from_adds_window():
    created = datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)
    assert policy_of(Category.ACCIDENT).deadline_from(created) == created + timedelta(days=1)


def test_custom_policy_defaults():
    assert CUSTOM_REPORT_POLICY.severity == 1
    assert CUSTOM_REPORT_POLICY.deadline_days == 14


def test_severity_labels():
    assert severity_label(5) == "Critical"
    assert severity_label(2) == "Low"
    assert severity_label(1) == "Minimal"


@pytest.mark.parametrize("label,category", [
    ("Medical Emergency", Category.MEDICAL_EMERGENCY),
    ("Urgență Medicală", Category.MEDICAL_EMERGENCY),
    ("groapă", Category.POTHOLE),
    ("  Pothole ", Category.POTHOLE),
    ("Altceva", Category.OTHER),
])
def test_category_for_label(label, category):
    assert category_for_label(label) == category


@pytest.mark.parametrize("label", [None, "", "Custom Issue", "Bancă ruptă"])
def test_labels_outside_the_catalog(label):
    assert category_for_label(label) is None


def test_every_category_has_a_legacy_label():
    assert set(LEGACY_LABELS.values()) == set(Category)
