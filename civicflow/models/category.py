"""
Closed set of civic issue categories.
"""

from enum import Enum


class Category(str, Enum):
    """
    Kind of civic issue a citizen can report.

    The set is fixed; presentation and severity live in the category
    policy table (services/category_policy.py).
    """
    ACCIDENT = "accident"
    GRAFFITI = "graffiti"
    TRASH = "trash"
    CRIME = "crime"
    INFRASTRUCTURE = "infrastructure"
    TRAFFIC_LIGHT = "traffic_light"
    POTHOLE = "pothole"
    FLOODING = "flooding"
    FALLEN_TREE = "fallen_tree"
    POWER_OUTAGE = "power_outage"
    BROKEN_STREETLIGHT = "broken_streetlight"
    PUBLIC_TRANSPORT = "public_transport"
    LOST_PET = "lost_pet"
    BLOCKED_ROAD = "blocked_road"
    SEWAGE_LEAK = "sewage_leak"
    FIRE_HAZARD = "fire_hazard"
    ANIMAL_DANGER = "animal_danger"
    TRASH_OVERFLOW = "trash_overflow"
    WATER_LEAK = "water_leak"
    GAS_LEAK = "gas_leak"
    STREET_SIGN = "street_sign"
    PARKING_ISSUE = "parking_issue"
    SIDEWALK_DAMAGE = "sidewalk_damage"
    BIKE_LANE = "bike_lane"
    MINORITY_VULNERABILITY = "minority_vulnerability"
    ALCOHOL_RISK = "alcohol_risk"
    MEDICAL_EMERGENCY = "medical_emergency"
    OTHER = "other"
