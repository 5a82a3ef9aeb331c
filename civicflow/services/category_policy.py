"""
Category Policy Table - presentation, severity and deadline per category.

DESIGN PRINCIPLES:
- Pure lookup, no side effects, no error path (Category is a closed enum)
- Deadline window is DERIVED from severity, never stored separately
- Reports snapshot these values at creation; editing the table never
  changes existing reports
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, computed_field

from civicflow.models.category import Category


# Severity -> deadline window in days. Anything not listed gets the default.
DEADLINE_DAYS_BY_SEVERITY: Dict[int, int] = {
    5: 1,
    4: 2,
    3: 4,
    2: 7,
}
DEFAULT_DEADLINE_DAYS = 14

SEVERITY_LABELS: Dict[int, str] = {
    5: "Critical",
    4: "Urgent",
    3: "Medium",
    2: "Low",
}
DEFAULT_SEVERITY_LABEL = "Minimal"


def deadline_days_for(severity: int) -> int:
    """Number of days a report of the given severity has before it is overdue."""
    return DEADLINE_DAYS_BY_SEVERITY.get(severity, DEFAULT_DEADLINE_DAYS)


def severity_label(severity: int) -> str:
    return SEVERITY_LABELS.get(severity, DEFAULT_SEVERITY_LABEL)


class CategoryPolicy(BaseModel):
    """Policy entry for one category."""
    label: str
    icon: str
    color: str
    severity: int

    @computed_field
    @property
    def deadline_days(self) -> int:
        return deadline_days_for(self.severity)

    def deadline_from(self, created_at: datetime) -> datetime:
        return created_at + timedelta(days=self.deadline_days)

    class Config:
        frozen = True


# Configuration: (label, icon token, color token, base severity)
_POLICY_TABLE: Dict[Category, Tuple[str, str, str, int]] = {
    Category.ACCIDENT: ("Accident", "car.fill", "red", 5),
    Category.GRAFFITI: ("Graffiti/Vandalism", "pencil.tip", "pink", 1),
    Category.TRASH: ("Trash", "trash.fill", "brown", 1),
    Category.CRIME: ("Crime", "shield.fill", "purple", 4),
    Category.INFRASTRUCTURE: ("Infrastructure", "hammer.fill", "blue", 1),
    Category.TRAFFIC_LIGHT: ("Broken Traffic Light", "🚦", "yellow", 1),
    Category.POTHOLE: ("Pothole", "circle.circle", "brown", 2),
    Category.FLOODING: ("Flooding", "drop.fill", "cyan", 4),
    Category.FALLEN_TREE: ("Fallen Tree", "tree.fill", "green", 1),
    Category.POWER_OUTAGE: ("Power Outage", "bolt.fill", "yellow", 3),
    Category.BROKEN_STREETLIGHT: ("Broken Streetlight", "lightbulb.fill", "yellow", 2),
    Category.PUBLIC_TRANSPORT: ("Public Transport Issue", "bus.fill", "blue", 1),
    Category.LOST_PET: ("Lost Pet", "pawprint.fill", "indigo", 1),
    Category.BLOCKED_ROAD: ("Blocked Road", "xmark.octagon.fill", "red", 3),
    Category.SEWAGE_LEAK: ("Sewage Leak", "exclamationmark.triangle.fill", "brown", 3),
    Category.FIRE_HAZARD: ("Fire Hazard", "flame.fill", "red", 5),
    Category.ANIMAL_DANGER: ("Dangerous Animal", "ant.fill", "orange", 1),
    Category.TRASH_OVERFLOW: ("Trash Overflow", "trash.fill", "gray", 1),
    Category.WATER_LEAK: ("Water Leak", "drop.triangle", "blue", 2),
    Category.GAS_LEAK: ("Gas Leak", "wind", "red", 4),
    Category.STREET_SIGN: ("Missing Street Sign", "signpost.right.fill", "yellow", 1),
    Category.PARKING_ISSUE: ("Parking Issue", "parkingsign", "blue", 1),
    Category.SIDEWALK_DAMAGE: ("Damaged Sidewalk", "figure.walk", "gray", 1),
    Category.BIKE_LANE: ("Bike Lane", "bicycle", "green", 1),
    Category.MINORITY_VULNERABILITY: ("Minority Vulnerability", "person.2.slash.fill", "purple", 1),
    Category.ALCOHOL_RISK: ("Alcohol Risk", "drop.fill", "orange", 1),
    Category.MEDICAL_EMERGENCY: ("Medical Emergency", "cross.case.fill", "red", 5),
    Category.OTHER: ("Other", "exclamationmark.triangle.fill", "gray", 1),
}

_POLICIES: Dict[Category, CategoryPolicy] = {
    category: CategoryPolicy(label=label, icon=icon, color=color, severity=severity)
    for category, (label, icon, color, severity) in _POLICY_TABLE.items()
}

# Free-form reports that do not pick a category
CUSTOM_REPORT_POLICY = CategoryPolicy(
    label="Custom Issue",
    icon="exclamationmark.triangle.fill",
    color="gray",
    severity=1,
)

# Categories whose reporting action must carry a photo
PHOTO_REQUIRED_CATEGORIES = frozenset({Category.TRASH})


def policy_of(category: Category) -> CategoryPolicy:
    """Look up the policy entry of a category."""
    return _POLICIES[Category(category)]


def all_policies() -> List[Tuple[Category, CategoryPolicy]]:
    """Every category with its policy, in enum declaration order."""
    return [(category, _POLICIES[category]) for category in Category]


# Labels written by the first release of the app, before the catalog was
# translated. Only used to recover the category of migrated reports.
LEGACY_LABELS: Dict[str, Category] = {
    "Accident": Category.ACCIDENT,
    "Graffiti/Vandalism": Category.GRAFFITI,
    "Gunoi": Category.TRASH,
    "Infracțiune": Category.CRIME,
    "Infrastructură": Category.INFRASTRUCTURE,
    "Semafor Defect": Category.TRAFFIC_LIGHT,
    "Groapă": Category.POTHOLE,
    "Inundație": Category.FLOODING,
    "Copac Căzut": Category.FALLEN_TREE,
    "Întrerupere Curent": Category.POWER_OUTAGE,
    "Lampă Stinsă": Category.BROKEN_STREETLIGHT,
    "Problemă Transport": Category.PUBLIC_TRANSPORT,
    "Animal Pierdut": Category.LOST_PET,
    "Drum Blocat": Category.BLOCKED_ROAD,
    "Scurgere Canal": Category.SEWAGE_LEAK,
    "Pericol Incendiu": Category.FIRE_HAZARD,
    "Animal Periculos": Category.ANIMAL_DANGER,
    "Gunoi Excesiv": Category.TRASH_OVERFLOW,
    "Scurgere Apă": Category.WATER_LEAK,
    "Scurgere Gaz": Category.GAS_LEAK,
    "Indicator Lipsă": Category.STREET_SIGN,
    "Problemă Parcare": Category.PARKING_ISSUE,
    "Trotuar Deteriorat": Category.SIDEWALK_DAMAGE,
    "Pistă Biciclete": Category.BIKE_LANE,
    "Vulnerabilitate Minorități": Category.MINORITY_VULNERABILITY,
    "Risc Alcool": Category.ALCOHOL_RISK,
    "Urgență Medicală": Category.MEDICAL_EMERGENCY,
    "Altceva": Category.OTHER,
}

_CATEGORIES_BY_LABEL: Dict[str, Category] = {
    **{label.casefold(): category for label, category in LEGACY_LABELS.items()},
    **{policy.label.casefold(): category for category, policy in _POLICIES.items()},
}


def category_for_label(label: Optional[str]) -> Optional[Category]:
    """
    Reverse lookup of a display label (current or legacy), case-insensitive.

    Returns None for labels outside the catalog, i.e. custom reports.
    """
    if not label:
        return None
    return _CATEGORIES_BY_LABEL.get(label.strip().casefold())
