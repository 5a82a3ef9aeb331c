"""
Category catalog endpoint - what a citizen can report and how urgent it is.
"""

from typing import List

from fastapi import APIRouter
from pydantic import BaseModel

from civicflow.models.category import Category
from civicflow.services.category_policy import all_policies, severity_label

router = APIRouter(prefix="/categories", tags=["Categories"])


class CategoryEntry(BaseModel):
    category: Category
    label: str
    icon: str
    color: str
    severity: int
    severity_label: str
    deadline_days: int


@router.get("", response_model=List[CategoryEntry])
async def list_categories():
    return [
        CategoryEntry(
            category=category,
            label=policy.label,
            icon=policy.icon,
            color=policy.color,
            severity=policy.severity,
            severity_label=severity_label(policy.severity),
            deadline_days=policy.deadline_days,
        )
        for category, policy in all_policies()
    ]
