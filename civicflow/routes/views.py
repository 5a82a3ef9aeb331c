"""
Role-scoped report views (municipality triage list, hospital list, citizen history).
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from civicflow.dependencies import get_current_profile, get_visibility
from civicflow.models.report import Report
from civicflow.models.user import Profile, UserRole
from civicflow.services.visibility import VisibilityFilter

router = APIRouter(prefix="/views", tags=["Views"])


def _view(
    visibility: VisibilityFilter,
    role: UserRole,
    email: Optional[str],
    resolved: bool,
    q: Optional[str],
) -> List[Report]:
    try:
        return visibility.refined_view(role, email=email, resolved=resolved, search=q)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("/me", response_model=List[Report])
async def my_view(
    resolved: bool = Query(False, description="Show resolved reports instead of open ones"),
    q: Optional[str] = Query(None, description="Case-insensitive search"),
    profile: Optional[Profile] = Depends(get_current_profile),
    visibility: VisibilityFilter = Depends(get_visibility),
):
    """The view of the active profile's role."""
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in")
    return _view(visibility, profile.role, profile.email, resolved, q)


@router.get("/{role}", response_model=List[Report])
async def role_view(
    role: UserRole,
    email: Optional[str] = Query(None, description="Reporter email (citizen view only)"),
    resolved: bool = Query(False, description="Show resolved reports instead of open ones"),
    q: Optional[str] = Query(None, description="Case-insensitive search"),
    visibility: VisibilityFilter = Depends(get_visibility),
):
    return _view(visibility, role, email, resolved, q)


@router.get("/{role}/counts")
async def role_view_counts(
    role: UserRole,
    email: Optional[str] = Query(None, description="Reporter email (citizen view only)"),
    visibility: VisibilityFilter = Depends(get_visibility),
) -> Dict[str, int]:
    """Open, resolved and overdue totals of a role's view."""
    try:
        return visibility.status_counts(role, email=email)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
