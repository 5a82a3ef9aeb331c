"""
Visibility Filter - role-scoped, read-only views over the report store.

DESIGN PRINCIPLES:
- Views are recomputed from the store on every call, nothing is cached
- Municipality and hospital views partition the collection on the
  medical-emergency category
- A role's view is one row of ROLE_VIEW_POLICIES (predicate + sort key);
  adding a role means adding a row, not a new filter function
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
import logging

from civicflow.models.category import Category
from civicflow.models.report import Report
from civicflow.models.user import UserRole
from civicflow.services.report_store import ReportStore, utc_now

logger = logging.getLogger(__name__)


class ViewContext:
    """Who is asking. Only the citizen view needs the email."""

    def __init__(self, email: Optional[str] = None):
        self.email = email


class ViewPolicy:
    """
    Predicate and ordering of one role's view.

    sort_key is applied with reverse=True, so larger keys come first.
    """

    def __init__(
        self,
        predicate: Callable[[Report, ViewContext], bool],
        sort_key: Callable[[Report], Tuple],
        requires_email: bool = False,
    ):
        self.predicate = predicate
        self.sort_key = sort_key
        self.requires_email = requires_email


def is_medical(report: Report) -> bool:
    return report.category == Category.MEDICAL_EMERGENCY


def _newest_first(report: Report) -> Tuple:
    return (report.created_at,)


def _triage_order(report: Report) -> Tuple:
    # Highest severity first, most recent first within a severity
    return (report.severity, report.created_at)


ROLE_VIEW_POLICIES: Dict[UserRole, ViewPolicy] = {
    UserRole.MUNICIPALITY: ViewPolicy(
        predicate=lambda report, ctx: not is_medical(report),
        sort_key=_triage_order,
    ),
    UserRole.HOSPITAL: ViewPolicy(
        predicate=lambda report, ctx: is_medical(report),
        sort_key=_newest_first,
    ),
    UserRole.CITIZEN: ViewPolicy(
        predicate=lambda report, ctx: ctx.email is not None and report.reporter_email == ctx.email,
        sort_key=_newest_first,
        requires_email=True,
    ),
}


def refine(reports: List[Report], resolved: bool = False, search: Optional[str] = None) -> List[Report]:
    """
    Narrow a view by resolution status and a case-insensitive search term.

    The search matches category label, description and reporter name.
    Order is preserved.
    """
    refined = [report for report in reports if report.is_resolved == resolved]

    term = (search or "").strip().casefold()
    if not term:
        return refined

    def matches(report: Report) -> bool:
        fields = (report.category_label, report.description, report.reporter_name)
        return any(field and term in field.casefold() for field in fields)

    return [report for report in refined if matches(report)]


class VisibilityFilter:
    """Role-aware projection over a ReportStore."""

    def __init__(
        self,
        store: ReportStore,
        policies: Optional[Dict[UserRole, ViewPolicy]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.policies = ROLE_VIEW_POLICIES if policies is None else policies
        self.clock = clock

    def view_for(self, role: UserRole, email: Optional[str] = None) -> List[Report]:
        """
        Reports visible to a role, in the role's order.

        Raises:
            ValueError: the role has no view policy, or a citizen view was
                requested without an email
        """
        policy = self.policies.get(UserRole(role))
        if policy is None:
            raise ValueError(f"No view policy for role: {role}")
        if policy.requires_email and not email:
            raise ValueError(f"The {UserRole(role).value} view requires an email")

        ctx = ViewContext(email=email)
        visible = [report for report in self.store.all() if policy.predicate(report, ctx)]
        return sorted(visible, key=policy.sort_key, reverse=True)

    def municipality_view(self) -> List[Report]:
        return self.view_for(UserRole.MUNICIPALITY)

    def hospital_view(self) -> List[Report]:
        return self.view_for(UserRole.HOSPITAL)

    def citizen_view(self, email: str) -> List[Report]:
        return self.view_for(UserRole.CITIZEN, email=email)

    def refined_view(
        self,
        role: UserRole,
        email: Optional[str] = None,
        resolved: bool = False,
        search: Optional[str] = None,
    ) -> List[Report]:
        """A role view narrowed by resolution status (default: open only) and search."""
        return refine(self.view_for(role, email=email), resolved=resolved, search=search)

    def status_counts(self, role: UserRole, email: Optional[str] = None) -> Dict[str, int]:
        """Open, resolved and overdue counts of a role's view."""
        reports = self.view_for(role, email=email)
        now = self.clock()
        resolved = sum(1 for report in reports if report.is_resolved)
        return {
            "active": len(reports) - resolved,
            "resolved": resolved,
            "overdue": sum(1 for report in reports if report.is_overdue(now)),
        }

    def overdue(self, role: UserRole, email: Optional[str] = None) -> List[Report]:
        """Open reports of a role's view whose deadline has passed."""
        now = self.clock()
        return [report for report in self.view_for(role, email=email) if report.is_overdue(now)]
