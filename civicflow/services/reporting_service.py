"""
Reporting Service - the citizen-facing "report a problem" action.

Validates what the device collaborators supplied (location, photo) before
anything reaches the report store, and attributes the report to the active
profile by copying its name and email.
"""

from typing import Optional
import logging

from civicflow.core.errors import ValidationError
from civicflow.models.category import Category
from civicflow.models.report import CustomReportFields, Location, Report, Reporter
from civicflow.services.category_policy import PHOTO_REQUIRED_CATEGORIES, policy_of
from civicflow.services.profile_cache import ProfileCache
from civicflow.services.report_store import ReportStore

logger = logging.getLogger(__name__)


class ReportingService:
    """Builds reports from a reporting action and hands them to the store."""

    def __init__(self, store: ReportStore, profiles: ProfileCache):
        self.store = store
        self.profiles = profiles

    def _reporter(self) -> Reporter:
        profile = self.profiles.current()
        if profile is None:
            return Reporter()
        return Reporter(name=profile.name, email=profile.email)

    @staticmethod
    def _require_location(location: Optional[Location]) -> Location:
        # No fallback to (0, 0): a missing fix rejects the report
        if location is None:
            raise ValidationError("Location is not available yet; cannot place the report")
        return location

    def report_category(
        self,
        category: Category,
        location: Optional[Location],
        photo_data: Optional[bytes] = None,
        description: Optional[str] = None,
    ) -> Report:
        """
        Report a catalog category at the given location.

        Raises:
            ValidationError: no location, or a photo-required category without a photo
            PersistenceError: the store could not save
        """
        location = self._require_location(location)

        if category in PHOTO_REQUIRED_CATEGORIES and not photo_data:
            raise ValidationError(f"A photo is required to report '{policy_of(category).label}'")

        description = description.strip() if description else None
        report = self.store.create(
            category,
            location,
            description=description or None,
            photo_data=photo_data,
            reporter=self._reporter(),
        )
        logger.info(f"Category report submitted: {report.id}")
        return report

    def report_custom(
        self,
        fields: CustomReportFields,
        location: Optional[Location],
        photo_data: Optional[bytes],
    ) -> Report:
        """
        Report a free-form issue. Description and photo are both mandatory.

        Raises:
            ValidationError: no location, blank description or missing photo
            PersistenceError: the store could not save
        """
        location = self._require_location(location)

        description = (fields.description or "").strip()
        if not description:
            raise ValidationError("A description is required for a custom report")
        if not photo_data:
            raise ValidationError("A photo is required for a custom report")

        report = self.store.create_custom(
            fields.model_copy(update={"description": description}),
            location,
            photo_data=photo_data,
            reporter=self._reporter(),
        )
        logger.info(f"Custom report submitted: {report.id}")
        return report
