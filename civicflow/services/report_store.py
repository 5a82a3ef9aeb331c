"""
Report Store - in-memory report collection backed by a blob store.

DESIGN NOTE:
- Every mutating call saves the full collection before returning
- A miss on update_status writes nothing
- remove/remove_all are hard deletes and are idempotent
- Load never refuses to start: missing, corrupt or unreadable blobs
  degrade to an empty collection
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
import logging
import uuid

from pydantic import ValidationError as PydanticValidationError

from civicflow.core.errors import PersistenceError
from civicflow.models.category import Category
from civicflow.models.report import CustomReportFields, Location, Report, Reporter
from civicflow.services.blob_store import BlobStore, REPORTS_KEY
from civicflow.services.category_policy import CUSTOM_REPORT_POLICY, deadline_days_for, policy_of
from civicflow.utils.blob_codec import CorruptBlob, decode_items, encode_items

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportStore:
    """
    Owns the report collection of one device.

    Not thread-safe: callers must serialize access (single writer).
    """

    def __init__(self, blob_store: BlobStore, clock: Callable[[], datetime] = utc_now):
        self.blob_store = blob_store
        self.clock = clock
        self._reports: List[Report] = []

    def __len__(self) -> int:
        return len(self._reports)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> List[Report]:
        """
        Replace the in-memory collection with the persisted one.

        Returns:
            The loaded reports (empty when nothing usable was stored)
        """
        try:
            raw = self.blob_store.get(REPORTS_KEY)
        except PersistenceError as e:
            logger.error(f"Report blob could not be read, starting with an empty collection: {e}")
            self._reports = []
            return []

        if raw is None:
            self._reports = []
            return []

        try:
            self._reports = [Report.model_validate(item) for item in decode_items(raw)]
        except (CorruptBlob, PydanticValidationError) as e:
            logger.warning(f"Report blob is corrupt, starting with an empty collection: {e}")
            self._reports = []

        logger.info(f"Loaded {len(self._reports)} report(s)")
        return list(self._reports)

    def save(self) -> None:
        """
        Serialize the full collection and hand it to the blob store.

        Raises:
            PersistenceError: the blob store write failed
        """
        items = [report.model_dump(mode="json") for report in self._reports]
        self.blob_store.put(REPORTS_KEY, encode_items(items))
        logger.debug(f"Saved {len(items)} report(s)")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all(self) -> List[Report]:
        """Snapshot of every report, in insertion order."""
        return list(self._reports)

    def get(self, report_id: str) -> Optional[Report]:
        for report in self._reports:
            if report.id == report_id:
                return report
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _append(self, report: Report) -> Report:
        self._reports.append(report)
        try:
            self.save()
        except PersistenceError:
            self._reports.pop()
            raise
        logger.info(f"Report created: {report.id} ({report.category_label}, severity {report.severity})")
        return report

    def create(
        self,
        category: Category,
        location: Location,
        description: Optional[str] = None,
        photo_data: Optional[bytes] = None,
        reporter: Optional[Reporter] = None,
    ) -> Report:
        """
        Create a report for a catalog category.

        Label, icon, color and severity are copied from the category policy;
        the deadline is created_at plus the severity's deadline window.
        """
        policy = policy_of(category)
        created_at = self.clock()
        reporter = reporter or Reporter()

        report = Report(
            id=str(uuid.uuid4()),
            location=location,
            category=category,
            category_label=policy.label,
            icon=policy.icon,
            color=policy.color,
            description=description,
            photo_data=photo_data,
            created_at=created_at,
            severity=policy.severity,
            reporter_name=reporter.name,
            reporter_email=reporter.email,
            deadline=policy.deadline_from(created_at),
        )
        return self._append(report)

    def create_custom(
        self,
        fields: CustomReportFields,
        location: Location,
        photo_data: Optional[bytes] = None,
        reporter: Optional[Reporter] = None,
    ) -> Report:
        """
        Create a free-form report.

        Presentation fields default to the custom-report policy; severity
        defaults to 1 and the deadline follows the chosen severity.
        """
        created_at = self.clock()
        reporter = reporter or Reporter()
        severity = fields.severity or CUSTOM_REPORT_POLICY.severity

        report = Report(
            id=str(uuid.uuid4()),
            location=location,
            category=None,
            category_label=fields.label or CUSTOM_REPORT_POLICY.label,
            icon=fields.icon or CUSTOM_REPORT_POLICY.icon,
            color=fields.color or CUSTOM_REPORT_POLICY.color,
            description=fields.description,
            photo_data=photo_data,
            created_at=created_at,
            severity=severity,
            reporter_name=reporter.name,
            reporter_email=reporter.email,
            deadline=created_at + timedelta(days=deadline_days_for(severity)),
        )
        return self._append(report)

    def remove(self, report_id: str) -> None:
        """Delete a report by ID. Unknown IDs are a no-op apart from the re-save."""
        before = self._reports
        self._reports = [report for report in before if report.id != report_id]
        try:
            self.save()
        except PersistenceError:
            self._reports = before
            raise

        if len(self._reports) != len(before):
            logger.info(f"Report removed: {report_id}")

    def remove_all(self) -> None:
        """Delete every report. Irreversible."""
        before = self._reports
        self._reports = []
        try:
            self.save()
        except PersistenceError:
            self._reports = before
            raise
        logger.info(f"All reports removed ({len(before)} deleted)")

    def update_status(self, report_id: str, is_resolved: bool) -> bool:
        """
        Resolve or reopen a report.

        Returns:
            True if the report exists (and was saved), False otherwise
        """
        index = self._index_of(report_id)
        if index is None:
            logger.info(f"Status update skipped, report not found: {report_id}")
            return False

        previous = self._reports[index]
        self._reports[index] = previous.model_copy(update={
            "is_resolved": is_resolved,
            "resolved_at": self.clock() if is_resolved else None,
        })
        try:
            self.save()
        except PersistenceError:
            self._reports[index] = previous
            raise

        logger.info(f"Report {report_id} marked {'resolved' if is_resolved else 'unresolved'}")
        return True

    def _index_of(self, report_id: str) -> Optional[int]:
        for index, report in enumerate(self._reports):
            if report.id == report_id:
                return index
        return None

