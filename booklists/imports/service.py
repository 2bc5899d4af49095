"""Business logic for book list imports."""

import logging

from booklists.catalog.store import CatalogStore
from booklists.config import Settings, get_settings
from booklists.imports.conflict_detectors import ConflictDetector
from booklists.imports.executor import ImportExecutor
from booklists.imports.parsers import parse_import_file, validate_payload
from booklists.imports.restore import restore_snapshot
from booklists.imports.schemas import (
    ConflictInfo,
    ExportPayload,
    ImportPreview,
    ImportResult,
    ImportSnapshot,
    ImportStrategy,
    PayloadSummary,
    RestoreSummary,
)
from booklists.imports.snapshot import create_snapshot
from booklists.imports.strategy import count_unresolved_conflicts

logger = logging.getLogger(__name__)


class UnresolvedConflictsError(Exception):
    """Raised by ``run_import`` when detailed-mode field conflicts remain."""

    def __init__(self, unresolved: int):
        super().__init__(f"{unresolved} field conflict(s) still need a resolution")
        self.unresolved = unresolved


class ListImportService:
    """Service for previewing, executing and undoing book list imports."""

    def __init__(self, store: CatalogStore, settings: Settings | None = None):
        """Initialize list import service.

        Args:
            store: Catalog store the import reads from and writes to.
            settings: Application settings (supported format versions).
        """
        self.store = store
        self.settings = settings or get_settings()

    def parse(self, text: str | bytes) -> ExportPayload:
        return parse_import_file(
            text,
            min_version=self.settings.import_min_version,
            max_version=self.settings.import_max_version,
        )

    def validate(self, data: dict) -> ExportPayload:
        return validate_payload(
            data,
            min_version=self.settings.import_min_version,
            max_version=self.settings.import_max_version,
        )

    def detect_conflicts(self, payload: ExportPayload) -> ConflictInfo:
        return ConflictDetector(self.store).detect(payload)

    def preview(self, payload: ExportPayload) -> ImportPreview:
        """Summarize a payload and list its conflicts with the catalog."""
        return ImportPreview(
            summary=PayloadSummary(
                version=payload.version,
                exported_at=payload.exported_at,
                list_count=len(payload.lists),
                book_count=payload.book_count,
            ),
            conflicts=self.detect_conflicts(payload),
        )

    def count_unresolved(self, payload: ExportPayload, strategy: ImportStrategy) -> int:
        return count_unresolved_conflicts(strategy, self.detect_conflicts(payload))

    def create_snapshot(self, payload: ExportPayload, strategy: ImportStrategy) -> ImportSnapshot:
        return create_snapshot(payload, strategy, self.store)

    def execute_import(
        self,
        payload: ExportPayload,
        strategy: ImportStrategy,
        snapshot: ImportSnapshot,
    ) -> ImportResult:
        return ImportExecutor(self.store).execute(payload, strategy, snapshot)

    def run_import(self, payload: ExportPayload, strategy: ImportStrategy) -> ImportResult:
        """Check for unresolved conflicts, snapshot, then execute.

        Args:
            payload: Validated export payload.
            strategy: Resolution strategy.

        Returns:
            ImportResult including the snapshot needed for undo.

        Raises:
            UnresolvedConflictsError: If detailed-mode field conflicts remain.
        """
        unresolved = self.count_unresolved(payload, strategy)
        if unresolved:
            raise UnresolvedConflictsError(unresolved)

        snapshot = self.create_snapshot(payload, strategy)
        result = self.execute_import(payload, strategy, snapshot)
        if not result.success:
            logger.warning(f"List import failed: {result.errors}")
        return result

    def restore_snapshot(self, snapshot: ImportSnapshot) -> RestoreSummary:
        return restore_snapshot(snapshot, self.store)
