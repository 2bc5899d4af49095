"""Imports module for book list export files."""

from booklists.imports.conflict_detectors import (
    ConflictDetector,
    DetectionContext,
    detect_conflicts,
)
from booklists.imports.executor import ImportExecutor, execute_import
from booklists.imports.matching import book_key, find_existing_book, generate_unique_name
from booklists.imports.parsers import (
    MAX_SUPPORTED_VERSION,
    MIN_SUPPORTED_VERSION,
    ImportParseError,
    ParseErrorCode,
    parse_import_file,
    validate_payload,
)
from booklists.imports.restore import restore_snapshot
from booklists.imports.router import router
from booklists.imports.schemas import (
    BookAction,
    BookConflict,
    BookConflictResolution,
    BookField,
    CommentMerge,
    ConflictInfo,
    ExportPayload,
    FieldChoice,
    FieldMerge,
    ImportResult,
    ImportSnapshot,
    ImportStrategy,
    ListAction,
    ListConflictResolution,
    ListNameConflict,
)
from booklists.imports.service import ListImportService, UnresolvedConflictsError
from booklists.imports.snapshot import SnapshotBuilder, create_snapshot
from booklists.imports.strategy import DEFAULT_STRATEGY, count_unresolved_conflicts

__all__ = [
    "router",
    "parse_import_file",
    "validate_payload",
    "ImportParseError",
    "ParseErrorCode",
    "MIN_SUPPORTED_VERSION",
    "MAX_SUPPORTED_VERSION",
    "ExportPayload",
    # Conflict detection
    "book_key",
    "find_existing_book",
    "generate_unique_name",
    "DetectionContext",
    "ConflictDetector",
    "detect_conflicts",
    "ConflictInfo",
    "ListNameConflict",
    "BookConflict",
    # Strategy
    "ImportStrategy",
    "ListConflictResolution",
    "BookConflictResolution",
    "ListAction",
    "BookAction",
    "CommentMerge",
    "FieldMerge",
    "FieldChoice",
    "BookField",
    "DEFAULT_STRATEGY",
    "count_unresolved_conflicts",
    # Execution and undo
    "SnapshotBuilder",
    "create_snapshot",
    "ImportExecutor",
    "execute_import",
    "restore_snapshot",
    "ImportSnapshot",
    "ImportResult",
    "ListImportService",
    "UnresolvedConflictsError",
]
