"""Parsing and validation of book list export files."""

import json
from enum import Enum
from typing import Any

from pydantic import ValidationError

from booklists.imports.schemas import ExportPayload

# Supported export format versions (inclusive)
MIN_SUPPORTED_VERSION = 2
MAX_SUPPORTED_VERSION = 3


class ParseErrorCode(str, Enum):
    """Reasons an export file can be rejected."""

    INVALID_JSON = "invalid-json"
    INVALID_STRUCTURE = "invalid-structure"
    UNSUPPORTED_VERSION = "unsupported-version"


class ImportParseError(Exception):
    """Raised when an export file cannot be used for import.

    Attributes:
        code: Machine-readable reason.
        detail: Human-readable description.
        version: Offending version for ``unsupported-version`` errors.
    """

    def __init__(self, code: ParseErrorCode, detail: str, version: Any = None):
        super().__init__(detail)
        self.code = code
        self.detail = detail
        self.version = version


def parse_import_file(
    text: str | bytes,
    min_version: int = MIN_SUPPORTED_VERSION,
    max_version: int = MAX_SUPPORTED_VERSION,
) -> ExportPayload:
    """Decode and validate the contents of an export file.

    Args:
        text: Raw file contents.
        min_version: Oldest accepted format version.
        max_version: Newest accepted format version.

    Returns:
        Validated payload.

    Raises:
        ImportParseError: If the text is not JSON, lacks the expected
            structure, or carries an unsupported version.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportParseError(ParseErrorCode.INVALID_JSON, f"Invalid JSON file: {e}")

    return validate_payload(data, min_version=min_version, max_version=max_version)


def validate_payload(
    data: Any,
    min_version: int = MIN_SUPPORTED_VERSION,
    max_version: int = MAX_SUPPORTED_VERSION,
) -> ExportPayload:
    """Validate an already decoded export document.

    Args:
        data: Decoded JSON value.
        min_version: Oldest accepted format version.
        max_version: Newest accepted format version.

    Returns:
        Validated payload.

    Raises:
        ImportParseError: On missing fields, bad types or unsupported version.
    """
    if not isinstance(data, dict):
        raise ImportParseError(
            ParseErrorCode.INVALID_STRUCTURE, "Invalid export format: expected a JSON object"
        )

    version = data.get("version")
    if not version or not data.get("exportedAt") or not isinstance(data.get("lists"), list):
        raise ImportParseError(
            ParseErrorCode.INVALID_STRUCTURE,
            "Invalid export format: 'version', 'exportedAt' and 'lists' are required",
        )

    # bool is an int subclass; reject it explicitly
    if not isinstance(version, int) or isinstance(version, bool):
        raise ImportParseError(
            ParseErrorCode.INVALID_STRUCTURE,
            f"Invalid export format: version must be an integer, got {version!r}",
        )

    if version < min_version or version > max_version:
        raise ImportParseError(
            ParseErrorCode.UNSUPPORTED_VERSION,
            f"Unsupported version: {version} (supported: {min_version}-{max_version})",
            version=version,
        )

    try:
        return ExportPayload.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ImportParseError(
            ParseErrorCode.INVALID_STRUCTURE, f"Invalid export format: {errors}"
        )
