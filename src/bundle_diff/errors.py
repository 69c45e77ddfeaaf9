"""Error types and process exit codes."""

from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Process exit codes for the CLI."""

    success = 0
    input_error = 1
    metadata_error = 2


class BundleDiffError(Exception):
    """Base class for fatal errors that abort a comparison."""

    exit_code: ExitCode = ExitCode.input_error


class SnapshotError(BundleDiffError):
    """A lock file snapshot could not be read or parsed."""

    exit_code = ExitCode.input_error


class SnapshotSourceError(SnapshotError):
    """The git repository, ref or lock file path does not exist."""


class LockfileParseError(SnapshotError):
    """The lock file text is malformed."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class MetadataFetchError(BundleDiffError):
    """A Ruby Toolbox batch request failed or returned an unusable payload."""

    exit_code = ExitCode.metadata_error
