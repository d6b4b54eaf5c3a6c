"""
Error kinds raised by rigedit_sdk_python.

Parse failures and read failures are kept apart so a workflow layer can tell
"the file was unreadable" from "the file was read but is not valid BVH":

    ImportParseError (ValueError)
        HierarchyParseError   - HIERARCHY block is structurally invalid
        MotionDataError       - MOTION block does not match the channel layout
    ImportReadError (OSError) - source could not be read
    StorageWriteError (OSError) - persistence layer full or unavailable

Mirroring a bone without a counterpart and undoing with an empty history are
not errors: those operations return None / False instead.
"""


class ImportParseError(ValueError):
    """Text was read but does not follow the BVH grammar."""

    def __init__(self, message, line_number=None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class HierarchyParseError(ImportParseError):
    """Missing or malformed HIERARCHY block (joints, offsets, channels)."""


class MotionDataError(ImportParseError):
    """MOTION block is malformed, truncated, or has the wrong channel count."""


class ImportReadError(OSError):
    """The import source could not be read."""


class StorageWriteError(OSError):
    """Persisting an imported skeleton failed."""
