"""Documented exit codes for the lodprep command line tools.

Exit codes follow UNIX conventions:
- 0: Success
- 1: General/unspecified error
- 2: Invalid command-line arguments or configuration
- 3-4: Storage collaborator failures

Usage:
    from lodprep.util.exit_codes import ExitCode
    sys.exit(ExitCode.PERSISTENCE_ERROR)
"""

from __future__ import annotations


class ExitCode:
    """Exit code constants for lodprep processes.

    Attributes:
        SUCCESS: Normal termination, no errors.
        GENERAL_ERROR: Unspecified runtime error.
        INVALID_ARGS: Argument or configuration validation failed.
        ACQUISITION_ERROR: Raw samples could not be read from the database.
        PERSISTENCE_ERROR: Feature rows could not be written or committed.
    """

    SUCCESS: int = 0
    GENERAL_ERROR: int = 1
    INVALID_ARGS: int = 2
    ACQUISITION_ERROR: int = 3
    PERSISTENCE_ERROR: int = 4

    @classmethod
    def message(cls, code: int) -> str:
        """Return a human-readable message for an exit code."""
        messages = {
            cls.SUCCESS: "Success",
            cls.GENERAL_ERROR: "General error",
            cls.INVALID_ARGS: "Invalid arguments",
            cls.ACQUISITION_ERROR: "Reading raw samples failed",
            cls.PERSISTENCE_ERROR: "Writing feature rows failed",
        }
        return messages.get(code, f"Unknown exit code {code}")
