"""
Standard exit codes for taggr commands.

Following Unix/POSIX conventions for command-line tools. The documented
command surface only promises 0 and 1; the finer codes are kept for callers
that inspect CommandError.exit_code programmatically.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.

    ``hint`` carries remediation text shown under the error message.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR, hint: Optional[str] = None):
        super().__init__(message)
        self.exit_code = exit_code
        self.hint = hint


class NotLoggedInError(CommandError):
    """Raised when a command needs an API key and none is configured."""
    def __init__(self, message: str = "Not logged in."):
        super().__init__(message, GENERAL_ERROR, hint='Run "taggr login <API_KEY>" first.')


class MetadataMissingError(CommandError):
    """Raised when sync metadata is required but absent."""
    def __init__(self, message: str = "No sync metadata found"):
        super().__init__(message, GENERAL_ERROR, hint='Run "taggr pull --all" first to sync labels.')


class OutdatedLabelsError(CommandError):
    """Raised by strict checks when local labels lag behind the server."""
    def __init__(self, outdated: int = 0, missing: int = 0):
        super().__init__("Labels are outdated. Build failed.", GENERAL_ERROR,
                         hint='Run "taggr pull --all" to update your labels.')
        self.outdated = outdated
        self.missing = missing
