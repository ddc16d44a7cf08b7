"""Process exit codes for promu commands.

Fatal conditions (bad configuration, a failed builder container, an upload
that exhausted its retries) end the process with one of these codes.
Warnings never change the exit code.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad flag value, invalid argument)
    - 2: Configuration error (missing repository path, unreadable config)
    - 3: Build error (a builder container exited non-zero)
    - 4: Upload error (retries exhausted)
    - 5: I/O error (tarball directory missing or unreadable)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    BUILD_ERROR = 3
    UPLOAD_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
