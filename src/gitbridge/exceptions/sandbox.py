from __future__ import annotations

from gitbridge.exceptions.base import GitBridgeError


class SandboxError(GitBridgeError):
    """Exception for failures reported by the sandbox file store.

    Raised when an underlying filesystem call fails. The version-control
    engine inspects ``code`` to decide how to react, so subclasses always
    carry a POSIX-style error code.

    Attributes:
        message: Human-readable error message.
        code: POSIX-style error code (e.g., "ENOENT"), if known.
        path: Path the failing call was made with, if known.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        path: str | None = None,
    ) -> None:
        """Initialize the SandboxError.

        Args:
            message: Human-readable error message.
            code: POSIX-style error code.
            path: Path the failing call was made with.
        """
        self.code = code
        self.path = path
        super().__init__(message)


class SandboxPathNotFoundError(SandboxError):
    """Exception raised when a path has no entry in the sandbox.

    Mirrors a Node-style ``ENOENT`` error so the engine can tell a new path
    from a real failure.

    Attributes:
        message: Human-readable error message.
        code: Always "ENOENT".
        errno: Always -2.
        syscall: Name of the filesystem call that failed (e.g., "stat").
        path: Path that does not exist.
    """

    def __init__(self, path: str, syscall: str = "stat") -> None:
        """Initialize the SandboxPathNotFoundError.

        Args:
            path: Path that does not exist.
            syscall: Name of the filesystem call that failed.
        """
        self.errno = -2
        self.syscall = syscall
        super().__init__(
            f"ENOENT: no such file or directory, {syscall} '{path}'",
            code="ENOENT",
            path=path,
        )


class UnsupportedOperationError(SandboxError):
    """Exception raised for filesystem calls the sandbox cannot honour.

    The sandbox has no symlink model, so ``readlink`` and ``symlink`` fail
    with this error instead of crashing the engine.

    Attributes:
        message: Human-readable error message.
        code: POSIX-style error code ("EINVAL" or "EPERM").
        syscall: Name of the unsupported call.
    """

    def __init__(self, message: str, code: str, syscall: str) -> None:
        """Initialize the UnsupportedOperationError.

        Args:
            message: Human-readable error message.
            code: POSIX-style error code.
            syscall: Name of the unsupported call.
        """
        self.syscall = syscall
        super().__init__(message, code=code)
