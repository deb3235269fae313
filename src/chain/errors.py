"""Error taxonomy for token launches.

Every failure that can reach a caller carries an ``ErrorKind`` so the API
layer (and tests) can branch on the kind instead of parsing messages.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    ALLOCATION_EXHAUSTED = "allocation_exhausted"
    STORAGE_FAILED = "storage_failed"
    SIMULATION_FAILED = "simulation_failed"
    RELAY_FAILED = "relay_failed"
    BROADCAST_FAILED = "broadcast_failed"
    ONCHAIN_ERROR = "onchain_error"
    PERSISTENCE_FAILED = "persistence_failed"


class LauncherError(Exception):
    kind: ErrorKind = ErrorKind.BROADCAST_FAILED

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(LauncherError):
    kind = ErrorKind.VALIDATION


class AllocationError(LauncherError):
    kind = ErrorKind.ALLOCATION_EXHAUSTED


class StorageError(LauncherError):
    kind = ErrorKind.STORAGE_FAILED


class PersistenceError(LauncherError):
    kind = ErrorKind.PERSISTENCE_FAILED


class RpcError(LauncherError):
    """JSON-RPC call failed: transport, HTTP status or RPC-level error."""

    def __init__(self, message: str, *, code: int | None = None, data: object = None) -> None:
        super().__init__(message, kind=ErrorKind.BROADCAST_FAILED)
        self.code = code
        self.data = data


class RelayError(LauncherError):
    kind = ErrorKind.RELAY_FAILED


class ConfirmationTimeoutError(RpcError):
    """Signature never reached the requested commitment before expiry."""
