from .coordinator import FriendCoordinator
from .results import RequestResult
from .errors import (
    StorageError,
    StorageUnavailable,
    ConstraintViolation,
    ConsistencyViolation,
    StorageTimeout,
    SerializationConflict,
)

__all__ = [
    'FriendCoordinator',
    'RequestResult',
    'StorageError',
    'StorageUnavailable',
    'ConstraintViolation',
    'ConsistencyViolation',
    'StorageTimeout',
    'SerializationConflict',
]
