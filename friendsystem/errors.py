"""
Storage error taxonomy
Translates SQLAlchemy and driver exceptions into the kinds the coordinator handles
"""
import asyncio
from typing import Optional

from sqlalchemy import exc as sa_exc

# SQLSTATE codes reported by PostgreSQL
SERIALIZATION_FAILURE = '40001'
DEADLOCK_DETECTED = '40P01'
QUERY_CANCELED = '57014'


class StorageError(Exception):
    """Base class for every storage failure seen by the coordinator"""

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description


class StorageUnavailable(StorageError):
    """No connection could be acquired or the connection was lost"""


class ConstraintViolation(StorageError):
    """A canonical pair key collided on insert"""


class ConsistencyViolation(StorageError):
    """A mutation expected to touch one row touched none"""


class StorageTimeout(StorageError):
    """Connection acquisition or statement timed out"""


class SerializationConflict(StorageError):
    """The transaction lost a serialization race and may be re-run"""


def _sqlstate(error: BaseException) -> Optional[str]:
    orig = getattr(error, 'orig', None)
    for source in (orig, getattr(orig, '__cause__', None)):
        if source is None:
            continue
        code = getattr(source, 'sqlstate', None) or getattr(source, 'pgcode', None)
        if code:
            return str(code)
    return None


def translate_error(error: BaseException, description: str = 'storage operation failed') -> StorageError:
    """Map a raised exception to a StorageError, keeping the original as __cause__"""
    if isinstance(error, StorageError):
        return error

    code = _sqlstate(error)
    message = str(error).lower()

    if isinstance(error, sa_exc.IntegrityError):
        translated = ConstraintViolation(f'{description}: canonical key already exists')
    elif code in (SERIALIZATION_FAILURE, DEADLOCK_DETECTED):
        translated = SerializationConflict(f'{description}: serialization conflict ({code})')
    elif isinstance(error, (sa_exc.TimeoutError, asyncio.TimeoutError)) or code == QUERY_CANCELED:
        translated = StorageTimeout(f'{description}: timed out')
    elif 'database is locked' in message:
        translated = StorageTimeout(f'{description}: database is locked')
    elif isinstance(error, (sa_exc.InterfaceError, sa_exc.OperationalError, OSError)):
        translated = StorageUnavailable(f'{description}: storage unavailable')
    else:
        translated = StorageError(f'{description}: {error}')

    translated.__cause__ = error
    return translated
