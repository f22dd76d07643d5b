import asyncio
import pytest
from sqlalchemy import exc as sa_exc

from friendsystem.errors import (
    ConstraintViolation,
    SerializationConflict,
    StorageError,
    StorageTimeout,
    StorageUnavailable,
    translate_error,
)


class PgError(Exception):
    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


@pytest.mark.parametrize('error, expected', [
    (sa_exc.IntegrityError('INSERT', {}, Exception('UNIQUE constraint failed')), ConstraintViolation),
    (sa_exc.DBAPIError('COMMIT', None, PgError('could not serialize access', '40001')), SerializationConflict),
    (sa_exc.DBAPIError('UPDATE', None, PgError('deadlock detected', '40P01')), SerializationConflict),
    (sa_exc.DBAPIError('SELECT', None, PgError('canceling statement due to statement timeout', '57014')), StorageTimeout),
    (sa_exc.TimeoutError('QueuePool limit reached'), StorageTimeout),
    (asyncio.TimeoutError(), StorageTimeout),
    (sa_exc.OperationalError('BEGIN IMMEDIATE', None, Exception('database is locked')), StorageTimeout),
    (sa_exc.OperationalError(None, None, Exception('unable to open database file')), StorageUnavailable),
    (sa_exc.InterfaceError(None, None, Exception('connection is closed')), StorageUnavailable),
    (ConnectionRefusedError(111, 'Connection refused'), StorageUnavailable),
    (sa_exc.ProgrammingError('SELECT', None, Exception('no such table')), StorageError),
])
def test_translate_error(error, expected):
    translated = translate_error(error, 'send_friend_request')

    assert type(translated) is expected
    assert translated.__cause__ is error
    assert translated.description.startswith('send_friend_request')

def test_storage_errors_pass_through():
    error = StorageUnavailable('no connection')
    assert translate_error(error) is error
