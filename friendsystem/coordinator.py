"""
Friend request coordinator

Runs each friend system transition as a single read-decide-write transaction
against the relationship store. Per unordered pair (A, B) the states are

    NONE | PENDING_A_TO_B | PENDING_B_TO_A | FRIENDS

and two opposite pending requests always collapse into one friendship.
Storage failures never escape a transition: the transaction is rolled back,
the cause is logged and the caller receives RequestResult.FAILED.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from . import crud
from .crud import PairState
from .errors import (
    ConsistencyViolation,
    SerializationConflict,
    StorageError,
    translate_error,
)
from .metrics import record_outcome, record_retry
from .results import RequestResult

logger = logging.getLogger(__name__)

# (outcome, commit?) produced by one transition step
Step = Callable[..., Awaitable[Tuple[Optional[RequestResult], bool]]]

STORAGE_ERRORS = (StorageError, SQLAlchemyError, OSError, asyncio.TimeoutError)
RETRYABLE_ERRORS = (SerializationConflict,)


def _pair(a, b) -> Tuple[UUID, UUID]:
    a, b = UUID(str(a)), UUID(str(b))
    if a == b:
        raise ValueError(f'an identity cannot be related to itself: {a}')
    return a, b


def _describe(args) -> str:
    return ' '.join(str(arg) for arg in args)


def _expect_one(rows: int, what: str) -> None:
    if rows != 1:
        raise ConsistencyViolation(f'{what} affected {rows} rows, expected 1')


def _expect_some(rows: int, what: str) -> None:
    if rows < 1:
        raise ConsistencyViolation(f'{what} affected no rows')


class FriendCoordinator:
    """
    The only component that orchestrates multi-step reads and writes.
    The session factory is injected; the coordinator keeps no other state.
    """

    def __init__(self, session_factory: async_sessionmaker, max_attempts: int = 3):
        if max_attempts < 1:
            raise ValueError('max_attempts must be at least 1')
        self._session_factory = session_factory
        self.max_attempts = max_attempts

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------

    async def send_friend_request(self, requester: UUID, requested: UUID) -> RequestResult:
        """
        Already friends or already sent leave the store untouched. A pending
        request in the opposite direction is accepted instead of creating a
        second one; otherwise a new request is stored.
        """
        requester, requested = _pair(requester, requested)
        return await self._transact('send_friend_request', self._send, requester, requested)

    async def accept_friend_request(self, a: UUID, b: UUID) -> RequestResult:
        """Accept the pending request between a and b, whichever of them sent it."""
        a, b = _pair(a, b)
        return await self._transact('accept_friend_request', self._accept, a, b)

    async def remove_friend(self, a: UUID, b: UUID) -> None:
        a, b = _pair(a, b)
        await self._transact('remove_friend', self._remove, a, b)

    async def withdraw_friend_request(self, requester: UUID, requested: UUID) -> None:
        requester, requested = _pair(requester, requested)
        await self._transact('withdraw_friend_request', self._withdraw, requester, requested)

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    async def list_friends(self, identity: UUID) -> List[UUID]:
        return await self._read('list_friends', crud.list_friends, identity)

    async def list_pending_requests(self, identity: UUID) -> List[Tuple[UUID, UUID]]:
        return await self._read('list_pending_requests', crud.list_requests, identity)

    # ------------------------------------------------------------------
    # steps, each executed inside one transaction
    # ------------------------------------------------------------------

    async def _send(self, session: AsyncSession, requester: UUID, requested: UUID):
        state = await crud.get_pair_state(session, requester, requested)

        if state is PairState.FRIENDS:
            return RequestResult.ALREADY_FRIENDS, False

        if state is PairState.PENDING_A_TO_B:
            return RequestResult.ALREADY_SENT, False

        if state is PairState.PENDING_B_TO_A:
            # clears both directions if a race left one each way
            _expect_some(await crud.delete_requests_between(session, requester, requested), 'delete pending requests')
            _expect_one(await crud.insert_edge(session, requester, requested), 'insert friendship')
            return RequestResult.ACCEPTED_OUTSTANDING_REQUEST, True

        _expect_one(await crud.insert_request(session, requester, requested), 'insert request')
        return RequestResult.SENT_REQUEST, True

    async def _accept(self, session: AsyncSession, a: UUID, b: UUID):
        pending = await crud.find_request_between(session, a, b)
        if pending is None:
            return RequestResult.NO_OUTSTANDING_REQUEST, False

        requester, requested = pending
        _expect_some(await crud.delete_requests_between(session, requester, requested), 'delete pending requests')
        _expect_one(await crud.insert_edge(session, requester, requested), 'insert friendship')
        return RequestResult.ACCEPTED_OUTSTANDING_REQUEST, True

    async def _remove(self, session: AsyncSession, a: UUID, b: UUID):
        rows = await crud.delete_edge(session, a, b)
        logger.debug(f"remove_friend {a} {b}: {rows} rows")
        return None, True

    async def _withdraw(self, session: AsyncSession, requester: UUID, requested: UUID):
        rows = await crud.delete_request(session, requester, requested)
        logger.debug(f"withdraw_friend_request {requester} -> {requested}: {rows} rows")
        return None, True

    # ------------------------------------------------------------------
    # transaction handling
    # ------------------------------------------------------------------

    async def _transact(self, operation: str, step: Step, *args: Any) -> Optional[RequestResult]:
        for attempt in range(1, self.max_attempts + 1):
            try:
                outcome = await self._attempt(step, *args)
            except STORAGE_ERRORS as e:
                error = translate_error(e, operation)
                if isinstance(error, RETRYABLE_ERRORS) and attempt < self.max_attempts:
                    logger.warning(
                        f"{operation} {_describe(args)}: {error.description}, retrying "
                        f"(attempt {attempt + 1}/{self.max_attempts})"
                    )
                    record_retry(operation)
                    continue
                logger.error(f"{operation} {_describe(args)} failed: {error.description}", exc_info=error)
                record_outcome(operation, RequestResult.FAILED.value)
                return RequestResult.FAILED

            logger.info(f"{operation} {_describe(args)}: {outcome.value if outcome else 'ok'}")
            record_outcome(operation, outcome.value if outcome else 'ok')
            return outcome
        return RequestResult.FAILED

    async def _attempt(self, step: Step, *args: Any) -> Optional[RequestResult]:
        async with self._session_factory() as session:
            try:
                outcome, changed = await step(session, *args)
                if changed:
                    await session.commit()
                else:
                    await session.rollback()
                return outcome
            except Exception:
                await self._rollback_quietly(session)
                raise

    async def _rollback_quietly(self, session: AsyncSession) -> None:
        try:
            await session.rollback()
        except SQLAlchemyError as e:
            # the session is discarded on close either way
            logger.warning(f"Rollback failed: {e}")

    async def _read(self, operation: str, query, identity: UUID):
        try:
            async with self._session_factory() as session:
                return await query(session, UUID(str(identity)))
        except STORAGE_ERRORS as e:
            error = translate_error(e, operation)
            logger.error(f"{operation} {identity} failed: {error.description}", exc_info=error)
            if error is e:
                raise
            raise error from e
