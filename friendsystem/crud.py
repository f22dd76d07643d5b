"""
Relation-shaped reads and writes for friendships and pending requests.

Every function runs on the caller's session and never commits or rolls back;
the coordinator owns the transaction boundary.
"""
from enum import Enum
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, delete, insert, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import ConstraintViolation
from .models.friend_requests import FriendRequest
from .models.friendships import Friendship


class PairState(Enum):
    """State of an unordered pair, read relative to the (a, b) argument order"""
    NONE = "none"
    PENDING_A_TO_B = "pending_a_to_b"
    PENDING_B_TO_A = "pending_b_to_a"
    FRIENDS = "friends"


def pair_key(a: UUID, b: UUID) -> str:
    # same value whichever side each identity is passed on
    first, second = sorted([str(a), str(b)])
    return f"{first}-{second}"


def _between(a: UUID, b: UUID):
    a, b = str(a), str(b)
    return or_(
        and_(FriendRequest.requester == a, FriendRequest.requested == b),
        and_(FriendRequest.requester == b, FriendRequest.requested == a),
    )


# friendships
async def edge_exists(session: AsyncSession, a: UUID, b: UUID) -> bool:
    res = await session.execute(select(Friendship.pair_key).where(Friendship.pair_key == pair_key(a, b)))
    return res.first() is not None

async def insert_edge(session: AsyncSession, a: UUID, b: UUID) -> int:
    try:
        res = await session.execute(
            insert(Friendship.__table__).values(pair_key=pair_key(a, b), person1=str(a), person2=str(b))
        )
    except IntegrityError as e:
        raise ConstraintViolation(f'friendship {pair_key(a, b)} already exists') from e
    return res.rowcount

async def delete_edge(session: AsyncSession, a: UUID, b: UUID) -> int:
    res = await session.execute(
        delete(Friendship.__table__).where(Friendship.pair_key == pair_key(a, b))
    )
    return res.rowcount

async def list_friends(session: AsyncSession, identity: UUID) -> List[UUID]:
    me = str(identity)
    res = await session.execute(
        select(Friendship.person1, Friendship.person2).where(
            or_(Friendship.person1 == me, Friendship.person2 == me)
        )
    )
    # keep the other side of each edge
    return [UUID(person2 if person1 == me else person1) for person1, person2 in res.all()]


# pending requests
async def request_exists(session: AsyncSession, requester: UUID, requested: UUID) -> bool:
    res = await session.execute(
        select(FriendRequest.requester).where(
            FriendRequest.requester == str(requester),
            FriendRequest.requested == str(requested),
        )
    )
    return res.first() is not None

async def find_request_between(session: AsyncSession, a: UUID, b: UUID) -> Optional[Tuple[UUID, UUID]]:
    res = await session.execute(
        select(FriendRequest.requester, FriendRequest.requested).where(_between(a, b))
    )
    row = res.first()
    if row is None:
        return None
    return UUID(row.requester), UUID(row.requested)

async def request_exists_either_direction(session: AsyncSession, a: UUID, b: UUID) -> bool:
    return await find_request_between(session, a, b) is not None

async def insert_request(session: AsyncSession, requester: UUID, requested: UUID) -> int:
    try:
        res = await session.execute(
            insert(FriendRequest.__table__).values(requester=str(requester), requested=str(requested))
        )
    except IntegrityError as e:
        raise ConstraintViolation(f'request {requester} -> {requested} already exists') from e
    return res.rowcount

async def delete_request(session: AsyncSession, requester: UUID, requested: UUID) -> int:
    res = await session.execute(
        delete(FriendRequest.__table__).where(
            FriendRequest.requester == str(requester),
            FriendRequest.requested == str(requested),
        )
    )
    return res.rowcount

async def delete_requests_between(session: AsyncSession, a: UUID, b: UUID) -> int:
    res = await session.execute(delete(FriendRequest.__table__).where(_between(a, b)))
    return res.rowcount

async def list_requests(session: AsyncSession, identity: UUID) -> List[Tuple[UUID, UUID]]:
    me = str(identity)
    res = await session.execute(
        select(FriendRequest.requester, FriendRequest.requested).where(
            or_(FriendRequest.requester == me, FriendRequest.requested == me)
        )
    )
    return [(UUID(requester), UUID(requested)) for requester, requested in res.all()]


async def get_pair_state(session: AsyncSession, a: UUID, b: UUID) -> PairState:
    if await edge_exists(session, a, b):
        return PairState.FRIENDS
    # a reverse row wins so a pair holding both directions collapses on send
    if await request_exists(session, b, a):
        return PairState.PENDING_B_TO_A
    if await request_exists(session, a, b):
        return PairState.PENDING_A_TO_B
    return PairState.NONE
