from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Request
from ..coordinator import FriendCoordinator
from ..errors import StorageError
from ..schemas.friendships import (
    ActionOkOut,
    FriendsOut,
    PendingRequestOut,
    PendingRequestsOut,
    RequestResultOut,
)

router = APIRouter()


def get_coordinator(request: Request) -> FriendCoordinator:
    coordinator = getattr(request.app.state, 'coordinator', None)
    if coordinator is None:
        raise HTTPException(503, 'storage unavailable')
    return coordinator


def _distinct(a: UUID, b: UUID):
    if a == b:
        raise HTTPException(400, 'an identity cannot be related to itself')


@router.post('/{requester}/requests/{requested}', response_model=RequestResultOut)
async def send_request(
    requester: UUID,
    requested: UUID,
    coordinator: FriendCoordinator = Depends(get_coordinator)
):
    _distinct(requester, requested)
    result = await coordinator.send_friend_request(requester, requested)
    return {'result': result}


@router.post('/{identity}/requests/{other}/accept', response_model=RequestResultOut)
async def accept_request(
    identity: UUID,
    other: UUID,
    coordinator: FriendCoordinator = Depends(get_coordinator)
):
    _distinct(identity, other)
    result = await coordinator.accept_friend_request(identity, other)
    return {'result': result}


@router.delete('/{requester}/requests/{requested}', response_model=ActionOkOut)
async def withdraw_request(
    requester: UUID,
    requested: UUID,
    coordinator: FriendCoordinator = Depends(get_coordinator)
):
    _distinct(requester, requested)
    await coordinator.withdraw_friend_request(requester, requested)
    return {'ok': True}


@router.delete('/{identity}/friends/{other}', response_model=ActionOkOut)
async def remove_friend(
    identity: UUID,
    other: UUID,
    coordinator: FriendCoordinator = Depends(get_coordinator)
):
    _distinct(identity, other)
    await coordinator.remove_friend(identity, other)
    return {'ok': True}


@router.get('/{identity}/friends', response_model=FriendsOut)
async def friends(identity: UUID, coordinator: FriendCoordinator = Depends(get_coordinator)):
    try:
        ids = await coordinator.list_friends(identity)
    except StorageError:
        raise HTTPException(503, 'storage unavailable')
    return {'friends': ids}


@router.get('/{identity}/requests', response_model=PendingRequestsOut)
async def pending_requests(identity: UUID, coordinator: FriendCoordinator = Depends(get_coordinator)):
    try:
        pairs = await coordinator.list_pending_requests(identity)
    except StorageError:
        raise HTTPException(503, 'storage unavailable')
    return {'requests': [PendingRequestOut(requester=a, requested=b) for a, b in pairs]}
