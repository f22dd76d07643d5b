from uuid import UUID
from pydantic import BaseModel
from typing import List
from ..results import RequestResult

class RequestResultOut(BaseModel):
    result: RequestResult

class PendingRequestOut(BaseModel):
    requester: UUID
    requested: UUID

class FriendsOut(BaseModel):
    friends: List[UUID]

class PendingRequestsOut(BaseModel):
    requests: List[PendingRequestOut]

class ActionOkOut(BaseModel):
    ok: bool
