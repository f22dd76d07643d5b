"""
Operation outcomes returned by the friend coordinator
"""
from enum import Enum


class RequestResult(Enum):
    """Closed set of outcomes for friend request transitions"""
    ALREADY_FRIENDS = "already_friends"
    ALREADY_SENT = "already_sent"
    SENT_REQUEST = "sent_request"
    ACCEPTED_OUTSTANDING_REQUEST = "accepted_outstanding_request"
    NO_OUTSTANDING_REQUEST = "no_outstanding_request"
    FAILED = "failed"
