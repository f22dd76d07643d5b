from sqlalchemy import Column, String
from . import Base

class FriendRequest(Base):
    # one row per direction; the composite key is the directed pair
    __tablename__ = 'friendsystem_requests'
    requester = Column(String(36), primary_key=True)
    requested = Column(String(36), primary_key=True, index=True)
