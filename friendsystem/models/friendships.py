from sqlalchemy import Column, String
from . import Base

class Friendship(Base):
    __tablename__ = 'friendsystem_friends'
    # "<smaller>-<larger>", written once by crud.insert_edge
    pair_key = Column(String(73), primary_key=True)
    person1 = Column(String(36), index=True, nullable=False)
    person2 = Column(String(36), index=True, nullable=False)
