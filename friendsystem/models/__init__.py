from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import models to register tables
from .friendships import Friendship  # noqa: F401,E402
from .friend_requests import FriendRequest  # noqa: F401,E402
