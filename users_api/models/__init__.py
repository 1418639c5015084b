# Import the models so Base.metadata knows about them
from .user import User

__all__ = [
    "User",
]
