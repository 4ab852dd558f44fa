"""
Repositories Layer
Data persistence and query operations for the message relay.
"""
from .connection import DatabaseManager
from .conversations import ConversationRepository
from .messages import MessageRepository
from .base import BaseRepository, MessageStore

__all__ = [
    "DatabaseManager",
    "ConversationRepository",
    "MessageRepository",
    "BaseRepository",
    "MessageStore",
]
