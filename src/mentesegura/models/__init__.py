"""Database models for users, conversations and messages."""
from mentesegura.models.conversation import Conversation, Message, Base
from mentesegura.models.user import User
