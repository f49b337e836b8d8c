from app.models.contact import Contact
from app.models.conversation import Conversation
from app.models.media_attachment import MediaAttachment
from app.models.message import Message
from app.models.user import User

__all__ = [
    "Contact",
    "Conversation",
    "MediaAttachment",
    "Message",
    "User",
]
