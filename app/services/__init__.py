from app.services.contact_service import ContactService
from app.services.conversation_service import ConversationService
from app.services.media_service import MediaService
from app.services.message_service import MessageService
from app.services.user_service import UserService

__all__ = [
    "ContactService",
    "ConversationService",
    "MediaService",
    "MessageService",
    "UserService",
]
