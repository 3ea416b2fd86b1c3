from app.models.event import Event
from app.models.notification import Notification, NotificationType
from app.models.user import UserProfile

__all__ = ["Event", "Notification", "NotificationType", "UserProfile"]
