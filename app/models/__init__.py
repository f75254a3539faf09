# Import all models in dependency order so Base.metadata is complete
from app.models.user import User, UserRole, UserStatus
from app.models.property import Property, ApprovalStatus
from app.models.media import Media, MediaKind
from app.models.viewing import ViewingRequest, ViewingRequestStatus, Viewing, ViewingStatus
from app.models.photo_job import PhotoJob, PhotoJobMessage, PhotoJobStatus
from app.models.notification import Notification, Announcement
from app.models.audit_log import AuditLog
from app.models.analytics import AnalyticsEvent, AnalyticsEventType, Inquiry

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Property",
    "ApprovalStatus",
    "Media",
    "MediaKind",
    "ViewingRequest",
    "ViewingRequestStatus",
    "Viewing",
    "ViewingStatus",
    "PhotoJob",
    "PhotoJobMessage",
    "PhotoJobStatus",
    "Notification",
    "Announcement",
    "AuditLog",
    "AnalyticsEvent",
    "AnalyticsEventType",
    "Inquiry",
]
