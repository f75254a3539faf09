# Workflow services return an Outcome; routes dispatch its events after commit
__all__ = [
    "analytics_service",
    "auth_service",
    "events",
    "media_service",
    "moderation_service",
    "notification_service",
    "photo_job_service",
    "property_service",
    "storage",
    "viewing_service",
]
