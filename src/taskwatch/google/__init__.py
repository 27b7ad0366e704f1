from taskwatch.google.auth import GoogleAuth, google_auth
from taskwatch.google.tasks import GoogleTasksClient

__all__ = [
    "GoogleAuth",
    "google_auth",
    "GoogleTasksClient",
]
