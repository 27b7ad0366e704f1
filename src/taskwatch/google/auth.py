import json
import logging
from pathlib import Path
from typing import Any

from google.auth.exceptions import GoogleAuthError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from taskwatch.config import settings
from taskwatch.errors import AuthError, FetchError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/tasks.readonly",
    "https://www.googleapis.com/auth/tasks",
]

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"


class GoogleAuth:
    """Supplies Google credentials for the Tasks API.

    Credentials come from the GOOGLE_TOKEN setting (an authorized_user JSON
    document) when present, otherwise from the token file. Expired tokens
    are refreshed and written back to the token file.
    """

    def __init__(
        self,
        token_json: str | None = None,
        token_path: Path | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
    ):
        self._token_json = settings.google_token if token_json is None else token_json
        self.token_path = token_path or settings.resolved_token_path
        self._client_id = client_id or settings.google_client_id
        self._client_secret = client_secret or settings.google_client_secret
        self._credentials: Credentials | None = None

    def _authorized_user_info(self) -> dict[str, Any] | None:
        if self._token_json:
            try:
                info = json.loads(self._token_json)
            except json.JSONDecodeError as e:
                raise AuthError(f"GOOGLE_TOKEN is not valid JSON: {e}") from e
        elif self.token_path.exists():
            try:
                info = json.loads(self.token_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise AuthError(f"Could not read token file {self.token_path}: {e}") from e
        else:
            return None

        if not isinstance(info, dict):
            raise AuthError("Google token document must be a JSON object")

        info.setdefault("type", "authorized_user")
        if self._client_id:
            info.setdefault("client_id", self._client_id)
        if self._client_secret:
            info.setdefault("client_secret", self._client_secret)
        return info

    def load_saved_credentials(self) -> bool:
        info = self._authorized_user_info()
        if info is None:
            return False

        try:
            self._credentials = Credentials.from_authorized_user_info(info, SCOPES)
        except ValueError as e:
            raise AuthError(f"Google token document is incomplete: {e}") from e
        return True

    def get_credential(self) -> Credentials:
        """Return a valid credential, refreshing it if needed.

        Raises:
            AuthError: if no credential is configured or it cannot be refreshed
            FetchError: if the refresh could not reach Google
        """
        if self._credentials is None and not self.load_saved_credentials():
            raise AuthError(
                "No Google credentials found. Set GOOGLE_TOKEN or run `taskwatch auth`."
            )

        creds = self._credentials
        assert creds is not None
        if creds.valid:
            return creds

        if creds.refresh_token:
            try:
                creds.refresh(Request())
            except TransportError as e:
                raise FetchError(f"Could not reach Google to refresh token: {e}") from e
            except GoogleAuthError as e:
                raise AuthError(f"Failed to refresh Google token: {e}") from e
            self._save_token()
            return creds

        raise AuthError("Google credentials are invalid and have no refresh token")

    def client_config(self) -> dict[str, Any]:
        return {
            "installed": {
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": ["http://localhost"],
            }
        }

    def authenticate_interactive(self) -> bool:
        if not (self._client_id and self._client_secret):
            logger.error("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are required")
            return False

        try:
            flow = InstalledAppFlow.from_client_config(self.client_config(), SCOPES)
            self._credentials = flow.run_local_server(port=0)
        except Exception as e:
            logger.error(f"Authentication failed: {e}")
            return False

        self._save_token()
        return True

    def _save_token(self) -> None:
        if not self._credentials:
            return

        try:
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_path, "w") as f:
                f.write(self._credentials.to_json())
        except OSError as e:
            logger.warning(f"Could not save Google token to {self.token_path}: {e}")


google_auth = GoogleAuth()
