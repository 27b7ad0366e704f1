"""Google Tasks integration for Task Watch.

Reads the open tasks of a task list and normalizes them into TaskRecords.
Also creates tasks, which the `test-task` command uses to exercise the
new-task path end to end.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from taskwatch.config import settings
from taskwatch.errors import FetchError
from taskwatch.models import TaskRecord
from taskwatch.services.timezone import TimezoneService, get_timezone_service

logger = logging.getLogger(__name__)

# Largest page the Tasks API accepts
PAGE_SIZE = 100

# Guard against a misbehaving nextPageToken loop
MAX_PAGES = 50


def _format_rfc3339(dt: datetime) -> str:
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.000Z")


class GoogleTasksClient:
    """Google Tasks client bound to one task list."""

    def __init__(
        self,
        tasklist_id: str | None = None,
        timezone: TimezoneService | None = None,
    ):
        self.tasklist_id = tasklist_id or settings.google_tasklist_id
        self.timezone = timezone or get_timezone_service()

    def _service(self, credential: Credentials):
        return build("tasks", "v1", credentials=credential, cache_discovery=False)

    def fetch_items(
        self,
        credential: Credentials,
        include_completed: bool = False,
    ) -> list[dict[str, Any]]:
        """Fetch raw task resources, following pagination.

        Raises:
            FetchError: on API or transport failure
        """
        items: list[dict[str, Any]] = []
        page_token: str | None = None

        try:
            service = self._service(credential)
            for _ in range(MAX_PAGES):
                request = service.tasks().list(
                    tasklist=self.tasklist_id,
                    showCompleted=include_completed,
                    maxResults=PAGE_SIZE,
                    pageToken=page_token,
                )
                response = request.execute()
                items.extend(response.get("items") or [])
                page_token = response.get("nextPageToken")
                if not page_token:
                    break
            else:
                logger.warning(f"Stopped paging after {MAX_PAGES} pages")
        except HttpError as e:
            raise FetchError(f"Google Tasks API error: {e}") from e
        except (GoogleAuthError, HttpLib2Error, OSError) as e:
            raise FetchError(f"Could not reach Google Tasks: {e}") from e

        return items

    def list_tasks(
        self,
        credential: Credentials,
        include_completed: bool = False,
    ) -> list[TaskRecord]:
        """List tasks of the configured task list as TaskRecords.

        Completed and deleted items are dropped unless include_completed is
        set. Items without an id are skipped.

        Raises:
            FetchError: on API or transport failure
        """
        records: list[TaskRecord] = []
        for item in self.fetch_items(credential, include_completed=include_completed):
            if item.get("deleted"):
                continue
            if not include_completed and item.get("status") == "completed":
                continue
            try:
                records.append(TaskRecord.from_api(item, timezone=self.timezone))
            except ValueError as e:
                logger.warning(f"Skipping task item: {e}")

        logger.info(f"Fetched {len(records)} task(s) from {self.tasklist_id}")
        return records

    def insert_task(
        self,
        credential: Credentials,
        title: str,
        notes: str | None = None,
        due: datetime | None = None,
    ) -> TaskRecord:
        """Create a task in the configured task list.

        Raises:
            FetchError: on API or transport failure
        """
        body: dict[str, Any] = {"title": title}
        if notes:
            body["notes"] = notes
        if due is not None:
            body["due"] = _format_rfc3339(self.timezone.localize(due))

        try:
            result = (
                self._service(credential)
                .tasks()
                .insert(tasklist=self.tasklist_id, body=body)
                .execute()
            )
        except HttpError as e:
            raise FetchError(f"Google Tasks API error: {e}") from e
        except (GoogleAuthError, HttpLib2Error, OSError) as e:
            raise FetchError(f"Could not reach Google Tasks: {e}") from e

        logger.info(f"Created task {result.get('id')}: {title}")
        return TaskRecord.from_api(result, timezone=self.timezone)
