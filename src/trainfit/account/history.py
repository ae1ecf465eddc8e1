# Read-only exercise history, grouped by day.

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, ValidationError

from trainfit.account.errors import TrainfitError, UnclassifiedError, describe_error
from trainfit.account.models import NotificationKind
from trainfit.account.protocol import NotificationSinkProtocol, RemoteServiceProtocol

logger = logging.getLogger(__name__)

HISTORY_FALLBACK = "Unable to load the exercise history."


class HistoryEntry(BaseModel):
    """One completed exercise."""

    id: int | str
    name: str
    group: str = ""
    hour: str = ""
    created_at: str = ""


class HistoryDay(BaseModel):
    """All exercises completed on one day."""

    title: str
    data: list[HistoryEntry] = Field(default_factory=list)


class HistoryView:
    """Holds the last loaded history and a loading flag."""

    def __init__(self, remote: RemoteServiceProtocol, notifier: NotificationSinkProtocol):
        self.remote = remote
        self.notifier = notifier
        self.days: list[HistoryDay] = []
        self.is_loading = False

    async def refresh(self) -> list[HistoryDay]:
        """Reload history. On failure the previous list is kept."""
        self.is_loading = True
        try:
            raw = await self.remote.fetch_history()
            try:
                days = [HistoryDay.model_validate(item) for item in raw]
            except (ValidationError, TypeError) as e:
                raise UnclassifiedError(f"Malformed history response: {e}") from e
            self.days = days
        except Exception as e:
            logger.warning(
                "History refresh failed: %s", e, exc_info=not isinstance(e, TrainfitError)
            )
            self.notifier.notify(describe_error(e, HISTORY_FALLBACK), NotificationKind.ERROR)
        finally:
            self.is_loading = False
        return self.days
