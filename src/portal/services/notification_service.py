"""Notification counts service - pending-item counters with synchronous subscribers."""

from collections.abc import Callable, Mapping

from src.portal.core.logging import get_logger
from src.portal.models import ApplicationKind, ApplicationStatus, NotificationCategory
from src.portal.providers import ApplicationStore, PendingCountSource

logger = get_logger(__name__)

NotificationCounts = dict[NotificationCategory, int]
Subscriber = Callable[[NotificationCounts], None]

def empty_counts() -> NotificationCounts:
    return {category: 0 for category in NotificationCategory}


class NotificationService:
    """Holds notification counts and notifies subscribers on every change.

    Counts never go below zero. Subscribers are called synchronously with a
    copy of the full map, over a snapshot of the subscriber list taken before
    dispatch starts. A subscriber that raises is logged and skipped.
    """

    def __init__(
        self,
        applications: ApplicationStore | None = None,
        pending_source: PendingCountSource | None = None,
    ):
        self.applications = applications
        self.pending_source = pending_source
        self._counts = empty_counts()
        self._subscribers: list["_Subscription"] = []
        self._disposed = False

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback`; the returned function removes exactly this registration."""
        if self._disposed:
            raise RuntimeError("NotificationService has been disposed")
        token = _Subscription(callback)
        self._subscribers.append(token)

        def unsubscribe() -> None:
            token.active = False
            if token in self._subscribers:
                self._subscribers.remove(token)

        return unsubscribe

    def dispose(self) -> None:
        for token in self._subscribers:
            token.active = False
        self._subscribers.clear()
        self._disposed = True

    def _notify(self) -> None:
        snapshot = list(self._subscribers)
        for token in snapshot:
            # Unsubscribed during this dispatch
            if not token.active:
                continue
            try:
                token(self.get_counts())
            except Exception as e:
                logger.error("Notification subscriber failed", error=str(e))

    def get_counts(self) -> NotificationCounts:
        return dict(self._counts)

    def update_counts(self, partial: Mapping[NotificationCategory | str, int]) -> None:
        """Merge `partial` into the counts. Negative values are clamped to zero."""
        for category, value in partial.items():
            self._counts[NotificationCategory(category)] = max(0, int(value))
        self._notify()

    def increment_count(self, category: NotificationCategory | str, n: int = 1) -> None:
        category = NotificationCategory(category)
        self.update_counts({category: self._counts[category] + n})

    def decrement_count(self, category: NotificationCategory | str, n: int = 1) -> None:
        category = NotificationCategory(category)
        self.update_counts({category: max(0, self._counts[category] - n)})

    def mark_as_read(self, category: NotificationCategory | str) -> None:
        self.update_counts({category: 0})

    def reset_counts(self) -> None:
        self._counts = empty_counts()
        self._notify()

    def get_total_for_section(self, section: NotificationCategory | str) -> int:
        return self._counts[NotificationCategory(section)]

    def get_total_notifications(self) -> int:
        return sum(self._counts.values())

    async def fetch_notification_counts(self) -> NotificationCounts:
        """Refresh pending counts from the stores. Never raises; failures are logged."""
        update: dict[NotificationCategory | str, int] = {}
        if self.applications is not None:
            try:
                home_owner = await self.applications.query_applications(
                    kind=ApplicationKind.HOME_OWNER, status=ApplicationStatus.PENDING
                )
                artisan = await self.applications.query_applications(
                    kind=ApplicationKind.ARTISAN, status=ApplicationStatus.PENDING
                )
                update[NotificationCategory.HOME_OWNER_APPLICATIONS] = len(home_owner)
                update[NotificationCategory.ARTISAN_APPLICATIONS] = len(artisan)
            except Exception as e:
                logger.error("Error fetching application counts", error=str(e))
        if self.pending_source is not None:
            try:
                update[NotificationCategory.PROPERTY_VERIFICATIONS] = (
                    await self.pending_source.count_pending_verifications()
                )
            except Exception as e:
                logger.error("Error fetching property verification counts", error=str(e))
        if update:
            self.update_counts(update)
        return self.get_counts()


class _Subscription:
    __slots__ = ("callback", "active")

    def __init__(self, callback: Subscriber):
        self.callback = callback
        self.active = True

    def __call__(self, counts: NotificationCounts) -> None:
        self.callback(counts)
