"""Tests for notification counts and subscriber dispatch."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from src.portal.models import ApplicationKind, ApplicationStatus, NotificationCategory
from src.portal.services import NotificationService
from tests.fakes import InMemoryApplicationStore, StaticPendingCount

pytestmark = pytest.mark.unit

HOME_OWNER = NotificationCategory.HOME_OWNER_APPLICATIONS
ARTISAN = NotificationCategory.ARTISAN_APPLICATIONS
VERIFICATIONS = NotificationCategory.PROPERTY_VERIFICATIONS


class TestCounts:
    def test_starts_at_zero(self, notifications):
        assert set(notifications.get_counts().values()) == {0}
        assert notifications.get_total_notifications() == 0

    def test_decrement_never_goes_negative(self, notifications):
        notifications.update_counts({ARTISAN: 2})

        notifications.decrement_count(ARTISAN, 5)

        assert notifications.get_counts()[ARTISAN] == 0

    def test_update_clamps_negative_values(self, notifications):
        notifications.update_counts({"payments": -3})

        assert notifications.get_counts()[NotificationCategory.PAYMENTS] == 0

    def test_increment_and_mark_as_read(self, notifications):
        notifications.increment_count(HOME_OWNER)
        notifications.increment_count(HOME_OWNER, 2)
        assert notifications.get_counts()[HOME_OWNER] == 3

        notifications.mark_as_read(HOME_OWNER)
        assert notifications.get_counts()[HOME_OWNER] == 0

    def test_reset_counts(self, notifications):
        notifications.update_counts({HOME_OWNER: 4, ARTISAN: 1})

        notifications.reset_counts()

        assert notifications.get_total_notifications() == 0

    def test_get_counts_returns_copy(self, notifications):
        counts = notifications.get_counts()
        counts[HOME_OWNER] = 99

        assert notifications.get_counts()[HOME_OWNER] == 0

    def test_unknown_category_rejected(self, notifications):
        with pytest.raises(ValueError):
            notifications.increment_count("parking")

    def test_section_totals(self, notifications):
        notifications.update_counts(
            {HOME_OWNER: 2, ARTISAN: 3, VERIFICATIONS: 1, NotificationCategory.PAYMENTS: 4}
        )

        assert notifications.get_total_for_section(HOME_OWNER) == 2
        assert notifications.get_total_for_section("payments") == 4
        assert notifications.get_total_for_section(NotificationCategory.REPORTS) == 0
        assert notifications.get_total_notifications() == 10

    def test_reports_section_follows_its_own_count(self, notifications):
        notifications.update_counts({HOME_OWNER: 2, NotificationCategory.REPORTS: 2})

        notifications.decrement_count("reports", 5)

        assert notifications.get_total_for_section("reports") == 0
        assert notifications.get_total_for_section(HOME_OWNER) == 2
        assert notifications.get_total_notifications() == 2


@given(
    operations=st.lists(
        st.tuples(
            st.sampled_from(["increment", "decrement", "update"]),
            st.sampled_from(list(NotificationCategory)),
            st.integers(min_value=-50, max_value=50),
        ),
        max_size=30,
    )
)
@settings(max_examples=100)
def test_counts_never_negative(operations):
    """No sequence of operations drives a count below zero."""
    service = NotificationService()
    for operation, category, n in operations:
        if operation == "increment":
            service.increment_count(category, abs(n))
        elif operation == "decrement":
            service.decrement_count(category, abs(n))
        else:
            service.update_counts({category: n})
        assert min(service.get_counts().values()) >= 0


class TestSubscribers:
    def test_subscriber_receives_full_map(self, notifications):
        received = []
        notifications.subscribe(received.append)

        notifications.increment_count(ARTISAN)

        assert len(received) == 1
        assert received[0][ARTISAN] == 1
        assert set(received[0]) == set(NotificationCategory)

    def test_unsubscribe_stops_delivery(self, notifications):
        received = []
        unsubscribe = notifications.subscribe(received.append)
        notifications.increment_count(ARTISAN)

        unsubscribe()
        notifications.increment_count(ARTISAN)
        notifications.reset_counts()

        assert len(received) == 1

    def test_unsubscribe_is_idempotent(self, notifications):
        unsubscribe = notifications.subscribe(lambda counts: None)

        unsubscribe()
        unsubscribe()

    def test_same_callback_subscribed_twice(self, notifications):
        received = []
        first = notifications.subscribe(received.append)
        notifications.subscribe(received.append)

        first()
        notifications.increment_count(HOME_OWNER)

        assert len(received) == 1

    def test_unsubscribe_during_dispatch_skips_later_subscriber(self, notifications):
        calls = []
        unsubscribe_second = None

        def first(counts):
            calls.append("first")
            unsubscribe_second()

        def second(counts):
            calls.append("second")

        notifications.subscribe(first)
        unsubscribe_second = notifications.subscribe(second)

        notifications.increment_count(HOME_OWNER)

        assert calls == ["first"]

    def test_subscribe_during_dispatch_waits_for_next_change(self, notifications):
        calls = []

        def late(counts):
            calls.append("late")

        def first(counts):
            calls.append("first")
            if len(calls) == 1:
                notifications.subscribe(late)

        notifications.subscribe(first)
        notifications.increment_count(HOME_OWNER)
        assert calls == ["first"]

        notifications.increment_count(HOME_OWNER)
        assert calls == ["first", "first", "late"]

    def test_failing_subscriber_does_not_block_others(self, notifications):
        received = []

        def broken(counts):
            raise RuntimeError("subscriber bug")

        notifications.subscribe(broken)
        notifications.subscribe(received.append)

        notifications.increment_count(HOME_OWNER)

        assert len(received) == 1

    def test_dispose_stops_delivery(self):
        service = NotificationService()
        received = []
        service.subscribe(received.append)

        service.dispose()
        service.increment_count(HOME_OWNER)

        assert received == []
        with pytest.raises(RuntimeError):
            service.subscribe(received.append)


class TestFetch:
    async def test_fetch_counts_pending_applications(self, applications):
        applications.submit(ApplicationKind.HOME_OWNER)
        applications.submit(ApplicationKind.HOME_OWNER)
        applications.submit(ApplicationKind.HOME_OWNER, status=ApplicationStatus.APPROVED)
        applications.submit(ApplicationKind.ARTISAN)
        service = NotificationService(applications, StaticPendingCount(4))
        received = []
        service.subscribe(received.append)

        counts = await service.fetch_notification_counts()

        assert counts[HOME_OWNER] == 2
        assert counts[ARTISAN] == 1
        assert counts[VERIFICATIONS] == 4
        assert service.get_total_for_section(VERIFICATIONS) == 4
        assert service.get_total_notifications() == 7
        assert len(received) == 1

    async def test_fetch_failure_keeps_previous_counts(self):
        applications = InMemoryApplicationStore()
        applications.query_error = ConnectionError("database unavailable")
        service = NotificationService(applications)
        service.update_counts({HOME_OWNER: 3})

        counts = await service.fetch_notification_counts()

        assert counts[HOME_OWNER] == 3

    async def test_fetch_pending_source_failure_keeps_application_counts(self, applications):
        applications.submit(ApplicationKind.HOME_OWNER)
        applications.submit(ApplicationKind.ARTISAN)
        service = NotificationService(applications, StaticPendingCount(error=RuntimeError("down")))
        service.update_counts({VERIFICATIONS: 2})
        received = []
        service.subscribe(received.append)

        counts = await service.fetch_notification_counts()

        assert counts[HOME_OWNER] == 1
        assert counts[ARTISAN] == 1
        assert counts[VERIFICATIONS] == 2
        assert len(received) == 1

    async def test_fetch_application_failure_keeps_verification_count(self):
        applications = InMemoryApplicationStore()
        applications.query_error = ConnectionError("database unavailable")
        service = NotificationService(applications, StaticPendingCount(5))

        counts = await service.fetch_notification_counts()

        assert counts[VERIFICATIONS] == 5
        assert counts[HOME_OWNER] == 0

    async def test_fetch_without_sources(self):
        service = NotificationService()

        counts = await service.fetch_notification_counts()

        assert sum(counts.values()) == 0
