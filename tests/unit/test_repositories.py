"""
Repository tests against an in-memory SQLite database.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from amy.domain.subscription import (
    BillingCycle,
    SubscriptionCreateRequest,
    SubscriptionStatus,
)
from amy.infrastructure.db.repositories import (
    AIRequestRepository,
    EmailNotificationRepository,
    SubscriptionRepository,
    UserSettingsRepository,
)
from tests.factories import OTHER_USER_ID, TEST_USER_ID


def _create_request(**overrides):
    data = {
        "name": "Netflix",
        "cost": Decimal("15.99"),
        "billing_cycle": BillingCycle.MONTHLY,
        "next_billing_date": "2026-10-20",
        "category": "Streaming",
    }
    data.update(overrides)
    return SubscriptionCreateRequest(**data)


class TestSubscriptionRepository:

    @pytest.mark.asyncio
    async def test_create_and_get(self, session):
        repo = SubscriptionRepository(session, TEST_USER_ID)
        created = await repo.create(_create_request())

        fetched = await repo.get(created.id)

        assert fetched.user_id == TEST_USER_ID
        assert fetched.cost == Decimal("15.99")
        assert fetched.next_billing_date == date(2026, 10, 20)
        assert fetched.status == SubscriptionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_other_owners_rows_are_invisible(self, session):
        mine = SubscriptionRepository(session, TEST_USER_ID)
        theirs = SubscriptionRepository(session, OTHER_USER_ID)
        created = await mine.create(_create_request())

        assert await theirs.get(created.id) is None
        assert await theirs.list_all() == []
        assert await theirs.update(created.id, {"name": "Hijacked"}) is None
        assert await theirs.delete(created.id) is False
        assert (await mine.get(created.id)).name == "Netflix"

    @pytest.mark.asyncio
    async def test_list_orders_by_next_billing_date(self, session):
        repo = SubscriptionRepository(session, TEST_USER_ID)
        await repo.create(_create_request(name="Later", next_billing_date="2026-12-01"))
        await repo.create(_create_request(name="Sooner", next_billing_date="2026-10-18"))
        await repo.create(
            _create_request(name="Cancelled", next_billing_date="2026-10-01", status="cancelled")
        )

        assert [s.name for s in await repo.list_all()] == ["Cancelled", "Sooner", "Later"]
        assert [s.name for s in await repo.list_active()] == ["Sooner", "Later"]

    @pytest.mark.asyncio
    async def test_partial_update(self, session):
        repo = SubscriptionRepository(session, TEST_USER_ID)
        created = await repo.create(_create_request())

        updated = await repo.update(
            created.id, {"cost": Decimal("17.99"), "status": SubscriptionStatus.PAUSED}
        )

        assert updated.cost == Decimal("17.99")
        assert updated.status == SubscriptionStatus.PAUSED
        assert updated.name == "Netflix"

    @pytest.mark.asyncio
    async def test_set_next_billing_dates_skips_missing_ids(self, session):
        repo = SubscriptionRepository(session, TEST_USER_ID)
        created = await repo.create(_create_request())

        updated = await repo.set_next_billing_dates(
            {created.id: date(2026, 11, 20), 9999: date(2026, 11, 20)}
        )

        assert updated == [created.id]
        assert (await repo.get(created.id)).next_billing_date == date(2026, 11, 20)

    @pytest.mark.asyncio
    async def test_delete(self, session):
        repo = SubscriptionRepository(session, TEST_USER_ID)
        created = await repo.create(_create_request())

        assert await repo.delete(created.id) is True
        assert await repo.get(created.id) is None

    def test_owner_is_required(self, session):
        with pytest.raises(ValueError):
            SubscriptionRepository(session, "")


class TestUserSettingsRepository:

    @pytest.mark.asyncio
    async def test_defaults_without_row(self, session):
        settings = await UserSettingsRepository(session, TEST_USER_ID).get()
        assert settings.currency == "USD"
        assert settings.monthly_budget is None
        assert settings.budget_alert_threshold == Decimal("80")

    @pytest.mark.asyncio
    async def test_save_creates_then_updates(self, session):
        repo = UserSettingsRepository(session, TEST_USER_ID)

        created = await repo.save({"currency": "EUR", "monthly_budget": Decimal("50")})
        updated = await repo.save({"monthly_budget": None, "yearly_budget": Decimal("600")})

        assert created.currency == "EUR"
        assert updated.currency == "EUR"
        assert updated.monthly_budget is None
        assert updated.yearly_budget == Decimal("600")
        assert (await UserSettingsRepository(session, OTHER_USER_ID).get()).currency == "USD"


class TestLogRepositories:

    @pytest.mark.asyncio
    async def test_notification_window(self, session):
        repo = EmailNotificationRepository(session, TEST_USER_ID)
        record = await repo.record(1, "renewal_reminder", {"days": 3})
        sent_at = record.sent_at.replace(tzinfo=timezone.utc)

        before = sent_at - timedelta(minutes=1)
        after = sent_at + timedelta(minutes=1)
        assert await repo.exists_in_window(1, "renewal_reminder", before, after)
        assert not await repo.exists_in_window(2, "renewal_reminder", before, after)
        assert not await repo.exists_in_window(1, "past_due", before, after)
        assert not await EmailNotificationRepository(session, OTHER_USER_ID).exists_in_window(
            1, "renewal_reminder", before, after
        )

    @pytest.mark.asyncio
    async def test_ai_request_log(self, session):
        repo = AIRequestRepository(session, TEST_USER_ID)
        other = AIRequestRepository(session, OTHER_USER_ID)
        await repo.record("parse-subscription", 42)
        await other.record("parse-subscription", 10)

        hour_ago = datetime.now(timezone.utc) - timedelta(hours=1)
        assert await repo.count_since(hour_ago) == 1
        assert await repo.oldest_since(hour_ago) is not None

        future = datetime.now(timezone.utc) + timedelta(minutes=1)
        assert await repo.delete_older_than(future) == 1
        assert await other.count_since(hour_ago) == 1

    @pytest.mark.asyncio
    async def test_ai_request_keeps_zero_input_length(self, session):
        repo = AIRequestRepository(session, TEST_USER_ID)

        empty = await repo.record("budget-recommendations", 0)
        unknown = await repo.record("budget-recommendations")

        assert empty.input_length == 0
        assert unknown.input_length is None
