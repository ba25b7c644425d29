"""
Repository tests for weekly availability rules.
"""

import pytest

from booking.core.exceptions import NotFoundError, ValidationError
from booking.domain.entities import WeeklyAvailabilityRule, default_weekly_rules
from booking.repositories.availability_repo import AvailabilityRepository
from booking.repositories.seller_repo import SellerRepository
from tests.fixtures.database_fixtures import create_seller


def rule(seller_id, day, start, end, enabled=True):
    return WeeklyAvailabilityRule(
        seller_id=seller_id,
        day_of_week=day,
        start_minute=start,
        end_minute=end,
        enabled=enabled,
    )


@pytest.fixture
def seller(db_session):
    return create_seller(db_session)[1]


@pytest.mark.unit
@pytest.mark.repositories
class TestAvailabilityRepository:
    def test_replace_is_whole_week(self, db_session, seller):
        repo = AvailabilityRepository(db_session)
        repo.replace_weekly_rules(seller.id, default_weekly_rules(seller.id))

        stored = repo.replace_weekly_rules(seller.id, [rule(seller.id, 3, 600, 720)])

        assert [(r.day_of_week, r.start_minute, r.end_minute) for r in stored] == [
            (3, 600, 720)
        ]
        assert repo.get_rules_for_day(seller.id, 1) == []

    def test_rules_for_day_skip_disabled(self, db_session, seller):
        repo = AvailabilityRepository(db_session)
        repo.replace_weekly_rules(seller.id, default_weekly_rules(seller.id))

        assert repo.get_rules_for_day(seller.id, 0) == []
        monday = repo.get_rules_for_day(seller.id, 1)
        assert [(r.start_time, r.end_time) for r in monday] == [("09:00", "17:00")]

    def test_all_rules_ordered(self, db_session, seller):
        repo = AvailabilityRepository(db_session)
        repo.replace_weekly_rules(
            seller.id,
            [rule(seller.id, 2, 780, 900), rule(seller.id, 2, 540, 720), rule(seller.id, 0, 0, 0, False)],
        )

        rules = repo.get_all_rules(seller.id)

        assert [(r.day_of_week, r.start_minute) for r in rules] == [(0, 0), (2, 540), (2, 780)]
        assert rules[0].enabled is False

    def test_unaligned_block_start_rejected(self, db_session, seller):
        repo = AvailabilityRepository(db_session, claim_granularity_minutes=5)
        repo.replace_weekly_rules(seller.id, default_weekly_rules(seller.id))

        with pytest.raises(ValidationError):
            repo.replace_weekly_rules(seller.id, [rule(seller.id, 1, 543, 1020)])

        assert [r.start_minute for r in repo.get_rules_for_day(seller.id, 1)] == [540]

    def test_unaligned_start_allowed_on_minute_grid(self, db_session, seller):
        repo = AvailabilityRepository(db_session, claim_granularity_minutes=1)
        stored = repo.replace_weekly_rules(seller.id, [rule(seller.id, 1, 543, 1020)])
        assert stored[0].start_minute == 543

    def test_disabled_placeholder_ignores_grid(self, db_session, seller):
        repo = AvailabilityRepository(db_session, claim_granularity_minutes=5)
        stored = repo.replace_weekly_rules(seller.id, [rule(seller.id, 0, 7, 7, False)])
        assert stored[0].enabled is False

    def test_unknown_seller(self, db_session):
        repo = AvailabilityRepository(db_session)
        with pytest.raises(NotFoundError):
            repo.replace_weekly_rules(404, [])
        with pytest.raises(NotFoundError):
            repo.get_rules_for_day(404, 1)


@pytest.mark.unit
@pytest.mark.repositories
class TestSellerRepository:
    def test_lookup_by_user(self, db_session):
        user, seller = create_seller(db_session, timezone="Europe/Berlin")
        repo = SellerRepository(db_session)

        assert repo.get_by_user_id(user.id).id == seller.id
        assert repo.get_by_id(seller.id).timezone == "Europe/Berlin"
        assert [s.id for s in repo.list_active()] == [seller.id]

    def test_update_timezone(self, db_session, seller):
        updated = SellerRepository(db_session).update_timezone(seller.id, "Asia/Tokyo")
        assert updated.timezone == "Asia/Tokyo"

    def test_update_timezone_unknown_seller(self, db_session):
        with pytest.raises(NotFoundError):
            SellerRepository(db_session).update_timezone(404, "UTC")
