"""
Weekly availability persistence.

Rules are replaced wholesale: the delete of the old set and the insert of
the new one are committed together, so readers see either the old week or
the new week and never an empty one in between.

Enabled blocks must start on the occupancy bucket grid used by the
appointment claims; otherwise back-to-back slots would share a bucket.
"""

import logging
from typing import List, Optional

from booking.core.config import load_booking_settings
from booking.core.exceptions import NotFoundError, ValidationError
from booking.db.base import Seller as DbSeller
from booking.db.base import SellerAvailability as DbAvailability
from booking.domain.entities import WeeklyAvailabilityRule
from booking.domain.interfaces import IAvailabilityRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(IAvailabilityRepository):
    def __init__(
        self, db_session, claim_granularity_minutes: Optional[int] = None
    ) -> None:
        self.db = db_session
        self.claim_granularity_minutes = (
            claim_granularity_minutes
            or load_booking_settings().slot_claim_granularity_minutes
        )

    def replace_weekly_rules(
        self, seller_id: int, rules: List[WeeklyAvailabilityRule]
    ) -> List[WeeklyAvailabilityRule]:
        self._require_seller(seller_id)
        for rule in rules:
            if rule.enabled and rule.start_minute % self.claim_granularity_minutes:
                raise ValidationError(
                    f"Availability block {rule.start_time}-{rule.end_time} must start "
                    f"on a multiple of {self.claim_granularity_minutes} minutes"
                )
        try:
            self.db.query(DbAvailability).filter_by(seller_id=seller_id).delete(
                synchronize_session=False
            )
            rows = [self._to_db(seller_id, rule) for rule in rules]
            self.db.add_all(rows)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                "Failed to replace weekly availability",
                extra={"context": {"seller_id": seller_id, "rules": len(rules)}},
                exc_info=True,
            )
            raise

        logger.info(
            "Weekly availability replaced",
            extra={"context": {"seller_id": seller_id, "rules": len(rows)}},
        )
        return self.get_all_rules(seller_id)

    def get_rules_for_day(
        self, seller_id: int, day_of_week: int
    ) -> List[WeeklyAvailabilityRule]:
        """Enabled rules for the weekday; empty when the seller is unavailable."""
        self._require_seller(seller_id)
        rows = (
            self.db.query(DbAvailability)
            .filter_by(seller_id=seller_id, day_of_week=day_of_week, is_available=True)
            .order_by(DbAvailability.start_minute)
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def get_all_rules(self, seller_id: int) -> List[WeeklyAvailabilityRule]:
        rows = (
            self.db.query(DbAvailability)
            .filter_by(seller_id=seller_id)
            .order_by(DbAvailability.day_of_week, DbAvailability.start_minute)
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def _require_seller(self, seller_id: int) -> None:
        exists = self.db.query(DbSeller.id).filter_by(id=seller_id).first()
        if exists is None:
            raise NotFoundError(f"Seller {seller_id} not found")

    def _to_db(self, seller_id: int, rule: WeeklyAvailabilityRule) -> DbAvailability:
        row = DbAvailability()
        row.seller_id = seller_id
        row.day_of_week = rule.day_of_week
        row.start_minute = rule.start_minute
        row.end_minute = rule.end_minute
        row.is_available = rule.enabled
        return row

    def _to_domain(self, row: DbAvailability) -> WeeklyAvailabilityRule:
        return WeeklyAvailabilityRule(
            id=row.id,
            seller_id=row.seller_id,
            day_of_week=row.day_of_week,
            start_minute=row.start_minute,
            end_minute=row.end_minute,
            enabled=bool(row.is_available),
        )
