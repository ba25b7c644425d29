from typing import List, Optional

from booking.core.exceptions import NotFoundError
from booking.db.base import Seller as DbSeller
from booking.domain.entities import Seller as DomainSeller
from booking.domain.entities import validate_timezone
from booking.domain.interfaces import ISellerRepository
from booking.domain.time_arithmetic import to_utc


class SellerRepository(ISellerRepository):
    """Repository for seller profiles."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, seller_id: int) -> Optional[DomainSeller]:
        db_seller = self.db.query(DbSeller).filter_by(id=seller_id).first()
        return self._to_domain(db_seller) if db_seller else None

    def get_by_user_id(self, user_id: int) -> Optional[DomainSeller]:
        db_seller = self.db.query(DbSeller).filter_by(user_id=user_id).first()
        return self._to_domain(db_seller) if db_seller else None

    def list_active(self) -> List[DomainSeller]:
        db_sellers = (
            self.db.query(DbSeller)
            .filter_by(is_active=True)
            .order_by(DbSeller.id)
            .all()
        )
        return [self._to_domain(s) for s in db_sellers]

    def create_profile(self, seller: DomainSeller) -> DomainSeller:
        """Create a seller profile from domain entity."""
        db_seller = DbSeller()
        db_seller.user_id = seller.user_id
        db_seller.title = seller.title
        db_seller.description = seller.description
        db_seller.timezone = seller.timezone
        db_seller.is_active = seller.is_active

        self.db.add(db_seller)
        self.db.commit()
        self.db.refresh(db_seller)

        return self._to_domain(db_seller)

    def update_timezone(self, seller_id: int, timezone: str) -> DomainSeller:
        validate_timezone(timezone)
        db_seller = self.db.query(DbSeller).filter_by(id=seller_id).first()
        if not db_seller:
            raise NotFoundError(f"Seller {seller_id} not found")

        db_seller.timezone = timezone
        self.db.commit()
        self.db.refresh(db_seller)
        return self._to_domain(db_seller)

    def _to_domain(self, db_seller: DbSeller) -> DomainSeller:
        """Convert database model to domain entity."""
        return DomainSeller(
            id=db_seller.id,
            user_id=db_seller.user_id,
            title=db_seller.title,
            description=db_seller.description,
            timezone=db_seller.timezone or "UTC",
            is_active=bool(db_seller.is_active),
            created_at=to_utc(db_seller.created_at) if db_seller.created_at else None,
            updated_at=to_utc(db_seller.updated_at) if db_seller.updated_at else None,
        )
