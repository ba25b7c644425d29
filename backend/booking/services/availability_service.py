"""
Availability service: seller profiles and their weekly schedules.
"""

import logging
from typing import List, Optional

from booking.core.config import APP_TZ
from booking.core.exceptions import ForbiddenError, NotFoundError
from booking.domain.entities import Seller, validate_timezone
from booking.domain.interfaces import (
    IAvailabilityRepository,
    ISellerRepository,
    IUserRepository,
)
from booking.schemas.dtos import SellerResponse, WeeklyScheduleRequest

logger = logging.getLogger(__name__)

SELLER_ROLES = ("seller", "both")


class AvailabilityService:
    """Application service for seller schedule use-cases."""

    def __init__(
        self,
        seller_repo: ISellerRepository,
        availability_repo: IAvailabilityRepository,
        user_repo: IUserRepository,
    ):
        self.seller_repo = seller_repo
        self.availability_repo = availability_repo
        self.user_repo = user_repo

    def replace_weekly_schedule(
        self, seller_user_id: int, request: WeeklyScheduleRequest
    ) -> SellerResponse:
        """Replace the whole week of the seller owned by `seller_user_id`.

        Business Rules:
        - Only users with a seller role may publish availability
        - The seller profile is created on first save
        - A supplied timezone replaces the stored one
        - Days without blocks are stored as disabled placeholders
        """
        request.validate()
        if request.timezone:
            validate_timezone(request.timezone)

        user = self.user_repo.get_by_id(seller_user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.role not in SELLER_ROLES:
            raise ForbiddenError("Seller access required")

        seller = self.seller_repo.get_by_user_id(seller_user_id)
        if seller is None:
            seller = self.seller_repo.create_profile(
                Seller(
                    user_id=seller_user_id,
                    timezone=request.timezone or APP_TZ.key,
                )
            )
            logger.info(
                "Seller profile created",
                extra={"context": {"seller_id": seller.id, "user_id": seller_user_id}},
            )
        elif request.timezone and request.timezone != seller.timezone:
            seller = self.seller_repo.update_timezone(seller.id, request.timezone)

        rules = request.to_rules(seller.id)
        stored = self.availability_repo.replace_weekly_rules(seller.id, rules)
        return SellerResponse.from_domain(seller, user, stored)

    def get_weekly_schedule(self, seller_id: int) -> SellerResponse:
        seller = self._require_seller(seller_id)
        user = self.user_repo.get_by_id(seller.user_id)
        rules = self.availability_repo.get_all_rules(seller.id)
        return SellerResponse.from_domain(seller, user, rules)

    def get_schedule_for_user(self, user_id: int) -> Optional[SellerResponse]:
        """Schedule of the seller profile owned by `user_id`, if any."""
        seller = self.seller_repo.get_by_user_id(user_id)
        if seller is None:
            return None
        return self.get_weekly_schedule(seller.id)

    def list_sellers(self) -> List[SellerResponse]:
        """Active sellers with their weekly schedule."""
        return [
            SellerResponse.from_domain(
                seller,
                self.user_repo.get_by_id(seller.user_id),
                self.availability_repo.get_all_rules(seller.id),
            )
            for seller in self.seller_repo.list_active()
        ]

    def _require_seller(self, seller_id: int) -> Seller:
        seller = self.seller_repo.get_by_id(seller_id)
        if seller is None:
            raise NotFoundError(f"Seller {seller_id} not found")
        return seller
