from typing import Optional

from booking.db.base import User as DbUser
from booking.domain.entities import User as DomainUser
from booking.domain.interfaces import IUserRepository
from booking.domain.time_arithmetic import to_utc


class UserRepository(IUserRepository):
    """Repository for User persistence operations.

    Maps between domain entities and database models; ORM rows never
    leave this class.
    """

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, user_id: int) -> Optional[DomainUser]:
        """Get user by ID, returning domain entity."""
        db_user = self.db.query(DbUser).filter_by(id=user_id).first()
        return self._to_domain(db_user) if db_user else None

    def get_by_email(self, email: str) -> Optional[DomainUser]:
        """Get user by email, returning domain entity."""
        db_user = self.db.query(DbUser).filter_by(email=email).first()
        return self._to_domain(db_user) if db_user else None

    def create(self, user: DomainUser) -> DomainUser:
        """Create a new user from domain entity."""
        db_user = DbUser()
        db_user.email = user.email
        db_user.name = user.name
        db_user.role = user.role
        db_user.calendar_integrated = user.calendar_integrated

        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)

        return self._to_domain(db_user)

    def _to_domain(self, db_user: DbUser) -> DomainUser:
        """Convert database model to domain entity."""
        return DomainUser(
            id=db_user.id,
            email=db_user.email,
            name=db_user.name,
            role=db_user.role,
            calendar_integrated=bool(db_user.calendar_integrated),
            created_at=to_utc(db_user.created_at) if db_user.created_at else None,
            updated_at=to_utc(db_user.updated_at) if db_user.updated_at else None,
        )
