"""Management commands for the booking backend."""

from __future__ import annotations

import logging
from typing import Optional

import click

from booking.core.config import APP_TZ
from booking.core.security import create_user_token
from booking.db.session import SessionLocal, create_tables
from booking.domain.entities import Seller, User, default_weekly_rules
from booking.main import create_app
from booking.repositories.availability_repo import AvailabilityRepository
from booking.repositories.seller_repo import SellerRepository
from booking.repositories.user_repo import UserRepository

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

# Create the Flask application once so commands can share configuration.
app = create_app()


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("create-tables")
def create_tables_command() -> None:
    """Create all database tables."""
    with app.app_context():
        create_tables()
    click.echo("Database tables created.")


@cli.command("seed-seller")
@click.option("--email", required=True, help="Email of the seller account.")
@click.option("--name", required=True, help="Display name of the seller.")
@click.option("--timezone", "tz_name", default=None, help="IANA timezone name.")
@click.option("--title", default=None, help="Service title shown to buyers.")
def seed_seller(
    email: str, name: str, tz_name: Optional[str], title: Optional[str]
) -> None:
    """Create a seller user, profile and a Monday-Friday 09:00-17:00 week."""
    with app.app_context():
        session = SessionLocal()
        try:
            users = UserRepository(session)
            if users.get_by_email(email) is not None:
                raise click.ClickException(f"A user with email '{email}' already exists.")

            user = users.create(User(email=email, name=name, role="seller"))
            seller = SellerRepository(session).create_profile(
                Seller(user_id=user.id, title=title, timezone=tz_name or APP_TZ.key)
            )
            AvailabilityRepository(session).replace_weekly_rules(
                seller.id, default_weekly_rules(seller.id)
            )
            logging.info(
                "Created seller %s (user_id=%s, seller_id=%s, timezone=%s).",
                email,
                user.id,
                seller.id,
                seller.timezone,
            )
            click.echo(f"user_id={user.id} seller_id={seller.id}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


@cli.command("issue-token")
@click.option("--user-id", required=True, type=int, help="User id for the token subject.")
def issue_token(user_id: int) -> None:
    """Print a bearer token for local testing."""
    click.echo(create_user_token(user_id))


if __name__ == "__main__":
    cli()
