"""
Seed script for local development
Creates the tables, a starter destination catalog and an admin account.

Usage:
    python -m app.db.seed --admin-email admin@example.com --admin-password secret123
"""

import argparse
import asyncio
import logging

from sqlalchemy import select

from app.core.database import Base, async_session, engine
from app.core.logging_config import setup_logging
from app.core.security import get_password_hash
from app.models import Destination, Traveler, User

logger = logging.getLogger(__name__)

DESTINATIONS = [
    # Brasil
    ("São Paulo", "SP", "Brasil"),
    ("Rio de Janeiro", "RJ", "Brasil"),
    ("Belo Horizonte", "MG", "Brasil"),
    ("Salvador", "BA", "Brasil"),
    ("Curitiba", "PR", "Brasil"),
    ("Fortaleza", "CE", "Brasil"),
    ("Recife", "PE", "Brasil"),
    ("Porto Alegre", "RS", "Brasil"),
    ("Brasília", "DF", "Brasil"),
    ("Manaus", "AM", "Brasil"),
    # International
    ("New York", "NY", "Estados Unidos"),
    ("Los Angeles", "CA", "Estados Unidos"),
    ("Miami", "FL", "Estados Unidos"),
    ("Paris", None, "França"),
    ("Londres", None, "Reino Unido"),
    ("Lisboa", None, "Portugal"),
    ("Buenos Aires", None, "Argentina"),
    ("Santiago", None, "Chile"),
    ("Tóquio", None, "Japão"),
    ("Dubai", None, "Emirados Árabes"),
]

async def seed_destinations(session) -> int:
    existing = set(
        (await session.execute(select(Destination.city, Destination.country))).all()
    )
    created = 0
    for city, state, country in DESTINATIONS:
        if (city, country) in existing:
            continue
        session.add(Destination(city=city, state=state, country=country))
        created += 1
    return created

async def seed_admin(session, email: str, password: str, name: str) -> bool:
    result = await session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        return False

    user = User(name=name, email=email, hashed_password=get_password_hash(password), is_admin=True)
    session.add_all([user, Traveler(name=name, user=user, is_active=True)])
    return True

async def main(args) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        created = await seed_destinations(session)
        admin_created = False
        if args.admin_email and args.admin_password:
            admin_created = await seed_admin(session, args.admin_email, args.admin_password, args.admin_name)
        await session.commit()

    logger.info("Seeded %s destinations", created)
    if admin_created:
        logger.info("Created admin %s", args.admin_email)

    await engine.dispose()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the trip request database")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    parser.add_argument("--admin-name", default="Administrator")
    setup_logging()
    asyncio.run(main(parser.parse_args()))
