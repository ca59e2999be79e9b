"""Seed script to populate the local dev database with sample boards and cards.

Usage:
    PYTHONPATH=backend/src python backend/scripts/seed_data.py populate
    PYTHONPATH=backend/src python backend/scripts/seed_data.py populate --email me@example.com
    PYTHONPATH=backend/src python backend/scripts/seed_data.py clear
"""

import argparse
import asyncio
from datetime import date, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings
from db.session import configure_sqlite, engine_options
from models import Board, Card, CardLabel, Column, User
from services.provisioning_service import provision_defaults


def _in_days(days: int) -> date:
    return date.today() + timedelta(days=days)


# ---------------------------------------------------------------------------
# Card data, keyed by column title
# ---------------------------------------------------------------------------

CARD_SAMPLES: dict[str, list[dict]] = {
    'Todo': [
        {
            'title': 'Setup Project Environment',
            'description': 'Install dependencies and configure development environment',
            'due_in_days': 3,
            'labels': ['Setup', 'High Priority'],
        },
        {
            'title': 'Design Database Schema',
            'description': 'Create ERD and define relationships between tables',
            'due_in_days': 5,
            'labels': ['Database', 'Planning'],
        },
        {
            'title': 'Create API Documentation',
            'description': 'Document all API endpoints with examples',
            'due_in_days': 7,
            'labels': ['Documentation'],
        },
    ],
    'In Progress': [
        {
            'title': 'Implement User Authentication',
            'description': 'Setup Google OAuth login and session management',
            'due_in_days': 2,
            'labels': ['Backend', 'Auth'],
        },
        {
            'title': 'Build Board Management',
            'description': 'Create, read, update, delete operations for boards',
            'labels': ['Backend', 'Feature'],
        },
    ],
    'Done': [
        {
            'title': 'Initial Project Setup',
            'description': 'Project initialized with required dependencies',
            'completed': True,
            'labels': ['Setup', 'Completed'],
        },
        {
            'title': 'Database Migration',
            'description': 'All database tables created and relationships established',
            'completed': True,
            'labels': ['Database', 'Completed'],
        },
    ],
}


def card_samples(column_title: str) -> list[dict]:
    """Sample cards for a column; columns with unknown titles get generic cards."""
    return CARD_SAMPLES.get(column_title) or [
        {
            'title': f'Task in {column_title}',
            'description': 'Sample task for testing purposes',
            'labels': ['Sample'],
        },
        {
            'title': 'Another Task',
            'description': f'Another sample task in {column_title}',
            'labels': ['Sample', 'Test'],
        },
    ]


async def select_users(session: AsyncSession, email: str | None) -> list[User]:
    """All users, or the single user with the given email."""
    query = select(User).order_by(User.id)
    if email:
        query = query.where(User.email == email)
    return list((await session.execute(query)).scalars().all())


async def seed_user(session: AsyncSession, user: User) -> int:
    """Ensure the user has a board and fill empty columns with sample cards."""
    boards = (await session.execute(
        select(Board).where(Board.user_id == user.id).order_by(Board.id),
    )).scalars().all()
    if not boards:
        boards = [await provision_defaults(session, user.id)]
        print(f'  Created default board for user {user.id}')

    created = 0
    for board in boards:
        columns = (await session.execute(
            select(Column).where(Column.board_id == board.id).order_by(Column.position, Column.id),
        )).scalars().all()
        for column in columns:
            existing = (await session.execute(
                select(func.count()).select_from(Card).where(Card.column_id == column.id),
            )).scalar_one()
            if existing:
                continue
            for position, data in enumerate(card_samples(column.title)):
                card = Card(
                    column_id=column.id,
                    title=data['title'],
                    description=data['description'],
                    due_date=_in_days(data['due_in_days']) if 'due_in_days' in data else None,
                    completed=data.get('completed', False),
                    position=position,
                )
                session.add(card)
                await session.flush()
                session.add_all(CardLabel(card_id=card.id, label=label) for label in data['labels'])
                created += 1
    await session.flush()
    return created


def _session_factory() -> tuple:
    settings = get_settings()
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        **engine_options(settings.database_url, settings.db_pool_size, settings.db_max_overflow),
    )
    if settings.database_url.startswith('sqlite'):
        configure_sqlite(engine.sync_engine)
    return engine, async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def populate(email: str | None = None) -> None:
    """Populate boards and sample cards for every (or one) user."""
    engine, session_factory = _session_factory()

    async with session_factory() as session:
        try:
            users = await select_users(session, email)
            if not users:
                print('No users found! Sign in once before seeding.')
                return
            print('Populating seed data...')
            for user in users:
                created = await seed_user(session, user)
                print(f'  User {user.id} ({user.email}): created {created} cards')
            await session.commit()
            print('Seed data created successfully.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear(email: str | None = None) -> None:
    """Delete every board (and with it every column, card, and label) of the selected users."""
    engine, session_factory = _session_factory()

    async with session_factory() as session:
        try:
            users = await select_users(session, email)
            user_ids = [user.id for user in users]
            if not user_ids:
                print('No users found, nothing to clear.')
                return
            result = await session.execute(delete(Board).where(Board.user_id.in_(user_ids)))
            await session.commit()
            print(f'  Deleted {result.rowcount} boards for {len(user_ids)} users')
            print('Clear complete.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    if not settings.debug:
        print(
            "ERROR: Seed script requires APP_DEBUG=true.\n"
            "This script modifies data directly and must only run against a local dev database."
        )
        raise SystemExit(1)

    parser = argparse.ArgumentParser(description='Seed the dev database with sample boards.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    populate_parser = subparsers.add_parser('populate', help='Populate boards with sample cards')
    populate_parser.add_argument('--email', help='Only seed the user with this email')

    clear_parser = subparsers.add_parser('clear', help='Remove all boards')
    clear_parser.add_argument('--email', help='Only clear the user with this email')

    args = parser.parse_args()

    if args.command == 'populate':
        asyncio.run(populate(email=args.email))
    elif args.command == 'clear':
        asyncio.run(clear(email=args.email))


if __name__ == '__main__':
    main()
