# product_lifecycle_engine/test_scripts/init_db.py

"""
Initialize a local database: create all tables from the SQLAlchemy models and
optionally seed team members for the owner roster.

Usage:
    python -m test_scripts.init_db
    python -m test_scripts.init_db --member U1:Ana --member U2:Bruno
"""

import argparse
from typing import List, Tuple

from sqlalchemy import select

from initiative_engine.db.base import Base
from initiative_engine.db.models import TeamMember
from initiative_engine.db.session import SessionLocal, engine


def _parse_member(raw: str) -> Tuple[str, str]:
    user_id, _, name = raw.partition(":")
    if not user_id.strip():
        raise argparse.ArgumentTypeError(f"Invalid member {raw!r}, expected USER_ID[:NAME]")
    return user_id.strip(), (name or user_id).strip()


def seed_members(members: List[Tuple[str, str]]) -> int:
    added = 0
    with SessionLocal() as db:
        existing = set(db.execute(select(TeamMember.user_id)).scalars().all())
        for user_id, name in members:
            if user_id in existing:
                continue
            db.add(TeamMember(user_id=user_id, display_name=name))
            added += 1
        db.commit()
    return added


def main() -> None:
    parser = argparse.ArgumentParser(description="Create tables and seed the member roster.")
    parser.add_argument("--member", action="append", type=_parse_member, default=[], help="USER_ID[:NAME]")
    args = parser.parse_args()

    print("Creating all tables using SQLAlchemy metadata...")
    Base.metadata.create_all(bind=engine)
    if args.member:
        print(f"Seeded {seed_members(args.member)} member(s).")
    print("Done.")


if __name__ == "__main__":
    main()
