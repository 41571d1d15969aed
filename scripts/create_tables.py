"""Create the mirrored gacha tables in the configured database.

Only useful for local databases: the hosted schema (including the
perform_gacha_draw procedure) is owned by the platform's migrations.

Usage:
  python scripts/create_tables.py
"""

from __future__ import annotations

import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy import text

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from gacha.config import resolve_database_url
from gacha.db import create_app_engine
from gacha.models.base import Base

# Import models so they register with Base.metadata
from gacha import models  # noqa: F401


def main() -> int:
    """Create all ORM tables in the target database."""

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(resolve_database_url())
    Base.metadata.create_all(bind=engine)

    # History pages read newest-first per member.
    if engine.dialect.name == "postgresql":
        ddl = [
            "CREATE INDEX IF NOT EXISTS ix_gacha_pulls_user_created_desc "
            "ON gacha_pulls (discord_user_id, created_at DESC, pull_id DESC)",
            "CREATE INDEX IF NOT EXISTS ix_gacha_pools_active_updated "
            "ON gacha_pools (is_active, updated_at DESC)",
        ]
        with engine.begin() as conn:
            for stmt in ddl:
                conn.execute(text(stmt))

    print("Tables created (or already exist).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
