#!/usr/bin/env python3
"""
Run Alembic migrations up to head
"""
import sys
from pathlib import Path

from alembic.config import Config
from alembic import command

alembic_cfg = Config(str(Path(__file__).resolve().parent / "alembic.ini"))

try:
    print("Running Alembic migrations...")
    command.upgrade(alembic_cfg, "head")
    print("✅ Migrations completed successfully!")
except Exception as e:
    error_msg = str(e).lower()
    print(f"❌ Migration failed: {e}")

    if "permission denied" in error_msg or "insufficient privilege" in error_msg:
        print("\n⚠️  PERMISSION ERROR!")
        print("The database user needs CREATE privileges to run migrations.")
        sys.exit(1)

    raise
