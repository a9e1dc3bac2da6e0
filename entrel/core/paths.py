#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the entrel project.

The project structure:
    ROOT/
    ├── entrel/        # Package code (migrations live in entrel/migrations)
    ├── data/          # SQLite database
    └── logs/          # Application logs
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Assumes this file is at ROOT/entrel/core/paths.py.

    Returns:
        Path object for project root
    """
    # paths.py -> core/ -> entrel/ -> ROOT/
    return Path(__file__).resolve().parent.parent.parent


# ----- Project directory -----
ROOT: Path = _get_project_root()
PACKAGE_DIR = ROOT / "entrel"
DATA_DIR = ROOT / "data"

# --- Database ---
ALEMBIC_DIR = PACKAGE_DIR / "migrations"
ALEMBIC_INI = ROOT / "alembic.ini"
DB_DIR = DATA_DIR / "db"
DB_PATH = DB_DIR / "entities.db"

# --- Logs ---
LOG_DIR = ROOT / "logs"
