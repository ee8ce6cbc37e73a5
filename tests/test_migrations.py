"""The Alembic migration builds the same tables the models declare."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from alembic import command
from alembic.config import Config
from ecoideias.db import models  # noqa: F401
from ecoideias.db.base import Base

ROOT = Path(__file__).resolve().parents[1]


def _config(db_path: Path) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    return cfg


def _tables(db_path: Path) -> set[str]:
    with sqlite3.connect(db_path) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {name for (name,) in rows} - {"alembic_version"}


def test_upgrade_creates_every_model_table(tmp_path: Path) -> None:
    db_path = tmp_path / "eco.db"
    command.upgrade(_config(db_path), "head")
    assert _tables(db_path) == set(Base.metadata.tables)


def test_downgrade_drops_everything(tmp_path: Path) -> None:
    db_path = tmp_path / "eco.db"
    cfg = _config(db_path)
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")
    assert _tables(db_path) == set()
