"""Alembic configuration and revision chain."""

from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory

BACKEND = Path(__file__).resolve().parents[1]


def _config() -> Config:
    cfg = Config(str(BACKEND / "alembic.ini"))
    cfg.set_main_option("script_location", str(BACKEND / "src" / "bizdir" / "db" / "migrations"))
    return cfg


def test_ini_leaves_url_to_settings():
    assert _config().get_main_option("sqlalchemy.url") is None


def test_revisions_form_a_single_chain():
    script = ScriptDirectory.from_config(_config())
    assert script.get_heads() == ["8b2d4e6f1a93"]
    assert [r.revision for r in script.walk_revisions()] == ["8b2d4e6f1a93", "3f1c9a2b7d40"]
