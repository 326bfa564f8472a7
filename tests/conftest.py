"""
Shared fixtures: every test gets its own disposable SQLite file DB.
"""
import pytest
from sqlalchemy import text

from dbexplorer import db as dbmod

SCHEMA = [
    """
    CREATE TABLE items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT,
        price FLOAT
    )
    """,
    """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        login VARCHAR(255) NOT NULL,
        age INT,
        balance DECIMAL(10, 2),
        status TEXT DEFAULT 'active'
    )
    """,
]


@pytest.fixture
def explorer_db(tmp_path, monkeypatch):
    dbmod.reconfigure(f"sqlite:///{tmp_path / 'explorer.db'}")
    monkeypatch.setattr(dbmod, "EXPOSED_TABLES", set())
    with dbmod.engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
    yield dbmod.engine
    dbmod.dispose()


@pytest.fixture
def seed_items(explorer_db):
    """Insert n items titled item-1..item-n with price i * 1.5."""
    def _seed(n):
        with explorer_db.begin() as conn:
            for i in range(1, n + 1):
                conn.execute(
                    text("INSERT INTO items (title, price) VALUES (:title, :price)"),
                    {"title": f"item-{i}", "price": i * 1.5},
                )
    return _seed
