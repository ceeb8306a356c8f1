"""SQLite engine setup tests."""

import pytest
from sqlalchemy import Column, ForeignKey, Integer, MetaData, Table, create_engine, select, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yang.config import Settings
from yang.database import configure_sqlite


def _engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'local.db'}", connect_args={"check_same_thread": False}
    )
    configure_sqlite(engine)
    return engine


metadata = MetaData()
parents = Table("parents", metadata, Column("id", Integer, primary_key=True))
children = Table(
    "children",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("parent_id", Integer, ForeignKey("parents.id"), nullable=False),
)


def test_savepoint_rollback_keeps_outer_work(tmp_path):
    engine = _engine(tmp_path)
    metadata.create_all(engine)

    with Session(engine) as session:
        session.execute(parents.insert().values(id=1))
        nested = session.begin_nested()
        session.execute(parents.insert().values(id=2))
        nested.rollback()
        session.commit()

        ids = session.execute(select(parents.c.id)).scalars().all()
    assert ids == [1]
    engine.dispose()


def test_foreign_keys_enforced(tmp_path):
    engine = _engine(tmp_path)
    metadata.create_all(engine)

    with Session(engine) as session:
        assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1
        with pytest.raises(IntegrityError):
            session.execute(children.insert().values(id=1, parent_id=99))
    engine.dispose()


def test_default_url_uses_psycopg2(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    url = make_url(Settings(_env_file=None).database_url)
    assert url.get_driver_name() == "psycopg2"
