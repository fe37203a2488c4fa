import asyncio
from datetime import datetime
from decimal import Decimal
from functools import cache

import sqlalchemy as sa
import sqlalchemy.dialects.postgresql as sa_pg
import sqlalchemy.ext.asyncio as sa_aio
import sqlalchemy.orm as sa_orm
import sqlalchemy.types as sa_types
from sqlalchemy.pool import NullPool

from llm_evals_viewer.settings import settings


class Base(sa_orm.DeclarativeBase):
    pass


class LLMEvalDB(Base):
    __tablename__ = "llm_evals"

    uuid: sa_orm.Mapped[str] = sa_orm.mapped_column(sa_types.String, primary_key=True)
    exec_time: sa_orm.Mapped[datetime] = sa_orm.mapped_column(sa_types.DateTime, nullable=True)

    # numeric in postgres, comes back as Decimal (or str from some drivers)
    runtime_s: sa_orm.Mapped[Decimal] = sa_orm.mapped_column(sa_types.Numeric, nullable=True)

    # problem id, the suffix encodes the question type e.g. "aime_2024_07_geometry"
    p_id: sa_orm.Mapped[str] = sa_orm.mapped_column(sa_types.String, nullable=True)
    run_name: sa_orm.Mapped[str] = sa_orm.mapped_column(sa_types.String, nullable=True)

    prediction: sa_orm.Mapped[int] = sa_orm.mapped_column(sa_types.Integer, nullable=True)
    label: sa_orm.Mapped[int] = sa_orm.mapped_column(sa_types.Integer, nullable=True)

    extracted_answers: sa_orm.Mapped[list] = sa_orm.mapped_column(
        sa_pg.ARRAY(sa_types.Numeric).with_variant(sa.JSON, "sqlite"), nullable=True
    )

    # serialized conversations, see llm_evals_viewer.reasoning
    reasoning: sa_orm.Mapped[str] = sa_orm.mapped_column(sa_types.Text, nullable=True)


def _pool_kwargs() -> dict:
    if settings.db_use_null_pool:
        return {"poolclass": NullPool}
    kwargs = {}
    if settings.db_pool_size is not None:
        kwargs["pool_size"] = settings.db_pool_size
    if settings.db_pool_max_overflow is not None:
        kwargs["max_overflow"] = settings.db_pool_max_overflow
    return kwargs


def async_conn_uri(conn_uri: str) -> str:
    return conn_uri.replace("postgresql://", "postgresql+asyncpg://").replace("sqlite://", "sqlite+aiosqlite://")


@cache
def _create_async_engine(loop):
    return sa_aio.create_async_engine(async_conn_uri(settings.db_conn_uri), **_pool_kwargs())


def get_async_db_engine() -> sa_aio.AsyncEngine:
    return _create_async_engine(asyncio.get_event_loop())


def get_sessionmaker() -> sa_aio.async_sessionmaker[sa_aio.AsyncSession]:
    return sa_aio.async_sessionmaker(
        bind=get_async_db_engine(),
        expire_on_commit=False,
        future=True,
    )
