from datetime import datetime
from decimal import Decimal

import orjson as json
import pytest_asyncio
import sqlalchemy.ext.asyncio as sa_aio
from sqlalchemy.pool import StaticPool

from llm_evals_viewer.db import Base, LLMEvalDB
from llm_evals_viewer.records import EvalStore


@pytest_asyncio.fixture
async def sessionmaker():
    engine = sa_aio.create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        future=True,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sa_aio.async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        future=True,
    )

    await engine.dispose()


def _eval_rows() -> list[LLMEvalDB]:
    reasoning = json.dumps(
        [
            {"role": "user", "content": "What is 1 + 2?"},
            {"role": "assistant", "content": "It is \\boxed{3}."},
        ]
    ).decode()
    return [
        LLMEvalDB(
            uuid="e1",
            exec_time=datetime(2025, 1, 1, 10, 0),
            runtime_s=Decimal("1.50"),
            p_id="q1_algebra",
            run_name="run-a",
            prediction=3,
            label=3,
            extracted_answers=[3, 3, 3],
            reasoning=reasoning,
        ),
        LLMEvalDB(
            uuid="e2",
            exec_time=datetime(2025, 1, 2, 10, 0),
            runtime_s=Decimal("2.25"),
            p_id="q2_geometry",
            run_name="run-a",
            prediction=1,
            label=2,
            extracted_answers=[1, 2],
            reasoning="not json",
        ),
        LLMEvalDB(
            uuid="e3",
            exec_time=datetime(2025, 1, 3, 10, 0),
            runtime_s=Decimal("0.75"),
            p_id="q3_algebra",
            run_name="run-b",
            prediction=5,
            label=5,
            extracted_answers=[5, 4, 6],
            reasoning="[]",
        ),
        LLMEvalDB(
            uuid="e4",
            exec_time=datetime(2025, 1, 4, 10, 0),
            runtime_s=None,
            p_id="q4_number_theory",
            run_name="run-b",
            prediction=0,
            label=7,
            extracted_answers=None,
            reasoning=None,
        ),
        LLMEvalDB(
            uuid="e5",
            exec_time=datetime(2025, 1, 5, 10, 0),
            runtime_s=Decimal("3"),
            p_id="q5_geometry",
            run_name=None,
            prediction=2,
            label=2,
            extracted_answers=[2],
            reasoning="",
        ),
    ]


@pytest_asyncio.fixture
async def store(sessionmaker) -> EvalStore:
    async with sessionmaker() as session:
        session.add_all(_eval_rows())
        await session.commit()
    return EvalStore(sessionmaker=sessionmaker)
