import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import sqlalchemy as sa
import sqlalchemy.ext.asyncio as sa_aio
from pydantic import BaseModel, ConfigDict, Field, field_validator

from llm_evals_viewer.db import LLMEvalDB
from llm_evals_viewer.util import safe_render_value

logger = logging.getLogger(__name__)

TABLE_NAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")

# rows fetched per query when filtering by distinct answers count
SCAN_CHUNK_SIZE = 200


class InvalidTableNameError(ValueError):
    pass


class TableNotFoundError(LookupError):
    pass


def _normalize_answer(v: Any) -> Any:
    if isinstance(v, Decimal):
        return int(v) if v == v.to_integral_value() else float(v)
    return v


def distinct_count(values: list[Any]) -> int:
    try:
        return len(set(values))
    except TypeError:  # unhashable items, e.g. nested lists from a JSON column
        return len({safe_render_value(v) for v in values})


class EvaluationRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uuid: str
    exec_time: datetime | None = None
    runtime_s: float = 0.0
    p_id: str = ""
    run_name: str = ""
    prediction: int | None = None
    label: int | None = None
    extracted_answers: list[Any] = Field(default_factory=list)
    reasoning: str = ""

    @field_validator("uuid", mode="before")
    @classmethod
    def _str_uuid(cls, v: Any) -> str:
        return str(v)

    @field_validator("p_id", "run_name", "reasoning", mode="before")
    @classmethod
    def _str_or_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("runtime_s", mode="before")
    @classmethod
    def _coerce_runtime(cls, v: Any) -> float:
        if v is None or v == "":
            return 0.0
        try:
            runtime = float(v)
        except (TypeError, ValueError):
            return 0.0
        return runtime if math.isfinite(runtime) and runtime > 0 else 0.0

    @field_validator("extracted_answers", mode="before")
    @classmethod
    def _coerce_answers(cls, v: Any) -> list[Any]:
        if not isinstance(v, (list, tuple)):
            return []
        return [_normalize_answer(x) for x in v]

    @property
    def is_correct(self) -> bool:
        return self.prediction is not None and self.prediction == self.label

    @property
    def distinct_answers_count(self) -> int:
        return distinct_count(self.extracted_answers)


class Correctness(str, Enum):
    ALL = "all"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass
class EvalFilters:
    run_name: str | None = None
    # matched against the end of p_id
    question_type: str | None = None
    correctness: Correctness = Correctness.ALL
    min_distinct: int | None = None
    max_distinct: int | None = None

    @property
    def has_distinct_bounds(self) -> bool:
        return self.min_distinct is not None or self.max_distinct is not None

    def matches_distinct(self, record: EvaluationRecord) -> bool:
        count = record.distinct_answers_count
        if self.min_distinct is not None and count < self.min_distinct:
            return False
        if self.max_distinct is not None and count > self.max_distinct:
            return False
        return True


@dataclass
class EvalPage:
    rows: list[EvaluationRecord]
    total_count: int
    current_page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size > 0 else 0


@dataclass
class ColumnInfo:
    column_name: str
    data_type: str


def validate_table_name(name: str) -> str:
    if not name or not TABLE_NAME_RE.match(name):
        raise InvalidTableNameError(f"Invalid table name: {name!r}")
    return name


class EvalStore:
    """
    Read-only access to the evaluation records database
    """

    def __init__(self, sessionmaker: sa_aio.async_sessionmaker[sa_aio.AsyncSession]) -> None:
        self.sessionmaker = sessionmaker

    async def list_tables(self) -> list[str]:
        async with self.sessionmaker() as session:
            conn = await session.connection()
            names = await conn.run_sync(lambda sync_conn: sa.inspect(sync_conn).get_table_names())
        return sorted(names)

    async def _reflect_table(self, session: sa_aio.AsyncSession, table: str) -> sa.Table:
        validate_table_name(table)
        conn = await session.connection()

        def _reflect(sync_conn: sa.Connection) -> sa.Table:
            if not sa.inspect(sync_conn).has_table(table):
                raise TableNotFoundError(f"Table not found: {table}")
            return sa.Table(table, sa.MetaData(), autoload_with=sync_conn)

        return await conn.run_sync(_reflect)

    async def get_table_schema(self, table: str) -> list[ColumnInfo]:
        async with self.sessionmaker() as session:
            tbl = await self._reflect_table(session, table)
        return [ColumnInfo(column_name=col.name, data_type=str(col.type)) for col in tbl.columns]

    async def get_table_rows(self, table: str, limit: int = 100) -> list[dict[str, Any]]:
        async with self.sessionmaker() as session:
            tbl = await self._reflect_table(session, table)
            result = await session.execute(sa.select(tbl).limit(limit))
            return [dict(row._mapping) for row in result.all()]

    async def get_run_names(self) -> list[str]:
        async with self.sessionmaker() as session:
            stmt = (
                sa.select(sa.distinct(LLMEvalDB.run_name))
                .where(LLMEvalDB.run_name.is_not(None))
                .order_by(LLMEvalDB.run_name)
            )
            return [str(r) for r in (await session.execute(stmt)).scalars().all()]

    async def get_record(self, uuid: str) -> EvaluationRecord | None:
        async with self.sessionmaker() as session:
            row = await session.get(LLMEvalDB, uuid)
        if row is None:
            return None
        return EvaluationRecord.model_validate(row)

    @staticmethod
    def _filtered_stmt(filters: EvalFilters) -> sa.Select:
        stmt = sa.select(LLMEvalDB)
        if filters.run_name:
            stmt = stmt.where(LLMEvalDB.run_name == filters.run_name)
        if filters.question_type:
            stmt = stmt.where(LLMEvalDB.p_id.endswith(filters.question_type, autoescape=True))
        if filters.correctness == Correctness.CORRECT:
            stmt = stmt.where(LLMEvalDB.prediction == LLMEvalDB.label)
        elif filters.correctness == Correctness.INCORRECT:
            stmt = stmt.where(LLMEvalDB.prediction != LLMEvalDB.label)
        return stmt.order_by(sa.desc(LLMEvalDB.exec_time), LLMEvalDB.uuid)

    async def list_records(self, filters: EvalFilters, page: int = 1, page_size: int = 30) -> EvalPage:
        page = max(page, 1)
        page_size = max(page_size, 1)
        offset_rows = (page - 1) * page_size
        base_stmt = self._filtered_stmt(filters)

        async with self.sessionmaker() as session:
            if not filters.has_distinct_bounds:
                total_stmt = sa.select(sa.func.count()).select_from(base_stmt.subquery())
                total_count = int((await session.execute(total_stmt)).scalar() or 0)
                page_stmt = base_stmt.limit(page_size).offset(offset_rows)
                rows = [EvaluationRecord.model_validate(r) for r in (await session.execute(page_stmt)).scalars()]
                return EvalPage(rows=rows, total_count=total_count, current_page=page, page_size=page_size)

            # distinct answer counts depend on array functions of the backend,
            # so evaluate them on coerced records chunk by chunk
            rows = []
            matched_total = 0
            scan_offset = 0
            while True:
                chunk_stmt = base_stmt.limit(SCAN_CHUNK_SIZE).offset(scan_offset)
                chunk = list((await session.execute(chunk_stmt)).scalars().all())
                if not chunk:
                    break
                scan_offset += len(chunk)

                for r in chunk:
                    record = EvaluationRecord.model_validate(r)
                    if not filters.matches_distinct(record):
                        continue
                    if offset_rows <= matched_total < offset_rows + page_size:
                        rows.append(record)
                    matched_total += 1

        return EvalPage(rows=rows, total_count=matched_total, current_page=page, page_size=page_size)

    async def get_distinct_answers_range(self, run_name: str | None = None) -> tuple[int, int]:
        stmt = sa.select(LLMEvalDB.extracted_answers)
        if run_name:
            stmt = stmt.where(LLMEvalDB.run_name == run_name)

        counts: list[int] = []
        async with self.sessionmaker() as session:
            for answers in (await session.execute(stmt)).scalars():
                values = [_normalize_answer(x) for x in answers] if isinstance(answers, (list, tuple)) else []
                counts.append(distinct_count(values))

        if not counts:
            return 0, 0
        return min(counts), max(counts)
