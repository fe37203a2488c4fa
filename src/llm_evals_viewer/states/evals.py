import logging
from dataclasses import dataclass

import reflex as rx

from llm_evals_viewer.records import Correctness, EvalFilters, EvaluationRecord
from llm_evals_viewer.settings import settings
from llm_evals_viewer.states.common import get_viewer_app
from llm_evals_viewer.util import datetime_to_age, format_datetime

logger = logging.getLogger(__name__)

ALL_RUNS = "All Runs"


@dataclass
class EvalRowVis:
    uuid: str
    exec_time: str
    age: str
    runtime: str
    run_name: str
    p_id: str
    prediction: str
    label: str
    distinct_answers: int
    is_correct: bool

    @classmethod
    def create(cls, record: EvaluationRecord) -> "EvalRowVis":
        return cls(
            uuid=record.uuid,
            exec_time=format_datetime(record.exec_time),
            age=datetime_to_age(record.exec_time) if record.exec_time else "-",
            runtime=f"{record.runtime_s:.2f}",
            run_name=record.run_name,
            p_id=record.p_id,
            prediction="-" if record.prediction is None else str(record.prediction),
            label="-" if record.label is None else str(record.label),
            distinct_answers=record.distinct_answers_count,
            is_correct=record.is_correct,
        )


def _parse_bound(value: str) -> int | None:
    try:
        return int(value) if value.strip() else None
    except ValueError:
        return None


class EvalListState(rx.State):
    rows_refreshing: bool = True
    rows: list[EvalRowVis] = []
    error_message: str = ""

    # Filters
    run_names: list[str] = []
    run_name: str = ALL_RUNS
    question_type: str = ""
    correctness: str = Correctness.ALL.value
    min_distinct: str = ""
    max_distinct: str = ""
    distinct_range_min: int = 0
    distinct_range_max: int = 0

    page_size: int = settings.evals_page_size
    current_page: int = 0
    total_rows: int = 0

    def _filters(self) -> EvalFilters:
        return EvalFilters(
            run_name=None if self.run_name == ALL_RUNS else self.run_name,
            question_type=self.question_type.strip() or None,
            correctness=Correctness(self.correctness),
            min_distinct=_parse_bound(self.min_distinct),
            max_distinct=_parse_bound(self.max_distinct),
        )

    @rx.event
    def set_question_type(self, value: str) -> None:
        self.question_type = value

    @rx.event
    def set_min_distinct(self, value: str) -> None:
        self.min_distinct = value

    @rx.event
    def set_max_distinct(self, value: str) -> None:
        self.max_distinct = value

    @rx.event
    async def set_run_name(self, value: str) -> None:
        self.run_name = value
        self.current_page = 0
        self.error_message = ""
        await self._load_distinct_range()
        await self._load_rows()

    @rx.event
    async def set_correctness(self, value: str) -> None:
        self.correctness = value
        self.current_page = 0
        await self.get_data()  # type: ignore[operator]

    @rx.event
    async def clear_filters(self) -> None:
        self.run_name = ALL_RUNS
        self.question_type = ""
        self.correctness = Correctness.ALL.value
        self.min_distinct = ""
        self.max_distinct = ""
        self.current_page = 0
        self.error_message = ""
        await self._load_distinct_range()
        await self._load_rows()

    @rx.event
    def reset_pagination(self) -> None:
        self.current_page = 0

    @rx.event
    async def next_page(self) -> None:
        if self.has_next_page:
            self.current_page += 1
            await self.get_data()  # type: ignore[operator]

    @rx.event
    async def prev_page(self) -> None:
        if self.current_page > 0:
            self.current_page -= 1
            await self.get_data()  # type: ignore[operator]

    @rx.event
    async def first_page(self) -> None:
        if self.current_page != 0:
            self.current_page = 0
            await self.get_data()  # type: ignore[operator]

    @rx.event
    async def last_page(self) -> None:
        max_page = (self.total_rows - 1) // self.page_size if self.total_rows > 0 else 0
        if self.current_page != max_page:
            self.current_page = max_page
            await self.get_data()  # type: ignore[operator]

    @rx.var
    def total_pages(self) -> int:
        return (self.total_rows - 1) // self.page_size + 1 if self.total_rows > 0 else 1

    @rx.var
    def page_display(self) -> str:
        return f"Page {self.current_page + 1} of {self.total_pages}"

    @rx.var
    def rows_display(self) -> str:
        if self.total_rows == 0:
            return "No rows"
        start = self.current_page * self.page_size + 1
        end = min(start + self.page_size - 1, self.total_rows)
        return f"Rows {start}-{end} of {self.total_rows}"

    @rx.var
    def has_next_page(self) -> bool:
        return self.current_page < (self.total_pages - 1)

    @rx.var
    def has_prev_page(self) -> bool:
        return self.current_page > 0

    @rx.var
    def distinct_range_display(self) -> str:
        return f"Range: {self.distinct_range_min} - {self.distinct_range_max}"

    async def _load_distinct_range(self) -> None:
        viewer_app = await get_viewer_app()
        run_name = None if self.run_name == ALL_RUNS else self.run_name
        try:
            self.distinct_range_min, self.distinct_range_max = await viewer_app.store.get_distinct_answers_range(
                run_name
            )
        except Exception as e:
            logger.exception("Error fetching distinct answers range")
            self.error_message = f"Error fetching data: {e}"
            self.distinct_range_min, self.distinct_range_max = 0, 0

    async def _load_rows(self) -> None:
        self.rows_refreshing = True
        viewer_app = await get_viewer_app()

        try:
            page = await viewer_app.store.list_records(
                self._filters(), page=self.current_page + 1, page_size=self.page_size
            )
        except Exception as e:
            logger.exception("Error fetching evaluations")
            self.error_message = f"Error fetching data: {e}"
            self.rows = []
            self.total_rows = 0
            self.rows_refreshing = False
            return

        self.total_rows = page.total_count
        max_page = max(page.total_pages - 1, 0)
        if self.current_page > max_page:
            self.current_page = max_page
            await self._load_rows()
            return

        self.rows = [EvalRowVis.create(r) for r in page.rows]
        self.rows_refreshing = False

    @rx.event
    async def load_page(self) -> None:
        """on_load: filter options, then the first page"""
        self.error_message = ""
        viewer_app = await get_viewer_app()
        try:
            self.run_names = [ALL_RUNS, *await viewer_app.store.get_run_names()]
        except Exception as e:
            logger.exception("Error fetching run names")
            self.error_message = f"Error fetching data: {e}"
        await self._load_distinct_range()
        await self._load_rows()

    @rx.event
    async def get_data(self) -> None:
        self.error_message = ""
        await self._load_rows()
