from decimal import Decimal

import pytest

from llm_evals_viewer import records
from llm_evals_viewer.records import (
    Correctness,
    EvalFilters,
    EvalPage,
    EvalStore,
    EvaluationRecord,
    InvalidTableNameError,
    TableNotFoundError,
    validate_table_name,
)


def _uuids(page: EvalPage) -> list[str]:
    return [r.uuid for r in page.rows]


def test_record_coercion():
    record = EvaluationRecord.model_validate(
        {
            "uuid": "x",
            "exec_time": None,
            "runtime_s": "1.25",
            "p_id": None,
            "run_name": "r",
            "prediction": 1,
            "label": 1,
            "extracted_answers": None,
            "reasoning": None,
        }
    )

    assert record.runtime_s == 1.25
    assert record.extracted_answers == []
    assert record.p_id == ""
    assert record.reasoning == ""
    assert record.is_correct
    assert record.distinct_answers_count == 0


@pytest.mark.parametrize("runtime", [None, "", "abc", "-3", "nan"])
def test_record_runtime_defaults_to_zero(runtime):
    record = EvaluationRecord.model_validate({"uuid": "x", "runtime_s": runtime})

    assert record.runtime_s == 0.0


def test_record_answers_normalized_and_counted():
    record = EvaluationRecord.model_validate(
        {"uuid": "x", "extracted_answers": [Decimal("2"), Decimal("2.5"), 2, [1], [1]]}
    )

    assert record.extracted_answers == [2, 2.5, 2, [1], [1]]
    assert record.distinct_answers_count == 3


def test_record_without_label_is_not_correct():
    record = EvaluationRecord.model_validate({"uuid": "x", "prediction": None, "label": None})

    assert not record.is_correct


@pytest.mark.parametrize("name", ["llm_evals", "Table1", "a_b_c"])
def test_valid_table_names(name):
    assert validate_table_name(name) == name


@pytest.mark.parametrize("name", ["", "llm-evals", 'x"; DROP TABLE y; --', "a b", "public.llm_evals"])
def test_invalid_table_names(name):
    with pytest.raises(InvalidTableNameError):
        validate_table_name(name)


@pytest.mark.asyncio
async def test_get_record(store: EvalStore):
    record = await store.get_record("e1")

    assert record is not None
    assert record.run_name == "run-a"
    assert record.runtime_s == 1.5
    assert record.extracted_answers == [3, 3, 3]
    assert record.is_correct
    assert "boxed" in record.reasoning


@pytest.mark.asyncio
async def test_get_record_with_nulls(store: EvalStore):
    record = await store.get_record("e4")

    assert record is not None
    assert record.runtime_s == 0.0
    assert record.extracted_answers == []
    assert record.reasoning == ""
    assert not record.is_correct


@pytest.mark.asyncio
async def test_get_missing_record(store: EvalStore):
    assert await store.get_record("nope") is None


@pytest.mark.asyncio
async def test_list_records_newest_first(store: EvalStore):
    page = await store.list_records(EvalFilters(), page=1, page_size=30)

    assert _uuids(page) == ["e5", "e4", "e3", "e2", "e1"]
    assert page.total_count == 5
    assert page.total_pages == 1


@pytest.mark.asyncio
async def test_list_records_pagination(store: EvalStore):
    page = await store.list_records(EvalFilters(), page=2, page_size=2)

    assert _uuids(page) == ["e3", "e2"]
    assert page.current_page == 2
    assert page.total_count == 5
    assert page.total_pages == 3


@pytest.mark.asyncio
async def test_list_records_page_is_clamped_to_first(store: EvalStore):
    page = await store.list_records(EvalFilters(), page=0, page_size=2)

    assert page.current_page == 1
    assert _uuids(page) == ["e5", "e4"]


@pytest.mark.asyncio
async def test_list_records_by_run_name(store: EvalStore):
    page = await store.list_records(EvalFilters(run_name="run-b"))

    assert _uuids(page) == ["e4", "e3"]
    assert page.total_count == 2


@pytest.mark.asyncio
async def test_list_records_by_question_type_suffix(store: EvalStore):
    page = await store.list_records(EvalFilters(question_type="algebra"))
    assert _uuids(page) == ["e3", "e1"]

    page = await store.list_records(EvalFilters(question_type="geometry", run_name="run-a"))
    assert _uuids(page) == ["e2"]


@pytest.mark.asyncio
async def test_question_type_wildcards_are_literal(store: EvalStore):
    page = await store.list_records(EvalFilters(question_type="%"))

    assert page.total_count == 0


@pytest.mark.asyncio
async def test_list_records_by_correctness(store: EvalStore):
    correct = await store.list_records(EvalFilters(correctness=Correctness.CORRECT))
    incorrect = await store.list_records(EvalFilters(correctness=Correctness.INCORRECT))

    assert _uuids(correct) == ["e5", "e3", "e1"]
    assert _uuids(incorrect) == ["e4", "e2"]


@pytest.mark.asyncio
async def test_list_records_by_distinct_answers(store: EvalStore, monkeypatch):
    monkeypatch.setattr(records, "SCAN_CHUNK_SIZE", 2)

    page = await store.list_records(EvalFilters(min_distinct=1, max_distinct=2), page=1, page_size=2)
    assert _uuids(page) == ["e5", "e2"]
    assert page.total_count == 3

    page = await store.list_records(EvalFilters(min_distinct=1, max_distinct=2), page=2, page_size=2)
    assert _uuids(page) == ["e1"]
    assert page.total_count == 3

    page = await store.list_records(EvalFilters(min_distinct=2))
    assert _uuids(page) == ["e3", "e2"]

    page = await store.list_records(EvalFilters(max_distinct=0, run_name="run-b"))
    assert _uuids(page) == ["e4"]


@pytest.mark.asyncio
async def test_distinct_answers_range(store: EvalStore):
    assert await store.get_distinct_answers_range() == (0, 3)
    assert await store.get_distinct_answers_range("run-a") == (1, 2)
    assert await store.get_distinct_answers_range("missing") == (0, 0)


@pytest.mark.asyncio
async def test_run_names(store: EvalStore):
    assert await store.get_run_names() == ["run-a", "run-b"]


@pytest.mark.asyncio
async def test_list_tables(store: EvalStore):
    assert "llm_evals" in await store.list_tables()


@pytest.mark.asyncio
async def test_table_schema(store: EvalStore):
    columns = await store.get_table_schema("llm_evals")

    assert [c.column_name for c in columns] == [
        "uuid",
        "exec_time",
        "runtime_s",
        "p_id",
        "run_name",
        "prediction",
        "label",
        "extracted_answers",
        "reasoning",
    ]
    assert all(c.data_type for c in columns)


@pytest.mark.asyncio
async def test_table_rows(store: EvalStore):
    rows = await store.get_table_rows("llm_evals", limit=3)

    assert len(rows) == 3
    assert {"uuid", "run_name", "reasoning"} <= set(rows[0])


@pytest.mark.asyncio
async def test_unknown_table(store: EvalStore):
    with pytest.raises(TableNotFoundError):
        await store.get_table_schema("no_such_table")


@pytest.mark.asyncio
async def test_invalid_table_is_rejected_before_query(store: EvalStore):
    with pytest.raises(InvalidTableNameError):
        await store.get_table_rows("llm_evals; DROP TABLE llm_evals")
