import reflex as rx

from llm_evals_viewer.records import Correctness
from llm_evals_viewer.states.evals import EvalListState
from llm_evals_viewer.ui import app_header, error_callout


def correctness_badge(is_correct: rx.Var) -> rx.Component:  # type: ignore[valid-type]
    return rx.cond(
        is_correct,
        rx.badge("Correct", variant="soft", size="1", color_scheme="green"),
        rx.badge("Incorrect", variant="soft", size="1", color_scheme="tomato"),
    )


def page() -> rx.Component:
    filters = rx.hstack(
        rx.hstack(
            rx.vstack(
                rx.text("Run Name", size="1", color="gray"),
                rx.select(
                    EvalListState.run_names,
                    value=EvalListState.run_name,
                    on_change=EvalListState.set_run_name,
                    width="220px",
                ),
                spacing="1",
            ),
            rx.vstack(
                rx.text("Question Type", size="1", color="gray"),
                rx.input(
                    placeholder="p_id suffix",
                    value=EvalListState.question_type,
                    on_change=EvalListState.set_question_type,
                    width="180px",
                ),
                spacing="1",
            ),
            rx.vstack(
                rx.text("Correctness", size="1", color="gray"),
                rx.select(
                    [c.value for c in Correctness],
                    value=EvalListState.correctness,
                    on_change=EvalListState.set_correctness,
                    width="140px",
                ),
                spacing="1",
            ),
            rx.vstack(
                rx.text("Distinct Answers", size="1", color="gray"),
                rx.hstack(
                    rx.input(
                        type="number",
                        placeholder="min",
                        value=EvalListState.min_distinct,
                        on_change=EvalListState.set_min_distinct,
                        width="80px",
                    ),
                    rx.text("to"),
                    rx.input(
                        type="number",
                        placeholder="max",
                        value=EvalListState.max_distinct,
                        on_change=EvalListState.set_max_distinct,
                        width="80px",
                    ),
                    rx.text(EvalListState.distinct_range_display, size="1", color="gray"),
                    align="center",
                    spacing="2",
                ),
                spacing="1",
            ),
            spacing="4",
            align="end",
            wrap="wrap",
        ),
        rx.hstack(
            rx.button("Search", on_click=[EvalListState.reset_pagination, EvalListState.get_data]),
            rx.button(
                "Clear",
                variant="soft",
                on_click=EvalListState.clear_filters,
            ),
            spacing="2",
        ),
        justify="between",
        width="100%",
        align="end",
        wrap="wrap",
    )

    table = rx.table.root(
        rx.table.header(
            rx.table.row(
                rx.table.column_header_cell("Execution Time"),
                rx.table.column_header_cell("Age"),
                rx.table.column_header_cell("Runtime (s)"),
                rx.table.column_header_cell("Run Name"),
                rx.table.column_header_cell("Problem"),
                rx.table.column_header_cell("Prediction"),
                rx.table.column_header_cell("Label"),
                rx.table.column_header_cell("Result"),
                rx.table.column_header_cell("Distinct Answers"),
                rx.table.column_header_cell("Actions"),
            ),
        ),
        rx.table.body(
            rx.foreach(
                EvalListState.rows,
                lambda r: rx.table.row(
                    rx.table.cell(r.exec_time),
                    rx.table.cell(r.age),
                    rx.table.cell(r.runtime),
                    rx.table.cell(r.run_name),
                    rx.table.cell(r.p_id),
                    rx.table.cell(r.prediction),
                    rx.table.cell(r.label),
                    rx.table.cell(correctness_badge(r.is_correct)),
                    rx.table.cell(r.distinct_answers),
                    rx.table.cell(
                        rx.link(
                            rx.button("View Details", size="1", variant="soft"),
                            href="/llm-evals/" + r.uuid,
                        )
                    ),
                ),
            ),
        ),
        width="100%",
    )

    pagination_controls = rx.hstack(
        rx.text(EvalListState.rows_display, size="2", color="gray"),
        rx.spacer(),
        rx.hstack(
            rx.button("⏮", variant="soft", size="1", on_click=EvalListState.first_page, disabled=~EvalListState.has_prev_page),  # type: ignore[operator]
            rx.button(
                "← Prev",
                variant="soft",
                size="1",
                on_click=EvalListState.prev_page,
                disabled=~EvalListState.has_prev_page,  # type: ignore[operator]
            ),
            rx.text(EvalListState.page_display, size="2", style={"minWidth": "110px", "textAlign": "center"}),
            rx.button(
                "Next →",
                variant="soft",
                size="1",
                on_click=EvalListState.next_page,
                disabled=~EvalListState.has_next_page,  # type: ignore[operator]
            ),
            rx.button("⏭", variant="soft", size="1", on_click=EvalListState.last_page, disabled=~EvalListState.has_next_page),  # type: ignore[operator]
            spacing="2",
            align="center",
        ),
        width="100%",
        align="center",
        padding_top="0.5em",
    )

    return rx.vstack(
        app_header(),
        rx.vstack(
            rx.heading("LLM Evaluations", size="6"),
            error_callout(EvalListState.error_message),
            filters,
            rx.cond(
                EvalListState.rows_refreshing,
                rx.center(rx.spinner(size="3"), padding="2em", width="100%"),
                rx.card(rx.scroll_area(table, type="auto", scrollbars="horizontal"), width="100%"),
            ),
            pagination_controls,
            spacing="4",
            width="100%",
            padding="1em 1.25em",
        ),
        spacing="0",
        width="100%",
    )
