import reflex as rx

from llm_evals_viewer.states.tables import TablesState
from llm_evals_viewer.ui import app_header, error_callout, sample_rows_table


def _schema_table() -> rx.Component:
    return rx.table.root(
        rx.table.header(
            rx.table.row(
                rx.table.column_header_cell("Column"),
                rx.table.column_header_cell("Type"),
            ),
        ),
        rx.table.body(
            rx.foreach(
                TablesState.schema_columns,
                lambda c: rx.table.row(
                    rx.table.cell(c.column_name),
                    rx.table.cell(rx.code(c.data_type)),
                ),
            ),
        ),
        size="1",
    )


def page() -> rx.Component:
    table_select = rx.hstack(
        rx.text("Table", weight="medium"),
        rx.select(
            TablesState.tables,
            value=TablesState.selected_table,
            on_change=TablesState.select_table,
            placeholder="Select a table",
            width="280px",
        ),
        rx.cond(TablesState.loading, rx.spinner(size="2"), rx.fragment()),
        spacing="3",
        align="center",
    )

    table_info = rx.cond(
        TablesState.selected_table == "",
        rx.center(rx.text("Select a table to view its schema and data", color="gray"), padding="2em"),
        rx.vstack(
            rx.card(
                rx.vstack(
                    rx.heading("Schema", size="4"),
                    _schema_table(),
                    spacing="3",
                ),
                width="100%",
            ),
            rx.card(
                rx.vstack(
                    rx.heading("Data", size="4"),
                    sample_rows_table(data=TablesState.data_rows, columns=TablesState.data_columns),
                    spacing="3",
                    width="100%",
                ),
                width="100%",
                style={"overflowX": "auto"},
            ),
            spacing="4",
            width="100%",
        ),
    )

    return rx.vstack(
        app_header(),
        rx.vstack(
            rx.heading("Database Viewer", size="6"),
            error_callout(TablesState.error_message),
            table_select,
            table_info,
            spacing="4",
            width="100%",
            padding="1em 1.25em",
        ),
        spacing="0",
        width="100%",
    )
