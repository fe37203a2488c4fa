import logging

import reflex as rx

from llm_evals_viewer.records import ColumnInfo, InvalidTableNameError, TableNotFoundError
from llm_evals_viewer.settings import settings
from llm_evals_viewer.states.common import get_viewer_app
from llm_evals_viewer.util import safe_render_value

logger = logging.getLogger(__name__)


class TablesState(rx.State):
    tables: list[str] = []
    selected_table: str = ""
    schema_columns: list[ColumnInfo] = []
    data_columns: list[str] = []
    data_rows: list[list[str]] = []
    loading: bool = False
    error_message: str = ""

    @rx.event
    async def load_tables(self) -> None:
        self.error_message = ""
        viewer_app = await get_viewer_app()
        try:
            self.tables = await viewer_app.store.list_tables()
        except Exception as e:
            logger.exception("Error fetching tables")
            self.error_message = f"Error fetching tables: {e}"
            self.tables = []

    @rx.event
    async def select_table(self, table: str) -> None:
        self.selected_table = table
        await self.load_table_info()  # type: ignore[operator]

    @rx.event
    async def load_table_info(self) -> None:
        self.schema_columns = []
        self.data_columns = []
        self.data_rows = []
        self.error_message = ""
        if not self.selected_table:
            return

        self.loading = True
        viewer_app = await get_viewer_app()
        try:
            self.schema_columns = await viewer_app.store.get_table_schema(self.selected_table)
            rows = await viewer_app.store.get_table_rows(self.selected_table, limit=settings.table_sample_limit)
        except (InvalidTableNameError, TableNotFoundError) as e:
            self.error_message = str(e)
            return
        except Exception as e:
            logger.exception(f"Error fetching table info for {self.selected_table}")
            self.error_message = f"Error fetching table info: {e}"
            return
        finally:
            self.loading = False

        self.data_columns = [c.column_name for c in self.schema_columns]
        self.data_rows = [[safe_render_value(row.get(c, "")) for c in self.data_columns] for row in rows]
