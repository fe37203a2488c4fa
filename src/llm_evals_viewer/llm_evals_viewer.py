import reflex as rx

from llm_evals_viewer.pages.eval_detail import page as eval_detail_page
from llm_evals_viewer.pages.evals import page as evals_page
from llm_evals_viewer.pages.tables import page as tables_page
from llm_evals_viewer.states.eval_detail import EvalDetailState
from llm_evals_viewer.states.evals import EvalListState
from llm_evals_viewer.states.tables import TablesState

app = rx.App()
app.add_page(tables_page, route="/", title="LLM Evals Viewer", on_load=TablesState.load_tables)
app.add_page(evals_page, route="/llm-evals", title="LLM Evaluations", on_load=EvalListState.load_page)
app.add_page(
    eval_detail_page,
    route="/llm-evals/[uuid]",
    title="Evaluation Details",
    on_load=EvalDetailState.load_record,
)
