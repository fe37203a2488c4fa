import reflex as rx

from llm_evals_viewer.states.common import AppVersionState

NAV_LINKS = [("Tables", "/"), ("LLM Evals", "/llm-evals")]


def debug_badge() -> rx.Component:
    return rx.cond(
        AppVersionState.debug_mode,
        rx.badge("DEBUG MODE", color_scheme="red", variant="solid", size="2"),
        rx.fragment(),
    )


def app_header() -> rx.Component:
    brand = rx.hstack(
        rx.link("LLM Evals Viewer", href="/", weight="bold", size="5"),
        rx.markdown(AppVersionState.version),  # type: ignore[operator]
        debug_badge(),
        align="center",
        spacing="3",
    )
    nav = rx.hstack(
        *[rx.link(label, href=href) for label, href in NAV_LINKS],
        rx.color_mode.button(),  # type: ignore[attr-defined]
        spacing="6",
        align="center",
    )
    return rx.box(
        rx.hstack(brand, nav, justify="between", align="center", width="100%"),
        width="100%",
        padding="0.5em 1.25em",
        border_bottom="1px solid var(--gray-5)",
        position="sticky",
        top="0",
        z_index="10",
        background_color=rx.color_mode_cond(light="white", dark="black"),
    )


def error_callout(message: rx.Var | str) -> rx.Component:
    return rx.cond(
        message != "",
        rx.callout(message, icon="triangle_alert", color_scheme="red", width="100%"),
        rx.fragment(),
    )


def sample_rows_table(data: rx.Var, columns: rx.Var) -> rx.Component:
    """Rows of an arbitrary table, rendered as strings."""
    return rx.box(
        rx.data_table(data=data, columns=columns, pagination=True, search=True, sort=True),
        width="100%",
        overflow_x="auto",
    )


def breadcrumbs(items: list[tuple[str, str]]) -> rx.Component:
    parts: list[rx.Component] = [rx.link(label, href=href) for label, href in items[:1]]
    for label, href in items[1:]:
        parts.extend([rx.text("/", color="gray"), rx.link(label, href=href)])
    return rx.hstack(*parts, spacing="2", padding_y="0.5em")
