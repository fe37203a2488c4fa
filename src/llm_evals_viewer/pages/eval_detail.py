import reflex as rx

from llm_evals_viewer.components.ui_chat import render_message_bubble
from llm_evals_viewer.pages.evals import correctness_badge
from llm_evals_viewer.states.eval_detail import EvalDetailState
from llm_evals_viewer.ui import app_header, breadcrumbs, error_callout


def _field(label: str, value: rx.Component | rx.Var | str) -> rx.Component:
    return rx.vstack(
        rx.text(label, size="1", weight="medium", color="gray"),
        value if isinstance(value, rx.Component) else rx.text(value),
        spacing="1",
    )


def _uuid_form() -> rx.Component:
    return rx.hstack(
        rx.input(
            value=EvalDetailState.uuid_input,
            on_change=EvalDetailState.set_uuid_input,
            on_key_down=EvalDetailState.handle_uuid_key,
            width="100%",
        ),
        rx.button("Resubmit", on_click=EvalDetailState.resubmit),
        spacing="2",
        width="100%",
    )


def _answer_badge(answer: rx.Var) -> rx.Component:  # type: ignore[valid-type]
    return rx.badge(answer, variant="soft", size="2", color_scheme="gray", style={"whiteSpace": "pre-wrap"})


def _metadata() -> rx.Component:
    return rx.grid(
        _field("UUID", _uuid_form()),
        _field("Run Name", EvalDetailState.run_name),
        _field("Execution Time", EvalDetailState.exec_time),
        _field("Runtime (s)", EvalDetailState.runtime),
        _field("Prediction", EvalDetailState.prediction),
        _field("Label", rx.hstack(rx.text(EvalDetailState.label), correctness_badge(EvalDetailState.is_correct))),
        rx.box(
            _field(
                "Extracted Answers",
                rx.hstack(rx.foreach(EvalDetailState.extracted_answers, _answer_badge), spacing="2", wrap="wrap"),
            ),
            grid_column="span 2",
        ),
        columns="2",
        spacing="5",
        width="100%",
    )


def _conversation_card(conv) -> rx.Component:  # type: ignore[valid-type]
    is_expanded = EvalDetailState.expanded_convs.contains(conv.index)  # type: ignore[attr-defined]

    header = rx.button(
        rx.hstack(
            rx.hstack(
                rx.text(conv.title, size="2", weight="medium", color="gray"),
                rx.cond(
                    ~is_expanded,
                    rx.foreach(
                        conv.boxed_answers_short,
                        lambda a: rx.badge(a, variant="soft", size="1", color_scheme="blue"),
                    ),
                    rx.fragment(),
                ),
                spacing="2",
                align="center",
                wrap="wrap",
            ),
            rx.text(rx.cond(is_expanded, "−", "+"), color="gray"),
            justify="between",
            align="center",
            width="100%",
        ),
        variant="ghost",
        color_scheme="gray",
        width="100%",
        height="auto",
        padding="0.75em 1em",
        on_click=EvalDetailState.toggle_conversation(conv.index),  # type: ignore[call-arg,func-returns-value]
        style={"position": "sticky", "top": "3.5em", "zIndex": "5"},
    )

    body = rx.vstack(
        rx.foreach(
            conv.messages,
            lambda msg: render_message_bubble(
                msg,
                show_rendered=EvalDetailState.rendered_messages.contains(msg.message_id),  # type: ignore[attr-defined]
                on_toggle_rendered=EvalDetailState.toggle_rendered(msg.message_id),  # type: ignore[call-arg,func-returns-value]
            ),
        ),
        spacing="3",
        width="100%",
        padding="0 1em 1em 1em",
    )

    return rx.card(
        rx.vstack(header, rx.cond(is_expanded, body, rx.fragment()), spacing="2", width="100%"),
        width="100%",
        variant="surface",
    )


def page() -> rx.Component:
    details = rx.vstack(
        rx.cond(
            EvalDetailState.parse_error != "",
            rx.callout(
                "Error parsing conversations: " + EvalDetailState.parse_error,
                icon="triangle_alert",
                color_scheme="red",
                width="100%",
            ),
            rx.fragment(),
        ),
        rx.heading("Evaluation Details", size="6"),
        _metadata(),
        rx.heading("Conversations", size="5", padding_top="1em"),
        rx.vstack(rx.foreach(EvalDetailState.conversations, _conversation_card), spacing="4", width="100%"),
        spacing="4",
        width="100%",
    )

    content = rx.cond(
        EvalDetailState.loading,
        rx.center(rx.spinner(size="3"), padding="2em", width="100%"),
        rx.cond(
            EvalDetailState.not_found,
            rx.center(rx.text("Evaluation not found", color="red"), padding="2em", width="100%"),
            details,
        ),
    )

    return rx.vstack(
        app_header(),
        rx.vstack(
            breadcrumbs([("LLM Evals", "/llm-evals"), ("Details", "#")]),
            error_callout(EvalDetailState.error_message),
            content,
            spacing="3",
            width="100%",
            max_width="72em",
            margin="0 auto",
            padding="1em 1.25em",
        ),
        spacing="0",
        width="100%",
    )
