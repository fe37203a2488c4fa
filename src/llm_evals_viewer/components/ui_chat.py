import reflex as rx


def render_segment(segment) -> rx.Component:  # type: ignore[valid-type]
    """One piece of typeset message text: literal, display math or inline math."""
    return rx.match(
        segment.kind,
        (
            "display_math",
            rx.box(
                rx.html(segment.html),
                style={"display": "flex", "justifyContent": "center", "margin": "1em 0"},
            ),
        ),
        ("inline_math", rx.html(segment.html, style={"display": "inline"})),
        rx.text.span(segment.text),
    )


def render_message_bubble(msg, show_rendered: rx.Var, on_toggle_rendered) -> rx.Component:  # type: ignore[valid-type]
    """Render a chat-style message bubble.

    Expects a MessageVis var: role_label, content, is_assistant, segments.
    `show_rendered` switches between the raw content and typeset segments.
    """

    raw_block = rx.box(
        rx.text(
            msg.content,
            size="2",
            style={
                "whiteSpace": "pre-wrap",
                "wordBreak": "break-word",
                "fontFamily": "var(--code-font-family)",
            },
        ),
        padding="0.75em",
        border_radius="8px",
        background_color="var(--gray-3)",
        style={"maxWidth": "100%", "overflowX": "auto"},
    )

    rendered_block = rx.box(
        rx.foreach(msg.segments, render_segment),
        style={
            "whiteSpace": "pre-wrap",
            "wordBreak": "break-word",
        },
    )

    header = rx.hstack(
        rx.text(msg.role_label, size="2", weight="medium", color="gray"),
        rx.button(
            rx.cond(show_rendered, "Show Raw", "Show Rendered"),
            variant="soft",
            color_scheme="gray",
            size="1",
            on_click=on_toggle_rendered,  # type: ignore[arg-type]
        ),
        spacing="4",
        align="center",
    )

    body = rx.vstack(
        header,
        rx.cond(show_rendered, rendered_block, raw_block),
        spacing="2",
        width="100%",
        style={"maxWidth": "100%"},
    )

    return rx.hstack(
        rx.avatar(
            fallback=rx.cond(msg.is_assistant, "A", "U"),
            size="2",
            radius="full",
            color_scheme=rx.cond(msg.is_assistant, "blue", "gray"),
        ),
        body,
        spacing="3",
        width="100%",
        align="start",
        padding="1em",
        border_radius="12px",
        background_color=rx.cond(msg.is_assistant, "#3b82f614", "#11182714"),
        style={"overflowX": "hidden"},
    )
