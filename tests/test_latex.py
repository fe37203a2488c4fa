import pytest

from llm_evals_viewer.latex import (
    RenderedSegment,
    Segment,
    SegmentKind,
    render_segments,
    render_text,
    sanitize_mathml,
    typeset_segments,
)


def _kinds(segments: list[Segment]) -> list[SegmentKind]:
    return [s.kind for s in segments]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "plain text only",
        "The answer is $x^2$.",
        r"Area is \(\pi r^2\) and $r = 2$.",
        "Display:\n\\[\n\\sum_{i=1}^n i\n\\]\nthen $a$ and [b] end",
        r"\[ a $b$ c \] tail",
        "unclosed $dollar and \\( paren",
        "$a\nb$ and $$",
        "[][]$$\\(\\)",
    ],
)
def test_segments_reconstruct_input(text):
    segments = render_segments(text)

    assert "".join(s.raw for s in segments) == text


def test_inline_dollar():
    segments = render_segments("The answer is $x^2$.")

    assert _kinds(segments) == [SegmentKind.LITERAL, SegmentKind.INLINE_MATH, SegmentKind.LITERAL]
    assert segments[1].text == "x^2"
    assert segments[1].raw == "$x^2$"


def test_inline_parens_require_backslash():
    segments = render_segments(r"f(x) is \(x+1\)")

    assert _kinds(segments) == [SegmentKind.LITERAL, SegmentKind.INLINE_MATH]
    assert segments[0].text == "f(x) is "
    assert segments[1].text == "x+1"


def test_display_math_with_escaped_brackets_spans_lines():
    segments = render_segments("before\n\\[\nx = 1\n\\]\nafter")

    assert _kinds(segments) == [SegmentKind.LITERAL, SegmentKind.DISPLAY_MATH, SegmentKind.LITERAL]
    assert segments[1].text == "\nx = 1\n"
    assert segments[1].raw == "\\[\nx = 1\n\\]"


def test_display_math_takes_precedence_over_inline():
    segments = render_segments(r"\[ a $b$ c \]")

    assert _kinds(segments) == [SegmentKind.DISPLAY_MATH]
    assert segments[0].text == " a $b$ c "


def test_dollars_do_not_span_lines():
    segments = render_segments("cost $5\nand $6")

    assert _kinds(segments) == [SegmentKind.LITERAL]


def test_typesetting_failure_degrades_single_segment():
    def typesetter(latex: str, display: bool) -> str:
        if "bad" in latex:
            raise ValueError("cannot typeset")
        return f"<math display={'block' if display else 'inline'}>{latex}</math>"

    rendered = typeset_segments(render_segments(r"ok $x$ then $bad$ and \[y\] and \[bad\]"), typesetter)

    assert rendered == [
        RenderedSegment(kind="literal", text="ok "),
        RenderedSegment(kind="inline_math", text="x", html="<math display=inline>x</math>"),
        RenderedSegment(kind="literal", text=" then "),
        RenderedSegment(kind="literal", text="$bad$"),
        RenderedSegment(kind="literal", text=" and "),
        RenderedSegment(kind="display_math", text="y", html="<math display=block>y</math>"),
        RenderedSegment(kind="literal", text=" and "),
        RenderedSegment(kind="literal", text=r"\[bad\]"),
    ]


def test_render_text_produces_mathml():
    rendered = render_text("so $x^2$")

    assert rendered[0] == RenderedSegment(kind="literal", text="so ")
    assert rendered[1].kind == "inline_math"
    assert "<math" in rendered[1].html


def test_text_markup_is_not_passed_through():
    rendered = render_text(r"$\text{<img src=x onerror=alert(1)>}$")

    assert len(rendered) == 1
    assert rendered[0].kind == "inline_math"
    html = rendered[0].html
    assert "<math" in html
    assert "<img" not in html
    assert "onerror" not in html


def test_href_is_dropped():
    rendered = render_text(r"$\href{javascript:alert(1)}{x}$")

    assert len(rendered) == 1
    assert "javascript" not in rendered[0].html
    assert "href" not in rendered[0].html


def test_sanitize_mathml_keeps_math_and_strips_the_rest():
    html = sanitize_mathml('<math display="block"><mi onclick="x()">a</mi><script>bad()</script></math>')

    assert html.startswith("<math")
    assert "<mi>a</mi>" in html
    assert "onclick" not in html
    assert "script" not in html
    assert "bad" not in html
