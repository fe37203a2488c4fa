"""Splitting message text into literal and math segments.

Splitting is pure; typesetting is a separate step that may fail for any
single segment without affecting the others.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import nh3
from latex2mathml.converter import convert

logger = logging.getLogger(__name__)

# [ ... ] with optional backslashes on either side, may span lines
DISPLAY_MATH_RE = re.compile(r"\\?\[(.*?)\\?\]", re.DOTALL)
# \( ... \) on a single line
INLINE_PARENS_RE = re.compile(r"\\\((.*?)\\\)")
# $ ... $ on a single line
INLINE_DOLLAR_RE = re.compile(r"\$(.*?)\$")


class SegmentKind(str, Enum):
    LITERAL = "literal"
    DISPLAY_MATH = "display_math"
    INLINE_MATH = "inline_math"


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    # math body without delimiters, or the literal text
    text: str
    # exact source substring, delimiters included
    raw: str

    @property
    def is_math(self) -> bool:
        return self.kind != SegmentKind.LITERAL


@dataclass
class RenderedSegment:
    kind: str
    text: str
    html: str = ""


Typesetter = Callable[[str, bool], str]


def _literal(text: str) -> list[Segment]:
    if not text:
        return []
    return [Segment(kind=SegmentKind.LITERAL, text=text, raw=text)]


def _split(
    text: str,
    pattern: re.Pattern[str],
    kind: SegmentKind,
    rest: Callable[[str], list[Segment]],
) -> list[Segment]:
    segments: list[Segment] = []
    pos = 0
    for m in pattern.finditer(text):
        segments.extend(rest(text[pos : m.start()]))
        segments.append(Segment(kind=kind, text=m.group(1), raw=m.group(0)))
        pos = m.end()
    segments.extend(rest(text[pos:]))
    return segments


def _split_dollars(text: str) -> list[Segment]:
    return _split(text, INLINE_DOLLAR_RE, SegmentKind.INLINE_MATH, _literal)


def _split_parens(text: str) -> list[Segment]:
    return _split(text, INLINE_PARENS_RE, SegmentKind.INLINE_MATH, _split_dollars)


def render_segments(text: str) -> list[Segment]:
    """Split `text` into literal, display math and inline math segments.

    Display math is split out first, then \\( \\) inline math, then $ $ inline
    math. Joining `raw` of the result gives back `text`.
    """
    if not text:
        return []
    return _split(text, DISPLAY_MATH_RE, SegmentKind.DISPLAY_MATH, _split_parens)


# what latex2mathml emits; any other tag or attribute is stripped before rx.html
MATHML_TAGS = {
    "math",
    "semantics",
    "annotation",
    "mrow",
    "mi",
    "mn",
    "mo",
    "ms",
    "mtext",
    "mspace",
    "mstyle",
    "mpadded",
    "mphantom",
    "menclose",
    "merror",
    "mfrac",
    "msqrt",
    "mroot",
    "msub",
    "msup",
    "msubsup",
    "munder",
    "mover",
    "munderover",
    "mmultiscripts",
    "mprescripts",
    "none",
    "mtable",
    "mtr",
    "mtd",
    "mlabeledtr",
}
MATHML_ATTRIBUTES = {
    "*": {
        "display",
        "mathvariant",
        "mathsize",
        "displaystyle",
        "scriptlevel",
        "stretchy",
        "fence",
        "separator",
        "form",
        "lspace",
        "rspace",
        "minsize",
        "maxsize",
        "symmetric",
        "largeop",
        "movablelimits",
        "accent",
        "accentunder",
        "linethickness",
        "notation",
        "width",
        "height",
        "depth",
        "align",
        "columnalign",
        "columnlines",
        "columnspacing",
        "rowalign",
        "rowlines",
        "rowspacing",
        "frame",
        "encoding",
    },
}


def sanitize_mathml(markup: str) -> str:
    return nh3.clean(
        markup,
        tags=MATHML_TAGS,
        attributes=MATHML_ATTRIBUTES,
        url_schemes=set(),
        link_rel=None,
        strip_comments=True,
    )


def latex_to_mathml(latex: str, display: bool) -> str:
    return sanitize_mathml(convert(latex, display="block" if display else "inline"))


def typeset_segment(segment: Segment, typesetter: Typesetter = latex_to_mathml) -> RenderedSegment:
    if not segment.is_math:
        return RenderedSegment(kind=SegmentKind.LITERAL.value, text=segment.text)
    try:
        html = typesetter(segment.text, segment.kind == SegmentKind.DISPLAY_MATH)
    except Exception as e:
        logger.debug(f"LaTeX typesetting error for {segment.raw!r}: {e}")
        return RenderedSegment(kind=SegmentKind.LITERAL.value, text=segment.raw)
    return RenderedSegment(kind=segment.kind.value, text=segment.text, html=html)


def typeset_segments(segments: list[Segment], typesetter: Typesetter = latex_to_mathml) -> list[RenderedSegment]:
    return [typeset_segment(segment, typesetter) for segment in segments]


def render_text(text: str, typesetter: Typesetter = latex_to_mathml) -> list[RenderedSegment]:
    return typeset_segments(render_segments(text), typesetter)
