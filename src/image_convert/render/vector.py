"""Vector re-render decisions and root ``<svg>`` size rewriting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

__all__ = [
    "VECTOR_FORMATS",
    "AttributeSpan",
    "RootElement",
    "VectorAction",
    "VectorDecision",
    "find_root_element",
    "first_element_name",
    "is_vector_format",
    "rescale_vector",
    "rewrite_root_dimensions",
]


VECTOR_FORMATS = frozenset({"SVG", "MVG"})

_QUOTES = "\"'"


class VectorAction(str, Enum):
    """What the caller should do with a vector source after a size request."""

    RASTER = "raster"
    RELOAD = "reload"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class VectorDecision:
    """Outcome of :func:`rescale_vector`; ``text`` is only set for reloads."""

    action: VectorAction
    text: Optional[str] = None

    @classmethod
    def use_raster(cls) -> "VectorDecision":
        return cls(VectorAction.RASTER)

    @classmethod
    def reload(cls, text: str) -> "VectorDecision":
        return cls(VectorAction.RELOAD, text)

    @classmethod
    def unchanged(cls) -> "VectorDecision":
        return cls(VectorAction.UNCHANGED)


@dataclass(frozen=True)
class AttributeSpan:
    """A quoted attribute; ``start``/``end`` delimit the value without its quotes."""

    name: str
    value: str
    start: int
    end: int


@dataclass(frozen=True)
class RootElement:
    """Opening tag of the root ``svg`` element, from ``<`` to ``>`` inclusive."""

    name: str
    start: int
    end: int
    attributes: Tuple[AttributeSpan, ...]

    def get(self, name: str) -> Optional[AttributeSpan]:
        """Return the first attribute called ``name`` (case-insensitive)."""

        wanted = name.lower()
        for attribute in self.attributes:
            if attribute.name.lower() == wanted:
                return attribute
        return None


def is_vector_format(format_tag: str | None) -> bool:
    """Return True for engine format tags that denote resolution-independent markup."""

    return bool(format_tag) and str(format_tag).upper() in VECTOR_FORMATS


def _skip_markup_declaration(text: str, lt: int) -> int:
    """Return the index just past a comment, processing instruction, or declaration at ``lt``."""

    if text.startswith("<!--", lt):
        close = text.find("-->", lt + 4)
        return -1 if close < 0 else close + 3
    if text.startswith("<?", lt):
        close = text.find("?>", lt + 2)
        return -1 if close < 0 else close + 2
    if text.startswith("<![CDATA[", lt):
        close = text.find("]]>", lt + 9)
        return -1 if close < 0 else close + 3
    # <!DOCTYPE ...> may carry an internal subset in brackets.
    depth = 0
    index = lt + 2
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            close = text.find(char, index + 1)
            if close < 0:
                return -1
            index = close
        elif char == "[":
            depth += 1
        elif char == "]":
            depth = max(0, depth - 1)
        elif char == ">" and depth == 0:
            return index + 1
        index += 1
    return -1


def _scan_name(text: str, index: int) -> int:
    while index < len(text) and not text[index].isspace() and text[index] not in "/>=":
        index += 1
    return index


def _iter_start_tags(text: str) -> Iterator[Tuple[int, int, str]]:
    """Yield ``(lt, name_end, name)`` for each element start tag in document order."""

    position = 0
    while True:
        lt = text.find("<", position)
        if lt < 0:
            return
        if text.startswith("<!", lt) or text.startswith("<?", lt):
            position = _skip_markup_declaration(text, lt)
            if position < 0:
                return
            continue
        if text.startswith("</", lt):
            position = lt + 2
            continue
        name_end = _scan_name(text, lt + 1)
        name = text[lt + 1 : name_end]
        if not name:
            position = lt + 1
            continue
        yield lt, name_end, name
        position = name_end


def _parse_attributes(text: str, index: int) -> Optional[Tuple[int, Tuple[AttributeSpan, ...]]]:
    """Parse attributes from ``index`` up to the closing ``>`` of the same tag."""

    attributes: List[AttributeSpan] = []
    length = len(text)
    while index < length:
        char = text[index]
        if char.isspace() or char == "/":
            index += 1
            continue
        if char == ">":
            return index, tuple(attributes)

        name_start = index
        index = _scan_name(text, index)
        name = text[name_start:index]
        while index < length and text[index].isspace():
            index += 1
        if index >= length or text[index] != "=":
            continue
        index += 1
        while index < length and text[index].isspace():
            index += 1
        if index >= length:
            break
        if text[index] in _QUOTES:
            quote = text[index]
            close = text.find(quote, index + 1)
            if close < 0:
                return None
            attributes.append(AttributeSpan(name, text[index + 1 : close], index + 1, close))
            index = close + 1
        else:
            # Unquoted values are skipped and never rewritten.
            while index < length and not text[index].isspace() and text[index] != ">":
                index += 1
    return None


def first_element_name(text: str) -> Optional[str]:
    """Return the name of the first element in ``text``, or ``None`` if there is none."""

    for _lt, _name_end, name in _iter_start_tags(text):
        return name
    return None


def find_root_element(text: str) -> Optional[RootElement]:
    """
    Locate the opening tag of the first ``svg`` element.

    Comments, processing instructions and declarations are skipped, the match
    is on the local name (any namespace prefix, case-insensitive), and the
    attribute scan stops at that tag's own ``>`` with quoted values honoured.
    Returns ``None`` when no well-formed ``svg`` start tag exists.
    """

    for lt, name_end, name in _iter_start_tags(text):
        if name.rpartition(":")[2].lower() != "svg":
            continue
        parsed = _parse_attributes(text, name_end)
        if parsed is None:
            return None
        gt, attributes = parsed
        return RootElement(name=name, start=lt, end=gt, attributes=attributes)
    return None


def rewrite_root_dimensions(text: str, width: int, height: int) -> Optional[str]:
    """
    Return ``text`` with the root ``width``/``height`` set to ``{width}px``/``{height}px``.

    Only attributes present on the root tag are rewritten; every other byte of
    the document is preserved. Returns ``None`` when nothing changed.
    """

    root = find_root_element(text)
    if root is None:
        return None

    replacements: List[Tuple[int, int, str]] = []
    for name, new_value in (("width", f"{width}px"), ("height", f"{height}px")):
        attribute = root.get(name)
        if attribute is not None and attribute.value != new_value:
            replacements.append((attribute.start, attribute.end, new_value))

    if not replacements:
        return None

    replacements.sort()
    pieces: List[str] = []
    cursor = 0
    for start, end, new_value in replacements:
        pieces.append(text[cursor:start])
        pieces.append(new_value)
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


def rescale_vector(
    text: str,
    original_w: int,
    original_h: int,
    target_w: int,
    target_h: int,
    *,
    raster_shrink: bool = True,
) -> VectorDecision:
    """
    Decide how a vector source reaches ``target_w`` x ``target_h``.

    Shrinking below the original width goes through the raster resize when
    ``raster_shrink`` is set. Any other size change rewrites the root size so
    the markup can be rendered again at the new intrinsic size.
    """

    if (target_w, target_h) == (original_w, original_h):
        return VectorDecision.unchanged()
    if raster_shrink and target_w < original_w:
        return VectorDecision.use_raster()

    rewritten = rewrite_root_dimensions(text, target_w, target_h)
    if rewritten is None:
        return VectorDecision.unchanged()
    return VectorDecision.reload(rewritten)
