"""
Text Layout
Greedy word wrap of a resolved string into visual lines
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from app.exceptions import MeasurementUnavailable


@dataclass(frozen=True)
class FontSpec:
    """Font size in native pixels plus a family name"""
    size: int
    family: str

    @property
    def css(self) -> str:
        """Composite font string, e.g. `24px Arial`"""
        return f"{self.size}px {self.family}"


Measure = Callable[[str, FontSpec], float]


def layout_lines(
    text: str,
    font: FontSpec,
    max_width: Optional[float],
    measure: Optional[Measure]
) -> List[str]:
    """
    Break `text` into lines no wider than `max_width` where possible.

    Without a width the text is returned as a single, untouched line.
    Otherwise tokens split on single spaces are accumulated as
    `line + token + " "`; when that candidate measures wider than
    `max_width` (and it is not the first token) the current line is
    emitted and the token starts the next one. Emitted lines keep the
    trailing separator. A token wider than `max_width` on its own is never
    broken, and the last line is always emitted.

    Args:
        text: Resolved text of one box
        font: Font the lines will be painted with
        max_width: Wrap width in native pixels, falsy disables wrapping
        measure: Host text metrics, `(text, font) -> width`

    Returns:
        Lines in paint order
    """
    if not max_width:
        return [text]
    if measure is None:
        raise MeasurementUnavailable("Word wrap requires a text measurement function")

    lines = []
    line = ""
    for index, word in enumerate(text.split(" ")):
        candidate = line + word + " "
        if measure(candidate, font) > max_width and index > 0:
            lines.append(line)
            line = word + " "
        else:
            line = candidate
    lines.append(line)
    return lines
