# File: site_harvest/theme/signals.py
"""site_harvest.theme.signals: pluggable colour signal sources.

A signal scans raw markup and yields weighted colour observations. Signals
are looked up by name in :data:`SIGNAL_REGISTRY`; :data:`DEFAULT_SIGNALS`
lists the ones enabled unless configured otherwise.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, Protocol, Tuple, Type

from site_harvest.theme.colors import normalize_color

__all__ = [
    "ColorObservation",
    "ColorSignal",
    "DeclarationSignal",
    "HexLiteralSignal",
    "RgbSignal",
    "CssVariableSignal",
    "SIGNAL_REGISTRY",
    "DEFAULT_SIGNALS",
]


@dataclass(frozen=True, slots=True)
class ColorObservation:
    color: str
    weight: int = 1


class ColorSignal(Protocol):
    name: str
    weight: int

    def observe(self, markup: str) -> Iterator[ColorObservation]: ...


class _RegexSignal:
    """Signal yielding the colour captured by the first group of *pattern*."""

    name = ""
    weight = 1
    pattern: re.Pattern[str]

    def observe(self, markup: str) -> Iterator[ColorObservation]:
        for m in self.pattern.finditer(markup):
            color = normalize_color(m.group(1))
            if color is not None:
                yield ColorObservation(color, self.weight)


class DeclarationSignal(_RegexSignal):
    """``color``, ``background(-color)`` and ``border(-color)`` declarations."""

    name = "declarations"
    weight = 1
    pattern = re.compile(
        r"(?:color|background(?:-color)?|border(?:-color)?):\s*([^;\"'{}<>]+)",
        re.IGNORECASE,
    )


class HexLiteralSignal(_RegexSignal):
    """Any 6-digit hex literal in the document."""

    name = "hex"
    weight = 2
    pattern = re.compile(r"(#[0-9a-fA-F]{6})")


class RgbSignal(_RegexSignal):
    name = "rgb"
    weight = 1
    pattern = re.compile(
        r"(rgba?\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}(?:\s*,\s*[\d.]+%?)?\s*\))",
        re.IGNORECASE,
    )


class CssVariableSignal(_RegexSignal):
    """Values of CSS custom properties (``--brand: #e50914``). Opt-in."""

    name = "css-variables"
    weight = 1
    pattern = re.compile(r"--[\w-]+\s*:\s*([^;\"'{}<>\n]+)")


SIGNAL_REGISTRY: Dict[str, Type[_RegexSignal]] = {
    cls.name: cls for cls in (DeclarationSignal, HexLiteralSignal, RgbSignal, CssVariableSignal)
}

DEFAULT_SIGNALS: Tuple[str, ...] = ("declarations", "hex", "rgb")
