"""
Inline text markup for timed character reveal.

Directives embedded in a line's text:

    \\stop{seconds}         pause
    \\speed{seconds}        per-character delay for the rest of the line
    \\blink{rate}           cursor blink rate (toggles per second)
    \\del{seconds}{A}{B}    type A, erase it at ``seconds`` per character, type B
    \\\\                     a literal backslash

Anything after a backslash that does not parse as a directive is shown
as typed: the backslash is emitted literally and scanning resumes with
the next character.

The revealer is a generator of RevealStep values. Each step has already
been applied to the buffer and carries the delay to wait before the
next one. Setting ``skipping`` turns every remaining delay into zero;
content and order are unchanged.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

logger = logging.getLogger(__name__)

DELETE_DIRECTIVE = "del"


@dataclass(frozen=True)
class Directive:
    name: str
    value: float
    end: int
    delete_text: str = ""
    append_text: str = ""


@dataclass(frozen=True)
class RevealStep:
    """Buffer contents after one mutation, and the pause that follows it."""
    text: str
    delay: float = 0.0
    directive: Optional[str] = None


Token = Union[str, Directive]


def _parse_float(text: str) -> Optional[float]:
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _read_braced(text: str, start: int) -> Optional[tuple[str, int]]:
    """Read ``{...}`` starting at the first ``{`` at or after ``start``."""
    open_index = text.find("{", start)
    if open_index == -1:
        return None
    close_index = text.find("}", open_index)
    if close_index == -1:
        return None
    return text[open_index + 1:close_index], close_index + 1


def parse_directive(text: str, start: int) -> Optional[Directive]:
    """
    Parse the directive whose backslash is at ``start``.

    Returns None when the text there is not a well-formed directive.
    """
    if start >= len(text) or text[start] != "\\":
        return None

    brace = text.find("{", start + 1)
    if brace == -1:
        return None
    name = text[start + 1:brace]
    if not name.isalpha():
        return None
    name = name.lower()

    if name == DELETE_DIRECTIVE:
        parts: list[str] = []
        position = brace
        for _ in range(3):
            braced = _read_braced(text, position)
            if braced is None:
                return None
            part, position = braced
            parts.append(part)
        seconds = _parse_float(parts[0])
        if seconds is None:
            return None
        return Directive(name, seconds, position, parts[1], parts[2])

    braced = _read_braced(text, brace)
    if braced is None:
        return None
    raw_value, end = braced
    value = _parse_float(raw_value)
    if value is None:
        return None
    return Directive(name, value, end)


def tokenize(text: str) -> list[Token]:
    """Split raw text into characters and directives."""
    tokens: list[Token] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text):
            if text[i + 1] == "\\":
                tokens.append("\\")
                i += 2
                continue
            directive = parse_directive(text, i)
            if directive is not None:
                tokens.append(directive)
                i = directive.end
                continue
        tokens.append(char)
        i += 1
    return tokens


class TextRevealer:
    """
    Drives the character reveal for one line at a time.

    Usage:
        revealer = TextRevealer(typing_speed=0.02)
        for step in revealer.reveal("Hi\\speed{0.1}Bye"):
            surface.show_text(step.text, cursor)
            yield step.delay
    """

    def __init__(
        self,
        typing_speed: float = 0.02,
        blink_speed: float = 1.0,
        enable_text_control: bool = True,
        on_blink_change: Optional[Callable[[float], None]] = None,
    ):
        self.default_typing_speed = typing_speed
        self.default_blink_speed = blink_speed
        self.enable_text_control = enable_text_control
        self.on_blink_change = on_blink_change

        self.typing_speed = typing_speed
        self.blink_speed = blink_speed
        self.skipping = False
        self.buffer = ""

    @property
    def blink_period(self) -> float:
        return 1.0 / self.blink_speed

    def skip(self) -> None:
        """Finish the current line without pauses."""
        self.skipping = True

    def reset(self) -> None:
        self.typing_speed = self.default_typing_speed
        self.blink_speed = self.default_blink_speed
        self.skipping = False
        self.buffer = ""

    def reveal(self, raw_text: str) -> Iterator[RevealStep]:
        """Start a new line. Per-line state is reset immediately."""
        self.reset()
        if not self.enable_text_control:
            return self._type(raw_text)
        return self._run(tokenize(raw_text))

    def _pace(self, seconds: float) -> float:
        return 0.0 if self.skipping else max(0.0, seconds)

    def _type(self, text: str) -> Iterator[RevealStep]:
        for char in text:
            self.buffer += char
            yield RevealStep(self.buffer, self._pace(self.typing_speed))

    def _run(self, tokens: list[Token]) -> Iterator[RevealStep]:
        for token in tokens:
            if isinstance(token, str):
                self.buffer += token
                yield RevealStep(self.buffer, self._pace(self.typing_speed))
            elif token.name == DELETE_DIRECTIVE:
                yield from self._delete(token)
            else:
                yield self._apply(token)

    def _apply(self, directive: Directive) -> RevealStep:
        if directive.name == "stop":
            return RevealStep(self.buffer, self._pace(directive.value), "stop")

        if directive.name == "speed":
            self.typing_speed = max(0.0, directive.value)
        elif directive.name == "blink":
            if directive.value > 0:
                self.blink_speed = directive.value
                if self.on_blink_change is not None:
                    self.on_blink_change(self.blink_period)
            else:
                logger.warning(f"Ignoring non-positive blink rate {directive.value}")
        else:
            logger.warning(f"Unknown text directive: {directive.name}")
        return RevealStep(self.buffer, 0.0, directive.name)

    def _delete(self, directive: Directive) -> Iterator[RevealStep]:
        yield from self._type(directive.delete_text)

        for _ in range(len(directive.delete_text)):
            if not self.buffer:
                break
            self.buffer = self.buffer[:-1]
            yield RevealStep(self.buffer, self._pace(directive.value), DELETE_DIRECTIVE)

        yield from self._type(directive.append_text)


def render_text(raw_text: str, enable_text_control: bool = True) -> str:
    """Final buffer for a line, as it reads once fully revealed."""
    revealer = TextRevealer(enable_text_control=enable_text_control)
    steps = revealer.reveal(raw_text)
    revealer.skip()
    for _ in steps:
        pass
    return revealer.buffer
