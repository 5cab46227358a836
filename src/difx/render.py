"""Incremental rendering of color markup in model output.

The model marks added and removed code with one of two conventions:

- ``tags``: ``[ADD]...[/ADD]`` and ``[DEL]...[/DEL]``
- ``ansi``: literal ``\\033[32;1m...\\033[0m`` and ``\\033[31;1m...\\033[0m``

Streamed text arrives in arbitrary chunks, so a marker can be split across
two chunks and an open marker can arrive long before its close. The renderer
only writes text whose rendering can no longer change, which makes the
streamed output identical to rendering the whole response at once.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

import click

ESCAPE_LITERAL = "\\033"
ESCAPE = "\x1b"


@dataclass(frozen=True)
class MarkupScheme:
    """A set of open/close marker pairs mapped to terminal colors."""

    name: str
    # open marker -> (close marker, foreground color)
    pairs: dict[str, tuple[str, str]]
    # Convert literal "\033" outside of resolved pairs into a real ESC byte
    convert_escapes: bool = False
    open_pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        pattern = re.compile("|".join(re.escape(m) for m in self.pairs))
        object.__setattr__(self, "open_pattern", pattern)

    @property
    def tokens(self) -> set[str]:
        tokens = set(self.pairs)
        tokens.update(close for close, _ in self.pairs.values())
        return tokens


SCHEMES: dict[str, MarkupScheme] = {
    "tags": MarkupScheme(
        name="tags",
        pairs={
            "[ADD]": ("[/ADD]", "green"),
            "[DEL]": ("[/DEL]", "red"),
        },
    ),
    "ansi": MarkupScheme(
        name="ansi",
        pairs={
            "\\033[32;1m": ("\\033[0m", "green"),
            "\\033[31;1m": ("\\033[0m", "red"),
        },
        convert_escapes=True,
    ),
}


def _partial_token_pattern() -> re.Pattern:
    # Every proper prefix of every token of every scheme, anchored at the end.
    # re.search returns the leftmost start, i.e. the longest trailing prefix.
    prefixes = set()
    for scheme in SCHEMES.values():
        for token in scheme.tokens:
            prefixes.update(token[:i] for i in range(1, len(token)))
    alternatives = sorted(prefixes, key=len, reverse=True)
    return re.compile("(?:" + "|".join(re.escape(p) for p in alternatives) + r")\Z")


_PARTIAL_TOKEN = _partial_token_pattern()


def get_scheme(markup: str) -> MarkupScheme:
    """Look up a markup scheme by name."""
    if markup not in SCHEMES:
        raise ValueError(f"Unknown markup: {markup}. Available: {list(SCHEMES.keys())}")
    return SCHEMES[markup]


def trim_partial_marker(text: str) -> str:
    """Drop a trailing substring that could still grow into a marker."""
    match = _PARTIAL_TOKEN.search(text)
    if match is None:
        return text
    return text[: match.start()]


def _plain(text: str, scheme: MarkupScheme) -> str:
    if scheme.convert_escapes:
        return text.replace(ESCAPE_LITERAL, ESCAPE)
    return text


def resolve_markup(text: str, scheme: MarkupScheme, final: bool = False) -> str:
    """
    Replace complete marker pairs with terminal color codes.

    Scanning stops at the first open marker without a matching close, unless
    ``final`` is set, in which case that marker is kept literally and
    scanning continues after it.
    """
    out = []
    pos = 0
    while True:
        match = scheme.open_pattern.search(text, pos)
        if match is None:
            out.append(_plain(text[pos:], scheme))
            return "".join(out)

        close, color = scheme.pairs[match.group()]
        end = text.find(close, match.end())
        if end == -1:
            if not final:
                out.append(_plain(text[pos : match.start()], scheme))
                return "".join(out)
            out.append(_plain(text[pos : match.start()], scheme))
            out.append(match.group())
            pos = match.end()
            continue

        out.append(_plain(text[pos : match.start()], scheme))
        inner = _plain(text[match.end() : end], scheme)
        out.append(click.style(inner, fg=color, bold=True))
        pos = end + len(close)


def render_text(text: str, markup: str = "tags") -> str:
    """Render a complete response in one go."""
    return resolve_markup(text, get_scheme(markup), final=True)


def _echo(text: str) -> None:
    click.echo(text, nl=False, color=True)


@dataclass
class RenderState:
    """Text received so far and how much of its rendering was written."""

    raw: str = ""
    flushed: int = 0


class Renderer:
    """Writes streamed model output as soon as its rendering is settled."""

    def __init__(self, markup: str = "tags", write: Callable[[str], None] | None = None):
        self.scheme = get_scheme(markup)
        self.write = write or _echo
        self.state = RenderState()

    def _flush(self, rendered: str) -> str:
        if len(rendered) <= self.state.flushed:
            return ""
        new = rendered[self.state.flushed :]
        self.write(new)
        self.state.flushed = len(rendered)
        return new

    def feed(self, chunk: str) -> str:
        """Add a chunk and write whatever became safe to show. Returns the written text."""
        self.state.raw += chunk
        safe = trim_partial_marker(self.state.raw)
        return self._flush(resolve_markup(safe, self.scheme))

    def finish(self) -> str:
        """End of stream: write the rest, unclosed markers literally, then a newline."""
        new = self._flush(resolve_markup(self.state.raw, self.scheme, final=True))
        self.write("\n")
        return new

    def abort(self) -> None:
        """Stream failed: leave written output alone, end the line if one was started."""
        if self.state.flushed:
            self.write("\n")
