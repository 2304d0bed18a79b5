"""
Fuzzy matching and ranking for the command palette.

The query is treated as a set of characters. Every title character found in
that set counts as matched, and maximal runs of matched characters form
consecutive-match spans. Ranking is driven by the longest span; among equal
spans, shorter titles with fewer unmatched characters come first.

    score = 0                                   if nothing matches
    score = longest + matched / (len(title) + 1) otherwise

The second term is always below 1, so a strictly longer span always ranks
strictly higher.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

from rich.markup import escape

from cmdpalette.config.constants import (
    DIM_COLOR_DARK,
    SUBTITLE_MAX_SOFT_LENGTH,
    SUBTITLE_MAX_TITLE_ADDITIVE_LENGTH,
)

from .palette_commands import Command

Scorable = Union[Command, str]


@dataclass(frozen=True)
class MatchSpan:
    """Half-open [start, end) slice of a title."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def text(self, title: str) -> str:
        return title[self.start:self.end]


@dataclass(frozen=True)
class RankedCommand:
    """A command paired with its score for the current query."""

    command: Command
    score: float


def _title_of(item: Scorable) -> str:
    return item if isinstance(item, str) else item.title


def query_charset(query: str) -> frozenset[str]:
    """Lower-cased set of query characters; duplicates collapse."""
    return frozenset(query.lower())


def consecutive_spans(title: str, query: str) -> list[MatchSpan]:
    """All maximal runs of title characters that appear in the query."""
    charset = query_charset(query)
    spans: list[MatchSpan] = []
    start = None
    for i, ch in enumerate(title):
        if ch.lower() in charset:
            if start is None:
                start = i
        elif start is not None:
            spans.append(MatchSpan(start, i))
            start = None
    if start is not None:
        spans.append(MatchSpan(start, len(title)))
    return spans


def longest_span(title: str, query: str) -> MatchSpan | None:
    """Longest consecutive-match span; the first one wins ties."""
    best = None
    for span in consecutive_spans(title, query):
        if best is None or len(span) > len(best):
            best = span
    return best


def score(item: Scorable, query: str) -> float:
    """Score a command (or bare title) against the query. Case-insensitive."""
    title = _title_of(item)
    spans = consecutive_spans(title, query)
    if not spans:
        return 0.0
    longest = max(len(s) for s in spans)
    unmatched = len(title) - sum(len(s) for s in spans)
    # Secondary term stays below 1 so the longest span always decides first
    return longest + 1 / (1 + len(title) + unmatched)


def rank(commands: Iterable[Command], query: str) -> list[RankedCommand]:
    """
    Order commands by descending score.

    The sort is stable, so equal scores keep their input order. Commands
    that match nothing stay in the list, at the bottom.
    """
    ranked = [RankedCommand(command, score(command, query)) for command in commands]
    ranked.sort(key=lambda r: -r.score)
    return ranked


def highlight_title(title: str, query: str, dim_color: str = DIM_COLOR_DARK) -> str:
    """
    Rich markup for a row title.

    Everything but the longest span is dimmed; the span keeps the row's
    default style so it stands out. Case is preserved.
    """
    span = longest_span(title, query)
    if span is None:
        return f"[{dim_color}]{escape(title)}[/]"

    parts = []
    before = title[:span.start]
    after = title[span.end:]
    if before:
        parts.append(f"[{dim_color}]{escape(before)}[/]")
    parts.append(escape(span.text(title)))
    if after:
        parts.append(f"[{dim_color}]{escape(after)}[/]")
    return "".join(parts)


def subtitle_max_length(title: str) -> int:
    return min(
        SUBTITLE_MAX_SOFT_LENGTH + len(title),
        SUBTITLE_MAX_SOFT_LENGTH + SUBTITLE_MAX_TITLE_ADDITIVE_LENGTH,
    )


def truncate_subtitle(title: str, subtitle: str) -> str:
    """Keep the tail of long subtitles; for paths the tail is what differs."""
    max_length = subtitle_max_length(title)
    if len(subtitle) > max_length + 2:
        return ".." + subtitle[len(subtitle) - max_length:]
    return subtitle


def format_debug_subtitle(subtitle: str, value: float) -> str:
    return f"{subtitle} (score: {value:.2f})"
