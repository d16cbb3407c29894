# dirbrowse/runtime/patterns.py
# Purpose: Turn user path masks into case-insensitive matchers.
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

from models.rules import PathRule
from runtime.errors import CompileError

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass(frozen=True, slots=True)
class Literal:
    text: str

    def to_regex(self) -> str:
        return re.escape(self.text)


@dataclass(frozen=True, slots=True)
class Wildcard:
    def to_regex(self) -> str:
        return ".*"


Segment = Union[Literal, Wildcard]


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """Parsed mask together with the expression built from it."""

    source: str
    segments: Tuple[Segment, ...]
    regex: re.Pattern[str]

    def search(self, path: str) -> bool:
        return self.regex.search(path) is not None

    def match_start(self, path: str) -> bool:
        return self.regex.match(path) is not None


@dataclass(frozen=True, slots=True)
class CompiledRule:
    index: int
    source: PathRule
    matcher: CompiledPattern


def tokenize(pattern: str) -> Tuple[Segment, ...]:
    """Split a mask into literal runs and wildcards.

    Consecutive ``*`` collapse into a single wildcard.
    """
    segments: List[Segment] = []
    for i, part in enumerate(pattern.split(WILDCARD)):
        if i and not (segments and isinstance(segments[-1], Wildcard)):
            segments.append(Wildcard())
        if part:
            segments.append(Literal(part))
    return tuple(segments)


def compile_pattern(pattern: str) -> CompiledPattern:
    if not pattern:
        raise CompileError(pattern, "empty pattern")
    segments = tokenize(pattern)
    expression = "".join(seg.to_regex() for seg in segments)
    try:
        regex = re.compile(expression, re.IGNORECASE)
    except (re.error, OverflowError, RecursionError) as exc:
        raise CompileError(pattern, str(exc)) from exc
    return CompiledPattern(source=pattern, segments=segments, regex=regex)


def compile_rule(rule: PathRule, index: int = 0) -> CompiledRule:
    return CompiledRule(index=index, source=rule, matcher=compile_pattern(rule.pattern))


def compile_rules(rules: Iterable[PathRule], kind: str = "path") -> Tuple[CompiledRule, ...]:
    """Compile every rule, dropping the ones that fail."""
    compiled: List[CompiledRule] = []
    for index, rule in enumerate(rules):
        try:
            compiled.append(compile_rule(rule, index))
        except CompileError as exc:
            logger.warning(
                "Ignoring %s rule {%d} {%s} with pattern %r: %s",
                kind,
                index,
                rule.name,
                rule.pattern,
                exc.reason,
            )
    return tuple(compiled)
