"""Allow/avoid evaluation over compiled path rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from models.config import BrowserConfig, MatchMode
from models.rules import AccessDecision
from runtime.patterns import CompiledRule, compile_rules

AVOIDED_MESSAGE = "The requested path is on the forbidden list"
NOT_ALLOWED_MESSAGE = "The requested path is not on the allowed list"


def _matches(rule: CompiledRule, path: str, mode: MatchMode) -> bool:
    if mode is MatchMode.ANCHORED:
        return rule.matcher.match_start(path)
    return rule.matcher.search(path)


def evaluate(
    path: str,
    avoid: Sequence[CompiledRule],
    allow: Sequence[CompiledRule],
    mode: MatchMode = MatchMode.SEARCH,
    restricted: Optional[bool] = None,
) -> AccessDecision:
    """Decide whether ``path`` may be browsed.

    Any avoid rule matching marks the path avoided; with no allow rules every
    path is allowed, otherwise at least one allow rule has to match.
    ``restricted`` overrides the "no allow rules" test, so an allow list whose
    rules all failed to compile still denies.
    """
    if restricted is None:
        restricted = bool(allow)
    avoided = any(_matches(rule, path, mode) for rule in avoid)
    allowed = not restricted or any(_matches(rule, path, mode) for rule in allow)
    reason = None
    if avoided:
        reason = AVOIDED_MESSAGE
    elif not allowed:
        reason = NOT_ALLOWED_MESSAGE
    return AccessDecision(avoided=avoided, allowed=allowed, reason=reason)


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    """Compiled rule lists, built once and shared by every request."""

    avoid: Tuple[CompiledRule, ...] = ()
    allow: Tuple[CompiledRule, ...] = ()
    mode: MatchMode = MatchMode.SEARCH
    restricted: bool = False

    @classmethod
    def from_config(cls, config: BrowserConfig) -> "AccessPolicy":
        return cls(
            avoid=compile_rules(config.avoid_paths, "avoided path"),
            allow=compile_rules(config.allow_paths, "allowed path"),
            mode=config.match_mode,
            restricted=bool(config.allow_paths),
        )

    def evaluate(self, path: str) -> AccessDecision:
        return evaluate(path, self.avoid, self.allow, self.mode, self.restricted or bool(self.allow))
