"""Deterministic counterpart replies used when the language model is unavailable.

Rules are data (see ``data/fallback_responses.json``): an opening table used
before the user has said anything, then keyword rules evaluated in order (first match wins),
then a default rule. Lines are picked with an injectable ``random.Random``.
"""

from __future__ import annotations

import json
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..config import fallback_responses_path
from ..feedback.scenarios import Scenario
from .base import History, user_turns


@dataclass(frozen=True)
class FallbackContext:
    utterance: str
    personality: str
    scenario: Optional[Scenario]
    history: History

    @property
    def lowered(self) -> str:
        return (self.utterance or "").lower()

    @property
    def message_number(self) -> int:
        """1 until the history holds a user turn.

        Callers pass the history including the utterance being answered.
        """
        return len(user_turns(self.history)) + 1


Predicate = Callable[[FallbackContext], bool]


def keyword_predicate(keywords: Sequence[str]) -> Predicate:
    kws = tuple(k.lower() for k in keywords)

    def _pred(ctx: FallbackContext) -> bool:
        text = ctx.lowered
        return any(k in text for k in kws)

    return _pred


def always(ctx: FallbackContext) -> bool:
    return True


def is_opening(ctx: FallbackContext) -> bool:
    return ctx.message_number == 1 or not (ctx.utterance or "").strip()


@dataclass(frozen=True)
class FallbackRule:
    name: str
    predicate: Predicate
    responses: Dict[str, Tuple[str, ...]]


def _responses(raw: Dict[str, Any]) -> Dict[str, Tuple[str, ...]]:
    return {str(k): tuple(str(x) for x in (v or [])) for k, v in (raw or {}).items()}


class FallbackResponder:
    def __init__(
        self,
        openings: Dict[str, Dict[str, str]],
        rules: Sequence[FallbackRule],
        default: FallbackRule,
        *,
        default_personality: str = "neutral",
        rng: Optional[random.Random] = None,
    ):
        self.openings = openings
        self.rules: List[FallbackRule] = list(rules)
        self.default = default
        self.default_personality = default_personality
        self.rng = rng or random.Random()

    @classmethod
    def from_table(cls, table: Dict[str, Any], rng: Optional[random.Random] = None) -> "FallbackResponder":
        rules = [
            FallbackRule(
                name=str(r.get("name") or f"rule_{i}"),
                predicate=keyword_predicate(r.get("keywords") or []),
                responses=_responses(r.get("responses") or {}),
            )
            for i, r in enumerate(table.get("rules") or [])
        ]
        d = table.get("default") or {}
        default = FallbackRule(
            name=str(d.get("name") or "general"),
            predicate=always,
            responses=_responses(d.get("responses") or {}),
        )
        return cls(
            openings={str(k): dict(v) for k, v in (table.get("opening") or {}).items()},
            rules=rules,
            default=default,
            default_personality=str(table.get("defaultPersonality") or "neutral"),
            rng=rng,
        )

    @classmethod
    def from_file(cls, path: Optional[Path] = None, rng: Optional[random.Random] = None) -> "FallbackResponder":
        p = path or fallback_responses_path()
        with Path(p).open("r", encoding="utf-8") as f:
            return cls.from_table(json.load(f), rng=rng)

    def match(self, ctx: FallbackContext) -> FallbackRule:
        for rule in self.rules:
            if rule.predicate(ctx):
                return rule
        return self.default

    def respond(
        self,
        utterance: str,
        personality: Optional[str],
        scenario: Optional[Scenario],
        history: History = (),
    ) -> str:
        """Reply to ``utterance``; ``history`` already ends with it."""
        ctx = FallbackContext(utterance or "", personality or self.default_personality, scenario, history or ())
        if is_opening(ctx):
            return self.opening(ctx)
        return self._pick(self.match(ctx), ctx.personality)

    def opening(self, ctx: FallbackContext) -> str:
        group = self.openings.get(ctx.personality) or self.openings.get(self.default_personality) or {}
        key = ctx.scenario.key if ctx.scenario is not None else ""
        if key and key in group:
            return group[key]
        return group.get("default", "")

    def _pick(self, rule: FallbackRule, personality: str) -> str:
        options = rule.responses.get(personality) or rule.responses.get(self.default_personality) or ()
        if not options:
            options = self.default.responses.get(self.default_personality) or ("Please tell me more.",)
        return self.rng.choice(list(options))
