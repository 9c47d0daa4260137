"""Shared fixtures and test doubles for the mystery engine tests."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence

import pytest

from case_data import MYSTERIES
from case_repository import CatalogCaseRepository, convert_catalog_entry
from game_engine import MysteryGameEngine
from models import CaseScript, ConversationEntry, OracleTurn
from oracle import parse_oracle_turn
from storage import GameStorage, MemoryStore


BLACKWOOD = MYSTERIES[0]


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 1, 15, 21, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> None:
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)


class ScriptedOracle:
    """
    NarrativeOracle that replays queued replies.

    Each queued item is an OracleTurn, a raw reply string (run through
    parse_oracle_turn), or an exception instance to raise. When the queue is
    empty a neutral narrator turn is returned.
    """

    def __init__(self, *turns: Any) -> None:
        self.turns: List[Any] = list(turns)
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *turns: Any) -> "ScriptedOracle":
        self.turns.extend(turns)
        return self

    def run_turn(
        self,
        case: CaseScript,
        conversation: Sequence[ConversationEntry],
        player_input: str,
    ) -> OracleTurn:
        self.calls.append(
            {"case_id": case.id, "conversation": list(conversation), "input": player_input}
        )
        if not self.turns:
            return narration("The rain keeps falling.")
        item = self.turns.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return parse_oracle_turn(item)
        return item


class FakeAgent:
    """Stands in for an agno Agent: records prompts, returns canned content."""

    def __init__(self, *replies: Any) -> None:
        self.replies = list(replies)
        self.prompts: List[str] = []

    def run(self, prompt: str) -> SimpleNamespace:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, BaseException):
            raise reply
        return SimpleNamespace(content=reply)


class BrokenStore:
    """KeyValueStore whose every write fails."""

    def put(self, kind: str, key: str, blob: Any) -> None:
        raise OSError("disk full")

    def get(self, kind: str, key: str) -> Optional[Any]:
        return None

    def delete(self, kind: str, key: str) -> None:
        raise OSError("disk full")

    def ids(self, kind: str) -> List[str]:
        return []


def narration(text: str, **extra: Any) -> OracleTurn:
    return OracleTurn(response=text, type="narrator", is_solved=False, is_correct_solution=False, **extra)


def character(speaker: str, text: str, **extra: Any) -> OracleTurn:
    return OracleTurn(
        response=text, type="character", speaker=speaker,
        is_solved=False, is_correct_solution=False, **extra,
    )


def accusation(correct: bool) -> OracleTurn:
    return OracleTurn(
        response="Oracle-composed ending that must never be shown.",
        type="narrator",
        is_solved=True,
        is_correct_solution=correct,
    )


@pytest.fixture
def case() -> CaseScript:
    return convert_catalog_entry(BLACKWOOD)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def oracle() -> ScriptedOracle:
    return ScriptedOracle()


@pytest.fixture
def storage() -> GameStorage:
    return GameStorage(MemoryStore())


@pytest.fixture
def engine(oracle, storage, clock) -> MysteryGameEngine:
    return MysteryGameEngine(
        repository=CatalogCaseRepository(entries=[BLACKWOOD]),
        oracle=oracle,
        storage=storage,
        clock=clock,
        rng=random.Random(7),
    )


@pytest.fixture
def session(engine):
    return engine.start_new_game("medium")
