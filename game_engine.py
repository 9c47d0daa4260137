"""
game_engine.py
==============
Core game engine for the Noir Mystery detective game.

Contains:
  MysteryGameEngine — the single authority that advances a session by one
                      player action per call, enforces the one-accusation
                      rule, scores correct accusations, and persists the
                      result. Consumed by the CLI (cli.py) and the tests.

Public API summary:
    engine = MysteryGameEngine(repository, oracle)
    engine.start_new_game(difficulty)          → GameSession
    engine.process_player_input(sid, text)     → TurnResult
    engine.request_hint(sid)                   → ConversationEntry | None
    engine.give_up(sid)                        → ConversationEntry
    engine.resume_session(sid)                 → GameSession | None
    engine.get_session(sid)                    → GameSession
    engine.get_game_stats(sid)                 → dict
    engine.add_note(sid, note)                 → bool
    engine.list_sessions()                     → [GameSession]
    engine.delete_session(sid)                 → None

There is no "current session" inside the engine: every call names its
session id, and the calling layer decides which session the player is in.

Concurrency
-----------
Each session carries its own lock, held for the whole of an action including
the oracle call, so turns against one session are strictly sequential and a
session can only be completed once. Different sessions never block each other.

Persistence
-----------
Writes are best-effort. A failed write is logged and the in-memory session
stays authoritative for the rest of the process lifetime; nothing is rolled
back and the player-facing action still succeeds.

Logging
-------
The logger name for this module is ``murder_mystery.game_engine``. Configure
handlers once at the entry point (see cli.py).
"""

from __future__ import annotations

import logging
import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional

from case_history import CaseHistory
from case_repository import CaseRepository
from config import GAME_CONFIG
from errors import InitializationError, NoActiveSessionError, OracleError
from illustration import Illustrator
from models import (
    CaseScript,
    ConversationEntry,
    GameRules,
    GameSession,
    TurnResult,
    utc_now,
)
from oracle import NarrativeOracle
from scoring import calculate_score, detective_rating, elapsed_minutes
from storage import GameStorage, MemoryStore

logger = logging.getLogger("murder_mystery.game_engine")


HINTS: List[str] = [
    "Consider the timeline carefully. Not everyone was where they claimed to be.",
    "One of the suspects has a secret they're desperately trying to hide.",
    "The evidence at the crime scene tells a different story than what you've been told.",
    "Focus on the motive. Who had the most to gain from the victim's death?",
    "Sometimes the most obvious suspect is just a red herring.",
]
"""
Generic hints, deliberately independent of the case so they can never leak
the solution.
"""


# ---------------------------------------------------------------------------
# Canned narration
# ---------------------------------------------------------------------------

def opening_narration(script: CaseScript) -> str:
    return f"{script.setting.atmosphere}\n\nThe case is yours, detective. Where do you begin?"


def victory_message(score: int, rules: GameRules) -> str:
    return (
        "🎉 CASE SOLVED! 🎉\n\n"
        "Excellent work, detective! You've cracked the case.\n\n"
        f"Your Score: {score} points\n"
        f"Rating: {detective_rating(score)}\n"
        f"Questions Asked: {rules.questions_asked}\n"
        f"Hints Used: {rules.hints_used}/{rules.max_hints}\n\n"
        "The city's a little safer tonight thanks to your keen eye for justice."
    )


def failure_message(script: CaseScript, rules: GameRules) -> str:
    solution = script.solution
    return (
        "❌ WRONG ACCUSATION - CASE FAILED ❌\n\n"
        "You've accused the wrong person. In this business, you only get one shot at justice.\n\n"
        "Your Score: 0 points\n"
        f"Questions Asked: {rules.questions_asked}\n"
        f"Hints Used: {rules.hints_used}/{rules.max_hints}\n\n"
        f"The real killer was {solution.murderer}.\n"
        f"{solution.murderer} killed the victim using {solution.method}.\n"
        f"The motive: {solution.motive}\n\n"
        "Sometimes the truth stays hidden in the shadows. Better luck next time, detective."
    )


def give_up_message(script: CaseScript) -> str:
    solution = script.solution
    return (
        "You've decided to close the case. Here's what really happened:\n\n"
        f"The murderer was {solution.murderer}.\n\n"
        f"{solution.murderer} killed the victim using {solution.method}.\n\n"
        f"The motive: {solution.motive}\n\n"
        "The key evidence that would have solved the case: "
        f"{', '.join(solution.key_evidence) or 'none recorded'}\n\n"
        "Sometimes the truth stays buried in the shadows of this city. "
        "Better luck next time, detective."
    )


def hint_message(rules: GameRules, hint: str) -> str:
    remaining = rules.hints_remaining
    tail = (
        f"You have {remaining} hint(s) remaining."
        if remaining > 0
        else "No more hints available."
    )
    return f"HINT {rules.hints_used}/{rules.max_hints}: {hint}\n{tail}"


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

@dataclass
class _ActiveGame:
    session: GameSession
    rules:   GameRules
    lock:    threading.Lock = field(default_factory=threading.Lock)


class MysteryGameEngine:
    """
    Main game engine.

    Owns every registered session together with its GameRules record. The
    narrative oracle, case repository, storage, and illustrator are injected
    collaborators; the engine has no direct awareness of Agno agents or model
    calls.

    Attributes:
        repository:  Supplies a CaseScript for each new game.
        oracle:      Narrates turns and classifies accusations.
        storage:     Best-effort persistence (in-memory by default).
        history:     Recent-case summaries, fed by every new game.
        illustrator: Optional case illustration generator.
        clock:       Returns "now"; injectable for tests.
        rng:         Hint picker; injectable for tests.
        max_hints:   Hints per session.
    """

    def __init__(
        self,
        repository: CaseRepository,
        oracle: NarrativeOracle,
        storage: Optional[GameStorage] = None,
        history: Optional[CaseHistory] = None,
        illustrator: Optional[Illustrator] = None,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
        max_hints: int = GAME_CONFIG.max_hints,
    ) -> None:
        self.repository  = repository
        self.oracle      = oracle
        self.storage     = storage or GameStorage(MemoryStore())
        self.history     = history or CaseHistory(self.storage.store)
        self.illustrator = illustrator
        self.clock       = clock
        self.rng         = rng or random.Random()
        self.max_hints   = max_hints

        self._games: Dict[str, _ActiveGame] = {}
        self._registry_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Session registry
    # ------------------------------------------------------------------

    def _register(self, session: GameSession, rules: GameRules) -> _ActiveGame:
        game = _ActiveGame(session=session, rules=rules)
        with self._registry_lock:
            self._games[session.id] = game
        return game

    def _lookup(self, session_id: str) -> _ActiveGame:
        with self._registry_lock:
            game = self._games.get(session_id)
        if game is None:
            raise NoActiveSessionError(session_id)
        return game

    @contextmanager
    def _active(self, session_id: str) -> Iterator[_ActiveGame]:
        """Hold the session's lock for one action; reject closed sessions."""
        game = self._lookup(session_id)
        with game.lock:
            if game.session.is_complete:
                raise NoActiveSessionError(session_id, "game already over")
            yield game

    def _complete(self, session: GameSession, at: datetime) -> None:
        if session.completed_at is not None:
            raise NoActiveSessionError(session.id, "game already over")
        session.completed_at = at

    # ------------------------------------------------------------------
    # Best-effort persistence
    # ------------------------------------------------------------------

    def _persist(self, what: str, action: Callable[..., Any], *args: Any) -> None:
        try:
            action(*args)
        except Exception:
            logger.exception("Failed to persist %s; keeping in-memory state.", what)

    def _save(self, game: _ActiveGame) -> None:
        self._persist(f"session {game.session.id}", self.storage.save_session, game.session)
        self._persist(
            f"rules for {game.session.id}", self.storage.save_rules, game.session.id, game.rules
        )

    # ------------------------------------------------------------------
    # New game
    # ------------------------------------------------------------------

    def start_new_game(
        self,
        difficulty: Optional[str] = None,
        on_case_ready: Optional[Callable[[], None]] = None,
        on_illustration_ready: Optional[Callable[[], None]] = None,
    ) -> GameSession:
        """
        Create, register, and persist a fresh session.

        Steps:
          1. Obtain a CaseScript from the repository.
          2. Fire on_case_ready.
          3. Seed the transcript with the opening narration.
          4. Request an illustration if an illustrator is configured
             (failure is logged, the game goes on without one).
          5. Fire on_illustration_ready, whether or not an image was made.
          6. Reset the GameRules record, persist, and record the case history.

        Args:
            difficulty:            "easy" | "medium" | "hard" (default from config).
            on_case_ready:         Called once the case exists.
            on_illustration_ready: Called once illustration handling is done.

        Returns:
            The new GameSession.

        Raises:
            InitializationError: The repository could not supply a case.
        """
        level = difficulty or GAME_CONFIG.default_difficulty
        logger.info("New game requested — difficulty=%s", level)

        try:
            script = self.repository.select_case(level)
        except InitializationError:
            logger.error("Case repository could not supply a case.", exc_info=True)
            raise
        except Exception as exc:
            logger.error("Case repository failed: %s", exc, exc_info=True)
            raise InitializationError(f"Could not obtain a case: {exc}") from exc

        if on_case_ready:
            on_case_ready()

        now     = self.clock()
        session = GameSession(case_id=script.id, script=script, started_at=now)
        opening = session.append(ConversationEntry.narrator(opening_narration(script), at=now))

        if self.illustrator is not None:
            try:
                session.case_image_url = self.illustrator.illustrate(opening.message)
            except Exception as exc:
                logger.warning("Case illustration failed, continuing without one: %s", exc)
        if on_illustration_ready:
            on_illustration_ready()

        rules = GameRules(max_hints=self.max_hints, start_time=now)
        game  = self._register(session, rules)

        self._persist(f"script {script.id}", self.storage.save_script, script)
        self._save(game)
        self._persist("case history", self.history.add, script, now)

        logger.info(
            "Game started — session=%s, case_id=%s, suspects=%d, max_hints=%d",
            session.id,
            script.id,
            len(script.suspects),
            rules.max_hints,
        )
        return session

    # ------------------------------------------------------------------
    # Player turn
    # ------------------------------------------------------------------

    def process_player_input(self, session_id: str, text: str) -> TurnResult:
        """
        Advance the session by exactly one player turn.

        Flow:
          1. Count the turn as a question (accusations included).
          2. Append the player's raw text.
          3. Ask the oracle for a classified turn (the only blocking call).
          4. Accusation → complete the session; a correct one is scored and
             narrated with the victory text, a wrong one scores 0 and reveals
             the solution. The oracle's own text is discarded either way.
          5. Otherwise → append the oracle's narration verbatim and update the
             interview / clue / location trackers.
          6. Persist (best effort) and report.

        Args:
            session_id: The session to advance.
            text:       The player's input, stored unmodified.

        Returns:
            TurnResult for the last entry appended this turn.

        Raises:
            NoActiveSessionError: Unknown or already-completed session.
            OracleError: The oracle failed. The player entry stays in the
                         transcript but the session is not completed, so the
                         caller may retry.
        """
        with self._active(session_id) as game:
            session, rules = game.session, game.rules

            rules.questions_asked += 1
            session.append(ConversationEntry.player(text, at=self.clock()))

            logger.info(
                "Turn %d — session=%s, transcript entries=%d",
                rules.questions_asked,
                session_id,
                len(session.conversation),
            )

            try:
                turn = self.oracle.run_turn(session.script, list(session.conversation), text)
            except Exception as exc:
                self._save(game)
                if isinstance(exc, OracleError):
                    logger.error("Oracle failed for session=%s: %s", session_id, exc)
                    raise
                logger.error("Oracle failed for session=%s: %s", session_id, exc, exc_info=True)
                raise OracleError(f"Oracle call failed: {exc}") from exc

            score: Optional[int] = None

            if turn.is_solved:
                now = self.clock()
                self._complete(session, now)

                if turn.is_correct_solution:
                    session.is_solved = True
                    score = calculate_score(
                        rules.questions_asked,
                        rules.hints_used,
                        elapsed_minutes(rules.start_time, now),
                    )
                    entry = ConversationEntry.narrator(victory_message(score, rules), at=now)
                else:
                    score = 0
                    entry = ConversationEntry.narrator(failure_message(session.script, rules), at=now)
                session.append(entry)

                logger.info(
                    "Accusation — session=%s, correct=%s, score=%d, questions=%d, hints=%d",
                    session_id,
                    session.is_solved,
                    score,
                    rules.questions_asked,
                    rules.hints_used,
                )
            else:
                entry = session.append(
                    ConversationEntry(
                        type=turn.type,
                        speaker=turn.speaker if turn.type == "character" else None,
                        message=turn.response,
                        timestamp=self.clock(),
                        reveals_clue=turn.reveals_clue,
                    )
                )
                if turn.type == "character":
                    session.record_interview(turn.speaker)
                session.record_clue(turn.reveals_clue)
                session.record_location(turn.location)

            self._save(game)
            return TurnResult(
                entry=entry,
                is_game_over=turn.is_solved,
                is_solved=session.is_solved,
                score=score,
            )

    # ------------------------------------------------------------------
    # Hints and giving up
    # ------------------------------------------------------------------

    def request_hint(self, session_id: str) -> Optional[ConversationEntry]:
        """
        Hand out one generic hint, if any remain.

        Returns:
            The appended hint entry, or None when all hints are used (nothing
            is appended and no counter moves).

        Raises:
            NoActiveSessionError: Unknown or already-completed session.
        """
        with self._active(session_id) as game:
            rules = game.rules
            if rules.hints_used >= rules.max_hints:
                logger.info("Hint refused — session=%s, all %d used.", session_id, rules.max_hints)
                return None

            rules.hints_used += 1
            entry = game.session.append(
                ConversationEntry.narrator(
                    hint_message(rules, self.rng.choice(HINTS)), at=self.clock()
                )
            )
            self._save(game)

            logger.info("Hint %d/%d given — session=%s", rules.hints_used, rules.max_hints, session_id)
            return entry

    def give_up(self, session_id: str) -> ConversationEntry:
        """
        Close the case unsolved and reveal the full solution.

        No score is computed and ``is_solved`` stays False.

        Raises:
            NoActiveSessionError: Unknown or already-completed session.
        """
        with self._active(session_id) as game:
            session = game.session
            now     = self.clock()
            entry   = session.append(ConversationEntry.narrator(give_up_message(session.script), at=now))
            self._complete(session, now)
            self._save(game)

            logger.info(
                "Player gave up — session=%s, questions=%d, hints=%d",
                session_id,
                game.rules.questions_asked,
                game.rules.hints_used,
            )
            return entry

    # ------------------------------------------------------------------
    # Notes, stats, and session management
    # ------------------------------------------------------------------

    def add_note(self, session_id: str, note: str) -> bool:
        """Record a player note; returns False for blanks and duplicates."""
        with self._active(session_id) as game:
            added = game.session.add_note(note)
            if added:
                self._save(game)
            return added

    def get_session(self, session_id: str) -> GameSession:
        return self._lookup(session_id).session

    def get_game_stats(self, session_id: str) -> Dict[str, int]:
        rules = self._lookup(session_id).rules
        return {
            "hints_used":      rules.hints_used,
            "hints_remaining": rules.hints_remaining,
            "questions_asked": rules.questions_asked,
        }

    def resume_session(self, session_id: str) -> Optional[GameSession]:
        """
        Re-open an unfinished session, from memory or from storage.

        The GameRules record is restored from storage when present; otherwise
        it is rebuilt with fresh counters and the session's start time.

        Returns:
            The session, or None if it is unknown, unreadable, or finished.
        """
        with self._registry_lock:
            game = self._games.get(session_id)
        if game is not None:
            return None if game.session.is_complete else game.session

        try:
            session = self.storage.get_session(session_id)
            rules   = self.storage.get_rules(session_id) if session else None
        except Exception:
            logger.exception("Could not load session %s from storage.", session_id)
            return None

        if session is None or session.is_solved or session.is_complete:
            logger.info("Session %s cannot be resumed.", session_id)
            return None

        if rules is None:
            rules = GameRules(max_hints=self.max_hints, start_time=session.started_at)
        self._register(session, rules)
        self._persist("current session pointer", self.storage.set_current_session, session_id)

        logger.info(
            "Session resumed — session=%s, case_id=%s, transcript entries=%d",
            session_id,
            session.case_id,
            len(session.conversation),
        )
        return session

    def list_sessions(self) -> List[GameSession]:
        """Stored sessions, newest first. Storage errors yield an empty list."""
        try:
            return self.storage.all_sessions()
        except Exception:
            logger.exception("Could not list stored sessions.")
            return []

    def delete_session(self, session_id: str) -> None:
        with self._registry_lock:
            self._games.pop(session_id, None)
        self._persist(f"deletion of {session_id}", self.storage.delete_session, session_id)
