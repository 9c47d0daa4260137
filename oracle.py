"""
oracle.py
=========
Narrative oracle contract, its Agno-backed implementation, and the parsing
rules for the oracle's structured output.

The engine talks to the oracle through one call:

    oracle.run_turn(case, conversation, player_input) -> OracleTurn

Parsing contract for game-master replies (parse_oracle_turn):
  1. Strict: ``json.loads`` of the stripped reply.
  2. Retry: strip a markdown fence, slice from the first ``{`` to the last
     ``}``, and ``json.loads`` again.
  3. Fallback: if neither step yields a JSON object, the raw text becomes a
     plain narrator turn with isSolved=false.

A reply that IS a JSON object but fails the OracleTurn schema is an
OracleError, not a fallback: a half-formed verdict must never end or continue
a game by accident. Empty replies and transport failures are OracleErrors too.

Case generation (parse_case_script) shares steps 1 and 2 but has no fallback.
"""

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Dict, Optional, Protocol, Sequence

from pydantic import ValidationError

from agents import build_game_master_agent
from errors import OracleError
from models import CaseScript, ConversationEntry, OracleTurn

logger = logging.getLogger("murder_mystery.oracle")

_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


class NarrativeOracle(Protocol):
    """Turns (case, transcript, player input) into a classified narrative turn."""

    def run_turn(
        self,
        case: CaseScript,
        conversation: Sequence[ConversationEntry],
        player_input: str,
    ) -> OracleTurn: ...


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def extract_json_object(raw: str) -> Optional[Dict[str, Any]]:
    """
    Pull a JSON object out of an LLM reply.

    Tries the strict parse first, then the fence-stripped / brace-sliced
    candidate. Returns None when neither is a JSON object.
    """
    stripped = raw.strip()

    data = _loads_object(stripped)
    if data is not None:
        return data

    candidate = stripped
    fence     = _FENCE.search(candidate)
    if fence:
        candidate = fence.group(1)
    first, last = candidate.find("{"), candidate.rfind("}")
    if first != -1 and last > first:
        candidate = candidate[first : last + 1]

    return _loads_object(candidate)


def parse_oracle_turn(raw: str) -> OracleTurn:
    """
    Parse a game-master reply into a validated OracleTurn.

    Args:
        raw: The agent's reply text.

    Returns:
        The validated turn, or a raw-text narrator fallback when the reply
        holds no JSON object at all.

    Raises:
        OracleError: The reply is empty, or is JSON that fails the schema.
    """
    if not raw or not raw.strip():
        raise OracleError("Game master returned an empty reply.", raw=raw or "")

    data = extract_json_object(raw)
    if data is None:
        logger.warning(
            "Game master reply held no JSON object; using it as narration. "
            "Raw response (first 200 chars): %r",
            raw[:200],
        )
        return OracleTurn.raw_text_fallback(raw)

    try:
        return OracleTurn.model_validate(data)
    except ValidationError as exc:
        raise OracleError(f"Game master reply failed validation: {exc}", raw=raw) from exc


def parse_case_script(raw: str) -> CaseScript:
    """
    Parse a case-writer reply into a CaseScript.

    A missing ``id`` is filled with a millisecond timestamp. The CaseScript
    validator enforces the one-culprit invariant.

    Raises:
        OracleError: No JSON object could be extracted or it is not a valid case.
    """
    data = extract_json_object(raw or "")
    if data is None:
        raise OracleError("Case writer reply held no JSON object.", raw=raw or "")

    if not data.get("id"):
        data["id"] = str(int(time.time() * 1000))

    try:
        return CaseScript.model_validate(data)
    except ValidationError as exc:
        raise OracleError(f"Generated case failed validation: {exc}", raw=raw) from exc


# ---------------------------------------------------------------------------
# Prompt rendering
# ---------------------------------------------------------------------------

def render_transcript(conversation: Sequence[ConversationEntry]) -> str:
    """One ``Label: message`` line per entry, in append order."""
    return "\n".join(f"{entry.label}: {entry.message}" for entry in conversation)


def build_turn_prompt(
    case: CaseScript,
    conversation: Sequence[ConversationEntry],
    player_input: str,
) -> str:
    return (
        f"MYSTERY SCRIPT:\n{case.to_json()}\n\n"
        f"CONVERSATION HISTORY:\n{render_transcript(conversation)}\n\n"
        f"PLAYER'S CURRENT ACTION/QUESTION:\n{player_input}\n\n"
        "Check for an accusation first, then respond with the JSON object only."
    )


def agent_text(response: Any) -> str:
    """Text content of an agent run result."""
    return response.content if hasattr(response, "content") else str(response)


# ---------------------------------------------------------------------------
# Agno-backed oracle
# ---------------------------------------------------------------------------

class AgnoNarrativeOracle:
    """
    NarrativeOracle backed by the Agno game-master agent.

    Attributes:
        agent: The game-master Agent. Built from agents.py unless injected.
    """

    def __init__(self, agent: Any = None, api_key: Optional[str] = None) -> None:
        self.agent = agent if agent is not None else build_game_master_agent(api_key)

    def run_turn(
        self,
        case: CaseScript,
        conversation: Sequence[ConversationEntry],
        player_input: str,
    ) -> OracleTurn:
        prompt = build_turn_prompt(case, conversation, player_input)
        logger.debug(
            "Game master call — case=%s, transcript entries=%d, prompt chars=%d",
            case.id,
            len(conversation),
            len(prompt),
        )

        try:
            raw = agent_text(self.agent.run(prompt))
        except Exception as exc:
            raise OracleError(f"Game master call failed: {exc}") from exc

        turn = parse_oracle_turn(raw)
        logger.debug(
            "Game master verdict — type=%s, isSolved=%s", turn.type, turn.is_solved
        )
        return turn
