import json
import logging

import pytest

from conftest import FakeAgent
from errors import OracleError
from models import ConversationEntry
from oracle import (
    AgnoNarrativeOracle,
    build_turn_prompt,
    extract_json_object,
    parse_case_script,
    parse_oracle_turn,
    render_transcript,
)

REPLY = {
    "response": "Eleanor folds the towel twice before answering.",
    "type": "character",
    "speaker": "Eleanor Wright",
    "isSolved": False,
    "isCorrectSolution": False,
    "revealsClue": "laundry_timing",
    "location": "Basement",
}


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

def test_strict_json_parses():
    turn = parse_oracle_turn(json.dumps(REPLY))
    assert turn.speaker == "Eleanor Wright"
    assert turn.reveals_clue == "laundry_timing"


def test_fenced_json_parses():
    raw = "```json\n" + json.dumps(REPLY, indent=2) + "\n```"
    assert parse_oracle_turn(raw).location == "Basement"


def test_json_wrapped_in_prose_parses():
    raw = "Sure, here is the turn:\n" + json.dumps(REPLY) + "\nHope that helps."
    assert parse_oracle_turn(raw).type == "character"


def test_extract_ignores_non_object_json():
    assert extract_json_object("[1, 2, 3]") is None
    assert extract_json_object("no braces here") is None


def test_plain_text_falls_back_to_narration(caplog):
    with caplog.at_level(logging.WARNING, logger="murder_mystery.oracle"):
        turn = parse_oracle_turn("The streetlamp flickers. Nobody answers.")
    assert turn.type == "narrator"
    assert turn.response == "The streetlamp flickers. Nobody answers."
    assert turn.is_solved is False
    assert "no JSON object" in caplog.text


@pytest.mark.parametrize("raw", ["", "   \n  "])
def test_empty_reply_is_an_error(raw):
    with pytest.raises(OracleError):
        parse_oracle_turn(raw)


def test_schema_failure_is_an_error_not_a_fallback():
    bad = dict(REPLY, type="villain")
    with pytest.raises(OracleError) as info:
        parse_oracle_turn(json.dumps(bad))
    assert "villain" in info.value.raw


def test_accusation_without_correctness_is_an_error():
    bad = {"response": "You point at Reed.", "type": "narrator", "isSolved": True}
    with pytest.raises(OracleError):
        parse_oracle_turn(json.dumps(bad))


# ---------------------------------------------------------------------------
# Case scripts
# ---------------------------------------------------------------------------

def test_parse_case_script_fills_missing_id(case):
    data = case.model_dump(mode="json", by_alias=True)
    del data["id"]
    script = parse_case_script("```json\n" + json.dumps(data) + "\n```")
    assert script.id.isdigit()
    assert script.culprit.name == case.culprit.name


def test_parse_case_script_rejects_broken_invariant(case):
    data = case.model_dump(mode="json", by_alias=True)
    for suspect in data["suspects"]:
        suspect["isGuilty"] = False
    with pytest.raises(OracleError):
        parse_case_script(json.dumps(data))


def test_parse_case_script_has_no_text_fallback():
    with pytest.raises(OracleError):
        parse_case_script("I couldn't think of a mystery tonight.")


# ---------------------------------------------------------------------------
# Prompts and the agent-backed oracle
# ---------------------------------------------------------------------------

def test_render_transcript_labels():
    conversation = [
        ConversationEntry.narrator("Rain."),
        ConversationEntry.player("Who found the body?"),
        ConversationEntry(type="character", speaker="Thomas Reed", message="I did."),
    ]
    assert render_transcript(conversation) == (
        "Narrator: Rain.\nPlayer: Who found the body?\nThomas Reed: I did."
    )


def test_turn_prompt_carries_case_transcript_and_input(case):
    prompt = build_turn_prompt(case, [ConversationEntry.narrator("Rain.")], "Search the desk")
    assert case.solution.murderer in prompt
    assert "Narrator: Rain." in prompt
    assert prompt.index("PLAYER'S CURRENT ACTION/QUESTION:\nSearch the desk") > prompt.index("Narrator: Rain.")


def test_agno_oracle_runs_the_agent(case):
    agent  = FakeAgent(json.dumps(REPLY))
    oracle = AgnoNarrativeOracle(agent=agent)
    turn   = oracle.run_turn(case, [ConversationEntry.narrator("Rain.")], "Talk to Eleanor")
    assert turn.speaker == "Eleanor Wright"
    assert len(agent.prompts) == 1
    assert "Talk to Eleanor" in agent.prompts[0]


def test_agno_oracle_wraps_transport_failures(case):
    oracle = AgnoNarrativeOracle(agent=FakeAgent(ConnectionError("groq unreachable")))
    with pytest.raises(OracleError, match="groq unreachable"):
        oracle.run_turn(case, [], "Hello?")
