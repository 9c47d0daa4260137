from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import BLACKWOOD
from models import CaseScript, ConversationEntry, GameRules, GameSession, OracleTurn


def _case_data(case):
    return case.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# CaseScript
# ---------------------------------------------------------------------------

def test_culprit_is_the_named_murderer(case):
    assert case.culprit.name == BLACKWOOD["killer"] == case.solution.murderer
    assert sum(s.is_guilty for s in case.suspects) == 1


def test_case_rejects_two_guilty_suspects(case):
    data = _case_data(case)
    data["suspects"][1]["isGuilty"] = True
    with pytest.raises(ValidationError, match="exactly one suspect"):
        CaseScript.model_validate(data)


def test_case_rejects_murderer_who_is_not_a_suspect(case):
    data = _case_data(case)
    data["solution"]["murderer"] = "Nobody In Particular"
    with pytest.raises(ValidationError, match="must match exactly one suspect"):
        CaseScript.model_validate(data)


def test_case_rejects_guilt_flag_on_wrong_suspect(case):
    data = _case_data(case)
    for suspect in data["suspects"]:
        suspect["isGuilty"] = suspect["name"] == "Thomas Reed"
    with pytest.raises(ValidationError):
        CaseScript.model_validate(data)


def test_case_accepts_numeric_id(case):
    data = _case_data(case)
    data["id"] = 1700000000000
    assert CaseScript.model_validate(data).id == "1700000000000"


def test_case_is_immutable(case):
    with pytest.raises(ValidationError):
        case.title = "Something else"


def test_briefing_hides_the_solution(case):
    brief = case.briefing()
    text  = str(brief)
    assert brief["victim"] == "Victor Hale"
    assert brief["suspects"] == [s["name"] for s in BLACKWOOD["suspects"]]
    assert case.solution.method not in text
    assert case.solution.motive not in text
    assert "is_guilty" not in text and "isGuilty" not in text


def test_case_json_uses_camel_case(case):
    text = case.to_json()
    assert '"timeOfDeath"' in text
    assert '"isRedHerring"' in text
    assert CaseScript.model_validate_json(text) == case


# ---------------------------------------------------------------------------
# ConversationEntry
# ---------------------------------------------------------------------------

def test_character_entry_requires_speaker():
    with pytest.raises(ValidationError):
        ConversationEntry(type="character", message="Who's asking?")
    entry = ConversationEntry(type="character", speaker="Eleanor Wright", message="Who's asking?")
    assert entry.label == "Eleanor Wright"


@pytest.mark.parametrize("entry_type", ["player", "narrator"])
def test_non_character_entries_reject_speaker(entry_type):
    with pytest.raises(ValidationError):
        ConversationEntry(type=entry_type, speaker="Someone", message="...")


def test_entry_factories_and_labels():
    at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    player   = ConversationEntry.player("Where were you at eleven?", at=at)
    narrator = ConversationEntry.narrator("The clock ticks.", at=at)
    assert (player.type, player.label, player.timestamp) == ("player", "Player", at)
    assert (narrator.type, narrator.label, narrator.speaker) == ("narrator", "Narrator", None)
    assert player.id != narrator.id


def test_entries_are_frozen():
    entry = ConversationEntry.player("Hello")
    with pytest.raises(ValidationError):
        entry.message = "Goodbye"


# ---------------------------------------------------------------------------
# GameSession
# ---------------------------------------------------------------------------

def test_session_trackers_deduplicate(case):
    session = GameSession(case_id=case.id, script=case)
    assert session.record_clue("tongs") is True
    assert session.record_clue("tongs") is False
    assert session.record_clue(None) is False
    assert session.record_interview("Eleanor Wright") is True
    assert session.record_interview("Eleanor Wright") is False
    assert session.record_location("Library") is True
    assert session.add_note("  check the fireplace  ") is True
    assert session.add_note("check the fireplace") is False
    assert session.add_note("   ") is False
    assert session.discovered_clues == ["tongs"]
    assert session.player_notes == ["check the fireplace"]


def test_session_lifecycle_flags(case):
    session = GameSession(case_id=case.id, script=case)
    assert not session.is_complete and session.last_entry is None
    entry = session.append(ConversationEntry.narrator("Rain."))
    assert session.last_entry is entry
    session.completed_at = datetime.now(timezone.utc)
    assert session.is_complete


def test_session_survives_json_storage(case):
    session = GameSession(case_id=case.id, script=case)
    session.append(ConversationEntry.player("Hi"))
    session.append(ConversationEntry(type="character", speaker="Thomas Reed", message="Evening."))
    restored = GameSession.model_validate_json(session.to_json())
    assert restored.conversation == session.conversation
    assert restored.script == case


# ---------------------------------------------------------------------------
# OracleTurn
# ---------------------------------------------------------------------------

def test_oracle_turn_from_wire_keys():
    turn = OracleTurn.model_validate({
        "response": "Reed wipes his hands on a rag.",
        "type": "character",
        "speaker": "Thomas Reed",
        "isSolved": False,
        "isCorrectSolution": False,
        "revealsClue": "",
        "location": "Garage",
    })
    assert turn.speaker == "Thomas Reed"
    assert turn.reveals_clue is None
    assert turn.location == "Garage"
    assert not turn.accused_correctly


def test_oracle_turn_requires_is_solved():
    with pytest.raises(ValidationError):
        OracleTurn.model_validate({"response": "Hm.", "type": "narrator"})


def test_solved_turn_requires_correctness():
    with pytest.raises(ValidationError, match="isCorrectSolution"):
        OracleTurn.model_validate({"response": "J'accuse!", "type": "narrator", "isSolved": True})
    turn = OracleTurn.model_validate(
        {"response": "J'accuse!", "type": "narrator", "isSolved": True, "isCorrectSolution": True}
    )
    assert turn.accused_correctly


def test_character_turn_requires_speaker():
    with pytest.raises(ValidationError):
        OracleTurn.model_validate({"response": "Hm.", "type": "character", "isSolved": False})


def test_narrator_turn_drops_speaker():
    turn = OracleTurn.model_validate(
        {"response": "Hm.", "type": "narrator", "speaker": "Narrator", "isSolved": False}
    )
    assert turn.speaker is None


def test_empty_response_is_rejected():
    with pytest.raises(ValidationError):
        OracleTurn.model_validate({"response": "", "type": "narrator", "isSolved": False})


def test_raw_text_fallback():
    turn = OracleTurn.raw_text_fallback("  The fog rolls in.  ")
    assert turn.response == "The fog rolls in."
    assert turn.type == "narrator"
    assert turn.is_solved is False


# ---------------------------------------------------------------------------
# GameRules
# ---------------------------------------------------------------------------

def test_rules_round_trip_and_remaining():
    start = datetime(2026, 3, 1, 20, 0, tzinfo=timezone.utc)
    rules = GameRules(max_hints=2, hints_used=1, questions_asked=7, start_time=start)
    assert rules.hints_remaining == 1
    assert GameRules.from_dict(rules.to_dict()) == rules
    rules.hints_used = 5
    assert rules.hints_remaining == 0
