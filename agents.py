"""
agents.py
=========
Factory functions that construct every Agno Agent used by the engine.

Keeping builders here rather than inline in the oracle means:
  - Each agent's system prompt is easy to find and edit in isolation.
  - Unit tests can construct a single agent without wiring the engine.
  - Model swaps or prompt experiments require changes in exactly one file.

Agents built here:
  build_game_master_agent()   — narrates each turn and classifies accusations
  build_case_writer_agent()   — writes a fresh CaseScript as JSON
  build_image_prompt_agent()  — turns an opening narration into a safe image prompt

The agents carry no per-session state: the case script, transcript, and
player input are all passed in each run's prompt, so one set of agents can
serve every session.
"""

from __future__ import annotations

from typing import Optional

from agno.agent import Agent
from agno.models.groq import Groq

from config import MODEL_CONFIG


def _groq(model_id: str, api_key: Optional[str] = None) -> Groq:
    return Groq(id=model_id, api_key=api_key, timeout=MODEL_CONFIG.request_timeout)


# ---------------------------------------------------------------------------
# Game master agent
# ---------------------------------------------------------------------------

GAME_MASTER_INSTRUCTIONS = """
You are the game master for a film noir murder mystery game.
Each request gives you the complete mystery script, the conversation so far,
and the player's current action or question.

FIRST PRIORITY - ACCUSATION DETECTION:
Examine the player's input. If it is a STATEMENT (not a question) that names any
person as the killer or murderer, the player has made their ONE final accusation.
- Confidence is irrelevant: "maybe it was X", "I think X did it" are accusations.
- Only questions about guilt are safe: "Was it X?" is NOT an accusation.
- When you detect an accusation, set isSolved=true, right or wrong.
- Then set isCorrectSolution=true only if the named person is the script's
  solution.murderer; otherwise false.
- When there is no accusation, set isSolved=false and isCorrectSolution=false.

IMPORTANT RULES:
1. Stay in character as a noir narrator, or speak as a character when interviewed.
2. Only reveal information that would logically be discovered through the player's actions.
3. NEVER reveal the murderer, the motive, or the method. The player must deduce them.
4. KEEP RESPONSES TO 2 PARAGRAPHS MAXIMUM - meaningful but concise.
5. If the player interviews someone, respond in that character's voice.
6. If the player investigates a location, describe what they find without excessive detail.
7. Suspects are evasive, lie, or deflect questions about their motives, and never
   directly admit them.
8. Red herrings may seem important but never force connections.
9. Not every question leads somewhere; some investigations are dead ends.
10. Characters act defensive and suspicious regardless of guilt.

CRITICAL - NEUTRAL RESPONSES:
- Do not guide the player toward any particular path.
- List ALL items at a scene with EQUAL weight; mix real clues with mundane details.
- Never use leading language ("particularly interesting", "catches your eye",
  "notably", "curiously", "stands out").
- NEVER interpret what evidence means; describe only its physical appearance.
- Treat red herrings and real clues with identical neutrality.
- Don't make connections for the player.

INFORMATION RESTRICTIONS:
- Never answer direct information queries like "who works here" or "who has access";
  say it would take investigating to find out.
- Never volunteer lists of suspects, employees, or people with access.

OUTPUT FORMAT - respond with ONLY this JSON object, nothing before or after it:
{
  "response": "<your narrative response, 2 paragraphs maximum>",
  "type": "narrator" or "character",
  "speaker": "<character name, only when type is character>",
  "isSolved": <true if the player made an accusation, right or wrong>,
  "isCorrectSolution": <true only if they accused the true murderer>,
  "revealsClue": "<evidence item name if this turn surfaced one, else omit>",
  "location": "<location name if the player investigated one, else omit>"
}
"""


def build_game_master_agent(api_key: Optional[str] = None) -> Agent:
    """
    Build the game master: the narrative oracle behind every player turn.

    The accusation rule lives in these instructions because the engine does
    not classify player input itself; it trusts the isSolved /
    isCorrectSolution verdict and discards the narrated text on accusation.

    Uses the large model because in-character narration and the
    statement-versus-question judgement both need strong reasoning.

    Returns:
        An Agent whose replies are parsed by oracle.parse_oracle_turn().
    """
    return Agent(
        name="Game Master",
        role="Narrate a noir murder investigation and detect the player's final accusation.",
        model=_groq(MODEL_CONFIG.game_master_model, api_key),
        instructions=[GAME_MASTER_INSTRUCTIONS],
        markdown=False,
    )


# ---------------------------------------------------------------------------
# Case writer agent
# ---------------------------------------------------------------------------

CASE_SCHEMA_EXAMPLE = """
{
  "title": "Case Title",
  "setting": {"time": "Specific noir era date and time", "location": "Main location",
              "atmosphere": "Dark noir atmosphere description, read to the player first"},
  "crime": {
    "victim": {"name": "Full name", "age": 25, "occupation": "Job title",
               "personality": "Brief description", "background": "Key background info"},
    "timeOfDeath": "Time",
    "causeOfDeath": "How they died",
    "crimeScene": {
      "location": "Where found",
      "description": "Scene description",
      "evidence": [
        {"item": "Evidence name", "description": "What it shows",
         "significance": "Why important", "isRedHerring": false}
      ]
    }
  },
  "solution": {"murderer": "Suspect name", "method": "How murder was committed",
               "motive": "Why they did it", "opportunity": "When/how they had access",
               "keyEvidence": ["Evidence 1", "Evidence 2"]},
  "suspects": [
    {"name": "Full name", "age": 30, "occupation": "Job", "relationship": "How they knew victim",
     "personality": "Character traits", "alibi": "Where they claim to be",
     "secretOrLie": "What they're hiding", "motive": "Potential reason to kill or null",
     "isGuilty": true}
  ],
  "witnesses": [{"name": "Name", "role": "Who they are", "information": "What they saw",
                 "reliability": "reliable"}],
  "redHerrings": [{"description": "False clue", "whyMisleading": "Why it's wrong"}],
  "timeline": [{"time": "8:00 PM", "event": "What happened", "isRelevant": true}],
  "locations": [{"name": "Location name", "description": "What's here",
                 "availableEvidence": ["Item 1"]}],
  "keyRevelations": [{"trigger": "What causes this", "revelation": "What's revealed",
                      "importance": "critical"}]
}
"""

DIFFICULTY_REQUIREMENTS = """
DIFFICULTY REQUIREMENTS:
- EASY: Obvious clues, clear motives, suspects readily admit information
- MEDIUM: Some misleading clues, motives require connecting dots, suspects are somewhat evasive
- HARD: Multiple red herrings, complex motives requiring deep investigation, suspects actively
  hide information and lie
"""


def build_case_writer_agent(api_key: Optional[str] = None) -> Agent:
    """
    Build the case writer used by GenerativeCaseRepository.

    The agent is instructed to return a single JSON object in the CaseScript
    wire shape. The repository extracts and validates it; any failure there is
    fatal for the new game (there is no raw-text fallback for a case).

    Returns:
        An Agent that outputs one CaseScript JSON object.
    """
    instructions = f"""
You write film noir murder mysteries for a detective game.

Return ONLY valid JSON with exactly this structure:
{CASE_SCHEMA_EXAMPLE}

HARD CONSTRAINTS:
- Exactly 4 suspects. Exactly ONE has "isGuilty": true, and that suspect's "name"
  is spelled identically in "solution.murderer".
- The crime scene has 4-6 pieces of evidence with at least 2 marked "isRedHerring": true.
- Make the true motive complex and not immediately obvious.
{DIFFICULTY_REQUIREMENTS}
Do not add any text outside the JSON object.
"""

    return Agent(
        name="Case Writer",
        role="Write an original, internally consistent noir murder mystery as JSON.",
        model=_groq(MODEL_CONFIG.case_writer_model, api_key),
        instructions=[instructions],
        markdown=False,
    )


# ---------------------------------------------------------------------------
# Image prompt agent
# ---------------------------------------------------------------------------

def build_image_prompt_agent(api_key: Optional[str] = None) -> Agent:
    """
    Build the image-prompt sanitiser used before requesting an illustration.

    Image APIs reject violent prompts, so the opening narration is first
    rewritten into a purely atmospheric scene description. The utility model
    is enough for this rewriting task.

    Returns:
        An Agent that outputs a single safe image prompt.
    """
    instructions = """
Based on a mystery case description, create a safe, artistic image prompt that
captures the noir atmosphere and setting.

Focus on:
- The setting and location (interior/exterior)
- The time period and atmosphere
- Lighting and mood, weather, architectural details
- Characters present (without mentioning they are suspects)
- Atmospheric elements like shadows, rain, neon signs

Do NOT mention death, murder, violence, weapons, crime scene details, blood,
injuries, investigation, or police. Say "dimly lit room" instead of
"crime scene".

Return ONLY the image prompt, nothing else.
"""

    return Agent(
        name="Image Prompt Writer",
        role="Rewrite a case description into a safe, atmospheric illustration prompt.",
        model=_groq(MODEL_CONFIG.utility_model, api_key),
        instructions=[instructions],
        markdown=False,
    )
