"""
cli.py
======
Command-line interface for the Noir Mystery detective game.

Provides a text-based game loop. All game logic is delegated to
MysteryGameEngine; this module only handles I/O, wiring, and remembering
which session the player is currently in.

Usage:
    python cli.py            (or the ``noir-mystery`` console script)

Environment (a .env file is honoured):
    GROQ_API_KEY            required
    OPENAI_API_KEY          optional, for case illustrations
    MYSTERY_DATA_DIR        directory for saved games (in-memory if unset)
    MYSTERY_CASE_SOURCE     "catalog" (default) or "generate"
    MYSTERY_CATALOG_PATH    JSON catalog replacing the built-in cases
    MYSTERY_ILLUSTRATIONS   "1" to request an illustration for each case

Commands during play:
    /hint                 — ask for one of your two hints
    /giveup               — close the case and hear the truth
    /note <text>          — jot down a note
    /notes                — list your notes
    /status               — questions asked and hints left
    /sessions             — list saved cases
    /resume <id>          — pick an unfinished case back up
    /new [difficulty]     — start a new case (easy | medium | hard)
    /quit                 — exit the game
Anything else is your next move: a question, a place to search, or your
one and only accusation.
"""

from __future__ import annotations

import logging
from typing import Optional

from dotenv import load_dotenv

from case_history import CaseHistory
from case_repository import CaseRepository, CatalogCaseRepository, GenerativeCaseRepository
from config import GAME_CONFIG, Settings
from errors import InitializationError, NoActiveSessionError, OracleError
from game_engine import MysteryGameEngine
from illustration import OpenAIIllustrator
from models import ConversationEntry, GameSession
from oracle import AgnoNarrativeOracle
from storage import GameStorage, JsonFileStore, MemoryStore

logger = logging.getLogger("murder_mystery.cli")


def build_engine(settings: Settings) -> MysteryGameEngine:
    """Wire the engine's collaborators from environment settings."""
    store   = JsonFileStore(settings.data_dir) if settings.data_dir else MemoryStore()
    storage = GameStorage(store)
    history = CaseHistory(store)

    repository: CaseRepository
    if settings.case_source == "generate":
        repository = GenerativeCaseRepository(history=history, api_key=settings.groq_api_key)
    elif settings.catalog_path:
        repository = CatalogCaseRepository.from_file(settings.catalog_path)
    else:
        repository = CatalogCaseRepository()

    illustrator = None
    if settings.illustrations and settings.openai_api_key:
        illustrator = OpenAIIllustrator(
            api_key=settings.openai_api_key, groq_api_key=settings.groq_api_key
        )

    return MysteryGameEngine(
        repository=repository,
        oracle=AgnoNarrativeOracle(api_key=settings.groq_api_key),
        storage=storage,
        history=history,
        illustrator=illustrator,
    )


def print_entry(entry: ConversationEntry) -> None:
    label = "You" if entry.type == "player" else entry.label
    print(f"\n[{label}]: {entry.message}")


def print_briefing(session: GameSession) -> None:
    brief = session.script.briefing()
    print("\n" + "=" * 60)
    print(f"   {brief['title'].upper()}")
    print("=" * 60)
    print(f"\nVICTIM     : {brief['victim']} ({brief['victim_occupation']})")
    print(f"TIME       : {brief['time_of_death']}")
    print(f"LOCATION   : {brief['location']}")
    print(f"CAUSE      : {brief['cause_of_death']}")
    if session.case_image_url:
        print("ILLUSTRATION ready.")
    print("\nCommands: /hint, /giveup, /note <text>, /notes, /status, /sessions, /resume <id>, /new, /quit")
    print("-" * 60)
    for entry in session.conversation:
        print_entry(entry)


def start_game(engine: MysteryGameEngine, difficulty: str) -> Optional[str]:
    try:
        session = engine.start_new_game(
            difficulty,
            on_case_ready=lambda: print("Case file assembled..."),
        )
    except InitializationError as exc:
        print(f"Could not open a new case: {exc}")
        return None
    print_briefing(session)
    return session.id


def run_cli() -> None:
    """
    Main CLI game loop.

    Validates the environment, builds the engine, opens a case, then processes
    player input until the player quits. After a case closes the player can
    start another one with /new or resume an unfinished one.
    """
    load_dotenv()
    settings = Settings.from_env()
    problems = settings.validate()
    if problems:
        for problem in problems:
            print(f"Error: {problem}")
        print("  export GROQ_API_KEY='your-key-here'")
        return

    engine = build_engine(settings)
    current: Optional[str] = start_game(engine, GAME_CONFIG.default_difficulty)

    while True:
        if current is None:
            prompt = "\n[no open case — /new or /resume <id>]: "
        else:
            stats  = engine.get_game_stats(current)
            prompt = f"\n[Q{stats['questions_asked'] + 1} | hints left {stats['hints_remaining']}] > "

        user_input = input(prompt).strip()
        if not user_input:
            continue

        lower = user_input.lower()

        # ---- Command: quit ----
        if lower in {"/quit", "quit", "exit"}:
            print("Thanks for playing!")
            break

        # ---- Command: new case ----
        if lower == "/new" or lower.startswith("/new "):
            parts = lower.split()
            current = start_game(
                engine, parts[1] if len(parts) > 1 else GAME_CONFIG.default_difficulty
            ) or current
            continue

        # ---- Command: list saved sessions ----
        if lower == "/sessions":
            sessions = engine.list_sessions()
            if not sessions:
                print("  No saved cases.")
            for s in sessions:
                state = "solved" if s.is_solved else ("closed" if s.is_complete else "open")
                print(f"  {s.id}  {s.script.title}  [{state}]")
            continue

        # ---- Command: resume ----
        if lower.startswith("/resume"):
            parts = user_input.split(maxsplit=1)
            if len(parts) < 2:
                print("Usage: /resume <session id>")
                continue
            session = engine.resume_session(parts[1].strip())
            if session is None:
                print("That case can't be reopened.")
                continue
            current = session.id
            print_briefing(session)
            continue

        if current is None:
            print("No open case. Use /new or /resume <id>.")
            continue

        try:
            # ---- Command: status ----
            if lower == "/status":
                stats   = engine.get_game_stats(current)
                session = engine.get_session(current)
                print(f"  Questions asked : {stats['questions_asked']}")
                print(f"  Hints remaining : {stats['hints_remaining']}")
                print(f"  Interviewed     : {', '.join(session.interviewed_characters) or '-'}")
                print(f"  Places searched : {', '.join(session.visited_locations) or '-'}")
                continue

            # ---- Command: notes ----
            if lower == "/note":
                print("Usage: /note <text>")
                continue
            if lower.startswith("/note "):
                added = engine.add_note(current, user_input[6:])
                print("  Noted." if added else "  Already noted.")
                continue
            if lower == "/notes":
                for note in engine.get_session(current).player_notes or ["(no notes)"]:
                    print(f"  - {note}")
                continue

            # ---- Command: hint ----
            if lower == "/hint":
                hint = engine.request_hint(current)
                if hint is None:
                    print("No hints left, detective. You're on your own.")
                else:
                    print_entry(hint)
                continue

            # ---- Command: give up ----
            if lower == "/giveup":
                print_entry(engine.give_up(current))
                current = None
                continue

            # ---- Normal investigation turn ----
            result = engine.process_player_input(current, user_input)
            print_entry(result.entry)
            if result.is_game_over:
                print(
                    f"\n{'🎉 CASE SOLVED!' if result.is_solved else '❌ CASE FAILED...'} "
                    f"Score: {result.score}"
                )
                current = None

        except OracleError as exc:
            logger.warning("Turn failed: %s", exc)
            print("The city's gone quiet... (the narrator didn't answer). Try again.")
        except NoActiveSessionError:
            print("That case is closed. Use /new or /resume <id>.")
            current = None


def main() -> None:
    # Configure logging at the entry point so all murder_mystery.* loggers
    # emit to stderr at INFO level. Swap the handler here to redirect logs to
    # disk without touching any other module.
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    run_cli()


if __name__ == "__main__":
    main()
