import pytest

import cli
from conftest import accusation


@pytest.fixture
def play(monkeypatch, engine, capsys):
    """Run the CLI loop against the test engine with scripted keyboard input."""

    def _play(*lines):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        monkeypatch.setattr(cli, "load_dotenv", lambda: None)
        monkeypatch.setattr(cli, "build_engine", lambda settings: engine)
        feed = iter(list(lines) + ["/quit"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(feed))
        cli.run_cli()
        return capsys.readouterr().out

    return _play


def test_cli_refuses_to_start_without_key(monkeypatch, capsys):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    cli.run_cli()
    assert "GROQ_API_KEY is not set." in capsys.readouterr().out


def test_cli_session_flow(play, engine):
    out = play("/note check the tongs", "/notes", "/hint", "/status", "Search the desk")
    assert "THE BLACKWOOD LIBRARY" in out
    assert "- check the tongs" in out
    assert "HINT 1/2:" in out
    assert "Questions asked : 0" in out
    assert "The rain keeps falling." in out
    assert "Thanks for playing!" in out


def test_cli_accusation_ends_the_case(play, oracle):
    oracle.queue(accusation(correct=True))
    out = play("It was Lydia Blackwood", "/hint")
    assert "CASE SOLVED" in out
    assert "No open case" in out


def test_cli_give_up(play):
    out = play("/giveup")
    assert "The murderer was Lydia Blackwood." in out


def test_cli_lists_sessions(play):
    out = play("/sessions")
    assert "The Blackwood Library" in out
    assert "[open]" in out


def test_bare_note_prints_usage(play, oracle):
    out = play("/note", "/notes")
    assert "Usage: /note <text>" in out
    assert oracle.calls == []
