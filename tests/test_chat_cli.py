import json
from pathlib import Path
from unittest.mock import MagicMock

import yaml
from typer.testing import CliRunner

import tinychat.chat.controller as controller_module
from tinychat.cli.commands import app
from tinychat.providers.client import END_OF_STREAM

runner = CliRunner()


def _write_settings(tmp_path: Path, **extra) -> Path:
    path = tmp_path / "settings.json"
    data = {"historyPath": str(tmp_path / "history"), "maxTotalTokens": 40, **extra}
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _install_fake_client(monkeypatch, fragments: list[str]) -> MagicMock:
    client = MagicMock()
    client.initialize.return_value = True

    def _stream(prompt, on_fragment):
        for fragment in fragments:
            on_fragment(fragment)
        on_fragment(END_OF_STREAM)
        return True

    client.stream.side_effect = _stream
    monkeypatch.setattr(controller_module, "ModelServiceClient", lambda config: client)
    return client


def test_chat_streams_reply_and_saves_session_on_eof(tmp_path: Path, monkeypatch) -> None:
    settings = _write_settings(tmp_path)
    client = _install_fake_client(monkeypatch, ["Hi", "there"])

    result = runner.invoke(app, ["chat", "--config", str(settings)], input="hello\n")

    assert result.exit_code == 0, result.output
    assert "Hi" in result.output and "there" in result.output
    client.initialize.assert_called_once()
    client.close.assert_called_once()

    files = list((tmp_path / "history").glob("chat-*.yaml"))
    assert len(files) == 1
    data = yaml.safe_load(files[0].read_text(encoding="utf-8"))
    assert data["chatHistory"] == ["User: hello", "AI:  Hi there"]


def test_chat_rejects_too_long_message(tmp_path: Path, monkeypatch) -> None:
    settings = _write_settings(tmp_path)
    client = _install_fake_client(monkeypatch, ["unused"])
    long_message = " ".join(["word"] * 11)

    result = runner.invoke(app, ["chat", "--config", str(settings)], input=f"{long_message}\n/exit\n")

    assert result.exit_code == 0
    assert "Message too long. Please try again." in result.output
    client.stream.assert_not_called()


def test_chat_slash_commands(tmp_path: Path, monkeypatch) -> None:
    settings = _write_settings(tmp_path)
    _install_fake_client(monkeypatch, [])

    result = runner.invoke(app, ["chat", "--config", str(settings)], input="/history\n/help\n/exit\n")

    assert result.exit_code == 0
    assert "No chat history available." in result.output
    assert "/resume <n|file>" in result.output
    assert "Goodbye!" in result.output


def test_chat_model_override_is_not_persisted(tmp_path: Path, monkeypatch) -> None:
    settings = _write_settings(tmp_path)
    _install_fake_client(monkeypatch, [])

    result = runner.invoke(app, ["chat", "--config", str(settings), "--model", "TinyLlama"], input="/exit\n")

    assert result.exit_code == 0
    assert "model: TinyLlama" in result.output
    assert "model" not in json.loads(settings.read_text(encoding="utf-8"))


def test_chat_resume_replays_saved_turns(tmp_path: Path, monkeypatch) -> None:
    settings = _write_settings(tmp_path)
    history = tmp_path / "history"
    history.mkdir()
    (history / "chat-123.yaml").write_text(
        yaml.safe_dump({"chatHistory": ["User: earlier", "AI:  reply"], "memory": []}),
        encoding="utf-8",
    )
    _install_fake_client(monkeypatch, [])

    result = runner.invoke(app, ["chat", "--config", str(settings), "--resume", "chat-123.yaml"], input="")

    assert result.exit_code == 0
    assert "You: earlier" in result.output
    assert "AI:  reply" in result.output


def test_chat_unknown_model_in_settings_exits_nonzero(tmp_path: Path, monkeypatch) -> None:
    settings = _write_settings(tmp_path, model="Mistral")
    _install_fake_client(monkeypatch, [])

    result = runner.invoke(app, ["chat", "--config", str(settings)], input="")

    assert result.exit_code == 1
    assert "Unknown model or prompt type" in result.output


def test_sessions_lists_saved_files(tmp_path: Path) -> None:
    settings = _write_settings(tmp_path)
    history = tmp_path / "history"
    history.mkdir()
    for name in ("chat-2.yaml", "chat-1.yaml"):
        (history / name).write_text("chatHistory: []\n", encoding="utf-8")

    result = runner.invoke(app, ["sessions", "--config", str(settings)])

    assert result.exit_code == 0
    assert "1. chat-1.yaml" in result.output
    assert "2. chat-2.yaml" in result.output


def test_config_prints_effective_settings(tmp_path: Path) -> None:
    settings = _write_settings(tmp_path, memory="summary")

    result = runner.invoke(app, ["config", "--config", str(settings)])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["memory"] == "summary"
    assert data["maxTotalTokens"] == 40
    assert data["baseUrl"] == "http://server:9000"


def test_chat_survives_interrupted_reply(tmp_path: Path, monkeypatch) -> None:
    settings = _write_settings(tmp_path)
    client = _install_fake_client(monkeypatch, ["fine"])
    calls = {"n": 0}
    playback = client.stream.side_effect

    def _interrupt_first(prompt, on_fragment):
        calls["n"] += 1
        if calls["n"] == 1:
            on_fragment(END_OF_STREAM)
            raise KeyboardInterrupt
        return playback(prompt, on_fragment)

    client.stream.side_effect = _interrupt_first

    result = runner.invoke(app, ["chat", "--config", str(settings)], input="hello\nagain\n/exit\n")

    assert result.exit_code == 0, result.output
    assert "[interrupted]" in result.output
    assert "fine" in result.output
    assert "Goodbye!" in result.output
    client.close.assert_called_once()
