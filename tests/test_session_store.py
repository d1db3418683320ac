from pathlib import Path

import yaml

from tinychat.session.store import HistoryStore


def test_save_writes_yaml_document_and_reloads(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history")
    store.save("1700", ["User: hi", "AI:  hello"], ["User: hi, AI:  hello"])

    path = tmp_path / "history" / "chat-1700.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data == {"chatHistory": ["User: hi", "AI:  hello"], "memory": ["User: hi, AI:  hello"]}

    turns, context = store.load("chat-1700.yaml")
    assert turns == ["User: hi", "AI:  hello"]
    assert context == ["User: hi, AI:  hello"]
    assert not list((tmp_path / "history").glob(".*tmp*"))


def test_save_skips_empty_session(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path)
    store.save("1700", [], ["ctx"])
    store.save("", ["User: hi"], [])
    assert store.list_sessions() == []


def test_load_missing_file_returns_empty(tmp_path: Path) -> None:
    assert HistoryStore(tmp_path).load("chat-404.yaml") == ([], [])


def test_load_invalid_document_returns_empty(tmp_path: Path) -> None:
    (tmp_path / "chat-1.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    (tmp_path / "chat-2.yaml").write_text("chatHistory: [unclosed\n", encoding="utf-8")
    store = HistoryStore(tmp_path)
    assert store.load("chat-1.yaml") == ([], [])
    assert store.load("chat-2.yaml") == ([], [])


def test_load_tolerates_missing_memory_key(tmp_path: Path) -> None:
    (tmp_path / "chat-3.yaml").write_text("chatHistory:\n- 'User: hi'\n", encoding="utf-8")
    assert HistoryStore(tmp_path).load("chat-3.yaml") == (["User: hi"], [])


def test_list_sessions_sorted_and_filtered(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path)
    store.save("200", ["User: b"], [])
    store.save("100", ["User: a"], [])
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")

    assert store.list_sessions() == ["chat-100.yaml", "chat-200.yaml"]


def test_save_failure_is_logged_not_raised(tmp_path: Path, monkeypatch) -> None:
    import tinychat.session.store as store_module

    def _boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(store_module, "atomic_write_text", _boom)
    store = HistoryStore(tmp_path)
    store.save("1", ["User: hi"], [])
    assert store.list_sessions() == []
