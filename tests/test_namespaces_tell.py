from pathlib import Path

import pytest

from jarvisctl.errors import FileReadError
from jarvisctl.errors import NonZeroExit
from jarvisctl.namespaces.tell import TextInjector
from jarvisctl.namespaces.tell import split_lines
from jarvisctl.tmux import FakeTmuxAdapter


@pytest.fixture()
def injector(adapter: FakeTmuxAdapter) -> TextInjector:
    adapter.add_session("demo", "agent0", "agent1")
    return TextInjector(adapter)


def test_three_lines_then_submit(adapter: FakeTmuxAdapter, injector: TextInjector, tmp_path: Path) -> None:
    prompt = tmp_path / "prompt.md"
    prompt.write_text("one\ntwo words\n- three\n", encoding="utf-8")

    result = injector.tell("demo", "0", prompt)

    assert adapter.subcommands() == ["send-keys"] * 4
    assert adapter.keys_sent("demo:0") == [
        ["one", "C-j"],
        ["two words", "C-j"],
        ["- three", "C-j"],
        ["Enter"],
    ]
    assert adapter.sessions["demo"].windows[0].keys[-1] == "Enter"
    assert result.lines == 3
    assert result.target == "demo:0"


def test_window_name_target(adapter: FakeTmuxAdapter, injector: TextInjector, tmp_path: Path) -> None:
    prompt = tmp_path / "prompt.txt"
    prompt.write_text("hi", encoding="utf-8")

    injector.tell("demo", "agent1", prompt)

    assert adapter.sessions["demo"].windows[1].keys == ["hi", "C-j", "Enter"]


def test_crlf_input(adapter: FakeTmuxAdapter, injector: TextInjector, tmp_path: Path) -> None:
    prompt = tmp_path / "prompt.txt"
    prompt.write_bytes(b"first\r\nsecond\r\n")

    injector.tell("demo", 0, prompt)

    assert adapter.keys_sent("demo:0")[:2] == [["first", "C-j"], ["second", "C-j"]]


@pytest.mark.parametrize(
    ("text", "expected"),
    [("", []), ("\n", [""]), ("a\n\nb", ["a", "", "b"]), ("a\r\nb\r\n", ["a", "b"]), ("x\n\n", ["x", ""])],
)
def test_split_lines(text: str, expected: list[str]) -> None:
    assert split_lines(text) == expected


def test_missing_file_aborts_before_tmux(adapter: FakeTmuxAdapter, injector: TextInjector, tmp_path: Path) -> None:
    with pytest.raises(FileReadError) as excinfo:
        injector.tell("demo", "0", tmp_path / "missing.md")

    assert excinfo.value.path == tmp_path / "missing.md"
    assert adapter.calls == []


def test_undecodable_file(adapter: FakeTmuxAdapter, injector: TextInjector, tmp_path: Path) -> None:
    prompt = tmp_path / "blob.bin"
    prompt.write_bytes(b"\xff\xfe\x00bad")

    with pytest.raises(FileReadError):
        injector.tell("demo", "0", prompt)
    assert adapter.calls == []


def test_failure_stops_remaining_lines(adapter: FakeTmuxAdapter, injector: TextInjector, tmp_path: Path) -> None:
    prompt = tmp_path / "prompt.txt"
    prompt.write_text("1\n2\n3\n", encoding="utf-8")
    adapter.fail_at = 2

    with pytest.raises(NonZeroExit):
        injector.tell("demo", "0", prompt)

    assert len(adapter.calls) == 2
    assert adapter.sessions["demo"].windows[0].keys == ["1", "C-j"]


def test_custom_keys(adapter: FakeTmuxAdapter, tmp_path: Path) -> None:
    adapter.add_session("demo", "agent0")
    prompt = tmp_path / "prompt.txt"
    prompt.write_text("go\n", encoding="utf-8")

    TextInjector(adapter, newline_key="S-Enter", submit_key="C-m").tell("demo", "0", prompt)

    assert adapter.keys_sent("demo:0") == [["go", "S-Enter"], ["C-m"]]


def test_lone_carriage_return_stays_in_line(adapter: FakeTmuxAdapter, injector: TextInjector, tmp_path: Path) -> None:
    prompt = tmp_path / "progress.log"
    prompt.write_bytes(b"progress 10%\rprogress 20%\n")

    result = injector.tell("demo", "0", prompt)

    assert result.lines == 1
    assert adapter.keys_sent("demo:0") == [["progress 10%\rprogress 20%", "C-j"], ["Enter"]]
