import subprocess

import pytest

from jarvisctl.errors import NonZeroExit
from jarvisctl.errors import TransportError
from jarvisctl.tmux import FakeTmuxAdapter
from jarvisctl.tmux import TmuxAdapter


class _Recorder:
    def __init__(self, stdout: str = "", returncode: int = 0, exc: BaseException | None = None) -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.exc = exc
        self.calls: list[tuple[list[str], dict]] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.exc is not None:
            raise self.exc
        if self.returncode:
            raise subprocess.CalledProcessError(self.returncode, cmd, output="", stderr="boom")
        return subprocess.CompletedProcess(cmd, 0, stdout=self.stdout if kwargs.get("capture_output") else None)


def test_execute_runs_tmux_with_socket(monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = _Recorder()
    monkeypatch.setattr("jarvisctl.tmux.subprocess.run", recorder)

    TmuxAdapter(socket="work").new_session("demo", "agent0", "bash -lc 'top'")

    cmd, kwargs = recorder.calls[0]
    assert cmd == ["tmux", "-L", "work", "new-session", "-d", "-s", "demo", "-n", "agent0", "bash -lc 'top'"]
    assert kwargs == {"check": True}


def test_default_socket_is_not_passed(monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = _Recorder()
    monkeypatch.setattr("jarvisctl.tmux.subprocess.run", recorder)

    TmuxAdapter(tmux_bin="/usr/bin/tmux", socket="default").kill_session("demo")

    assert recorder.calls[0][0] == ["/usr/bin/tmux", "kill-session", "-t", "demo"]


def test_execute_capture_decodes_lossily(monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = _Recorder(stdout="a\n\nb \n")
    monkeypatch.setattr("jarvisctl.tmux.subprocess.run", recorder)

    names = TmuxAdapter().list_sessions()

    assert names == ["a", "b"]
    _, kwargs = recorder.calls[0]
    assert kwargs["capture_output"] is True
    assert kwargs["errors"] == "replace"
    assert kwargs["encoding"] == "utf-8"


def test_non_zero_exit_keeps_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("jarvisctl.tmux.subprocess.run", _Recorder(returncode=3))

    with pytest.raises(NonZeroExit) as excinfo:
        TmuxAdapter().show_option("demo", "@jarvisctl")

    assert excinfo.value.code == 3
    assert excinfo.value.command[:2] == ["tmux", "show-option"]
    assert "boom" in str(excinfo.value)


def test_missing_binary_is_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("jarvisctl.tmux.subprocess.run", _Recorder(exc=FileNotFoundError("tmux")))

    with pytest.raises(TransportError):
        TmuxAdapter().attach("demo")


def test_send_keys_ends_option_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = _Recorder()
    monkeypatch.setattr("jarvisctl.tmux.subprocess.run", recorder)

    TmuxAdapter().send_keys("demo:0", "- item", "C-j")

    assert recorder.calls[0][0] == ["tmux", "send-keys", "-t", "demo:0", "--", "- item", "C-j"]


def test_fake_adapter_fails_at_requested_call() -> None:
    fake = FakeTmuxAdapter(fail_at=2, fail_code=7)
    fake.new_session("demo", "agent0", "cmd")

    with pytest.raises(NonZeroExit) as excinfo:
        fake.new_window("demo", "agent1", "cmd")

    assert excinfo.value.code == 7
    assert fake.subcommands() == ["new-session", "new-window"]
    assert [w.name for w in fake.sessions["demo"].windows] == ["agent0"]


def test_fake_adapter_reports_missing_session() -> None:
    fake = FakeTmuxAdapter()

    with pytest.raises(NonZeroExit):
        fake.list_windows("ghost")
    assert fake.show_option("ghost", "@jarvisctl") == ""
