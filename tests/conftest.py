"""Shared test fixtures."""
import subprocess
from typing import Callable, Dict, List, Optional

import pytest


class FakeWindow:
    """A window inside FakeTmux."""

    def __init__(self, name: str, index: int, pane: str):
        self.name = name
        self.index = index
        self.panes = [pane]
        self.active = pane
        self.options: Dict[str, str] = {}


class FakeTmux:
    """In-memory stand-in for the tmux binary.

    Answers the requests dolly makes (sessions, windows, splits, handle and
    index queries) and records every call for assertions.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.sessions: Dict[str, List[FakeWindow]] = {}
        self.base_index: Dict[str, int] = {}
        self.titles: Dict[str, str] = {}
        self.pane_options: Dict[str, Dict[str, str]] = {}
        self.failures: List[tuple] = []
        self.sent: List[tuple] = []
        self._next_pane = 0

    # Test helpers

    def fail_when(self, predicate: Callable[[List[str]], bool], stderr: str = "simulated failure"):
        """Make matching calls exit with status 1."""
        self.failures.append((predicate, stderr))

    def commands(self, name: str) -> List[List[str]]:
        """Recorded calls of one tmux subcommand."""
        return [args for args in self.calls if args and args[0] == name]

    def window(self, session: str, name: str) -> FakeWindow:
        return next(w for w in self.sessions[session] if w.name == name)

    def sent_text(self, target_handle: Optional[str] = None) -> List[str]:
        """Literal text sent with send-keys -l, optionally for one pane."""
        return [text for handle, text in self.sent
                if target_handle is None or handle == target_handle]

    # Internals

    def _new_pane(self) -> str:
        handle = f"%{self._next_pane}"
        self._next_pane += 1
        return handle

    def _find_window(self, target: str) -> Optional[FakeWindow]:
        session, _, window = target.partition(":")
        window = window.split(".")[0]
        windows = self.sessions.get(session.lstrip("="), [])
        if window.startswith("="):
            # Exact name only, never an index
            return next((w for w in windows if w.name == window[1:]), None)
        for w in windows:
            if str(w.index) == window:
                return w
        return next((w for w in windows if w.name == window), None)

    def _window_of_pane(self, handle: str) -> Optional[FakeWindow]:
        for windows in self.sessions.values():
            for w in windows:
                if handle in w.panes:
                    return w
        return None

    def _resolve_pane(self, target: str) -> Optional[str]:
        if target.startswith("%"):
            return target if self._window_of_pane(target) else None
        window = self._find_window(target)
        if window is None:
            return None
        if "." in target.partition(":")[2]:
            index = int(target.rsplit(".", 1)[1])
            return window.panes[index] if index < len(window.panes) else None
        return window.active

    @staticmethod
    def _opt(args: List[str], flag: str) -> Optional[str]:
        return args[args.index(flag) + 1] if flag in args else None

    def __call__(self, cmd: List[str], log_failure: bool = True, **kwargs) -> subprocess.CompletedProcess:
        args = list(cmd[1:])
        self.calls.append(args)

        for predicate, stderr in self.failures:
            if predicate(args):
                return subprocess.CompletedProcess(cmd, 1, "", stderr)

        try:
            stdout = self._dispatch(args)
        except LookupError as e:
            return subprocess.CompletedProcess(cmd, 1, "", str(e))
        return subprocess.CompletedProcess(cmd, 0, stdout, "")

    def _dispatch(self, args: List[str]) -> str:
        name = args[0]
        target = self._opt(args, "-t")

        if name == "new-session":
            session = self._opt(args, "-s")
            if session in self.sessions:
                raise LookupError(f"duplicate session: {session}")
            self.base_index[session] = 0
            self.sessions[session] = [FakeWindow(self._opt(args, "-n"), 0, self._new_pane())]
            return ""

        if name == "kill-session":
            session = target.lstrip("=")
            if session not in self.sessions:
                raise LookupError(f"can't find session: {session}")
            del self.sessions[session]
            return ""

        if name == "set-option" and args[-2] == "base-index":
            self.base_index[target] = int(args[-1])
            return ""

        if name == "move-window" and "-r" in args:
            windows = sorted(self.sessions[target], key=lambda w: w.index)
            for offset, w in enumerate(windows):
                w.index = self.base_index[target] + offset
            return ""

        if name == "move-window":
            window = self._find_window(self._opt(args, "-s"))
            session, _, index = target.partition(":")
            if window is None or any(w.index == int(index) for w in self.sessions[session]):
                raise LookupError(f"index in use: {index}")
            window.index = int(index)
            return ""

        if name == "new-window":
            session = target.rstrip(":")
            if session not in self.sessions:
                raise LookupError(f"can't find session: {session}")
            windows = self.sessions[session]
            index = max([w.index for w in windows] + [self.base_index[session] - 1]) + 1
            windows.append(FakeWindow(self._opt(args, "-n"), index, self._new_pane()))
            return ""

        if name == "split-window":
            window = self._window_of_pane(target)
            if window is None:
                raise LookupError(f"can't find pane: {target}")
            handle = self._new_pane()
            window.panes.insert(window.panes.index(target) + 1, handle)
            window.active = handle
            return handle + "\n"

        if name == "display-message":
            handle = self._resolve_pane(target)
            if handle is None:
                raise LookupError(f"can't find pane: {target}")
            window = self._window_of_pane(handle)
            return (args[-1]
                    .replace("#{pane_id}", handle)
                    .replace("#{pane_index}", str(window.panes.index(handle)))
                    .replace("#{window_name}", window.name)
                    .replace("#{pane_title}", self.titles.get(handle, "host"))) + "\n"

        if name == "send-keys":
            handle = self._resolve_pane(target)
            if handle is None:
                raise LookupError(f"can't find pane: {target}")
            if "-l" in args:
                self.sent.append((handle, args[-1]))
            return ""

        if name == "select-window" and self._find_window(target) is None:
            raise LookupError(f"can't find window: {target}")

        if name == "select-pane" and "-T" in args:
            self.titles[self._resolve_pane(target)] = self._opt(args, "-T")
            return ""

        if name == "set-option" and "-p" in args:
            self.pane_options.setdefault(target, {})[args[-2]] = args[-1]
            return ""

        if name == "set-window-option":
            window = self._find_window(target)
            if window is None:
                raise LookupError(f"can't find window: {target}")
            window.options[args[-2]] = args[-1]
            return ""

        return ""


@pytest.fixture
def fake_tmux(monkeypatch):
    """Route every tmux invocation to an in-memory fake."""
    import dolly.proc

    fake = FakeTmux()
    monkeypatch.setattr(dolly.proc, "run", fake)
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    return fake


@pytest.fixture
def stream_base(tmp_path, monkeypatch):
    """Keep stream directories inside the test's temporary directory."""
    import dolly.utils

    base = tmp_path / "streams"
    original = dolly.utils.get_stream_dir

    def get_stream_dir(session_name, base_dir=None):
        return original(session_name, base_dir=base_dir or str(base))

    monkeypatch.setattr(dolly.utils, "get_stream_dir", get_stream_dir)
    monkeypatch.setattr("dolly.tmux.streaming.get_stream_dir", get_stream_dir)
    monkeypatch.setattr("dolly.monitor.get_stream_dir", get_stream_dir)
    return base
