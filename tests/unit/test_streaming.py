"""Tests for the log aggregation window."""
import logging

import pytest

from dolly.errors import StreamError
from dolly.models import SessionConfig
from dolly.tmux.streaming import (
    STREAM_WINDOW, build_streaming_command, cleanup_streaming, create_streaming_window, select_stream_targets,
)

HANDLES = {
    "dev": {"pane1": "%0", "tests": "%1"},
    "ops": {"pane1": "%2", "top": "%3"},
}


def make_config(**log_stream):
    return SessionConfig(
        session_name="proj",
        windows=[
            {"name": "dev", "panes": [{}, {"id": "tests"}]},
            {"name": "ops", "panes": [{}, {"id": "top"}]},
        ],
        log_stream={"enabled": True, **log_stream},
    )


class TestSelectStreamTargets:

    def test_wildcards_select_everything(self):
        assert select_stream_targets(make_config(), HANDLES) == ["%0", "%1", "%2", "%3"]

    def test_pane_filter_applies_across_windows(self):
        """pane1 is the default id of the first pane in every window."""
        assert select_stream_targets(make_config(panes=["pane1"]), HANDLES) == ["%0", "%2"]

    def test_window_filter(self):
        assert select_stream_targets(make_config(windows=["ops"]), HANDLES) == ["%2", "%3"]

    def test_combined_filters(self):
        config = make_config(windows=["dev", "ops"], panes=["top", "tests"])
        assert select_stream_targets(config, HANDLES) == ["%1", "%3"]

    def test_nothing_selected(self):
        with pytest.raises(StreamError, match="nothing to stream"):
            select_stream_targets(make_config(windows=["missing"]), HANDLES)

    def test_uncreated_pane_is_skipped(self, caplog):
        caplog.set_level(logging.WARNING)
        handles = {"dev": {"pane1": "%0"}, "ops": {"pane1": "%2", "top": "%3"}}

        assert select_stream_targets(make_config(), handles) == ["%0", "%2", "%3"]
        assert "'tests' in window 'dev' was not created" in caplog.text

    def test_positional_lookup_without_handles(self, fake_tmux):
        fake_tmux(["tmux", "new-session", "-d", "-s", "proj", "-n", "dev", "bash -l"])
        fake_tmux(["tmux", "split-window", "-t", "%0", "-P", "-F", "#{pane_id}", "bash -l"])

        targets = select_stream_targets(make_config(windows=["dev"]))

        assert targets == ["%0", "%1"]
        queried = [args[args.index("-t") + 1] for args in fake_tmux.commands("display-message")]
        assert queried == ["proj:=dev.0", "proj:=dev.1"]

    def test_positional_lookup_skips_uncreated_panes(self, fake_tmux, caplog):
        """A skipped split none pane does not shift the panes after it."""
        caplog.set_level(logging.WARNING)
        fake_tmux(["tmux", "new-session", "-d", "-s", "proj", "-n", "dev", "bash -l"])
        fake_tmux(["tmux", "split-window", "-t", "%0", "-P", "-F", "#{pane_id}", "bash -l"])
        config = SessionConfig(session_name="proj", log_stream={"enabled": True}, windows=[
            {"name": "dev", "panes": [{}, {"id": "skip", "split": "none"}, {"id": "tests"}]},
        ])

        assert select_stream_targets(config) == ["%0", "%1"]
        queried = [args[args.index("-t") + 1] for args in fake_tmux.commands("display-message")]
        assert queried == ["proj:=dev.0", "proj:=dev.1"]
        assert "'skip' in window 'dev' was not created" in caplog.text

    def test_positional_lookup_failure_is_a_warning(self, fake_tmux, caplog):
        caplog.set_level(logging.WARNING)
        fake_tmux(["tmux", "new-session", "-d", "-s", "proj", "-n", "dev", "bash -l"])

        targets = select_stream_targets(make_config(windows=["dev"]))

        assert targets == ["%0"]
        assert "Could not get tmux pane ID for proj:=dev.1" in caplog.text


def test_streaming_command():
    assert build_streaming_command("proj", ["%1", "%3"], []) == "dolly-monitor proj %1 %3"


def test_streaming_command_with_keywords():
    command = build_streaming_command("my proj", ["%1"], ["error", "panic attack"])
    assert command == "dolly-monitor 'my proj' --grep error 'panic attack' -- %1"


def test_streaming_window_takes_index_zero(fake_tmux):
    fake_tmux(["tmux", "new-session", "-d", "-s", "proj", "-n", "dev", "bash -l"])
    fake_tmux(["tmux", "set-option", "-t", "proj", "base-index", "1"])
    fake_tmux(["tmux", "move-window", "-r", "-t", "proj"])
    config = SessionConfig(session_name="proj", working_directory="/work", terminal="fish",
                           windows=[{"name": "dev"}], log_stream={"enabled": True})

    create_streaming_window(config)

    assert {w.name: w.index for w in fake_tmux.sessions["proj"]} == {"dev": 1, STREAM_WINDOW: 0}
    new_window = fake_tmux.commands("new-window")[0]
    assert new_window[new_window.index("-c") + 1] == "/work"
    assert new_window[-1] == "fish -l"


def test_streaming_window_failure(fake_tmux):
    fake_tmux.fail_when(lambda args: args[0] == "move-window", "index in use")
    config = SessionConfig(session_name="proj", windows=[{"name": "dev"}])
    fake_tmux(["tmux", "new-session", "-d", "-s", "proj", "-n", "dev", "bash -l"])

    with pytest.raises(StreamError, match="index in use"):
        create_streaming_window(config)


def test_cleanup_streaming(stream_base):
    from dolly.utils import get_stream_dir

    stream_dir = get_stream_dir("proj")
    stream_dir.mkdir(parents=True)
    (stream_dir / "%0.log").write_text("hello\n")

    cleanup_streaming("proj")

    assert not stream_dir.exists()
    assert stream_base.exists()


def test_cleanup_streaming_without_directory(stream_base):
    cleanup_streaming("never-streamed")
