"""Merged, filtered view of the output of several tmux panes.

Started inside the log window as::

    dolly-monitor SESSION [--grep KEYWORD... --] PANE...

Each pane is piped into a file under the session's stream directory and
the files are followed together, one prefixed line per output line.
"""
import logging
import re
import shlex
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click

from . import proc
from .errors import TmuxError
from .log import setup_logging
from .utils import get_stream_dir, safe_filename

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.2
LABEL_COLORS = ("green", "blue", "red", "yellow", "cyan", "magenta")

_ANSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)|\x1b[()][0-9A-Za-z]|\r")


def parse_monitor_args(argv: Sequence[str]) -> Tuple[str, List[str], List[str]]:
    """Split monitor arguments into session, keywords and pane handles.

    Raises:
        click.UsageError: If the arguments are malformed
    """
    if not argv:
        raise click.UsageError("missing session name")

    session_name, rest = argv[0], list(argv[1:])
    keywords: List[str] = []

    if rest and rest[0] == "--grep":
        try:
            end = rest.index("--")
        except ValueError:
            raise click.UsageError("--grep keywords must be terminated by --")
        keywords, rest = rest[1:end], rest[end + 1:]

    if not rest:
        raise click.UsageError("no panes to monitor")

    return session_name, keywords, rest


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def line_matches(line: str, keywords: List[str]) -> bool:
    """True if the line contains any keyword, ignoring case and escapes."""
    if not keywords:
        return True
    plain = strip_ansi(line).lower()
    return any(keyword.lower() in plain for keyword in keywords)


@dataclass
class PaneTail:
    """Follows the stream file of one pane."""
    handle: str
    label: str
    path: Path
    color: str
    offset: int = 0
    partial: bytes = b""

    def read_lines(self) -> List[str]:
        """Return complete lines written since the last call."""
        try:
            with open(self.path, "rb") as f:
                f.seek(self.offset)
                data = f.read()
                self.offset = f.tell()
        except FileNotFoundError:
            return []

        if not data:
            return []

        *lines, self.partial = (self.partial + data).split(b"\n")
        return [line.decode("utf-8", errors="replace") for line in lines]


class Monitor:
    """Pipes panes to files and follows them together."""

    def __init__(self, session_name: str, handles: List[str], keywords: List[str],
                 stream_dir: Optional[Path] = None):
        self.session_name = session_name
        self.handles = handles
        self.keywords = keywords
        self.stream_dir = stream_dir or get_stream_dir(session_name)
        self.tails: List[PaneTail] = []

    def start(self):
        """Start piping every pane into its stream file."""
        self.stream_dir.mkdir(parents=True, exist_ok=True)

        for i, handle in enumerate(self.handles):
            path = self.stream_dir / f"{safe_filename(handle)}.log"
            path.touch()
            tail = PaneTail(
                handle=handle,
                label=self._label(handle),
                path=path,
                color=LABEL_COLORS[i % len(LABEL_COLORS)],
                offset=path.stat().st_size,
            )
            proc.tmux("pipe-pane", "-t", handle, f"cat >> {shlex.quote(str(path))}")
            self.tails.append(tail)
            logger.debug(f"Piping {handle} to {path}")

    def stop(self):
        """Close the pipes; stream files are removed on session teardown."""
        for tail in self.tails:
            proc.tmux_quietly("pipe-pane", "-t", tail.handle)

    def poll(self) -> List[Tuple[PaneTail, str]]:
        """New lines from every pane that pass the keyword filter."""
        ready = []
        for tail in self.tails:
            for line in tail.read_lines():
                if line_matches(line, self.keywords):
                    ready.append((tail, line))
        return ready

    def run(self):
        try:
            self.start()
            click.echo(f"Streaming {len(self.tails)} pane(s) from session '{self.session_name}'"
                       + (f" matching {', '.join(self.keywords)}" if self.keywords else ""))
            while True:
                lines = self.poll()
                for tail, line in lines:
                    click.echo(f"{click.style(f'[{tail.label}]', fg=tail.color)} {line}")
                if not lines:
                    time.sleep(POLL_INTERVAL)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    @staticmethod
    def _label(handle: str) -> str:
        try:
            return proc.tmux("display-message", "-p", "-t", handle, "#{window_name}:#{pane_title}") or handle
        except TmuxError as e:
            logger.warning(f"Could not label pane {handle}: {e}")
            return handle


@click.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
def main(argv):
    """Follow tmux panes in one merged stream.

    ARGV is SESSION [--grep KEYWORD... --] PANE...
    """
    setup_logging()
    session_name, keywords, handles = parse_monitor_args(argv)

    try:
        Monitor(session_name, handles, keywords).run()
    except TmuxError as e:
        click.echo(f"Error starting monitor: {e}", err=True)
        raise click.Abort()


if __name__ == "__main__":
    main()
