"""Process utilities."""
import logging
import subprocess
from typing import List

from ..errors import TmuxError

logger = logging.getLogger(__name__)


def run(cmd: List[str], log_failure: bool = True, **kwargs) -> subprocess.CompletedProcess:
    """Run a subprocess synchronously with automatic logging.

    Args:
        cmd: Command to run as list of strings
        log_failure: Log a non-zero exit status at ERROR level
        **kwargs: Additional arguments passed to subprocess.run

    Returns:
        CompletedProcess result
    """
    logger.debug(f"Running: {' '.join(cmd)}")

    # Capture output by default for logging
    kwargs.setdefault('capture_output', True)
    kwargs.setdefault('text', True)

    try:
        result = subprocess.run(cmd, **kwargs)

        if result.stdout:
            logger.debug(f"stdout: {result.stdout.strip()}")
        if result.stderr:
            logger.debug(f"stderr: {result.stderr.strip()}")

        if result.returncode != 0:
            if log_failure:
                logger.error(f"Command failed with exit code {result.returncode}: {' '.join(cmd)}")
        else:
            logger.debug(f"Command succeeded: {' '.join(cmd)}")

        return result

    except Exception as e:
        logger.error(f"Command failed with exception: {' '.join(cmd)} - {e}")
        raise


def tmux(*args: str) -> str:
    """Run a tmux command and return its stripped stdout.

    Raises:
        TmuxError: If tmux exits with a non-zero status
    """
    result = run(["tmux", *args])
    if result.returncode != 0:
        raise TmuxError(list(args), result.returncode, (result.stderr or "").strip())
    return (result.stdout or "").strip()


def tmux_quietly(*args: str) -> bool:
    """Run a tmux command whose failure is expected and harmless.

    Returns:
        True if tmux succeeded, False otherwise
    """
    result = run(["tmux", *args], log_failure=False)
    if result.returncode != 0:
        logger.debug(f"Ignored tmux failure ({result.returncode}): tmux {' '.join(args)}")
        return False
    return True
