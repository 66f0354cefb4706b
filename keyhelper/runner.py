"""Run external commands, turning failures into CommandError."""

import logging
import shlex
import subprocess
from typing import IO, Optional

from keyhelper.errors import CommandError

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
EXIT_COMMAND_NOT_FOUND = 127


def run_command(cmd: list[str], step: str, stdin: Optional[IO[bytes]] = None) -> None:
    """
    Run a command to completion, inheriting the terminal.

    stdout/stderr are not captured: ssh-copy-id and ssh may need to prompt
    for a password.

    Args:
        cmd: Command and arguments
        step: Short description of the pipeline step, used in error messages
        stdin: Optional open file streamed to the command's standard input

    Raises:
        CommandError: the command is missing, exits non-zero, or is killed
    """
    logger.debug(f"Running ({step}): {shlex.join(cmd)}")
    try:
        subprocess.run(cmd, check=True, stdin=stdin)
    except FileNotFoundError as e:
        logger.error(f"{step}: executable not found: {cmd[0]}")
        raise CommandError(step, cmd, EXIT_COMMAND_NOT_FOUND) from e
    except subprocess.CalledProcessError as e:
        returncode = e.returncode
        if returncode < 0:
            # Killed by a signal
            returncode = 128 - returncode
        logger.error(f"{step}: command exited with status {returncode}")
        raise CommandError(step, cmd, returncode) from e
    logger.info(f"{step}: done")
