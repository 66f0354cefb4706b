"""Install a public key into a remote account's authorized_keys."""

import logging
import shutil
from typing import Optional

from keyhelper import report
from keyhelper.config import KeyTarget
from keyhelper.runner import run_command

logger = logging.getLogger(__name__)

METHOD_COPY_ID = "ssh-copy-id"
METHOD_SSH = "ssh"

# Runs on the remote side with the public key on stdin
REMOTE_APPEND_COMMAND = (
    "mkdir -p ~/.ssh && chmod 700 ~/.ssh && "
    "cat >> ~/.ssh/authorized_keys && chmod 600 ~/.ssh/authorized_keys"
)


def find_copy_id(command: str = "ssh-copy-id") -> Optional[str]:
    """Resolve the identity-copy utility, or None when it is not installed."""
    return shutil.which(command)


def copy_id_command(target: KeyTarget, executable: str) -> list[str]:
    return [
        executable,
        "-i", str(target.public_key_path),
        *target.port_args,
        target.destination,
    ]


def append_command(target: KeyTarget, executable: str = "ssh") -> list[str]:
    return [executable, *target.port_args, target.destination, REMOTE_APPEND_COMMAND]


def install_public_key(
    target: KeyTarget,
    copy_id: str = "ssh-copy-id",
    ssh: str = "ssh",
) -> str:
    """
    Copy the public key of ``target`` to ``user@host``.

    The availability of ssh-copy-id is probed once. If present it is used and
    its failure is final; only when it is absent does the manual ssh append run.

    Returns:
        The method used: ``"ssh-copy-id"`` or ``"ssh"``.

    Raises:
        CommandError: the chosen installation command failed
    """
    print()
    report.step(f"Copying public key to {target.destination}...")

    copy_id_path = find_copy_id(copy_id)
    if copy_id_path:
        logger.debug(f"Using {copy_id_path}")
        run_command(copy_id_command(target, copy_id_path), step="ssh-copy-id")
        report.success("Key successfully copied using ssh-copy-id.")
        return METHOD_COPY_ID

    logger.info(f"{copy_id} not found, falling back to {ssh}")
    report.warning(f"{copy_id} command not found. Using alternative method.")
    with open(target.public_key_path, "rb") as pub:
        run_command(append_command(target, ssh), step="remote append", stdin=pub)
    report.success("Key should now be added to authorized_keys on the remote host.")
    return METHOD_SSH
