"""Local key pair provisioning."""

import base64
import getpass
import hashlib
import logging
import socket
from datetime import date
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from keyhelper import report
from keyhelper.config import KeyTarget
from keyhelper.errors import ProvisionError
from keyhelper.runner import run_command

logger = logging.getLogger(__name__)

KEY_TYPE = "ed25519"
KDF_ROUNDS = 100


def ensure_key_dir(key_dir: Path) -> Path:
    """Create the key directory if needed and restrict it to its owner."""
    key_dir.mkdir(parents=True, exist_ok=True)
    key_dir.chmod(0o700)
    return key_dir


def key_comment() -> str:
    """Public key comment: ``<local user>@<hostname>-<YYYY-MM-DD>``."""
    return f"{getpass.getuser()}@{socket.gethostname()}-{date.today().isoformat()}"


def keygen_command(target: KeyTarget, executable: str = "ssh-keygen") -> list[str]:
    return [
        executable,
        "-t", KEY_TYPE,
        "-a", str(KDF_ROUNDS),
        "-f", str(target.key_path),
        "-C", key_comment(),
        "-N", "",  # No passphrase
    ]


def provision_key(target: KeyTarget, executable: str = "ssh-keygen") -> bool:
    """
    Make sure the key pair for ``target`` exists.

    An existing private key is never overwritten or rotated.

    Returns:
        True if a new key pair was generated, False if an existing one was kept.

    Raises:
        CommandError: ssh-keygen failed
    """
    report.step("Checking/Creating SSH key...")
    ensure_key_dir(target.key_dir)

    if target.key_path.is_file():
        logger.info(f"Keeping existing key {target.key_path}")
        report.warning(f"Key {target.key_path} already exists. Skipping creation.")
        return False

    run_command(keygen_command(target, executable), step="key generation")
    report.success(f"Key generated successfully: {target.key_path}")
    return True


def load_public_key(pub_path: Path) -> str:
    """
    Read and sanity-check an OpenSSH public key file.

    Returns:
        The key line, stripped of surrounding whitespace.

    Raises:
        ProvisionError: the file is missing or is not an OpenSSH public key
    """
    if not pub_path.is_file():
        raise ProvisionError(f"Public key not found: {pub_path}")

    content = pub_path.read_text().strip()
    try:
        serialization.load_ssh_public_key(content.encode())
    except (ValueError, UnsupportedAlgorithm) as e:
        raise ProvisionError(f"Invalid public key {pub_path}: {e}") from e
    return content


def get_key_fingerprint(public_key: str) -> str:
    """
    SHA256 fingerprint of an OpenSSH public key line.

    Matches ``ssh-keygen -l``: hash of the decoded key blob, base64 without padding.
    """
    parts = public_key.split()
    if len(parts) < 2:
        raise ValueError("Invalid public key format")

    key_data = base64.b64decode(parts[1])
    digest = hashlib.sha256(key_data).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")
