"""Check that the installed key actually grants a login."""

import logging

import paramiko
from cryptography.exceptions import UnsupportedAlgorithm
from paramiko.pkey import UnknownKeyType

from keyhelper import report
from keyhelper.config import KeyTarget
from keyhelper.errors import VerificationError

logger = logging.getLogger(__name__)

DEFAULT_SSH_PORT = 22


def load_private_key(target: KeyTarget) -> paramiko.PKey:
    """
    Load the target's private key whatever its type.

    A kept key from an earlier run may be RSA or ECDSA even though new keys
    are ed25519.
    """
    try:
        return paramiko.PKey.from_path(target.key_path)
    except (paramiko.SSHException, UnknownKeyType, OSError, ValueError, UnsupportedAlgorithm) as e:
        raise VerificationError(f"Could not load private key {target.key_path}: {e}") from e


def verify_login(target: KeyTarget, timeout: float = 10) -> None:
    """
    Log in with the target's private key only and run ``true``.

    Agent keys and default identities are ignored so a success proves the
    new key was installed.

    Raises:
        VerificationError: the key is unreadable, or connection, authentication
            or the remote command failed
    """
    print()
    report.step(f"Verifying key login to {target.destination}...")

    pkey = load_private_key(target)
    logger.debug(f"Loaded {pkey.get_name()} key from {target.key_path}")

    port = target.port or DEFAULT_SSH_PORT
    client = paramiko.SSHClient()
    client.load_system_host_keys()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    try:
        client.connect(
            hostname=target.host,
            port=port,
            username=target.user,
            pkey=pkey,
            look_for_keys=False,
            allow_agent=False,
            timeout=timeout,
        )
        _, stdout, _ = client.exec_command("true", timeout=timeout)
        status = stdout.channel.recv_exit_status()
    except (paramiko.SSHException, OSError) as e:
        logger.error(f"Verification failed for {target.destination}:{port}: {e}")
        raise VerificationError(f"Could not log in to {target.destination} with {target.key_path}: {e}") from e
    finally:
        client.close()

    if status != 0:
        raise VerificationError(f"Remote test command exited with status {status}")

    logger.info(f"Verified key login to {target.destination}:{port}")
    report.success("Key login verified.")
