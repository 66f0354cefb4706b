"""Exceptions raised by the key helper pipeline."""

import shlex


class KeyHelperError(Exception):
    """Base class for every failure the CLI reports."""


class UsageError(KeyHelperError):
    """Required command-line values are missing."""


class ProvisionError(KeyHelperError):
    """The local key pair is unusable (missing or malformed public key)."""


class VerificationError(KeyHelperError):
    """Logging in with the freshly installed key did not work."""


class CommandError(KeyHelperError):
    """An external command exited with a non-zero status."""

    def __init__(self, step: str, cmd: list[str], returncode: int):
        self.step = step
        self.cmd = list(cmd)
        self.returncode = returncode
        super().__init__(
            f"{step} failed: '{shlex.join(self.cmd)}' exited with status {returncode}"
        )
