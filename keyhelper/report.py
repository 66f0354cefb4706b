"""User-facing progress output."""

import os
import shlex
import sys
from typing import Optional, TextIO

from keyhelper.config import KeyTarget

BLUE = "\033[34m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"


def use_color(stream: TextIO) -> bool:
    """Colour only interactive terminals, and never when NO_COLOR is set."""
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def paint(text: str, color: str, stream: TextIO) -> str:
    if use_color(stream):
        return f"{color}{text}{RESET}"
    return text


def step(message: str) -> None:
    print(paint(f"===> {message}", BLUE, sys.stdout))


def success(message: str) -> None:
    print(f"{paint('✓', GREEN, sys.stdout)} {message}")


def warning(message: str) -> None:
    print(f"{paint('WARNING:', YELLOW, sys.stdout)} {message}")


def error(message: str, hint: Optional[str] = None) -> None:
    print(f"{paint('ERROR:', RED, sys.stderr)} {message}", file=sys.stderr)
    if hint:
        print(paint(hint, YELLOW, sys.stderr), file=sys.stderr)


def login_command(target: KeyTarget) -> str:
    """The ssh invocation that logs in with the provisioned key."""
    return shlex.join(
        ["ssh", *target.port_args, "-i", str(target.key_path), target.destination]
    )


def done(target: KeyTarget, fingerprint: Optional[str] = None) -> None:
    print()
    print(paint("DONE!", GREEN, sys.stdout))
    if fingerprint:
        print(f"Key fingerprint: {fingerprint}")
    print(f"You can now log in using: {login_command(target)}")
