#!/usr/bin/env python3
"""
ssh-key-helper - generate an SSH key pair and install it on a remote host.

Creates ~/.ssh/id_<name>_rsa (ed25519, no passphrase) unless it already
exists, then appends the public key to user@host's authorized_keys.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml

from keyhelper import report
from keyhelper.config import (
    DEFAULT_KEY_PREFIX,
    DEFAULT_KEY_SUFFIX,
    Config,
    KeyTarget,
    validate_target,
)
from keyhelper.errors import CommandError, KeyHelperError, UsageError
from keyhelper.installer import install_public_key
from keyhelper.keygen import get_key_fingerprint, load_public_key, provision_key
from keyhelper.verify import verify_login
from shared.logging_config import setup_logging
from shared.version import __version__

logger = logging.getLogger("keyhelper")

EXIT_USAGE = 1
EXIT_INTERRUPTED = 130

HELP_HINT = "Use the -h option to display help."

DESCRIPTION = """\
Generate a new SSH key pair (ed25519) and securely copy the public key
to a remote server.

If run without arguments, this help message is displayed."""

EPILOG = f"""\
Examples:
  %(prog)s -n devops -H server.example.com -u deploy
  %(prog)s -n backup -H 10.0.0.5 -u root -P 2222 --verify

The private key is written to ~/.ssh/{DEFAULT_KEY_PREFIX}<name>{DEFAULT_KEY_SUFFIX}
(prefix, suffix and directory can be changed in the config file).
"""


class HelperArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on malformed input."""

    def error(self, message):
        self.print_usage(sys.stderr)
        report.error(message, hint=HELP_HINT)
        self.exit(EXIT_USAGE)


def port_number(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port number: {value!r}")
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError(f"port out of range (1-65535): {port}")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = HelperArgumentParser(
        prog="ssh-key-helper",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    required = parser.add_argument_group("required options")
    required.add_argument("-n", "--name", help='Name for the key (e.g. "devops")')
    required.add_argument(
        "-H", "--hostname", help="Remote host name or IP address where the key will be copied"
    )
    required.add_argument("-u", "--user", help="Username on the remote host")

    parser.add_argument(
        "-P", "--port", type=port_number,
        help="SSH port on the remote host (default: the ssh client's default)",
    )
    parser.add_argument("-c", "--config", type=Path, help="Path to YAML config file")
    parser.add_argument(
        "--verify", action="store_true", help="Log in with the new key after installing it"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(target: KeyTarget, config: Config, verify: bool = False) -> None:
    """Provision the key, install it, optionally verify, then print the login hint."""
    provision_key(target, config.keygen_command)
    public_key = load_public_key(target.public_key_path)
    install_public_key(target, copy_id=config.copy_id_command, ssh=config.ssh_command)
    if verify:
        verify_login(target, timeout=config.verify_timeout)
    report.done(target, get_key_fingerprint(public_key))


def main(argv: Optional[list[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)

    try:
        config = Config.load(args.config, required=args.config is not None)
        target = KeyTarget.from_args(args, config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        report.error(f"Could not read config file: {e}")
        return EXIT_USAGE

    try:
        validate_target(target)
    except UsageError as e:
        report.error(str(e), hint=HELP_HINT)
        return EXIT_USAGE

    setup_logging(
        "keyhelper",
        level="DEBUG" if args.verbose else config.log_level,
        log_file=config.log_file,
        file_level="DEBUG" if args.verbose else "INFO",
    )
    logger.debug(f"ssh-key-helper {__version__}: {target.key_path} -> {target.destination}")

    try:
        run(target, config, verify=args.verify)
    except CommandError as e:
        report.error(str(e))
        return e.returncode
    except KeyHelperError as e:
        logger.debug("Aborting", exc_info=True)
        report.error(str(e))
        return EXIT_USAGE
    except OSError as e:
        logger.debug("Local filesystem error", exc_info=True)
        report.error(str(e))
        return EXIT_USAGE
    except KeyboardInterrupt:
        report.error("Operation cancelled by user")
        return EXIT_INTERRUPTED

    return 0


if __name__ == "__main__":
    sys.exit(main())
