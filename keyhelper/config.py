"""Configuration for the key helper: YAML defaults plus the per-run target."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from keyhelper.errors import UsageError

DEFAULT_CONFIG_DIR = Path.home() / ".keyhelper"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
CONFIG_ENV_VAR = "KEYHELPER_CONFIG"

DEFAULT_KEY_DIR = "~/.ssh"
DEFAULT_KEY_PREFIX = "id_"
# Earlier releases advertised "_ed25519" in the help text but always wrote "_rsa";
# keep writing "_rsa" so existing keys are still recognised.
DEFAULT_KEY_SUFFIX = "_rsa"

# Flag spellings used in validation messages, in the order they are checked
REQUIRED_FLAGS = {
    "name": "-n/--name",
    "host": "-H/--hostname",
    "user": "-u/--user",
}


@dataclass
class Config:
    """User defaults read from the optional YAML config file."""
    # Local key naming
    key_dir: str = DEFAULT_KEY_DIR
    key_prefix: str = DEFAULT_KEY_PREFIX
    key_suffix: str = DEFAULT_KEY_SUFFIX

    # Remote defaults
    port: Optional[int] = None

    # External tools
    keygen_command: str = "ssh-keygen"
    copy_id_command: str = "ssh-copy-id"
    ssh_command: str = "ssh"

    verify_timeout: int = 10
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @classmethod
    def load(cls, path: Optional[Path] = None, required: bool = False) -> "Config":
        """
        Load configuration from file, falling back to defaults.

        Args:
            path: Config file; defaults to $KEYHELPER_CONFIG or ~/.keyhelper/config.yaml
            required: The file was named explicitly, so it must exist

        Raises:
            FileNotFoundError: ``required`` and the file is missing
            ValueError: the file is not a mapping or a value has the wrong type
        """
        path = path or default_config_path()

        if not path.exists():
            if required:
                raise FileNotFoundError(f"Config file not found: {path}")
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping of settings")
        check_types(data, path)

        return cls(
            key_dir=data.get("key_dir", DEFAULT_KEY_DIR),
            key_prefix=data.get("key_prefix", DEFAULT_KEY_PREFIX),
            key_suffix=data.get("key_suffix", DEFAULT_KEY_SUFFIX),
            port=data.get("port"),
            keygen_command=data.get("keygen_command", "ssh-keygen"),
            copy_id_command=data.get("copy_id_command", "ssh-copy-id"),
            ssh_command=data.get("ssh_command", "ssh"),
            verify_timeout=data.get("verify_timeout", 10),
            log_level=data.get("log_level", "WARNING"),
            log_file=data.get("log_file"),
        )


STRING_KEYS = (
    "key_dir", "key_prefix", "key_suffix",
    "keygen_command", "copy_id_command", "ssh_command", "log_level",
)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_types(data: dict, path: Path) -> None:
    """Reject config values of the wrong type, naming the offending key."""
    for key in STRING_KEYS:
        if key in data and not isinstance(data[key], str):
            raise ValueError(f"{path}: '{key}' must be a string, got {data[key]!r}")

    log_file = data.get("log_file")
    if log_file is not None and not isinstance(log_file, str):
        raise ValueError(f"{path}: 'log_file' must be a string, got {log_file!r}")

    port = data.get("port")
    if port is not None and not (_is_number(port) and float(port).is_integer() and 0 < port < 65536):
        raise ValueError(f"{path}: 'port' must be a number from 1 to 65535, got {port!r}")

    timeout = data.get("verify_timeout", 10)
    if not _is_number(timeout) or timeout <= 0:
        raise ValueError(f"{path}: 'verify_timeout' must be a positive number, got {timeout!r}")


def default_config_path() -> Path:
    """Config file named by $KEYHELPER_CONFIG, else the per-user default."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


@dataclass
class KeyTarget:
    """One provisioning run: which key to create and where to install it."""
    name: str = ""
    host: str = ""
    user: str = ""
    port: Optional[int] = None
    key_dir: Path = Path(DEFAULT_KEY_DIR).expanduser()
    key_prefix: str = DEFAULT_KEY_PREFIX
    key_suffix: str = DEFAULT_KEY_SUFFIX

    @classmethod
    def from_args(cls, args, config: Config) -> "KeyTarget":
        """Combine parsed CLI arguments with config defaults; CLI wins."""
        port = args.port if args.port is not None else config.port
        return cls(
            name=args.name or "",
            host=args.hostname or "",
            user=args.user or "",
            port=int(port) if port is not None else None,
            key_dir=Path(config.key_dir).expanduser(),
            key_prefix=config.key_prefix,
            key_suffix=config.key_suffix,
        )

    @property
    def key_filename(self) -> str:
        return f"{self.key_prefix}{self.name}{self.key_suffix}"

    @property
    def key_path(self) -> Path:
        return self.key_dir / self.key_filename

    @property
    def public_key_path(self) -> Path:
        # Append rather than with_suffix(): key names may contain dots
        return self.key_dir / f"{self.key_filename}.pub"

    @property
    def port_args(self) -> list[str]:
        """The ``-p PORT`` fragment, or nothing when no port was chosen."""
        if self.port is None:
            return []
        return ["-p", str(self.port)]

    @property
    def destination(self) -> str:
        return f"{self.user}@{self.host}"

    def missing_fields(self) -> list[str]:
        """Required fields that are empty, in flag order."""
        return [field for field in REQUIRED_FLAGS if not getattr(self, field)]


def validate_target(target: KeyTarget) -> None:
    """Raise UsageError naming every required flag that was not supplied."""
    missing = target.missing_fields()
    if missing:
        flags = ", ".join(REQUIRED_FLAGS[field] for field in missing)
        raise UsageError(f"Missing required arguments: {flags}")
