"""Tests for keyhelper/config.py - YAML defaults and the run target."""

import argparse
from pathlib import Path

import pytest
import yaml

from keyhelper.config import (
    CONFIG_ENV_VAR,
    Config,
    KeyTarget,
    default_config_path,
    validate_target,
)
from keyhelper.errors import UsageError


def make_args(name=None, hostname=None, user=None, port=None):
    return argparse.Namespace(name=name, hostname=hostname, user=user, port=port)


class TestConfig:
    """Tests for Config dataclass."""

    def test_default_values(self):
        config = Config()
        assert config.key_dir == "~/.ssh"
        assert config.key_prefix == "id_"
        assert config.key_suffix == "_rsa"
        assert config.port is None
        assert config.keygen_command == "ssh-keygen"
        assert config.copy_id_command == "ssh-copy-id"
        assert config.ssh_command == "ssh"
        assert config.verify_timeout == 10
        assert config.log_level == "WARNING"
        assert config.log_file is None


class TestConfigLoad:
    """Tests for Config.load()."""

    def test_load_nonexistent_file(self, tmp_path):
        config = Config.load(tmp_path / "nonexistent.yaml")
        assert config == Config()

    def test_load_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert Config.load(config_file) == Config()

    def test_load_partial_config(self, tmp_path):
        config_file = tmp_path / "partial.yaml"
        config_file.write_text("key_suffix: _ed25519\nport: 2222\n")
        config = Config.load(config_file)
        assert config.key_suffix == "_ed25519"
        assert config.port == 2222
        # Defaults should still apply
        assert config.key_prefix == "id_"
        assert config.ssh_command == "ssh"

    def test_load_full_config(self, tmp_path):
        config_file = tmp_path / "full.yaml"
        data = {
            "key_dir": "/srv/keys",
            "key_prefix": "deploy_",
            "key_suffix": "_ed25519",
            "port": 2200,
            "keygen_command": "/opt/bin/ssh-keygen",
            "copy_id_command": "/opt/bin/ssh-copy-id",
            "ssh_command": "/opt/bin/ssh",
            "verify_timeout": 30,
            "log_level": "DEBUG",
            "log_file": "~/.keyhelper/logs/keyhelper.log",
        }
        config_file.write_text(yaml.dump(data))
        config = Config.load(config_file)

        assert config.key_dir == "/srv/keys"
        assert config.key_prefix == "deploy_"
        assert config.port == 2200
        assert config.copy_id_command == "/opt/bin/ssh-copy-id"
        assert config.verify_timeout == 30
        assert config.log_file == "~/.keyhelper/logs/keyhelper.log"

    def test_load_rejects_non_mapping(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- one\n- two\n")
        with pytest.raises(ValueError):
            Config.load(config_file)

    def test_load_missing_required_file(self, tmp_path):
        """A config file named on the command line must exist."""
        missing = tmp_path / "typo.yaml"
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            Config.load(missing, required=True)

    def test_missing_default_file_is_optional(self):
        assert Config.load(required=False) == Config()

    def test_load_accepts_whole_float_port(self, tmp_path):
        config_file = tmp_path / "float-port.yaml"
        config_file.write_text("port: 2222.0\nverify_timeout: 2.5\n")
        config = Config.load(config_file)
        assert config.verify_timeout == 2.5

    @pytest.mark.parametrize(
        "content,key",
        [
            ("key_dir:\n", "key_dir"),
            ("key_prefix: 7\n", "key_prefix"),
            ("log_level: 10\n", "log_level"),
            ("ssh_command: [ssh, -v]\n", "ssh_command"),
            ("log_file: {path: x}\n", "log_file"),
            ("port: '2222'\n", "port"),
            ("port: 0\n", "port"),
            ("port: 70000\n", "port"),
            ("port: 22.5\n", "port"),
            ("port: true\n", "port"),
            ("port: .inf\n", "port"),
            ("verify_timeout: soon\n", "verify_timeout"),
            ("verify_timeout: 0\n", "verify_timeout"),
            ("verify_timeout:\n", "verify_timeout"),
        ],
    )
    def test_load_rejects_wrong_types(self, tmp_path, content, key):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text(content)
        with pytest.raises(ValueError, match=f"'{key}'"):
            Config.load(config_file)

    def test_load_uses_env_var(self, tmp_path, monkeypatch):
        config_file = tmp_path / "from-env.yaml"
        config_file.write_text("key_prefix: env_\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        assert default_config_path() == config_file
        assert Config.load().key_prefix == "env_"

    def test_default_path_without_env(self, tmp_path):
        # conftest points the default into tmp_path
        assert default_config_path() == tmp_path / "no-config.yaml"


class TestKeyTarget:
    """Tests for KeyTarget derived values."""

    def test_key_paths(self, tmp_path):
        target = KeyTarget(name="devops", host="h", user="u", key_dir=tmp_path)
        assert target.key_path == tmp_path / "id_devops_rsa"
        assert target.public_key_path == tmp_path / "id_devops_rsa.pub"

    def test_public_path_with_dotted_name(self, tmp_path):
        target = KeyTarget(name="web.prod", host="h", user="u", key_dir=tmp_path)
        assert target.key_path.name == "id_web.prod_rsa"
        assert target.public_key_path.name == "id_web.prod_rsa.pub"

    def test_custom_prefix_and_suffix(self, tmp_path):
        target = KeyTarget(
            name="ci", host="h", user="u", key_dir=tmp_path, key_prefix="k-", key_suffix="-ed25519"
        )
        assert target.key_path == tmp_path / "k-ci-ed25519"

    def test_destination(self):
        target = KeyTarget(name="n", host="10.0.0.5", user="root")
        assert target.destination == "root@10.0.0.5"

    def test_port_args(self):
        assert KeyTarget(port=2222).port_args == ["-p", "2222"]
        assert KeyTarget().port_args == []

    def test_paths_are_deterministic(self, tmp_path):
        a = KeyTarget(name="same", host="a", user="x", key_dir=tmp_path)
        b = KeyTarget(name="same", host="b", user="y", port=22, key_dir=tmp_path)
        assert a.key_path == b.key_path


class TestKeyTargetFromArgs:
    """Tests for KeyTarget.from_args()."""

    def test_from_args(self, isolated_home):
        target = KeyTarget.from_args(make_args("devops", "example.com", "deploy"), Config())
        assert target.name == "devops"
        assert target.host == "example.com"
        assert target.user == "deploy"
        assert target.port is None
        assert target.key_dir == isolated_home / ".ssh"

    def test_cli_port_overrides_config(self):
        target = KeyTarget.from_args(make_args("n", "h", "u", port=2201), Config(port=2200))
        assert target.port == 2201

    def test_config_port_used_when_cli_silent(self):
        target = KeyTarget.from_args(make_args("n", "h", "u"), Config(port=2200))
        assert target.port == 2200

    def test_missing_values_become_empty(self):
        target = KeyTarget.from_args(make_args(), Config())
        assert (target.name, target.host, target.user) == ("", "", "")

    def test_config_key_naming(self, tmp_path):
        config = Config(key_dir=str(tmp_path), key_suffix="_ed25519")
        target = KeyTarget.from_args(make_args("ops", "h", "u"), config)
        assert target.key_path == Path(tmp_path) / "id_ops_ed25519"


class TestValidateTarget:
    """Tests for validate_target()."""

    def test_valid_target(self):
        validate_target(KeyTarget(name="n", host="h", user="u"))

    def test_all_missing(self):
        with pytest.raises(UsageError) as exc_info:
            validate_target(KeyTarget())
        message = str(exc_info.value)
        assert "-n/--name" in message
        assert "-H/--hostname" in message
        assert "-u/--user" in message

    @pytest.mark.parametrize(
        "field,flag",
        [("name", "-n/--name"), ("host", "-H/--hostname"), ("user", "-u/--user")],
    )
    def test_single_missing_field_is_named(self, field, flag):
        values = {"name": "n", "host": "h", "user": "u"}
        values[field] = ""
        with pytest.raises(UsageError) as exc_info:
            validate_target(KeyTarget(**values))

        message = str(exc_info.value)
        assert flag in message
        for other_flag in {"-n/--name", "-H/--hostname", "-u/--user"} - {flag}:
            assert other_flag not in message
