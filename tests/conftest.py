"""Shared fixtures: isolated HOME and real OpenSSH key pairs."""

import logging
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point HOME and the default config file into the test's temp dir."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("KEYHELPER_CONFIG", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setattr("keyhelper.config.DEFAULT_CONFIG_FILE", tmp_path / "no-config.yaml")
    yield home
    # main() binds handlers to the captured stderr of the test that ran it
    logging.getLogger("keyhelper").handlers.clear()


@pytest.fixture
def keypair_factory():
    """Return a function writing an Ed25519 key pair in OpenSSH format."""

    def write_keypair(key_path: Path, comment: str = "tester@testhost-2025-11-11") -> Path:
        key_path = Path(key_path)
        key_path.parent.mkdir(parents=True, exist_ok=True)

        private_key = Ed25519PrivateKey.generate()
        key_path.write_bytes(
            private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.OpenSSH,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
        key_path.chmod(0o600)

        public_bytes = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.OpenSSH,
            format=serialization.PublicFormat.OpenSSH,
        )
        pub_path = Path(f"{key_path}.pub")
        pub_path.write_bytes(public_bytes + b" " + comment.encode() + b"\n")
        return key_path

    return write_keypair
