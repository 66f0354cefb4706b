"""Version information for ssh-key-helper."""

__version__ = "0.1.0"
