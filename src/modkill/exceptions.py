"""Exceptions raised by modkill's outer layers."""


class ModkillError(Exception):
    """Base class for errors the CLI reports and exits on."""


class ConfigError(ModkillError):
    """A configuration file could not be read or failed validation."""


class RestoreLogError(ModkillError):
    """A restore log line could not be parsed."""
