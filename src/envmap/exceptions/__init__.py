"""Exception hierarchy for envmap."""

from .base import EnvMapError
from .config import ConfigurationError, InvalidConfigError
from .input import InputError, MalformedInputError

__all__ = [
    "EnvMapError",
    "ConfigurationError",
    "InvalidConfigError",
    "InputError",
    "MalformedInputError",
]
