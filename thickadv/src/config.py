"""
Run-time options for the horizontal thickness advection term.
"""

import json
import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import numpy as np

from .errors import ConfigurationError

KERNEL_NAMES = ('loop', 'vectorized', 'numba')

# MPAS namelist names accepted as aliases
_NAMELIST_ALIASES = {
    'config_disable_thick_hadv': 'disable_thick_hadv',
}

# Fortran namelist and JSON spellings of logicals
_TRUE = {'true', '.true.', 't', '.t.'}
_FALSE = {'false', '.false.', 'f', '.f.'}


def _as_bool(name: str, value: Any) -> bool:
    """Read a logical option, rejecting values whose truth is ambiguous."""
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise ConfigurationError(f"Option {name} must be true or false, got {value!r}")


@dataclass
class HadvConfig:
    """Configuration for horizontal thickness advection."""
    disable_thick_hadv: bool = False
    kernel: str = 'vectorized'  # Options: 'loop', 'vectorized', 'numba'
    check_mesh: bool = True     # Validate mesh once in prepare()
    check_fields: bool = True   # Check field shapes before the first write

    def __post_init__(self):
        if self.kernel not in KERNEL_NAMES:
            raise ConfigurationError(f"Unknown kernel: {self.kernel}. "
                                     f"Options: {', '.join(repr(k) for k in KERNEL_NAMES)}")
        for name in ('disable_thick_hadv', 'check_mesh', 'check_fields'):
            setattr(self, name, _as_bool(name, getattr(self, name)))

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> 'HadvConfig':
        """
        Build a config from a mapping.

        Args:
            options: Option names (field names or MPAS namelist names) to values
        """
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in options.items():
            name = _NAMELIST_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown option: {key}")
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path) -> 'HadvConfig':
        """Load a config from a JSON file holding a single object."""
        with open(Path(path), 'r') as f:
            options = json.load(f)
        if not isinstance(options, dict):
            raise ConfigurationError(f"Expected a JSON object in {path}")
        return cls.from_dict(options)

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)
