"""
Exceptions and status codes for the thickness advection package.
"""

from enum import IntEnum


class ThickAdvError(Exception):
    """Base exception for thickness advection errors."""


class ConfigurationError(ThickAdvError, ValueError):
    """Invalid or unknown configuration option."""


class MeshIntegrityError(ThickAdvError, ValueError):
    """Mesh geometry or connectivity that breaks the flux accumulation contract."""


class FieldShapeError(ThickAdvError, ValueError):
    """Field arrays whose shapes do not match the mesh."""


class TendencyStatus(IntEnum):
    """Status returned by tendency terms."""
    SUCCESS = 0
    MESH_INTEGRITY = 1  # reserved, never returned by the current kernels


__all__ = [
    'ThickAdvError',
    'ConfigurationError',
    'MeshIntegrityError',
    'FieldShapeError',
    'TendencyStatus',
]
