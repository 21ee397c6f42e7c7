"""
thickadv - Horizontal Thickness Advection
=========================================

Re-exports all public components from thickadv.src
"""

from thickadv.src import (
    # Errors
    ThickAdvError,
    ConfigurationError,
    MeshIntegrityError,
    FieldShapeError,
    TendencyStatus,
    # Configuration
    HadvConfig,
    AdvectionGate,
    # Mesh
    MeshDescriptor,
    load_mpas_mesh,
    write_mpas_mesh,
    # Validation
    validate_mesh,
    validate_fields,
    # Tendency terms
    TendencyTerm,
    ThicknessHorizontalAdvection,
    CompositeTendency,
    # Diagnostics
    net_mass_tendency,
    max_abs_tendency,
)
from thickadv.src import __version__

__all__ = [
    'ThickAdvError',
    'ConfigurationError',
    'MeshIntegrityError',
    'FieldShapeError',
    'TendencyStatus',
    'HadvConfig',
    'AdvectionGate',
    'MeshDescriptor',
    'load_mpas_mesh',
    'write_mpas_mesh',
    'validate_mesh',
    'validate_fields',
    'TendencyTerm',
    'ThicknessHorizontalAdvection',
    'CompositeTendency',
    'net_mass_tendency',
    'max_abs_tendency',
]
