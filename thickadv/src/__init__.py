"""
Horizontal Thickness Advection Package
======================================

Flux-form horizontal advection tendency for layer thickness on unstructured,
edge-based (MPAS-style) meshes.

Features:
- Mesh descriptor with flattened cell-edge connectivity
- Loading meshes from MPAS netCDF4/HDF5 files
- Advection on/off gate set once from configuration
- Interchangeable kernels: reference loop, vectorized numpy, parallel numba
- One-shot mesh and field validation

Arrays (0-based indices):
    u    - normal velocity at edges [m/s], shape (n_vert_levels, n_edges)
    h    - layer thickness at edges [m], shape (n_vert_levels, n_edges)
    tend - thickness tendency at cells [m/s], shape (n_vert_levels, n_cells)

Example:
    mesh = MeshDescriptor.periodic_quad(nx=16, ny=16, n_vert_levels=10)
    term = ThicknessHorizontalAdvection(config=HadvConfig(kernel='numba'))
    term.prepare(mesh)

    tend = np.zeros((mesh.n_vert_levels, mesh.n_cells))
    term.accumulate(mesh, u, h, tend)
"""

from .errors import (
    ThickAdvError, ConfigurationError, MeshIntegrityError, FieldShapeError,
    TendencyStatus,
)
from .config import HadvConfig
from .gate import AdvectionGate
from .mesh import MeshDescriptor
from .mpas_io import load_mpas_mesh, write_mpas_mesh
from .validation import validate_mesh, validate_fields
from .kernels import hadv_loop, hadv_vectorized, hadv_numba
from .tendency import TendencyTerm, ThicknessHorizontalAdvection, CompositeTendency
from .diagnostics import net_mass_tendency, max_abs_tendency

__all__ = [
    # Errors
    'ThickAdvError',
    'ConfigurationError',
    'MeshIntegrityError',
    'FieldShapeError',
    'TendencyStatus',

    # Configuration
    'HadvConfig',
    'AdvectionGate',

    # Mesh
    'MeshDescriptor',
    'load_mpas_mesh',
    'write_mpas_mesh',

    # Validation
    'validate_mesh',
    'validate_fields',

    # Kernels
    'hadv_loop',
    'hadv_vectorized',
    'hadv_numba',

    # Tendency terms
    'TendencyTerm',
    'ThicknessHorizontalAdvection',
    'CompositeTendency',

    # Diagnostics
    'net_mass_tendency',
    'max_abs_tendency',
]

__version__ = '1.0.0'
