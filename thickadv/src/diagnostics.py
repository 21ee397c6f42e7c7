"""
Diagnostics on thickness tendencies.
"""

import numpy as np

from .mesh import MeshDescriptor


def net_mass_tendency(mesh: MeshDescriptor, tend: np.ndarray) -> np.ndarray:
    """
    Area-weighted sum of the tendency over all cells, per level.

    Zero up to round-off for flux-form terms on a closed mesh.

    Returns:
        Array of shape (n_vert_levels,)
    """
    return tend @ mesh.area_cell


def max_abs_tendency(tend: np.ndarray) -> float:
    return float(np.max(np.abs(tend))) if tend.size else 0.0
