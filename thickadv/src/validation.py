"""
Integrity checks for meshes and fields.

The kernels trust their inputs. These checks run once per mesh build (and,
optionally, once per call for field shapes) and always before anything is
written into the tendency array.
"""

import numpy as np

from .errors import MeshIntegrityError, FieldShapeError
from .mesh import MeshDescriptor


def _fail_if(bad: np.ndarray, what: str, label: str):
    """Raise for the first offending index in a boolean mask."""
    if np.any(bad):
        first = int(np.flatnonzero(bad)[0])
        raise MeshIntegrityError(f"{int(np.count_nonzero(bad))} {what} (first: {label} {first})")


def validate_mesh(mesh: MeshDescriptor) -> None:
    """
    Check that a mesh satisfies the flux accumulation contract.

    Raises:
        MeshIntegrityError: On the first class of defect found
    """
    if mesh.n_vert_levels < 0:
        raise MeshIntegrityError(f"Negative number of vertical levels: {mesh.n_vert_levels}")
    # Per-cell array shapes are checked when the mesh is built
    if mesh.max_level_edge_bot.shape != (mesh.n_edges,):
        raise MeshIntegrityError(f"max_level_edge_bot has shape {mesh.max_level_edge_bot.shape}, "
                                 f"expected ({mesh.n_edges},)")

    # Geometry
    _fail_if(~(mesh.area_cell > 0) | ~np.isfinite(mesh.area_cell),
             "cells with non-positive area", "cell")
    _fail_if(~(mesh.dv_edge > 0) | ~np.isfinite(mesh.dv_edge),
             "edges with non-positive length", "edge")

    # Cell -> edge connectivity
    _fail_if((mesh.n_edges_on_cell < 0) | (mesh.n_edges_on_cell > mesh.max_edges),
             f"cells with edge count outside [0, {mesh.max_edges}]", "cell")

    ids = mesh.cell_edge_ids
    signs = mesh.cell_edge_signs
    _fail_if((ids < 0) | (ids >= mesh.n_edges),
             f"cell edge entries outside [0, {mesh.n_edges})", "entry")
    _fail_if((signs != 1.0) & (signs != -1.0), "cell edge signs not +1/-1", "entry")

    # Vertical extent
    _fail_if((mesh.max_level_edge_bot < 0) | (mesh.max_level_edge_bot > mesh.n_vert_levels),
             f"edges with active levels outside [0, {mesh.n_vert_levels}]", "edge")
    if mesh.max_level_cell is not None:
        _fail_if((mesh.max_level_cell < 0) | (mesh.max_level_cell > mesh.n_vert_levels),
                 f"cells with active levels outside [0, {mesh.n_vert_levels}]", "cell")

    # Each edge is seen by at most two cells, with opposite signs
    refs = np.bincount(ids, minlength=mesh.n_edges)
    _fail_if(refs > 2, "edges bounding more than two cells", "edge")
    sign_sum = np.bincount(ids, weights=signs, minlength=mesh.n_edges)
    _fail_if((refs == 2) & (sign_sum != 0.0), "shared edges with non-cancelling signs", "edge")

    if mesh.cells_on_edge is not None:
        coe = mesh.cells_on_edge
        if coe.shape != (mesh.n_edges, 2):
            raise MeshIntegrityError(f"cells_on_edge has shape {coe.shape}, expected ({mesh.n_edges}, 2)")
        _fail_if(np.any((coe < -1) | (coe >= mesh.n_cells), axis=1),
                 f"edges with neighbour cells outside [-1, {mesh.n_cells})", "edge")
        neighbours = np.count_nonzero(coe >= 0, axis=1)
        _fail_if(refs != neighbours, "edges whose bounding cells disagree with cells_on_edge", "edge")


def validate_fields(mesh: MeshDescriptor, normal_velocity: np.ndarray,
                    layer_thickness_edge: np.ndarray, tend: np.ndarray) -> None:
    """
    Check field shapes against the mesh.

    Raises:
        FieldShapeError: If any array has the wrong shape or tend is not writable
    """
    edge_shape = (mesh.n_vert_levels, mesh.n_edges)
    cell_shape = (mesh.n_vert_levels, mesh.n_cells)

    for name, field in (('normal_velocity', normal_velocity),
                        ('layer_thickness_edge', layer_thickness_edge)):
        if np.shape(field) != edge_shape:
            raise FieldShapeError(f"{name} has shape {np.shape(field)}, expected {edge_shape}")

    if not isinstance(tend, np.ndarray):
        raise FieldShapeError(f"tend must be a numpy array, got {type(tend).__name__}")
    if tend.shape != cell_shape:
        raise FieldShapeError(f"tend has shape {tend.shape}, expected {cell_shape}")
    if not tend.flags.writeable:
        raise FieldShapeError("tend is read-only")
    if not np.issubdtype(tend.dtype, np.floating):
        raise FieldShapeError(f"tend must have a floating dtype, got {tend.dtype}")
