"""
Flux-divergence kernels for horizontal thickness advection.

All kernels share one signature and add into tend in place:

    for each cell c, local edge i, level k < max_level_edge_bot[e]:
        flux = u[k, e] * dv_edge[e] * h[k, e]
        tend[k, c] += sign[c, i] * flux * inv_area[c]

The (cell, local edge) pairs are given flattened with CSR offsets. The
summation order into each tend[k, c] is the same in every kernel, so results
are reproducible for identical inputs.
"""

import numpy as np
from numba import njit, prange


def hadv_loop(offsets, edge_ids, edge_signs, inv_area, dv_edge,
              max_level_edge_bot, normal_velocity, layer_thickness_edge, tend):
    """Reference kernel: plain loops in cell, local edge, level order."""
    n_cells = len(offsets) - 1
    for c in range(n_cells):
        inv_area_c = inv_area[c]
        for j in range(offsets[c], offsets[c + 1]):
            e = edge_ids[j]
            s = edge_signs[j]
            for k in range(max_level_edge_bot[e]):
                flux = normal_velocity[k, e] * dv_edge[e] * layer_thickness_edge[k, e]
                tend[k, c] += s * flux * inv_area_c


def hadv_vectorized(offsets, edge_ids, edge_signs, inv_area, dv_edge,
                    max_level_edge_bot, normal_velocity, layer_thickness_edge, tend):
    """
    Vectorized kernel.

    Contributions are laid out in cell, local edge, level order and scattered
    with np.add.at, which is unbuffered and applies repeated indices in order.
    """
    n_cells = len(offsets) - 1
    if len(edge_ids) == 0:
        return

    cell_of_pair = np.repeat(np.arange(n_cells), np.diff(offsets))
    n_levels = max_level_edge_bot[edge_ids]
    total = int(n_levels.sum())
    if total == 0:
        return

    # Expand every (cell, local edge) pair into its active levels
    pair = np.repeat(np.arange(len(edge_ids)), n_levels)
    start = np.cumsum(n_levels) - n_levels
    k = np.arange(total) - np.repeat(start, n_levels)

    e = edge_ids[pair]
    c = cell_of_pair[pair]
    flux = normal_velocity[k, e] * dv_edge[e] * layer_thickness_edge[k, e]
    np.add.at(tend, (k, c), edge_signs[pair] * flux * inv_area[c])


@njit(parallel=True, cache=True)
def _hadv_numba(offsets, edge_ids, edge_signs, inv_area, dv_edge,
                max_level_edge_bot, normal_velocity, layer_thickness_edge, tend):
    n_cells = offsets.shape[0] - 1
    # Each iteration writes only column c of tend
    for c in prange(n_cells):
        inv_area_c = inv_area[c]
        for j in range(offsets[c], offsets[c + 1]):
            e = edge_ids[j]
            s = edge_signs[j]
            for k in range(max_level_edge_bot[e]):
                flux = normal_velocity[k, e] * dv_edge[e] * layer_thickness_edge[k, e]
                tend[k, c] += s * flux * inv_area_c


def hadv_numba(offsets, edge_ids, edge_signs, inv_area, dv_edge,
               max_level_edge_bot, normal_velocity, layer_thickness_edge, tend):
    """Parallel kernel, cells distributed over threads."""
    _hadv_numba(offsets, edge_ids, edge_signs, inv_area, dv_edge,
                max_level_edge_bot,
                np.ascontiguousarray(normal_velocity, dtype=np.float64),
                np.ascontiguousarray(layer_thickness_edge, dtype=np.float64),
                tend)


KERNELS = {
    'loop': hadv_loop,
    'vectorized': hadv_vectorized,
    'numba': hadv_numba,
}
