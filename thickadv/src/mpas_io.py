"""
Reading and writing MPAS mesh files.

MPAS meshes are netCDF4 files, which are HDF5 underneath, so h5py reads them
directly. MPAS connectivity is 1-based with 0 for "no cell"; MeshDescriptor
is 0-based with -1.
"""

import logging
from pathlib import Path

import h5py
import numpy as np

from .errors import MeshIntegrityError
from .mesh import MeshDescriptor

logger = logging.getLogger(__name__)

REQUIRED_VARIABLES = ('areaCell', 'dvEdge', 'nEdgesOnCell', 'edgesOnCell', 'cellsOnEdge')


def _read(f: h5py.File, name: str, ndim: int) -> np.ndarray:
    """Read a variable, dropping a leading Time axis if present."""
    data = np.array(f[name])
    if data.ndim == ndim + 1:
        data = data[0]
    return data


def _to_zero_based(index: np.ndarray) -> np.ndarray:
    return index.astype(np.int64) - 1


def load_mpas_mesh(path, n_vert_levels: int = None) -> MeshDescriptor:
    """
    Load a MeshDescriptor from an MPAS mesh file.

    Edge signs and edge level counts are read when present and derived from
    cellsOnEdge and maxLevelCell otherwise.

    Args:
        path: Path to the netCDF4/HDF5 mesh file
        n_vert_levels: Number of vertical levels; read from the file if None
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"MPAS mesh file not found: {path}")

    logger.info("Loading MPAS mesh from %s", path)
    with h5py.File(path, 'r') as f:
        missing = [name for name in REQUIRED_VARIABLES if name not in f]
        if missing:
            raise MeshIntegrityError(f"{path} is missing mesh variables: {', '.join(missing)}")

        area_cell = _read(f, 'areaCell', 1)
        dv_edge = _read(f, 'dvEdge', 1)
        n_edges_on_cell = _read(f, 'nEdgesOnCell', 1).astype(np.int64)
        edges_on_cell = _to_zero_based(_read(f, 'edgesOnCell', 2))
        cells_on_edge = _to_zero_based(_read(f, 'cellsOnEdge', 2))

        max_level_cell = _read(f, 'maxLevelCell', 1) if 'maxLevelCell' in f else None
        max_level_edge_bot = _read(f, 'maxLevelEdgeBot', 1) if 'maxLevelEdgeBot' in f else None
        edge_sign_on_cell = _read(f, 'edgeSignOnCell', 2) if 'edgeSignOnCell' in f else None

        if n_vert_levels is None:
            if 'nVertLevels' in f:
                n_vert_levels = len(f['nVertLevels'])
            elif 'refBottomDepth' in f:
                n_vert_levels = len(f['refBottomDepth'])
            elif max_level_cell is not None:
                n_vert_levels = int(np.max(max_level_cell, initial=1))
            else:
                n_vert_levels = 1

    # Padding entries in MPAS files may hold 0 or repeat the last edge
    used = np.arange(edges_on_cell.shape[1])[None, :] < n_edges_on_cell[:, None]
    edges_on_cell = np.where(used, edges_on_cell, -1)

    if edge_sign_on_cell is None:
        mesh = MeshDescriptor.from_cells_on_edge(
            area_cell=area_cell, dv_edge=dv_edge,
            n_edges_on_cell=n_edges_on_cell, edges_on_cell=edges_on_cell,
            cells_on_edge=cells_on_edge, n_vert_levels=n_vert_levels,
            max_level_cell=max_level_cell, max_level_edge_bot=max_level_edge_bot)
    else:
        if max_level_edge_bot is None:
            max_level_edge_bot = MeshDescriptor.from_cells_on_edge(
                area_cell=area_cell, dv_edge=dv_edge,
                n_edges_on_cell=n_edges_on_cell, edges_on_cell=edges_on_cell,
                cells_on_edge=cells_on_edge, n_vert_levels=n_vert_levels,
                max_level_cell=max_level_cell).max_level_edge_bot
        mesh = MeshDescriptor(
            area_cell=area_cell, dv_edge=dv_edge,
            n_edges_on_cell=n_edges_on_cell, edges_on_cell=edges_on_cell,
            edge_sign_on_cell=np.where(used, edge_sign_on_cell, 0),
            max_level_edge_bot=max_level_edge_bot, n_vert_levels=n_vert_levels,
            cells_on_edge=cells_on_edge, max_level_cell=max_level_cell)

    logger.info("Loaded mesh: %d cells, %d edges, %d levels",
                mesh.n_cells, mesh.n_edges, mesh.n_vert_levels)
    return mesh


def write_mpas_mesh(path, mesh: MeshDescriptor) -> None:
    """
    Write the mesh variables used by load_mpas_mesh in MPAS layout.

    Requires mesh.cells_on_edge.
    """
    if mesh.cells_on_edge is None:
        raise MeshIntegrityError("Writing an MPAS mesh requires cells_on_edge")

    with h5py.File(Path(path), 'w') as f:
        levels = f.create_dataset('nVertLevels', data=np.arange(mesh.n_vert_levels, dtype=np.int32))
        levels.make_scale('nVertLevels')

        f.create_dataset('areaCell', data=mesh.area_cell)
        f.create_dataset('dvEdge', data=mesh.dv_edge)
        f.create_dataset('nEdgesOnCell', data=mesh.n_edges_on_cell.astype(np.int32))
        f.create_dataset('edgesOnCell', data=(mesh.edges_on_cell + 1).astype(np.int32))
        f.create_dataset('cellsOnEdge', data=(mesh.cells_on_edge + 1).astype(np.int32))
        f.create_dataset('edgeSignOnCell', data=mesh.edge_sign_on_cell.astype(np.int32))
        f.create_dataset('maxLevelEdgeBot', data=mesh.max_level_edge_bot.astype(np.int32))
        if mesh.max_level_cell is not None:
            f.create_dataset('maxLevelCell', data=mesh.max_level_cell.astype(np.int32))
