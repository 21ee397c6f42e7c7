"""
Unstructured, edge-based mesh description for horizontal flux accumulation.

Cell-centered finite volume mesh on polygonal cells:
- area_cell: Horizontal cell areas (n_cells)
- dv_edge: Edge lengths used as flux-crossing widths (n_edges)
- edges_on_cell: Edges bounding each cell, padded with -1 (n_cells, max_edges)
- edge_sign_on_cell: +1/-1 orientation of each edge relative to the cell
- max_level_edge_bot: Number of active vertical levels at each edge (n_edges)

All indices are 0-based. -1 marks a missing cell (domain boundary) in
cells_on_edge and padding in edges_on_cell.
"""

import dataclasses
import numpy as np
from dataclasses import dataclass
from typing import Optional

from .errors import MeshIntegrityError


@dataclass
class MeshDescriptor:
    """
    Read-only geometry and connectivity of an edge-based mesh.

    The per-cell edge lists are also stored flattened (cell-major, local edge
    order) with CSR offsets:
    - cell_edge_offsets: Start of each cell's edges (n_cells + 1)
    - cell_edge_ids: Edge index of each (cell, local edge) pair
    - cell_edge_signs: Sign of each (cell, local edge) pair
    - inv_area_cell: 1 / area_cell
    """
    area_cell: np.ndarray
    dv_edge: np.ndarray
    n_edges_on_cell: np.ndarray
    edges_on_cell: np.ndarray
    edge_sign_on_cell: np.ndarray
    max_level_edge_bot: np.ndarray
    n_vert_levels: int
    cells_on_edge: Optional[np.ndarray] = None
    max_level_cell: Optional[np.ndarray] = None

    def __post_init__(self):
        self.area_cell = np.asarray(self.area_cell, dtype=np.float64)
        self.dv_edge = np.asarray(self.dv_edge, dtype=np.float64)
        self.n_edges_on_cell = np.asarray(self.n_edges_on_cell, dtype=np.int64)
        self.edges_on_cell = np.atleast_2d(np.asarray(self.edges_on_cell, dtype=np.int64))
        self.edge_sign_on_cell = np.atleast_2d(np.asarray(self.edge_sign_on_cell, dtype=np.int64))
        self.max_level_edge_bot = np.asarray(self.max_level_edge_bot, dtype=np.int64)
        self.n_vert_levels = int(self.n_vert_levels)
        if self.cells_on_edge is not None:
            self.cells_on_edge = np.asarray(self.cells_on_edge, dtype=np.int64).reshape(-1, 2)
        if self.max_level_cell is not None:
            self.max_level_cell = np.asarray(self.max_level_cell, dtype=np.int64)

        self.n_cells = len(self.area_cell)
        self.n_edges = len(self.dv_edge)
        self.max_edges = self.edges_on_cell.shape[1]

        # The flattened arrays below need per-cell arrays with one row per cell
        if self.n_edges_on_cell.shape != (self.n_cells,):
            raise MeshIntegrityError(f"n_edges_on_cell has shape {self.n_edges_on_cell.shape}, "
                                     f"expected ({self.n_cells},)")
        if self.edges_on_cell.shape[0] != self.n_cells or \
                self.edge_sign_on_cell.shape != self.edges_on_cell.shape:
            raise MeshIntegrityError(f"edges_on_cell {self.edges_on_cell.shape} and "
                                     f"edge_sign_on_cell {self.edge_sign_on_cell.shape} "
                                     f"must both have {self.n_cells} rows")

        # Out-of-range counts are clipped here and reported by validate_mesh
        counts = np.clip(self.n_edges_on_cell, 0, self.max_edges)
        self.cell_edge_offsets = np.zeros(self.n_cells + 1, dtype=np.int64)
        self.cell_edge_offsets[1:] = np.cumsum(counts)

        used = np.arange(self.max_edges)[None, :] < counts[:, None]
        self.cell_edge_ids = self.edges_on_cell[used]
        self.cell_edge_signs = self.edge_sign_on_cell[used].astype(np.float64)

    @property
    def inv_area_cell(self) -> np.ndarray:
        """1 / area_cell; zero areas give inf."""
        with np.errstate(divide='ignore'):
            return 1.0 / np.asarray(self.area_cell, dtype=np.float64)

    @property
    def n_cell_edges(self) -> int:
        """Total number of (cell, local edge) pairs."""
        return int(self.cell_edge_offsets[-1])

    def with_max_level_edge_bot(self, levels: np.ndarray) -> 'MeshDescriptor':
        """Copy of the mesh with different per-edge active level counts."""
        return dataclasses.replace(self, max_level_edge_bot=np.array(levels, dtype=np.int64))

    @classmethod
    def from_cells_on_edge(cls, area_cell: np.ndarray, dv_edge: np.ndarray,
                           n_edges_on_cell: np.ndarray, edges_on_cell: np.ndarray,
                           cells_on_edge: np.ndarray, n_vert_levels: int,
                           max_level_cell: np.ndarray = None,
                           max_level_edge_bot: np.ndarray = None) -> 'MeshDescriptor':
        """
        Build a mesh, deriving edge signs and edge level counts from connectivity.

        The edge normal points from cells_on_edge[e, 0] to cells_on_edge[e, 1],
        so the sign is -1 for the first cell (outflow) and +1 for the second.

        Args:
            area_cell, dv_edge: Cell areas and edge lengths
            n_edges_on_cell, edges_on_cell: Edges bounding each cell
            cells_on_edge: Cells on either side of each edge (n_edges, 2), -1 if none
            n_vert_levels: Number of vertical levels
            max_level_cell: Active levels per cell; the edge bottom is the deeper side
            max_level_edge_bot: Active levels per edge, overrides max_level_cell
        """
        n_edges_on_cell = np.asarray(n_edges_on_cell, dtype=np.int64)
        edges_on_cell = np.atleast_2d(np.asarray(edges_on_cell, dtype=np.int64))
        cells_on_edge = np.asarray(cells_on_edge, dtype=np.int64).reshape(-1, 2)
        n_cells, max_edges = edges_on_cell.shape
        n_edges = len(cells_on_edge)

        if n_edges_on_cell.shape != (n_cells,):
            raise MeshIntegrityError(f"n_edges_on_cell has shape {n_edges_on_cell.shape}, "
                                     f"expected ({n_cells},)")
        used = np.arange(max_edges)[None, :] < n_edges_on_cell[:, None]
        if np.any(used & ((edges_on_cell < 0) | (edges_on_cell >= n_edges))):
            raise MeshIntegrityError(f"edges_on_cell has entries outside [0, {n_edges})")
        if np.any((cells_on_edge < -1) | (cells_on_edge >= n_cells)):
            raise MeshIntegrityError(f"cells_on_edge has entries outside [-1, {n_cells})")

        cells = np.broadcast_to(np.arange(n_cells)[:, None], edges_on_cell.shape)
        safe_edges = np.where(used, edges_on_cell, 0)
        first_cell = cells_on_edge[safe_edges, 0]
        signs = np.where(first_cell == cells, -1, 1)
        signs = np.where(used, signs, 0)

        if max_level_edge_bot is None:
            if max_level_cell is not None:
                max_level_cell = np.asarray(max_level_cell, dtype=np.int64)
                if max_level_cell.shape != (n_cells,):
                    raise MeshIntegrityError(f"max_level_cell has shape {max_level_cell.shape}, "
                                             f"expected ({n_cells},)")
                c1 = cells_on_edge[:, 0]
                c2 = cells_on_edge[:, 1]
                lev1 = np.where(c1 >= 0, max_level_cell[np.maximum(c1, 0)], 0)
                lev2 = np.where(c2 >= 0, max_level_cell[np.maximum(c2, 0)], 0)
                max_level_edge_bot = np.maximum(lev1, lev2)
            else:
                max_level_edge_bot = np.full(len(cells_on_edge), n_vert_levels, dtype=np.int64)

        return cls(area_cell=area_cell, dv_edge=dv_edge,
                   n_edges_on_cell=n_edges_on_cell, edges_on_cell=edges_on_cell,
                   edge_sign_on_cell=signs, max_level_edge_bot=max_level_edge_bot,
                   n_vert_levels=n_vert_levels, cells_on_edge=cells_on_edge,
                   max_level_cell=max_level_cell)

    @classmethod
    def periodic_quad(cls, nx: int, ny: int, n_vert_levels: int,
                      dx: float = 1.0, dy: float = 1.0) -> 'MeshDescriptor':
        """
        Create a doubly periodic rectangular mesh (no boundary edges).

        Cell (i, j) has index j * nx + i. Edges with an x-normal come first
        (index j * nx + i, between (i, j) and (i + 1, j)), then edges with a
        y-normal (index nx * ny + j * nx + i, between (i, j) and (i, j + 1)).
        Local edge order is east, north, west, south.

        Args:
            nx, ny: Number of cells in each direction (at least 2)
            n_vert_levels: Number of vertical levels
            dx, dy: Cell sizes
        """
        if nx < 2 or ny < 2:
            raise ValueError("Periodic mesh needs at least 2 cells in each direction")

        i, j = np.meshgrid(np.arange(nx), np.arange(ny))
        i = i.ravel()
        j = j.ravel()
        n_cells = nx * ny
        cell = j * nx + i

        x_edge = cell
        y_edge = n_cells + cell
        cells_on_edge = np.zeros((2 * n_cells, 2), dtype=np.int64)
        cells_on_edge[x_edge, 0] = cell
        cells_on_edge[x_edge, 1] = j * nx + (i + 1) % nx
        cells_on_edge[y_edge, 0] = cell
        cells_on_edge[y_edge, 1] = ((j + 1) % ny) * nx + i

        dv_edge = np.concatenate([np.full(n_cells, dy), np.full(n_cells, dx)])

        edges_on_cell = np.stack([
            x_edge,                                 # east
            y_edge,                                 # north
            j * nx + (i - 1) % nx,                  # west
            n_cells + ((j - 1) % ny) * nx + i,      # south
        ], axis=1)

        return cls.from_cells_on_edge(
            area_cell=np.full(n_cells, dx * dy), dv_edge=dv_edge,
            n_edges_on_cell=np.full(n_cells, 4), edges_on_cell=edges_on_cell,
            cells_on_edge=cells_on_edge, n_vert_levels=n_vert_levels)

    @classmethod
    def channel_quad(cls, nx: int, ny: int, n_vert_levels: int,
                     dx: float = 1.0, dy: float = 1.0) -> 'MeshDescriptor':
        """
        Create a rectangular channel: periodic in x, walls at the south and north.

        Edges with an x-normal come first as in periodic_quad. Edges with a
        y-normal follow in ny + 1 rows; row j separates cell rows j - 1 and j,
        rows 0 and ny are boundary edges with a single cell.

        Args:
            nx: Number of cells along the channel (at least 2)
            ny: Number of cells across the channel (at least 1)
            n_vert_levels: Number of vertical levels
            dx, dy: Cell sizes
        """
        if nx < 2 or ny < 1:
            raise ValueError("Channel mesh needs nx >= 2 and ny >= 1")

        i, j = np.meshgrid(np.arange(nx), np.arange(ny))
        i = i.ravel()
        j = j.ravel()
        n_cells = nx * ny
        cell = j * nx + i

        n_y_edges = nx * (ny + 1)
        cells_on_edge = np.full((n_cells + n_y_edges, 2), -1, dtype=np.int64)
        cells_on_edge[cell, 0] = cell
        cells_on_edge[cell, 1] = j * nx + (i + 1) % nx

        ei, ej = np.meshgrid(np.arange(nx), np.arange(ny + 1))
        ei = ei.ravel()
        ej = ej.ravel()
        y_edge = n_cells + ej * nx + ei
        south = np.where(ej > 0, (ej - 1) * nx + ei, -1)
        north = np.where(ej < ny, ej * nx + ei, -1)
        cells_on_edge[y_edge, 0] = south
        cells_on_edge[y_edge, 1] = north

        dv_edge = np.concatenate([np.full(n_cells, dy), np.full(n_y_edges, dx)])

        edges_on_cell = np.stack([
            cell,                                   # east
            n_cells + (j + 1) * nx + i,             # north
            j * nx + (i - 1) % nx,                  # west
            n_cells + j * nx + i,                   # south
        ], axis=1)

        return cls.from_cells_on_edge(
            area_cell=np.full(n_cells, dx * dy), dv_edge=dv_edge,
            n_edges_on_cell=np.full(n_cells, 4), edges_on_cell=edges_on_cell,
            cells_on_edge=cells_on_edge, n_vert_levels=n_vert_levels)
