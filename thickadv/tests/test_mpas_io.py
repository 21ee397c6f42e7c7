"""
Pytest tests for MPAS mesh files.

Tests verify:
1. Written meshes load back with the same connectivity and geometry
2. Edge signs and edge levels are derived when the file lacks them
3. Index conversion from MPAS 1-based layout
4. Missing files, missing variables and bad indices are reported
"""

import h5py
import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from thickadv.src import (
    MeshDescriptor, MeshIntegrityError, load_mpas_mesh, write_mpas_mesh, validate_mesh
)


@pytest.fixture
def channel_mesh():
    return MeshDescriptor.channel_quad(nx=4, ny=3, n_vert_levels=6, dx=2.0, dy=1.0)


def write_minimal(path, mesh, n_vert_levels=None, max_level_cell=None, padding=0):
    """Write only what a bare MPAS grid file has: no signs, no edge levels."""
    edges = mesh.edges_on_cell + 1
    edges[mesh.edges_on_cell < 0] = padding
    with h5py.File(path, 'w') as f:
        f.create_dataset('areaCell', data=mesh.area_cell)
        f.create_dataset('dvEdge', data=mesh.dv_edge)
        f.create_dataset('nEdgesOnCell', data=mesh.n_edges_on_cell.astype(np.int32))
        f.create_dataset('edgesOnCell', data=edges.astype(np.int32))
        f.create_dataset('cellsOnEdge', data=(mesh.cells_on_edge + 1).astype(np.int32))
        if n_vert_levels is not None:
            f.create_dataset('refBottomDepth', data=10.0 * np.arange(1, n_vert_levels + 1))
        if max_level_cell is not None:
            f.create_dataset('maxLevelCell', data=np.asarray(max_level_cell, dtype=np.int32))


class TestRoundTrip:

    def test_write_then_load(self, tmp_path, channel_mesh):
        path = tmp_path / 'mesh.nc'
        write_mpas_mesh(path, channel_mesh)

        loaded = load_mpas_mesh(path)

        assert loaded.n_cells == channel_mesh.n_cells
        assert loaded.n_edges == channel_mesh.n_edges
        assert loaded.n_vert_levels == 6
        np.testing.assert_array_equal(loaded.cells_on_edge, channel_mesh.cells_on_edge)
        np.testing.assert_array_equal(loaded.edges_on_cell, channel_mesh.edges_on_cell)
        np.testing.assert_array_equal(loaded.edge_sign_on_cell, channel_mesh.edge_sign_on_cell)
        np.testing.assert_array_equal(loaded.max_level_edge_bot, channel_mesh.max_level_edge_bot)
        np.testing.assert_allclose(loaded.area_cell, channel_mesh.area_cell)
        np.testing.assert_allclose(loaded.dv_edge, channel_mesh.dv_edge)
        validate_mesh(loaded)

    def test_file_is_one_based(self, tmp_path, channel_mesh):
        path = tmp_path / 'mesh.nc'
        write_mpas_mesh(path, channel_mesh)

        with h5py.File(path, 'r') as f:
            cells_on_edge = np.array(f['cellsOnEdge'])

        assert cells_on_edge.min() == 0  # wall edges
        assert cells_on_edge.max() == channel_mesh.n_cells

    def test_write_requires_cells_on_edge(self, tmp_path):
        mesh = MeshDescriptor(
            area_cell=np.ones(2), dv_edge=np.ones(1),
            n_edges_on_cell=np.array([1, 1]), edges_on_cell=np.array([[0], [0]]),
            edge_sign_on_cell=np.array([[1], [-1]]), max_level_edge_bot=np.array([1]),
            n_vert_levels=1)
        with pytest.raises(MeshIntegrityError):
            write_mpas_mesh(tmp_path / 'mesh.nc', mesh)


class TestDerivedQuantities:

    def test_signs_derived_from_cells_on_edge(self, tmp_path, channel_mesh):
        path = tmp_path / 'grid.nc'
        write_minimal(path, channel_mesh, n_vert_levels=6)

        loaded = load_mpas_mesh(path)

        assert loaded.n_vert_levels == 6
        np.testing.assert_array_equal(loaded.edge_sign_on_cell, channel_mesh.edge_sign_on_cell)
        assert np.all(loaded.max_level_edge_bot == 6)

    def test_edge_levels_from_cell_levels(self, tmp_path, channel_mesh):
        path = tmp_path / 'grid.nc'
        max_level_cell = np.arange(channel_mesh.n_cells) % 6 + 1
        write_minimal(path, channel_mesh, n_vert_levels=6, max_level_cell=max_level_cell)

        loaded = load_mpas_mesh(path)

        c1 = channel_mesh.cells_on_edge[:, 0]
        c2 = channel_mesh.cells_on_edge[:, 1]
        lev1 = np.where(c1 >= 0, max_level_cell[c1], 0)
        lev2 = np.where(c2 >= 0, max_level_cell[c2], 0)
        np.testing.assert_array_equal(loaded.max_level_edge_bot, np.maximum(lev1, lev2))
        validate_mesh(loaded)

    def test_levels_from_max_level_cell(self, tmp_path, channel_mesh):
        """Without a vertical dimension the deepest cell sets the level count."""
        path = tmp_path / 'grid.nc'
        write_minimal(path, channel_mesh, max_level_cell=np.full(channel_mesh.n_cells, 4))

        assert load_mpas_mesh(path).n_vert_levels == 4

    def test_explicit_level_count(self, tmp_path, channel_mesh):
        path = tmp_path / 'grid.nc'
        write_minimal(path, channel_mesh)

        loaded = load_mpas_mesh(path, n_vert_levels=3)

        assert loaded.n_vert_levels == 3
        assert np.all(loaded.max_level_edge_bot == 3)

    def test_padding_entries_ignored(self, tmp_path):
        """Padding in edgesOnCell may repeat a real edge index."""
        mesh = MeshDescriptor.from_cells_on_edge(
            area_cell=np.ones(2), dv_edge=np.ones(2),
            n_edges_on_cell=np.array([2, 1]),
            edges_on_cell=np.array([[0, 1], [0, -1]]),
            cells_on_edge=np.array([[0, 1], [0, -1]]),
            n_vert_levels=1)
        path = tmp_path / 'grid.nc'
        write_minimal(path, mesh, padding=1)

        loaded = load_mpas_mesh(path)

        np.testing.assert_array_equal(loaded.edges_on_cell, [[0, 1], [0, -1]])
        np.testing.assert_array_equal(loaded.cell_edge_ids, [0, 1, 0])
        validate_mesh(loaded)


class TestErrors:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_mpas_mesh(tmp_path / 'nope.nc')

    def test_edge_index_out_of_range(self, tmp_path, channel_mesh):
        path = tmp_path / 'grid.nc'
        write_minimal(path, channel_mesh, n_vert_levels=6)
        with h5py.File(path, 'r+') as f:
            f['edgesOnCell'][0, 0] = channel_mesh.n_edges + 6

        with pytest.raises(MeshIntegrityError, match="edges_on_cell"):
            load_mpas_mesh(path)

    def test_missing_edge_inside_edge_count(self, tmp_path, channel_mesh):
        """A 0 (no edge) among a cell's used entries is not a valid edge."""
        path = tmp_path / 'grid.nc'
        write_minimal(path, channel_mesh, n_vert_levels=6)
        with h5py.File(path, 'r+') as f:
            f['edgesOnCell'][1, 2] = 0

        with pytest.raises(MeshIntegrityError):
            load_mpas_mesh(path)

    def test_cell_index_out_of_range(self, tmp_path, channel_mesh):
        path = tmp_path / 'grid.nc'
        write_minimal(path, channel_mesh, max_level_cell=np.full(channel_mesh.n_cells, 6))
        with h5py.File(path, 'r+') as f:
            f['cellsOnEdge'][0, 1] = channel_mesh.n_cells + 3

        with pytest.raises(MeshIntegrityError, match="cells_on_edge"):
            load_mpas_mesh(path)

    def test_missing_variable(self, tmp_path):
        path = tmp_path / 'broken.nc'
        with h5py.File(path, 'w') as f:
            f.create_dataset('areaCell', data=np.ones(3))
        with pytest.raises(MeshIntegrityError, match="dvEdge"):
            load_mpas_mesh(path)
