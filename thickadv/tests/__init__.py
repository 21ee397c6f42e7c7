"""
Tests for the horizontal thickness advection package.

Run tests with pytest:
    pytest thickadv/tests/ -v

Or run individual test files:
    pytest thickadv/tests/test_tendency.py -v
    pytest thickadv/tests/test_kernels.py -v
"""

from .meshes import two_cell_mesh, random_fields

__all__ = [
    'two_cell_mesh',
    'random_fields',
]
