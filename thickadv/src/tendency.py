"""
Tendency terms for layer thickness.

Each term adds its contribution into a caller-owned tendency array; the
caller zeroes it once per evaluation and then lets every term accumulate.

Notation:
    u    - normal velocity at edges, shape (n_vert_levels, n_edges)
    h    - layer thickness interpolated to edges, same shape as u
    tend - thickness tendency at cells, shape (n_vert_levels, n_cells)
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from typing import List

from .config import HadvConfig
from .errors import TendencyStatus
from .gate import AdvectionGate
from .kernels import KERNELS
from .mesh import MeshDescriptor
from .validation import validate_mesh, validate_fields

logger = logging.getLogger(__name__)


class TendencyTerm(ABC):
    """Abstract base class for thickness tendency terms."""

    @abstractmethod
    def accumulate(self, mesh: MeshDescriptor, normal_velocity: np.ndarray,
                   layer_thickness_edge: np.ndarray, tend: np.ndarray) -> TendencyStatus:
        """
        Add this term's contribution to tend in place.

        Args:
            mesh: Mesh geometry and connectivity
            normal_velocity: Velocity normal to edges (n_vert_levels, n_edges)
            layer_thickness_edge: Thickness at edges (n_vert_levels, n_edges)
            tend: Tendency accumulator (n_vert_levels, n_cells), only added to

        Returns:
            Status code
        """
        pass


class ThicknessHorizontalAdvection(TendencyTerm):
    """
    Horizontal advection of layer thickness.

    Adds the flux divergence

        tend[k, c] += sum_i sign[c, i] * u[k, e] * dv_edge[e] * h[k, e] / area[c]

    over the edges e of each cell, for the active levels k < max_level_edge_bot[e].
    Does nothing when the gate is off.
    """

    def __init__(self, gate: AdvectionGate = None, config: HadvConfig = None):
        """
        Args:
            gate: Advection switch; built from config if not given
            config: Term configuration
        """
        self.config = config if config is not None else HadvConfig()
        self.gate = gate if gate is not None else AdvectionGate.from_config(self.config)
        self.kernel = KERNELS[self.config.kernel]
        logger.debug("Using %s kernel for horizontal thickness advection", self.config.kernel)

    def prepare(self, mesh: MeshDescriptor) -> None:
        """Validate a mesh once after it is built, if enabled in the config."""
        if self.config.check_mesh:
            validate_mesh(mesh)

    def accumulate(self, mesh: MeshDescriptor, normal_velocity: np.ndarray,
                   layer_thickness_edge: np.ndarray, tend: np.ndarray) -> TendencyStatus:
        if not self.gate.enabled:
            return TendencyStatus.SUCCESS

        if self.config.check_fields:
            validate_fields(mesh, normal_velocity, layer_thickness_edge, tend)

        self.kernel(mesh.cell_edge_offsets, mesh.cell_edge_ids, mesh.cell_edge_signs,
                    mesh.inv_area_cell, mesh.dv_edge, mesh.max_level_edge_bot,
                    np.asarray(normal_velocity), np.asarray(layer_thickness_edge), tend)

        return TendencyStatus.SUCCESS


class CompositeTendency(TendencyTerm):
    """Combines multiple tendency terms into one accumulator."""

    def __init__(self, terms: List[TendencyTerm] = None):
        self.terms = terms if terms is not None else []

    def add(self, term: TendencyTerm):
        """Add a tendency term to the composite."""
        self.terms.append(term)

    def accumulate(self, mesh: MeshDescriptor, normal_velocity: np.ndarray,
                   layer_thickness_edge: np.ndarray, tend: np.ndarray) -> TendencyStatus:
        for term in self.terms:
            status = term.accumulate(mesh, normal_velocity, layer_thickness_edge, tend)
            if status != TendencyStatus.SUCCESS:
                return status
        return TendencyStatus.SUCCESS
