"""
On/off switch for horizontal thickness advection.
"""

import logging

from .config import HadvConfig

logger = logging.getLogger(__name__)


class AdvectionGate:
    """
    Holds whether horizontal thickness advection is active.

    Configured once at start-up and only read afterwards. Enabled until
    configure() says otherwise.
    """

    def __init__(self):
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    def configure(self, disable_flag: bool) -> None:
        """
        Set the gate from the "advection disabled" configuration flag.

        Args:
            disable_flag: True switches horizontal advection off
        """
        self._enabled = not disable_flag
        logger.info("Horizontal thickness advection %s",
                    "enabled" if self._enabled else "disabled")

    @classmethod
    def from_config(cls, config: HadvConfig) -> 'AdvectionGate':
        gate = cls()
        gate.configure(config.disable_thick_hadv)
        return gate
