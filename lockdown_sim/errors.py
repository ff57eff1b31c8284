"""Exception types raised by the simulation engine.

User-input errors (``InvalidConfig``, ``NotFound``) can be surfaced and
corrected; ``InvalidArgument`` and ``InvalidState`` signal internal
inconsistency and should abort the run.
"""


class SimulationError(Exception):
    """Base class for all engine errors."""


class InvalidConfig(SimulationError, ValueError):
    """Malformed or out-of-range sizing / tuning parameters."""


class InvalidArgument(SimulationError, ValueError):
    """A sampling request that exceeds the available population."""


class NotFound(SimulationError, KeyError):
    """A node id that does not resolve to a node of the expected type."""

    def __str__(self) -> str:
        # KeyError.__str__ reprs the argument; keep the plain message.
        return str(self.args[0]) if self.args else ''


class InvalidState(SimulationError, RuntimeError):
    """Structural corruption of a node/edge snapshot."""
