"""Core data types for Lockdown-Sim.

This module is the SINGLE SOURCE OF TRUTH for:
  - AgentState enumeration (SUSCEPTIBLE, SICK, RECOVERED, DEAD)
  - Node variants: AgentNode and VenueNode, tagged by ``type``
  - Edge: static (agent, venue) membership pair
  - SimulationState: per-tick value object threaded through every call

All modules import these types from here. Nodes are frozen; the engine
produces replacement nodes via ``dataclasses.replace`` rather than mutating
the snapshot it was handed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, Iterable, Union


# ═══════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════

class AgentState(IntEnum):
    """SIRD compartments for an agent.

    S → SICK       (transmission at a shared unlocked venue)
    SICK → R | D   (per-tick resolution, then case fatality)

    RECOVERED and DEAD are absorbing.
    """
    SUSCEPTIBLE = 0
    SICK        = 1
    RECOVERED   = 2
    DEAD        = 3


ABSORBING_STATES = frozenset({AgentState.RECOVERED, AgentState.DEAD})

AGENT = "agent"
VENUE = "venue"


# ═══════════════════════════════════════════════════════════════════════
# GRAPH ENTITIES
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AgentNode:
    """A simulated individual, member of exactly one household."""
    id: str
    household: int
    state: AgentState = AgentState.SUSCEPTIBLE

    @property
    def type(self) -> str:
        return AGENT


@dataclass(frozen=True)
class VenueNode:
    """A shared public place; can be locked down (quarantined)."""
    id: str
    locked: bool = False

    @property
    def type(self) -> str:
        return VENUE


Node = Union[AgentNode, VenueNode]


@dataclass(frozen=True)
class Edge:
    """Unordered agent–venue membership. Static for the life of a run."""
    agent_id: str
    venue_id: str


# ═══════════════════════════════════════════════════════════════════════
# SIMULATION STATE
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SimulationState:
    """Tick counter plus the sizing of the current run.

    Sizing fields are fixed between one build and the next; only ``tick``
    changes across transitions.
    """
    tick: int = 0
    houses: int = 42
    agents_per_house: int = 9
    initial_sick_agents: int = 4

    @property
    def population(self) -> int:
        return self.houses * self.agents_per_house

    def advance(self) -> 'SimulationState':
        """Return the state for the next tick."""
        return replace(self, tick=self.tick + 1)


# ═══════════════════════════════════════════════════════════════════════
# DERIVED VIEWS
# ═══════════════════════════════════════════════════════════════════════

def count_states(nodes: Iterable[Node]) -> Dict[str, int]:
    """Tally nodes by type and agent state, for display and history.

    Returns:
        Dict with keys population, susceptible, sick, recovered, dead,
        venues and locked_venues.
    """
    counts = {
        'population': 0,
        'susceptible': 0,
        'sick': 0,
        'recovered': 0,
        'dead': 0,
        'venues': 0,
        'locked_venues': 0,
    }
    for node in nodes:
        if isinstance(node, AgentNode):
            counts['population'] += 1
            counts[node.state.name.lower()] += 1
        else:
            counts['venues'] += 1
            if node.locked:
                counts['locked_venues'] += 1
    return counts
