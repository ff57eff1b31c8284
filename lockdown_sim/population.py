"""Population graph generation.

Builds the bipartite agent–venue graph for a run:
  - ``houses`` household groups of ``agents_per_house`` SUSCEPTIBLE agents
  - one shared pool of venues sized proportionally to the household count
  - 1..max_venues_per_agent distinct venue edges per agent
  - ``initial_sick_agents`` distinct agents seeded SICK

All draws go through the supplied RandomProcess.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Optional, Tuple

from lockdown_sim.config import PopulationSection, validate_sizing
from lockdown_sim.errors import InvalidConfig
from lockdown_sim.rng import RandomProcess
from lockdown_sim.types import (
    AgentNode,
    AgentState,
    Edge,
    Node,
    SimulationState,
    VenueNode,
)


def agent_id(index: int) -> str:
    return f"agent-{index}"


def venue_id(index: int) -> str:
    return f"venue-{index}"


def venue_count(houses: int, cfg: PopulationSection) -> int:
    """Size of the venue pool for a given number of households."""
    return max(1, int(round(houses * cfg.venues_per_house)))


def _visit_count(u: float, lo: int, hi: int) -> int:
    """Map a U[0,1) draw to an integer in [lo, hi]."""
    return min(hi, lo + int(math.floor(u * (hi - lo + 1))))


def build_population_graph(
    state: SimulationState,
    rng: RandomProcess,
    cfg: Optional[PopulationSection] = None,
) -> Tuple[List[Node], List[Edge], SimulationState]:
    """Create a fresh population graph for a new run.

    Args:
        state: Sizing parameters (``tick`` is ignored).
        rng: Random process for venue assignment and initial infections.
        cfg: Graph generation constants (defaults if None).

    Returns:
        (nodes, edges, state') with agents first (household-major order),
        then venues; ``state'`` equals ``state`` with tick reset to 0.

    Raises:
        InvalidConfig: If sizing is out of range.
    """
    if cfg is None:
        cfg = PopulationSection()
    validate_sizing(state.houses, state.agents_per_house,
                    state.initial_sick_agents)
    if cfg.min_venues_per_agent < 1 or \
            cfg.max_venues_per_agent < cfg.min_venues_per_agent:
        raise InvalidConfig(
            f"venue visit bounds must satisfy 1 <= min <= max, got "
            f"[{cfg.min_venues_per_agent}, {cfg.max_venues_per_agent}]"
        )

    n_venues = venue_count(state.houses, cfg)
    venues = [VenueNode(id=venue_id(v)) for v in range(n_venues)]
    venue_ids = [v.id for v in venues]

    lo = min(cfg.min_venues_per_agent, n_venues)
    hi = min(cfg.max_venues_per_agent, n_venues)

    agents: List[AgentNode] = []
    edges: List[Edge] = []
    for house in range(state.houses):
        for _ in range(state.agents_per_house):
            agent = AgentNode(id=agent_id(len(agents)), household=house)
            agents.append(agent)
            k = _visit_count(rng.uniform(), lo, hi)
            for vid in rng.choice_without_replacement(venue_ids, k):
                edges.append(Edge(agent_id=agent.id, venue_id=vid))

    # Seed infections
    sick_idx = rng.choice_without_replacement(
        range(len(agents)), state.initial_sick_agents
    )
    for i in sick_idx:
        agents[i] = replace(agents[i], state=AgentState.SICK)

    nodes: List[Node] = [*agents, *venues]
    new_state = replace(state, tick=0)
    return nodes, edges, new_state
