"""Disease dynamics — per-tick SIRD transition over the agent–venue graph.

Implements:
  - Phase A, transmission: SUSCEPTIBLE agents sharing an unlocked venue
    with k distinct SICK agents are infected with probability
        p = 1 − (1 − β)^k            (independent trials per contact)
    where β = min(1, R0 × ρ / c) is the per-contact, per-tick probability
    (R0 spread over the mean infectious period 1/ρ and c contacts/tick).
  - Phase B, progression: agents already SICK at the start of the tick
    resolve with probability ρ; resolved agents die with the case-fatality
    probability, otherwise recover.

Both phases read the previous tick's snapshot, so iteration order never
matters and newly infected agents dwell at least one tick in SICK.
Locked venues contribute no edges to Phase A.

Draw order per tick (fixed, for reproducibility):
  1. one uniform per exposed SUSCEPTIBLE agent, in node order
  2. one uniform per previously SICK agent, in node order
  3. one uniform per resolved agent, in node order
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.sparse import csr_matrix

from lockdown_sim.config import DiseaseSection
from lockdown_sim.errors import InvalidState
from lockdown_sim.rng import RandomProcess
from lockdown_sim.types import (
    AgentNode,
    AgentState,
    Edge,
    Node,
    SimulationState,
    VenueNode,
)


# ═══════════════════════════════════════════════════════════════════════
# TRANSMISSION PROBABILITIES
# ═══════════════════════════════════════════════════════════════════════

def transmission_probability(cfg: DiseaseSection) -> float:
    """Per-contact, per-tick infection probability β derived from R0.

    β = min(1, R0 × resolution_probability / contacts_per_tick)
    """
    beta = (cfg.basic_reproduction_number * cfg.resolution_probability
            / cfg.contacts_per_tick)
    return float(min(1.0, max(0.0, beta)))


def infection_probability(beta: float, n_contacts):
    """Probability of at least one successful transmission from n contacts.

    p = 1 − (1 − β)^n

    Works elementwise on arrays of contact counts.
    """
    return 1.0 - np.power(1.0 - beta, n_contacts)


# ═══════════════════════════════════════════════════════════════════════
# GRAPH INDEXING
# ═══════════════════════════════════════════════════════════════════════

class GraphIndex:
    """Dense array view of a node/edge snapshot.

    Attributes:
        agent_pos: Position in ``nodes`` of each agent (agent order).
        states: AgentState value per agent (int8).
        locked: Locked flag per venue (bool).
        edge_agents, edge_venues: Agent / venue index per edge.
    """

    def __init__(self, nodes: Sequence[Node], edges: Sequence[Edge]):
        agent_index: Dict[str, int] = {}
        venue_index: Dict[str, int] = {}
        agent_pos: List[int] = []
        states: List[int] = []
        locked: List[bool] = []
        for pos, node in enumerate(nodes):
            if node.id in agent_index or node.id in venue_index:
                raise InvalidState(f"Duplicate node id '{node.id}'")
            if isinstance(node, AgentNode):
                agent_index[node.id] = len(agent_pos)
                agent_pos.append(pos)
                states.append(int(node.state))
            elif isinstance(node, VenueNode):
                venue_index[node.id] = len(locked)
                locked.append(bool(node.locked))
            else:
                raise InvalidState(f"Unknown node variant: {node!r}")

        edge_agents = np.empty(len(edges), dtype=np.int64)
        edge_venues = np.empty(len(edges), dtype=np.int64)
        for i, edge in enumerate(edges):
            a = agent_index.get(edge.agent_id)
            v = venue_index.get(edge.venue_id)
            if a is None:
                raise InvalidState(
                    f"Edge {i} references '{edge.agent_id}', "
                    f"which is not an agent in nodes"
                )
            if v is None:
                raise InvalidState(
                    f"Edge {i} references '{edge.venue_id}', "
                    f"which is not a venue in nodes"
                )
            edge_agents[i] = a
            edge_venues[i] = v

        self.agent_pos = np.asarray(agent_pos, dtype=np.int64)
        self.states = np.asarray(states, dtype=np.int8)
        self.locked = np.asarray(locked, dtype=bool)
        self.edge_agents = edge_agents
        self.edge_venues = edge_venues

    @property
    def n_agents(self) -> int:
        return len(self.agent_pos)

    @property
    def n_venues(self) -> int:
        return len(self.locked)


def count_sick_contacts(index: GraphIndex) -> np.ndarray:
    """Distinct SICK agents reachable from each SUSCEPTIBLE agent via
    unlocked venues.

    An agent meeting the same SICK agent at several venues counts it once.
    The agent–venue incidence is sparse, so memory scales with the number
    of edges and with the susceptible–sick pairs that actually meet.

    Returns:
        (n_agents,) int array of contact counts (0 for non-susceptible
        agents).
    """
    counts = np.zeros(index.n_agents, dtype=np.int64)
    sick = np.flatnonzero(index.states == AgentState.SICK)
    susceptible = np.flatnonzero(index.states == AgentState.SUSCEPTIBLE)
    if sick.size == 0 or susceptible.size == 0 or index.n_venues == 0:
        return counts

    open_edges = ~index.locked[index.edge_venues]
    rows = index.edge_agents[open_edges]
    cols = index.edge_venues[open_edges]
    incidence = csr_matrix(
        (np.ones(rows.size, dtype=np.int32), (rows, cols)),
        shape=(index.n_agents, index.n_venues),
    )

    # shared[i, j] = unlocked venues susceptible agent i shares with sick agent j
    shared = incidence[susceptible] @ incidence[sick].T
    counts[susceptible] = shared.getnnz(axis=1)
    return counts


# ═══════════════════════════════════════════════════════════════════════
# PER-TICK TRANSITION — CORE ENGINE
# ═══════════════════════════════════════════════════════════════════════

def transmission_phase(
    index: GraphIndex,
    rng: RandomProcess,
    cfg: DiseaseSection,
) -> np.ndarray:
    """Phase A. Returns agent indices newly infected this tick."""
    contacts = count_sick_contacts(index)
    exposed = np.flatnonzero(
        (index.states == AgentState.SUSCEPTIBLE) & (contacts > 0)
    )
    if exposed.size == 0:
        return exposed
    p_inf = infection_probability(transmission_probability(cfg),
                                  contacts[exposed])
    draws = np.asarray(rng.uniform(exposed.size), dtype=np.float64)
    return exposed[draws < p_inf]


def progression_phase(
    index: GraphIndex,
    rng: RandomProcess,
    cfg: DiseaseSection,
) -> Tuple[np.ndarray, np.ndarray]:
    """Phase B. Returns (recovered, dead) agent indices.

    Only agents SICK in the snapshot are eligible.
    """
    sick = np.flatnonzero(index.states == AgentState.SICK)
    empty = np.empty(0, dtype=np.int64)
    if sick.size == 0:
        return empty, empty
    draws = np.asarray(rng.uniform(sick.size), dtype=np.float64)
    resolved = sick[draws < cfg.resolution_probability]
    if resolved.size == 0:
        return empty, empty
    fatal = (np.asarray(rng.uniform(resolved.size), dtype=np.float64)
             < cfg.case_fatality_probability)
    return resolved[~fatal], resolved[fatal]


def step(
    state: SimulationState,
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    rng: RandomProcess,
    cfg: Optional[DiseaseSection] = None,
) -> Tuple[List[Node], Sequence[Edge], SimulationState]:
    """Advance the simulation by one tick.

    Sequence:
      1. Index the snapshot (validates node/edge consistency)
      2. Transmission at unlocked venues (S → SICK)
      3. Progression of previously SICK agents (SICK → R | D)
      4. Replace changed agent nodes; tick += 1

    Args:
        state: Current simulation state.
        nodes: Current node snapshot (not modified).
        edges: Static edge list (returned as-is).
        rng: Random process for all draws this tick.
        cfg: Disease parameters (defaults if None).

    Returns:
        (nodes', edges, state') where nodes' is a new list.

    Raises:
        InvalidState: If edges reference missing or wrong-typed nodes.
    """
    if cfg is None:
        cfg = DiseaseSection()
    index = GraphIndex(nodes, edges)

    infected = transmission_phase(index, rng, cfg)
    recovered, dead = progression_phase(index, rng, cfg)

    new_nodes = list(nodes)
    for agents, new_state in ((infected, AgentState.SICK),
                              (recovered, AgentState.RECOVERED),
                              (dead, AgentState.DEAD)):
        for a in agents:
            pos = int(index.agent_pos[a])
            new_nodes[pos] = replace(new_nodes[pos], state=new_state)

    return new_nodes, edges, state.advance()
