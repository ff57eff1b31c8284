"""Host-side simulation session.

The engine functions (build_population_graph, step, toggle_lock) are pure:
snapshot in, snapshot out. ``Simulation`` is the single owner of the
current snapshot: it replaces state/nodes/edges wholesale after each call,
keeps the chart history, and holds settings edits until the next restart.
Callers must not invoke ``tick`` and ``toggle_lock`` concurrently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from lockdown_sim.config import (
    SimulationConfig,
    default_config,
    initial_state,
    validate_config,
    validate_sizing,
)
from lockdown_sim.disease import step
from lockdown_sim.errors import InvalidConfig, InvalidState
from lockdown_sim.history import HistoryRecorder
from lockdown_sim.population import build_population_graph
from lockdown_sim.quarantine import set_lock, toggle_lock
from lockdown_sim.rng import RandomProcess, create_random_process
from lockdown_sim.types import Edge, Node, SimulationState, VenueNode, count_states

logger = logging.getLogger(__name__)


@dataclass
class Checkpoint:
    """Everything needed to resume a session bit-exactly."""
    state: SimulationState
    nodes: List[Node]
    edges: Sequence[Edge]
    rng_state: dict
    running: bool


class Simulation:
    """Owns the current snapshot and drives the engine.

    Args:
        config: Full configuration (defaults if None).
        rng: Random process override; built from ``config.simulation.seed``
            if None.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[RandomProcess] = None,
    ):
        if config is None:
            config = default_config()
        else:
            validate_config(config)
        self.config = config
        self.rng = rng if rng is not None else create_random_process(
            self.config.simulation.seed
        )
        self.history = HistoryRecorder(enabled=self.config.output.record_history)
        self.settings = initial_state(self.config)
        self.running = False
        self.state: SimulationState = self.settings
        self.nodes: List[Node] = []
        self.edges: Sequence[Edge] = []
        self.restart()

    # ── Lifecycle ─────────────────────────────────────────────────────

    def restart(self) -> SimulationState:
        """Discard the current run and build a fresh graph from settings."""
        nodes, edges, state = build_population_graph(
            self.settings, self.rng, self.config.population
        )
        for vid in self.config.quarantine.locked_venues:
            nodes = set_lock(nodes, vid, True)
        self.nodes, self.edges, self.state = nodes, edges, state
        self.history.clear()
        self.running = True
        logger.info(
            "Built population: %d agents in %d houses, %d venues, %d sick",
            state.population, state.houses,
            len(nodes) - state.population, state.initial_sick_agents,
        )
        return self.state

    def update_settings(self, **sizes: int) -> SimulationState:
        """Stage new sizing for the next restart.

        Accepts houses, agents_per_house and initial_sick_agents.

        Raises:
            InvalidConfig: If the resulting sizing is out of range.
            TypeError: On unknown keys.
        """
        allowed = {'houses', 'agents_per_house', 'initial_sick_agents'}
        unknown = set(sizes) - allowed
        if unknown:
            raise TypeError(f"Unknown settings: {sorted(unknown)}")
        merged = {
            'houses': self.settings.houses,
            'agents_per_house': self.settings.agents_per_house,
            'initial_sick_agents': self.settings.initial_sick_agents,
        }
        merged.update(sizes)
        validate_sizing(**merged)
        self.settings = SimulationState(
            tick=0, **{k: int(v) for k, v in merged.items()}
        )
        return self.settings

    # ── Clock ────────────────────────────────────────────────────────

    def tick(self) -> SimulationState:
        """Advance one step.

        The counts of the snapshot being replaced are appended to history.

        Raises:
            InvalidState: The snapshot is corrupt; the run is stopped. Also
                raised by every later call until ``restart()``.
        """
        if not self.running:
            raise InvalidState(
                f"Run stopped at tick {self.state.tick}; restart() first"
            )
        counts = count_states(self.nodes)
        try:
            nodes, edges, state = step(
                self.state, self.nodes, self.edges, self.rng,
                self.config.disease,
            )
        except InvalidState:
            self.running = False
            logger.warning("Aborting run at tick %d: corrupt snapshot",
                           self.state.tick)
            raise
        self.history.record(self.state.tick, counts)
        self.nodes, self.edges, self.state = nodes, edges, state
        logger.debug("tick %d: %s", state.tick, counts)
        return state

    def run(self, n_ticks: int) -> SimulationState:
        """Advance ``n_ticks`` steps."""
        for _ in range(n_ticks):
            self.tick()
        return self.state

    def run_until_extinct(self, max_ticks: Optional[int] = None) -> SimulationState:
        """Step until no agent is SICK, or ``max_ticks`` steps have run.

        ``max_ticks`` defaults to ``simulation.max_ticks``; 0 means no limit.

        Raises:
            InvalidConfig: No limit while ``resolution_probability`` is 0,
                since SICK agents would never resolve.
        """
        if max_ticks is None:
            max_ticks = self.config.simulation.max_ticks
        if max_ticks == 0 and self.config.disease.resolution_probability == 0:
            raise InvalidConfig(
                "run_until_extinct needs max_ticks > 0 when "
                "disease.resolution_probability is 0"
            )
        n = 0
        while self.counts()['sick'] > 0 and (max_ticks == 0 or n < max_ticks):
            self.tick()
            n += 1
        return self.state

    # ── Quarantine ───────────────────────────────────────────────────

    def toggle_lock(self, venue_id: str) -> bool:
        """Flip a venue's lock; returns the new flag.

        Raises:
            NotFound: Unknown venue; the snapshot is left unchanged.
        """
        self.nodes = toggle_lock(self.nodes, venue_id)
        locked = next(n.locked for n in self.nodes if n.id == venue_id)
        logger.info("Venue %s %s", venue_id, "locked" if locked else "unlocked")
        return locked

    def set_lock(self, venue_id: str, locked: bool = True) -> None:
        """Force a venue's lock flag; a no-op if it already matches.

        Raises:
            NotFound: Unknown venue; the snapshot is left unchanged.
        """
        self.nodes = set_lock(self.nodes, venue_id, locked)
        logger.info("Venue %s %s", venue_id, "locked" if locked else "unlocked")

    def lock_all(self, locked: bool = True) -> None:
        nodes = self.nodes
        for vid in self.venue_ids():
            nodes = set_lock(nodes, vid, locked)
        self.nodes = nodes

    def venue_ids(self) -> List[str]:
        return [n.id for n in self.nodes if isinstance(n, VenueNode)]

    # ── Views ────────────────────────────────────────────────────────

    def counts(self) -> Dict[str, int]:
        return count_states(self.nodes)

    # ── Checkpointing ────────────────────────────────────────────────

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(
            state=self.state,
            nodes=list(self.nodes),
            edges=self.edges,
            rng_state=self.rng.state_snapshot(),
            running=self.running,
        )

    def restore(self, checkpoint: Checkpoint) -> None:
        """Resume from a checkpoint. History is not rewound."""
        self.state = checkpoint.state
        self.nodes = list(checkpoint.nodes)
        self.edges = checkpoint.edges
        self.rng.restore_state(checkpoint.rng_state)
        self.running = checkpoint.running
