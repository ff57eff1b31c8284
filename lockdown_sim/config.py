"""Configuration system for Lockdown-Sim.

Hierarchical YAML configuration with deep-merge support:
  base.yaml → scenario override → ad-hoc overrides (CLI flags, settings form)

The numeric tuning knobs (venue density, visit counts, transmission and
resolution probabilities) are illustrative, not epidemiologically
calibrated. They live here as named fields so nothing downstream hard-codes
them.
"""

from __future__ import annotations

import dataclasses
import numbers
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from lockdown_sim.errors import InvalidConfig
from lockdown_sim.types import SimulationState


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class SimulationSection:
    """Run sizing, seeding and clock cadence."""
    seed: int = 42
    tick_interval_ms: int = 1000     # Reference host clock cadence
    houses: int = 42
    agents_per_house: int = 9
    initial_sick_agents: int = 4
    max_ticks: int = 0               # 0 = run until no agent is SICK


@dataclass
class PopulationSection:
    """Graph generation constants."""
    venues_per_house: float = 0.5    # Venue pool size relative to households
    min_venues_per_agent: int = 1
    max_venues_per_agent: int = 3


@dataclass
class DiseaseSection:
    """Transmission and progression parameters.

    Per-contact, per-tick transmission probability is derived from R0:
      β = min(1, R0 × resolution_probability / contacts_per_tick)
    i.e. R0 spread over the mean infectious period (1 / resolution_probability
    ticks) and the typical number of contacts per tick.
    """
    basic_reproduction_number: float = 2.5
    contacts_per_tick: float = 10.0
    resolution_probability: float = 0.1     # P(SICK resolves this tick)
    case_fatality_probability: float = 0.05  # P(DEAD | resolved)


@dataclass
class QuarantineSection:
    """Venues locked immediately after every build."""
    locked_venues: List[str] = field(default_factory=list)


@dataclass
class OutputSection:
    """Output control."""
    directory: str = "results/"
    record_history: bool = True


@dataclass
class SimulationConfig:
    """Complete simulation configuration.

    Load from YAML via `load_config()`. Sections map 1:1 to YAML top-level keys.
    """
    simulation: SimulationSection = field(default_factory=SimulationSection)
    population: PopulationSection = field(default_factory=PopulationSection)
    disease: DiseaseSection = field(default_factory=DiseaseSection)
    quarantine: QuarantineSection = field(default_factory=QuarantineSection)
    output: OutputSection = field(default_factory=OutputSection)


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING & MERGING
# ═══════════════════════════════════════════════════════════════════════

def deep_merge(base: Dict, override: Dict) -> Dict:
    """Layer ``override`` on top of ``base`` and return the result.

    Nested mappings are combined key by key; any other value in
    ``override`` wins outright. Neither argument is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged


def _build_section(section_cls, values: Dict) -> Any:
    """Instantiate one config section, dropping keys it does not define."""
    known = {f.name for f in dataclasses.fields(section_cls)}
    return section_cls(**{k: values[k] for k in values.keys() & known})


def _yaml_to_config(data: Dict) -> SimulationConfig:
    """Convert a merged YAML dict to a SimulationConfig."""
    sections = {}
    for f in dataclasses.fields(SimulationConfig):
        section_cls = f.default_factory
        values = data.get(f.name)
        if isinstance(values, dict):
            sections[f.name] = _build_section(section_cls, values)
        else:
            sections[f.name] = section_cls()
    return SimulationConfig(**sections)


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise InvalidConfig(f"{name} must be in [0, 1], got {value}")


def validate_sizing(houses: int, agents_per_house: int,
                    initial_sick_agents: int) -> None:
    """Validate run sizing. Raises InvalidConfig on failure."""
    for name, value in (('houses', houses),
                        ('agents_per_house', agents_per_house),
                        ('initial_sick_agents', initial_sick_agents)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise InvalidConfig(
                f"{name} must be an integer, got {value!r}"
            )
    if houses <= 0:
        raise InvalidConfig(f"houses must be positive, got {houses}")
    if agents_per_house <= 0:
        raise InvalidConfig(
            f"agents_per_house must be positive, got {agents_per_house}"
        )
    population = houses * agents_per_house
    if not 0 <= initial_sick_agents <= population:
        raise InvalidConfig(
            f"initial_sick_agents must be in [0, {population}], "
            f"got {initial_sick_agents}"
        )


def validate_config(config: SimulationConfig) -> None:
    """Validate configuration constraints. Raises InvalidConfig on failure.

    Checks:
      - Run sizing is positive and the sick seed fits the population
      - Visit-count bounds are ordered and at least 1
      - Probabilities are in [0, 1]
      - A run with no tick cap can end (resolution_probability > 0)
    """
    sim = config.simulation
    validate_sizing(sim.houses, sim.agents_per_house, sim.initial_sick_agents)
    if sim.initial_sick_agents == 0:
        warnings.warn(
            "simulation.initial_sick_agents is 0; no infection can occur.",
            UserWarning,
            stacklevel=2,
        )
    if sim.seed < 0:
        raise InvalidConfig("simulation.seed must be non-negative")
    if sim.tick_interval_ms <= 0:
        raise InvalidConfig("simulation.tick_interval_ms must be positive")
    if sim.max_ticks < 0:
        raise InvalidConfig("simulation.max_ticks must be non-negative")

    pop = config.population
    if pop.venues_per_house <= 0:
        raise InvalidConfig(
            f"population.venues_per_house must be positive, "
            f"got {pop.venues_per_house}"
        )
    if pop.min_venues_per_agent < 1:
        raise InvalidConfig(
            f"population.min_venues_per_agent must be >= 1, "
            f"got {pop.min_venues_per_agent}"
        )
    if pop.max_venues_per_agent < pop.min_venues_per_agent:
        raise InvalidConfig(
            f"population.max_venues_per_agent ({pop.max_venues_per_agent}) "
            f"must be >= min_venues_per_agent ({pop.min_venues_per_agent})"
        )

    dis = config.disease
    if dis.basic_reproduction_number < 0:
        raise InvalidConfig(
            "disease.basic_reproduction_number must be non-negative"
        )
    if dis.contacts_per_tick <= 0:
        raise InvalidConfig("disease.contacts_per_tick must be positive")
    _check_probability('disease.resolution_probability',
                       dis.resolution_probability)
    _check_probability('disease.case_fatality_probability',
                       dis.case_fatality_probability)
    if dis.resolution_probability == 0.0:
        if sim.max_ticks == 0:
            raise InvalidConfig(
                "disease.resolution_probability is 0 and simulation.max_ticks "
                "is 0: SICK agents never resolve, so the run never ends"
            )
        warnings.warn(
            "disease.resolution_probability is 0; SICK agents never resolve.",
            UserWarning,
            stacklevel=2,
        )


def _read_yaml(path: Path) -> Dict:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(
    base_path: Optional[Union[str, Path]] = None,
    scenario_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict] = None,
) -> SimulationConfig:
    """Load and merge hierarchical YAML configuration.

    Merge order: base → scenario → overrides.
    Each layer overrides only the fields it specifies. Without a base file
    the built-in defaults act as the base.

    Raises:
        FileNotFoundError: If a given base or scenario file doesn't exist.
        InvalidConfig: If validation fails.
    """
    if base_path is None:
        config_dict = dataclasses.asdict(SimulationConfig())
    else:
        config_dict = _read_yaml(Path(base_path))

    if scenario_path is not None:
        config_dict = deep_merge(config_dict, _read_yaml(Path(scenario_path)))

    if overrides is not None:
        config_dict = deep_merge(config_dict, overrides)

    config = _yaml_to_config(config_dict)
    validate_config(config)
    return config


def default_config() -> SimulationConfig:
    """Return a SimulationConfig with all default values."""
    config = SimulationConfig()
    validate_config(config)
    return config


def initial_state(config: SimulationConfig) -> SimulationState:
    """SimulationState at tick 0 sized from the simulation section."""
    sim = config.simulation
    return SimulationState(
        tick=0,
        houses=sim.houses,
        agents_per_house=sim.agents_per_house,
        initial_sick_agents=sim.initial_sick_agents,
    )
