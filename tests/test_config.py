"""Tests for lockdown_sim.config — configuration loading and validation."""

import numpy as np
import pytest
import yaml

from lockdown_sim.config import (
    DiseaseSection,
    PopulationSection,
    SimulationConfig,
    deep_merge,
    default_config,
    initial_state,
    load_config,
    validate_config,
    validate_sizing,
)
from lockdown_sim.errors import InvalidConfig


# ── deep_merge tests ──────────────────────────────────────────────────

class TestDeepMerge:
    def test_simple_override(self):
        assert deep_merge({'a': 1, 'b': 2}, {'b': 3}) == {'a': 1, 'b': 3}

    def test_nested_merge(self):
        base = {'x': {'a': 1, 'b': 2}, 'y': 10}
        result = deep_merge(base, {'x': {'b': 3, 'c': 4}})
        assert result == {'x': {'a': 1, 'b': 3, 'c': 4}, 'y': 10}

    def test_override_dict_with_scalar(self):
        assert deep_merge({'a': {'nested': 1}}, {'a': 'replaced'}) == {'a': 'replaced'}

    def test_empty_override(self):
        assert deep_merge({'a': 1}, {}) == {'a': 1}

    def test_inputs_untouched(self):
        base = {'x': {'a': 1}}
        override = {'x': {'b': 2}}
        assert deep_merge(base, override) == {'x': {'a': 1, 'b': 2}}
        assert base == {'x': {'a': 1}}
        assert override == {'x': {'b': 2}}


# ── default_config tests ─────────────────────────────────────────────

class TestDefaultConfig:
    def test_creates_valid_config(self):
        assert isinstance(default_config(), SimulationConfig)

    def test_default_values(self):
        config = default_config()
        assert config.simulation.houses == 42
        assert config.simulation.agents_per_house == 9
        assert config.simulation.initial_sick_agents == 4
        assert config.simulation.tick_interval_ms == 1000
        assert config.quarantine.locked_venues == []

    def test_initial_state(self):
        state = initial_state(default_config())
        assert state.tick == 0
        assert state.population == 42 * 9


# ── load_config tests ────────────────────────────────────────────────

def _write(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / 'nope.yaml')

    def test_scenario_over_builtin_defaults(self, tmp_path):
        scenario = _write(tmp_path / 'scenario.yaml',
                          {'quarantine': {'locked_venues': ['venue-2']}})
        config = load_config(scenario_path=scenario)
        assert config.simulation.houses == 42
        assert config.disease.resolution_probability == 0.1
        assert config.quarantine.locked_venues == ['venue-2']

    def test_missing_scenario(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(scenario_path=tmp_path / 'nope.yaml')

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'base.yaml'
        path.write_text('')
        config = load_config(path)
        assert config.simulation.houses == 42

    def test_scenario_overrides_base(self, tmp_path):
        base = _write(tmp_path / 'base.yaml',
                      {'simulation': {'houses': 10, 'agents_per_house': 4}})
        scenario = _write(tmp_path / 'scenario.yaml',
                          {'simulation': {'houses': 20},
                           'quarantine': {'locked_venues': ['venue-1']}})
        config = load_config(base, scenario)
        assert config.simulation.houses == 20
        assert config.simulation.agents_per_house == 4
        assert config.quarantine.locked_venues == ['venue-1']

    def test_overrides_applied_last(self, tmp_path):
        base = _write(tmp_path / 'base.yaml', {'simulation': {'seed': 1}})
        config = load_config(base, overrides={'simulation': {'seed': 99}})
        assert config.simulation.seed == 99

    def test_unknown_keys_ignored(self, tmp_path):
        base = _write(tmp_path / 'base.yaml',
                      {'disease': {'basic_reproduction_number': 3.0,
                                   'incubation': 5}})
        config = load_config(base)
        assert config.disease.basic_reproduction_number == 3.0
        assert not hasattr(config.disease, 'incubation')

    def test_invalid_values_rejected(self, tmp_path):
        base = _write(tmp_path / 'base.yaml', {'simulation': {'houses': 0}})
        with pytest.raises(InvalidConfig):
            load_config(base)

    def test_shipped_configs_load(self):
        from pathlib import Path
        root = Path(__file__).resolve().parents[1] / 'configs'
        config = load_config(root / 'base.yaml', root / 'strict_lockdown.yaml')
        assert len(config.quarantine.locked_venues) == 11


# ── validation tests ─────────────────────────────────────────────────

class TestValidateSizing:
    def test_valid(self):
        validate_sizing(2, 3, 6)
        validate_sizing(1, 1, 0)

    @pytest.mark.parametrize('houses,per_house,sick', [
        (0, 3, 0),
        (2, 0, 0),
        (2, 3, 7),
        (2, 3, -1),
        (-1, 3, 0),
    ])
    def test_out_of_range(self, houses, per_house, sick):
        with pytest.raises(InvalidConfig):
            validate_sizing(houses, per_house, sick)

    def test_numpy_integers_accepted(self):
        validate_sizing(np.int64(2), np.int32(3), np.int64(1))

    def test_bool_rejected(self):
        with pytest.raises(InvalidConfig):
            validate_sizing(True, 3, 1)

    def test_non_integer(self):
        with pytest.raises(InvalidConfig):
            validate_sizing(2.5, 3, 1)

    def test_invalid_config_is_value_error(self):
        with pytest.raises(ValueError):
            validate_sizing(0, 1, 0)


class TestValidateConfig:
    def test_bad_probability(self):
        config = SimulationConfig(disease=DiseaseSection(resolution_probability=1.5))
        with pytest.raises(InvalidConfig):
            validate_config(config)

    def test_bad_case_fatality(self):
        config = SimulationConfig(disease=DiseaseSection(case_fatality_probability=-0.1))
        with pytest.raises(InvalidConfig):
            validate_config(config)

    def test_contacts_must_be_positive(self):
        config = SimulationConfig(disease=DiseaseSection(contacts_per_tick=0))
        with pytest.raises(InvalidConfig):
            validate_config(config)

    def test_visit_bounds_ordered(self):
        config = SimulationConfig(population=PopulationSection(
            min_venues_per_agent=3, max_venues_per_agent=2))
        with pytest.raises(InvalidConfig):
            validate_config(config)

    def test_min_visits_at_least_one(self):
        config = SimulationConfig(population=PopulationSection(
            min_venues_per_agent=0))
        with pytest.raises(InvalidConfig):
            validate_config(config)

    def test_no_initial_sick_warns(self):
        config = SimulationConfig()
        config.simulation.initial_sick_agents = 0
        with pytest.warns(UserWarning, match="initial_sick_agents"):
            validate_config(config)

    def test_zero_resolution_warns(self):
        config = SimulationConfig(disease=DiseaseSection(resolution_probability=0.0))
        config.simulation.max_ticks = 100
        with pytest.warns(UserWarning, match="never resolve"):
            validate_config(config)

    def test_zero_resolution_without_tick_cap(self):
        config = SimulationConfig(disease=DiseaseSection(resolution_probability=0.0))
        assert config.simulation.max_ticks == 0
        with pytest.raises(InvalidConfig, match="never ends"):
            validate_config(config)
