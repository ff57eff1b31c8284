"""Optional per-tick history recording for the outbreak chart.

Records the SICK / RECOVERED / DEAD counts of each snapshot, the three
lines of the stats chart. When enabled=False, all methods are no-ops.

Usage:
    recorder = HistoryRecorder(enabled=True)

    # In simulation loop:
    recorder.record(tick, counts)

    # After simulation:
    recorder.save("history.npz")
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Union

import numpy as np

SERIES = ('sick', 'recovered', 'dead')


class HistoryRecorder:
    """Accumulates per-tick compartment counts."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.ticks: List[int] = []
        self.series: Dict[str, List[int]] = {name: [] for name in SERIES}

    def __len__(self) -> int:
        return len(self.ticks)

    def record(self, tick: int, counts: Mapping[str, int]) -> None:
        """Append one snapshot's counts (keys from ``count_states``)."""
        if not self.enabled:
            return
        self.ticks.append(int(tick))
        for name in SERIES:
            self.series[name].append(int(counts[name]))

    def clear(self) -> None:
        self.ticks = []
        self.series = {name: [] for name in SERIES}

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """Return ``tick`` plus one int32 array per series."""
        out = {'tick': np.asarray(self.ticks, dtype=np.int32)}
        for name in SERIES:
            out[name] = np.asarray(self.series[name], dtype=np.int32)
        return out

    def peak_sick(self) -> int:
        """Largest SICK count seen so far (0 if nothing recorded)."""
        return max(self.series['sick'], default=0)

    def save(self, path: Union[str, Path]) -> Path:
        """Save recorded series to a compressed .npz file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        np.savez_compressed(path, **self.as_arrays())
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'HistoryRecorder':
        """Load a recorder previously written by ``save()``."""
        recorder = cls(enabled=True)
        with np.load(Path(path)) as data:
            recorder.ticks = data['tick'].tolist()
            for name in SERIES:
                recorder.series[name] = data[name].tolist()
        return recorder
