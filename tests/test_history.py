"""Tests for lockdown_sim.history — per-tick series recording."""

import numpy as np

from lockdown_sim.history import SERIES, HistoryRecorder


def _counts(sick, recovered, dead):
    return {'sick': sick, 'recovered': recovered, 'dead': dead,
            'susceptible': 0, 'population': 0}


class TestHistoryRecorder:
    def test_record(self):
        rec = HistoryRecorder()
        rec.record(0, _counts(4, 0, 0))
        rec.record(1, _counts(6, 1, 0))
        assert len(rec) == 2
        assert rec.series['sick'] == [4, 6]
        assert rec.series['recovered'] == [0, 1]

    def test_disabled_is_noop(self):
        rec = HistoryRecorder(enabled=False)
        rec.record(0, _counts(1, 2, 3))
        assert len(rec) == 0

    def test_as_arrays(self):
        rec = HistoryRecorder()
        rec.record(0, _counts(1, 2, 3))
        arrays = rec.as_arrays()
        assert set(arrays) == {'tick', *SERIES}
        assert arrays['dead'].dtype == np.int32
        np.testing.assert_array_equal(arrays['dead'], [3])

    def test_peak_sick(self):
        rec = HistoryRecorder()
        assert rec.peak_sick() == 0
        for t, s in enumerate([1, 5, 3]):
            rec.record(t, _counts(s, 0, 0))
        assert rec.peak_sick() == 5

    def test_clear(self):
        rec = HistoryRecorder()
        rec.record(0, _counts(1, 0, 0))
        rec.clear()
        assert len(rec) == 0
        assert rec.series['sick'] == []

    def test_save_load(self, tmp_path):
        rec = HistoryRecorder()
        for t in range(4):
            rec.record(t, _counts(t, t * 2, t * 3))
        path = rec.save(tmp_path / 'out' / 'history.npz')
        assert path.exists()
        loaded = HistoryRecorder.load(path)
        assert loaded.ticks == [0, 1, 2, 3]
        assert loaded.series == rec.series
