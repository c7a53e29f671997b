"""Tests for window statistics and feature computation."""

import math

import pytest

from signal_core.buffer import SymbolBufferManager
from signal_core.features import REQUIRED_HISTORY, FeatureSet, compute_features
from signal_core.indicators import sma, stdev, tail


class TestSMA:
    """Tests for SMA calculation."""

    def test_sma_basic(self):
        """Test basic SMA calculation."""
        assert sma([1.0, 2.0, 3.0]) == pytest.approx(2.0)
        assert sma([5.0]) == 5.0

    def test_sma_empty(self):
        with pytest.raises(ValueError):
            sma([])


class TestStdev:
    """Tests for population standard deviation."""

    def test_stdev_uses_population_divisor(self):
        """Divisor is the window size, not size - 1."""
        values = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
        assert stdev(values) == pytest.approx(2.0)

    def test_stdev_constant_is_zero(self):
        assert stdev([100.0] * 20) == 0.0

    def test_stdev_empty(self):
        with pytest.raises(ValueError):
            stdev([])


class TestTail:
    def test_tail(self):
        assert list(tail([1, 2, 3, 4], 2)) == [3, 4]
        assert list(tail([1, 2, 3], 3)) == [1, 2, 3]


class TestComputeFeatures:
    """Tests for the feature snapshot."""

    def _buffers(self, prices, symbol="R_100"):
        buffers = SymbolBufferManager(capacity=500)
        for price in prices:
            buffers.push(symbol, price)
        return buffers

    def test_insufficient_history(self):
        """Fewer than 20 samples always yields None."""
        for n in range(REQUIRED_HISTORY):
            buffers = self._buffers([100.0 + i for i in range(n)])
            assert compute_features(buffers, "R_100") is None

    def test_unknown_symbol(self):
        assert compute_features(SymbolBufferManager(), "R_100") is None

    def test_constant_prices(self):
        features = compute_features(self._buffers([100.0] * 20), "R_100")

        assert features == FeatureSet(
            sma3=100.0, sma9=100.0, sma20=100.0, vol5=0.0, vol20=0.0
        )

    def test_uses_most_recent_samples(self):
        """Older samples beyond the largest window are ignored."""
        prices = [1000.0] * 30 + [float(i) for i in range(1, 21)]  # ..., 1..20
        features = compute_features(self._buffers(prices), "R_100")

        assert features.sma3 == pytest.approx(19.0)
        assert features.sma9 == pytest.approx(16.0)
        assert features.sma20 == pytest.approx(10.5)
        assert features.vol5 == pytest.approx(math.sqrt(2.0))
        assert features.vol20 == pytest.approx(math.sqrt((20 ** 2 - 1) / 12))

    def test_to_dict(self):
        features = compute_features(self._buffers([100.0] * 20), "R_100")
        assert set(features.to_dict()) == {"sma3", "sma9", "sma20", "vol5", "vol20"}
