import numpy as np
import pytest

from noiselab.core.config import ConfigurationError, EngineConfig
from noiselab.core.engine import NoiseEngine
from noiselab.core.table.permutation import is_bijection


def test_initial_size_from_log2():
    engine = NoiseEngine(6)
    assert engine.table_size == 64
    assert engine.mask == 63
    assert engine.table.shape == (64,)
    assert engine.permutation.shape == (64,)


def test_double_until_max_then_refuse():
    engine = NoiseEngine(8)
    sizes = []
    while engine.double_size():
        sizes.append(engine.table_size)
    assert sizes == [512, 1024, 2048, 4096]
    assert engine.table_size == engine.max_size

    before = engine.table
    assert engine.double_size() is False
    assert engine.table_size == engine.max_size
    assert np.array_equal(before, engine.table)


def test_halve_until_min_then_refuse():
    engine = NoiseEngine(8)
    while engine.halve_size():
        assert engine.mask == engine.table_size - 1
    assert engine.table_size == engine.min_size == 16
    assert engine.halve_size() is False
    assert engine.table_size == 16


def test_reset_size_is_idempotent():
    engine = NoiseEngine(5)
    assert engine.reset_size() is True
    assert engine.table_size == engine.default_size
    table = engine.table
    assert engine.reset_size() is False
    assert engine.table_size == engine.default_size
    assert np.array_equal(table, engine.table)


def test_resize_rebuilds_both_buffers():
    engine = NoiseEngine(4)
    engine.double_size()
    table = engine.table
    perm = engine.permutation
    assert table.shape == (32,)
    assert np.all(np.abs(table) <= 1.0)
    assert is_bijection(perm, 32)


def test_resize_keeps_seed_and_distribution():
    engine = NoiseEngine(8, seed=11)
    engine.set_distribution("maximal")
    engine.double_size()
    engine.halve_size()
    other = NoiseEngine(8, seed=11)
    other.set_distribution("maximal")
    assert engine.seed == 11
    assert np.array_equal(engine.table, other.table)
    assert np.array_equal(engine.permutation, other.permutation)


@pytest.mark.parametrize("log2_size", [3, 13])
def test_initial_size_outside_bounds_rejected(log2_size):
    with pytest.raises(ConfigurationError):
        NoiseEngine(log2_size)


def test_config_bounds_must_be_powers_of_two():
    with pytest.raises(ConfigurationError):
        NoiseEngine(8, config=EngineConfig(default_size=100))
    with pytest.raises(ConfigurationError):
        NoiseEngine(8, config=EngineConfig(min_size=64, max_size=32, default_size=32))


def test_custom_bounds_are_reported():
    engine = NoiseEngine(6, config=EngineConfig(min_size=32, max_size=128, default_size=64))
    assert (engine.min_size, engine.max_size, engine.default_size) == (32, 128, 64)
    assert engine.double_size() and engine.table_size == 128
    assert not engine.double_size()
