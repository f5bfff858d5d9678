import numpy as np
import pytest

from noiselab.core.config import DistributionKind, EngineConfig
from noiselab.core.distribution.base import DistributionParams, fill, list_samplers
from noiselab.core.distribution import samplers  # noqa: F401 (registers)
from noiselab.core.engine import NoiseEngine


@pytest.mark.parametrize("kind", list(DistributionKind))
def test_every_distribution_stays_in_range(kind):
    table = fill(1024, kind, seed=3)
    assert table.shape == (1024,)
    assert np.all(table >= -1.0)
    assert np.all(table <= 1.0)


@pytest.mark.parametrize("kind", list(DistributionKind))
def test_fill_is_deterministic(kind):
    assert np.array_equal(fill(256, kind, seed=5), fill(256, kind, seed=5))


def test_registry_lists_all_kinds():
    assert list_samplers() == sorted(k.value for k in DistributionKind)


def test_maximal_only_extremes():
    table = fill(512, DistributionKind.MAXIMAL, seed=1)
    assert set(np.unique(table).tolist()) == {-1.0, 1.0}


def test_exponential_has_both_signs_by_half():
    table = fill(256, DistributionKind.EXPONENTIAL, seed=2)
    assert np.all(table[:128] > 0.0)
    assert np.all(table[128:] < 0.0)


def test_normal_is_centred():
    table = fill(4096, DistributionKind.NORMAL, seed=4)
    assert abs(float(table.mean())) < 0.05


def test_cosine_piles_up_near_extremes():
    # arcsine law: P(|v| > 0.9) is about 0.29, against 0.1 for uniform
    table = fill(2048, DistributionKind.COSINE, seed=8)
    assert float(np.mean(np.abs(table) > 0.9)) > 0.2


def test_midpoint_endpoints_default_and_configurable():
    table = fill(64, DistributionKind.MIDPOINT, seed=6)
    assert table[0] == 1.0
    assert table[-1] == -1.0

    params = DistributionParams(midpoint_endpoints=(0.0, 0.0))
    table = fill(64, DistributionKind.MIDPOINT, seed=6, params=params)
    assert table[0] == 0.0
    assert table[-1] == 0.0


def test_midpoint_is_smoother_than_uniform():
    mid = fill(1024, DistributionKind.MIDPOINT, seed=7)
    uni = fill(1024, DistributionKind.UNIFORM, seed=7)
    assert np.mean(np.abs(np.diff(mid))) < np.mean(np.abs(np.diff(uni)))


def test_set_distribution_refills_in_place():
    engine = NoiseEngine(8, seed=21)
    perm = engine.permutation
    uniform = engine.table
    engine.set_distribution("cosine")
    assert engine.table_size == 256
    assert np.array_equal(perm, engine.permutation)
    assert not np.array_equal(uniform, engine.table)


def test_engine_passes_midpoint_endpoints():
    config = EngineConfig(distribution=DistributionKind.MIDPOINT, midpoint_endpoints=(0.0, 0.0))
    engine = NoiseEngine(5, config=config)
    table = engine.table
    assert table[0] == 0.0 and table[-1] == 0.0
