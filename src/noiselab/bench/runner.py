from __future__ import annotations

import csv
import itertools
import json
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from noiselab.core import constants
from noiselab.core.config import (
    ConfigurationError,
    DistributionKind,
    HashKind,
    NoiseKind,
    SplineKind,
    list_kinds,
)
from noiselab.io.settings import ConfigError, require_key, load_yaml
from noiselab.orchestrator.pipeline import (
    EngineSettings,
    RenderParams,
    build_engine,
    field_fingerprint,
    field_stats,
    render_field,
)
from noiselab.utils.logging import command_context, get_logger

logger = get_logger(__name__)


# -------------------------
# Config structures
# -------------------------


@dataclass(frozen=True)
class BenchConfig:
    width: int
    height: int
    scale: float
    origin: Tuple[float, float]
    octaves: int
    lacunarity: float
    persistence: float
    repeats: int


@dataclass(frozen=True)
class MatrixConfig:
    kind: Sequence[str]
    hash: Sequence[str]
    spline: Sequence[str]
    distribution: Sequence[str]
    log2_size: Sequence[int]
    seed: Sequence[int]


@dataclass(frozen=True)
class OutputConfig:
    include_timestamp_utc: bool
    include_field_fingerprint: bool
    include_stats: bool


@dataclass(frozen=True)
class ValidateConfig:
    assert_deterministic_within_run: bool
    assert_range: bool


@dataclass(frozen=True)
class FullConfig:
    bench: BenchConfig
    matrix: MatrixConfig
    output: OutputConfig
    validate: ValidateConfig


# -------------------------
# Config parsing/validation
# -------------------------


def _check_names(label: str, values: Sequence[str], allowed: List[str]) -> None:
    for name in values:
        if name not in allowed:
            raise ConfigError(f"Unknown {label} '{name}'. Available: {allowed}")


def parse_config(path: Path) -> FullConfig:
    data = load_yaml(path)

    bench = require_key(data, "bench", (dict,))
    matrix = require_key(data, "matrix", (dict,))
    output = data.get("output") or {}
    validate = data.get("validate") or {}

    origin = tuple(bench.get("origin", [0.0, 0.0]))
    if len(origin) != 2:
        raise ConfigError("bench.origin must have exactly two entries (x,y)")

    bench_cfg = BenchConfig(
        width=int(require_key(bench, "width", (int,))),
        height=int(require_key(bench, "height", (int,))),
        scale=float(bench.get("scale", constants.DEFAULT_RENDER_SCALE)),
        origin=(float(origin[0]), float(origin[1])),
        octaves=int(bench.get("octaves", constants.DEFAULT_OCTAVES)),
        lacunarity=float(bench.get("lacunarity", constants.DEFAULT_LACUNARITY)),
        persistence=float(bench.get("persistence", constants.DEFAULT_PERSISTENCE)),
        repeats=int(bench.get("repeats", 1)),
    )
    if bench_cfg.repeats < 1:
        raise ConfigError("bench.repeats must be >= 1")
    try:
        _render_params(bench_cfg, constants.NOISE_KIND).validate()
    except ConfigurationError as exc:
        raise ConfigError(f"Invalid bench settings: {exc}") from exc

    matrix_cfg = MatrixConfig(
        kind=[str(x) for x in require_key(matrix, "kind", (list, tuple))],
        hash=[str(x) for x in matrix.get("hash", [constants.HASH_KIND])],
        spline=[str(x) for x in matrix.get("spline", [constants.SPLINE_KIND])],
        distribution=[str(x) for x in matrix.get("distribution", [constants.DISTRIBUTION_KIND])],
        log2_size=[int(x) for x in matrix.get("log2_size", [constants.DEFAULT_LOG2_SIZE])],
        seed=[int(x) for x in matrix.get("seed", [constants.DEFAULT_SEED])],
    )
    _check_names("kind", matrix_cfg.kind, list_kinds(NoiseKind))
    _check_names("hash", matrix_cfg.hash, list_kinds(HashKind))
    _check_names("spline", matrix_cfg.spline, list_kinds(SplineKind))
    _check_names("distribution", matrix_cfg.distribution, list_kinds(DistributionKind))

    output_cfg = OutputConfig(
        include_timestamp_utc=bool(output.get("include_timestamp_utc", True)),
        include_field_fingerprint=bool(output.get("include_field_fingerprint", True)),
        include_stats=bool(output.get("include_stats", True)),
    )

    validate_cfg = ValidateConfig(
        assert_deterministic_within_run=bool(validate.get("assert_deterministic_within_run", False)),
        assert_range=bool(validate.get("assert_range", True)),
    )

    return FullConfig(
        bench=bench_cfg,
        matrix=matrix_cfg,
        output=output_cfg,
        validate=validate_cfg,
    )


# -------------------------
# Benchmark internals
# -------------------------


def _render_params(bench: BenchConfig, kind: str) -> RenderParams:
    return RenderParams(
        width=bench.width,
        height=bench.height,
        scale=bench.scale,
        origin_x=bench.origin[0],
        origin_y=bench.origin[1],
        kind=kind,
        octaves=bench.octaves,
        lacunarity=bench.lacunarity,
        persistence=bench.persistence,
    )


def _measure_time(func):
    start = time.perf_counter()
    result = func()
    end = time.perf_counter()
    return result, end - start


def _variant_product(matrix: MatrixConfig) -> List[Dict[str, Any]]:
    combos = []
    for kind, hash_kind, spline, distribution, log2_size, seed in itertools.product(
        matrix.kind, matrix.hash, matrix.spline, matrix.distribution, matrix.log2_size, matrix.seed
    ):
        combos.append(
            {
                "kind": kind,
                "hash": hash_kind,
                "spline": spline,
                "distribution": distribution,
                "log2_size": int(log2_size),
                "seed": int(seed),
            }
        )
    return combos


def _run_single_variant(config: FullConfig, task: Tuple[Dict[str, Any], int]) -> Dict[str, Any]:
    # pool workers start without the CLI context
    with command_context("bench"):
        return _measure_variant(config, *task)


def _measure_variant(config: FullConfig, variant: Dict[str, Any], repeat_index: int) -> Dict[str, Any]:
    settings = EngineSettings(
        log2_size=variant["log2_size"],
        seed=variant["seed"],
        hash=variant["hash"],
        spline=variant["spline"],
        distribution=variant["distribution"],
    )
    params = _render_params(config.bench, variant["kind"])

    engine, t_setup = _measure_time(lambda: build_engine(settings))
    field, t_render = _measure_time(lambda: render_field(engine, params))
    fingerprint = field_fingerprint(field)
    stats = field_stats(field)

    if config.validate.assert_range and (stats["min"] < -1.0 or stats["max"] > 1.0):
        raise RuntimeError(f"Range check failed for variant {variant}: {stats}")
    if config.validate.assert_deterministic_within_run:
        again = field_fingerprint(render_field(build_engine(settings), params))
        if again != fingerprint:
            raise RuntimeError("Determinism check failed: field mismatch within run.")

    samples = params.width * params.height
    record: Dict[str, Any] = {
        "kind": variant["kind"],
        "hash": variant["hash"],
        "spline": variant["spline"],
        "distribution": variant["distribution"],
        "table_size": engine.table_size,
        "seed": variant["seed"],
        "width": params.width,
        "height": params.height,
        "scale": params.scale,
        "octaves": params.octaves,
        "repeat_index": repeat_index,
        "t_setup_s": t_setup,
        "t_render_s": t_render,
        "throughput_samples_per_s": samples / t_render if t_render else None,
        "field_fingerprint": fingerprint if config.output.include_field_fingerprint else None,
        "min": stats["min"] if config.output.include_stats else None,
        "max": stats["max"] if config.output.include_stats else None,
        "mean": stats["mean"] if config.output.include_stats else None,
    }
    if config.output.include_timestamp_utc:
        record["timestamp_utc"] = datetime.now(timezone.utc).isoformat()
    logger.info("variant %s repeat=%d render=%.3fs", variant, repeat_index, t_render)
    return record


def run_benchmark(config: FullConfig, jobs: int = 1) -> List[Dict[str, Any]]:
    tasks: List[Tuple[Dict[str, Any], int]] = []
    for variant in _variant_product(config.matrix):
        for repeat_index in range(config.bench.repeats):
            tasks.append((variant, repeat_index))

    runner = partial(_run_single_variant, config)
    if jobs and jobs > 1:
        # each worker builds its own engines; nothing is shared across processes
        with ProcessPoolExecutor(max_workers=jobs) as ex:
            results = list(ex.map(runner, tasks))
    else:
        results = [runner(task) for task in tasks]

    def sort_key(rec: Dict[str, Any]):
        return (
            rec["kind"],
            rec["hash"],
            rec["spline"],
            rec["distribution"],
            rec["table_size"],
            rec["seed"],
            rec["repeat_index"],
        )

    return sorted(results, key=sort_key)


# -------------------------
# Output helpers
# -------------------------


CSV_FIELDS = [
    "timestamp_utc",
    "kind",
    "hash",
    "spline",
    "distribution",
    "table_size",
    "seed",
    "width",
    "height",
    "scale",
    "octaves",
    "repeat_index",
    "t_setup_s",
    "t_render_s",
    "throughput_samples_per_s",
    "min",
    "max",
    "mean",
    "field_fingerprint",
]


def write_csv(path: Path, records: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for rec in records:
            writer.writerow(rec)


def write_json_output(path: Path, records: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(records, f, indent=2)
