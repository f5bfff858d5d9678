from __future__ import annotations

import json
from dataclasses import asdict, replace
from pathlib import Path
from typing import NoReturn

import typer

from noiselab.bench.runner import parse_config, run_benchmark, write_csv, write_json_output
from noiselab.core import constants
from noiselab.core.config import (
    ConfigurationError,
    DistributionKind,
    HashKind,
    NoiseKind,
    SplineKind,
)
from noiselab.core.engine import NoiseEngine
from noiselab.io.formats import save_field
from noiselab.io.settings import ConfigError, parse_render_config
from noiselab.orchestrator.pipeline import (
    EngineSettings,
    RenderParams,
    build_engine,
    describe_settings,
    field_fingerprint,
    field_stats,
    jump_origin,
    render_field,
    render_pixel_noise,
)
from noiselab.cli import ui
from noiselab.utils.logging import get_logger, resolve_log_level, set_command_context, setup_logging

logger = get_logger(__name__)

app = typer.Typer(help="noiselab: 2D Perlin/Value noise engine (headless)")

LOG2_SIZE_OPT = typer.Option(constants.DEFAULT_LOG2_SIZE, "--log2-size", help="Initial table size as a power of two")
SEED_OPT = typer.Option(constants.DEFAULT_SEED, "--seed", help="32-bit table seed")
HASH_OPT = typer.Option(HashKind.PERMUTATION, "--hash", help="Lattice hash")
SPLINE_OPT = typer.Option(SplineKind.CUBIC, "--spline", help="Interpolation spline")
DISTRIBUTION_OPT = typer.Option(DistributionKind.UNIFORM, "--distribution", help="Table distribution")
KIND_OPT = typer.Option(NoiseKind.PERLIN, "--kind", "-k", help="Noise kind")
OCTAVES_OPT = typer.Option(1, "--octaves", help="Number of octaves")
LACUNARITY_OPT = typer.Option(constants.DEFAULT_LACUNARITY, "--lacunarity", help="Per-octave amplitude multiplier")
PERSISTENCE_OPT = typer.Option(constants.DEFAULT_PERSISTENCE, "--persistence", help="Per-octave frequency multiplier")


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _settings(log2_size: int, seed: int, hash_kind: HashKind, spline: SplineKind, distribution: DistributionKind) -> EngineSettings:
    return EngineSettings(
        log2_size=log2_size,
        seed=seed,
        hash=hash_kind.value,
        spline=spline.value,
        distribution=distribution.value,
    )


def _engine(settings: EngineSettings) -> NoiseEngine:
    try:
        return build_engine(settings)
    except ConfigurationError as exc:
        _fail(f"Invalid engine settings: {exc}")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level"),
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level"),
):
    """Configure logging before any command runs."""
    setup_logging(resolve_log_level(verbose, debug))


@app.command()
def sample(
    x: float = typer.Option(..., "--x", help="X coordinate"),
    y: float = typer.Option(..., "--y", help="Y coordinate"),
    kind: NoiseKind = KIND_OPT,
    octaves: int = OCTAVES_OPT,
    lacunarity: float = LACUNARITY_OPT,
    persistence: float = PERSISTENCE_OPT,
    log2_size: int = LOG2_SIZE_OPT,
    seed: int = SEED_OPT,
    hash_kind: HashKind = HASH_OPT,
    spline: SplineKind = SPLINE_OPT,
    distribution: DistributionKind = DISTRIBUTION_OPT,
):
    """Print the turbulence value at a single coordinate."""
    set_command_context("sample")
    engine = _engine(_settings(log2_size, seed, hash_kind, spline, distribution))
    try:
        value = engine.generate(x, y, kind, octaves, lacunarity, persistence)
    except ConfigurationError as exc:
        _fail(str(exc))
    typer.echo(repr(value))


def _given(**values) -> dict:
    """Drop options left unset; enum choices become their string values."""
    return {name: getattr(value, "value", value) for name, value in values.items() if value is not None}


@app.command()
def render(
    out: Path | None = typer.Option(None, "--out", "-o", help="Output stem (writes .npy and .json)"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True, help="YAML render config"),
    width: int | None = typer.Option(None, help=f"Field width in pixels [default: {constants.DEFAULT_RENDER_SIZE}]"),
    height: int | None = typer.Option(None, help=f"Field height in pixels [default: {constants.DEFAULT_RENDER_SIZE}]"),
    scale: float | None = typer.Option(None, help=f"Pixels per lattice unit [default: {constants.DEFAULT_RENDER_SCALE}]"),
    origin_x: float | None = typer.Option(None, "--origin-x", help="Pixel offset added before scaling [default: 0]"),
    origin_y: float | None = typer.Option(None, "--origin-y", help="Pixel offset added before scaling [default: 0]"),
    jump: bool = typer.Option(False, "--jump", help="Use a random origin"),
    pixel_noise: bool = typer.Option(False, "--pixel-noise", help="Render uncorrelated pixel noise instead"),
    preview: bool = typer.Option(False, "--preview", help="Print a small excerpt of the field"),
    kind: NoiseKind | None = typer.Option(None, "--kind", "-k", help=f"Noise kind [default: {constants.NOISE_KIND}]"),
    octaves: int | None = typer.Option(None, "--octaves", help=f"Number of octaves [default: {constants.DEFAULT_OCTAVES}]"),
    lacunarity: float | None = typer.Option(None, "--lacunarity", help="Per-octave amplitude multiplier"),
    persistence: float | None = typer.Option(None, "--persistence", help="Per-octave frequency multiplier"),
    log2_size: int | None = typer.Option(None, "--log2-size", help="Initial table size as a power of two"),
    seed: int | None = typer.Option(None, "--seed", help="32-bit table seed"),
    hash_kind: HashKind | None = typer.Option(None, "--hash", help="Lattice hash"),
    spline: SplineKind | None = typer.Option(None, "--spline", help="Interpolation spline"),
    distribution: DistributionKind | None = typer.Option(None, "--distribution", help="Table distribution"),
):
    """
    Render a field by sampling the engine once per pixel.

    Values come from --config when given, otherwise from the defaults; any
    engine or render flag passed on the command line overrides both.
    """
    set_command_context("render")
    settings, params = EngineSettings(), RenderParams()
    if config is not None:
        try:
            settings, params = parse_render_config(config)
        except ConfigError as exc:
            _fail(f"Config error: {exc}")
    settings = replace(
        settings,
        **_given(log2_size=log2_size, seed=seed, hash=hash_kind, spline=spline, distribution=distribution),
    )
    params = replace(
        params,
        **_given(
            width=width,
            height=height,
            scale=scale,
            origin_x=origin_x,
            origin_y=origin_y,
            kind=kind,
            octaves=octaves,
            lacunarity=lacunarity,
            persistence=persistence,
        ),
    )
    if jump:
        ox, oy = jump_origin()
        params = replace(params, origin_x=float(ox), origin_y=float(oy))

    engine = _engine(settings)
    try:
        params.validate()
    except ConfigurationError as exc:
        _fail(str(exc))

    ui.print_run_header("render", engine, params)
    if pixel_noise:
        field = render_pixel_noise(params.width, params.height, settings.seed)
        stem = f"pixel-{params.width}x{params.height}"
    else:
        field = render_field(engine, params)
        stem = describe_settings(engine, params)
    fingerprint = field_fingerprint(field)
    stats = field_stats(field)
    ui.print_stats(stats, fingerprint)
    if preview:
        ui.print_field_excerpt(field)

    meta = {
        "engine": asdict(settings),
        "render": asdict(params),
        "table_size": engine.table_size,
        "pixel_noise": pixel_noise,
        "stem": stem,
        "stats": stats,
        "field_fingerprint": fingerprint,
    }
    npy_path, meta_path = save_field(out if out is not None else Path(stem), field, meta)
    logger.debug("Saved field fingerprint=%s to %s", fingerprint, npy_path)
    ui.print_io_write(npy_path)
    ui.print_io_write(meta_path)
    ui.print_done(stem)


@app.command()
def info(
    log2_size: int = LOG2_SIZE_OPT,
    seed: int = SEED_OPT,
    hash_kind: HashKind = HASH_OPT,
    spline: SplineKind = SPLINE_OPT,
    distribution: DistributionKind = DISTRIBUTION_OPT,
    json_out: bool = typer.Option(False, "--json", help="Print as JSON"),
):
    """Show table size, sizing bounds and active strategies."""
    set_command_context("info")
    engine = _engine(_settings(log2_size, seed, hash_kind, spline, distribution))
    if json_out:
        typer.echo(
            json.dumps(
                {
                    "table_size": engine.table_size,
                    "min_size": engine.min_size,
                    "max_size": engine.max_size,
                    "default_size": engine.default_size,
                    "seed": engine.seed,
                    "hash": engine.config.hash.value,
                    "spline": engine.config.spline.value,
                    "distribution": engine.config.distribution.value,
                }
            )
        )
        return
    ui.print_run_header("info", engine)


@app.command()
def selftest():
    """
    Check the lattice-point scenario: size 256, seed 42, permutation hash,
    uniform table, cubic spline.
    """
    set_command_context("selftest")
    engine = NoiseEngine(8, seed=42)
    h00 = engine.corner_hashes(0, 0)[0]
    value = engine.generate(0.0, 0.0, NoiseKind.VALUE, 1)
    perlin = engine.generate(0.0, 0.0, NoiseKind.PERLIN, 1)

    if value == float(engine.table[h00]) and perlin == 0.0:
        typer.secho("Selftest passed (lattice point).", fg=typer.colors.GREEN)
    else:
        typer.secho(f"Selftest FAILED: value={value!r} perlin={perlin!r}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.command()
def bench(
    config: Path = typer.Option(..., "--config", "-c", exists=True, readable=True, help="YAML benchmark config"),
    out: Path = typer.Option(..., "--out", "-o", help="CSV output path"),
    out_json: Path | None = typer.Option(None, "--out-json", help="Optional JSON output path"),
    jobs: int = typer.Option(1, "--jobs", "-j", help="Parallel jobs (variants), default 1"),
    json_summary: bool = typer.Option(False, "--json", help="Print summary JSON to stdout"),
):
    """Render a matrix of engine settings and export timings as CSV/JSON."""
    set_command_context("bench")
    try:
        cfg = parse_config(config)
    except ConfigError as exc:
        _fail(f"Config error: {exc}")

    try:
        records = run_benchmark(cfg, jobs=jobs)
    except Exception as exc:  # noqa: BLE001
        _fail(f"Benchmark failed: {exc}")

    try:
        write_csv(out, records)
        if out_json:
            write_json_output(out_json, records)
    except OSError as exc:
        _fail(f"Failed to write outputs: {exc}")

    typer.secho(f"Benchmark complete. CSV → {out}", fg=typer.colors.GREEN)
    if out_json:
        typer.secho(f"JSON → {out_json}", fg=typer.colors.GREEN)

    if json_summary:
        summary = {
            "runs": len(records),
            "csv": str(out),
            "json": str(out_json) if out_json else None,
        }
        typer.echo(json.dumps(summary))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
