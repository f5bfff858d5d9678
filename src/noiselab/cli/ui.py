from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

import typer

from noiselab.core.engine import NoiseEngine
from noiselab.orchestrator.pipeline import RenderParams


def _timestamp_utc() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _abs_path(path: Path | None) -> str:
    if path is None:
        return "n/a"
    try:
        return str(path.resolve())
    except OSError:
        return str(path)


def _truncate_hex(value: str, max_len: int = 12) -> str:
    if len(value) <= max_len:
        return value
    return f"{value[:max_len]}..."


def print_run_header(command: str, engine: NoiseEngine, params: RenderParams | None = None) -> None:
    typer.echo(f"[run] command={command} ts_utc={_timestamp_utc()}")
    typer.echo(
        f"[engine] size={engine.table_size} bounds={engine.min_size}..{engine.max_size} "
        f"default={engine.default_size} seed={engine.seed}"
    )
    typer.echo(
        f"[engine] hash={engine.config.hash.value} spline={engine.config.spline.value} "
        f"distribution={engine.config.distribution.value}"
    )
    if params is not None:
        typer.echo(
            f"[render] {params.width}x{params.height} kind={params.kind} octaves={params.octaves} "
            f"scale={params.scale} origin=({params.origin_x:g},{params.origin_y:g}) "
            f"lacunarity={params.lacunarity} persistence={params.persistence}"
        )


def print_field_excerpt(field, center: tuple[int, int] = (0, 0), window: int = 2) -> None:
    width, height = field.shape
    cx, cy = center
    span = window * 2 + 1

    if width <= span:
        x_start, x_end = 0, width - 1
    else:
        x_start = max(0, min(cx - window, width - span))
        x_end = x_start + span - 1

    if height <= span:
        y_start, y_end = 0, height - 1
    else:
        y_start = max(0, min(cy - window, height - span))
        y_end = y_start + span - 1

    typer.echo(f"[preview] center=({cx},{cy}) window={window} x={x_start}..{x_end} y={y_start}..{y_end}")
    for x in range(x_start, x_end + 1):
        cells = [f"{float(field[x, y]):+.3f}" for y in range(y_start, y_end + 1)]
        typer.echo(f"[preview] x={x}: " + " ".join(cells))


def print_stats(stats: Dict[str, float], fingerprint: str) -> None:
    typer.echo(
        f"[stats] min={stats['min']:.6f} max={stats['max']:.6f} mean={stats['mean']:.6f} "
        f"fingerprint={_truncate_hex(fingerprint)}"
    )


def print_io_write(path: Path) -> None:
    typer.echo(f"[io] Writing output: {_abs_path(path)}")


def print_done(summary: str) -> None:
    typer.echo(f"[done] {summary}")
