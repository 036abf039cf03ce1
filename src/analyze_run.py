"""Analyze a recorded orbit-lock run and generate diagnostic figures."""
from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Dict, List

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


TIMESERIES_FILENAME = "timeseries.csv"
EVENTS_FILENAME = "events.csv"
META_FILENAME = "meta.json"
FIGS_SUBDIR = "figs"
EVENT_TYPES = (
    "track_start",
    "track_reset",
    "lock",
    "auto_lock",
    "lock_rejected",
    "break",
    "body_lost",
    "fuel_empty",
)
MODE_COLORS = {"free": "#4dabf7", "tracking": "#ffa94d", "locked": "#94d82d"}


def load_timeseries(path: Path) -> Dict[str, np.ndarray]:
    with path.open("r", newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        raw: Dict[str, List[str]] = {name: [] for name in reader.fieldnames or []}
        for row in reader:
            for key, value in row.items():
                if key is None:
                    continue
                raw.setdefault(key, []).append(value)
    columns: Dict[str, np.ndarray] = {}
    for key, values in raw.items():
        try:
            columns[key] = np.asarray([float(v) for v in values])
        except ValueError:
            columns[key] = np.asarray(values, dtype=str)
    return columns


def load_events(path: Path) -> List[dict]:
    with path.open("r", newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        events: List[dict] = []
        for row in reader:
            if not row or not row.get("type"):
                continue
            event = {
                "t": float(row["t"]),
                "type": row["type"],
                "body": row.get("body") or None,
                "radius": float(row["radius"]),
                "speed": float(row["speed"]),
            }
            details_raw = row.get("details", "")
            if details_raw:
                try:
                    event["details"] = json.loads(details_raw)
                except json.JSONDecodeError:
                    event["details"] = details_raw
            events.append(event)
    return events


def ensure_fig_dir(run_dir: Path) -> Path:
    fig_dir = run_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def summarize_events(events: List[dict]) -> Dict[str, int]:
    summary: Dict[str, int] = {event_type: 0 for event_type in EVENT_TYPES}
    for event in events:
        if event["type"] in summary:
            summary[event["type"]] += 1
    return summary


def time_in_modes(ts: Dict[str, np.ndarray]) -> Dict[str, float]:
    """Seconds spent in each mode, attributing each interval to its start sample."""

    totals = {mode: 0.0 for mode in MODE_COLORS}
    t = ts.get("t", np.array([]))
    modes = ts.get("mode", np.array([]))
    if t.size < 2 or modes.size != t.size:
        return totals
    for start, end, mode in zip(t[:-1], t[1:], modes[:-1]):
        totals[str(mode)] = totals.get(str(mode), 0.0) + float(end - start)
    return totals


def fuel_used(ts: Dict[str, np.ndarray]) -> float:
    fuel = ts.get("fuel", np.array([]))
    if fuel.size == 0:
        return 0.0
    return float(fuel[0] - fuel[-1])


def exit_speed_gains(events: List[dict]) -> List[float]:
    """Momentum multipliers recorded on each orbit break."""

    gains = []
    for event in events:
        details = event.get("details")
        if event["type"] == "break" and isinstance(details, dict):
            gains.append(float(details.get("momentum", 1.0)))
    return gains


def plot_trajectory(fig_dir: Path, ts: Dict[str, np.ndarray], meta: dict) -> None:
    fig, ax = plt.subplots(figsize=(6, 6))
    modes = ts.get("mode", np.array([]))
    for mode, color in MODE_COLORS.items():
        mask = modes == mode
        if np.any(mask):
            ax.scatter(ts["x"][mask], ts["y"][mask], s=4, color=color, label=mode)
    theta = np.linspace(0, 2 * np.pi, 256)
    for body in meta.get("bodies", []):
        bx, by = body["position"]
        ax.scatter([bx], [by], color="#e8590c", s=40)
        radius = body.get("influence_radius", 0.0)
        ax.plot(bx + radius * np.cos(theta), by + radius * np.sin(theta), color="#e8590c", alpha=0.2)
        ax.annotate(body["name"], (bx, by), textcoords="offset points", xytext=(6, 6))
    ax.set_aspect("equal", "box")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title("Trajectory by mode")
    ax.legend()
    fig.tight_layout()
    fig.savefig(fig_dir / "trajectory_xy.png", dpi=150)
    plt.close(fig)


def plot_series(
    fig_dir: Path,
    ts: Dict[str, np.ndarray],
    column: str,
    ylabel: str,
    filename: str,
    color: str,
    events: List[dict] | None = None,
) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(ts["t"], ts[column], color=color)
    for event in events or []:
        if event["type"] in ("lock", "auto_lock"):
            ax.axvline(event["t"], color="#2b8a3e", linestyle="--", alpha=0.5)
        elif event["type"] in ("break", "body_lost"):
            ax.axvline(event["t"], color="#c92a2a", linestyle=":", alpha=0.5)
    ax.set_xlabel("t [s]")
    ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / filename, dpi=150)
    plt.close(fig)


def print_summary(
    run_dir: Path,
    meta: dict,
    modes: Dict[str, float],
    used: float,
    event_summary: Dict[str, int],
    gains: List[float],
) -> None:
    print(f"Run: {run_dir.name}")
    if "scenario_name" in meta:
        print(f" Scenario: {meta['scenario_name']}")
    print(" Time in mode: " + ", ".join(f"{mode} {seconds:.2f}s" for mode, seconds in modes.items()))
    print(f" Fuel used: {used:.2f}%")
    if gains:
        print(f" Orbit breaks: {len(gains)}, best momentum multiplier {max(gains):.3f}")
    else:
        print(" Orbit breaks: none")
    print(
        " Events:"
        + ",".join(f" {etype}: {count}" for etype, count in event_summary.items() if count)
    )


def resolve_run_dir(run_dir: str | None, base_runs_dir: Path) -> Path | None:
    if run_dir:
        run_path = Path(run_dir)
        if not run_path.is_dir():
            run_path = base_runs_dir / run_dir
        return run_path
    last_run_file = base_runs_dir / "last_run.txt"
    if not last_run_file.exists():
        return None
    return base_runs_dir / last_run_file.read_text(encoding="utf-8").strip()


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Analyze a logged run and write figures.")
    parser.add_argument("run_dir", nargs="?", help="path or id of a specific run directory")
    parser.add_argument("--runs-dir", default=str(Path("data") / "runs"))
    args = parser.parse_args(argv)

    run_path = resolve_run_dir(args.run_dir, Path(args.runs_dir))
    if run_path is None:
        parser.error("No run given and last_run.txt is missing.")
    if not run_path.is_dir():
        parser.error(f"Run directory not found: {run_path}")

    meta_path = run_path / META_FILENAME
    ts_path = run_path / TIMESERIES_FILENAME
    ev_path = run_path / EVENTS_FILENAME
    if not meta_path.exists() or not ts_path.exists() or not ev_path.exists():
        parser.error("Run directory is missing meta/timeseries/events files.")

    with meta_path.open("r", encoding="utf-8") as fh:
        meta = json.load(fh)
    ts = load_timeseries(ts_path)
    events = load_events(ev_path)
    if not ts or ts.get("t", np.array([])).size == 0:
        parser.error("timeseries.csv is empty; nothing to analyze.")

    fig_dir = ensure_fig_dir(run_path)
    plot_trajectory(fig_dir, ts, meta)
    plot_series(fig_dir, ts, "speed", "speed", "speed.png", "#4dabf7", events)
    plot_series(fig_dir, ts, "fuel", "fuel [%]", "fuel.png", "#ffa94d", events)
    plot_series(fig_dir, ts, "radius", "orbit radius", "orbit_radius.png", "#94d82d", events)

    print_summary(
        run_path,
        meta,
        time_in_modes(ts),
        fuel_used(ts),
        summarize_events(events),
        exit_speed_gains(events),
    )


if __name__ == "__main__":
    main()
