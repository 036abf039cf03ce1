"""Telemetry sink writing sampled simulation state and orbit events to CSV."""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence, TextIO

if TYPE_CHECKING:  # pragma: no cover
    from .orbit import OrbitEvent
    from .simulation import SimSnapshot


def format_csv_value(value: object) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return f"{float(value):.10g}"
    text = str(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


class _CsvChannel:
    """One CSV file with a header row and a row buffer flushed at a threshold."""

    def __init__(self, path: Path, header: Sequence[str], threshold: int) -> None:
        self.path = path
        self._fh: TextIO = path.open("w", newline="", encoding="utf-8")
        self._fh.write(",".join(header) + "\n")
        self._rows: list[str] = []
        self._threshold = max(1, threshold)

    def append(self, values: Sequence[object]) -> None:
        self._rows.append(",".join(format_csv_value(v) for v in values))
        if len(self._rows) >= self._threshold:
            self.flush()

    def flush(self) -> None:
        if not self._rows:
            return
        self._fh.write("\n".join(self._rows) + "\n")
        self._fh.flush()
        self._rows.clear()

    def close(self) -> None:
        self.flush()
        self._fh.close()


class RunLogger:
    """Stores one run directory per session under ``root_dir``.

    ``timeseries.csv`` receives sampled ship state, ``events.csv`` receives
    orbit state transitions and ``meta.json`` the run configuration. The id
    of the newest run is written to ``last_run.txt`` so analysis tools can
    find it without arguments.
    """

    TIMESERIES_HEADER = [
        "t",
        "x",
        "y",
        "vx",
        "vy",
        "speed",
        "heading",
        "mode",
        "fuel",
        "radius",
        "target_radius",
        "momentum",
    ]
    EVENTS_HEADER = ["t", "type", "body", "radius", "speed", "details"]

    def __init__(
        self,
        root_dir: str | Path = "data/runs",
        run_id: Optional[str] = None,
        *,
        timeseries_flush_threshold: int = 200,
        events_flush_threshold: int = 20,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)
        self.run_id = self._unique_run_id(run_id or f"{datetime.now():%Y%m%d_%H%M%S}_run")
        self.run_dir = self.root_dir / self.run_id
        self.run_dir.mkdir(parents=True, exist_ok=False)
        self.meta_path = self.run_dir / "meta.json"

        self._timeseries = _CsvChannel(
            self.run_dir / "timeseries.csv", self.TIMESERIES_HEADER, timeseries_flush_threshold
        )
        self._events = _CsvChannel(
            self.run_dir / "events.csv", self.EVENTS_HEADER, events_flush_threshold
        )
        self.closed = False

        (self.root_dir / "last_run.txt").write_text(self.run_id, encoding="utf-8")

    @property
    def timeseries_path(self) -> Path:
        return self._timeseries.path

    @property
    def events_path(self) -> Path:
        return self._events.path

    def _unique_run_id(self, base: str) -> str:
        candidate = base
        suffix = 1
        while (self.root_dir / candidate).exists():
            candidate = f"{base}_{suffix:02d}"
            suffix += 1
        return candidate

    def write_meta(self, meta: dict) -> None:
        with self.meta_path.open("w", encoding="utf-8") as fh:
            json.dump(meta, fh, indent=2, sort_keys=True)

    def log_ts(self, values: Sequence[object]) -> None:
        self._timeseries.append(values)

    def log_event(self, values: Sequence[object]) -> None:
        self._events.append(values)

    def log_snapshot(self, snapshot: "SimSnapshot", target_radius: float, momentum: float) -> None:
        radius = snapshot.current_orbit_radius
        self.log_ts(
            [
                snapshot.time,
                snapshot.position[0],
                snapshot.position[1],
                snapshot.velocity[0],
                snapshot.velocity[1],
                snapshot.speed,
                snapshot.orientation,
                snapshot.mode.value,
                snapshot.fuel_percentage,
                radius if radius is not None else 0.0,
                target_radius,
                momentum,
            ]
        )

    def log_orbit_event(self, t: float, event: "OrbitEvent") -> None:
        self.log_event(
            [
                t,
                event.type,
                event.body or "",
                event.radius,
                event.speed,
                json.dumps(event.details, sort_keys=True),
            ]
        )

    def close(self) -> None:
        if self.closed:
            return
        self._timeseries.close()
        self._events.close()
        self.closed = True

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None


__all__ = ["RunLogger", "format_csv_value"]
