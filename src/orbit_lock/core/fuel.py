"""Depleting fuel supply that gates thrust and boost."""
from __future__ import annotations

from .config import FUEL_CFG, FuelCfg


class FuelGate:
    """Fuel tank with ``current`` kept within ``[0, max_fuel]``.

    There is no refuelling; the only mutation is :meth:`consume`.
    """

    def __init__(self, cfg: FuelCfg = FUEL_CFG, current: float | None = None) -> None:
        self.cfg = cfg
        self.max_fuel = cfg.max_fuel
        start = self.max_fuel if current is None else current
        self._current = max(0.0, min(self.max_fuel, float(start)))

    @property
    def current(self) -> float:
        return self._current

    @property
    def percentage(self) -> float:
        return self._current / self.max_fuel * 100.0

    def has_fuel(self) -> bool:
        return self._current > 0.0

    def consume(self, rate: float, dt: float) -> float:
        """Burn ``rate * dt`` units and return the amount actually removed."""

        if self._current <= 0.0 or rate <= 0.0 or dt <= 0.0:
            return 0.0
        before = self._current
        self._current = max(0.0, self._current - rate * dt)
        return before - self._current

    def consume_thrust(self, dt: float) -> float:
        return self.consume(self.cfg.thrust_consumption, dt)

    def consume_boost(self, dt: float) -> float:
        return self.consume(self.cfg.boost_consumption, dt)

    def copy(self) -> "FuelGate":
        return FuelGate(self.cfg, self._current)


__all__ = ["FuelGate"]
