"""Application session state — an immutable value threaded through the console.

Nothing here is module-level mutable: every operation returns a new
``AppState`` and the caller keeps whichever value it wants as "current".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from src.contracts.enums import EnergySource
from src.contracts.reading import Reading
from src.shared.settings import StorageSettings
from src.storage.simulator import DEFAULT_STORAGE, clamp_level, hours_spanned, update_storage


@dataclass(frozen=True, slots=True)
class AppState:
    storage_level: float = DEFAULT_STORAGE.initial_level_mwh
    solar_on: bool = True
    wind_on: bool = True
    hydro_on: bool = True
    readings: tuple[Reading, ...] = ()

    @classmethod
    def initial(cls, cfg: StorageSettings = DEFAULT_STORAGE) -> AppState:
        return cls(storage_level=clamp_level(cfg.initial_level_mwh, cfg))

    def is_on(self, source: EnergySource) -> bool:
        return {
            EnergySource.SOLAR: self.solar_on,
            EnergySource.WIND: self.wind_on,
            EnergySource.HYDRO: self.hydro_on,
        }[source]

    @property
    def enabled_sources(self) -> list[EnergySource]:
        return [src for src in EnergySource if self.is_on(src)]

    def toggle(self, source: EnergySource) -> AppState:
        field_name = f"{source.name.lower()}_on"
        return replace(self, **{field_name: not self.is_on(source)})

    def with_readings(self, readings: Iterable[Reading]) -> AppState:
        return replace(self, readings=tuple(readings))

    def with_storage_level(self, level: float, cfg: StorageSettings = DEFAULT_STORAGE) -> AppState:
        return replace(self, storage_level=clamp_level(level, cfg))


def apply_readings(
    state: AppState,
    readings: Iterable[Reading],
    cfg: StorageSettings = DEFAULT_STORAGE,
) -> AppState:
    """Replace the session readings and advance storage over their time span.

    An empty batch leaves the state untouched.
    """
    batch = tuple(readings)
    if not batch:
        return state
    level = update_storage(state.storage_level, batch, hours_spanned(batch), cfg)
    return replace(state, readings=batch, storage_level=level)
