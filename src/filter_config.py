"""Filter configuration for the DXCC analysis.

A `FilterConfiguration` is an immutable snapshot of every active filter.
Mode, operator and date range are pre-aggregation filters (they change
which records are folded into aggregates); search, status, continent,
platform and band are post-aggregation filters (they change which
aggregates are visible and how their fields are read).
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from field_classifiers import BANDS, MODE_CATEGORIES, PLATFORMS, PLATFORM_LABELS


ALL = 'all'

STATUS_ALL = 'all'
STATUS_CONFIRMED = 'confirmed'
STATUS_WORKED = 'worked'
STATUS_NOT_WORKED = 'not_worked'
STATUS_ALL_ENTITIES = 'all_entities'

STATUS_OPTIONS: List[str] = [
    STATUS_ALL, STATUS_CONFIRMED, STATUS_WORKED, STATUS_NOT_WORKED, STATUS_ALL_ENTITIES,
]

STATUS_LABELS = {
    STATUS_ALL: 'All',
    STATUS_CONFIRMED: 'Confirmed',
    STATUS_WORKED: 'Worked Only',
    STATUS_NOT_WORKED: 'Not Worked',
    STATUS_ALL_ENTITIES: 'All Entities',
}


@dataclass(frozen=True)
class FilterConfiguration:
    """Immutable snapshot of the active filters."""
    search: str = ''
    status: str = STATUS_ALL
    mode: str = ALL
    operator: str = ''
    continent: str = ALL
    platform: str = ALL
    band: str = ALL
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def __post_init__(self) -> None:
        if self.status not in STATUS_OPTIONS:
            raise ValueError(f"Unknown status '{self.status}'. Choose from: {', '.join(STATUS_OPTIONS)}")
        if self.mode != ALL and self.mode not in MODE_CATEGORIES:
            raise ValueError(f"Unknown mode '{self.mode}'. Choose from: all, {', '.join(MODE_CATEGORIES)}")
        if self.platform != ALL and self.platform not in PLATFORMS:
            raise ValueError(f"Unknown platform '{self.platform}'. Choose from: all, {', '.join(PLATFORMS)}")
        if self.band != ALL and self.band not in BANDS:
            raise ValueError(f"Unknown band '{self.band}'. Choose from: all, {', '.join(BANDS)}")

    # ---- groups ----
    def pre_key(self) -> Tuple:
        """Hashable key of the pre-aggregation filters."""
        return (self.mode, self.operator.strip().upper(), self.date_from, self.date_to)

    def post_key(self) -> Tuple:
        """Hashable key of the post-aggregation filters."""
        return (self.search.strip().lower(), self.status, self.continent.upper(), self.platform, self.band)

    def has_pre_filters(self) -> bool:
        return self.pre_key() != FilterConfiguration().pre_key()

    def has_date_range(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    @property
    def band_filter(self) -> Optional[str]:
        return None if self.band == ALL else self.band

    @property
    def platform_filter(self) -> Optional[str]:
        return None if self.platform == ALL else self.platform

    @property
    def continent_filter(self) -> Optional[str]:
        value = self.continent.strip().upper()
        return None if not value or value == ALL.upper() else value

    def considered_bands(self) -> List[str]:
        """Bands a status question is asked about: the selected band, or all of them."""
        return [self.band] if self.band != ALL else list(BANDS)

    def is_active(self) -> bool:
        return bool(self.summary())

    def summary(self) -> str:
        """
        Describe every active filter on one line.

        Returns an empty string when no filter is active.
        """
        parts = []
        if self.search.strip():
            parts.append(f"Search='{self.search.strip()}'")
        if self.status != STATUS_ALL:
            parts.append(f"Status={STATUS_LABELS[self.status]}")
        if self.mode != ALL:
            parts.append(f"Mode={self.mode}")
        if self.operator.strip():
            parts.append(f"Operator={self.operator.strip().upper()}")
        if self.continent_filter:
            parts.append(f"Continent={self.continent_filter}")
        if self.platform != ALL:
            parts.append(f"Platform={PLATFORM_LABELS[self.platform]}")
        if self.band != ALL:
            parts.append(f"Band={self.band}")
        if self.has_date_range():
            start = self.date_from.isoformat() if self.date_from else '...'
            end = self.date_to.isoformat() if self.date_to else '...'
            parts.append(f"Dates={start} to {end}")
        if not parts:
            return ''
        return 'Filters: ' + '; '.join(parts)
