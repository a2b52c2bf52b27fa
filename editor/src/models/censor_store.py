"""
Chat Screenshot Editor - Censor Regions

Character ranges within a parsed line marked for redaction.

Each region identity (layer_id, line_index, start, end) cycles through:
    absent -> INVISIBLE -> BLACK_BAR -> BLUR -> absent

Offsets index the plain (marker-stripped) text of the line, end exclusive.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class CensorKind(Enum):
    INVISIBLE = 'invisible'
    BLACK_BAR = 'blackbar'
    BLUR = 'blur'

    @staticmethod
    def from_value(value) -> Optional['CensorKind']:
        """Parse a persisted kind string, None if unknown."""
        if isinstance(value, CensorKind):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower().replace('_', '').replace('-', '').replace(' ', '')
        for kind in CensorKind:
            if kind.value == normalized:
                return kind
        return None


# Cycle order; advancing past the last entry removes the region
CENSOR_CYCLE = [CensorKind.INVISIBLE, CensorKind.BLACK_BAR, CensorKind.BLUR]


@dataclass
class CensorRegion:
    layer_id: int
    line_index: int
    start: int
    end: int
    kind: CensorKind = CensorKind.INVISIBLE

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(f"Censor region end ({self.end}) must be > start ({self.start})")

    @property
    def key(self) -> Tuple[int, int, int, int]:
        return (self.layer_id, self.line_index, self.start, self.end)

    def covers(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def to_dict(self) -> dict:
        return {
            'layerId': self.layer_id,
            'lineIndex': self.line_index,
            'startOffset': self.start,
            'endOffset': self.end,
            'type': self.kind.value,
        }


@dataclass
class SelectionContext:
    """Current text selection within one parsed line.

    line_index == -1 means there is no usable selection.
    """
    layer_id: int = -1
    line_index: int = -1
    start: int = 0
    end: int = 0
    text: str = ''

    @property
    def is_valid(self) -> bool:
        return self.layer_id != -1 and self.line_index != -1 and self.end > self.start

    @staticmethod
    def empty() -> 'SelectionContext':
        return SelectionContext()


class CensorStore:
    """Set of censor regions keyed by (layer_id, line_index, start, end)."""

    def __init__(self):
        self._regions: Dict[Tuple[int, int, int, int], CensorRegion] = {}

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self):
        return iter(list(self._regions.values()))

    def get(self, layer_id: int, line_index: int, start: int, end: int) -> Optional[CensorRegion]:
        return self._regions.get((layer_id, line_index, start, end))

    def add(self, region: CensorRegion) -> None:
        """Insert or replace a region (used when restoring a snapshot)."""
        self._regions[region.key] = region

    def cycle(self, selection: SelectionContext) -> Optional[CensorRegion]:
        """Advance the censor state for the selected range.

        Args:
            selection: Current selection; ignored unless it names a layer and line

        Returns:
            The region in its new state, or None if it was removed / nothing happened
        """
        if selection.line_index == -1 or selection.layer_id == -1:
            return None
        if selection.end <= selection.start:
            return None

        key = (selection.layer_id, selection.line_index, selection.start, selection.end)
        region = self._regions.get(key)
        if region is None:
            region = CensorRegion(*key, kind=CENSOR_CYCLE[0])
            self._regions[key] = region
            logger.debug(f"Censor region {key} -> {region.kind.value}")
            return region

        position = CENSOR_CYCLE.index(region.kind)
        if position + 1 >= len(CENSOR_CYCLE):
            del self._regions[key]
            logger.debug(f"Censor region {key} removed")
            return None

        region.kind = CENSOR_CYCLE[position + 1]
        logger.debug(f"Censor region {key} -> {region.kind.value}")
        return region

    def regions_for_line(self, layer_id: int, line_index: int) -> List[CensorRegion]:
        """Regions of one line sorted by start offset (render scan order)."""
        matches = [r for r in self._regions.values()
                   if r.layer_id == layer_id and r.line_index == line_index]
        return sorted(matches, key=lambda r: r.start)

    def remove_layer(self, layer_id: int) -> int:
        """Delete every region belonging to a layer.

        Returns:
            Number of regions removed
        """
        doomed = [key for key, region in self._regions.items() if region.layer_id == layer_id]
        for key in doomed:
            del self._regions[key]
        if doomed:
            logger.debug(f"Removed {len(doomed)} censor regions for layer {layer_id}")
        return len(doomed)

    def clear(self) -> None:
        self._regions.clear()

    def to_list(self) -> List[dict]:
        return [region.to_dict() for region in self._regions.values()]


def scan_regions(start: int, end: int, regions: List[CensorRegion]):
    """Split [start, end) into uncensored and censored pieces.

    Regions must be sorted by start. At each scan position the first region
    that still extends past it wins (first-match-wins under overlap).

    Yields:
        (piece_start, piece_end, region) with region None for plain text
    """
    pos = start
    while pos < end:
        region = next((r for r in regions if r.end > pos and r.start < end), None)
        if region is None:
            yield pos, end, None
            return
        if region.start > pos:
            yield pos, region.start, None
            pos = region.start
        span_end = min(region.end, end)
        yield pos, span_end, region
        pos = span_end
