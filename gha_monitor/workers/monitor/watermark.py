"""Monotonic low-water mark for reported completions."""

from datetime import datetime

from ...models import ensure_utc


class WatermarkTracker:
    """Holds the latest completion time already reported.

    Every completion at or before the floor is assumed to have been
    reported. The floor never moves backwards.
    """

    def __init__(self, floor: datetime):
        self._floor = ensure_utc(floor)

    def current(self) -> datetime:
        return self._floor

    def advance(self, candidate: datetime) -> bool:
        """Raise the floor to ``candidate`` if it is later.

        Returns:
            True when the floor moved
        """
        candidate = ensure_utc(candidate)
        if candidate > self._floor:
            self._floor = candidate
            return True
        return False

    def __repr__(self) -> str:
        return f"WatermarkTracker(floor={self._floor.isoformat()})"
