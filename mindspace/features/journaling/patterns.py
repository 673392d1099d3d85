"""
PatternRegistry - holds the recurring patterns an external detector reported.

The registry keeps the detector's order (most relevant first) and never
changes occurrence counts or confidence; it only stores and surfaces them.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from mindspace.features.journaling.models import Pattern
from mindspace.features.journaling.ports import PatternSource
from mindspace.shared.errors import PersistenceError, ValidationError

logger = logging.getLogger("MindSpace.Journal.Patterns")


class PatternRegistry:
    """Ordered, read-mostly collection of detected patterns."""

    def __init__(self, patterns: Iterable[Union[Pattern, Dict[str, Any]]] = ()) -> None:
        self._patterns: Dict[str, Pattern] = {}
        self.replace(patterns)

    def replace(self, patterns: Iterable[Union[Pattern, Dict[str, Any]]]) -> None:
        """
        Load detector output, replacing whatever was held.

        A repeated id keeps its first position and takes the last record.
        On an unreadable record nothing is replaced.

        Raises:
            PersistenceError: a record is missing fields or out of range
        """
        loaded: Dict[str, Pattern] = {}
        for item in patterns:
            try:
                pattern = item if isinstance(item, Pattern) else Pattern.from_row(item)
            except (KeyError, ValueError, ValidationError) as exc:
                raise PersistenceError("Stored pattern could not be read", operation="select") from exc
            loaded[pattern.id] = pattern
        self._patterns = loaded

    async def refresh(self, source: PatternSource, user_id: str) -> List[Pattern]:
        """Reload from the detector's store for ``user_id``."""
        rows = await source.list_patterns(user_id)
        self.replace(rows)
        logger.info("Patterns refreshed", extra={"pattern_count": len(self._patterns)})
        return self.list()

    def list(self) -> List[Pattern]:
        return list(self._patterns.values())

    def top(self, limit: int) -> List[Pattern]:
        return self.list()[:max(limit, 0)]

    def get(self, pattern_id: str) -> Optional[Pattern]:
        return self._patterns.get(pattern_id)

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self):
        return iter(self.list())
