from typing import List, Optional, Set, Tuple

from stripbooth.config import settings


class Selection:
    """Bounded set of chosen still indices.

    Iteration is always ascending capture order, whatever order the indices
    were toggled in.
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = settings.selection_limit if limit is None else limit
        self._indices: Set[int] = set()

    def toggle(self, index: int) -> bool:
        """Flip ``index``. Returns False when the set is full and the click is ignored."""
        if index in self._indices:
            self._indices.remove(index)
            return True
        if len(self._indices) >= self.limit:
            return False
        self._indices.add(index)
        return True

    def status(self) -> Tuple[int, int]:
        return len(self._indices), self.limit

    @property
    def ready(self) -> bool:
        return len(self._indices) == self.limit

    def ordered(self) -> List[int]:
        return sorted(self._indices)

    def clear(self):
        self._indices.clear()

    def __contains__(self, index) -> bool:
        return index in self._indices

    def __iter__(self):
        return iter(self.ordered())

    def __len__(self):
        return len(self._indices)
