"""
Per-universe sequence numbers.

Each universe gets its own counter cell with its own lock, created on first
use. The registry lock is only held while a cell is looked up or created, so
sends on different universes never wait on each other's counters.
"""

import threading
from typing import Dict, List, Optional

from .packet_builder import SEQUENCE_MODULO


class _Counter:
    __slots__ = ('value', 'lock')

    def __init__(self):
        self.value = 0
        self.lock = threading.Lock()


class SequenceTracker:
    """Owns the 8 bit sequence counter of every universe a sender has used."""

    def __init__(self):
        self._counters: Dict[int, _Counter] = {}
        self._registry_lock = threading.Lock()

    def _cell(self, universe: int) -> _Counter:
        cell = self._counters.get(universe)
        if cell is None:
            with self._registry_lock:
                cell = self._counters.setdefault(universe, _Counter())
        return cell

    def next(self, universe: int) -> int:
        """
        Take the sequence number for the next packet on a universe.

        Returns the current value and stores value + 1 (mod 256). Two callers
        on the same universe always get different values.
        """
        cell = self._cell(universe)
        with cell.lock:
            value = cell.value
            cell.value = (value + 1) % SEQUENCE_MODULO
        return value

    def peek(self, universe: int) -> int:
        """Sequence number the next packet on this universe will carry."""
        cell = self._counters.get(universe)
        if cell is None:
            return 0
        with cell.lock:
            return cell.value

    def reset(self, universe: Optional[int] = None):
        with self._registry_lock:
            if universe is None:
                self._counters.clear()
            else:
                self._counters.pop(universe, None)

    def universes(self) -> List[int]:
        with self._registry_lock:
            return sorted(self._counters)

    def __contains__(self, universe: int) -> bool:
        return universe in self._counters

    def __len__(self) -> int:
        return len(self._counters)
