"""
History Store Module

A bounded log of executed command lines that can be listed, searched by
index or prefix, and replayed.

Indices are handed out once, at insertion, and keep counting up forever.
When the store is full the oldest entry is dropped and its index simply
becomes unreachable; it is never reused.

Author: YSNRFD
Version: 1.0.0
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from minish.exceptions import HistoryNotFoundError
from minish.logger import get_logger


REPLAY_MARKER = '!'
LIST_COMMAND = 'history'


@dataclass(frozen=True)
class HistoryEntry:
    """A recorded command line and its permanent 1-based index."""
    index: int
    text: str


class HistoryStore:
    """
    Fixed-capacity circular history.

    Example:
        >>> store = HistoryStore(capacity=2)
        >>> store.record("ls")
        HistoryEntry(index=1, text='ls')
        >>> _ = store.record("pwd")
        >>> _ = store.record("date")
        >>> store.by_index(1) is None
        True
        >>> store.by_prefix("p").text
        'pwd'
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)
        self._next_index = 1
        self._logger = get_logger('history')

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    @property
    def first_index(self) -> Optional[int]:
        """Index of the oldest retained entry."""
        return self._entries[0].index if self._entries else None

    @property
    def last_index(self) -> Optional[int]:
        """Index of the newest retained entry."""
        return self._entries[-1].index if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def entries(self) -> List[HistoryEntry]:
        """Retained entries, oldest first."""
        return list(self._entries)

    @staticmethod
    def is_replay(line: str) -> bool:
        return line.lstrip().startswith(REPLAY_MARKER)

    @classmethod
    def should_record(cls, line: str) -> bool:
        """History queries and blank lines are not recorded."""
        stripped = line.strip()
        return bool(stripped) and stripped != LIST_COMMAND and not cls.is_replay(stripped)

    def record(self, line: str) -> Optional[HistoryEntry]:
        """
        Append a line to the history.

        Args:
            line: Raw command line as typed

        Returns:
            The new entry, or None if the line is not recorded
        """
        if not self.should_record(line):
            return None

        entry = HistoryEntry(self._next_index, line.strip())
        self._next_index += 1

        if len(self._entries) == self.capacity:
            self._logger.debug(
                "Evicting oldest history entry",
                context={'index': self._entries[0].index}
            )
        self._entries.append(entry)
        return entry

    def by_index(self, index: int) -> Optional[HistoryEntry]:
        """Return the entry with the given 1-based index, if still retained."""
        first = self.first_index
        if first is None or not first <= index <= self.last_index:
            return None
        return self._entries[index - first]

    def by_prefix(self, prefix: str) -> Optional[HistoryEntry]:
        """Return the newest entry whose text starts with prefix."""
        for entry in reversed(self._entries):
            if entry.text.startswith(prefix):
                return entry
        return None

    def lookup(self, reference: str) -> HistoryEntry:
        """
        Resolve a replay reference.

        Args:
            reference: "N" or "prefix", with or without the leading '!'

        Returns:
            The matching entry

        Raises:
            HistoryNotFoundError: Nothing matches
        """
        if reference.startswith(REPLAY_MARKER):
            reference = reference[1:]

        if reference.isdecimal():
            index = int(reference)
            entry = self.by_index(index)
            if entry is None:
                raise HistoryNotFoundError(index=index)
            return entry

        entry = self.by_prefix(reference)
        if entry is None:
            raise HistoryNotFoundError(prefix=reference)
        return entry

    def replay(
        self,
        reference: str,
        submit: Callable[[str], int],
        announce: Optional[Callable[[str], None]] = None
    ) -> int:
        """
        Run a stored line again.

        The line goes back through ``submit`` exactly as if it had been
        typed. The caller is responsible for not recording it again.

        Args:
            reference: Replay reference ("!N" or "!prefix")
            submit: Executes a line and returns its status
            announce: Called with the line before it runs

        Returns:
            Status returned by submit

        Raises:
            HistoryNotFoundError: Nothing matches the reference
        """
        entry = self.lookup(reference)
        self._logger.info(
            "Replaying history entry",
            context={'index': entry.index, 'text': entry.text}
        )
        if announce is not None:
            announce(entry.text)
        return submit(entry.text)

    def clear(self) -> None:
        """Forget all entries; numbering continues where it was."""
        self._entries.clear()
