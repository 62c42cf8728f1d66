from __future__ import annotations

from typing import Any, Callable, Generic, Hashable, Iterable, Sequence, TypeVar


RecordT = TypeVar("RecordT")


def _default_identity(record: Any) -> Hashable:
    return getattr(record, "id")


class RecordCollection(Generic[RecordT]):
    """Ordered records displayed by a list view, keyed by identity."""

    def __init__(
        self,
        records: Iterable[RecordT] = (),
        *,
        identity: Callable[[RecordT], Hashable] | None = None,
    ) -> None:
        self._identity = identity or _default_identity
        self._records: list[RecordT] = []
        self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(tuple(self._records))

    def __contains__(self, record_id: object) -> bool:
        return self._index_of(record_id) >= 0

    def identity(self, record: RecordT) -> Hashable:
        return self._identity(record)

    def records(self) -> tuple[RecordT, ...]:
        return tuple(self._records)

    def replace_all(self, records: Iterable[RecordT]) -> None:
        rows: list[RecordT] = []
        seen: dict[Hashable, int] = {}
        for record in records:
            key = self._identity(record)
            if key in seen:
                rows[seen[key]] = record
                continue
            seen[key] = len(rows)
            rows.append(record)
        self._records = rows

    def get(self, record_id: Hashable) -> RecordT | None:
        index = self._index_of(record_id)
        if index < 0:
            return None
        return self._records[index]

    def merge(self, record: RecordT) -> None:
        """Append a new record or replace the listed one with the same identity.

        Either way the collection ends up holding exactly one record with the
        merged identity.
        """
        key = self._identity(record)
        index = self._index_of(key)
        if index >= 0:
            self._records[index] = record
            self._drop_duplicates(key, keep=index)
            return
        # An edited record that is no longer listed is appended like a new one.
        self._records.append(record)

    def remove(self, record_id: Hashable) -> bool:
        before = len(self._records)
        self._records = [row for row in self._records if self._identity(row) != record_id]
        return len(self._records) != before

    def filtered(
        self,
        query: str,
        keys: Callable[[RecordT], Sequence[str | None]],
    ) -> tuple[RecordT, ...]:
        needle = str(query or "").strip().casefold()
        if not needle:
            return tuple(self._records)
        matches: list[RecordT] = []
        for record in self._records:
            haystack = [str(value or "").casefold() for value in keys(record)]
            if any(needle in value for value in haystack):
                matches.append(record)
        return tuple(matches)

    def _index_of(self, record_id: object) -> int:
        for index, record in enumerate(self._records):
            if self._identity(record) == record_id:
                return index
        return -1

    def _drop_duplicates(self, key: Hashable, *, keep: int) -> None:
        self._records = [
            row
            for index, row in enumerate(self._records)
            if index == keep or self._identity(row) != key
        ]
