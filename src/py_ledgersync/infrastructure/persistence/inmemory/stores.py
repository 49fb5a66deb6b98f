from __future__ import annotations

from py_ledgersync.application.ports import SequenceStore, SyncKeyStore


class InMemorySequenceStore(SequenceStore):  # type: ignore[misc]
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:  # noqa: D401
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:  # noqa: D401
        self._values[key] = value

    def snapshot(self) -> dict[str, str]:
        return dict(self._values)


class InMemorySyncKeyStore(SyncKeyStore):  # type: ignore[misc]
    def __init__(self, keys: set[str] | None = None) -> None:
        self._keys: set[str] = set(keys or ())

    async def contains(self, key: str) -> bool:  # noqa: D401
        return key in self._keys

    async def add(self, key: str) -> None:  # noqa: D401
        self._keys.add(key)

    def __len__(self) -> int:
        return len(self._keys)

    def keys(self) -> frozenset[str]:
        return frozenset(self._keys)
