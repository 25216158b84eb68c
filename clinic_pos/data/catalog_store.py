"""In-memory medicine catalog with all-or-nothing stock decrements."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional

from clinic_pos.models.medicine import MedicineCatalogEntry


class StockTransaction:
    """Staged stock changes for the medicines locked by a transaction."""

    def __init__(self, store: "CatalogStore", medicine_ids: Iterable[str]) -> None:
        self._store = store
        self._locked = frozenset(medicine_ids)
        self.staged: Dict[str, int] = {}

    def get(self, medicine_id: str) -> Optional[MedicineCatalogEntry]:
        entry = self._store.get(medicine_id)
        if entry is not None and medicine_id in self.staged:
            entry = replace(entry, quantity=self.staged[medicine_id])
        return entry

    def decrement_stock(self, medicine_id: str, new_strip_quantity: int) -> None:
        if medicine_id not in self._locked:
            raise ValueError(f"Medicine '{medicine_id}' is not part of this transaction.")
        entry = self.get(medicine_id)
        if entry is None:
            raise KeyError(f"Medicine '{medicine_id}' not found.")
        if not 0 <= new_strip_quantity <= entry.quantity:
            raise ValueError(
                f"Cannot set stock of '{entry.name}' from {entry.quantity} "
                f"to {new_strip_quantity}."
            )
        self.staged[medicine_id] = new_strip_quantity


class CatalogStore:
    """Medicines by id. Stock only changes through :meth:`transaction`."""

    def __init__(self, medicines: Iterable[MedicineCatalogEntry] = ()) -> None:
        self._entries: Dict[str, MedicineCatalogEntry] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._write_lock = threading.Lock()
        for medicine in medicines:
            self._add(medicine)

    def _add(self, medicine: MedicineCatalogEntry) -> None:
        if medicine.id in self._entries:
            raise ValueError(f"Duplicate medicine id '{medicine.id}'.")
        self._entries[medicine.id] = medicine

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, medicine_id: str) -> bool:
        return medicine_id in self._entries

    def get(self, medicine_id: str) -> Optional[MedicineCatalogEntry]:
        return self._entries.get(medicine_id)

    def list_medicines(self) -> List[MedicineCatalogEntry]:
        return list(self._entries.values())

    def find_by_name(self, name: str) -> Optional[MedicineCatalogEntry]:
        wanted = str(name).strip().lower()
        for entry in self._entries.values():
            if entry.name.strip().lower() == wanted:
                return entry
        return None

    def _lock_for(self, medicine_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(medicine_id, threading.Lock())

    @contextmanager
    def transaction(self, medicine_ids: Iterable[str]) -> Iterator[StockTransaction]:
        """Lock ``medicine_ids`` and apply staged decrements on clean exit.

        Locks are taken in sorted id order. If the block raises, nothing
        staged is applied.
        """
        ids = sorted(set(medicine_ids))
        locks = [self._lock_for(medicine_id) for medicine_id in ids]
        for lock in locks:
            lock.acquire()
        try:
            txn = StockTransaction(self, ids)
            yield txn
            if txn.staged:
                with self._write_lock:
                    self._apply(txn.staged)
        finally:
            for lock in reversed(locks):
                lock.release()

    def _apply(self, quantities: Dict[str, int]) -> None:
        previous = {medicine_id: self._entries[medicine_id] for medicine_id in quantities}
        for medicine_id, quantity in quantities.items():
            self._entries[medicine_id] = replace(previous[medicine_id], quantity=quantity)
        try:
            self._persist(quantities)
        except Exception:
            self._entries.update(previous)
            raise

    def _persist(self, quantities: Dict[str, int]) -> None:
        """Write new strip quantities to backing storage. Nothing to do in memory."""

    def decrement_stock(self, medicine_id: str, new_strip_quantity: int) -> None:
        with self.transaction([medicine_id]) as txn:
            txn.decrement_stock(medicine_id, new_strip_quantity)
