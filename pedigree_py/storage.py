"""Dog record storage backed by SQLite.

Records live in ``<root>/dogs.db``. The store keeps an in-memory dict of
DogRefs loaded at start-up so lookups during an analysis never touch the
database, and writes through to SQLite on every change.

``DogStore`` satisfies the DogLookup contract (``get_dog``) and is safe for
concurrent reads: FastAPI may call it from several worker threads, so writes
are serialized with a lock.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
from pathlib import Path
import threading
import sqlite3
import logging

from .errors import CollaboratorError
from .models import DogRef, Sex


class DogStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._db_file = self.root / "dogs.db"
        self._conn: Optional[sqlite3.Connection] = None
        try:
            self._connect()
            self._ensure_tables()
            self._load()
        except sqlite3.Error as exc:
            raise CollaboratorError(f"Cannot open dog database {self._db_file}: {exc}") from exc

    def _connect(self) -> None:
        if self._conn is None:
            # handlers may run in worker threads; access is guarded by self._lock
            self._conn = sqlite3.connect(str(self._db_file), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row

    def _ensure_tables(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS dogs(
                id TEXT PRIMARY KEY,
                name TEXT,
                sex TEXT,
                sire_id TEXT,
                dam_id TEXT,
                registration_number TEXT,
                breed TEXT,
                own_coi REAL
            );
            """
        )
        self._conn.commit()

    def _load(self) -> None:
        self.dogs: Dict[str, DogRef] = {}
        cur = self._conn.execute(
            "SELECT id, name, sex, sire_id, dam_id, registration_number, breed, own_coi FROM dogs"
        )
        for row in cur.fetchall():
            self.dogs[row["id"]] = DogRef(
                id=row["id"],
                name=row["name"] or "",
                sex=Sex.parse(row["sex"]),
                sire_id=row["sire_id"],
                dam_id=row["dam_id"],
                registration_number=row["registration_number"],
                breed=row["breed"],
                own_inbreeding_coefficient=row["own_coi"],
            )
        logging.info("Loaded %d dogs from %s", len(self.dogs), self._db_file)

    def _write(self, dogs: Iterable[DogRef]) -> None:
        with self._lock:
            try:
                self._conn.executemany(
                    "INSERT OR REPLACE INTO dogs(id, name, sex, sire_id, dam_id, registration_number, breed, own_coi) VALUES(?, ?, ?, ?, ?, ?, ?, ?)",
                    [
                        (d.id, d.name, d.sex.value, d.sire_id, d.dam_id, d.registration_number, d.breed, d.own_inbreeding_coefficient)
                        for d in dogs
                    ],
                )
                self._conn.commit()
            except sqlite3.Error as exc:
                self._conn.rollback()
                raise CollaboratorError(f"Failed to write dog records: {exc}") from exc

    # Lookup contract
    def get_dog(self, dog_id: str) -> Optional[DogRef]:
        return self.dogs.get(dog_id)

    def list_dogs(self) -> List[DogRef]:
        return sorted(self.dogs.values(), key=lambda d: (d.name.lower(), d.id))

    def add_dog(self, dog: DogRef) -> None:
        self._write([dog])
        self.dogs[dog.id] = dog

    def update_dog(self, dog: DogRef) -> None:
        if dog.id not in self.dogs:
            raise KeyError(f"Dog {dog.id} not found")
        self.add_dog(dog)

    def delete_dog(self, dog_id: str) -> bool:
        if dog_id not in self.dogs:
            return False
        with self._lock:
            try:
                self._conn.execute("DELETE FROM dogs WHERE id = ?", (dog_id,))
                self._conn.commit()
            except sqlite3.Error as exc:
                self._conn.rollback()
                raise CollaboratorError(f"Failed to delete dog {dog_id}: {exc}") from exc
        del self.dogs[dog_id]
        return True

    def import_dogs(self, records: Iterable[Dict[str, Any]]) -> int:
        """Insert or replace dogs from dict records in one transaction."""
        dogs = [DogRef.from_dict(r) for r in records]
        self._write(dogs)
        for d in dogs:
            self.dogs[d.id] = d
        return len(dogs)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
