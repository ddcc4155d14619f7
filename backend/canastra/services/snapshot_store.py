"""
Persistence gateway: the tournament snapshot as one row per storage key.

Every save overwrites the whole document. Loading never fails: a missing
row starts a new tournament, a corrupt one is reset and a structurally
broken one is repaired; in each case the result is written straight back.
"""
import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from canastra.config import SNAPSHOT_STORAGE_KEY
from canastra.errors import CorruptSnapshotError
from canastra.models.base import utcnow
from canastra.models.snapshot import TournamentSnapshot
from canastra.models.tournament import Tournament
from canastra.services.snapshot_repair import decode_snapshot, repair_snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, db_engine: Engine, storage_key: str = SNAPSHOT_STORAGE_KEY):
        self.db_engine = db_engine
        self.storage_key = storage_key

    def load(self) -> Tournament:
        raw = self.read_raw()
        if raw is None:
            logger.info("No snapshot stored under %r; starting a new tournament", self.storage_key)
            return self._reset()

        try:
            tournament, repairs = repair_snapshot(decode_snapshot(raw))
        except CorruptSnapshotError as exc:
            logger.error("Snapshot %r is corrupt, resetting: %s", self.storage_key, exc.message)
            return self._reset()

        if repairs:
            logger.warning(
                "Repaired snapshot %r (%d fixes): %s", self.storage_key, len(repairs), "; ".join(repairs)
            )
            self.save(tournament)
        return tournament

    def save(self, tournament: Tournament) -> None:
        payload = tournament.model_dump_json(by_alias=True)
        with Session(self.db_engine) as session:
            row = session.get(TournamentSnapshot, self.storage_key)
            if row is None:
                row = TournamentSnapshot(storage_key=self.storage_key, payload_json=payload)
            else:
                row.payload_json = payload
                row.updated_at = utcnow()
            session.add(row)
            session.commit()

    def read_raw(self) -> Optional[str]:
        """Stored JSON text for this key, or None"""
        with Session(self.db_engine) as session:
            row = session.get(TournamentSnapshot, self.storage_key)
            return row.payload_json if row else None

    def _reset(self) -> Tournament:
        tournament = Tournament()
        self.save(tournament)
        return tournament
