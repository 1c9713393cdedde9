"""Record repository for database operations.

Every read goes through _base_query(), which hides soft-deleted rows, so
callers never need to think about the deleted_at column.
"""

from typing import Iterable, List, Tuple

from sqlalchemy.orm import Query, joinedload, selectinload

from ..models import Cabinet, Record, RecordStatus
from ..exceptions import RecordNotFoundError
from .base import BaseRepository


def _status_values(statuses: Iterable) -> List[str]:
    return [RecordStatus(s).value for s in statuses]


class RecordRepository(BaseRepository[Record]):
    """Repository for record reads and lookups."""

    model_class = Record
    not_found_error = RecordNotFoundError

    def _base_query(self) -> Query:
        """Exclude soft-deleted records from all default queries."""
        return self.db.query(Record).filter(Record.deleted_at.is_(None))

    def _hydrated_query(self) -> Query:
        return self._base_query().options(
            joinedload(Record.cabinet),
            joinedload(Record.creator),
            selectinload(Record.versions),
            joinedload(Record.pdf_file),
        )

    def get_hydrated(self, record_id: str) -> Record:
        """Record with cabinet, creator, versions and PDF side record loaded."""
        record = self._hydrated_query().filter(Record.id == record_id).first()
        if not record:
            raise RecordNotFoundError(record_id)
        return record

    def list_by_status(self, statuses: Iterable) -> List[Record]:
        """Records in any of *statuses*, newest first."""
        return (
            self._hydrated_query()
            .filter(Record.status.in_(_status_values(statuses)))
            .order_by(Record.created_at.desc())
            .all()
        )

    def list_by_creator_and_status(self, creator_id: str, statuses: Iterable) -> List[Record]:
        return (
            self._hydrated_query()
            .filter(
                Record.creator_id == creator_id,
                Record.status.in_(_status_values(statuses)),
            )
            .order_by(Record.created_at.desc())
            .all()
        )

    def list_pending_in_owned_cabinets(self, owner_id: str) -> List[Record]:
        """Pending records in cabinets created by *owner_id*."""
        return (
            self._hydrated_query()
            .join(Cabinet, Record.cabinet_id == Cabinet.id)
            .filter(
                Cabinet.created_by_id == owner_id,
                Record.status == RecordStatus.PENDING.value,
            )
            .order_by(Record.created_at.desc())
            .all()
        )

    def page_active_in_cabinet(self, cabinet_id: str, offset: int, limit: int) -> Tuple[List[Record], int]:
        """One page of a cabinet's active records, newest first, plus the total count."""
        query = self._base_query().filter(
            Record.cabinet_id == cabinet_id,
            Record.is_active.is_(True),
        )
        total = query.count()
        records = (
            query.options(joinedload(Record.creator))
            .order_by(Record.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return records, total
