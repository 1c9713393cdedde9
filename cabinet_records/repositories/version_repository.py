"""Record version repository for database operations."""

from typing import List, Optional

from sqlalchemy import func

from ..models import RecordVersion
from ..exceptions import VersionNotFoundError
from .base import BaseRepository


class VersionRepository(BaseRepository[RecordVersion]):
    """Repository for a record's file revision history."""

    model_class = RecordVersion
    not_found_error = VersionNotFoundError

    # get_by_id and get_by_id_optional are inherited from BaseRepository.

    def get_for_record(self, record_id: str, version_id: str) -> RecordVersion:
        """Version *version_id* belonging to *record_id*. Raises VersionNotFoundError."""
        version = (
            self.db.query(RecordVersion)
            .filter(RecordVersion.id == version_id, RecordVersion.record_id == record_id)
            .first()
        )
        if not version:
            raise VersionNotFoundError(version_id)
        return version

    def get_by_record(self, record_id: str) -> List[RecordVersion]:
        """All versions for a record, highest version first."""
        return (
            self.db.query(RecordVersion)
            .filter(RecordVersion.record_id == record_id)
            .order_by(RecordVersion.version.desc())
            .all()
        )

    def max_version(self, record_id: str) -> Optional[int]:
        return (
            self.db.query(func.max(RecordVersion.version))
            .filter(RecordVersion.record_id == record_id)
            .scalar()
        )

    def count(self, record_id: str) -> int:
        return self.db.query(RecordVersion).filter(RecordVersion.record_id == record_id).count()

    def previous_below(self, record_id: str, version: int) -> Optional[RecordVersion]:
        """Highest version strictly below *version*."""
        return (
            self.db.query(RecordVersion)
            .filter(RecordVersion.record_id == record_id, RecordVersion.version < version)
            .order_by(RecordVersion.version.desc())
            .first()
        )

    def delete_for_record(self, record_id: str) -> int:
        return (
            self.db.query(RecordVersion)
            .filter(RecordVersion.record_id == record_id)
            .delete(synchronize_session=False)
        )
