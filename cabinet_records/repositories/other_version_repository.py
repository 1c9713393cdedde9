"""Repository for modify-snapshots (RecordOtherVersion)."""

from typing import List, Optional

from sqlalchemy import func

from ..models import RecordOtherVersion
from ..exceptions import VersionNotFoundError
from .base import BaseRepository


class OtherVersionRepository(BaseRepository[RecordOtherVersion]):

    model_class = RecordOtherVersion
    not_found_error = VersionNotFoundError

    def max_version(self, original_record_id: str) -> Optional[int]:
        return (
            self.db.query(func.max(RecordOtherVersion.version))
            .filter(RecordOtherVersion.original_record_id == original_record_id)
            .scalar()
        )

    def get_by_original(self, original_record_id: str) -> List[RecordOtherVersion]:
        """Snapshots of a record, oldest version first."""
        return (
            self.db.query(RecordOtherVersion)
            .filter(
                RecordOtherVersion.original_record_id == original_record_id,
                RecordOtherVersion.deleted_at.is_(None),
            )
            .order_by(RecordOtherVersion.version.asc())
            .all()
        )
