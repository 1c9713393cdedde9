"""Record file revision history.

``create_new_version`` is the only path that advances ``Record.version``;
the record's file_* columns always mirror the RecordVersion it points at.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from ..database import atomic
from ..exceptions import ForbiddenError, InvalidStateTransitionError
from ..models import FILE_DESCRIPTOR_FIELDS, RecordVersion
from ..repositories import CabinetRepository, RecordRepository, VersionRepository
from ..schemas.version import VersionCreate
from . import permission_service

logger = logging.getLogger(__name__)


class VersionService:
    """Append, list and delete record versions."""

    def __init__(self, db: Session):
        self.db = db
        self.record_repo = RecordRepository(db)
        self.version_repo = VersionRepository(db)
        self.cabinet_repo = CabinetRepository(db)

    def create_new_version(self, record_id: str, version_data: VersionCreate) -> RecordVersion:
        """Append a version numbered max + 1 (or 1) and mirror it onto the record."""
        record = self.record_repo.get_by_id(record_id)

        with atomic(self.db):
            current = self.version_repo.max_version(record_id)
            next_version = current + 1 if current is not None else 1

            version = self.version_repo.add(RecordVersion(
                record_id=record_id,
                version=next_version,
                uploaded_by=version_data.uploaded_by,
                note=version_data.note,
                **version_data.file_descriptor(),
            ))

            for name, value in version_data.file_descriptor().items():
                setattr(record, name, value)
            record.version = next_version
            record.last_modified_by = version_data.uploaded_by

        logger.info("Created record version", extra={"record_id": record_id, "version": next_version})
        return version

    def get_record_versions(self, record_id: str) -> List[RecordVersion]:
        """Versions of a record, highest first. Raises RecordNotFoundError."""
        self.record_repo.get_by_id(record_id)
        return self.version_repo.get_by_record(record_id)

    def delete_version(self, record_id: str, version_id: str, user_id: str) -> None:
        """Delete one version.

        Only the record creator or cabinet owner may do this. The last
        remaining version cannot be deleted. Deleting the active version
        first promotes the highest version below it onto the record.
        """
        record = self.record_repo.get_by_id(record_id)
        cabinet = self.cabinet_repo.get_by_id(record.cabinet_id)
        if not permission_service.can_delete_version(record, cabinet, user_id):
            raise ForbiddenError("You do not have permission to delete this version")

        version = self.version_repo.get_for_record(record_id, version_id)
        if self.version_repo.count(record_id) == 1:
            raise InvalidStateTransitionError(
                "Cannot delete the only version of the record",
                details={"record_id": record_id, "version_id": version_id},
            )

        with atomic(self.db):
            if version.version == record.version:
                previous = self.version_repo.previous_below(record_id, version.version)
                if previous is not None:
                    for name in FILE_DESCRIPTOR_FIELDS:
                        setattr(record, name, getattr(previous, name))
                    record.version = previous.version
                    record.last_modified_by = user_id
            self.db.delete(version)

        logger.info(
            "Deleted record version",
            extra={"record_id": record_id, "version_id": version_id, "user_id": user_id},
        )
