"""Record service: lifecycle of records inside cabinets.

Owns create, update, modify, approve, reject and delete, plus the read
paths that return hydrated records. Every write follows the same shape:

1. Lookups, field validation and permission checks run before any
   transaction opens and abort immediately.
2. Row changes run inside one ``atomic()`` block.
3. Activity logging and notifications run after the commit through
   ``_dispatch_side_effects``; their failures are logged and never undo
   the committed change.
"""

import hashlib
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Union

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..database import atomic
from ..exceptions import (
    ForbiddenError,
    InvalidStateTransitionError,
    NoOtherVersionsError,
    StorageError,
    ValidationError,
)
from ..models import (
    ActivityType,
    NoteAction,
    NoteType,
    PdfFile,
    Record,
    RecordNoteComment,
    RecordOtherVersion,
    RecordStatus,
    ResourceType,
)
from ..repositories import (
    CabinetRepository,
    NoteRepository,
    OtherVersionRepository,
    RecordRepository,
    UserRepository,
    VersionRepository,
)
from ..schemas.pdf import PdfExtractResult, UploadedFile
from ..schemas.record import (
    DEFAULT_PRIORITY,
    CabinetRecordItem,
    CabinetRecordsPage,
    NoteResponse,
    OtherVersionResponse,
    RecordCreate,
    RecordDetail,
    RecordModify,
    RecordUpdate,
    RecordWithPdf,
)
from . import activity_service, notification_service, permission_service
from .field_validator import first_attachment, normalize_attachment_fields, validate_fields
from .pdf_extractor import PdfExtractor
from .storage_service import StorageBase, build_upload_key, get_storage

logger = logging.getLogger(__name__)

# Edits that may be cleared to NULL; every other column keeps its value when None is sent.
NULLABLE_EDITS = frozenset({"description", "metadata"})

# Attachment file keys mapped onto Record file-descriptor columns.
_ATTACHMENT_COLUMNS = {
    "fileName": "file_name",
    "filePath": "file_path",
    "fileSize": "file_size",
    "fileType": "file_type",
    "fileHash": "file_hash",
}

StatusFilter = Union[RecordStatus, str, List[Union[RecordStatus, str]]]


def _as_status_list(status: StatusFilter) -> List[RecordStatus]:
    if isinstance(status, (list, tuple, set)):
        return [RecordStatus(s) for s in status]
    return [RecordStatus(status)]


def _normalize_title(title: Optional[str]) -> str:
    trimmed = (title or "").strip()
    if not trimmed:
        raise ValidationError("Record title is required", field="title")
    return trimmed


class RecordService:
    """Record lifecycle operations.

    Collaborators default to the module-level services and can be replaced
    for testing: ``activity`` needs ``log(db, ...)``, ``notifier`` needs
    ``notify``, ``notify_record_approved`` and ``notify_record_rejected``.
    """

    def __init__(
        self,
        db: Session,
        storage: Optional[StorageBase] = None,
        activity=None,
        notifier=None,
        extractor: Optional[PdfExtractor] = None,
    ):
        self.db = db
        self.record_repo = RecordRepository(db)
        self.version_repo = VersionRepository(db)
        self.other_version_repo = OtherVersionRepository(db)
        self.cabinet_repo = CabinetRepository(db)
        self.user_repo = UserRepository(db)
        self.note_repo = NoteRepository(db)
        self.storage = storage or get_storage()
        self.activity = activity or activity_service
        self.notifier = notifier or notification_service
        self.extractor = extractor or PdfExtractor()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_record(self, data: RecordCreate) -> RecordDetail:
        """Create a record at version 1.

        A supplied PDF is extracted and stored after the record commits;
        failures there are logged and the record is kept.
        """
        title = _normalize_title(data.title)
        cabinet = self.cabinet_repo.get_by_id(data.cabinet_id)
        self.user_repo.get_by_id(data.creator_id)

        validated = validate_fields(data.custom_fields, cabinet.custom_fields)
        file_info = first_attachment(validated)

        record = Record(
            title=title,
            description=data.description,
            cabinet_id=cabinet.id,
            creator_id=data.creator_id,
            status=RecordStatus(data.status).value,
            custom_fields=validated,
            tags=list(data.tags),
            record_metadata=data.metadata,
            is_template=data.is_template,
            is_active=data.is_active,
            version=1,
            last_modified_by=data.creator_id,
        )
        if file_info:
            for key, column in _ATTACHMENT_COLUMNS.items():
                setattr(record, column, file_info.get(key))

        with atomic(self.db):
            self.record_repo.add(record)
        record_id = record.id

        logger.info("Created record", extra={"record_id": record_id, "cabinet_id": cabinet.id})

        if data.pdf_file is not None:
            self._attach_pdf(record_id, data.pdf_file)

        self._dispatch_side_effects(
            lambda: self.activity.log(
                self.db,
                user_id=data.creator_id,
                action=ActivityType.CREATE,
                resource_type=ResourceType.RECORD,
                resource_id=record_id,
                resource_name=title,
                details="Record created",
            ),
        )
        return self.get_record_by_id(record_id)

    def update_record(self, record_id: str, data: RecordUpdate, user_id: str) -> RecordDetail:
        """Apply partial edits; a ``comments`` string becomes a comment entry."""
        record = self.record_repo.get_by_id(record_id)
        edits = self._prepare_edits(record, data.field_edits())

        with atomic(self.db):
            self._apply_edits(record, edits)
            record.last_modified_by = user_id
            if data.comments:
                self._add_note(record_id, data.comments, NoteType.COMMENT, user_id)

        title = record.title
        owner_id = record.cabinet.created_by_id
        self._dispatch_side_effects(
            lambda: self.activity.log(
                self.db,
                user_id=user_id,
                action=ActivityType.UPDATE,
                resource_type=ResourceType.RECORD,
                resource_id=record_id,
                resource_name=title,
                details=data.note or "Record updated",
            ),
            lambda: self.notifier.notify(
                self.db,
                user_id=owner_id,
                title="Record Updated",
                message=f'Record "{title}" has been updated.',
                type="record_update",
                entity_type=notification_service.RECORD_ENTITY,
                entity_id=record_id,
            ),
        )
        return self.get_record_by_id(record_id)

    def modify_record(self, data: RecordModify) -> OtherVersionResponse:
        """Snapshot a modified record as a new RecordOtherVersion.

        The original Record row is left untouched. Snapshot versions start
        at 2 since the original counts as version 1.
        """
        original = self.record_repo.get_by_id(data.record_id)
        cabinet = self.cabinet_repo.get_by_id(data.cabinet_id)
        self.user_repo.get_by_id(data.creator_id)
        title = _normalize_title(data.title)

        validated = validate_fields(data.custom_fields, cabinet.custom_fields)

        pdf_info: Dict[str, Any] = {}
        if data.pdf_file is not None:
            pdf_info = self._store_pdf_for_snapshot(data.pdf_file)

        snapshot = RecordOtherVersion(
            original_record_id=original.id,
            title=title,
            description=original.description,
            cabinet_id=cabinet.id,
            creator_id=data.creator_id,
            custom_fields=validated,
            status=RecordStatus(data.status).value,
            tags=list(data.tags),
            is_template=original.is_template,
            is_active=original.is_active,
            last_modified_by=data.creator_id,
            **pdf_info,
        )
        try:
            with atomic(self.db):
                current = self.other_version_repo.max_version(original.id)
                snapshot.version = current + 1 if current is not None else 2
                self.other_version_repo.add(snapshot)
        except sqlalchemy.exc.SQLAlchemyError:
            if pdf_info.get("file_path"):
                self._discard_upload(pdf_info["file_path"])
            raise

        record_id = original.id
        owner_id = cabinet.created_by_id
        next_version = snapshot.version
        self._dispatch_side_effects(
            lambda: self.activity.log(
                self.db,
                user_id=data.creator_id,
                action=ActivityType.UPDATE,
                resource_type=ResourceType.RECORD,
                resource_id=record_id,
                resource_name=title,
                details="Record modified",
            ),
            lambda: self.notifier.notify(
                self.db,
                user_id=owner_id,
                title="Record Modified",
                message=f'Record "{title}" has been modified. New version: {next_version}',
                type="record_update",
                entity_type=notification_service.RECORD_ENTITY,
                entity_id=record_id,
            ),
        )
        return OtherVersionResponse.model_validate(snapshot)

    def approve_record(
        self,
        record_id: str,
        user_id: str,
        note: Optional[str] = None,
        data: Optional[RecordUpdate] = None,
    ) -> RecordDetail:
        """Mark a record approved and add a system note."""
        record = self.record_repo.get_by_id(record_id)
        edits = self._prepare_edits(record, data.field_edits() if data else {})
        edits["status"] = RecordStatus.APPROVED.value

        with atomic(self.db):
            self._apply_edits(record, edits)
            record.last_modified_by = user_id
            self._add_note(record_id, note or "Record approved", NoteType.SYSTEM, user_id, NoteAction.APPROVE)

        title = record.title
        creator_id = record.creator_id
        self._dispatch_side_effects(
            lambda: self.activity.log(
                self.db,
                user_id=user_id,
                action=ActivityType.APPROVE,
                resource_type=ResourceType.RECORD,
                resource_id=record_id,
                resource_name=title,
                details="Record approved",
            ),
            lambda: self.notifier.notify_record_approved(self.db, creator_id, record_id, title),
        )
        return self.get_record_by_id(record_id)

    def reject_record(
        self,
        record_id: str,
        user_id: str,
        note: Optional[str] = None,
        comments: Optional[str] = None,
        data: Optional[RecordUpdate] = None,
    ) -> RecordDetail:
        """Reject a pending record.

        Raises:
            InvalidStateTransitionError: the record is not pending.
            ForbiddenError: caller is neither an approver nor a member_full.
        """
        record = self.record_repo.get_by_id(record_id)
        cabinet = self.cabinet_repo.get_by_id(record.cabinet_id)

        if record.status != RecordStatus.PENDING.value:
            raise InvalidStateTransitionError(
                "Only pending records can be rejected",
                details={"record_id": record_id, "status": record.status},
            )
        is_member_full = self.cabinet_repo.is_member_full(cabinet.id, user_id)
        if not permission_service.can_reject_record(cabinet, user_id, is_member_full):
            raise ForbiddenError("User is not authorized to reject this record")

        edits = self._prepare_edits(record, data.field_edits() if data else {})
        edits["status"] = RecordStatus.REJECTED.value

        with atomic(self.db):
            self._apply_edits(record, edits)
            record.last_modified_by = user_id
            if comments:
                self._add_note(record_id, comments, NoteType.COMMENT, user_id, NoteAction.REJECT)

        title = record.title
        creator_id = record.creator_id
        self._dispatch_side_effects(
            lambda: self.activity.log(
                self.db,
                user_id=user_id,
                action=ActivityType.REJECT,
                resource_type=ResourceType.RECORD,
                resource_id=record_id,
                resource_name=title,
                details=note or "Record rejected",
            ),
            lambda: self.notifier.notify_record_rejected(self.db, creator_id, record_id, title, note or ""),
        )
        return self.get_record_by_id(record_id)

    def delete_record(self, record_id: str, user_id: str) -> None:
        """Hard-delete a record and its history.

        Allowed for the creator, the cabinet owner, a listed approver or a
        member_full of the cabinet.
        """
        record = self.record_repo.get_by_id(record_id)
        cabinet = self.cabinet_repo.get_by_id(record.cabinet_id)
        is_member_full = self.cabinet_repo.is_member_full(cabinet.id, user_id)
        if not permission_service.can_delete_record(record, cabinet, user_id, is_member_full):
            raise ForbiddenError("You do not have permission to delete this record")

        title = record.title
        with atomic(self.db):
            self.version_repo.delete_for_record(record_id)
            self.db.expire(record, ["versions"])
            self.db.delete(record)

        logger.info("Deleted record", extra={"record_id": record_id, "user_id": user_id})
        self._dispatch_side_effects(
            lambda: self.activity.log(
                self.db,
                user_id=user_id,
                action=ActivityType.DELETE,
                resource_type=ResourceType.RECORD,
                resource_id=record_id,
                resource_name=title,
                details="Record deleted",
            ),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_record_by_id(self, record_id: str) -> RecordDetail:
        record = self.record_repo.get_hydrated(record_id)
        return self._to_detail(record, RecordDetail)

    def get_record_with_pdf(self, record_id: str) -> RecordWithPdf:
        record = self.record_repo.get_hydrated(record_id)
        return self._to_detail(record, RecordWithPdf)

    def get_other_records_by_original_id(self, record_id: str) -> List[OtherVersionResponse]:
        """Snapshots of a record, oldest first. Raises NoOtherVersionsError when none exist."""
        snapshots = self.other_version_repo.get_by_original(record_id)
        if not snapshots:
            raise NoOtherVersionsError(record_id)
        results = []
        for snapshot in snapshots:
            response = OtherVersionResponse.model_validate(snapshot)
            results.append(
                response.model_copy(update={"custom_fields": normalize_attachment_fields(snapshot.custom_fields)})
            )
        return results

    def get_records_by_status(self, status: StatusFilter, user_id: Optional[str] = None) -> List[RecordDetail]:
        """Records in the given status(es).

        With *user_id*, only records the user created, approves, or holds
        member_full on are returned.
        """
        records = self.record_repo.list_by_status(_as_status_list(status))
        if user_id is not None:
            member_full_cabinets = self.cabinet_repo.member_full_cabinet_ids(user_id)
            records = [
                r for r in records
                if r.creator_id == user_id
                or permission_service.is_approver(r.cabinet, user_id)
                or r.cabinet_id in member_full_cabinets
            ]
        return [self._to_detail(r, RecordDetail) for r in records]

    def get_my_records_by_status(self, status: StatusFilter, user_id: str) -> List[RecordDetail]:
        records = self.record_repo.list_by_creator_and_status(user_id, _as_status_list(status))
        return [self._to_detail(r, RecordDetail) for r in records]

    def get_records_waiting_for_my_approval(self, user_id: str) -> List[RecordDetail]:
        records = self.record_repo.list_pending_in_owned_cabinets(user_id)
        return [self._to_detail(r, RecordDetail) for r in records]

    def get_cabinet_records(self, cabinet_id: str, page: int = 1, limit: int = 10) -> CabinetRecordsPage:
        """Active records of a cabinet, newest first, with each record's latest note."""
        page = max(page, 1)
        limit = max(limit, 1)
        self.cabinet_repo.get_by_id(cabinet_id)

        records, total = self.record_repo.page_active_in_cabinet(cabinet_id, (page - 1) * limit, limit)
        latest_notes = self.note_repo.latest_for_records(r.id for r in records)

        items = []
        for record in records:
            item = CabinetRecordItem.model_validate(record)
            latest = latest_notes.get(record.id)
            items.append(item.model_copy(update={
                "custom_fields": normalize_attachment_fields(record.custom_fields),
                "note": NoteResponse.model_validate(latest) if latest else None,
                "priority": str((record.record_metadata or {}).get("priority") or DEFAULT_PRIORITY),
            }))

        return CabinetRecordsPage(
            records=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )

    def process_pdf_file(self, upload: UploadedFile) -> PdfExtractResult:
        """Extracted PDF content, or fallback metadata. Never raises."""
        return self.extractor.extract_or_fallback(upload)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _to_detail(self, record: Record, schema):
        latest = self.note_repo.latest_for_record(record.id)
        comments = self.note_repo.comments_for_record(record.id)
        detail = schema.model_validate(record)
        return detail.model_copy(update={
            "custom_fields": normalize_attachment_fields(record.custom_fields),
            "note": NoteResponse.model_validate(latest) if latest else None,
            "comments": [NoteResponse.model_validate(c) for c in comments],
        })

    def _prepare_edits(self, record: Record, edits: Dict[str, Any]) -> Dict[str, Any]:
        """Drop ignored Nones, trim the title and re-validate custom fields."""
        prepared = {k: v for k, v in edits.items() if v is not None or k in NULLABLE_EDITS}
        if "title" in prepared:
            prepared["title"] = _normalize_title(prepared["title"])
        if "custom_fields" in prepared:
            cabinet = self.cabinet_repo.get_by_id(record.cabinet_id)
            prepared["custom_fields"] = validate_fields(prepared["custom_fields"], cabinet.custom_fields)
        return prepared

    @staticmethod
    def _apply_edits(record: Record, edits: Dict[str, Any]) -> None:
        for key, value in edits.items():
            setattr(record, "record_metadata" if key == "metadata" else key, value)

    def _add_note(
        self,
        record_id: str,
        content: str,
        note_type: NoteType,
        user_id: str,
        action: Optional[NoteAction] = None,
    ) -> RecordNoteComment:
        return self.note_repo.add(RecordNoteComment(
            record_id=record_id,
            content=content,
            type=note_type.value,
            action=action.value if action else None,
            created_by=user_id,
        ))

    def _upload(self, upload: UploadedFile) -> str:
        key = build_upload_key(upload.original_name)
        return self.storage.upload(upload.content, key, upload.content_type)

    def _discard_upload(self, location: str) -> None:
        try:
            self.storage.delete(location)
        except StorageError as e:
            logger.warning("Failed to remove orphaned upload %s: %s", location, e)

    def _attach_pdf(self, record_id: str, upload: UploadedFile) -> None:
        """Extract, store and link a PDF to an existing record. Never raises."""
        extracted = self.extractor.extract_or_fallback(upload)
        location = None
        try:
            location = self._upload(upload)
            with atomic(self.db):
                self.db.add(PdfFile(
                    record_id=record_id,
                    original_file_name=upload.original_name,
                    file_path=location,
                    file_size=upload.size,
                    file_hash=hashlib.sha256(upload.content).hexdigest(),
                    page_count=extracted.page_count,
                    extracted_text=extracted.extracted_text,
                    extracted_metadata={"fields": [f.model_dump() for f in extracted.extracted_fields]},
                ))
        except (StorageError, sqlalchemy.exc.SQLAlchemyError) as e:
            logger.error(
                "Failed to store PDF file, continuing without it: %s", e,
                extra={"record_id": record_id, "file_name": upload.original_name},
            )
            if location:
                self._discard_upload(location)

    def _store_pdf_for_snapshot(self, upload: UploadedFile) -> Dict[str, Any]:
        """Store a PDF for a snapshot and return its file-descriptor columns.

        Storage failure is logged and yields no file columns.
        """
        try:
            location = self._upload(upload)
        except StorageError as e:
            logger.error("Failed to process PDF file: %s", e, extra={"file_name": upload.original_name})
            return {}
        return {
            "file_name": upload.original_name,
            "file_path": location,
            "file_size": upload.size,
            "file_type": upload.content_type,
            "file_hash": hashlib.sha256(upload.content).hexdigest(),
        }

    def _dispatch_side_effects(self, *effects: Callable[[], Any]) -> None:
        """Run post-commit effects in order; a failure is logged and the rest still run."""
        for effect in effects:
            try:
                effect()
            except Exception as e:
                logger.error("Post-commit side effect failed: %s", e, exc_info=True)
