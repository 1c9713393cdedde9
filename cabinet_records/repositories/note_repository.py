"""Record notes and comments repository."""

from typing import Dict, Iterable, List, Optional

from ..models import RecordNoteComment, NoteType
from ..exceptions import RecordNotFoundError
from .base import BaseRepository


class NoteRepository(BaseRepository[RecordNoteComment]):

    model_class = RecordNoteComment
    not_found_error = RecordNotFoundError

    def latest_for_record(self, record_id: str) -> Optional[RecordNoteComment]:
        """Newest entry of type note. Comments and system entries are not notes."""
        return (
            self.db.query(RecordNoteComment)
            .filter(
                RecordNoteComment.record_id == record_id,
                RecordNoteComment.type == NoteType.NOTE.value,
            )
            .order_by(RecordNoteComment.created_at.desc())
            .first()
        )

    def latest_for_records(self, record_ids: Iterable[str]) -> Dict[str, RecordNoteComment]:
        """Newest note per record, keyed by record id."""
        ids = list(record_ids)
        if not ids:
            return {}
        entries = (
            self.db.query(RecordNoteComment)
            .filter(
                RecordNoteComment.record_id.in_(ids),
                RecordNoteComment.type == NoteType.NOTE.value,
            )
            .order_by(RecordNoteComment.created_at.desc())
            .all()
        )
        latest: Dict[str, RecordNoteComment] = {}
        for entry in entries:
            latest.setdefault(entry.record_id, entry)
        return latest

    def comments_for_record(self, record_id: str) -> List[RecordNoteComment]:
        """Comment entries for a record, newest first."""
        return (
            self.db.query(RecordNoteComment)
            .filter(
                RecordNoteComment.record_id == record_id,
                RecordNoteComment.type == NoteType.COMMENT.value,
            )
            .order_by(RecordNoteComment.created_at.desc())
            .all()
        )
