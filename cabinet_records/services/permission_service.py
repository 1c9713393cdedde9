"""Record permission rules as pure functions.

Each operation keeps its own allowed-role set; they are intentionally not
merged into one policy:

    delete record   creator, cabinet owner, approver, member_full
    reject record   approver, member_full
    delete version  creator, cabinet owner

Membership lookups are done by the caller (one query per request) and
passed in as ``is_member_full``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import Cabinet, Record


def is_approver(cabinet: Cabinet, user_id: str) -> bool:
    return user_id in cabinet.approver_ids()


def can_delete_record(record: Record, cabinet: Cabinet, user_id: str, is_member_full: bool) -> bool:
    return (
        record.creator_id == user_id
        or cabinet.created_by_id == user_id
        or is_approver(cabinet, user_id)
        or is_member_full
    )


def can_reject_record(cabinet: Cabinet, user_id: str, is_member_full: bool) -> bool:
    return is_approver(cabinet, user_id) or is_member_full


def can_delete_version(record: Record, cabinet: Cabinet, user_id: str) -> bool:
    return record.creator_id == user_id or cabinet.created_by_id == user_id
