"""Unit tests for VersionService: record file revision history."""

import pytest

from cabinet_records.exceptions import (
    ForbiddenError,
    InvalidStateTransitionError,
    RecordNotFoundError,
    VersionNotFoundError,
)
from cabinet_records.models import Record, RecordVersion
from cabinet_records.schemas.version import VersionCreate
from cabinet_records.services.version_service import VersionService
from tests.conftest import add_member, make_cabinet, make_user


@pytest.fixture()
def setup(db):
    owner = make_user(db, "Olive", "Owner")
    creator = make_user(db, "Cora", "Creator")
    approver = make_user(db, "Abe", "Approver")
    cabinet = make_cabinet(db, owner, approvers=[approver])
    record = Record(title="Contract", cabinet_id=cabinet.id, creator_id=creator.id, version=1)
    db.add(record)
    db.commit()
    return {"owner": owner, "creator": creator, "approver": approver, "cabinet": cabinet, "record": record}


def _version(n: int, uploaded_by: str) -> VersionCreate:
    return VersionCreate(
        file_name=f"contract-v{n}.pdf",
        file_size=1000 + n,
        file_type="application/pdf",
        file_path=f"/uploads/contract-v{n}.pdf",
        file_hash=f"hash-{n}",
        uploaded_by=uploaded_by,
    )


def _add_versions(db, setup, count: int) -> list[RecordVersion]:
    svc = VersionService(db)
    return [svc.create_new_version(setup["record"].id, _version(n, setup["creator"].id)) for n in range(1, count + 1)]


class TestCreateNewVersion:

    @pytest.mark.parametrize("count", [1, 2, 5])
    def test_numbers_follow_call_order(self, db, setup, count):
        versions = _add_versions(db, setup, count)
        assert [v.version for v in versions] == list(range(1, count + 1))

        record = db.query(Record).filter(Record.id == setup["record"].id).one()
        assert record.version == count
        assert record.file_name == f"contract-v{count}.pdf"
        assert record.file_hash == f"hash-{count}"
        assert record.last_modified_by == setup["creator"].id

    def test_missing_record(self, db):
        with pytest.raises(RecordNotFoundError):
            VersionService(db).create_new_version("missing", _version(1, "u"))


class TestGetRecordVersions:

    def test_highest_first(self, db, setup):
        _add_versions(db, setup, 3)
        versions = VersionService(db).get_record_versions(setup["record"].id)
        assert [v.version for v in versions] == [3, 2, 1]

    def test_missing_record(self, db):
        with pytest.raises(RecordNotFoundError):
            VersionService(db).get_record_versions("missing")

    def test_no_versions_is_empty(self, db, setup):
        assert VersionService(db).get_record_versions(setup["record"].id) == []


class TestDeleteVersion:

    def test_only_version_cannot_be_deleted(self, db, setup):
        (only,) = _add_versions(db, setup, 1)
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            VersionService(db).delete_version(setup["record"].id, only.id, setup["creator"].id)
        assert "only version" in exc_info.value.message
        assert db.query(RecordVersion).count() == 1

    def test_deleting_active_promotes_previous(self, db, setup):
        versions = _add_versions(db, setup, 3)
        VersionService(db).delete_version(setup["record"].id, versions[2].id, setup["owner"].id)

        record = db.query(Record).filter(Record.id == setup["record"].id).one()
        assert record.version == 2
        assert record.file_name == "contract-v2.pdf"
        assert record.file_size == 1002
        assert record.last_modified_by == setup["owner"].id
        assert db.query(RecordVersion).count() == 2

    def test_deleting_historical_leaves_active(self, db, setup):
        versions = _add_versions(db, setup, 3)
        VersionService(db).delete_version(setup["record"].id, versions[0].id, setup["creator"].id)

        record = db.query(Record).filter(Record.id == setup["record"].id).one()
        assert record.version == 3
        assert record.file_name == "contract-v3.pdf"
        remaining = VersionService(db).get_record_versions(setup["record"].id)
        assert [v.version for v in remaining] == [3, 2]

    def test_next_version_after_delete_continues_from_max(self, db, setup):
        versions = _add_versions(db, setup, 3)
        svc = VersionService(db)
        svc.delete_version(setup["record"].id, versions[0].id, setup["creator"].id)
        new = svc.create_new_version(setup["record"].id, _version(4, setup["creator"].id))
        assert new.version == 4

    @pytest.mark.parametrize("who", ["approver", "member_full"])
    def test_approvers_and_full_members_forbidden(self, db, setup, who):
        versions = _add_versions(db, setup, 2)
        user = setup["approver"]
        if who == "member_full":
            user = make_user(db, "Max", "Member")
            add_member(db, setup["cabinet"], user, role="member_full")

        with pytest.raises(ForbiddenError) as exc_info:
            VersionService(db).delete_version(setup["record"].id, versions[0].id, user.id)
        assert exc_info.value.status_code == 403

    def test_unknown_version(self, db, setup):
        _add_versions(db, setup, 2)
        with pytest.raises(VersionNotFoundError) as exc_info:
            VersionService(db).delete_version(setup["record"].id, "missing", setup["creator"].id)
        assert exc_info.value.status_code == 404
