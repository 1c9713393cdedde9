"""Permission rules are pure functions over plain model instances."""

from cabinet_records.models import Cabinet, Record
from cabinet_records.services import permission_service


def _cabinet() -> Cabinet:
    return Cabinet(id="cab", name="c", created_by_id="owner", approvers=[{"userId": "approver"}])


def _record() -> Record:
    return Record(id="rec", title="r", cabinet_id="cab", creator_id="creator")


class TestDeleteRecordPermission:

    def test_allowed(self):
        for user in ("creator", "owner", "approver"):
            assert permission_service.can_delete_record(_record(), _cabinet(), user, is_member_full=False)
        assert permission_service.can_delete_record(_record(), _cabinet(), "someone", is_member_full=True)

    def test_denied(self):
        assert not permission_service.can_delete_record(_record(), _cabinet(), "someone", is_member_full=False)


class TestRejectPermission:

    def test_only_approvers_and_full_members(self):
        assert permission_service.can_reject_record(_cabinet(), "approver", is_member_full=False)
        assert permission_service.can_reject_record(_cabinet(), "someone", is_member_full=True)
        assert not permission_service.can_reject_record(_cabinet(), "owner", is_member_full=False)
        assert not permission_service.can_reject_record(_cabinet(), "creator", is_member_full=False)


class TestDeleteVersionPermission:

    def test_creator_and_owner_only(self):
        assert permission_service.can_delete_version(_record(), _cabinet(), "creator")
        assert permission_service.can_delete_version(_record(), _cabinet(), "owner")
        assert not permission_service.can_delete_version(_record(), _cabinet(), "approver")

    def test_malformed_approver_entries_ignored(self):
        cabinet = Cabinet(id="cab", name="c", created_by_id="owner", approvers=["approver", None])
        assert not permission_service.is_approver(cabinet, "approver")
