"""
Role approval: pending -> approved | rejected, idempotent re-application,
terminal states, the change notification, and re-entry after rejection.
"""
import pytest

from churchhub.exceptions import InvalidTransitionError, NotFoundError, UnauthorizedError, ValidationError
from churchhub.models import AppRole, RoleStatus, UserRoleAssignment
from churchhub.services.user_service import UserService


@pytest.fixture()
def workflow(app):
    return app.extensions["approval_workflow"]


@pytest.fixture()
def applicant(make_member, grace):
    return make_member("applicant@example.com", grace, AppRole.PASTOR, RoleStatus.PENDING)


@pytest.fixture()
def request_row(applicant):
    return UserRoleAssignment.query.filter_by(user_id=applicant.id).one()


class TestDecide:
    def test_approve_stamps_reviewer(self, workflow, resolve, admin, request_row):
        assignment, changed = workflow.decide(request_row.id, "approve", resolve(admin), admin.id)
        assert changed is True
        assert assignment.status == RoleStatus.APPROVED
        assert assignment.reviewed_by == admin.id
        assert assignment.reviewed_at is not None

    def test_approval_is_idempotent(self, workflow, resolve, admin, request_row):
        workflow.decide(request_row.id, "approve", resolve(admin), admin.id)
        first_reviewed_at = request_row.reviewed_at

        assignment, changed = workflow.decide(request_row.id, "approve", resolve(admin), admin.id)
        assert changed is False
        assert assignment.reviewed_at == first_reviewed_at

    def test_repeat_does_not_notify(self, app, workflow, resolve, admin, request_row, applicant):
        workflow.decide(request_row.id, "approve", resolve(admin), admin.id)
        channel = app.extensions["change_channel"]
        with channel.listen_to_row_updates("user_roles", applicant.id) as subscription:
            workflow.decide(request_row.id, "approve", resolve(admin), admin.id)
            assert subscription.get(timeout=0.05) is None

    def test_decision_is_announced(self, app, workflow, resolve, admin, request_row, applicant):
        channel = app.extensions["change_channel"]
        with channel.listen_to_row_updates("user_roles", applicant.id) as subscription:
            workflow.decide(request_row.id, "reject", resolve(admin), admin.id)
            event = subscription.get(timeout=1)
        assert event.table == "user_roles"
        assert event.event_type == "UPDATE"
        assert event.old["status"] == "pending"
        assert event.new["status"] == "rejected"

    def test_rejected_cannot_be_approved(self, workflow, resolve, admin, request_row):
        workflow.decide(request_row.id, "reject", resolve(admin), admin.id)
        with pytest.raises(InvalidTransitionError):
            workflow.decide(request_row.id, "approve", resolve(admin), admin.id)
        assert request_row.status == RoleStatus.REJECTED

    def test_approved_cannot_be_rejected(self, workflow, resolve, admin, request_row):
        workflow.decide(request_row.id, "approve", resolve(admin), admin.id)
        with pytest.raises(InvalidTransitionError):
            workflow.decide(request_row.id, "reject", resolve(admin), admin.id)

    def test_only_admins_decide(self, workflow, resolve, pastor, request_row):
        with pytest.raises(UnauthorizedError):
            workflow.decide(request_row.id, "approve", resolve(pastor), pastor.id)
        assert request_row.status == RoleStatus.PENDING

    def test_unknown_decision(self, workflow, resolve, admin, request_row):
        with pytest.raises(ValidationError):
            workflow.decide(request_row.id, "maybe", resolve(admin), admin.id)

    def test_missing_request(self, workflow, resolve, admin):
        with pytest.raises(NotFoundError):
            workflow.decide(9999, "approve", resolve(admin), admin.id)


class TestReentry:
    def test_declined_identity_files_a_new_row(self, workflow, resolve, admin, applicant, request_row, grace):
        workflow.decide(request_row.id, "reject", resolve(admin), admin.id)

        fresh = UserService.request_role(applicant.id, {"church_id": grace.id, "role": "member"})
        assert fresh.id != request_row.id
        assert fresh.status == RoleStatus.PENDING
        assert request_row.status == RoleStatus.REJECTED
        assert resolve(applicant).status == RoleStatus.PENDING

    def test_open_request_blocks_another(self, applicant, grace):
        from churchhub.exceptions import ConflictError

        with pytest.raises(ConflictError):
            UserService.request_role(applicant.id, {"church_id": grace.id, "role": "member"})


class TestApprovalRoutes:
    def test_list_users_with_pending_count(self, client, admin, applicant, auth_headers):
        res = client.get("/api/admin/users", headers=auth_headers(admin))
        assert res.status_code == 200
        body = res.get_json()
        assert body["pending_count"] == 1
        emails = [row["email"] for row in body["users"]]
        assert "applicant@example.com" in emails
        pending = next(row for row in body["users"] if row["email"] == "applicant@example.com")
        assert pending["profile"]["full_name"] == "Applicant"

    def test_approve_route(self, client, admin, request_row, auth_headers):
        res = client.post(f"/api/admin/users/{request_row.id}/approve", headers=auth_headers(admin))
        assert res.status_code == 200
        body = res.get_json()
        assert body["changed"] is True
        assert body["assignment"]["status"] == "approved"

    def test_terminal_transition_is_a_conflict(self, client, admin, request_row, auth_headers):
        headers = auth_headers(admin)
        client.post(f"/api/admin/users/{request_row.id}/reject", headers=headers)
        res = client.post(f"/api/admin/users/{request_row.id}/approve", headers=headers)
        assert res.status_code == 409

    def test_pastor_cannot_approve(self, client, pastor, request_row, auth_headers):
        res = client.post(f"/api/admin/users/{request_row.id}/approve", headers=auth_headers(pastor))
        assert res.status_code == 403
        assert res.get_json()["outcome"] == "denied"
