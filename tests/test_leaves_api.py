import pytest
from datetime import date, timedelta
from fastapi import status

from leavedesk.models.leave_request import LeaveRequest, LeaveStatus
from leavedesk.models.notification import Notification
from leavedesk.models.user import UserRole, UserStatus


def _payload(**overrides):
    body = {
        "type": "Sick Leave",
        "start_date": "2025-06-01",
        "end_date": "2025-06-01",
        "days": 1,
        "reason": "flu",
    }
    body.update(overrides)
    return body


def _create_leave(client, user, auth_headers, **overrides):
    response = client.post("/api/leaves", headers=auth_headers(user), json=_payload(**overrides))
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def test_create_leave_request(client, db_session, employee_user, manager_user, auth_headers):
    """Employee submits; the manager is told about it."""
    data = _create_leave(client, employee_user, auth_headers)

    assert data["status"] == "Pending"
    assert data["requester_id"] == employee_user.id
    assert data["decided_by_id"] is None
    assert data["decided_on"] is None
    assert data["type"] == "Sick Leave"

    note = db_session.query(Notification).filter(Notification.recipient_id == manager_user.id).one()
    assert note.type == "leave_request"
    assert note.related_leave_id == data["id"]


def test_create_requires_authentication(client):
    response = client.post("/api/leaves", json=_payload())
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.parametrize("overrides,field", [
    ({"type": "Sabbatical"}, "type"),
    ({"days": "three"}, "days"),
    ({"days": 0}, "days"),
    ({"reason": ""}, "reason"),
    ({"start_date": "2025-06-05", "end_date": "2025-06-01"}, None),
])
def test_create_validation_errors(client, employee_user, auth_headers, db_session, overrides, field):
    response = client.post("/api/leaves", headers=auth_headers(employee_user), json=_payload(**overrides))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    if field:
        assert field in [e["field"] for e in body["errors"]]
    assert db_session.query(LeaveRequest).count() == 0


def test_missing_fields_are_reported(client, employee_user, auth_headers):
    response = client.post("/api/leaves", headers=auth_headers(employee_user), json={})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    fields = {e["field"] for e in response.json()["errors"]}
    assert {"type", "start_date", "end_date", "days", "reason"} <= fields


def test_round_trip_get_by_id(client, employee_user, auth_headers):
    created = _create_leave(client, employee_user, auth_headers, type="Annual Leave", days=3,
                            start_date="2025-07-01", end_date="2025-07-03", reason="beach")
    response = client.get(f"/api/leaves/{created['id']}", headers=auth_headers(employee_user))

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == created


def test_get_leave_visibility(client, employee_user, manager_user, other_manager, admin_user, auth_headers):
    created = _create_leave(client, employee_user, auth_headers)
    url = f"/api/leaves/{created['id']}"

    assert client.get(url, headers=auth_headers(manager_user)).status_code == 200
    assert client.get(url, headers=auth_headers(admin_user)).status_code == 200
    forbidden = client.get(url, headers=auth_headers(other_manager))
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN
    assert forbidden.json()["msg"] == "Not authorized to view this leave request"


def test_get_unknown_leave_is_404(client, employee_user, auth_headers):
    response = client.get("/api/leaves/987654", headers=auth_headers(employee_user))
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["msg"] == "Leave request not found"


def test_manager_approval_scenario(client, db_session, employee_user, manager_user, auth_headers):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    created = _create_leave(client, employee_user, auth_headers, start_date=yesterday, end_date=yesterday)

    response = client.put(
        f"/api/leaves/{created['id']}/status",
        headers=auth_headers(manager_user),
        json={"status": "Approved", "comments": "ok"},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "Approved"
    assert data["decided_by_id"] == manager_user.id
    assert data["comments"] == "ok"

    db_session.refresh(employee_user)
    assert employee_user.status == UserStatus.ON_LEAVE
    types = [n.type for n in db_session.query(Notification).filter(Notification.recipient_id == employee_user.id)]
    assert types == ["leave_approved"]


def test_rejection_sets_reason(client, employee_user, admin_user, auth_headers):
    created = _create_leave(client, employee_user, auth_headers)
    response = client.put(
        f"/api/leaves/{created['id']}/status",
        headers=auth_headers(admin_user),
        json={"status": "Rejected", "comments": "Busy quarter"},
    )
    assert response.status_code == 200
    assert response.json()["rejection_reason"] == "Busy quarter"


def test_other_manager_cannot_decide(client, employee_user, other_manager, auth_headers):
    created = _create_leave(client, employee_user, auth_headers)
    response = client.put(
        f"/api/leaves/{created['id']}/status",
        headers=auth_headers(other_manager),
        json={"status": "Approved", "comments": "ok"},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_employee_cannot_reach_status_endpoint(client, employee_user, make_user, auth_headers):
    created = _create_leave(client, employee_user, auth_headers)
    peer = make_user(UserRole.EMPLOYEE)
    response = client.put(
        f"/api/leaves/{created['id']}/status",
        headers=auth_headers(peer),
        json={"status": "Approved", "comments": "ok"},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["msg"] == "Access denied. Manager role required"


@pytest.mark.parametrize("body", [
    {"status": "Approved", "comments": ""},
    {"status": "Pending", "comments": "reset"},
    {"status": "Maybe", "comments": "hmm"},
    {"status": "Approved"},
])
def test_status_update_validation(client, employee_user, manager_user, auth_headers, body):
    created = _create_leave(client, employee_user, auth_headers)
    response = client.put(f"/api/leaves/{created['id']}/status", headers=auth_headers(manager_user), json=body)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_redeciding_is_conflict(client, employee_user, manager_user, auth_headers):
    created = _create_leave(client, employee_user, auth_headers)
    url = f"/api/leaves/{created['id']}/status"
    assert client.put(url, headers=auth_headers(manager_user), json={"status": "Approved", "comments": "ok"}).status_code == 200

    response = client.put(url, headers=auth_headers(manager_user), json={"status": "Rejected", "comments": "changed my mind"})
    assert response.status_code == status.HTTP_409_CONFLICT
    assert client.get(f"/api/leaves/{created['id']}", headers=auth_headers(employee_user)).json()["status"] == "Approved"


def test_cancel_flow(client, db_session, employee_user, manager_user, auth_headers):
    created = _create_leave(client, employee_user, auth_headers)
    url = f"/api/leaves/{created['id']}"

    assert client.delete(url, headers=auth_headers(manager_user)).status_code == status.HTTP_403_FORBIDDEN

    response = client.delete(url, headers=auth_headers(employee_user))
    assert response.status_code == 200
    assert response.json() == {"msg": "Leave request cancelled"}
    assert client.get(url, headers=auth_headers(employee_user)).status_code == 404


def test_cancel_decided_request_is_conflict(client, employee_user, manager_user, auth_headers):
    created = _create_leave(client, employee_user, auth_headers)
    client.put(
        f"/api/leaves/{created['id']}/status",
        headers=auth_headers(manager_user),
        json={"status": "Approved", "comments": "ok"},
    )
    response = client.delete(f"/api/leaves/{created['id']}", headers=auth_headers(employee_user))
    assert response.status_code == status.HTTP_409_CONFLICT


def test_listing_endpoints(client, make_user, employee_user, manager_user, other_manager, admin_user, auth_headers):
    mine_first = _create_leave(client, employee_user, auth_headers, reason="one")
    mine_second = _create_leave(client, employee_user, auth_headers, reason="two")
    outsider = make_user(UserRole.EMPLOYEE, manager=other_manager)
    _create_leave(client, outsider, auth_headers)
    client.put(
        f"/api/leaves/{mine_first['id']}/status",
        headers=auth_headers(manager_user),
        json={"status": "Rejected", "comments": "no"},
    )

    me = client.get("/api/leaves/me", headers=auth_headers(employee_user)).json()
    assert [leave["id"] for leave in me] == [mine_second["id"], mine_first["id"]]

    team = client.get("/api/leaves/team", headers=auth_headers(manager_user)).json()
    assert {leave["id"] for leave in team} == {mine_first["id"], mine_second["id"]}
    assert team[0]["requester"]["full_name"] == "Evan Employee"

    pending = client.get("/api/leaves/pending", headers=auth_headers(manager_user)).json()
    assert [leave["id"] for leave in pending] == [mine_second["id"]]

    everything = client.get("/api/leaves/all", headers=auth_headers(admin_user))
    assert everything.status_code == 200
    assert len(everything.json()) == 3


def test_my_leaves_empty_list(client, employee_user, auth_headers):
    response = client.get("/api/leaves/me", headers=auth_headers(employee_user))
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.parametrize("path,role", [
    ("/api/leaves/all", UserRole.MANAGER),
    ("/api/leaves/all", UserRole.EMPLOYEE),
    ("/api/leaves/team", UserRole.EMPLOYEE),
    ("/api/leaves/pending", UserRole.EMPLOYEE),
])
def test_listing_role_gates(client, make_user, auth_headers, path, role):
    response = client.get(path, headers=auth_headers(make_user(role)))
    assert response.status_code == status.HTTP_403_FORBIDDEN
