"""Membership application and review endpoints."""
import pytest

from extensions import db
from models.application import Application
from models.review import Review


def _application_payload(**overrides):
    payload = {
        "scholar": {"_id": 1, "scholarshipName": "Chess", "postedUserEmail": "mod@club.test"},
        "scholarshipId": "1",
        "scholarshipName": "Chess",
        "universityName": "Oxford",
        "fees": 20,
        "applicant": "ann@club.test",
        "userName": "Ann",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def student(make_user, login):
    user = make_user("ann@club.test")
    login(user.email)
    return user


@pytest.fixture
def application(app):
    app_obj = Application(
        scholar={"postedUserEmail": "mod@club.test"},
        club_owner_email="mod@club.test",
        scholarship_id="1",
        scholarship_name="Chess",
        university_name="Oxford",
        fees=20,
        applicant="ann@club.test",
        user_name="Ann",
    )
    db.session.add(app_obj)
    db.session.commit()
    return app_obj


class TestStudentApplications:
    def test_create(self, client, student):
        resp = client.post("/applications", json=_application_payload())
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        saved = db.session.get(Application, body["insertedId"])
        assert saved.status == "pending"
        assert saved.club_owner_email == "mod@club.test"

    def test_create_missing_fields(self, client, student):
        resp = client.post("/applications", json=_application_payload(userName=""))
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Missing fields"}

    def test_create_requires_login(self, client):
        assert client.post("/applications", json=_application_payload()).status_code == 401

    def test_list_by_applicant(self, client, student, application):
        assert client.get("/applications/user").status_code == 400
        data = client.get("/applications/user?email=ann@club.test").get_json()
        assert [a["_id"] for a in data] == [application.id]

    def test_detail(self, client, student, application):
        assert client.get("/applications/details/x").status_code == 400
        assert client.get("/applications/details/999").status_code == 404
        assert client.get(f"/applications/details/{application.id}").get_json()["scholarshipName"] == "Chess"

    def test_full_update(self, client, student, application):
        resp = client.put(f"/applications/{application.id}", json={"userName": "Annie", "fees": "25"})
        assert resp.get_json()["success"] is True
        db.session.expire_all()
        saved = db.session.get(Application, application.id)
        assert (saved.user_name, saved.fees) == ("Annie", 25.0)

    def test_only_pending_can_be_withdrawn(self, client, student, application):
        application.status = "processing"
        db.session.commit()
        resp = client.delete(f"/applications/{application.id}")
        assert resp.status_code == 403

        application.status = "pending"
        db.session.commit()
        assert client.delete(f"/applications/{application.id}").get_json() == {"success": True, "deleted": 1}


class TestModeratorApplications:
    def test_student_cannot_moderate(self, client, student, application):
        resp = client.put(f"/applications/{application.id}/status", json={"status": "completed"})
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Forbidden: Moderator only"

    def test_list_for_club_owner(self, client, moderator, application):
        data = client.get("/applications/mod@club.test").get_json()
        assert [a["_id"] for a in data] == [application.id]

    def test_status_update(self, client, moderator, application):
        assert client.put(f"/applications/{application.id}/status", json={"status": "bogus"}).status_code == 400
        assert client.put("/applications/999/status", json={"status": "completed"}).status_code == 404
        resp = client.put(f"/applications/{application.id}/status", json={"status": "completed"})
        assert resp.get_json()["message"] == "Status updated successfully"
        db.session.expire_all()
        assert db.session.get(Application, application.id).status == "completed"

    def test_feedback(self, client, moderator, application):
        resp = client.put(f"/applications/{application.id}/feedback", json={"feedback": "Great"})
        assert resp.status_code == 200
        db.session.expire_all()
        assert db.session.get(Application, application.id).feedback == "Great"

    def test_admin_counts_as_moderator(self, client, admin, application):
        assert client.get("/applications/mod@club.test").status_code == 200

    def test_reject(self, client, moderator, application):
        resp = client.delete(f"/applications/delete/{application.id}")
        assert resp.get_json() == {"success": True, "deleted": 1, "status": 200}
        assert client.delete(f"/applications/delete/{application.id}").get_json()["deleted"] == 0


class TestReviews:
    def _payload(self, **overrides):
        payload = {
            "scholarshipId": "1",
            "scholarshipName": "Chess",
            "universityName": "Oxford",
            "userName": "Ann",
            "userEmail": "ann@club.test",
            "postByEmail": "mod@club.test",
            "ratingPoint": "4",
            "reviewComment": "Nice people",
        }
        payload.update(overrides)
        return payload

    def test_create_and_filter(self, client, student):
        resp = client.post("/reviews", json=self._payload())
        assert resp.get_json()["success"] is True
        client.post("/reviews", json=self._payload(scholarshipId="2", userEmail="bob@club.test"))

        assert len(client.get("/reviews").get_json()) == 2
        data = client.get("/reviews?scholarshipId=1").get_json()
        assert [r["ratingPoint"] for r in data] == [4.0]
        assert len(client.get("/reviews?email=bob@club.test&modMail=mod@club.test").get_json()) == 1
        assert client.get("/reviews?email=bob@club.test&scholarshipId=1").get_json() == []

    def test_missing_fields(self, client, student):
        resp = client.post("/reviews", json=self._payload(reviewComment=""))
        assert resp.status_code == 400

    def test_update_and_delete(self, client, student):
        rid = client.post("/reviews", json=self._payload()).get_json()["insertedId"]
        assert client.put("/reviews/abc", json={}).status_code == 400
        resp = client.put(f"/reviews/{rid}", json={"reviewComment": "Changed", "ratingPoint": 2})
        assert resp.get_json()["success"] is True
        db.session.expire_all()
        assert db.session.get(Review, rid).review_comment == "Changed"

        assert client.delete(f"/reviews/{rid}").get_json() == {"success": True}
        assert client.delete(f"/reviews/{rid}").status_code == 404
