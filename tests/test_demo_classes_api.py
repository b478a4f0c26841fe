# tests/test_demo_classes_api.py
"""Demo class administration."""

from tutorlink.models.demo_class import DemoClass
from tutorlink.models.tutor_request import TutorAssignment


class TestUpdateDemoClass:

    def test_completed_demo_cannot_be_cancelled(self, client, admin, tutor, headers, make_demo_class, db):
        demo_id = make_demo_class(tutor, status="completed")

        resp = client.put(
            f"/api/demo-classes/{demo_id}", json={"status": "cancelled"}, headers=headers(admin)
        )

        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_state_transition"
        assert db.get(DemoClass, demo_id).status == "completed"

    def test_admin_notes_still_editable_when_terminal(self, client, admin, tutor, headers, make_demo_class):
        demo_id = make_demo_class(tutor, status="cancelled")
        resp = client.put(
            f"/api/demo-classes/{demo_id}", json={"admin_notes": "Student moved away"}, headers=headers(admin)
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["admin_notes"] == "Student moved away"
        assert resp.json()["data"]["status"] == "cancelled"

    def test_pending_demo_accepted_then_completed(self, client, admin, tutor, headers, make_demo_class):
        demo_id = make_demo_class(tutor)
        url = f"/api/demo-classes/{demo_id}"

        assert client.put(url, json={"status": "accepted"}, headers=headers(admin)).status_code == 200
        resp = client.put(url, json={"status": "completed"}, headers=headers(admin))
        assert resp.json()["data"]["status"] == "completed"

    def test_pending_demo_cannot_jump_to_completed(self, client, admin, tutor, headers, make_demo_class):
        demo_id = make_demo_class(tutor)
        resp = client.put(
            f"/api/demo-classes/{demo_id}", json={"status": "completed"}, headers=headers(admin)
        )
        assert resp.status_code == 400

    def test_tutor_cannot_update(self, client, tutor, headers, make_demo_class):
        demo_id = make_demo_class(tutor)
        resp = client.put(
            f"/api/demo-classes/{demo_id}", json={"status": "accepted"}, headers=headers(tutor)
        )
        assert resp.status_code == 403


class TestReadDemoClasses:

    def test_admin_filters_by_status(self, client, admin, tutor, headers, make_demo_class):
        make_demo_class(tutor, status="pending")
        done = make_demo_class(tutor, status="completed")

        resp = client.get("/api/demo-classes", params={"status": "completed"}, headers=headers(admin))
        assert [d["id"] for d in resp.json()["data"]] == [str(done)]

        everything = client.get("/api/demo-classes", params={"status": "all"}, headers=headers(admin))
        assert len(everything.json()["data"]) == 2

    def test_mine_for_student_and_tutor(self, client, student, tutor, tutor2, headers, make_demo_class):
        demo_id = make_demo_class(tutor, student=student)
        make_demo_class(tutor2)

        for user in (student, tutor):
            resp = client.get("/api/demo-classes/mine", headers=headers(user))
            assert [d["id"] for d in resp.json()["data"]] == [str(demo_id)]

    def test_detail_includes_joined_names(self, client, student, tutor, headers, make_request, make_demo_class):
        req_id = make_request(student=student)
        demo_id = make_demo_class(tutor, student=student, request_id=req_id)

        data = client.get(f"/api/demo-classes/{demo_id}", headers=headers(student)).json()["data"]
        assert data["student_name"] == "Sami Student"
        assert data["tutor_name"] == "Tara Tutor"
        assert data["request_district"] == "Dhaka"

    def test_outsider_cannot_read_detail(self, client, other_student, tutor, headers, make_demo_class):
        demo_id = make_demo_class(tutor)
        resp = client.get(f"/api/demo-classes/{demo_id}", headers=headers(other_student))
        assert resp.status_code == 403


class TestDeleteDemoClass:

    def test_delete_unlinks_assignment(self, client, admin, tutor, headers, make_request, make_assignment, make_demo_class, db):
        req_id = make_request()
        demo_id = make_demo_class(tutor, request_id=req_id)
        aid = make_assignment(req_id, tutor, demo_class_id=demo_id)

        resp = client.delete(f"/api/demo-classes/{demo_id}", headers=headers(admin))

        assert resp.status_code == 200
        assert db.get(DemoClass, demo_id) is None
        assert db.get(TutorAssignment, aid).demo_class_id is None

    def test_missing_demo_is_404(self, client, admin, headers):
        resp = client.delete(
            "/api/demo-classes/00000000-0000-0000-0000-000000000000", headers=headers(admin)
        )
        assert resp.status_code == 404
