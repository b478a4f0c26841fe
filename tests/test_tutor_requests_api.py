# tests/test_tutor_requests_api.py
"""Tutor request lifecycle endpoints: create, list, update, status, delete."""

import pytest

from tutorlink.models.application import TutorApplication
from tutorlink.models.demo_class import DemoClass
from tutorlink.models.tutor_request import TutorAssignment, TutorRequest


class TestCreateTutorRequest:

    def test_student_creates_request(self, client, student, headers, payload):
        resp = client.post("/api/tutor-requests", json=payload(), headers=headers(student))

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        data = body["data"]
        assert data["studentId"] == str(student.id)
        assert data["status"] == "Active"
        assert data["selectedSubjects"] == ["Math", "Physics"]
        assert data["salaryRange"] == {"min": 3000, "max": 5000}
        assert data["matchedTutors"] == []

    def test_inverted_salary_range_is_rejected(self, client, student, headers, payload, db):
        resp = client.post(
            "/api/tutor-requests",
            json=payload(salaryRange={"min": 5000, "max": 3000}),
            headers=headers(student),
        )

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["code"] == "validation_error"
        assert "min must be <= " in body["message"]
        assert db.query(TutorRequest).count() == 0

    def test_at_least_one_subject_required(self, client, student, headers, payload):
        resp = client.post(
            "/api/tutor-requests",
            json=payload(selectedSubjects=[" "]),
            headers=headers(student),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "At least one subject is required."

    def test_legacy_subject_field_is_folded_in(self, client, student, headers, payload):
        body = payload(selectedSubjects=[], subject="Chemistry")
        resp = client.post("/api/tutor-requests", json=body, headers=headers(student))
        assert resp.status_code == 201
        assert resp.json()["data"]["selectedSubjects"] == ["Chemistry"]

    def test_blank_district_rejected(self, client, student, headers, payload):
        resp = client.post(
            "/api/tutor-requests", json=payload(district="  "), headers=headers(student)
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "District cannot be empty."

    def test_tutor_cannot_post_request(self, client, tutor, headers, payload):
        resp = client.post("/api/tutor-requests", json=payload(), headers=headers(tutor))
        assert resp.status_code == 403
        assert resp.json() == {"success": False, "message": "Tutors cannot post tutor requests."}

    def test_missing_token_is_401(self, client, payload):
        resp = client.post("/api/tutor-requests", json=payload())
        assert resp.status_code == 401
        assert resp.json()["success"] is False

    def test_public_request_needs_phone(self, client, payload):
        ok = client.post("/api/tutor-requests/public", json=payload())
        assert ok.status_code == 201
        assert ok.json()["data"]["studentId"] is None

        missing = client.post("/api/tutor-requests/public", json=payload(phoneNumber=""))
        assert missing.status_code == 400

    def test_public_request_from_tutor(self, client, tutor, payload):
        resp = client.post(f"/api/tutor-requests/public/from-tutor/{tutor.id}", json=payload())
        assert resp.status_code == 201
        assert resp.json()["data"]["requestedTutorId"] == str(tutor.id)

    def test_public_request_from_unknown_tutor(self, client, student, payload):
        resp = client.post(f"/api/tutor-requests/public/from-tutor/{student.id}", json=payload())
        assert resp.status_code == 404


class TestListTutorRequests:

    def test_student_sees_only_own(self, client, student, other_student, headers, make_request):
        mine = make_request(student=student)
        make_request(student=other_student)

        resp = client.get("/api/tutor-requests", headers=headers(student))
        body = resp.json()
        assert [r["id"] for r in body["data"]] == [str(mine)]
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 1}

        own = client.get("/api/tutor-requests/student", headers=headers(student))
        assert [r["id"] for r in own.json()["data"]] == [str(mine)]

    def test_staff_filter_by_subject_and_district(self, client, manager, headers, make_request):
        math = make_request(subjects=("Math", "English"), district="Dhaka")
        make_request(subjects=("Biology",), district="Dhaka")
        make_request(subjects=("Math",), district="Sylhet")

        resp = client.get(
            "/api/tutor-requests",
            params={"subject": "Math", "district": "dhaka"},
            headers=headers(manager),
        )
        assert [r["id"] for r in resp.json()["data"]] == [str(math)]

    def test_subject_filter_matches_bangla_subjects(self, client, manager, headers, make_request):
        bangla = make_request(subjects=("বাংলা", "Math"))
        make_request(subjects=("English",))

        resp = client.get(
            "/api/tutor-requests", params={"subject": "বাংলা"}, headers=headers(manager)
        )
        body = resp.json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["id"] == str(bangla)
        assert body["data"][0]["selectedSubjects"] == ["বাংলা", "Math"]

    @pytest.mark.parametrize("subject", ["%", "M_th", "Ma%"])
    def test_subject_filter_treats_wildcards_literally(self, client, manager, headers, make_request, subject):
        make_request(subjects=("Math",))
        resp = client.get(
            "/api/tutor-requests", params={"subject": subject}, headers=headers(manager)
        )
        assert resp.json()["pagination"]["total"] == 0

    def test_tutor_is_sent_to_job_board(self, client, tutor, headers):
        resp = client.get("/api/tutor-requests", headers=headers(tutor))
        assert resp.status_code == 403

    def test_detail_hidden_from_other_students(self, client, student, other_student, headers, make_request):
        req_id = make_request(student=student)
        assert client.get(f"/api/tutor-requests/{req_id}", headers=headers(student)).status_code == 200
        assert client.get(f"/api/tutor-requests/{req_id}", headers=headers(other_student)).status_code == 403


class TestUpdateTutorRequest:

    def test_empty_admin_note_and_notice_round_trip(self, client, admin, headers, make_request):
        req_id = make_request(admin_note="Call after 5pm", update_notice="Salary raised")

        resp = client.put(
            f"/api/tutor-requests/{req_id}",
            json={"adminNote": "", "updateNotice": ""},
            headers=headers(admin),
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["adminNote"] == ""
        assert data["updateNotice"] == ""

        again = client.get(f"/api/tutor-requests/{req_id}", headers=headers(admin)).json()["data"]
        assert again["adminNote"] == ""
        assert again["updateNotice"] == ""

    def test_unsent_fields_are_untouched(self, client, student, headers, make_request):
        req_id = make_request(student=student, admin_note="keep me")
        resp = client.put(
            f"/api/tutor-requests/{req_id}", json={"area": "Uttara"}, headers=headers(student)
        )
        data = resp.json()["data"]
        assert data["area"] == "Uttara"
        assert data["adminNote"] == "keep me"

    def test_student_cannot_set_admin_note(self, client, student, headers, make_request):
        req_id = make_request(student=student)
        resp = client.put(
            f"/api/tutor-requests/{req_id}", json={"adminNote": "x"}, headers=headers(student)
        )
        assert resp.status_code == 403

    def test_manager_cannot_set_admin_note(self, client, manager, headers, make_request):
        req_id = make_request()
        resp = client.put(
            f"/api/tutor-requests/{req_id}", json={"adminNote": "x"}, headers=headers(manager)
        )
        assert resp.status_code == 403

    @pytest.mark.parametrize(
        "field",
        ["selectedSubjects", "selectedClasses", "district", "area", "studentGender",
         "isSalaryNegotiable", "numberOfStudents", "tutoringType", "salaryRange"],
    )
    def test_required_fields_cannot_be_nulled(self, client, admin, headers, make_request, field):
        req_id = make_request(subjects=("Math",))
        resp = client.put(
            f"/api/tutor-requests/{req_id}", json={field: None}, headers=headers(admin)
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == f"{field} cannot be null."

        data = client.get(f"/api/tutor-requests/{req_id}", headers=headers(admin)).json()["data"]
        assert data["selectedSubjects"] == ["Math"]
        assert data["district"] == "Dhaka"

    def test_optional_fields_can_be_cleared_with_null(self, client, admin, headers, make_request):
        req_id = make_request(admin_note="old note", detailed_location="Road 4")
        resp = client.put(
            f"/api/tutor-requests/{req_id}",
            json={"adminNote": None, "detailedLocation": None},
            headers=headers(admin),
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["adminNote"] is None
        assert data["detailedLocation"] is None

    def test_salary_range_must_stay_ordered(self, client, admin, headers, make_request):
        req_id = make_request()
        resp = client.put(
            f"/api/tutor-requests/{req_id}",
            json={"salaryRange": {"min": 9000, "max": 1000}},
            headers=headers(admin),
        )
        assert resp.status_code == 400


class TestTutorRequestStatus:

    def test_owner_deactivates_and_reactivates(self, client, student, headers, make_request):
        req_id = make_request(student=student)
        url = f"/api/tutor-requests/{req_id}/status"

        assert client.patch(url, json={"status": "Inactive"}, headers=headers(student)).status_code == 200
        assert client.patch(url, json={"status": "Active"}, headers=headers(student)).status_code == 200

    def test_completed_request_cannot_reopen(self, client, admin, headers, make_request):
        req_id = make_request(status="Completed")
        resp = client.patch(
            f"/api/tutor-requests/{req_id}/status", json={"status": "Active"}, headers=headers(admin)
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "invalid_state_transition"
        assert body["current"] == "Completed"
        assert body["target"] == "Active"

    def test_admin_force_overrides_table(self, client, admin, headers, make_request, db):
        req_id = make_request(status="Completed")
        resp = client.patch(
            f"/api/tutor-requests/{req_id}/status",
            json={"status": "Active", "force": True},
            headers=headers(admin),
        )
        assert resp.status_code == 200
        assert db.get(TutorRequest, req_id).status == "Active"

    def test_student_cannot_force_or_mark_assigned(self, client, student, headers, make_request):
        req_id = make_request(student=student)
        url = f"/api/tutor-requests/{req_id}/status"
        assert client.patch(url, json={"status": "Active", "force": True}, headers=headers(student)).status_code == 403
        assert client.patch(url, json={"status": "Assign"}, headers=headers(student)).status_code == 403

    def test_other_student_cannot_change_status(self, client, student, other_student, headers, make_request):
        req_id = make_request(student=student)
        resp = client.patch(
            f"/api/tutor-requests/{req_id}/status",
            json={"status": "Inactive"},
            headers=headers(other_student),
        )
        assert resp.status_code == 403


class TestDeleteTutorRequest:

    def test_delete_cascades_but_keeps_demo_classes(
        self, client, admin, tutor, headers, make_request, make_assignment, make_application,
        make_demo_class, db,
    ):
        req_id = make_request()
        demo_id = make_demo_class(tutor, request_id=req_id)
        make_assignment(req_id, tutor, demo_class_id=demo_id)
        make_application(req_id, tutor)

        resp = client.delete(f"/api/tutor-requests/{req_id}", headers=headers(admin))

        assert resp.status_code == 200
        assert db.query(TutorRequest).count() == 0
        assert db.query(TutorAssignment).count() == 0
        assert db.query(TutorApplication).count() == 0
        demo = db.get(DemoClass, demo_id)
        assert demo is not None
        assert demo.tutor_request_id is None

    def test_unknown_request_is_404(self, client, admin, headers):
        resp = client.delete(
            "/api/tutor-requests/00000000-0000-0000-0000-000000000000", headers=headers(admin)
        )
        assert resp.status_code == 404
        assert resp.json()["message"] == "Tutor request not found."
