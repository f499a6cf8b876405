"""End-to-end tests through the FastAPI routes."""

from conftest import ADMIN_ID, FACULTY_ID, PENDING_STUDENT, STUDENTS, auth_headers

A, B = STUDENTS[0], STUDENTS[1]


class TestAuth:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_missing_token(self, client):
        assert client.get("/api/auth/me").status_code in (401, 403)

    def test_bad_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_me_reports_capabilities(self, client):
        body = client.get("/api/auth/me", headers=auth_headers(PENDING_STUDENT)).json()
        assert body["role"] == "student"
        assert body["student_profile"]["status"] == "pending"
        assert "diary:write_own" not in body["capabilities"]
        assert "dashboard:view_own" in body["capabilities"]

    def test_unregistered_subject(self, client):
        response = client.get("/api/auth/me", headers=auth_headers("stranger"))
        assert response.status_code == 404
        assert response.json()["category"] == "missing"

    def test_register_then_approve(self, client):
        registration = {"full_name": "Ravi Kumar", "email": "ravi@example.com"}
        response = client.post(
            "/api/auth/register/student", json=registration, headers=auth_headers("new-student")
        )
        assert response.status_code == 200
        assert response.json()["status"] == "pending"

        pending = client.get("/api/admin/approvals", headers=auth_headers(ADMIN_ID)).json()
        profile_id = next(p["id"] for p in pending if p["user_id"] == "new-student")
        response = client.post(
            f"/api/admin/approvals/{profile_id}",
            json={"decision": "approved"},
            headers=auth_headers(ADMIN_ID),
        )
        assert response.json()["status"] == "approved"

        again = client.post(
            f"/api/admin/approvals/{profile_id}",
            json={"decision": "rejected"},
            headers=auth_headers(ADMIN_ID),
        )
        assert again.status_code == 409
        assert again.json()["error"] == "invalid_transition"


class TestErrorMapping:

    def test_validation_is_422_with_fields(self, client):
        response = client.post(
            "/api/leaves",
            json={"leave_date": "2026-03-20", "leave_type": "sick", "reason": "short"},
            headers=auth_headers(A),
        )
        assert response.status_code == 422

    def test_unauthorized_is_403(self, client):
        response = client.post(
            "/api/diary",
            json={
                "entry_date": "2026-03-10",
                "work_description": "Reading the onboarding docs.",
                "hours_worked": 2,
            },
            headers=auth_headers(PENDING_STUDENT),
        )
        assert response.status_code == 403
        assert response.json() == {
            "error": "unauthorized",
            "category": "access",
            "detail": "Not allowed: diary:write_own",
        }

    def test_capacity_is_409(self, client):
        created = client.post(
            "/api/projects", json={"name": "Smart Irrigation"}, headers=auth_headers(A)
        ).json()
        for student in STUDENTS[1:5]:
            response = client.post(
                f"/api/projects/{created['id']}/join", headers=auth_headers(student)
            )
            assert response.status_code == 200
        assert response.json()["member_count"] == 5

        refused = client.post(
            f"/api/projects/{created['id']}/join", headers=auth_headers(STUDENTS[5])
        )
        assert refused.status_code == 409
        assert refused.json()["error"] == "capacity_exceeded"


class TestWorkflows:

    def test_diary_round(self, client):
        fields = {
            "entry_date": "2026-03-10",
            "work_description": "Set up the training pipeline.",
            "hours_worked": 6.5,
        }
        entry = client.post("/api/diary", json=fields, headers=auth_headers(A)).json()
        assert entry["week_number"] == 1
        assert entry["editable"] is True

        response = client.patch(
            f"/api/diary/{entry['id']}", json={"title": "Pipeline"}, headers=auth_headers(A)
        )
        assert response.json()["title"] == "Pipeline"

        client.post(f"/api/diary/{entry['id']}/lock", headers=auth_headers(ADMIN_ID))
        locked = client.patch(
            f"/api/diary/{entry['id']}", json={"title": "Again"}, headers=auth_headers(A)
        )
        assert locked.status_code == 423

        summary = client.get("/api/diary/summary", headers=auth_headers(A)).json()
        assert summary["total_hours"] == 6.5

        faculty_view = client.get(
            "/api/diary", params={"owner_id": A}, headers=auth_headers(FACULTY_ID)
        )
        assert [e["id"] for e in faculty_view.json()] == [entry["id"]]

    def test_leave_review(self, client):
        leave = client.post(
            "/api/leaves",
            json={"leave_date": "2026-03-20", "leave_type": "casual", "reason": "Sister's wedding"},
            headers=auth_headers(A),
        ).json()
        assert leave["status"] == "pending"
        reviewed = client.post(
            f"/api/leaves/{leave['id']}/review",
            json={"decision": "rejected"},
            headers=auth_headers(ADMIN_ID),
        ).json()
        assert reviewed["status"] == "rejected"
        assert reviewed["reviewed_by"] == ADMIN_ID

    def test_query_resolve(self, client):
        query = client.post(
            "/api/queries",
            json={
                "title": "Certificate",
                "category": "course",
                "description": "When will completion certificates be issued?",
            },
            headers=auth_headers(B),
        ).json()
        resolved = client.post(
            f"/api/queries/{query['id']}/resolve", headers=auth_headers(ADMIN_ID)
        ).json()
        assert resolved["is_resolved"] is True
        mine = client.get("/api/queries", headers=auth_headers(B)).json()
        assert [q["id"] for q in mine] == [query["id"]]

    def test_add_member_by_phone(self, client):
        project = client.post(
            "/api/projects", json={"name": "Campus Navigator"}, headers=auth_headers(A)
        ).json()
        found = client.get(
            "/api/projects/students/search",
            params={"phone": "9876543201"},
            headers=auth_headers(A),
        ).json()
        assert found["user_id"] == B
        info = client.post(
            f"/api/projects/{project['id']}/members",
            json={"user_id": found["user_id"]},
            headers=auth_headers(A),
        ).json()
        assert {m["user_id"] for m in info["members"]} == {A, B}

    def test_batches_listing(self, client):
        admin_view = client.get("/api/admin/batches", headers=auth_headers(ADMIN_ID)).json()
        faculty_view = client.get("/api/admin/batches", headers=auth_headers(FACULTY_ID)).json()
        assert len(admin_view) == 2
        assert [b["id"] for b in faculty_view] == ["batch-1"]
        assert all(b["status"] for b in admin_view)

    def test_dashboard(self, client):
        body = client.get("/api/dashboard", headers=auth_headers(PENDING_STUDENT)).json()
        assert body["status"] == "pending"
