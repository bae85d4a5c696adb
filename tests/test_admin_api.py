"""
Admin panel API
"""
import pytest

from app.models import GradeRecord, SubjectList

from conftest import ADMIN_CODE


class TestAdminLogin:
    def test_valid_code_returns_token(self, client, admin_store):
        response = client.post("/api/admin/login", json={"code": ADMIN_CODE})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert admin_store.verify(body["token"])

    def test_wrong_code_is_200_with_failure(self, client):
        response = client.post("/api/admin/login", json={"code": "mauvais"})

        assert response.status_code == 200
        assert response.json() == {"success": False, "message": "Code invalide."}

    def test_unset_admin_code_rejects_everything(self, client, monkeypatch):
        from app.core.config import settings

        monkeypatch.setattr(settings, "ADMIN_CODE", None)
        assert client.post("/api/admin/login", json={"code": ""}).json()["success"] is False

    def test_logout_revokes_token(self, client, admin_store, admin_headers):
        assert client.post("/api/admin/logout", headers=admin_headers).status_code == 200
        assert client.get("/api/admin/students", headers=admin_headers).status_code == 401


class TestAdminTokenCheck:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/admin/matieres"),
            ("get", "/api/admin/students"),
            ("get", "/api/admin/get-results?code=E123"),
            ("post", "/api/admin/save-notes"),
            ("post", "/api/admin/update-results"),
            ("post", "/api/admin/update-field"),
            ("delete", "/api/admin/student/E123"),
        ],
    )
    def test_missing_token(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_expired_token(self, client, admin_headers, clock):
        clock.advance(61 * 60)
        response = client.get("/api/admin/students", headers=admin_headers)

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_use_extends_token(self, client, admin_headers, clock):
        clock.advance(45 * 60)
        assert client.get("/api/admin/students", headers=admin_headers).status_code == 200
        clock.advance(45 * 60)
        assert client.get("/api/admin/students", headers=admin_headers).status_code == 200


class TestSaveNotes:
    def test_save_notes_computes_average(self, client, admin_headers, db_session):
        response = client.post(
            "/api/admin/save-notes",
            json={"code": "E500", "math": 12, "physique": 14, "info": 15},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["success"] is True

        record = db_session.get(GradeRecord, ("E500", 1, 1))
        assert record.notes == {"Mathématiques": 12, "Physique": 14, "Informatique": 15}
        assert record.moyenne == 13.67

    def test_save_notes_keeps_given_average(self, client, admin_headers, db_session):
        client.post(
            "/api/admin/save-notes",
            json={"code": "E500", "math": 12, "physique": 14, "info": 15, "moyenne": 13.456},
            headers=admin_headers,
        )
        assert db_session.get(GradeRecord, ("E500", 1, 1)).moyenne == 13.46

    def test_save_notes_rejects_non_numeric(self, client, admin_headers):
        response = client.post(
            "/api/admin/save-notes",
            json={"code": "E500", "math": "douze", "physique": 14, "info": 15},
            headers=admin_headers,
        )
        assert response.status_code == 400


class TestSubjectLists:
    def test_upsert_and_list(self, client, admin_headers, db_session):
        created = client.post(
            "/api/admin/matieres",
            json={"classe": "2ème année", "periode": 1, "matieres": ["Algèbre", "Chimie"]},
            headers=admin_headers,
        )
        assert created.status_code == 200

        replaced = client.post(
            "/api/admin/matieres",
            json={"classe": 2, "periode": "1ère période", "matieres": '["Analyse"]'},
            headers=admin_headers,
        )
        assert replaced.status_code == 200

        listing = client.get("/api/admin/matieres", headers=admin_headers).json()
        assert listing == [{"classe": "2ème année", "periode": "1ère période", "matieres": ["Analyse"]}]
        assert db_session.query(SubjectList).count() == 1

    def test_invalid_subject_payload(self, client, admin_headers):
        response = client.post(
            "/api/admin/matieres",
            json={"classe": 2, "periode": 1, "matieres": "pas du json"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_invalid_class(self, client, admin_headers):
        response = client.post(
            "/api/admin/matieres",
            json={"classe": 7, "periode": 1, "matieres": []},
            headers=admin_headers,
        )
        assert response.status_code == 400


class TestResultsManagement:
    def test_update_results_upserts_cell(self, client, admin_headers, db_session):
        response = client.post(
            "/api/admin/update-results",
            json={
                "code": "E700",
                "option": "Réseaux",
                "academicYear": "2024-2025",
                "classe": "1ère année",
                "periode": "2ème période",
                "notes": {"Maths": "12,5", "Physique": 15, "Sport": ""},
            },
            headers=admin_headers,
        )
        assert response.status_code == 200

        record = db_session.get(GradeRecord, ("E700", 1, 2))
        assert record.notes == {"Maths": 12.5, "Physique": 15}
        assert record.moyenne == 13.75
        assert record.option == "Réseaux"
        assert record.academic_year == "2024-2025"

    def test_update_results_links_user(self, client, admin_headers, db_session, make_user):
        user = make_user(email="lie@example.com")
        client.post(
            "/api/admin/update-results",
            json={"code": "E701", "classe": 1, "periode": 1, "notes": {"Maths": 10}, "email": "LIE@example.com"},
            headers=admin_headers,
        )
        assert db_session.get(GradeRecord, ("E701", 1, 1)).user_id == user.id

    def test_update_results_unknown_email(self, client, admin_headers):
        response = client.post(
            "/api/admin/update-results",
            json={"code": "E701", "classe": 1, "periode": 1, "notes": {}, "email": "absent@example.com"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_get_results_and_students(self, client, admin_headers, grade_records):
        students = client.get("/api/admin/students", headers=admin_headers).json()
        assert students == {"success": True, "students": ["E123"]}

        results = client.get("/api/admin/get-results", params={"code": "E123"}, headers=admin_headers)
        assert results.status_code == 200
        assert results.json()["results"]["option"] == "Informatique"

    def test_update_field_note_recomputes_average(self, client, admin_headers, db_session, grade_records):
        response = client.post(
            "/api/admin/update-field",
            json={"code": "E123", "field": "note", "value": 90, "annee": 1, "periode": 1, "matiere": "Maths"},
            headers=admin_headers,
        )
        assert response.status_code == 200

        db_session.expire_all()
        record = db_session.get(GradeRecord, ("E123", 1, 1))
        assert record.notes == {"Maths": 90, "Physique": 70}
        assert record.moyenne == 80

    def test_update_field_option(self, client, admin_headers, db_session, grade_records):
        client.post(
            "/api/admin/update-field",
            json={"code": "E123", "field": "option", "value": "Data"},
            headers=admin_headers,
        )
        db_session.expire_all()
        assert {r.option for r in db_session.query(GradeRecord).filter_by(code_etudiant="E123")} == {"Data"}

    def test_update_field_moyenne_unknown_cell(self, client, admin_headers, grade_records):
        response = client.post(
            "/api/admin/update-field",
            json={"code": "E123", "field": "moyenne", "value": 12, "annee": 3, "periode": 3},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_update_field_rejects_unknown_field(self, client, admin_headers, grade_records):
        response = client.post(
            "/api/admin/update-field",
            json={"code": "E123", "field": "password", "value": "x"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_delete_student(self, client, admin_headers, db_session, grade_records):
        response = client.delete("/api/admin/student/E123", headers=admin_headers)

        assert response.status_code == 200
        assert db_session.query(GradeRecord).count() == 0
        assert client.delete("/api/admin/student/E123", headers=admin_headers).status_code == 404
