"""
Grade aggregation: reconciliation rules, transcript shape and /api/resultats
"""
import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.models import GradeRecord
from app.services.grades import grade_aggregator, mean_of_notes, parse_level, reconcile_average


class TestReconciliation:
    def test_zero_stored_average_is_recomputed(self):
        assert reconcile_average(0, {"Maths": 50, "Physique": 70}) == 60.00

    def test_missing_stored_average_is_recomputed(self):
        assert reconcile_average(None, {"Maths": 50, "Physique": 70}) == 60.00

    def test_inconsistent_stored_average_is_replaced(self):
        assert reconcile_average(61, {"Maths": 60, "Physique": 60}) == 60.00

    def test_stored_average_within_tolerance_is_kept(self):
        assert reconcile_average(60.005, {"Maths": 60}) == 60.005

    def test_recomputed_average_is_rounded(self):
        assert reconcile_average(0, {"a": 10, "b": 10, "c": 11}) == 10.33

    def test_empty_notes_average_zero(self):
        assert mean_of_notes({}) == 0
        assert mean_of_notes(None) == 0
        assert reconcile_average(0, {}) == 0

    def test_non_numeric_notes_are_ignored(self):
        assert mean_of_notes({"Maths": 12, "Sport": "ABS", "Dessin": None, "Flag": True}) == 12


class TestParseLevel:
    @pytest.mark.parametrize(
        "value,expected",
        [(1, 1), ("2", 2), ("2ème année", 2), ("3ème période", 3), ("1ère année", 1), (" 1ère période ", 1)],
    )
    def test_accepted_values(self, value, expected):
        assert parse_level(value) == expected

    @pytest.mark.parametrize("value", [0, 4, "4ème année", "année", "", None, True])
    def test_rejected_values(self, value):
        with pytest.raises(ValidationException):
            parse_level(value)


class TestGradeAggregator:
    def test_transcript_shape(self, db_session, grade_records):
        results = grade_aggregator.lookup_by_student_code(db_session, "E123")

        assert results.option == "Informatique"
        # Year 3 has a record but no notes
        assert [year.annee for year in results.years] == [1, 2]

        first = results.years[0]
        assert first.classe == "1ère année"
        assert first.academic_year == "2023-2024"
        assert [p.periode for p in first.periods] == [1, 2, 3]
        assert [p.title for p in first.periods] == ["1ère période", "2ème période", "3ème période"]
        assert [p.moyenne for p in first.periods] == [60.0, 60.0, 0]
        assert first.periods[2].notes == {}

        second = results.years[1]
        assert second.classe == "2ème année"
        assert second.periods[0].notes == {}
        assert second.periods[2].moyenne == 60.005

    def test_serialized_with_academic_year_alias(self, client, admin_headers, grade_records):
        response = client.get("/api/admin/get-results", params={"code": "E123"}, headers=admin_headers)

        year = response.json()["results"]["years"][0]
        assert year["academicYear"] == "2023-2024"
        assert "academic_year" not in year

    def test_reads_do_not_rewrite_storage(self, db_session, grade_records):
        grade_aggregator.lookup_by_student_code(db_session, "E123")
        db_session.expire_all()
        assert db_session.get(GradeRecord, ("E123", 1, 1)).moyenne == 0

    def test_unknown_code(self, db_session):
        with pytest.raises(NotFoundException):
            grade_aggregator.lookup_by_student_code(db_session, "NOPE")

    def test_owner_option_wins(self, db_session, grade_records, make_user):
        user = make_user(email="e123@example.com", option="Génie civil")
        for record in grade_records:
            record.user_id = user.id
        db_session.commit()

        assert grade_aggregator.lookup_by_student_code(db_session, "E123").option == "Génie civil"
        assert grade_aggregator.lookup_by_user(db_session, user.id).option == "Génie civil"

    def test_option_defaults_to_empty(self, db_session):
        db_session.add(GradeRecord(code_etudiant="X9", annee=1, periode=1, notes={"Maths": 10}, moyenne=10))
        db_session.commit()
        assert grade_aggregator.lookup_by_student_code(db_session, "X9").option == ""

    def test_user_without_records(self, db_session, test_user):
        with pytest.raises(NotFoundException):
            grade_aggregator.lookup_by_user(db_session, test_user.id)


class TestResultsApi:
    def test_lookup_by_code_requires_login(self, client, grade_records):
        assert client.post("/api/resultats", json={"code": "E123"}).status_code == 401

    def test_lookup_by_code(self, logged_in_client, grade_records):
        response = logged_in_client.post("/api/resultats", json={"code": "E123"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["results"]["years"][0]["periods"][0]["moyenne"] == 60.0

    def test_unknown_code_is_404(self, logged_in_client):
        response = logged_in_client.post("/api/resultats", json={"code": "NOPE"})
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_missing_code_is_400(self, logged_in_client):
        assert logged_in_client.post("/api/resultats", json={}).status_code == 400

    def test_own_results(self, logged_in_client, db_session, grade_records, test_user):
        for record in grade_records:
            record.user_id = test_user.id
        db_session.commit()

        response = logged_in_client.get("/api/resultats")
        assert response.status_code == 200
        assert [y["annee"] for y in response.json()["results"]["years"]] == [1, 2]

    def test_own_results_without_records(self, logged_in_client):
        assert logged_in_client.get("/api/resultats").status_code == 404

    def test_ownership_enforced_when_enabled(self, logged_in_client, grade_records, monkeypatch):
        from app.core.config import settings

        monkeypatch.setattr(settings, "RESULTS_REQUIRE_OWNERSHIP", True)
        assert logged_in_client.post("/api/resultats", json={"code": "E123"}).status_code == 404
