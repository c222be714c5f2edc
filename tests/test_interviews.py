"""
Tests for interview endpoints: ownership isolation, duration rules and delete.
"""
import pytest

from wagehire.db.models.feedback import InterviewFeedback


def test_create_interview_owned_by_caller(api, candidate):
    response = api.create_interview(candidate["headers"], round=2, interviewer_name="  Sam Lee ")

    assert response.status_code == 201
    interview = response.json()["interview"]
    assert interview["candidate_id"] == candidate["user"]["id"]
    assert interview["candidate_name"] == "Carol Candidate"
    assert interview["status"] == "scheduled"
    assert interview["interview_type"] == "technical"
    assert interview["round"] == 2
    assert interview["interviewer_name"] == "Sam Lee"


def test_create_requires_company_and_title(api, candidate):
    response = api.create_interview(candidate["headers"], company_name="   ")
    assert response.status_code == 422


@pytest.mark.parametrize("round_number", [0, 11])
def test_round_out_of_range(api, candidate, round_number):
    assert api.create_interview(candidate["headers"], round=round_number).status_code == 422


def test_uncertain_interview_may_omit_duration(api, candidate):
    response = api.create_interview(candidate["headers"], status="uncertain", duration=None)

    assert response.status_code == 201
    assert response.json()["interview"]["duration"] is None


def test_duration_required_unless_uncertain(api, candidate):
    response = api.create_interview(candidate["headers"], status="scheduled", duration=None)

    assert response.status_code == 400
    assert response.json()["detail"] == "Duration is required for non-uncertain interviews"


@pytest.mark.parametrize("duration", [10, 481])
def test_duration_range(api, candidate, duration):
    response = api.create_interview(candidate["headers"], duration=duration)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_failed"


def test_update_rechecks_duration_on_merged_state(api, client, candidate):
    interview_id = api.create_interview(candidate["headers"], status="uncertain", duration=None).json()["interview"]["id"]

    # Leaving uncertain without a duration is rejected
    response = client.put(f"/api/interviews/{interview_id}", json={"status": "scheduled"}, headers=candidate["headers"])
    assert response.status_code == 400

    response = client.put(
        f"/api/interviews/{interview_id}",
        json={"status": "scheduled", "duration": 45},
        headers=candidate["headers"],
    )
    assert response.status_code == 200
    assert response.json()["interview"]["duration"] == 45

    # Dropping the duration is only allowed together with uncertain
    response = client.put(f"/api/interviews/{interview_id}", json={"duration": None}, headers=candidate["headers"])
    assert response.status_code == 400


def test_update_applies_only_sent_fields(api, client, candidate):
    interview_id = api.create_interview(candidate["headers"], notes="bring laptop").json()["interview"]["id"]

    response = client.put(
        f"/api/interviews/{interview_id}",
        json={"location": "Remote"},
        headers=candidate["headers"],
    )

    assert response.status_code == 200
    interview = response.json()["interview"]
    assert interview["location"] == "Remote"
    assert interview["notes"] == "bring laptop"
    assert interview["duration"] == 60


def test_update_with_no_fields(api, client, candidate):
    interview_id = api.create_interview(candidate["headers"]).json()["interview"]["id"]

    response = client.put(f"/api/interviews/{interview_id}", json={}, headers=candidate["headers"])

    assert response.status_code == 400
    assert response.json()["detail"] == "No fields to update"


def test_candidates_only_see_their_own_interviews(api, client, candidate, other_candidate):
    mine = api.create_interview(candidate["headers"], company_name="Acme").json()["interview"]
    theirs = api.create_interview(other_candidate["headers"], company_name="Globex").json()["interview"]

    listed = client.get("/api/interviews", headers=candidate["headers"]).json()["interviews"]
    assert [row["id"] for row in listed] == [mine["id"]]

    for method, body in (("get", None), ("put", {"notes": "hijack"}), ("delete", None)):
        response = client.request(method, f"/api/interviews/{theirs['id']}", json=body, headers=candidate["headers"])
        assert response.status_code == 404


def test_admin_sees_all_interviews(api, client, admin, candidate, other_candidate):
    api.create_interview(candidate["headers"], company_name="Acme")
    api.create_interview(other_candidate["headers"], company_name="Globex")

    listed = client.get("/api/interviews", headers=admin["headers"]).json()["interviews"]
    assert {row["company_name"] for row in listed} == {"Acme", "Globex"}


def test_list_filters(api, client, admin, candidate):
    api.create_interview(candidate["headers"], company_name="Acme", job_title="Backend Engineer")
    api.create_interview(candidate["headers"], company_name="Globex", job_title="Designer", status="cancelled")

    def names(**params):
        rows = client.get("/api/interviews", params=params, headers=candidate["headers"]).json()["interviews"]
        return sorted(row["company_name"] for row in rows)

    assert names(status="cancelled") == ["Globex"]
    assert names(company_name="acm") == ["Acme"]
    assert names(job_title="DESIGN") == ["Globex"]
    assert names(search="carol") == ["Acme", "Globex"]
    assert names(search="engineer") == ["Acme"]


def test_get_interview_includes_candidate_details(api, client, admin, candidate):
    interview_id = api.create_interview(candidate["headers"]).json()["interview"]["id"]

    response = client.get(f"/api/interviews/{interview_id}", headers=admin["headers"])

    assert response.status_code == 200
    interview = response.json()["interview"]
    assert interview["candidate_email"] == "carol@example.com"
    assert interview["feedback"] is None


def test_delete_removes_feedback_too(api, client, db, candidate, feedback_body):
    interview_id = api.create_interview(candidate["headers"]).json()["interview"]["id"]
    client.post(f"/api/interviews/{interview_id}/feedback", json=feedback_body, headers=candidate["headers"])

    response = client.delete(f"/api/interviews/{interview_id}", headers=candidate["headers"])

    assert response.status_code == 200
    assert client.get(f"/api/interviews/{interview_id}", headers=candidate["headers"]).status_code == 404
    assert db.query(InterviewFeedback).filter(InterviewFeedback.interview_id == interview_id).count() == 0


def test_interviews_require_authentication(client, admin):
    response = client.get("/api/interviews")
    assert response.status_code == 401
    assert response.json()["code"] == "unauthenticated"
