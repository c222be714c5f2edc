"""
Tests for interview feedback: one submission per interview, completion,
and scoped edits.
"""


def _submit(client, headers, interview_id, body):
    return client.post(f"/api/interviews/{interview_id}/feedback", json=body, headers=headers)


def test_submit_marks_interview_completed(api, client, candidate, feedback_body):
    interview_id = api.create_interview(candidate["headers"]).json()["interview"]["id"]

    response = _submit(client, candidate["headers"], interview_id, feedback_body)

    assert response.status_code == 201
    feedback = response.json()
    assert feedback["interview_id"] == interview_id
    assert feedback["recommendation"] == "hire"
    assert feedback["company_name"] == "Acme Corp"

    interview = client.get(f"/api/interviews/{interview_id}", headers=candidate["headers"]).json()["interview"]
    assert interview["status"] == "completed"
    assert interview["feedback"]["id"] == feedback["id"]


def test_uncertain_interview_completes_on_feedback(api, client, candidate, feedback_body):
    interview_id = api.create_interview(candidate["headers"], status="uncertain", duration=None).json()["interview"]["id"]

    assert _submit(client, candidate["headers"], interview_id, feedback_body).status_code == 201

    interview = client.get(f"/api/interviews/{interview_id}", headers=candidate["headers"]).json()["interview"]
    assert interview["status"] == "completed"


def test_second_submission_conflicts(api, client, candidate, feedback_body):
    interview_id = api.create_interview(candidate["headers"]).json()["interview"]["id"]
    _submit(client, candidate["headers"], interview_id, feedback_body)

    response = _submit(client, candidate["headers"], interview_id, feedback_body)

    assert response.status_code == 409
    assert response.json()["detail"] == "Feedback already submitted for this interview"
    assert len(client.get("/api/feedback", headers=candidate["headers"]).json()["feedback"]) == 1


def test_only_the_owner_may_submit(api, client, admin, candidate, other_candidate, feedback_body):
    interview_id = api.create_interview(candidate["headers"]).json()["interview"]["id"]

    assert _submit(client, other_candidate["headers"], interview_id, feedback_body).status_code == 404
    assert _submit(client, admin["headers"], interview_id, feedback_body).status_code == 404


def test_invalid_ratings_rejected(api, client, candidate, feedback_body):
    interview_id = api.create_interview(candidate["headers"]).json()["interview"]["id"]

    feedback_body["overall_rating"] = 6
    assert _submit(client, candidate["headers"], interview_id, feedback_body).status_code == 422

    feedback_body["overall_rating"] = 4
    feedback_body["feedback_text"] = "too short"
    assert _submit(client, candidate["headers"], interview_id, feedback_body).status_code == 422


def test_feedback_is_scoped(api, client, admin, candidate, other_candidate, feedback_body):
    first = api.create_interview(candidate["headers"]).json()["interview"]["id"]
    second = api.create_interview(other_candidate["headers"]).json()["interview"]["id"]
    mine = _submit(client, candidate["headers"], first, feedback_body).json()
    feedback_body["recommendation"] = "reject"
    theirs = _submit(client, other_candidate["headers"], second, feedback_body).json()

    listed = client.get("/api/feedback", headers=candidate["headers"]).json()["feedback"]
    assert [row["id"] for row in listed] == [mine["id"]]

    everything = client.get("/api/feedback", headers=admin["headers"]).json()["feedback"]
    assert {row["id"] for row in everything} == {mine["id"], theirs["id"]}

    rejected = client.get("/api/feedback", params={"recommendation": "reject"}, headers=admin["headers"])
    assert [row["id"] for row in rejected.json()["feedback"]] == [theirs["id"]]

    assert client.get(f"/api/interviews/{second}/feedback", headers=candidate["headers"]).status_code == 404
    assert client.put(f"/api/feedback/{theirs['id']}", json={"overall_rating": 1}, headers=candidate["headers"]).status_code == 404
    assert client.delete(f"/api/feedback/{theirs['id']}", headers=candidate["headers"]).status_code == 404


def test_update_and_delete_feedback(api, client, candidate, feedback_body):
    interview_id = api.create_interview(candidate["headers"]).json()["interview"]["id"]
    feedback_id = _submit(client, candidate["headers"], interview_id, feedback_body).json()["id"]

    response = client.put(
        f"/api/feedback/{feedback_id}",
        json={"overall_rating": 2, "recommendation": "maybe"},
        headers=candidate["headers"],
    )
    assert response.status_code == 200
    assert response.json()["overall_rating"] == 2
    assert response.json()["recommendation"] == "maybe"
    assert response.json()["technical_skills"] == feedback_body["technical_skills"]

    assert client.put(f"/api/feedback/{feedback_id}", json={}, headers=candidate["headers"]).status_code == 400

    assert client.delete(f"/api/feedback/{feedback_id}", headers=candidate["headers"]).status_code == 200
    assert client.get(f"/api/interviews/{interview_id}/feedback", headers=candidate["headers"]).status_code == 404
