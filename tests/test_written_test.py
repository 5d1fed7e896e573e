"""
Tests for timed written test sessions.
"""
from datetime import datetime, timedelta

from crosscareers.db.models.test_session import TestSession as WrittenTestSession
from conftest import auth_headers, make_user

INIT = {
    "jobTitle": "Backend Engineer",
    "experienceYears": 3,
    "skills": ["Python", " SQL "],
    "durationMinutes": 20,
}


def _questions(count=5):
    return {
        "questions": [
            {
                "index": i,
                "question": f"Question {i}?",
                "idealAnswer": f"Answer {i}",
                "topicTags": ["python"],
                "difficulty": "hard" if i == 4 else "easy",
            }
            for i in range(count)
        ]
    }


def _grade(correct=True):
    return {
        "is_correct": correct,
        "score": 1 if correct else 0,
        "feedback": "Good" if correct else "Missing detail",
        "corrected_answer": "Answer",
    }


def _init(client, headers, llm):
    llm.queue(_questions())
    response = client.post("/writtenTest/init", json=INIT, headers=headers)
    assert response.status_code == 201, response.json()
    return response.json()["sessionId"]


def test_full_session_flow(client, headers, llm):
    session_id = _init(client, headers, llm)
    assert "Python, SQL" in llm.calls[0][1]["content"]

    # Questions are hidden until the clock starts
    response = client.get(f"/writtenTest/current/{session_id}", headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Session not active"

    response = client.post(f"/writtenTest/start/{session_id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "active"
    assert 1190 <= response.json()["remainingSeconds"] <= 1200

    response = client.post(f"/writtenTest/start/{session_id}", headers=headers)
    assert response.json()["message"] == "Session not pending"

    for i in range(5):
        current = client.get(f"/writtenTest/current/{session_id}", headers=headers).json()
        assert current["index"] == i
        assert current["total"] == 5
        assert "idealAnswer" not in current

        llm.queue(_grade(correct=i != 2))
        response = client.post(
            "/writtenTest/answer",
            json={"sessionId": session_id, "answer": f"My answer {i}"},
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["nextIndex"] == i + 1
        assert body["thisQuestion"]["userAnswer"] == f"My answer {i}"

    assert body["status"] == "completed"
    assert body["totalScore"] == 4

    result = client.get(f"/writtenTest/result/{session_id}", headers=headers).json()["session"]
    assert result["status"] == "completed"
    assert result["completedAt"] is not None
    assert result["questions"][2]["isCorrect"] is False
    assert result["questions"][2]["feedback"] == "Missing detail"
    assert result["questions"][0]["idealAnswer"] == "Answer 0"

    response = client.get(f"/writtenTest/current/{session_id}", headers=headers)
    assert response.json()["message"] == "Session already completed"


def test_score_only_counts_exact_one(client, headers, llm):
    session_id = _init(client, headers, llm)
    client.post(f"/writtenTest/start/{session_id}", headers=headers)

    llm.queue({"is_correct": True, "score": 0.7, "feedback": "Partly"})
    body = client.post("/writtenTest/answer", json={"sessionId": session_id, "answer": "x"}, headers=headers).json()
    assert body["thisQuestion"]["score"] == 0
    assert body["totalScore"] == 0


def test_answer_after_deadline_expires_session(client, db, headers, llm):
    session_id = _init(client, headers, llm)
    client.post(f"/writtenTest/start/{session_id}", headers=headers)

    session = db.query(WrittenTestSession).filter(WrittenTestSession.id == session_id).first()
    session.expires_at = datetime.utcnow() - timedelta(seconds=1)
    db.commit()

    response = client.post("/writtenTest/answer", json={"sessionId": session_id, "answer": "late"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Time is over. Session expired"
    # No grading call was made
    assert len(llm.calls) == 1

    db.refresh(session)
    assert session.status == "expired"

    response = client.post("/writtenTest/answer", json={"sessionId": session_id, "answer": "late"}, headers=headers)
    assert response.json()["message"] == "Session expired"


def test_result_read_expires_overdue_session(client, db, headers, llm):
    session_id = _init(client, headers, llm)
    client.post(f"/writtenTest/start/{session_id}", headers=headers)
    session = db.query(WrittenTestSession).filter(WrittenTestSession.id == session_id).first()
    session.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    result = client.get(f"/writtenTest/result/{session_id}", headers=headers).json()["session"]
    assert result["status"] == "expired"

    response = client.get(f"/writtenTest/time/{session_id}", headers=headers)
    assert response.json() == {"success": True, "status": "expired", "remainingSeconds": 0}


def test_wrong_question_count_is_rejected_after_retry(client, headers, llm):
    llm.queue(_questions(count=4), _questions(count=6))
    response = client.post("/writtenTest/init", json=INIT, headers=headers)
    assert response.status_code == 502
    assert len(llm.calls) == 2


def test_question_defaults_are_filled(client, headers, llm):
    payload = _questions()
    payload["questions"][0].pop("index")
    payload["questions"][0]["difficulty"] = "impossible"
    llm.queue(payload)
    session_id = client.post("/writtenTest/init", json=INIT, headers=headers).json()["sessionId"]

    result = client.get(f"/writtenTest/result/{session_id}", headers=headers).json()["session"]
    assert result["status"] == "pending"
    assert result["questions"][0]["index"] == 0
    assert result["questions"][0]["difficulty"] == "medium"


def test_question_index_follows_list_position(client, headers, llm):
    payload = _questions()
    for item in payload["questions"]:
        item["index"] += 1
    llm.queue(payload)
    session_id = client.post("/writtenTest/init", json=INIT, headers=headers).json()["sessionId"]
    client.post(f"/writtenTest/start/{session_id}", headers=headers)

    current = client.get(f"/writtenTest/current/{session_id}", headers=headers).json()
    assert current["index"] == 0
    assert current["question"] == "Question 0?"

    llm.queue(_grade())
    body = client.post("/writtenTest/answer", json={"sessionId": session_id, "answer": "a"}, headers=headers).json()
    assert body["thisQuestion"]["index"] == 0
    assert body["nextIndex"] == 1
    assert client.get(f"/writtenTest/current/{session_id}", headers=headers).json()["index"] == 1


def test_grading_without_score_fails_and_keeps_progress(client, db, headers, llm):
    session_id = _init(client, headers, llm)
    client.post(f"/writtenTest/start/{session_id}", headers=headers)

    llm.queue({"is_correct": True, "feedback": "No score here"}, {"is_correct": True, "score": "high"})
    response = client.post("/writtenTest/answer", json={"sessionId": session_id, "answer": "x"}, headers=headers)
    assert response.status_code == 502
    # One question generation call plus two grading attempts
    assert len(llm.calls) == 3

    session = db.query(WrittenTestSession).filter(WrittenTestSession.id == session_id).first()
    db.refresh(session)
    assert session.current_index == 0
    assert session.total_score == 0
    assert session.status == "active"
    assert "userAnswer" not in session.questions[0]

    llm.queue(_grade())
    body = client.post("/writtenTest/answer", json={"sessionId": session_id, "answer": "x"}, headers=headers).json()
    assert body["nextIndex"] == 1
    assert body["totalScore"] == 1


def test_sessions_are_owner_scoped(client, db, headers, llm):
    session_id = _init(client, headers, llm)
    other = make_user(db, email="other@example.com", referral_code="OTHER")

    for path in (f"/writtenTest/result/{session_id}", f"/writtenTest/time/{session_id}"):
        response = client.get(path, headers=auth_headers(other))
        assert response.status_code == 404
        assert response.json()["message"] == "Session not found"


def test_init_validates_skills(client, headers):
    response = client.post("/writtenTest/init", json={**INIT, "skills": ["x" * 65]}, headers=headers)
    assert response.status_code == 422


def test_pdf_report_and_history(client, headers, llm):
    session_id = _init(client, headers, llm)

    response = client.get(f"/writtenTest/result/{session_id}/pdf", headers=headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert f"exam_{session_id}.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")

    response = client.get("/writtenTest/history", headers=headers)
    assert response.json()["count"] == 1
    assert response.json()["sessions"][0]["jobTitle"] == "Backend Engineer"
