"""
Tests for the interview coach: question sets, answers, grading and reports.
"""
from crosscareers.db.models.interview_session import InterviewSession
from conftest import auth_headers, make_user

JD = "We need a backend engineer who can design APIs and mentor juniors."


def _questions(n=5, kind="technical"):
    return {"questions": [{"question": f"Q{i}?", "type": kind, "category": "APIs"} for i in range(n)]}


def _start(client, headers, llm, mode="full", reply=None):
    llm.queue(reply or _questions())
    response = client.post(
        "/insm/generate-questions",
        data={"jobDescription": JD, "practiceMode": mode},
        headers=headers,
    )
    assert response.status_code == 200, response.json()
    return response.json()


def test_generate_questions_full_mode(client, headers, llm):
    body = _start(client, headers, llm)
    assert body["practiceMode"] == "full"
    assert len(body["questions"]) == 5
    assert len(body["commonQuestions"]) == 5
    assert "3 technical questions and 2 scenario-based questions" in llm.calls[0][1]["content"]


def test_scenario_mode_defaults_missing_type(client, headers, llm):
    reply = {"questions": [{"question": f"Tell me about conflict {i}."} for i in range(5)]}
    body = _start(client, headers, llm, mode="scenario", reply=reply)
    assert body["questions"][0] == {"question": "Tell me about conflict 0.", "type": "scenario", "category": "General"}
    assert "technical questions" not in llm.calls[0][1]["content"]


def test_short_question_set_is_rejected_after_retry(client, db, headers, llm):
    llm.queue(_questions(n=1), _questions(n=4))
    response = client.post(
        "/insm/generate-questions",
        data={"jobDescription": JD, "practiceMode": "full"},
        headers=headers,
    )
    assert response.status_code == 502
    assert len(llm.calls) == 2
    assert db.query(InterviewSession).count() == 0


def test_extra_questions_are_trimmed(client, headers, llm):
    body = _start(client, headers, llm, mode="technical", reply=_questions(n=8))
    assert len(body["questions"]) == 5


def test_invalid_practice_mode(client, headers, llm):
    response = client.post(
        "/insm/generate-questions",
        data={"jobDescription": JD, "practiceMode": "lightning"},
        headers=headers,
    )
    assert response.status_code == 400
    assert llm.calls == []


def test_job_description_from_document(client, headers, llm):
    llm.queue(_questions())
    response = client.post(
        "/insm/generate-questions",
        files={"document": ("jd.txt", JD.encode(), "text/plain")},
        headers=headers,
    )
    assert response.status_code == 200
    assert JD in llm.calls[0][1]["content"]


def test_submit_answer_and_complete(client, db, headers, llm):
    session_id = _start(client, headers, llm)["sessionId"]

    response = client.post(
        "/insm/submit-answer",
        json={"sessionId": session_id, "question": "Q0?", "transcript": "I design REST APIs.", "timeSpent": 40},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["answered"] == 1

    llm.queue(
        {"score": 82.6, "feedback": "Solid", "suggestedAnswer": "Mention versioning."},
        {"score": 140, "feedback": "Great"},
        {"improvementSuggestions": ["Be concise", "Use STAR"]},
    )
    response = client.post(
        "/insm/complete",
        json={
            "sessionId": session_id,
            "progress": [
                {"question": "Q0?", "transcript": "I design REST APIs.", "timeSpent": 40},
                {"question": "Q1?", "type": "scenario", "transcript": "I mediated.", "timeSpent": 30},
            ],
        },
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    scores = [a["score"] for a in body["questionAnalysis"]]
    # Scores are rounded and clamped to 0-100
    assert scores == [83, 100]
    assert body["overallScore"] == 92
    assert body["improvementSuggestions"] == ["Be concise", "Use STAR"]
    assert body["questionAnalysis"][0]["suggestedAnswer"] == "Mention versioning."
    assert body["questionAnalysis"][1]["suggestedAnswer"] is None

    session = db.query(InterviewSession).filter(InterviewSession.id == session_id).first()
    assert session.status == "completed"
    assert session.overall_score == 92
    assert len(session.answers) == 2

    response = client.post(
        "/insm/submit-answer",
        json={"sessionId": session_id, "question": "Q2?", "transcript": "late"},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Interview already completed"


def test_grading_failure_scores_zero_and_uses_default_suggestions(client, headers, llm):
    # Nothing queued: every provider call fails
    response = client.post(
        "/insm/complete",
        json={"progress": [{"question": "Q0?", "transcript": "Something"}]},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["sessionId"] is None
    assert body["questionAnalysis"][0]["score"] == 0
    assert body["overallScore"] == 0
    assert len(body["improvementSuggestions"]) == 5


def test_complete_requires_progress(client, headers):
    response = client.post("/insm/complete", json={"progress": []}, headers=headers)
    assert response.status_code == 422


def test_sessions_are_owner_scoped(client, db, headers, llm):
    session_id = _start(client, headers, llm)["sessionId"]
    other = make_user(db, email="other@example.com", referral_code="OTHER")
    response = client.post(
        "/insm/submit-answer",
        json={"sessionId": session_id, "question": "Q0?", "transcript": "hi"},
        headers=auth_headers(other),
    )
    assert response.status_code == 404


def test_download_results_markdown(client, headers):
    analysis = {
        "questionAnalysis": [
            {"question": "Q0?", "score": 80, "feedback": "Good", "suggestedAnswer": "More detail", "userAnswer": "Answer"},
        ],
        "overallScore": 80,
        "improvementSuggestions": ["Practice more"],
    }
    response = client.post(
        "/insm/download-results",
        json={"analysis": analysis, "questions": [{"question": "Q0?"}]},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/markdown")
    assert "interview-results.md" in response.headers["content-disposition"]
    report = response.text
    assert report.startswith("# Interview Performance Report")
    assert "- **Overall Score:** 80%" in report
    assert "**Suggested Answer:** More detail" in report
    assert "- Practice more" in report


def test_history(client, headers, llm):
    _start(client, headers, llm)
    response = client.get("/insm/history", headers=headers)
    assert response.json()["count"] == 1
    assert response.json()["sessions"][0]["status"] == "in_progress"


def test_save_history_confirms_the_session(client, db, headers, llm):
    session_id = _start(client, headers, llm)["sessionId"]
    client.post(
        "/insm/submit-answer",
        json={"sessionId": session_id, "question": "Q0?", "transcript": "I design REST APIs."},
        headers=headers,
    )
    response = client.post("/insm/save-history", json={"sessionId": session_id}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "sessionId": session_id,
        "status": "in_progress",
        "answered": 1,
        "overallScore": None,
    }

    other = make_user(db, email="other@example.com", referral_code="OTHER")
    response = client.post("/insm/save-history", json={"sessionId": session_id}, headers=auth_headers(other))
    assert response.status_code == 404
