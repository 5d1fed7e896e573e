"""
Tests for the quick mock interview.
"""
from conftest import auth_headers

JD = "Backend engineer: Python, PostgreSQL and on-call support."


def test_extract_text_from_upload(client, headers):
    response = client.post(
        "/interview/extract-text",
        files={"file": ("jd.txt", JD.encode(), "text/plain")},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "text": JD}


def test_extract_text_needs_a_file(client, headers):
    response = client.post("/interview/extract-text", headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "No file uploaded"


def test_generate_questions(client, headers, llm):
    llm.queue("1. What is REST?\n2. How do indexes work?\n\n- Describe an outage you handled\n4) Q4?\n5. Q5?\n6. Q6?")
    response = client.post("/interview/generate-questions", json={"text": JD}, headers=headers)
    assert response.status_code == 200
    assert response.json()["questions"] == [
        "What is REST?",
        "How do indexes work?",
        "Describe an outage you handled",
        "Q4?",
        "Q5?",
    ]
    prompt = llm.calls[0][1]["content"]
    assert "3 technical, 2 scenario-based" in prompt
    assert JD in prompt


def test_generate_questions_needs_text(client, headers, llm):
    for body in ({}, {"text": "   "}):
        response = client.post("/interview/generate-questions", json=body, headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Text content is required"
    assert llm.calls == []


def test_analyze_answers(client, headers, llm):
    answers = [{"question": "What is REST?", "answer": "An architectural style."}]
    llm.queue({"score": 72.4, "feedback": "Add an example."})
    response = client.post("/interview/analyze-answers", json={"answers": answers}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "score": 72, "feedback": "Add an example."}
    assert "An architectural style." in llm.calls[0][1]["content"]

    llm.queue({"score": 98, "feedback": "Nothing to add."})
    response = client.post("/interview/analyze-answers", json={"answers": answers}, headers=headers)
    assert response.json() == {"success": True, "score": 98, "feedback": None}


def test_analyze_answers_validation(client, headers, llm):
    response = client.post("/interview/analyze-answers", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Answers are required"

    llm.queue({"feedback": "no score"}, "not json")
    response = client.post(
        "/interview/analyze-answers",
        json={"answers": [{"question": "Q", "answer": "A"}]},
        headers=headers,
    )
    assert response.status_code == 502


def test_mock_interview_requires_full_access(client, expired_user, llm):
    response = client.post("/interview/generate-questions", json={"text": JD}, headers=auth_headers(expired_user))
    assert response.status_code == 403
    assert llm.calls == []
