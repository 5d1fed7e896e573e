"""
Tests for the interview Q&A bank generator.
"""
JD = "Backend engineer building payment APIs in Python with PostgreSQL and Redis."


def _pair(n):
    return {"question": f"Question {n}?", "answer": f"Answer {n}."}


def test_generate_questions(client, headers, llm):
    llm.queue({"technical": [_pair(1), _pair(2), {"question": ""}], "situational": [_pair(3)]})
    response = client.post(
        "/qa/generate",
        json={
            "jobDescription": JD,
            "jobTitle": "Backend Engineer",
            "requirements": {"technicalCount": 2, "situationalCount": 1},
        },
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    # Blank entries are dropped
    assert body["count"] == {"technical": 2, "situational": 1}
    assert body["questions"]["technical"][0] == {"question": "Question 1?", "answer": "Answer 1."}

    prompt = llm.calls[0][1]["content"]
    assert "exactly 2 technical" in prompt
    assert "Job title: Backend Engineer" in prompt
    assert "Level: Not specified" in prompt


def test_default_counts(client, headers, llm):
    llm.queue({"technical": [_pair(1)], "situational": [_pair(2)]})
    client.post("/qa/generate", json={"jobDescription": JD}, headers=headers)
    assert "exactly 7 technical" in llm.calls[0][1]["content"]
    assert "exactly 3 situational" in llm.calls[0][1]["content"]


def test_malformed_reply_is_unprocessable(client, headers, llm):
    llm.queue({"technical": "lots"}, {"technical": [], "situational": "none"})
    response = client.post("/qa/generate", json={"jobDescription": JD}, headers=headers)
    assert response.status_code == 422
    assert response.json()["message"] == "Invalid response structure from question generator"


def test_empty_section_is_unprocessable(client, headers, llm):
    llm.queue({"technical": [_pair(1)], "situational": []})
    response = client.post("/qa/generate", json={"jobDescription": JD}, headers=headers)
    assert response.status_code == 422


def test_request_validation(client, headers, llm):
    response = client.post("/qa/generate", json={"jobDescription": "too short"}, headers=headers)
    assert response.status_code == 422
    assert response.json()["message"] == "Validation failed"

    response = client.post(
        "/qa/generate",
        json={"jobDescription": JD, "requirements": {"technicalCount": 50}},
        headers=headers,
    )
    assert response.status_code == 422
    assert llm.calls == []
