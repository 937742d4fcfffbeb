import json
import random

from mindmesh.core.errors import LLMError
from mindmesh.services.analysis import (
    ApplicationRecord,
    CareerProfile,
    InterviewRecord,
    fallback_analysis,
)
from mindmesh.services.interview import (
    EVALUATION_UNAVAILABLE,
    InterviewQuestion,
    _question_bank,
    calculate_mock_interview_score,
    evaluate_star_method,
    generate_interview_questions,
    score_interview_response,
)

STAR_ANSWER = (
    "In my last role the team was behind on a release. I was responsible for the "
    "deployment pipeline and needed to cut build time. I implemented parallel test "
    "shards and built a cache layer. As a result build time decreased by 40% and we "
    "overcame the difficult deadline; I learned to measure before optimising."
)


# ── Question bank ────────────────────────────────────────────────────

def test_predefined_questions_cover_each_category():
    questions = generate_interview_questions("Data Engineer", "Acme", rng=random.Random(7))
    assert [q.category for q in questions] == ["behavioral", "technical", "situational", "role_specific"]
    assert all(q.role == "Data Engineer" for q in questions)


def test_hard_difficulty_only_draws_hard_questions():
    questions = generate_interview_questions("PM", "Acme", difficulty="hard", rng=random.Random(1))
    assert questions
    assert all(q.difficulty == "hard" for q in questions)


def test_blank_company_reads_naturally():
    bank = _question_bank("Data Engineer", "  ")
    texts = [question for entries in bank.values() for question, _ in entries]

    assert not any(" at ?" in t or " at  " in t or t.startswith("What do you know about 's") for t in texts)
    assert "What do you know about the company's tech stack and how does it fit your skills?" in texts
    assert "How would you approach your first 30 days as a Data Engineer at the company?" in texts

    questions = generate_interview_questions("Data Engineer", "", rng=random.Random(3))
    assert all(q.company is None for q in questions)


# ── STAR scoring ─────────────────────────────────────────────────────

def test_star_method_detects_all_elements():
    star = evaluate_star_method(STAR_ANSWER)
    assert star["score"] == 100
    assert star["starBreakdown"] == {"situation": "✓", "task": "✓", "action": "✓", "result": "✓"}


def test_star_method_reports_missing_elements():
    star = evaluate_star_method("I like computers.")
    assert star["score"] == 0
    assert "Missing - Set the context" in star["feedback"]


def test_score_interview_response():
    question = InterviewQuestion(id="q1", category="behavioral", question="Tell me about a challenge", role="SRE")
    feedback = score_interview_response(STAR_ANSWER, question)

    assert 0 < feedback.score <= 100
    assert "Strong STAR method structure" in feedback.strengths
    assert "Used quantifiable results" in feedback.strengths
    assert feedback.model_dump(by_alias=True)["starMethodRating"] == 100


def test_mock_interview_score():
    assert calculate_mock_interview_score([80, 90, 0])["overallScore"] == 85
    empty = calculate_mock_interview_score([])
    assert empty["overallScore"] == 0
    assert empty["recommendations"] == ["Complete all interview questions to calculate score"]


# ── Career analysis fallback ─────────────────────────────────────────

def test_fallback_analysis_uses_the_numbers():
    analysis = fallback_analysis(
        [InterviewRecord(score=60), InterviewRecord(score=80)],
        [ApplicationRecord(outcome="offer"), ApplicationRecord(outcome="rejected")],
        CareerProfile(skills=["Go"], target_roles=["Backend Engineer"]),
    )
    assert "2 interviews and 2 applications" in analysis["summary"]
    assert "Average interview score: 70/100" in analysis["summary"]
    assert "50% acceptance rate" in analysis["summary"]
    assert analysis["recommendations"][-1] == "Study Go skills more deeply"


# ── API ──────────────────────────────────────────────────────────────

def test_generate_questions_with_ai(client, fake_llm):
    fake_llm.replies = [json.dumps([
        {"question": "Design a rate limiter.", "category": "technical", "difficulty": "hard"},
        {"question": "Tell me about a conflict.", "category": "behavioral"},
    ])]

    response = client.post("/api/interview/generate-questions", json={
        "jobTitle": "Backend Engineer", "company": "Acme", "numQuestions": 2,
    })

    questions = response.json()["questions"]
    assert [q["question"] for q in questions] == ["Design a rate limiter.", "Tell me about a conflict."]
    assert questions[0]["difficulty"] == "hard"
    assert questions[1]["difficulty"] == "medium"


def test_generate_questions_falls_back_to_bank(client, fake_llm):
    fake_llm.replies = [LLMError("down")]
    response = client.post("/api/interview/generate-questions", json={"jobTitle": "Designer"})
    assert response.status_code == 200
    assert len(response.json()["questions"]) == 4


def test_generate_questions_requires_title(client):
    response = client.post("/api/interview/generate-questions", json={"jobTitle": " "})
    assert response.status_code == 400


def test_evaluate_answer(client, fake_llm):
    fake_llm.replies = ['Here you go:\n{"score": 88, "strengths": ["Clear result"]}']
    response = client.post("/api/interview/evaluate-answer", json={
        "answer": STAR_ANSWER, "question": "Tell me about a challenge",
    })
    assert response.json() == {"evaluation": {"score": 88, "strengths": ["Clear result"]}}


def test_evaluate_answer_falls_back(client, fake_llm):
    fake_llm.replies = [LLMError("down")]
    response = client.post("/api/interview/evaluate-answer", json={
        "answer": STAR_ANSWER, "question": "Tell me about a challenge",
    })
    assert response.json() == {"evaluation": EVALUATION_UNAVAILABLE}


def test_score_answer_and_summary_endpoints(client):
    scored = client.post("/api/interview/score-answer", json={
        "answer": STAR_ANSWER,
        "question": {"id": "q1", "category": "behavioral", "question": "A challenge?", "role": "SRE"},
    }).json()
    assert scored["starBreakdown"]["result"] == "✓"

    summary = client.post("/api/interview/summary", json={"scores": [70, None, 90]}).json()
    assert summary["overallScore"] == 80


def test_analyze_patterns_falls_back_on_unparseable_reply(client, fake_llm):
    fake_llm.replies = ["Looks good overall!"]
    response = client.post("/api/career/analyze-patterns", json={
        "interviewHistory": [{"score": 90, "role": "SRE"}],
        "applicationHistory": [],
        "userProfile": {"skills": ["Python"], "targetRoles": ["SRE"]},
    })
    analysis = response.json()["analysis"]
    assert "1 interviews and 0 applications" in analysis["summary"]
    assert fake_llm.calls[0][1] == "planning"


def test_analyze_patterns_returns_model_json(client, fake_llm):
    fake_llm.replies = ['<s>```json\n{"summary": "Strong SRE trajectory", "patterns": []}\n```']
    response = client.post("/api/career/analyze-patterns", json={})
    assert response.json() == {"analysis": {"summary": "Strong SRE trajectory", "patterns": []}}
