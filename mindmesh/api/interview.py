"""
Interview practice API.

POST /api/interview/generate-questions — Mock interview questions (AI or predefined)
POST /api/interview/evaluate-answer    — LLM evaluation of one answer
POST /api/interview/score-answer       — Rule-based STAR scoring of one answer
POST /api/interview/summary            — Overall score for a finished mock interview
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..services.interview import (
    Difficulty,
    InterviewFeedback,
    InterviewQuestion,
    calculate_mock_interview_score,
    evaluate_answer_with_ai,
    generate_ai_interview_questions,
    generate_interview_questions,
    score_interview_response,
)

logger = logging.getLogger(__name__)

interview_router = APIRouter(prefix="/interview", tags=["interview"])


# ── Questions ────────────────────────────────────────────────────────

class GenerateQuestionsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_title: str = Field(alias="jobTitle")
    company: str = ""
    difficulty: Difficulty = "medium"
    use_ai: bool = Field(default=True, alias="useAI")
    num_questions: int = Field(default=4, ge=1, le=10, alias="numQuestions")


class GenerateQuestionsResponse(BaseModel):
    questions: list[InterviewQuestion]


@interview_router.post("/generate-questions", response_model=GenerateQuestionsResponse)
async def generate_questions(request: GenerateQuestionsRequest):
    if not request.job_title.strip():
        raise HTTPException(status_code=400, detail="jobTitle is required")

    if request.use_ai:
        questions = await generate_ai_interview_questions(
            request.job_title, request.company, request.difficulty, request.num_questions,
        )
    else:
        questions = generate_interview_questions(request.job_title, request.company, request.difficulty)

    logger.info("Generated %d interview questions for %s", len(questions), request.job_title)
    return GenerateQuestionsResponse(questions=questions)


# ── Evaluation ───────────────────────────────────────────────────────

class EvaluateAnswerRequest(BaseModel):
    answer: str
    question: str


@interview_router.post("/evaluate-answer")
async def evaluate_answer(request: EvaluateAnswerRequest):
    """Never fails on LLM trouble; a placeholder evaluation is returned instead."""
    if not request.answer.strip() or not request.question.strip():
        raise HTTPException(status_code=400, detail="Answer and question are required")
    return {"evaluation": await evaluate_answer_with_ai(request.answer, request.question)}


class ScoreAnswerRequest(BaseModel):
    answer: str
    question: InterviewQuestion


@interview_router.post(
    "/score-answer", response_model=InterviewFeedback, response_model_by_alias=True,
)
async def score_answer(request: ScoreAnswerRequest):
    if not request.answer.strip():
        raise HTTPException(status_code=400, detail="Answer is required")
    return score_interview_response(request.answer, request.question)


class SummaryRequest(BaseModel):
    scores: list[Optional[int]]


@interview_router.post("/summary")
async def summary(request: SummaryRequest):
    return calculate_mock_interview_score([s for s in request.scores if s is not None])
