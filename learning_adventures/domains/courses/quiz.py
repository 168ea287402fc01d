# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson quizzes: grading, progressive hints and XP-paid answer reveals.

Quiz data lives in ``CourseLesson.quiz_data`` as JSON:

    {
        "questions": [
            {"id", "type", "question", "options"?, "correctAnswer",
             "explanation", "hints": [...], "points"}
        ],
        "passingScore": 70,
        "allowRetry": true,
        "maxAttempts": 3
    }
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.domains.courses.catalog import CourseCatalogService
from learning_adventures.domains.courses.exceptions import (
    CourseNotFoundError,
    CourseValidationError,
    InsufficientXPError,
)
from learning_adventures.domains.courses.lessons import LessonProgressService
from learning_adventures.domains.gamification.service import XPService

logger = logging.getLogger(__name__)

QUESTION_TYPES = ("multiple-choice", "true-false", "fill-blank")
MIN_REVEAL_COST = 10


def check_answer(question: dict[str, Any], answer: Any) -> bool:
    """Compare an answer against a question's correct answer.

    Multiple choice compares option indexes exactly, true/false compares
    lowercased strings and fill-in-the-blank also trims whitespace.
    """
    question_type = question.get("type")
    correct = question.get("correctAnswer")

    if question_type == "multiple-choice":
        return answer == correct
    if question_type == "true-false":
        return str(answer).lower() == str(correct).lower()
    if question_type == "fill-blank":
        return str(answer).lower().strip() == str(correct).lower().strip()
    return False


def next_hint(question: dict[str, Any], attempt: int) -> str | None:
    """Hint for the given attempt; the last hint repeats once exhausted."""
    hints = question.get("hints") or []
    if not hints:
        return None
    return hints[min(attempt, len(hints) - 1)]


def grade_quiz(
    quiz: dict[str, Any], answers: dict[str, Any], attempt: int = 0
) -> dict[str, Any]:
    """Grade a submission.

    Args:
        quiz: Quiz data.
        answers: Mapping of question id to submitted answer.
        attempt: Zero-based attempt number, used to pick hints.

    Returns:
        Dict with score (rounded percentage), passed, results, totalPoints
        and earnedPoints.
    """
    results = []
    for question in quiz.get("questions", []):
        answer = answers.get(question["id"])
        correct = check_answer(question, answer)
        results.append(
            {
                "questionId": question["id"],
                "correct": correct,
                "userAnswer": answer,
                "correctAnswer": question.get("correctAnswer"),
                "explanation": question.get("explanation"),
                "nextHint": None if correct else next_hint(question, attempt),
                "pointsEarned": question.get("points", 0) if correct else 0,
            }
        )

    total_points = sum(q.get("points", 0) for q in quiz.get("questions", []))
    earned_points = sum(r["pointsEarned"] for r in results)
    score = round(earned_points / total_points * 100) if total_points else 0

    return {
        "score": score,
        "passed": score >= quiz.get("passingScore", 0),
        "results": results,
        "totalPoints": total_points,
        "earnedPoints": earned_points,
    }


def reveal_cost(points: int) -> int:
    return max(MIN_REVEAL_COST, points // 2)


def can_retry(quiz: dict[str, Any], attempts: int) -> bool:
    if not quiz.get("allowRetry"):
        return False
    max_attempts = quiz.get("maxAttempts")
    return not (max_attempts and attempts >= max_attempts)


def validate_quiz_structure(quiz: Any) -> list[str]:
    """Return a list of structural problems; empty when the quiz is valid."""
    if not isinstance(quiz, dict):
        return ["Quiz data must be an object"]

    errors = []
    questions = quiz.get("questions")
    if not isinstance(questions, list) or not questions:
        errors.append("Quiz must have at least one question")
        questions = []

    passing = quiz.get("passingScore")
    if not isinstance(passing, (int, float)) or isinstance(passing, bool) or not 0 <= passing <= 100:
        errors.append("passingScore must be a number between 0 and 100")

    for index, question in enumerate(questions):
        label = f"Question {index + 1}"
        if not isinstance(question, dict):
            errors.append(f"{label}: must be an object")
            continue
        if not question.get("id") or not question.get("type") or not question.get("question"):
            errors.append(f"{label}: id, type and question are required")
        if question.get("type") not in QUESTION_TYPES:
            errors.append(f"{label}: unknown type {question.get('type')!r}")
        if question.get("type") == "multiple-choice" and not isinstance(question.get("options"), list):
            errors.append(f"{label}: multiple-choice questions need options")
        if not question.get("explanation") or not isinstance(question.get("hints"), list):
            errors.append(f"{label}: explanation and hints are required")
        points = question.get("points")
        if not isinstance(points, (int, float)) or isinstance(points, bool) or points <= 0:
            errors.append(f"{label}: points must be a positive number")

    return errors


def _find_question(quiz: dict[str, Any], question_id: str) -> dict[str, Any] | None:
    return next((q for q in quiz.get("questions", []) if q.get("id") == question_id), None)


class QuizService:
    """Submits quizzes and reveals answers for a lesson."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.catalog = CourseCatalogService(db)

    async def _quiz_for(self, lesson_id: str) -> dict[str, Any]:
        lesson = await self.catalog.get_lesson(lesson_id)
        if not lesson.quiz_data:
            raise CourseNotFoundError("No quiz found for this lesson")
        if not isinstance(lesson.quiz_data.get("questions"), list):
            raise CourseValidationError("Invalid quiz data structure")
        return lesson.quiz_data

    async def submit_quiz(
        self,
        user_id: str,
        lesson_id: str,
        answers: dict[str, Any],
        attempt: int = 0,
    ) -> dict[str, Any]:
        """Grade answers; a passing submission also completes the lesson."""
        if not isinstance(answers, dict):
            raise CourseValidationError("Invalid answers format")

        quiz = await self._quiz_for(lesson_id)
        result = grade_quiz(quiz, answers, attempt)

        if result["passed"]:
            completion = await LessonProgressService(self.db).complete_lesson(
                user_id, lesson_id, result["score"]
            )
            for key in ("xpAwarded", "nextLessonUnlocked", "nextLesson", "leveledUp", "newLevel"):
                result[key] = completion.get(key)

        logger.info(
            "Quiz submitted: user=%s, lesson=%s, score=%d, passed=%s",
            user_id,
            lesson_id,
            result["score"],
            result["passed"],
        )
        return result

    async def reveal_answer(
        self,
        user_id: str,
        lesson_id: str,
        question_id: str,
        xp_cost: int | None = None,
    ) -> dict[str, Any]:
        """Spend XP to reveal a question's answer.

        Raises:
            CourseValidationError: Missing question id or non-positive cost.
            CourseNotFoundError: Unknown lesson, quiz or question, or no XP record.
            InsufficientXPError: Not enough XP.
        """
        if not question_id:
            raise CourseValidationError("Question ID is required")
        if xp_cost is not None and xp_cost <= 0:
            raise CourseValidationError("XP cost must be a positive number")

        quiz = await self._quiz_for(lesson_id)
        question = _find_question(quiz, question_id)
        if question is None:
            raise CourseNotFoundError("Question not found")

        cost = xp_cost if xp_cost is not None else reveal_cost(question.get("points", 0))

        user_level = await XPService(self.db).get_user_level(user_id)
        if user_level is None:
            raise CourseNotFoundError("User level data not found")
        if user_level.total_xp < cost:
            raise InsufficientXPError(cost, user_level.total_xp)

        user_level.total_xp -= cost
        await self.db.commit()

        logger.info("Answer revealed: user=%s, question=%s, cost=%d", user_id, question_id, cost)

        return {
            "correctAnswer": question.get("correctAnswer"),
            "explanation": question.get("explanation"),
            "xpCost": cost,
            "xpRemaining": user_level.total_xp,
        }
