# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course catalog, enrollment, lesson, quiz, subscription and certificate endpoints.

Catalog:
- GET /courses - Filtered, sorted, paginated catalog
- GET /courses/{id_or_slug} - Course detail with lessons

Enrollment:
- GET /courses/{id}/eligibility, POST /courses/{id}/enroll, DELETE /courses/{id}/enroll
- GET /courses/{id}/enrollment - Progress, next lesson, time remaining
- GET /courses/dashboard, GET /courses/enrollments, GET /courses/stats

Lessons:
- GET /courses/{id}/lessons - Lessons with progress and lock state
- POST /lessons/{id}/start | /retry | /complete
- POST /lessons/{id}/quiz, POST /lessons/{id}/quiz/reveal
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.api.dependencies import get_db, require_admin, require_auth
from learning_adventures.api.middleware.auth import CurrentUser
from learning_adventures.domains.courses import (
    CertificateService,
    CourseCatalogService,
    CourseFilters,
    CourseNotFoundError,
    CourseValidationError,
    EnrollmentNotAllowedError,
    EnrollmentService,
    InsufficientXPError,
    LessonAccessError,
    LessonProgressService,
    NotEnrolledError,
    QuizService,
    SubscriptionService,
    serialize_certificate,
    serialize_course,
    serialize_enrollment,
    serialize_lesson_progress,
)
from learning_adventures.domains.courses.catalog import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from learning_adventures.infrastructure.database.models import SubscriptionTier
from learning_adventures.models.learning import (
    CompleteLessonRequest,
    QuizSubmitRequest,
    RevealAnswerRequest,
    SubscriptionUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()
lessons_router = APIRouter()
subscription_router = APIRouter()
certificates_router = APIRouter()


def _split(value: str | None) -> list[str] | None:
    if not value:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


# =============================================================================
# Catalog and enrollment
# =============================================================================


@router.get("")
async def list_courses(
    subject: str | None = Query(default=None),
    difficulty: str | None = Query(default=None),
    is_premium: bool | None = Query(default=None, alias="isPremium"),
    grades: str | None = Query(default=None, description="Comma-separated grade levels"),
    search: str | None = Query(default=None),
    sort_by: str = Query(default="recent", alias="sortBy"),
    sort_direction: str = Query(default="desc", alias="sortDirection"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """List published courses."""
    filters = CourseFilters(
        subject=subject,
        difficulty=difficulty,
        is_premium=is_premium,
        grade_levels=_split(grades),
        search=search.strip() if search else None,
    )
    return await CourseCatalogService(db).list_courses(
        filters,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        page_size=page_size,
    )


@router.get("/dashboard")
async def course_dashboard(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await EnrollmentService(db).dashboard(current_user.id)


@router.get("/enrollments")
async def list_enrollments(
    status_filter: str | None = Query(default=None, alias="status"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    enrollments = await EnrollmentService(db).list_enrollments(current_user.id, status_filter)
    return {"enrollments": [serialize_enrollment(e) for e in enrollments]}


@router.get("/stats")
async def course_stats(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"stats": await LessonProgressService(db).course_stats(current_user.id)}


@router.get("/{id_or_slug}")
async def get_course(
    id_or_slug: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        course = await CourseCatalogService(db).get_course(id_or_slug)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"course": serialize_course(course, include_lessons=True)}


@router.get("/{course_id}/eligibility")
async def enrollment_eligibility(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    eligibility = await EnrollmentService(db).check_eligibility(current_user.id, course_id)
    return eligibility.to_dict()


@router.post("/{course_id}/enroll", status_code=status.HTTP_201_CREATED)
async def enroll(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Enroll the current user; a failed eligibility check returns its report."""
    try:
        enrollment = await EnrollmentService(db).enroll(current_user.id, course_id)
    except EnrollmentNotAllowedError as e:
        code = (
            status.HTTP_404_NOT_FOUND
            if e.message == "Course not found"
            else status.HTTP_403_FORBIDDEN
        )
        raise HTTPException(
            status_code=code,
            detail={"error": e.message, "eligibility": e.details},
        )

    return {
        "success": True,
        "enrollment": serialize_enrollment(enrollment, include_course=False),
        "message": "Successfully enrolled in course",
    }


@router.delete("/{course_id}/enroll")
async def unenroll(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        await EnrollmentService(db).unenroll(current_user.id, course_id)
    except NotEnrolledError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, "message": "Successfully unenrolled from course"}


@router.get("/{course_id}/enrollment")
async def enrollment_details(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        details = await EnrollmentService(db).enrollment_details(current_user.id, course_id)
    except NotEnrolledError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"enrollment": details}


@router.get("/{course_id}/lessons")
async def course_lessons(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    lessons = await LessonProgressService(db).lessons_with_progress(current_user.id, course_id)
    return {"lessons": lessons}


@router.post("/{course_id}/certificate")
async def issue_certificate(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Return the course certificate, issuing it on first request."""
    try:
        certificate = await CertificateService(db).issue_for_course(current_user.id, course_id)
    except NotEnrolledError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CourseValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {"success": True, "certificate": serialize_certificate(certificate, include_code=True)}


# =============================================================================
# Lessons and quizzes
# =============================================================================


@lessons_router.post("/{lesson_id}/start")
async def start_lesson(
    lesson_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        progress = await LessonProgressService(db).start_lesson(current_user.id, lesson_id)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except LessonAccessError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": e.message, "access": e.details},
        )
    return {"success": True, "progress": serialize_lesson_progress(progress)}


@lessons_router.post("/{lesson_id}/retry")
async def retry_lesson(
    lesson_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        progress = await LessonProgressService(db).retry_lesson(current_user.id, lesson_id)
    except (CourseNotFoundError, NotEnrolledError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, "progress": serialize_lesson_progress(progress)}


@lessons_router.post("/{lesson_id}/complete")
async def complete_lesson(
    lesson_id: str,
    data: CompleteLessonRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Record an attempt; passing awards XP and unlocks the next lesson."""
    try:
        result = await LessonProgressService(db).complete_lesson(
            current_user.id, lesson_id, score=data.score, time_spent=data.time_spent
        )
    except CourseValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (CourseNotFoundError, NotEnrolledError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, **result}


@lessons_router.post("/{lesson_id}/quiz")
async def submit_quiz(
    lesson_id: str,
    data: QuizSubmitRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        result = await QuizService(db).submit_quiz(
            current_user.id, lesson_id, data.answers, attempt=data.attempt
        )
    except CourseValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (CourseNotFoundError, NotEnrolledError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return result


@lessons_router.post("/{lesson_id}/quiz/reveal")
async def reveal_answer(
    lesson_id: str,
    data: RevealAnswerRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Spend XP to see a question's answer."""
    try:
        return await QuizService(db).reveal_answer(
            current_user.id, lesson_id, data.question_id or "", xp_cost=data.xp_cost
        )
    except (CourseValidationError, InsufficientXPError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =============================================================================
# Subscription
# =============================================================================


@subscription_router.get("")
async def get_subscription(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await SubscriptionService(db).subscription_status(current_user.id)


@subscription_router.post("/users/{user_id}")
async def update_subscription(
    user_id: str,
    data: SubscriptionUpdateRequest,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Set a user's tier (admin only). The change is immediate."""
    try:
        tier = SubscriptionTier(data.tier.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tier must be FREE or PREMIUM",
        )

    service = SubscriptionService(db)
    await service.set_tier(user_id, tier)
    return {"success": True, "subscription": await service.subscription_status(user_id)}


@subscription_router.delete("/users/{user_id}")
async def cancel_subscription(
    user_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = SubscriptionService(db)
    if await service.cancel(user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No subscription found")
    return {"success": True, "subscription": await service.subscription_status(user_id)}


# =============================================================================
# Certificates
# =============================================================================


@certificates_router.get("")
async def list_certificates(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    certificates = await CertificateService(db).list_user_certificates(current_user.id)
    return {"certificates": [serialize_certificate(c, include_code=True) for c in certificates]}


@certificates_router.get("/verify/{verification_code}")
async def verify_certificate(
    verification_code: str,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Public verification; no authentication required."""
    return await CertificateService(db).verify_certificate(verification_code)


@certificates_router.get("/{certificate_id}")
async def get_certificate(
    certificate_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = CertificateService(db)
    try:
        certificate = await service.get_certificate(certificate_id)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    owned = await service.list_user_certificates(current_user.id)
    if certificate.id not in {c.id for c in owned} and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return {"certificate": serialize_certificate(certificate, include_code=True)}
