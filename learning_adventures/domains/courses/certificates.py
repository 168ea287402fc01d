# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course completion certificates.

Certificate numbers follow ``CERT-YYYY-NNNNNN`` where NNNNNN is the count
of certificates issued so far this year plus one. Verification codes are
12 characters drawn from A-Z and 0-9 and are unique.
"""

import logging
import secrets
import string
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.domains.courses.exceptions import (
    CourseNotFoundError,
    CourseServiceError,
    CourseValidationError,
    NotEnrolledError,
)
from learning_adventures.infrastructure.database.models import (
    CourseCertificate,
    CourseEnrollment,
    CourseStatus,
    User,
)
from learning_adventures.utils.datetime import utc_now

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 12
MAX_CODE_ATTEMPTS = 10


def format_certificate_number(year: int, sequence: int) -> str:
    return f"CERT-{year}-{sequence:06d}"


def random_verification_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def achievement_level(average_score: float | None) -> str:
    """Certificate tier for an average score."""
    if not average_score:
        return "Completion"
    if average_score >= 95:
        return "Outstanding Achievement"
    if average_score >= 85:
        return "High Achievement"
    if average_score >= 75:
        return "Achievement"
    return "Completion"


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}{'' if value == 1 else 's'}"


def format_time_spent(minutes: int) -> str:
    """Human readable duration, e.g. ``1 hour 5 minutes``."""
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return _plural(mins, "minute")
    if mins == 0:
        return _plural(hours, "hour")
    return f"{_plural(hours, 'hour')} {_plural(mins, 'minute')}"


def format_certificate_date(value: datetime) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def serialize_certificate(certificate: CourseCertificate, include_code: bool = False) -> dict[str, Any]:
    data = {
        "id": certificate.id,
        "certificateNumber": certificate.certificate_number,
        "studentName": certificate.student_name,
        "courseTitle": certificate.course_title,
        "completionDate": certificate.completion_date.isoformat(),
        "totalXPEarned": certificate.total_xp_earned,
        "averageScore": certificate.average_score,
        "totalLessons": certificate.total_lessons,
        "timeSpent": certificate.time_spent,
        "achievementLevel": achievement_level(certificate.average_score),
        "issuedAt": certificate.issued_at.isoformat() if certificate.issued_at else None,
    }
    if include_code:
        data["verificationCode"] = certificate.verification_code
    return data


class CertificateService:
    """Issues, lists and verifies certificates."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def next_certificate_number(self, now: datetime | None = None) -> str:
        now = now or utc_now()
        start_of_year = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        result = await self.db.execute(
            select(func.count())
            .select_from(CourseCertificate)
            .where(CourseCertificate.issued_at >= start_of_year)
        )
        return format_certificate_number(now.year, (result.scalar() or 0) + 1)

    async def unique_verification_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = random_verification_code()
            result = await self.db.execute(
                select(CourseCertificate.id).where(CourseCertificate.verification_code == code)
            )
            if result.scalar_one_or_none() is None:
                return code
        raise CourseServiceError("Failed to generate unique verification code")

    async def issue_for_course(self, user_id: str, course_id: str) -> CourseCertificate:
        """Return the enrollment's certificate, issuing it on first request.

        Raises:
            NotEnrolledError: User is not enrolled in the course.
            CourseValidationError: Course is not completed yet.
        """
        result = await self.db.execute(
            select(CourseEnrollment).where(
                CourseEnrollment.user_id == user_id,
                CourseEnrollment.course_id == course_id,
            )
        )
        enrollment = result.scalar_one_or_none()
        if enrollment is None:
            raise NotEnrolledError("You are not enrolled in this course")

        if enrollment.status != CourseStatus.COMPLETED.value:
            raise CourseValidationError(
                "You must complete the course before generating a certificate"
            )

        result = await self.db.execute(
            select(CourseCertificate).where(CourseCertificate.enrollment_id == enrollment.id)
        )
        existing = result.scalar_one_or_none()
        if existing is not None:
            return existing

        user = await self.db.get(User, user_id)
        certificate = CourseCertificate(
            enrollment_id=enrollment.id,
            certificate_number=await self.next_certificate_number(),
            verification_code=await self.unique_verification_code(),
            student_name=(user.name if user and user.name else "Student"),
            course_title=enrollment.course.title,
            completion_date=enrollment.completed_at or utc_now(),
            total_xp_earned=enrollment.total_xp_earned,
            average_score=enrollment.average_score,
            total_lessons=enrollment.total_lessons,
            time_spent=sum(p.time_spent for p in enrollment.lesson_progress),
        )
        self.db.add(certificate)
        enrollment.certificate_earned = True

        await self.db.commit()
        await self.db.refresh(certificate)

        logger.info(
            "Certificate issued: %s for user=%s, course=%s",
            certificate.certificate_number,
            user_id,
            course_id,
        )
        return certificate

    async def get_certificate(self, certificate_id: str) -> CourseCertificate:
        result = await self.db.execute(
            select(CourseCertificate).where(CourseCertificate.id == certificate_id)
        )
        certificate = result.scalar_one_or_none()
        if certificate is None:
            raise CourseNotFoundError("Certificate not found")
        return certificate

    async def list_user_certificates(self, user_id: str) -> list[CourseCertificate]:
        result = await self.db.execute(
            select(CourseCertificate)
            .join(CourseEnrollment, CourseEnrollment.id == CourseCertificate.enrollment_id)
            .where(CourseEnrollment.user_id == user_id)
            .order_by(CourseCertificate.completion_date.desc())
        )
        return list(result.scalars().all())

    async def verify_certificate(self, verification_code: str) -> dict[str, Any]:
        """Public verification by code.

        Returns:
            Dict with valid and, when found, the certificate.
        """
        code = (verification_code or "").strip().upper()
        result = await self.db.execute(
            select(CourseCertificate).where(CourseCertificate.verification_code == code)
        )
        certificate = result.scalar_one_or_none()
        if certificate is None:
            return {"valid": False, "certificate": None}
        return {"valid": True, "certificate": serialize_certificate(certificate)}
