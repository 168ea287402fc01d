# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course catalog queries.

Only published courses are listed. Filters combine with AND; the text
search matches title or description case-insensitively.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Literal

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from learning_adventures.domains.courses.exceptions import CourseNotFoundError
from learning_adventures.infrastructure.database.models import (
    Course,
    CourseLesson,
    Difficulty,
)

logger = logging.getLogger(__name__)

SortBy = Literal["recent", "title", "difficulty", "estimatedMinutes", "totalXP"]
SortDirection = Literal["asc", "desc"]

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

_DIFFICULTY_RANK = case(
    {
        Difficulty.BEGINNER.value: 1,
        Difficulty.INTERMEDIATE.value: 2,
        Difficulty.ADVANCED.value: 3,
    },
    value=Course.difficulty,
    else_=0,
)

_SORT_COLUMNS = {
    "title": Course.title,
    "difficulty": _DIFFICULTY_RANK,
    "estimatedMinutes": Course.estimated_minutes,
    "totalXP": Course.total_xp,
    "recent": Course.created_at,
}


@dataclass
class CourseFilters:
    """Catalog filters. Unset fields do not constrain the query."""

    subject: str | None = None
    difficulty: str | None = None
    is_premium: bool | None = None
    grade_levels: list[str] | None = None
    search: str | None = None


def serialize_lesson(lesson: CourseLesson) -> dict[str, Any]:
    return {
        "id": lesson.id,
        "courseId": lesson.course_id,
        "order": lesson.order,
        "title": lesson.title,
        "description": lesson.description,
        "type": lesson.type,
        "contentPath": lesson.content_path,
        "duration": lesson.duration,
        "xpReward": lesson.xp_reward,
        "requiredScore": lesson.required_score,
        "hasQuiz": lesson.quiz_data is not None,
    }


def serialize_course(course: Course, include_lessons: bool = False) -> dict[str, Any]:
    data = {
        "id": course.id,
        "title": course.title,
        "slug": course.slug,
        "description": course.description,
        "subject": course.subject,
        "gradeLevel": list(course.grade_level or []),
        "difficulty": course.difficulty,
        "isPremium": course.is_premium,
        "isPublished": course.is_published,
        "thumbnailUrl": course.thumbnail_url,
        "estimatedMinutes": course.estimated_minutes,
        "totalXP": course.total_xp,
        "prerequisiteCourseIds": list(course.prerequisite_course_ids or []),
        "createdAt": course.created_at.isoformat() if course.created_at else None,
    }
    if include_lessons:
        data["lessons"] = [serialize_lesson(lesson) for lesson in course.lessons]
    return data


def pagination_meta(page: int, page_size: int, total_items: int) -> dict[str, Any]:
    total_pages = math.ceil(total_items / page_size) if page_size else 0
    return {
        "page": page,
        "pageSize": page_size,
        "totalItems": total_items,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPreviousPage": page > 1,
    }


def _apply_filters(query, filters: CourseFilters):
    query = query.where(Course.is_published.is_(True))
    if filters.subject:
        query = query.where(Course.subject == filters.subject)
    if filters.difficulty:
        query = query.where(Course.difficulty == filters.difficulty)
    if filters.is_premium is not None:
        query = query.where(Course.is_premium.is_(filters.is_premium))
    if filters.grade_levels:
        query = query.where(Course.grade_level.overlap(filters.grade_levels))
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(
            or_(Course.title.ilike(pattern), Course.description.ilike(pattern))
        )
    return query


class CourseCatalogService:
    """Read-only access to the published course catalog."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_courses(
        self,
        filters: CourseFilters | None = None,
        sort_by: str = "recent",
        sort_direction: str = "desc",
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> dict[str, Any]:
        """List published courses with filtering, sorting and pagination.

        Args:
            filters: Optional catalog filters.
            sort_by: recent, title, difficulty, estimatedMinutes or totalXP.
            sort_direction: asc or desc.
            page: 1-based page number.
            page_size: Items per page, capped at 100.

        Returns:
            Dict with courses and pagination metadata.
        """
        filters = filters or CourseFilters()
        page = max(1, page)
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))

        count_query = _apply_filters(select(func.count()).select_from(Course), filters)
        total_items = (await self.db.execute(count_query)).scalar() or 0

        column = _SORT_COLUMNS.get(sort_by, Course.created_at)
        order = column.asc() if sort_direction == "asc" else column.desc()

        query = (
            _apply_filters(select(Course), filters)
            .options(selectinload(Course.lessons))
            .order_by(order)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.db.execute(query)
        courses = result.scalars().all()

        return {
            "courses": [serialize_course(c, include_lessons=True) for c in courses],
            "pagination": pagination_meta(page, page_size, total_items),
        }

    async def get_course(self, id_or_slug: str) -> Course:
        """Get a course with its ordered lessons by id or slug.

        Raises:
            CourseNotFoundError: If no course matches.
        """
        result = await self.db.execute(
            select(Course)
            .options(selectinload(Course.lessons))
            .where(or_(Course.id == id_or_slug, Course.slug == id_or_slug))
        )
        course = result.scalars().first()
        if course is None:
            raise CourseNotFoundError("Course not found")
        return course

    async def get_lesson(self, lesson_id: str) -> CourseLesson:
        result = await self.db.execute(select(CourseLesson).where(CourseLesson.id == lesson_id))
        lesson = result.scalar_one_or_none()
        if lesson is None:
            raise CourseNotFoundError("Lesson not found")
        return lesson

    async def get_lesson_by_order(self, course_id: str, order: int) -> CourseLesson | None:
        result = await self.db.execute(
            select(CourseLesson).where(
                CourseLesson.course_id == course_id, CourseLesson.order == order
            )
        )
        return result.scalar_one_or_none()

    async def get_next_lesson(self, course_id: str, order: int) -> CourseLesson | None:
        result = await self.db.execute(
            select(CourseLesson)
            .where(CourseLesson.course_id == course_id, CourseLesson.order > order)
            .order_by(CourseLesson.order.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_course_lessons(self, course_id: str) -> list[CourseLesson]:
        result = await self.db.execute(
            select(CourseLesson)
            .where(CourseLesson.course_id == course_id)
            .order_by(CourseLesson.order.asc())
        )
        return list(result.scalars().all())
