"""Job-search progress metrics over a date range"""

import math
import re
from datetime import date, timedelta
from typing import Dict, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.career_goal import CareerGoal, DEFAULT_GOALS
from app.models.job_application import JobApplication, NO_RESPONSE_STATUSES
from app.models.networking_interaction import NetworkingInteraction

MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_month(month: str) -> Tuple[date, date]:
    """'YYYY-MM' -> (first day, last day). Raises ValueError on bad input."""
    match = MONTH_PATTERN.match(month or "")
    if not match:
        raise ValueError(f"Invalid month: {month!r} (expected YYYY-MM)")
    year, month_num = int(match.group(1)), int(match.group(2))
    start = date(year, month_num, 1)
    next_month = date(year + month_num // 12, month_num % 12 + 1, 1)
    return start, next_month - timedelta(days=1)


def previous_month(month: str) -> str:
    start, _ = parse_month(month)
    return (start - timedelta(days=1)).strftime("%Y-%m")


def default_date_range(today: Optional[date] = None) -> Tuple[date, date]:
    """Monday of the week four weeks ago through today"""
    today = today or date.today()
    four_weeks_ago = today - timedelta(days=28)
    return four_weeks_ago - timedelta(days=four_weeks_ago.weekday()), today


def month_date_range(month: str, today: Optional[date] = None) -> Tuple[date, date]:
    """First through last day of a month; the month in progress stops at today"""
    start, end = parse_month(month)
    today = today or date.today()
    if start <= today < end:
        end = today
    return start, end


def weeks_in_range(start: date, end: date) -> int:
    return max(1, math.ceil((end - start).days / 7))


def percentage(part: int, total: int) -> float:
    return round(part * 100.0 / total, 2) if total else 0


def progress_band(actual: int, goal: int) -> str:
    if goal <= 0:
        return "complete"
    pct = actual * 100.0 / goal
    if pct >= 100:
        return "complete"
    if pct >= 75:
        return "on_track"
    if pct >= 50:
        return "behind"
    return "at_risk"


async def count_applications(db: AsyncSession, student_id: str, start: date, end: date) -> int:
    result = await db.execute(
        select(func.count(JobApplication.id)).where(
            JobApplication.student_id == student_id,
            JobApplication.application_date >= start,
            JobApplication.application_date <= end,
        )
    )
    return result.scalar() or 0


async def count_networking(db: AsyncSession, student_id: str, start: date, end: date) -> int:
    result = await db.execute(
        select(func.count(NetworkingInteraction.id)).where(
            NetworkingInteraction.student_id == student_id,
            NetworkingInteraction.interaction_date >= start,
            NetworkingInteraction.interaction_date <= end,
        )
    )
    return result.scalar() or 0


async def application_metrics(db: AsyncSession, student_id: str, start: date, end: date) -> Dict:
    result = await db.execute(
        select(JobApplication.status, func.count(JobApplication.id))
        .where(
            JobApplication.student_id == student_id,
            JobApplication.application_date >= start,
            JobApplication.application_date <= end,
        )
        .group_by(JobApplication.status)
    )
    by_status = {row[0]: row[1] for row in result.all()}
    total = sum(by_status.values())
    responses = sum(count for status, count in by_status.items() if status not in NO_RESPONSE_STATUSES)

    return {
        "totalApplications": total,
        "applicationsByStatus": by_status,
        "responseRate": percentage(responses, total),
        "interviewRate": percentage(by_status.get("interview", 0), total),
        "offerRate": percentage(by_status.get("offer", 0), total),
    }


async def goal_progress(db: AsyncSession, student_id: str, start: date, end: date) -> Dict:
    result = await db.execute(select(CareerGoal).where(CareerGoal.student_id == student_id))
    goals = result.scalar_one_or_none()

    weeks = weeks_in_range(start, end)
    weekly_applications = goals.weekly_application_goal if goals else DEFAULT_GOALS["weekly_application_goal"]
    weekly_connections = goals.weekly_connection_goal if goals else DEFAULT_GOALS["weekly_connection_goal"]

    application_goal = weekly_applications * weeks
    connection_goal = weekly_connections * weeks
    applications = await count_applications(db, student_id, start, end)
    connections = await count_networking(db, student_id, start, end)

    return {
        "weeks": weeks,
        "goals": {"applications": application_goal, "connections": connection_goal},
        "actual": {"applications": applications, "connections": connections},
        "bands": {
            "applications": progress_band(applications, application_goal),
            "connections": progress_band(connections, connection_goal),
        },
    }


async def progress_report(db: AsyncSession, student_id: str, start: date, end: date) -> Dict:
    return {
        "studentId": student_id,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "metrics": await application_metrics(db, student_id, start, end),
        "progress": await goal_progress(db, student_id, start, end),
    }
