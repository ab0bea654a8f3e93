"""Performance review data gathering: monthly overview and seed ratings"""

from datetime import datetime, time
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.mock_interview import MockInterview
from app.models.office_hours import OfficeHoursRecord
from app.models.performance_review import PerformanceReview, INDICATOR_FIELDS
from app.models.profile import Profile
from app.models.resume_version import ResumeVersion
from app.services import scoring
from app.services.progress_service import parse_month, count_applications, count_networking


async def get_profile(db: AsyncSession, profile_id: Optional[str]) -> Optional[Profile]:
    if not profile_id:
        return None
    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def review_for_month(db: AsyncSession, student_id: str, month: str) -> Optional[PerformanceReview]:
    result = await db.execute(
        select(PerformanceReview).where(
            PerformanceReview.student_id == student_id,
            PerformanceReview.review_month == month,
        )
    )
    return result.scalar_one_or_none()


async def latest_review_before(db: AsyncSession, student_id: str, month: str) -> Optional[PerformanceReview]:
    """Most recent review strictly before the given month"""
    result = await db.execute(
        select(PerformanceReview)
        .where(PerformanceReview.student_id == student_id, PerformanceReview.review_month < month)
        .order_by(PerformanceReview.review_month.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def latest_behavioral_rating(db: AsyncSession, student_id: str, until: datetime) -> Optional[int]:
    result = await db.execute(
        select(MockInterview.overall_rating)
        .where(
            MockInterview.student_id == student_id,
            MockInterview.interview_type == 'behavioral',
            MockInterview.interview_date <= until,
        )
        .order_by(MockInterview.interview_date.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def monthly_activity(db: AsyncSession, student_id: str, month: str) -> scoring.MonthlyActivity:
    start, end = parse_month(month)
    return scoring.MonthlyActivity(
        applications=await count_applications(db, student_id, start, end),
        networking_interactions=await count_networking(db, student_id, start, end),
        latest_behavioral_rating=await latest_behavioral_rating(
            db, student_id, datetime.combine(end, time.max)
        ),
    )


async def build_seed(db: AsyncSession, student: Profile, month: str) -> Dict:
    """Seed indicator values for a new review of `student` in `month`"""
    previous = await latest_review_before(db, student.id, month)
    attention = previous.attention_level if previous else student.attention_level
    highest_attention = attention == 'highest'

    activity = await monthly_activity(db, student.id, month)
    seeds = scoring.derive_seed_ratings(
        activity,
        previous.indicators() if previous else None,
        highest_attention=highest_attention,
    )

    return {
        "studentId": student.id,
        "month": month,
        "highestAttention": highest_attention,
        "previousReviewMonth": previous.review_month if previous else None,
        "activity": {
            "applications": activity.applications,
            "networkingInteractions": activity.networking_interactions,
            "latestBehavioralRating": activity.latest_behavioral_rating,
        },
        "seeds": seeds,
        "weightedOverall": scoring.weighted_overall(seeds),
        "suggestedRating": scoring.suggest_performance_rating(seeds),
    }


async def performance_overview(db: AsyncSession, student: Profile, month: str) -> Dict:
    """Everything the performance page shows for one student and month"""
    start, end = parse_month(month)
    month_start = datetime.combine(start, time.min)
    month_end = datetime.combine(end, time.max)

    review = await review_for_month(db, student.id, month)

    interviews = await db.execute(
        select(MockInterview)
        .where(
            MockInterview.student_id == student.id,
            MockInterview.interview_date >= month_start,
            MockInterview.interview_date <= month_end,
        )
        .order_by(MockInterview.interview_date.desc())
    )
    office_hours = await db.execute(
        select(OfficeHoursRecord)
        .where(
            OfficeHoursRecord.student_id == student.id,
            OfficeHoursRecord.session_date >= month_start,
            OfficeHoursRecord.session_date <= month_end,
        )
        .order_by(OfficeHoursRecord.session_date.desc())
    )
    versions = await db.execute(
        select(ResumeVersion)
        .where(ResumeVersion.student_id == student.id)
        .order_by(ResumeVersion.version_number.desc())
    )

    coach = await get_profile(db, student.coach_id)
    mentor = await get_profile(db, student.mentor_id)

    review_dict = None
    if review:
        review_dict = review.to_dict()
        review_dict["weightedOverall"] = scoring.weighted_overall(review.indicators())

    return {
        "month": month,
        "student": student.to_dict(),
        "coach": coach.to_summary() if coach else None,
        "mentor": mentor.to_summary() if mentor else None,
        "review": review_dict,
        "mockInterviews": [i.to_dict() for i in interviews.scalars().all()],
        "officeHours": [o.to_dict() for o in office_hours.scalars().all()],
        "resumeVersions": [v.to_dict() for v in versions.scalars().all()],
    }


async def sync_student_labels(db: AsyncSession, student_id: str) -> None:
    """Copy attention level / rating of the newest review onto the student's profile"""
    student = await get_profile(db, student_id)
    if not student:
        return
    result = await db.execute(
        select(PerformanceReview)
        .where(PerformanceReview.student_id == student_id)
        .order_by(PerformanceReview.review_month.desc())
        .limit(1)
    )
    latest = result.scalar_one_or_none()
    if latest:
        student.attention_level = latest.attention_level
        student.performance_rating = latest.performance_rating
        student.last_review_date = latest.review_date


async def indicator_history(db: AsyncSession, student_id: str, months: int = 12) -> Dict:
    """Indicator series across the student's most recent reviews, oldest month first"""
    result = await db.execute(
        select(PerformanceReview)
        .where(PerformanceReview.student_id == student_id)
        .order_by(PerformanceReview.review_month.desc())
        .limit(months)
    )
    reviews = list(reversed(result.scalars().all()))

    return {
        "studentId": student_id,
        "months": [r.review_month for r in reviews],
        "series": {field: [getattr(r, field) for r in reviews] for field in INDICATOR_FIELDS},
        "weightedOverall": [scoring.weighted_overall(r.indicators()) for r in reviews],
        "performanceRatings": [r.performance_rating for r in reviews],
    }
