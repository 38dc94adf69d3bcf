"""
Driving School Matching - Reports Router
Instructor performance and trend endpoints over historical matchings.
"""

from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from app.config import Settings, get_settings
from app.services.performance_service import (
    HistoricalMatching,
    HistoricalResult,
    calculate_trend,
    month_window,
    monthly_instructor_performance,
)
from app.schemas.report_schemas import (
    HistoricalMatchingSchema,
    InstructorPerformanceRequest,
    InstructorPerformanceResponse,
    InstructorPerformanceSchema,
    TrendRequest,
    TrendResponse,
)

router = APIRouter()


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken as UTC so mixed inputs stay comparable
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _matching_from_schema(matching: HistoricalMatchingSchema) -> HistoricalMatching:
    return HistoricalMatching(
        id=matching.id,
        name=matching.name,
        created_at=_as_utc(matching.created_at),
        status=matching.status,
        results=[HistoricalResult(**r.model_dump()) for r in matching.results]
    )


@router.post("/reports/instructor-performance", response_model=InstructorPerformanceResponse)
async def instructor_performance(
    request: InstructorPerformanceRequest,
    settings: Settings = Depends(get_settings)
):
    """
    **Monthly Instructor Performance**

    Uses APPLIED matchings from the month of `reference_date` (default:
    now), ranks instructors by success rate and compares each rate with
    the previous month:

    - **up**: more than the trend threshold above last month
    - **down**: more than the threshold below last month
    - **stable**: otherwise, or no data for last month

    Timestamps without a timezone are read as UTC and months are
    UTC calendar months.
    """
    matchings = [_matching_from_schema(m) for m in request.matchings]
    reference = _as_utc(request.reference_date or datetime.now(timezone.utc))

    stats = monthly_instructor_performance(
        matchings,
        reference,
        threshold=settings.trend_threshold
    )
    period_start, period_end = month_window(reference)

    return InstructorPerformanceResponse(
        period_start=period_start,
        period_end=period_end,
        instructors=[
            InstructorPerformanceSchema.model_validate(s, from_attributes=True)
            for s in stats
        ]
    )


@router.post("/reports/trend", response_model=TrendResponse)
async def success_rate_trend(
    request: TrendRequest,
    settings: Settings = Depends(get_settings)
):
    """**Classify the Trend Between Two Success Rates**"""
    return TrendResponse(
        current_rate=request.current_rate,
        previous_rate=request.previous_rate,
        trend=calculate_trend(
            request.current_rate,
            request.previous_rate,
            threshold=settings.trend_threshold
        )
    )
