"""
Analytics router - streaks, data quality, reminders and insights.

Every endpoint takes the owner's records in the request body and returns
derived values. Nothing is stored.
"""
import logging

from fastapi import APIRouter, Depends

from health_engine.core.dependencies import (
    get_correlation_service,
    get_quality_scorer,
    get_reminder_prioritizer,
    get_streak_tracker,
)
from health_engine.schemas.requests import (
    InsightsRequest,
    InsightsResponse,
    QualityReportRequest,
    QualityReportResponse,
    RemindersRequest,
    RemindersResponse,
    StreakRequest,
    StreakResponse,
)
from health_engine.services import (
    CorrelationService,
    QualityScorer,
    ReminderPrioritizer,
    StreakTracker,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/analytics",
    tags=["Analytics"],
)


@router.post(
    "/streak",
    response_model=StreakResponse,
    summary="Calculate the BP logging streak",
    description="Current and longest consecutive-day streaks, the next milestone, "
                "the badge earned so far and a motivational message."
)
async def calculate_streak(
    request: StreakRequest,
    tracker: StreakTracker = Depends(get_streak_tracker),
) -> StreakResponse:
    streak = tracker.calculate_streak(request.blood_pressure, now=request.now)
    return StreakResponse(
        streak=streak,
        badge=tracker.milestone_badge(streak.current_streak),
        message=tracker.motivational_message(streak.days_until_milestone),
    )


@router.post(
    "/quality",
    response_model=QualityReportResponse,
    summary="Score data quality",
    description="Weighted data quality score with its breakdown, completeness per category, "
                "improvement suggestions and the readings that need more context."
)
async def quality_report(
    request: QualityReportRequest,
    scorer: QualityScorer = Depends(get_quality_scorer),
) -> QualityReportResponse:
    """
    Build the full data-quality report for one snapshot.

    - **window_days**: optional, defaults to the configured window
    - **now**: optional, used for each medication's next dose time
    """
    snapshot = request.snapshot
    score = scorer.calculate_data_quality_score(snapshot, request.window_days)
    logger.info("Quality report built", extra={"overall": score.overall})
    return QualityReportResponse(
        score=score,
        completeness=scorer.get_data_completeness(snapshot, request.window_days),
        suggestions=scorer.get_improvement_suggestions(snapshot, request.window_days),
        high_bp_without_notes=scorer.find_high_bp_without_notes(snapshot.blood_pressure),
        days_without_context=scorer.find_bp_without_context(
            snapshot.blood_pressure, snapshot.diet, snapshot.exercise
        ),
        adherence=scorer.adherence_by_medication(snapshot, now=request.now),
    )


@router.post(
    "/reminders",
    response_model=RemindersResponse,
    summary="Generate smart reminders",
    description="Reminders ranked by priority, then type. Pass limit to keep only the top N."
)
async def smart_reminders(
    request: RemindersRequest,
    prioritizer: ReminderPrioritizer = Depends(get_reminder_prioritizer),
) -> RemindersResponse:
    reminders = prioritizer.generate_smart_reminders(request.snapshot, now=request.now)
    total = len(reminders)
    if request.limit is not None:
        reminders = reminders[:request.limit]
    return RemindersResponse(reminders=reminders, total=total)


@router.post(
    "/insights",
    response_model=InsightsResponse,
    summary="Correlate BP with lifestyle factors",
    description="Pearson correlation of daily BP against exercise, meals and medication adherence, "
                "with an insight for every factor that shows a pattern."
)
async def correlation_insights(
    request: InsightsRequest,
    service: CorrelationService = Depends(get_correlation_service),
) -> InsightsResponse:
    results = service.generate_insights(request.snapshot)
    return InsightsResponse(
        exercise=results["exercise"],
        diet=results["diet"],
        medication=results["medication"],
        insights=[r.insight for r in results.values() if r.insight is not None],
    )
