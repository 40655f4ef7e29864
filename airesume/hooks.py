"""Cached queries and mutations used by the pages.

Every function here returns a result object instead of raising, so a page
can always show a notification and stay usable.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from airesume.context import AppContext
from airesume.errors import ApiError, ClientValidationError, describe_error, role_restricted_message
from airesume.log import get_logger
from airesume.query import DEFAULT_RETRIES, RetrySpec, no_retry_on

log = get_logger(__name__)

MATCHING_STATS_RESTRICTED = "Matching statistics are only available for employee accounts."
MATCHING_STATS_FAILED = "Unable to load matching statistics."


@dataclass
class Result:
    data: Any = None
    error: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_query(
    ctx: AppContext,
    key: tuple,
    fn: Callable[[], Any],
    *,
    fallback: str,
    retry: RetrySpec = DEFAULT_RETRIES,
) -> Result:
    policy = ctx.settings.policy(str(key[0]))
    try:
        return Result(data=ctx.queries.fetch_with_policy(key, fn, policy, retry=retry))
    except ApiError as exc:
        log.warning("Query %s failed: %s", key[0], exc)
        return Result(error=describe_error(exc, fallback))


def run_mutation(
    ctx: AppContext,
    fn: Callable[[], Any],
    *,
    success: str,
    fallback: str,
    invalidate: Iterable[tuple] = (),
) -> Result:
    try:
        data = fn()
    except ClientValidationError as exc:
        return Result(error=str(exc))
    except ApiError as exc:
        log.error("%s: %s", fallback, exc)
        return Result(error=describe_error(exc, fallback))
    for prefix in invalidate:
        ctx.queries.invalidate(prefix)
    return Result(data=data, message=success)


# ── Employee ─────────────────────────────────────────────────────────────


def resumes(ctx: AppContext) -> Result:
    return run_query(ctx, ("resumes",), ctx.employee.get_resumes, fallback="Failed to load resumes")


def voice_analyses(ctx: AppContext) -> Result:
    return run_query(
        ctx, ("voice-analyses",), ctx.employee.get_voice_analyses,
        fallback="Failed to load voice analyses",
    )


def applications(ctx: AppContext) -> Result:
    return run_query(
        ctx, ("applications",), ctx.employee.get_applications,
        fallback="Failed to load applications",
    )


def job_recommendations(ctx: AppContext, limit: int = 20, min_score: float | None = None) -> Result:
    return run_query(
        ctx,
        ("job-recommendations", {"limit": limit, "min_score": min_score}),
        lambda: ctx.employee.get_job_recommendations(limit=limit, min_score=min_score),
        fallback="Failed to load job recommendations",
    )


def job_search(ctx: AppContext, filters: dict[str, Any]) -> Result:
    return run_query(
        ctx,
        ("job-search", filters),
        lambda: ctx.employee.search_jobs(**filters),
        fallback="Job search failed",
    )


def job_details(ctx: AppContext, job_id: int) -> Result:
    return run_query(
        ctx,
        ("job-details", job_id),
        lambda: ctx.employee.get_job_details(job_id),
        fallback="Failed to load job details",
        retry=no_retry_on(404),
    )


def employee_matches(ctx: AppContext, min_match_score: float | None = None) -> Result:
    return run_query(
        ctx,
        ("employee-matches", {"min_match_score": min_match_score, "is_dismissed": False}),
        lambda: ctx.matching.get_employee_matches(
            min_match_score=min_match_score, is_dismissed=False
        ),
        fallback="Failed to load matches",
    )


def matching_stats(ctx: AppContext) -> Result:
    """403 means the feature is not offered to this role; it is never retried."""
    try:
        stats = ctx.queries.fetch(
            ("matching-stats",), ctx.matching.get_matching_stats, retry=no_retry_on(403)
        )
    except ApiError as exc:
        return Result(
            error=role_restricted_message(exc, MATCHING_STATS_RESTRICTED, MATCHING_STATS_FAILED)
        )
    return Result(data=stats)


def skills_analysis(ctx: AppContext) -> Result:
    return run_query(
        ctx, ("skills-analysis",), ctx.employee.get_skills_analysis,
        fallback="Failed to load skills analysis. Please ensure you have an analyzed resume uploaded.",
        retry=no_retry_on(404),
    )


def profile(ctx: AppContext) -> Result:
    return run_query(
        ctx, ("profile",), ctx.auth_service.get_profile,
        fallback="Failed to load profile", retry=False,
    )


# ── Employer ─────────────────────────────────────────────────────────────


def employer_dashboard(ctx: AppContext) -> Result:
    return run_query(
        ctx, ("dashboard-stats",), ctx.employer.get_dashboard_stats,
        fallback="Failed to load dashboard",
    )


def employer_jobs(ctx: AppContext, status_filter: str | None = None) -> Result:
    return run_query(
        ctx,
        ("employer-jobs", {"status_filter": status_filter}),
        lambda: ctx.employer.get_job_postings(status_filter=status_filter),
        fallback="Failed to load job postings",
    )


def job_applications(ctx: AppContext, job_id: int, status_filter: str | None = None) -> Result:
    return run_query(
        ctx,
        ("job-applications", job_id, {"status_filter": status_filter}),
        lambda: ctx.employer.get_job_applications(job_id, status_filter=status_filter),
        fallback="Failed to load applications",
    )


def candidate_search(ctx: AppContext, filters: dict[str, Any]) -> Result:
    """An empty list is a normal outcome, not an error."""
    return run_query(
        ctx,
        ("candidate-search", filters),
        lambda: ctx.employer.search_candidates(**filters),
        fallback="Candidate search failed",
    )


def interviews(ctx: AppContext) -> Result:
    return run_query(
        ctx, ("interviews",), ctx.employer.list_interviews,
        fallback="Failed to load interviews",
    )


# ── Mutations ────────────────────────────────────────────────────────────


def upload_resume(ctx: AppContext, file_name: str, content: bytes, content_type: str) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employee.upload_resume(file_name, content, content_type),
        success="Resume uploaded successfully!",
        fallback="Failed to upload resume",
        invalidate=[("resumes",), ("skills-analysis",)],
    )


def upload_voice(ctx: AppContext, file_name: str, content: bytes, content_type: str,
                 on_progress=None) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employee.upload_voice(file_name, content, content_type, on_progress=on_progress),
        success="Voice sample uploaded for analysis!",
        fallback="Failed to upload voice sample",
        invalidate=[("voice-analyses",)],
    )


def apply_to_job(ctx: AppContext, job_id: int, **kwargs: Any) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employee.apply_to_job(job_id, **kwargs),
        success="Application submitted successfully!",
        fallback="Failed to submit application",
        invalidate=[("applications",), ("job-recommendations",)],
    )


def withdraw_application(ctx: AppContext, application_id: int) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employee.withdraw_application(application_id),
        success="Application withdrawn",
        fallback="Failed to withdraw application",
        invalidate=[("applications",)],
    )


def dismiss_match(ctx: AppContext, match_id: int) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.matching.dismiss_match(match_id),
        success="Match dismissed",
        fallback="Failed to dismiss match",
        invalidate=[("employee-matches",), ("matching-stats",)],
    )


def delete_job(ctx: AppContext, job_id: int) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employer.delete_job_posting(job_id),
        success="Job posting deleted",
        fallback="Failed to delete job posting",
        invalidate=[("employer-jobs",), ("dashboard-stats",)],
    )


def update_application_status(ctx: AppContext, application_id: int, status: str,
                              notes: str | None = None) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employer.update_application_status(application_id, status, notes),
        success="Application status updated successfully",
        fallback="Failed to update application status",
        invalidate=[("job-applications",), ("dashboard-stats",), ("interviews",)],
    )


def schedule_interview(ctx: AppContext, application_id: int, **details: Any) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employer.schedule_interview(application_id, **details),
        success="Interview scheduled successfully",
        fallback="Failed to schedule interview",
        invalidate=[("job-applications",), ("dashboard-stats",), ("interviews",)],
    )


def generate_matches(ctx: AppContext, job_id: int) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employer.get_ai_recommendations(job_id),
        success="AI matches generated",
        fallback="Failed to generate AI matches",
        invalidate=[("job-applications", job_id)],
    )


def analyze_job_match(ctx: AppContext, job_id: int, resume_id: int | None = None) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.employee.analyze_job_match(job_id, resume_id),
        success="Match analysis ready",
        fallback="Failed to analyze job match",
    )


def calculate_match(ctx: AppContext, employee_id: int, job_id: int,
                    resume_id: int | None = None) -> Result:
    return run_mutation(
        ctx,
        lambda: ctx.matching.calculate_match(employee_id, job_id, resume_id),
        success="Match score calculated",
        fallback="Failed to calculate match",
        invalidate=[("employee-matches",), ("matching-stats",)],
    )


def generate_bulk_matches(ctx: AppContext, job_ids: list[int], min_match_score: float,
                          auto_recommend: bool) -> Result:
    if not job_ids:
        return Result(error="Please select at least one job")

    def generate():
        result = ctx.matching.generate_bulk_matches(
            job_ids=list(job_ids), min_match_score=min_match_score, auto_recommend=auto_recommend
        )
        log.info("Bulk matching: %d matches across %d jobs",
                 result.total_matches_generated, result.jobs_processed)
        return result

    outcome = run_mutation(
        ctx,
        generate,
        success="",
        fallback="Failed to generate matches",
        invalidate=[("matching-stats",), ("employee-matches",)]
        + [("job-applications", job_id) for job_id in job_ids],
    )
    if outcome.ok:
        outcome.message = (
            f"Successfully generated {outcome.data.total_matches_generated} matches "
            f"across {outcome.data.jobs_processed} jobs!"
        )
    return outcome
