"""Employer endpoints: job postings, applications, interviews, candidate search."""
from __future__ import annotations

from typing import Any

from airesume.api.client import ApiClient
from airesume.errors import ApiError
from airesume.log import get_logger
from airesume.models import (
    ApplicationReview,
    CandidateMatch,
    EmployerDashboardStats,
    Interview,
    JobPosting,
    parse_timestamp,
)

log = get_logger(__name__)


class EmployerService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_dashboard_stats(self) -> EmployerDashboardStats:
        return EmployerDashboardStats.from_dict(self.api.get("/api/employer/dashboard/stats") or {})

    # ── Job postings ─────────────────────────────────────────────────────

    def get_job_postings(self, status_filter: str | None = None, limit: int | None = None,
                         offset: int | None = None) -> list[JobPosting]:
        data = self.api.get(
            "/api/employer/jobs",
            params={"status_filter": status_filter, "limit": limit, "offset": offset},
        )
        return [JobPosting.from_dict(d) for d in data or []]

    def get_job_posting(self, job_id: int) -> JobPosting:
        return JobPosting.from_dict(self.api.get(f"/api/employer/jobs/{job_id}"))

    def create_job_posting(self, payload: dict[str, Any]) -> JobPosting:
        data = self.api.post("/api/employer/jobs", json=payload)
        log.info("Created job posting %r", payload.get("title"))
        return JobPosting.from_dict(data or {})

    def update_job_posting(self, job_id: int, payload: dict[str, Any]) -> JobPosting:
        data = self.api.put(f"/api/employer/jobs/{job_id}", json=payload)
        log.info("Updated job posting %s", job_id)
        return JobPosting.from_dict(data or {})

    def delete_job_posting(self, job_id: int) -> None:
        self.api.delete(f"/api/employer/jobs/{job_id}")
        log.info("Deleted job posting %s", job_id)

    # ── Applications ─────────────────────────────────────────────────────

    def get_job_applications(
        self,
        job_id: int,
        status_filter: str | None = None,
        min_score: float | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ApplicationReview]:
        data = self.api.get(
            f"/api/employer/jobs/{job_id}/applications",
            params={
                "status_filter": status_filter,
                "min_score": min_score,
                "limit": limit,
                "offset": offset,
            },
        )
        return [ApplicationReview.from_dict(d) for d in data or []]

    def update_application_status(self, application_id: int, status: str,
                                  notes: str | None = None) -> dict:
        return self.api.put(
            f"/api/employer/applications/{application_id}/status",
            json={"status": status, "notes": notes},
        )

    def schedule_interview(
        self,
        application_id: int,
        interview_date: str,
        interview_type: str = "video",
        location_or_link: str | None = None,
        notes: str | None = None,
    ) -> dict:
        body: dict[str, Any] = {
            "application_id": application_id,
            "interview_date": interview_date,
            "interview_type": interview_type,
        }
        if location_or_link:
            body["location_or_link"] = location_or_link
        if notes:
            body["notes"] = notes
        return self.api.post(f"/api/employer/applications/{application_id}/interview", json=body)

    # ── Candidates ───────────────────────────────────────────────────────

    def search_candidates(
        self,
        *,
        skills: str | None = None,
        experience_level: str | None = None,
        min_experience_years: float | None = None,
        location: str | None = None,
        min_communication_score: float | None = None,
        limit: int | None = None,
    ) -> list[CandidateMatch]:
        data = self.api.get(
            "/api/employer/candidates/search",
            params={
                "skills": skills or None,
                "experience_level": experience_level or None,
                "min_experience_years": min_experience_years,
                "location": location or None,
                "min_communication_score": min_communication_score,
                "limit": limit,
            },
        )
        return [CandidateMatch.from_dict(d) for d in data or []]

    def get_ai_recommendations(self, job_id: int) -> list[CandidateMatch]:
        data = self.api.post(f"/api/matching/generate-matches/{job_id}")
        return [CandidateMatch.from_dict(d) for d in data or []]

    # ── Interviews ───────────────────────────────────────────────────────

    def list_interviews(self) -> list[Interview]:
        """Interviews derived from applications that have a scheduled date.

        There is no interviews endpoint, so this walks every job posting.
        A job whose applications cannot be loaded is skipped.
        """
        try:
            jobs = self.get_job_postings()
        except ApiError as exc:
            log.error("Failed to fetch interviews: %s", exc)
            return []

        interviews: list[Interview] = []
        for job in jobs:
            try:
                reviews = self.get_job_applications(job.id)
            except ApiError as exc:
                log.warning("Failed to fetch applications for job %s: %s", job.id, exc)
                continue
            for review in reviews:
                app = review.application
                when = parse_timestamp(app.interview_scheduled_at)
                if when is None:
                    continue
                interviews.append(
                    Interview(
                        application_id=app.id,
                        candidate_name=f"{review.employee.first_name} {review.employee.last_name}".strip(),
                        candidate_email=review.employee.email,
                        job_title=job.title,
                        interview_date=when,
                        status="scheduled" if app.status == "interview_scheduled" else "completed",
                        candidate_id=review.employee.id,
                        job_id=job.id,
                        notes=app.notes or None,
                    )
                )
        interviews.sort(key=lambda i: i.interview_date)
        return interviews
