"""Employee endpoints: resumes, voice samples, applications, recommendations."""
from __future__ import annotations

from pathlib import PurePath
from typing import Any

from airesume.api.client import ApiClient, ProgressCallback
from airesume.constants import (
    ACCEPTED_RESUME_TYPES,
    ACCEPTED_VOICE_TYPES,
    RESUME_MAX_SIZE,
    VOICE_MAX_SIZE,
)
from airesume.errors import ClientValidationError
from airesume.log import get_logger
from airesume.models import (
    Application,
    JobPosting,
    JobRecommendation,
    Resume,
    SkillsAnalysis,
    VoiceAnalysis,
)

log = get_logger(__name__)


def validate_upload(file_name: str, size: int, accepted: tuple[str, ...], max_size: int) -> None:
    suffix = PurePath(file_name).suffix.lower()
    if suffix not in accepted:
        raise ClientValidationError(
            f"Unsupported file type {suffix or '(none)'}; accepted: {', '.join(accepted)}"
        )
    if size <= 0:
        raise ClientValidationError(f"{file_name} is empty")
    if size > max_size:
        raise ClientValidationError(
            f"{file_name} is {size / 1024 / 1024:.1f} MB; the limit is {max_size // (1024 * 1024)} MB"
        )


class EmployeeService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_dashboard_stats(self) -> dict:
        return self.api.get("/api/employee/dashboard/stats") or {}

    # ── Resumes ──────────────────────────────────────────────────────────

    def upload_resume(self, file_name: str, content: bytes,
                      content_type: str = "application/octet-stream") -> Resume:
        validate_upload(file_name, len(content), ACCEPTED_RESUME_TYPES, RESUME_MAX_SIZE)
        data = self.api.upload("/api/employee/resume/upload", file_name, content, content_type)
        return Resume.from_dict(data or {})

    def get_resumes(self) -> list[Resume]:
        return [Resume.from_dict(d) for d in self.api.get("/api/employee/resumes") or []]

    def get_resume(self, resume_id: int) -> Resume:
        return Resume.from_dict(self.api.get(f"/api/employee/resumes/{resume_id}"))

    def delete_resume(self, resume_id: int) -> None:
        self.api.delete(f"/api/employee/resumes/{resume_id}")

    def download_resume(self, resume_id: int) -> bytes:
        return self.api.download(f"/api/employee/resumes/{resume_id}/download")

    # ── Voice analysis ───────────────────────────────────────────────────

    def upload_voice(
        self,
        file_name: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        on_progress: ProgressCallback | None = None,
    ) -> VoiceAnalysis:
        validate_upload(file_name, len(content), ACCEPTED_VOICE_TYPES, VOICE_MAX_SIZE)
        data = self.api.upload(
            "/api/employee/voice/upload", file_name, content, content_type, on_progress=on_progress
        )
        return VoiceAnalysis.from_dict(data or {})

    def get_voice_analyses(self) -> list[VoiceAnalysis]:
        return [VoiceAnalysis.from_dict(d) for d in self.api.get("/api/employee/voice-analyses") or []]

    def get_voice_analysis(self, analysis_id: int) -> VoiceAnalysis:
        return VoiceAnalysis.from_dict(self.api.get(f"/api/employee/voice-analyses/{analysis_id}"))

    def delete_voice_analysis(self, analysis_id: int) -> None:
        self.api.delete(f"/api/employee/voice-analyses/{analysis_id}")

    # ── Applications ─────────────────────────────────────────────────────

    def apply_to_job(
        self,
        job_id: int,
        resume_id: int | None = None,
        voice_analysis_id: int | None = None,
        cover_letter: str | None = None,
    ) -> Application:
        body: dict[str, Any] = {}
        if resume_id is not None:
            body["resume_id"] = resume_id
        if voice_analysis_id is not None:
            body["voice_analysis_id"] = voice_analysis_id
        if cover_letter:
            body["cover_letter"] = cover_letter
        data = self.api.post(f"/api/employee/apply/{job_id}", json=body)
        log.info("Applied to job %s", job_id)
        return Application.from_dict(data or {})

    def get_applications(self, status: str | None = None, limit: int | None = None,
                         offset: int | None = None) -> list[Application]:
        data = self.api.get(
            "/api/employee/applications",
            params={"status": status, "limit": limit, "offset": offset},
        )
        return [Application.from_dict(d) for d in data or []]

    def get_application(self, application_id: int) -> Application:
        return Application.from_dict(self.api.get(f"/api/employee/applications/{application_id}"))

    def withdraw_application(self, application_id: int) -> None:
        self.api.put(f"/api/employee/applications/{application_id}/withdraw")
        log.info("Withdrew application %s", application_id)

    # ── Jobs ─────────────────────────────────────────────────────────────

    def get_job_recommendations(self, limit: int | None = None,
                                min_score: float | None = None) -> list[JobRecommendation]:
        data = self.api.get(
            "/api/employee/job-recommendations",
            params={"limit": limit, "min_score": min_score},
        )
        return [JobRecommendation.from_dict(d) for d in data or []]

    def search_jobs(
        self,
        *,
        q: str | None = None,
        location: str | None = None,
        job_type: str | None = None,
        experience_level: str | None = None,
        remote_allowed: bool | None = None,
        min_salary: float | None = None,
        max_salary: float | None = None,
        skills: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[JobPosting]:
        data = self.api.get(
            "/api/employee/jobs/search",
            params={
                "q": q or None,
                "location": location or None,
                "job_type": job_type or None,
                "experience_level": experience_level or None,
                "remote_allowed": remote_allowed,
                "min_salary": min_salary,
                "max_salary": max_salary,
                "skills": skills or None,
                "limit": limit,
                "offset": offset,
            },
        )
        return [JobPosting.from_dict(d) for d in data or []]

    def get_job_details(self, job_id: int) -> JobPosting:
        return JobPosting.from_dict(self.api.get(f"/api/employee/jobs/{job_id}"))

    def get_skills_analysis(self) -> SkillsAnalysis:
        return SkillsAnalysis.from_dict(self.api.get("/api/employee/skills-analysis") or {})

    def analyze_job_match(self, job_id: int, resume_id: int | None = None) -> dict:
        """Free-form fit analysis of one posting; ``resume_id=None`` lets the server pick."""
        return self.api.post(
            f"/api/employee/analyze-job-match/{job_id}", json={"resume_id": resume_id}
        ) or {}
