"""Data models for the API payloads the client reads."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _opt_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def parse_timestamp(value: str | None) -> datetime | None:
    """ISO-8601 from the API. Naive timestamps are taken as UTC."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class User:
    id: int
    email: str
    first_name: str = ""
    last_name: str = ""
    user_type: str = "employee"
    is_active: bool = True
    is_verified: bool = False
    phone: str | None = None
    company_name: str | None = None
    company_website: str | None = None
    company_size: str | None = None
    created_at: str | None = None
    raw: dict = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        name = self.raw.get("full_name")
        if name:
            return name
        return f"{self.first_name} {self.last_name}".strip() or self.email

    @classmethod
    def from_dict(cls, d: dict) -> "User":
        return cls(
            id=d.get("id", 0),
            email=d.get("email", ""),
            first_name=d.get("first_name", ""),
            last_name=d.get("last_name", ""),
            user_type=d.get("user_type", "employee"),
            is_active=d.get("is_active", True),
            is_verified=d.get("is_verified", False),
            phone=d.get("phone"),
            company_name=d.get("company_name"),
            company_website=d.get("company_website"),
            company_size=d.get("company_size"),
            created_at=d.get("created_at"),
            raw=d,
        )


@dataclass
class JobPosting:
    id: int
    title: str
    description: str
    location: str
    job_type: str = "full_time"
    experience_level: str = "entry"
    department: str | None = None
    company_name: str | None = None
    remote_allowed: bool = False
    salary_min: float | None = None
    salary_max: float | None = None
    currency: str = "USD"
    benefits: str | None = None
    required_skills: list[str] = field(default_factory=list)
    preferred_skills: list[str] = field(default_factory=list)
    required_experience: Any = None
    required_education: Any = None
    communication_requirements: Any = None
    matching_weights: Any = None
    is_urgent: bool = False
    applications_count: int = 0
    max_applications: int | None = None
    auto_match_enabled: bool = True
    minimum_match_score: float | None = None
    expires_at: str | None = None
    status: str = "active"
    created_at: str | None = None
    updated_at: str | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "JobPosting":
        return cls(
            id=d.get("id", 0),
            title=d.get("title", ""),
            description=d.get("description", ""),
            location=d.get("location", ""),
            job_type=d.get("job_type", "full_time"),
            experience_level=d.get("experience_level", "entry"),
            department=d.get("department"),
            company_name=d.get("company_name"),
            remote_allowed=bool(d.get("remote_allowed", False)),
            salary_min=_opt_float(d.get("salary_min")),
            salary_max=_opt_float(d.get("salary_max")),
            currency=d.get("currency") or "USD",
            benefits=d.get("benefits"),
            required_skills=list(d.get("required_skills") or []),
            preferred_skills=list(d.get("preferred_skills") or []),
            required_experience=d.get("required_experience"),
            required_education=d.get("required_education"),
            communication_requirements=d.get("communication_requirements"),
            matching_weights=d.get("matching_weights"),
            is_urgent=bool(d.get("is_urgent", False)),
            applications_count=d.get("applications_count", 0),
            max_applications=d.get("max_applications"),
            auto_match_enabled=d.get("auto_match_enabled", True),
            minimum_match_score=_opt_float(d.get("minimum_match_score")),
            expires_at=d.get("expires_at"),
            status=d.get("status", "active"),
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
            raw=d,
        )


@dataclass
class JobRecommendation:
    job: JobPosting
    match_score: float
    match_details: Any = None

    @classmethod
    def from_dict(cls, d: dict) -> "JobRecommendation":
        return cls(
            job=JobPosting.from_dict(d),
            match_score=float(d.get("match_score") or 0),
            match_details=d.get("match_details"),
        )


@dataclass
class Resume:
    id: int
    filename: str
    status: str = "uploaded"
    total_experience_years: float = 0
    experience_level: str | None = None
    skills: Any = None
    summary: str = ""
    is_analyzed: bool = False
    created_at: str | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "Resume":
        return cls(
            id=d.get("id", 0),
            filename=d.get("original_filename") or d.get("filename", ""),
            status=d.get("status") or d.get("analysis_status", "uploaded"),
            total_experience_years=d.get("total_experience_years") or 0,
            experience_level=d.get("experience_level"),
            skills=d.get("skills"),
            summary=d.get("summary") or "",
            is_analyzed=bool(d.get("is_analyzed", False)),
            created_at=d.get("created_at"),
            raw=d,
        )


@dataclass
class VoiceAnalysis:
    id: int
    filename: str
    status: str = "uploaded"
    overall_communication_score: float | None = None
    fluency_score: float | None = None
    clarity_score: float | None = None
    confidence_score: float | None = None
    pace_score: float | None = None
    pronunciation_score: float | None = None
    duration_seconds: float | None = None
    created_at: str | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "VoiceAnalysis":
        return cls(
            id=d.get("id", 0),
            filename=d.get("original_filename") or d.get("filename", ""),
            status=d.get("status", "uploaded"),
            overall_communication_score=_opt_float(d.get("overall_communication_score")),
            fluency_score=_opt_float(d.get("fluency_score")),
            clarity_score=_opt_float(d.get("clarity_score")),
            confidence_score=_opt_float(d.get("confidence_score")),
            pace_score=_opt_float(d.get("pace_score")),
            pronunciation_score=_opt_float(d.get("pronunciation_score")),
            duration_seconds=_opt_float(d.get("duration_seconds")),
            created_at=d.get("created_at"),
            raw=d,
        )


@dataclass
class Application:
    id: int
    job_posting_id: int
    status: str = "pending"
    match_score: float = 0
    employee_id: int | None = None
    resume_id: int | None = None
    voice_analysis_id: int | None = None
    job_title: str | None = None
    company_name: str | None = None
    cover_letter: str | None = None
    applied_at: str | None = None
    reviewed_at: str | None = None
    interview_scheduled_at: str | None = None
    notes: str | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "Application":
        return cls(
            id=d.get("id", 0),
            job_posting_id=d.get("job_posting_id") or d.get("job_id", 0),
            status=d.get("status", "pending"),
            match_score=float(d.get("match_score") or 0),
            employee_id=d.get("employee_id"),
            resume_id=d.get("resume_id"),
            voice_analysis_id=d.get("voice_analysis_id"),
            job_title=d.get("job_title"),
            company_name=d.get("company_name"),
            cover_letter=d.get("cover_letter"),
            applied_at=d.get("applied_at"),
            reviewed_at=d.get("reviewed_at"),
            interview_scheduled_at=d.get("interview_scheduled_at"),
            notes=d.get("notes"),
            raw=d,
        )


@dataclass
class ApplicationReview:
    """An application together with the candidate's analysed material."""

    application: Application
    employee: User
    resume_analysis: Resume | None = None
    voice_analysis: VoiceAnalysis | None = None

    @classmethod
    def from_dict(cls, d: dict) -> "ApplicationReview":
        resume = d.get("resume_analysis")
        voice = d.get("voice_analysis")
        return cls(
            application=Application.from_dict(d.get("application") or {}),
            employee=User.from_dict(d.get("employee") or {}),
            resume_analysis=Resume.from_dict(resume) if resume else None,
            voice_analysis=VoiceAnalysis.from_dict(voice) if voice else None,
        )


@dataclass
class CandidateMatch:
    """A candidate search hit or AI-generated match for a job."""

    employee: User
    resume_analysis: Resume | None
    voice_analysis: VoiceAnalysis | None
    skills_match: list[str] = field(default_factory=list)
    experience_years: float = 0
    communication_score: float | None = None
    ai_match_score: float | None = None
    strengths: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "CandidateMatch":
        summary = d.get("match_summary") or {}
        resume = d.get("resume_analysis")
        voice = d.get("voice_analysis")
        return cls(
            employee=User.from_dict(d.get("employee") or {}),
            resume_analysis=Resume.from_dict(resume) if resume else None,
            voice_analysis=VoiceAnalysis.from_dict(voice) if voice else None,
            skills_match=list(summary.get("skills_match") or []),
            experience_years=summary.get("experience_years") or 0,
            communication_score=_opt_float(summary.get("communication_score")),
            ai_match_score=_opt_float(summary.get("ai_match_score")),
            strengths=list(summary.get("strengths") or []),
            concerns=list(summary.get("concerns") or []),
            recommendations=list(summary.get("recommendations") or []),
            raw=d,
        )


@dataclass
class JobMatch:
    id: int
    employee_id: int
    job_posting_id: int
    match_score: float
    resume_id: int | None = None
    match_details: Any = None
    is_recommended: bool = False
    is_dismissed: bool = False
    created_at: str | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "JobMatch":
        return cls(
            id=d.get("id", 0),
            employee_id=d.get("employee_id", 0),
            job_posting_id=d.get("job_posting_id", 0),
            match_score=float(d.get("match_score") or 0),
            resume_id=d.get("resume_id"),
            match_details=d.get("match_details"),
            is_recommended=bool(d.get("is_recommended", False)),
            is_dismissed=bool(d.get("is_dismissed", False)),
            created_at=d.get("created_at"),
            raw=d,
        )


@dataclass
class MatchingStats:
    total_matches: int = 0
    pending_matches: int = 0
    accepted_matches: int = 0
    dismissed_matches: int = 0
    average_match_score: float = 0
    top_skills_demand: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> "MatchingStats":
        return cls(
            total_matches=d.get("total_matches") or 0,
            pending_matches=d.get("pending_matches") or 0,
            accepted_matches=d.get("accepted_matches") or 0,
            dismissed_matches=d.get("dismissed_matches") or 0,
            average_match_score=float(d.get("average_match_score") or 0),
            top_skills_demand=list(d.get("top_skills_demand") or []),
        )


@dataclass
class BulkMatchResult:
    total_matches_generated: int = 0
    jobs_processed: int = 0
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "BulkMatchResult":
        return cls(
            total_matches_generated=d.get("total_matches_generated") or 0,
            jobs_processed=d.get("jobs_processed") or 0,
            raw=d,
        )


@dataclass
class SkillsAnalysis:
    """Server-side analysis of the employee's latest analysed resume."""

    detected_industry: str = ""
    total_skills_found: int = 0
    matching_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)
    coverage_percentage: float = 0
    skills_by_category: dict[str, list[str]] = field(default_factory=dict)
    experience_level: str = ""
    total_experience_years: float = 0
    skills_to_develop: list[str] = field(default_factory=list)
    career_level: str = ""
    industry_focus: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "SkillsAnalysis":
        coverage = d.get("industry_skill_coverage") or {}
        recs = d.get("recommendations") or {}
        return cls(
            detected_industry=d.get("detected_industry") or "",
            total_skills_found=d.get("total_skills_found") or 0,
            matching_skills=list(coverage.get("matching_skills") or []),
            missing_skills=list(coverage.get("missing_skills") or []),
            coverage_percentage=float(coverage.get("coverage_percentage") or 0),
            skills_by_category={
                str(k): list(v or []) for k, v in (d.get("skills_by_category") or {}).items()
            },
            experience_level=d.get("experience_level") or "",
            total_experience_years=d.get("total_experience_years") or 0,
            skills_to_develop=list(recs.get("skills_to_develop") or []),
            career_level=recs.get("career_level") or "",
            industry_focus=recs.get("industry_focus") or "",
        )


@dataclass
class EmployerDashboardStats:
    company_name: str = ""
    total_job_postings: int = 0
    active_job_postings: int = 0
    total_applications: int = 0
    pending_applications: int = 0
    recent_applications_30d: int = 0
    average_applications_per_job: float = 0

    @classmethod
    def from_dict(cls, d: dict) -> "EmployerDashboardStats":
        return cls(
            company_name=d.get("company_name") or "",
            total_job_postings=d.get("total_job_postings") or 0,
            active_job_postings=d.get("active_job_postings") or 0,
            total_applications=d.get("total_applications") or 0,
            pending_applications=d.get("pending_applications") or 0,
            recent_applications_30d=d.get("recent_applications_30d") or 0,
            average_applications_per_job=float(d.get("average_applications_per_job") or 0),
        )


@dataclass
class Interview:
    application_id: int
    candidate_name: str
    candidate_email: str
    job_title: str
    interview_date: datetime
    status: str
    candidate_id: int
    job_id: int
    interview_type: str = "video"
    location_or_link: str | None = None
    notes: str | None = None
