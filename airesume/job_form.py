"""Job posting form: the three-step create wizard and the flat edit form.

Both modes share one draft type, one set of skill operations and one
payload normalization. The current step is the only thing that decides
whether the form may be submitted: a create form must be on the
compensation step, an edit form is pinned there because it has no steps.
"""
from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum, IntEnum
from typing import Any

from airesume.api.employer import EmployerService
from airesume.errors import ApiError, ClientValidationError, describe_error
from airesume.log import get_logger
from airesume.models import JobPosting
from airesume.query import QueryCache

log = get_logger(__name__)

DEFAULT_MINIMUM_MATCH_SCORE = 70
JSON_FIELDS: tuple[str, ...] = (
    "required_experience",
    "required_education",
    "communication_requirements",
    "matching_weights",
)
SKILL_LISTS: tuple[str, ...] = ("required_skills", "preferred_skills")


class WizardStep(IntEnum):
    BASIC = 1
    REQUIREMENTS = 2
    COMPENSATION = 3

    @property
    def label(self) -> str:
        return {1: "Basic Info", 2: "Requirements", 3: "Details"}[self.value]


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class Control(Enum):
    """Where the user was when they pressed Enter."""

    FIELD = "field"
    REQUIRED_SKILL_INPUT = "required_skill_input"
    PREFERRED_SKILL_INPUT = "preferred_skill_input"
    SUBMIT_BUTTON = "submit_button"


class EnterOutcome(Enum):
    SUPPRESSED = "suppressed"
    SKILL_ADDED = "skill_added"
    SUBMIT = "submit"


class SubmitStatus(Enum):
    SKIPPED = "skipped"
    INVALID = "invalid"
    FAILED = "failed"
    SAVED = "saved"


@dataclass
class StepResult:
    ok: bool
    step: WizardStep
    error: str | None = None


@dataclass
class SubmitResult:
    status: SubmitStatus
    message: str
    job: JobPosting | None = None

    @property
    def ok(self) -> bool:
        return self.status is SubmitStatus.SAVED


@dataclass
class JobDraft:
    title: str = ""
    description: str = ""
    location: str = ""
    job_type: str = "full_time"
    experience_level: str = "entry"
    department: str = ""
    salary_min: float | None = None
    salary_max: float | None = None
    currency: str = "USD"
    remote_allowed: bool = False
    is_urgent: bool = False
    required_skills: list[str] = field(default_factory=list)
    preferred_skills: list[str] = field(default_factory=list)
    benefits: str = ""
    expires_at: str = ""
    required_experience: dict = field(default_factory=dict)
    required_education: dict = field(default_factory=dict)
    communication_requirements: dict = field(default_factory=dict)
    matching_weights: dict = field(default_factory=dict)
    minimum_match_score: float = DEFAULT_MINIMUM_MATCH_SCORE
    max_applications: int = 0
    auto_match_enabled: bool = True

    @classmethod
    def from_job(cls, job: JobPosting) -> "JobDraft":
        """Seed an edit draft from a stored posting."""
        return cls(
            title=job.title,
            description=job.description,
            location=job.location,
            job_type=job.job_type,
            experience_level=job.experience_level,
            department=job.department or "",
            salary_min=job.salary_min or None,
            salary_max=job.salary_max or None,
            currency=job.currency,
            remote_allowed=job.remote_allowed,
            is_urgent=job.is_urgent,
            required_skills=list(job.required_skills or []),
            preferred_skills=list(job.preferred_skills or []),
            benefits=job.benefits or "",
            expires_at=job.expires_at.split("T")[0] if job.expires_at else "",
            required_experience=copy.deepcopy(job.required_experience) or {},
            required_education=copy.deepcopy(job.required_education) or {},
            communication_requirements=copy.deepcopy(job.communication_requirements) or {},
            matching_weights=copy.deepcopy(job.matching_weights) or {},
            minimum_match_score=job.minimum_match_score or DEFAULT_MINIMUM_MATCH_SCORE,
            max_applications=job.max_applications or 0,
            auto_match_enabled=job.auto_match_enabled,
        )

    def missing_basic_fields(self) -> list[str]:
        return [
            name
            for name in ("title", "description", "location")
            if not str(getattr(self, name) or "").strip()
        ]


_DRAFT_FIELDS = {f.name for f in fields(JobDraft)}


def parse_expiry(value: str | date | None) -> date | None:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ClientValidationError(f"Invalid expiration date: {value!r}") from None


def normalize_expiry(value: str | date | None) -> str | None:
    """``"2025-03-01"`` -> ``"2025-03-01T23:59:59.999Z"`` (end of that day, UTC)."""
    day = parse_expiry(value)
    if day is None:
        return None
    return f"{day.isoformat()}T23:59:59.999Z"


def build_submission_payload(draft: JobDraft) -> dict[str, Any]:
    """Turn a draft into the body for the create and update endpoints."""
    payload = asdict(draft)
    payload["salary_min"] = draft.salary_min or 0
    payload["salary_max"] = draft.salary_max or 0

    expires_at = normalize_expiry(draft.expires_at)
    if expires_at:
        payload["expires_at"] = expires_at
    else:
        payload.pop("expires_at")

    benefits = (draft.benefits or "").strip()
    if benefits:
        payload["benefits"] = benefits
    else:
        payload.pop("benefits")

    for name in JSON_FIELDS:
        payload[name] = getattr(draft, name) or {}
    payload["max_applications"] = draft.max_applications or 0
    return payload


class JobPostingForm:
    """State for one open create wizard or edit form."""

    def __init__(
        self,
        service: EmployerService,
        *,
        mode: FormMode = FormMode.CREATE,
        job: JobPosting | None = None,
        queries: QueryCache | None = None,
    ) -> None:
        if mode is FormMode.EDIT and job is None:
            raise ValueError("An edit form needs the job posting it edits")
        self.service = service
        self.mode = mode
        self.job = job
        self.queries = queries
        self.is_open = True
        self.reset()

    # ── State ────────────────────────────────────────────────────────────

    def reset(self) -> None:
        if self.mode is FormMode.EDIT:
            self.draft = JobDraft.from_job(self.job)
            self.step = WizardStep.COMPENSATION
        else:
            self.draft = JobDraft()
            self.step = WizardStep.BASIC
        self.new_skill = ""
        self.new_preferred_skill = ""
        self.last_error: str | None = None

    def close(self) -> None:
        """Discard the draft. Requests already sent are not aborted."""
        self.reset()
        self.is_open = False

    def open(self) -> None:
        self.is_open = True

    @property
    def can_submit(self) -> bool:
        return self.step is WizardStep.COMPENSATION

    def set_field(self, name: str, value: Any) -> None:
        if name not in _DRAFT_FIELDS:
            raise AttributeError(f"JobDraft has no field {name!r}")
        if name in SKILL_LISTS:
            raise AttributeError(f"Use the skill operations to change {name}")
        setattr(self.draft, name, value)

    def update(self, **values: Any) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    # ── Skills ───────────────────────────────────────────────────────────

    def _add_skill(self, list_name: str, text: str) -> bool:
        value = text.strip()
        skills: list[str] = getattr(self.draft, list_name)
        if not value or value in skills:
            return False
        skills.append(value)
        return True

    def add_required_skill(self, text: str | None = None) -> bool:
        """Add ``text`` (or the pending input) to the required skills."""
        added = self._add_skill("required_skills", self.new_skill if text is None else text)
        if added:
            self.new_skill = ""
        return added

    def add_preferred_skill(self, text: str | None = None) -> bool:
        added = self._add_skill(
            "preferred_skills", self.new_preferred_skill if text is None else text
        )
        if added:
            self.new_preferred_skill = ""
        return added

    def remove_skill(self, list_name: str, value: str) -> bool:
        if list_name not in SKILL_LISTS:
            raise ValueError(f"Unknown skill list {list_name!r}")
        skills: list[str] = getattr(self.draft, list_name)
        if value not in skills:
            return False
        skills.remove(value)
        return True

    def remove_required_skill(self, value: str) -> bool:
        return self.remove_skill("required_skills", value)

    def remove_preferred_skill(self, value: str) -> bool:
        return self.remove_skill("preferred_skills", value)

    # ── Navigation ───────────────────────────────────────────────────────

    def go_next(self) -> StepResult:
        if self.mode is FormMode.EDIT:
            return StepResult(False, self.step, "The edit form has a single page")
        if self.step is WizardStep.BASIC and self.draft.missing_basic_fields():
            error = "Please fill in all required fields before proceeding"
            log.debug("Blocked leaving step 1, missing %s", self.draft.missing_basic_fields())
            return StepResult(False, self.step, error)
        if self.step < WizardStep.COMPENSATION:
            self.step = WizardStep(self.step + 1)
        return StepResult(True, self.step)

    def go_previous(self) -> StepResult:
        if self.mode is FormMode.EDIT:
            return StepResult(False, self.step, "The edit form has a single page")
        if self.step > WizardStep.BASIC:
            self.step = WizardStep(self.step - 1)
        return StepResult(True, self.step)

    def press_enter(self, control: Control) -> EnterOutcome:
        """Enter never submits implicitly.

        In a skill input it adds the pending skill. On the submit button it
        asks the caller to submit, but only when submitting is allowed.
        """
        if control is Control.REQUIRED_SKILL_INPUT:
            self.add_required_skill()
            return EnterOutcome.SKILL_ADDED
        if control is Control.PREFERRED_SKILL_INPUT:
            self.add_preferred_skill()
            return EnterOutcome.SKILL_ADDED
        if control is Control.SUBMIT_BUTTON and self.can_submit:
            return EnterOutcome.SUBMIT
        return EnterOutcome.SUPPRESSED

    # ── Submission ───────────────────────────────────────────────────────

    def validate_for_submission(self) -> str | None:
        draft = self.draft
        if draft.missing_basic_fields():
            return "Please fill in all required fields"
        if self.mode is FormMode.CREATE and not draft.required_skills:
            return "Please add at least one required skill"
        for name in ("salary_min", "salary_max"):
            value = getattr(draft, name)
            if value is not None and value < 0:
                return "Salary cannot be negative"
        if (
            draft.salary_min is not None
            and draft.salary_max is not None
            and draft.salary_min > draft.salary_max
        ):
            return "Minimum salary cannot exceed maximum salary"
        if not 0 <= (draft.minimum_match_score or 0) <= 100:
            return "Minimum match score must be between 0 and 100"
        if (draft.max_applications or 0) < 0:
            return "Maximum applications cannot be negative"
        try:
            expiry = parse_expiry(draft.expires_at)
        except ClientValidationError as exc:
            return str(exc)
        # Postings being edited may already carry a past expiry.
        if (
            self.mode is FormMode.CREATE
            and expiry is not None
            and expiry < datetime.now(timezone.utc).date()
        ):
            return "Expiration date must be in the future"
        return None

    def submit(self) -> SubmitResult:
        if not self.can_submit:
            log.debug("Ignored submit on step %d", self.step)
            return SubmitResult(
                SubmitStatus.SKIPPED, "You must complete all steps before creating the job"
            )

        error = self.validate_for_submission()
        if error:
            self.last_error = error
            return SubmitResult(SubmitStatus.INVALID, error)

        payload = build_submission_payload(self.draft)
        creating = self.mode is FormMode.CREATE
        try:
            if creating:
                job = self.service.create_job_posting(payload)
            else:
                job = self.service.update_job_posting(self.job.id, payload)
        except ApiError as exc:
            fallback = "Failed to create job posting" if creating else "Failed to update job posting"
            message = describe_error(exc, fallback)
            log.error("Job %s error: %s", "creation" if creating else "update", message)
            self.last_error = message
            return SubmitResult(SubmitStatus.FAILED, message)

        if self.queries is not None:
            self.queries.invalidate(("employer-jobs",))
            self.queries.invalidate(("dashboard-stats",))
            if not creating:
                self.queries.invalidate(("employer-job", self.job.id))

        if creating:
            self.close()
            return SubmitResult(SubmitStatus.SAVED, "Job posting created successfully!", job)
        self.job = job if job.id else self.job
        self.is_open = False
        self.last_error = None
        return SubmitResult(SubmitStatus.SAVED, "Job posting updated successfully!", job)
