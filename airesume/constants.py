"""Enumerations and limits shared with the API."""
from __future__ import annotations

USER_TYPES: tuple[str, ...] = ("employee", "employer", "admin")

APPLICATION_STATUSES: tuple[str, ...] = (
    "pending",
    "reviewed",
    "interview_scheduled",
    "interviewed",
    "accepted",
    "rejected",
    "withdrawn",
)

JOB_STATUSES: tuple[str, ...] = ("active", "paused", "closed", "draft")

EXPERIENCE_LEVELS: tuple[str, ...] = ("entry", "junior", "mid", "senior", "lead", "executive")

JOB_TYPES: tuple[str, ...] = ("full_time", "part_time", "contract", "freelance", "internship")

CURRENCIES: tuple[str, ...] = ("USD", "EUR", "GBP", "CAD")

INTERVIEW_TYPES: tuple[str, ...] = ("video", "phone", "in_person")

RESUME_MAX_SIZE = 10 * 1024 * 1024
VOICE_MAX_SIZE = 50 * 1024 * 1024
ACCEPTED_RESUME_TYPES: tuple[str, ...] = (".pdf", ".doc", ".docx")
ACCEPTED_VOICE_TYPES: tuple[str, ...] = (".mp3", ".wav", ".m4a", ".ogg")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
