"""Display helpers for server-computed scores and posting details."""
from __future__ import annotations

import html

from airesume.models import User

# (lower bound, band, colour); first match wins.
_SCORE_BANDS: tuple[tuple[float, str, str], ...] = (
    (80, "excellent", "#16a34a"),
    (60, "good", "#2563eb"),
    (40, "fair", "#ca8a04"),
    (0, "low", "#4b5563"),
)


def match_score_band(score: float | None) -> str:
    value = score or 0
    for floor, band, _ in _SCORE_BANDS:
        if value >= floor:
            return band
    return "low"


def match_score_color(score: float | None) -> str:
    band = match_score_band(score)
    return next(colour for _, name, colour in _SCORE_BANDS if name == band)


def format_score(score: float | None) -> str:
    if score is None:
        return "N/A"
    return f"{score:.0f}%"


def score_badge_html(score: float | None) -> str:
    return (
        f'<span class="score-badge" style="background:{match_score_color(score)}">'
        f"{html.escape(format_score(score))} · {match_score_band(score)}</span>"
    )


def skill_chips_html(skills) -> str:
    """Skills come from employers and resumes, so they are escaped before rendering."""
    return "".join(
        f'<span class="skill-chip">{html.escape(str(s))}</span>' for s in skills or []
    )


def _amount(value: float) -> str:
    return f"{value:,.0f}"


def format_salary(salary_min: float | None, salary_max: float | None, currency: str = "USD") -> str:
    if not salary_min and not salary_max:
        return "Salary not specified"
    if salary_min and salary_max:
        return f"{_amount(salary_min)} - {_amount(salary_max)} {currency}"
    if salary_min:
        return f"{_amount(salary_min)}+ {currency}"
    return f"Up to {_amount(salary_max)} {currency}"


def format_status(status: str) -> str:
    return status.replace("_", " ").capitalize()


def full_name(user: User | dict | None) -> str:
    if user is None:
        return ""
    if isinstance(user, dict):
        user = User.from_dict(user)
    return user.full_name
