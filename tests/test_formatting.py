import pytest

from airesume.formatting import (
    format_salary,
    format_score,
    full_name,
    match_score_band,
    score_badge_html,
    skill_chips_html,
)


@pytest.mark.parametrize(
    "score, band",
    [(95, "excellent"), (80, "excellent"), (79.9, "good"), (60, "good"), (45, "fair"), (10, "low"), (None, "low")],
)
def test_match_score_band(score, band):
    assert match_score_band(score) == band


def test_format_salary():
    assert format_salary(None, None) == "Salary not specified"
    assert format_salary(50000, 80000, "EUR") == "50,000 - 80,000 EUR"
    assert format_salary(50000, 0) == "50,000+ USD"
    assert format_salary(0, 80000) == "Up to 80,000 USD"


def test_format_score_and_names():
    assert format_score(None) == "N/A"
    assert format_score(87.4) == "87%"
    assert full_name({"first_name": "Ana", "last_name": "Li", "email": "a@x.test"}) == "Ana Li"
    assert full_name({"email": "a@x.test"}) == "a@x.test"
    assert full_name(None) == ""


def test_skill_chips_escape_markup():
    rendered = skill_chips_html(["C++", '<img src=x onerror="alert(1)">'])
    assert '<span class="skill-chip">C++</span>' in rendered
    assert "<img" not in rendered
    assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in rendered


def test_skill_chips_empty():
    assert skill_chips_html(None) == ""
    assert skill_chips_html([]) == ""


def test_score_badge():
    badge = score_badge_html(85)
    assert "background:#16a34a" in badge
    assert "85% · excellent" in badge
