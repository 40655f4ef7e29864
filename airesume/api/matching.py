"""AI matching endpoints. Scores are computed server-side."""
from __future__ import annotations

from typing import Any

from airesume.api.client import ApiClient
from airesume.models import BulkMatchResult, JobMatch, MatchingStats


class MatchingService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def generate_job_matches(self, job_id: int, limit: int | None = None,
                             min_score: float | None = None) -> list[dict]:
        return self.api.post(
            f"/api/matching/generate-matches/{job_id}",
            params={"limit": limit, "min_score": min_score},
        ) or []

    def get_employee_matches(
        self,
        *,
        employee_id: int | None = None,
        job_id: int | None = None,
        is_dismissed: bool | None = None,
        min_match_score: float | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict]:
        return self.api.get(
            "/api/matching/employee-matches",
            params={
                "employee_id": employee_id,
                "job_id": job_id,
                "is_dismissed": is_dismissed,
                "min_match_score": min_match_score,
                "limit": limit,
                "offset": offset,
            },
        ) or []

    def calculate_match(self, employee_id: int, job_posting_id: int,
                        resume_id: int | None = None) -> JobMatch:
        body: dict[str, Any] = {"employee_id": employee_id, "job_posting_id": job_posting_id}
        if resume_id is not None:
            body["resume_id"] = resume_id
        return JobMatch.from_dict(self.api.post("/api/matching/calculate-match", json=body))

    def dismiss_match(self, match_id: int) -> dict:
        return self.api.post(f"/api/matching/dismiss-match/{match_id}") or {}

    def get_matching_stats(self) -> MatchingStats:
        return MatchingStats.from_dict(self.api.get("/api/matching/matching-stats") or {})

    def generate_bulk_matches(
        self,
        *,
        job_ids: list[int] | None = None,
        employee_ids: list[int] | None = None,
        min_match_score: float | None = None,
        auto_recommend: bool | None = None,
    ) -> BulkMatchResult:
        body = {
            "job_ids": job_ids,
            "employee_ids": employee_ids,
            "min_match_score": min_match_score,
            "auto_recommend": auto_recommend,
        }
        data = self.api.post(
            "/api/matching/bulk-match-generation",
            json={k: v for k, v in body.items() if v is not None},
        )
        return BulkMatchResult.from_dict(data or {})
