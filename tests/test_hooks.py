from airesume import hooks


def test_matching_stats_forbidden_shows_role_message(employer, session):
    session.add("GET", "/api/matching/matching-stats", (403, {"detail": "Only employees"}))

    result = hooks.matching_stats(employer)

    assert not result.ok
    assert result.error == hooks.MATCHING_STATS_RESTRICTED
    assert len(session.calls) == 1


def test_matching_stats_other_errors_are_retried(employee, session):
    session.add("GET", "/api/matching/matching-stats", (500, None))

    result = hooks.matching_stats(employee)

    assert result.error == hooks.MATCHING_STATS_FAILED
    assert len(session.calls) == 3


def test_candidate_search_empty_is_not_an_error(employer, session):
    session.add("GET", "/api/employer/candidates/search", (200, []))

    result = hooks.candidate_search(employer, {"min_communication_score": 80})

    assert result.ok
    assert result.data == []


def test_candidate_search_is_cached(employer, session):
    session.add("GET", "/api/employer/candidates/search", (200, []))
    hooks.candidate_search(employer, {"skills": "React"})
    hooks.candidate_search(employer, {"skills": "React"})
    hooks.candidate_search(employer, {"skills": "Vue"})
    assert len(session.calls) == 2


def test_query_failure_becomes_message(employee, session):
    session.add("GET", "/api/employee/applications", (400, {"detail": "Bad filter"}))
    result = hooks.applications(employee)
    assert result.error == "Bad filter"
    assert result.data is None


def test_job_details_not_found_is_not_retried(employee, session):
    session.add("GET", "/api/employee/jobs/8", (404, {"detail": "Job not found"}))
    result = hooks.job_details(employee, 8)
    assert result.error == "Job not found"
    assert len(session.calls) == 1


def test_profile_is_not_retried(employee, session):
    session.add("GET", "/api/auth/me", (500, None))
    result = hooks.profile(employee)
    assert result.error == "Failed to load profile"
    assert len(session.calls) == 1


def test_mutation_invalidates_related_queries(employee, session):
    session.add("GET", "/api/employee/applications", (200, [{"id": 3, "job_posting_id": 1}]))
    session.add("PUT", "/api/employee/applications/3/withdraw", (200, {"message": "ok"}))
    hooks.applications(employee)
    assert ("applications",) in employee.queries

    result = hooks.withdraw_application(employee, 3)

    assert result.ok
    assert result.message == "Application withdrawn"
    assert ("applications",) not in employee.queries


def test_mutation_local_validation_error(employee, session):
    result = hooks.upload_resume(employee, "cv.exe", b"MZ", "application/octet-stream")
    assert not result.ok
    assert "Unsupported file type .exe" in result.error
    assert session.calls == []


def test_failed_mutation_keeps_cache(employer, session):
    session.add("GET", "/api/employer/jobs", (200, []))
    session.add("DELETE", "/api/employer/jobs/4", (409, {"detail": "Job has applications"}))
    hooks.employer_jobs(employer)

    result = hooks.delete_job(employer, 4)

    assert result.error == "Job has applications"
    assert ("employer-jobs", {"status_filter": None}) in employer.queries


def test_logout_clears_cache(employee, session):
    session.add("GET", "/api/employee/resumes", (200, []))
    hooks.resumes(employee)
    employee.logout()
    assert len(employee.queries) == 0
    assert not employee.auth.is_authenticated


def test_bulk_matches_need_a_job(employer, session):
    result = hooks.generate_bulk_matches(employer, [], min_match_score=50, auto_recommend=True)
    assert result.error == "Please select at least one job"
    assert session.calls == []


def test_bulk_matches_report_totals_and_invalidate(employer, session):
    session.add("GET", "/api/matching/matching-stats", (200, {"total_matches": 1}))
    session.add(
        "POST", "/api/matching/bulk-match-generation",
        (200, {"total_matches_generated": 6, "jobs_processed": 2}),
    )
    hooks.matching_stats(employer)
    assert ("matching-stats",) in employer.queries

    result = hooks.generate_bulk_matches(employer, [1, 2], min_match_score=60, auto_recommend=True)

    assert result.ok
    assert result.message == "Successfully generated 6 matches across 2 jobs!"
    assert ("matching-stats",) not in employer.queries


def test_bulk_matches_failure_uses_server_detail(employer, session):
    session.add("POST", "/api/matching/bulk-match-generation", (403, {"detail": "Admins only"}))
    result = hooks.generate_bulk_matches(employer, [1], min_match_score=50, auto_recommend=False)
    assert result.error == "Admins only"


def test_skills_analysis_is_cached(employee, session):
    session.add("GET", "/api/employee/skills-analysis", (200, {"detected_industry": "finance"}))
    first = hooks.skills_analysis(employee)
    hooks.skills_analysis(employee)
    assert first.data.detected_industry == "finance"
    assert len(session.calls) == 1


def test_skills_analysis_without_resume_is_not_retried(employee, session):
    session.add("GET", "/api/employee/skills-analysis", (404, {"detail": "No analyzed resume found"}))
    result = hooks.skills_analysis(employee)
    assert result.error == "No analyzed resume found"
    assert len(session.calls) == 1


def test_calculate_match_returns_score(employer, session):
    session.add("POST", "/api/matching/calculate-match", (200, {"id": 3, "match_score": 77}))
    result = hooks.calculate_match(employer, 4, 7)
    assert result.ok
    assert result.data.match_score == 77
