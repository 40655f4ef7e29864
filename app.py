"""Streamlit UI for the AI Resume recruitment platform."""
from __future__ import annotations

import sys
from datetime import datetime, time as dtime, timezone
from pathlib import Path

import extra_streamlit_components as stx
import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from airesume import hooks
from airesume.config import APP_DESCRIPTION, APP_NAME
from airesume.constants import (
    ACCEPTED_RESUME_TYPES,
    ACCEPTED_VOICE_TYPES,
    APPLICATION_STATUSES,
    CURRENCIES,
    EXPERIENCE_LEVELS,
    INTERVIEW_TYPES,
    JOB_STATUSES,
    JOB_TYPES,
)
from airesume.context import AppContext
from airesume.errors import ApiError, describe_error
from airesume.formatting import (
    format_salary,
    format_score,
    format_status,
    score_badge_html,
    skill_chips_html,
)
from airesume.job_form import Control, EnterOutcome, JobPostingForm, WizardStep
from airesume.log import get_logger
from airesume.models import CandidateMatch, JobPosting
from airesume.storage import CookieStorage

log = get_logger(__name__)

# ── Styles ───────────────────────────────────────────────────────────────

_BASE_CSS = """
<style>
.block-container { padding-top: 2rem; }
[data-testid="stMetric"] {
    padding: 0.75rem 1rem;
    border-radius: 12px;
    box-shadow: 0 4px 16px rgba(0,0,0,0.06);
}
[data-testid="stExpander"] { border-radius: 12px; }
.stButton > button[kind="primary"] { border-radius: 8px; font-weight: 600; }
.score-badge {
    display: inline-block; padding: 0.1rem 0.6rem; border-radius: 999px;
    color: #fff; font-weight: 600; font-size: 0.85rem;
}
.skill-chip {
    display: inline-block; margin: 0 0.3rem 0.3rem 0; padding: 0.1rem 0.55rem;
    border-radius: 6px; background: rgba(37,99,235,0.12); font-size: 0.85rem;
}
</style>
"""

_LIGHT_CSS = """
<style>
[data-testid="stAppViewContainer"] { background: #f8fafc; }
[data-testid="stMetric"] { background: #ffffff; border: 1px solid #e2e8f0; }
h1, h2, h3 { color: #0f172a; }
</style>
"""

_DARK_CSS = """
<style>
[data-testid="stAppViewContainer"], [data-testid="stHeader"] { background: #0f172a; color: #e2e8f0; }
[data-testid="stSidebar"] { background: #1e293b; }
[data-testid="stMetric"] { background: #1e293b; border: 1px solid #334155; }
h1, h2, h3, p, label, span { color: #e2e8f0; }
</style>
"""

# ── Helpers ──────────────────────────────────────────────────────────────


def _prefers_dark() -> bool:
    theme = getattr(st.context, "theme", None)
    return getattr(theme, "type", None) == "dark"


def _start_session() -> AppContext:
    """Create or rebind this browser session's context; call once per run.

    Auth and theme live in the visitor's own cookies. The cookie component
    reports them one run after it first renders, so the stored session is
    restored then, without undoing a sign-in made in the meantime.
    """
    cookies = stx.CookieManager(key="airesume-cookies")
    ctx = st.session_state.get("ctx")
    if ctx is None:
        ctx = AppContext(storage=CookieStorage(cookies)).open()
        st.session_state["ctx"] = ctx
        log.info("New browser session")
    else:
        ctx.storage.bind(cookies)
    # Give up waiting after one extra run so the OS theme still applies.
    waited = st.session_state.get("_session_runs", 0) >= 1
    if not st.session_state.get("_restored") and (ctx.storage.loaded or waited):
        if not ctx.auth.is_authenticated:
            ctx.auth.reload()
        ctx.theme.initialize(_prefers_dark)
        st.session_state["_restored"] = True
    st.session_state["_session_runs"] = st.session_state.get("_session_runs", 0) + 1
    return ctx


def _ctx() -> AppContext:
    return st.session_state["ctx"]


def _notify(result: hooks.Result) -> bool:
    if result.ok:
        if result.message:
            st.toast(result.message, icon="✅")
        return True
    st.error(result.error)
    return False


def _flash(message: str) -> None:
    """Toast that survives the rerun that follows a mutation."""
    st.session_state["_flash"] = message


def _show_flash() -> None:
    message = st.session_state.pop("_flash", None)
    if message:
        st.toast(message, icon="✅")


def _index(options: tuple[str, ...], value: str | None) -> int:
    return options.index(value) if value in options else 0


def _choice_label(value: str) -> str:
    return format_status(value) if value else "Any"


# ── Page: Login ──────────────────────────────────────────────────────────


def page_login() -> None:
    ctx = _ctx()
    st.header(APP_NAME)
    st.caption(APP_DESCRIPTION)

    sign_in, sign_up = st.tabs(["Sign in", "Create account"])

    with sign_in:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)
        if submitted:
            try:
                user = ctx.auth_service.login(email.strip(), password)
            except ApiError as exc:
                st.error(describe_error(exc, "Login failed"))
            else:
                ctx.queries.clear()
                _flash(f"Welcome back, {user.full_name}!")
                st.rerun()

    with sign_up:
        with st.form("register"):
            c1, c2 = st.columns(2)
            first_name = c1.text_input("First name")
            last_name = c2.text_input("Last name")
            email = st.text_input("Email", key="reg_email")
            password = st.text_input("Password", type="password", key="reg_password")
            user_type = st.radio(
                "I am", ["employee", "employer"], horizontal=True,
                format_func=lambda t: "Looking for a job" if t == "employee" else "Hiring",
            )
            company_name = st.text_input("Company name (employers)")
            submitted = st.form_submit_button("Create account", use_container_width=True)
        if submitted:
            data = {
                "email": email.strip(),
                "password": password,
                "first_name": first_name.strip(),
                "last_name": last_name.strip(),
                "user_type": user_type,
            }
            if user_type == "employer" and company_name.strip():
                data["company_name"] = company_name.strip()
            try:
                ctx.auth_service.register(data)
            except ApiError as exc:
                st.error(describe_error(exc, "Registration failed"))
            else:
                st.success("Account created. You can sign in now.")


# ── Page: Employee dashboard ─────────────────────────────────────────────


def _matching_stats_card(ctx: AppContext) -> None:
    result = hooks.matching_stats(ctx)
    if not result.ok:
        st.info(result.error)
        return
    stats = result.data
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total matches", stats.total_matches)
    c2.metric("Pending", stats.pending_matches)
    c3.metric("Accepted", stats.accepted_matches)
    c4.metric("Average score", format_score(stats.average_match_score))
    if stats.top_skills_demand:
        st.markdown("**Skills in demand:** " + skill_chips_html(stats.top_skills_demand), unsafe_allow_html=True)


def page_employee_dashboard() -> None:
    ctx = _ctx()
    user = ctx.auth.current_user
    st.header(f"Welcome, {user.full_name if user else ''}")

    st.subheader("Matching")
    _matching_stats_card(ctx)

    st.divider()
    st.subheader("Top recommendations")
    result = hooks.job_recommendations(ctx, limit=5)
    if not _notify(result):
        return
    if not result.data:
        st.info("No recommendations yet. Upload a resume to get matched.")
    for rec in result.data:
        job = rec.job
        with st.container(border=True):
            st.markdown(f"**{job.title}** · {job.company_name or ''} · {job.location}")
            st.markdown(score_badge_html(rec.match_score), unsafe_allow_html=True)


# ── Page: Profile material (resumes + voice) ─────────────────────────────


def page_resumes() -> None:
    ctx = _ctx()
    st.header("Resumes & Voice")

    st.subheader("Upload resume")
    uploaded = st.file_uploader(
        "PDF or Word document, up to 10 MB",
        type=[t.lstrip(".") for t in ACCEPTED_RESUME_TYPES],
        key="resume_upload",
    )
    if uploaded and st.button("Upload resume", type="primary"):
        with st.spinner("Uploading…"):
            result = hooks.upload_resume(
                ctx, uploaded.name, uploaded.getvalue(),
                uploaded.type or "application/octet-stream",
            )
        if _notify(result):
            st.rerun()

    result = hooks.resumes(ctx)
    if _notify(result):
        if not result.data:
            st.info("No resumes uploaded yet.")
        for resume in result.data:
            with st.expander(f"📄 {resume.filename} · {format_status(resume.status)}"):
                if resume.summary:
                    st.write(resume.summary)
                st.caption(f"Experience: {resume.total_experience_years} years")
                c1, c2 = st.columns(2)
                if c1.button("Prepare download", key=f"dl_{resume.id}"):
                    try:
                        st.session_state[f"resume_bytes_{resume.id}"] = ctx.employee.download_resume(resume.id)
                    except ApiError as exc:
                        st.error(describe_error(exc, "Failed to download resume"))
                data = st.session_state.get(f"resume_bytes_{resume.id}")
                if data:
                    c1.download_button("Save file", data, file_name=resume.filename, key=f"save_{resume.id}")
                if c2.button("Delete", key=f"del_resume_{resume.id}"):
                    outcome = hooks.run_mutation(
                        ctx, lambda rid=resume.id: ctx.employee.delete_resume(rid),
                        success="Resume deleted", fallback="Failed to delete resume",
                        invalidate=[("resumes",)],
                    )
                    if _notify(outcome):
                        st.rerun()

    st.divider()
    st.subheader("Voice sample")
    st.caption("Record a short introduction; it is scored for communication skills.")
    voice = st.file_uploader(
        "Audio file, up to 50 MB",
        type=[t.lstrip(".") for t in ACCEPTED_VOICE_TYPES],
        key="voice_upload",
    )
    if voice and st.button("Upload voice sample", type="primary"):
        bar = st.progress(0, text="Uploading…")

        def on_progress(sent: int, total: int) -> None:
            bar.progress(min(sent / total, 1.0) if total else 1.0, text=f"Uploading… {sent * 100 // max(total, 1)}%")

        result = hooks.upload_voice(
            ctx, voice.name, voice.getvalue(), voice.type or "application/octet-stream",
            on_progress=on_progress,
        )
        bar.empty()
        if _notify(result):
            st.rerun()

    result = hooks.voice_analyses(ctx)
    if _notify(result):
        for analysis in result.data:
            with st.container(border=True):
                st.markdown(f"🎙️ **{analysis.filename}** · {format_status(analysis.status)}")
                if analysis.overall_communication_score is not None:
                    st.markdown(score_badge_html(analysis.overall_communication_score), unsafe_allow_html=True)
                    cols = st.columns(5)
                    for col, (label, value) in zip(cols, [
                        ("Fluency", analysis.fluency_score),
                        ("Clarity", analysis.clarity_score),
                        ("Confidence", analysis.confidence_score),
                        ("Pace", analysis.pace_score),
                        ("Pronunciation", analysis.pronunciation_score),
                    ]):
                        col.metric(label, format_score(value))


# ── Page: Jobs (recommendations + search) ────────────────────────────────


def _apply_controls(ctx: AppContext, job: JobPosting, resumes: list, scope: str) -> None:
    with st.popover("Apply"):
        resume = st.selectbox(
            "Resume", resumes, format_func=lambda r: r.filename, key=f"{scope}_apply_resume_{job.id}",
        )
        cover_letter = st.text_area("Cover letter (optional)", key=f"{scope}_apply_cl_{job.id}")
        if st.button("Submit application", type="primary", key=f"{scope}_apply_btn_{job.id}"):
            result = hooks.apply_to_job(
                ctx, job.id,
                resume_id=resume.id if resume else None,
                cover_letter=cover_letter.strip() or None,
            )
            if _notify(result):
                _flash(result.message)
                st.rerun()


_ANALYSIS_SECTIONS = (
    ("Strengths", "strengths"),
    ("Matching skills", "matching_skills"),
    ("Missing skills", "missing_skills"),
    ("Recommendations", "recommendations"),
)


def _render_match_analysis(data: dict) -> None:
    shown = False
    score = data.get("match_score", data.get("overall_score"))
    if isinstance(score, (int, float)):
        st.markdown(score_badge_html(score), unsafe_allow_html=True)
        shown = True
    for label, field in _ANALYSIS_SECTIONS:
        items = data.get(field)
        if isinstance(items, list) and items:
            st.markdown(f"**{label}**")
            st.markdown("\n".join(f"- {item}" for item in items))
            shown = True
    if not shown:
        st.json(data)


def _analyze_controls(ctx: AppContext, job: JobPosting, resumes: list, scope: str) -> None:
    with st.popover("Analyze fit"):
        resume = st.selectbox(
            "Resume", [None] + resumes,
            format_func=lambda r: "Latest analyzed" if r is None else r.filename,
            key=f"{scope}_analyze_resume_{job.id}",
        )
        if st.button("Analyze", key=f"{scope}_analyze_btn_{job.id}"):
            with st.spinner("Analyzing..."):
                result = hooks.analyze_job_match(ctx, job.id, resume.id if resume else None)
            if _notify(result):
                _render_match_analysis(result.data)


def _job_card(ctx: AppContext, job: JobPosting, resumes: list, scope: str,
              score: float | None = None) -> None:
    with st.container(border=True):
        head, action = st.columns([4, 1])
        with head:
            st.markdown(f"**{job.title}**" + (" · 🔥 Urgent" if job.is_urgent else ""))
            remote = " · Remote OK" if job.remote_allowed else ""
            st.caption(
                f"{job.company_name or ''} · {job.location}{remote} · "
                f"{format_status(job.job_type)} · {format_status(job.experience_level)}"
            )
            st.caption(format_salary(job.salary_min, job.salary_max, job.currency))
            if score is not None:
                st.markdown(score_badge_html(score), unsafe_allow_html=True)
            if job.required_skills:
                st.markdown(skill_chips_html(job.required_skills), unsafe_allow_html=True)
        with action:
            _apply_controls(ctx, job, resumes, scope)
            _analyze_controls(ctx, job, resumes, scope)
        with st.expander("Details"):
            details = hooks.job_details(ctx, job.id) if st.session_state.get(f"open_{job.id}") else None
            if details is None:
                if st.button("Load details", key=f"{scope}_load_{job.id}"):
                    st.session_state[f"open_{job.id}"] = True
                    st.rerun()
            elif _notify(details):
                st.write(details.data.description)
                if details.data.benefits:
                    st.markdown(f"**Benefits:** {details.data.benefits}")


def page_jobs() -> None:
    ctx = _ctx()
    st.header("Jobs")
    resumes = hooks.resumes(ctx).data or []
    recommended, search = st.tabs(["Recommended for you", "Search"])

    with recommended:
        min_score = st.slider("Minimum match score", 0, 100, 0, step=5)
        result = hooks.job_recommendations(ctx, limit=20, min_score=min_score or None)
        if _notify(result):
            if not result.data:
                st.info("No recommendations match this score.")
            for rec in result.data:
                _job_card(ctx, rec.job, resumes, "rec", rec.match_score)

    with search:
        c1, c2, c3 = st.columns(3)
        q = c1.text_input("Keywords")
        location = c2.text_input("Location")
        skills = c3.text_input("Skills (comma separated)")
        c4, c5, c6, c7 = st.columns(4)
        job_type = c4.selectbox("Job type", ("",) + JOB_TYPES, format_func=_choice_label)
        level = c5.selectbox("Experience", ("",) + EXPERIENCE_LEVELS, format_func=_choice_label)
        min_salary = c6.number_input("Min salary", min_value=0, value=None, step=1000)
        remote = c7.checkbox("Remote only")
        filters = {
            "q": q.strip() or None,
            "location": location.strip() or None,
            "skills": skills.strip() or None,
            "job_type": job_type or None,
            "experience_level": level or None,
            "min_salary": min_salary,
            "remote_allowed": True if remote else None,
        }
        result = hooks.job_search(ctx, filters)
        if _notify(result):
            if not result.data:
                st.info("No jobs found. Try broader filters.")
            for job in result.data:
                _job_card(ctx, job, resumes, "search")


# ── Page: Applications ───────────────────────────────────────────────────


def page_applications() -> None:
    ctx = _ctx()
    st.header("My applications")
    result = hooks.applications(ctx)
    if not _notify(result):
        return
    rows = result.data
    if not rows:
        st.info("You have not applied to any jobs yet.")
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Total applications", len(rows))
    c2.metric("In review", sum(1 for a in rows if a.status in ("pending", "reviewed")))
    c3.metric("Interviews", sum(1 for a in rows if a.interview_scheduled_at))

    df = pd.DataFrame([
        {
            "job": a.job_title or f"Job #{a.job_posting_id}",
            "company": a.company_name or "",
            "score": a.match_score,
            "status": format_status(a.status),
            "applied_at": (a.applied_at or "")[:10],
            "interview": (a.interview_scheduled_at or "")[:16].replace("T", " "),
        }
        for a in rows
    ])
    df["score"] = pd.to_numeric(df["score"], errors="coerce")
    st.dataframe(
        df,
        use_container_width=True,
        column_config={
            "score": st.column_config.ProgressColumn("Match", min_value=0, max_value=100, format="%.0f%%"),
        },
        hide_index=True,
    )

    withdrawable = [a for a in rows if a.status in ("pending", "reviewed")]
    if withdrawable:
        st.subheader("Withdraw an application")
        for app in withdrawable:
            c1, c2 = st.columns([4, 1])
            c1.markdown(f"**{app.job_title or f'Job #{app.job_posting_id}'}** · {format_status(app.status)}")
            if c2.button("Withdraw", key=f"wd_{app.id}"):
                if _notify(hooks.withdraw_application(ctx, app.id)):
                    st.rerun()


# ── Page: Matches ────────────────────────────────────────────────────────


def page_matches() -> None:
    ctx = _ctx()
    st.header("AI matches")
    _matching_stats_card(ctx)
    st.divider()
    min_score = st.slider("Minimum match score", 0, 100, 60, step=5)
    result = hooks.employee_matches(ctx, min_match_score=min_score)
    if not _notify(result):
        return
    if not result.data:
        st.info("No matches above this score yet.")
    for match in result.data:
        job = match.get("job_posting") or {}
        with st.container(border=True):
            c1, c2 = st.columns([4, 1])
            c1.markdown(f"**{job.get('title', 'Job #%s' % match.get('job_posting_id'))}**")
            c1.markdown(score_badge_html(match.get("match_score")), unsafe_allow_html=True)
            if c2.button("Dismiss", key=f"dismiss_{match.get('id')}"):
                if _notify(hooks.dismiss_match(ctx, match["id"])):
                    st.rerun()


# ── Page: Skills analysis ────────────────────────────────────────────────


def _skill_list(title: str, skills: list[str]) -> None:
    st.markdown(f"**{title}** ({len(skills)})")
    if skills:
        st.markdown(skill_chips_html(skills), unsafe_allow_html=True)
    else:
        st.caption("None")


def page_skills_analysis() -> None:
    ctx = _ctx()
    st.header("Skills analysis")
    st.caption("How your skills line up with your industry and where to grow next.")

    resumes = hooks.resumes(ctx).data or []
    analyzed = [r for r in resumes if r.is_analyzed]
    if analyzed:
        latest = max(analyzed, key=lambda r: r.created_at or "")
        st.info(f"Based on **{latest.filename}** ({format_status(latest.status)})")
    elif resumes:
        st.warning("Skills analysis will be available once your resume has been processed and analyzed.")

    with st.spinner("Analyzing your skills..."):
        result = hooks.skills_analysis(ctx)
    if not _notify(result):
        return
    analysis = result.data
    if not analysis.detected_industry and not analysis.total_skills_found:
        st.info("Upload and analyze a resume first to see your skills analysis.")
        return

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Industry", analysis.detected_industry.title() or "N/A")
    c2.metric("Skills found", analysis.total_skills_found)
    c3.metric("Coverage", f"{analysis.coverage_percentage:.0f}%")
    c4.metric("Experience", f"{analysis.total_experience_years:g}y",
              format_status(analysis.experience_level) if analysis.experience_level else None,
              delta_color="off")

    with st.container(border=True):
        st.subheader("Industry skill coverage")
        st.progress(min(max(analysis.coverage_percentage, 0), 100) / 100)
        have, develop = st.columns(2)
        with have:
            _skill_list("Skills you have", analysis.matching_skills)
        with develop:
            _skill_list("Skills to develop", analysis.missing_skills)

    if analysis.skills_by_category:
        with st.container(border=True):
            st.subheader("Your skills by category")
            cols = st.columns(3)
            for i, (category, skills) in enumerate(analysis.skills_by_category.items()):
                with cols[i % 3]:
                    _skill_list(category.replace("_", " ").capitalize(), skills)

    with st.container(border=True):
        st.subheader("Recommendations")
        r1, r2, r3 = st.columns(3)
        with r1:
            _skill_list("Priority skills to develop", analysis.skills_to_develop)
        r2.metric("Career level", format_status(analysis.career_level) if analysis.career_level else "N/A")
        r3.metric("Industry focus", analysis.industry_focus.title() or "N/A")


# ── Page: Employer dashboard ─────────────────────────────────────────────


def page_employer_dashboard() -> None:
    ctx = _ctx()
    result = hooks.employer_dashboard(ctx)
    if not _notify(result):
        return
    stats = result.data
    st.header(stats.company_name or "Dashboard")
    c1, c2, c3 = st.columns(3)
    c1.metric("Job postings", stats.total_job_postings)
    c2.metric("Active", stats.active_job_postings)
    c3.metric("Applications", stats.total_applications)
    c4, c5, c6 = st.columns(3)
    c4.metric("Pending review", stats.pending_applications)
    c5.metric("Last 30 days", stats.recent_applications_30d)
    c6.metric("Per job", f"{stats.average_applications_per_job:.1f}")

    st.divider()
    st.subheader("Upcoming interviews")
    upcoming = hooks.interviews(ctx)
    if _notify(upcoming):
        now = datetime.now(timezone.utc)
        soon = [i for i in upcoming.data if i.interview_date >= now][:5]
        if not soon:
            st.caption("Nothing scheduled.")
        for interview in soon:
            st.markdown(
                f"**{interview.interview_date:%b %d, %H:%M}** · {interview.candidate_name} · {interview.job_title}"
            )


# ── Job posting form ─────────────────────────────────────────────────────


def _skill_editor(form: JobPostingForm, prefix: str, list_name: str, control: Control,
                  label: str) -> None:
    key = f"{prefix}_{list_name}_input"
    buffer = "new_skill" if control is Control.REQUIRED_SKILL_INPUT else "new_preferred_skill"

    def on_enter() -> None:
        # Enter in the input commits the text; it adds a skill, never submits.
        setattr(form, buffer, st.session_state.get(key, ""))
        if form.press_enter(control) is EnterOutcome.SKILL_ADDED:
            st.session_state[key] = getattr(form, buffer)

    c1, c2 = st.columns([4, 1])
    c1.text_input(label, key=key, on_change=on_enter, placeholder="Type a skill and press Enter")
    c2.button("Add", key=f"{key}_add", on_click=on_enter)

    skills = getattr(form.draft, list_name)
    if skills:
        cols = st.columns(min(len(skills), 6))
        for i, skill in enumerate(list(skills)):
            if cols[i % len(cols)].button(f"{skill} ✕", key=f"{prefix}_{list_name}_rm_{i}"):
                form.remove_skill(list_name, skill)
                st.rerun()


def _basic_fields(form: JobPostingForm, prefix: str) -> None:
    d = form.draft
    form.update(
        title=st.text_input("Job title *", value=d.title, key=f"{prefix}_title"),
        department=st.text_input("Department", value=d.department, key=f"{prefix}_department"),
        location=st.text_input("Location *", value=d.location, key=f"{prefix}_location"),
        description=st.text_area("Description *", value=d.description, height=180,
                                 key=f"{prefix}_description"),
    )
    c1, c2 = st.columns(2)
    form.update(
        job_type=c1.selectbox("Job type", JOB_TYPES, index=_index(JOB_TYPES, d.job_type),
                              format_func=format_status, key=f"{prefix}_job_type"),
        experience_level=c2.selectbox(
            "Experience level", EXPERIENCE_LEVELS, index=_index(EXPERIENCE_LEVELS, d.experience_level),
            format_func=format_status, key=f"{prefix}_level"),
    )
    c3, c4 = st.columns(2)
    form.update(
        remote_allowed=c3.checkbox("Remote allowed", value=d.remote_allowed, key=f"{prefix}_remote"),
        is_urgent=c4.checkbox("Urgent hiring", value=d.is_urgent, key=f"{prefix}_urgent"),
    )


def _requirement_fields(form: JobPostingForm, prefix: str) -> None:
    _skill_editor(form, prefix, "required_skills", Control.REQUIRED_SKILL_INPUT, "Required skills *")
    _skill_editor(form, prefix, "preferred_skills", Control.PREFERRED_SKILL_INPUT, "Preferred skills")
    years = st.number_input(
        "Minimum years of experience", min_value=0, max_value=50,
        value=int(form.draft.required_experience.get("min_years", 0) or 0),
        key=f"{prefix}_min_years",
    )
    experience = dict(form.draft.required_experience)
    if years:
        experience["min_years"] = years
    else:
        experience.pop("min_years", None)
    form.update(required_experience=experience)


def _compensation_fields(form: JobPostingForm, prefix: str) -> None:
    d = form.draft
    c1, c2, c3 = st.columns([2, 2, 1])
    form.update(
        salary_min=c1.number_input("Minimum salary", min_value=0.0, value=d.salary_min,
                                   step=1000.0, key=f"{prefix}_salary_min"),
        salary_max=c2.number_input("Maximum salary", min_value=0.0, value=d.salary_max,
                                   step=1000.0, key=f"{prefix}_salary_max"),
        currency=c3.selectbox("Currency", CURRENCIES, index=_index(CURRENCIES, d.currency),
                              key=f"{prefix}_currency"),
    )
    form.update(benefits=st.text_area("Benefits", value=d.benefits, key=f"{prefix}_benefits"))
    c4, c5 = st.columns(2)
    expires = c4.date_input(
        "Expires on", value=datetime.fromisoformat(d.expires_at).date() if d.expires_at else None,
        key=f"{prefix}_expires",
    )
    form.update(
        expires_at=expires.isoformat() if expires else "",
        max_applications=int(c5.number_input("Max applications (0 = unlimited)", min_value=0,
                                              value=int(d.max_applications or 0),
                                              key=f"{prefix}_max_apps")),
    )
    c6, c7 = st.columns(2)
    form.update(
        minimum_match_score=c6.slider("Minimum match score", 0, 100, int(d.minimum_match_score),
                                      key=f"{prefix}_min_score"),
        auto_match_enabled=c7.checkbox("Auto-match candidates", value=d.auto_match_enabled,
                                       key=f"{prefix}_auto_match"),
    )


def _submit_button(form: JobPostingForm, prefix: str, label: str) -> None:
    if not st.button(label, type="primary", key=f"{prefix}_submit", disabled=not form.can_submit):
        return
    if form.press_enter(Control.SUBMIT_BUTTON) is not EnterOutcome.SUBMIT:
        return
    with st.spinner("Saving…"):
        result = form.submit()
    if result.ok:
        _flash(result.message)
        st.rerun()
    else:
        st.error(result.message)


def _create_wizard(ctx: AppContext) -> None:
    form: JobPostingForm | None = st.session_state.get("create_form")
    if form is None or not form.is_open:
        if st.button("➕ New job posting", type="primary"):
            st.session_state["create_form"] = ctx.job_form()
            st.session_state["create_form_gen"] = st.session_state.get("create_form_gen", 0) + 1
            st.rerun()
        return

    prefix = f"create{st.session_state.get('create_form_gen', 0)}"
    with st.container(border=True):
        st.subheader("New job posting")
        st.progress(form.step / len(WizardStep),
                    text=f"Step {int(form.step)} of {len(WizardStep)}: {form.step.label}")

        if form.step is WizardStep.BASIC:
            _basic_fields(form, prefix)
        elif form.step is WizardStep.REQUIREMENTS:
            _requirement_fields(form, prefix)
        else:
            _compensation_fields(form, prefix)

        back, cancel, forward = st.columns(3)
        if form.step > WizardStep.BASIC and back.button("← Back", key=f"{prefix}_back"):
            form.go_previous()
            st.rerun()
        if cancel.button("Cancel", key=f"{prefix}_cancel"):
            form.close()
            st.rerun()
        with forward:
            if form.step < WizardStep.COMPENSATION:
                if st.button("Next →", key=f"{prefix}_next"):
                    step = form.go_next()
                    if step.ok:
                        st.rerun()
                    st.error(step.error)
            else:
                _submit_button(form, prefix, "Create job posting")


def _edit_form(ctx: AppContext, job: JobPosting) -> None:
    forms: dict[int, JobPostingForm] = st.session_state.setdefault("edit_forms", {})
    form = forms.get(job.id)
    if form is None or not form.is_open:
        return
    prefix = f"edit{job.id}"
    with st.container(border=True):
        st.subheader(f"Edit: {job.title}")
        _basic_fields(form, prefix)
        _requirement_fields(form, prefix)
        _compensation_fields(form, prefix)
        c1, c2 = st.columns(2)
        if c1.button("Cancel", key=f"{prefix}_cancel"):
            form.close()
            forms.pop(job.id, None)
            st.rerun()
        with c2:
            _submit_button(form, prefix, "Save changes")


# ── Page: Job postings ───────────────────────────────────────────────────


def _applications_panel(ctx: AppContext, job: JobPosting) -> None:
    status_filter = st.selectbox(
        "Status", ("",) + APPLICATION_STATUSES, format_func=_choice_label, key=f"appf_{job.id}",
    )
    result = hooks.job_applications(ctx, job.id, status_filter or None)
    if not _notify(result):
        return
    if not result.data:
        st.caption("No applications.")
    for review in result.data:
        app, candidate = review.application, review.employee
        with st.container(border=True):
            st.markdown(f"**{candidate.full_name}** · {candidate.email}")
            st.markdown(score_badge_html(app.match_score), unsafe_allow_html=True)
            st.caption(f"Status: {format_status(app.status)}")
            if review.resume_analysis and review.resume_analysis.summary:
                st.write(review.resume_analysis.summary)
            if review.voice_analysis:
                st.caption(
                    "Communication: "
                    f"{format_score(review.voice_analysis.overall_communication_score)}"
                )
            if app.cover_letter:
                with st.expander("Cover letter"):
                    st.write(app.cover_letter)

            c1, c2 = st.columns(2)
            with c1:
                new_status = st.selectbox(
                    "Update status", APPLICATION_STATUSES,
                    index=_index(APPLICATION_STATUSES, app.status),
                    format_func=format_status, key=f"st_{app.id}",
                )
                notes = st.text_input("Notes", value=app.notes or "", key=f"notes_{app.id}")
                if st.button("Save status", key=f"save_st_{app.id}"):
                    if _notify(hooks.update_application_status(ctx, app.id, new_status, notes or None)):
                        st.rerun()
            with c2:
                with st.popover("Schedule interview"):
                    day = st.date_input("Date", key=f"iv_day_{app.id}")
                    at = st.time_input("Time", value=dtime(10, 0), key=f"iv_time_{app.id}")
                    kind = st.selectbox("Type", INTERVIEW_TYPES, format_func=format_status,
                                        key=f"iv_type_{app.id}")
                    where = st.text_input("Location or link", key=f"iv_where_{app.id}")
                    iv_notes = st.text_area("Notes", key=f"iv_notes_{app.id}")
                    if st.button("Schedule", type="primary", key=f"iv_go_{app.id}"):
                        when = datetime.combine(day, at).isoformat()
                        result = hooks.schedule_interview(
                            ctx, app.id, interview_date=when, interview_type=kind,
                            location_or_link=where.strip() or None, notes=iv_notes.strip() or None,
                        )
                        if _notify(result):
                            _flash(result.message)
                            st.rerun()


def _ai_matches_panel(ctx: AppContext, job: JobPosting) -> None:
    key = f"ai_matches_{job.id}"
    if st.button("Generate AI matches", key=f"gen_{job.id}"):
        with st.spinner("Scoring candidates…"):
            result = hooks.generate_matches(ctx, job.id)
        if _notify(result):
            st.session_state[key] = result.data
    for match in st.session_state.get(key) or []:
        _candidate_card(match, ctx, [job], scope=f"ai{job.id}")


def page_job_postings() -> None:
    ctx = _ctx()
    st.header("Job postings")
    _create_wizard(ctx)
    st.divider()

    status_filter = st.selectbox("Show", ("",) + JOB_STATUSES, format_func=_choice_label)
    result = hooks.employer_jobs(ctx, status_filter or None)
    if not _notify(result):
        return
    if not result.data:
        st.info("No job postings yet.")
    for job in result.data:
        with st.expander(f"{job.title} · {format_status(job.status)} · {job.applications_count} applications"):
            st.caption(
                f"{job.location} · {format_status(job.job_type)} · "
                f"{format_salary(job.salary_min, job.salary_max, job.currency)}"
            )
            if job.required_skills:
                st.markdown(skill_chips_html(job.required_skills), unsafe_allow_html=True)

            c1, c2 = st.columns(2)
            if c1.button("Edit", key=f"edit_{job.id}"):
                st.session_state.setdefault("edit_forms", {})[job.id] = ctx.job_form(job)
                st.rerun()
            confirm_key = f"confirm_del_{job.id}"
            if st.session_state.get(confirm_key):
                c2.warning("Delete this posting?")
                if c2.button("Yes, delete", key=f"del_yes_{job.id}"):
                    st.session_state.pop(confirm_key, None)
                    if _notify(hooks.delete_job(ctx, job.id)):
                        st.rerun()
            elif c2.button("Delete", key=f"del_{job.id}"):
                st.session_state[confirm_key] = True
                st.rerun()

            _edit_form(ctx, job)

            applications, ai = st.tabs(["Applications", "AI matches"])
            with applications:
                _applications_panel(ctx, job)
            with ai:
                _ai_matches_panel(ctx, job)


# ── Page: Candidate search ───────────────────────────────────────────────


def _score_against_job(ctx: AppContext, match: CandidateMatch, jobs: list[JobPosting], scope: str) -> None:
    with st.popover("Score against a job"):
        job = st.selectbox(
            "Job posting", jobs, format_func=lambda j: j.title,
            key=f"{scope}_calc_job_{match.employee.id}",
        )
        if st.button("Calculate match", key=f"{scope}_calc_btn_{match.employee.id}", disabled=job is None):
            resume_id = (match.resume_analysis.id or None) if match.resume_analysis else None
            result = hooks.calculate_match(ctx, match.employee.id, job.id, resume_id)
            if _notify(result):
                st.markdown(score_badge_html(result.data.match_score), unsafe_allow_html=True)
                if result.data.is_recommended:
                    st.caption("Recommended match")


def _candidate_card(match: CandidateMatch, ctx: AppContext | None = None,
                    jobs: list[JobPosting] | None = None, scope: str = "cand") -> None:
    with st.container(border=True):
        st.markdown(f"**{match.employee.full_name}** · {match.employee.email}")
        st.markdown(score_badge_html(match.ai_match_score), unsafe_allow_html=True)
        st.caption(
            f"{match.experience_years} years · communication {format_score(match.communication_score)}"
        )
        if match.skills_match:
            st.markdown(skill_chips_html(match.skills_match), unsafe_allow_html=True)
        for label, items in (("Strengths", match.strengths), ("Concerns", match.concerns)):
            if items:
                st.markdown(f"**{label}:** " + "; ".join(items))
        if ctx is not None and jobs:
            _score_against_job(ctx, match, jobs, scope)


def _bulk_matching_panel(ctx: AppContext, jobs: list[JobPosting]) -> None:
    with st.expander("⚡ Bulk AI matching"):
        st.caption("Generate AI-powered candidate matches for multiple jobs.")
        if not jobs:
            st.info("No jobs available")
            return
        by_id = {j.id: j for j in jobs}
        # Drop selections for postings that no longer exist.
        st.session_state["bulk_jobs"] = [i for i in st.session_state.get("bulk_jobs", []) if i in by_id]
        if st.button("Select all", key="bulk_all"):
            st.session_state["bulk_jobs"] = list(by_id)
        selected = st.multiselect(
            "Jobs", list(by_id),
            format_func=lambda i: f"{by_id[i].title} · {by_id[i].location} · {format_status(by_id[i].job_type)}",
            key="bulk_jobs",
        )
        min_score = st.slider("Minimum match score", 0, 100, 50, step=5, key="bulk_min")
        auto = st.checkbox(
            "Automatically mark high-quality matches as recommended", value=True, key="bulk_auto"
        )
        st.caption(f"{len(selected)} selected")
        if st.button("Generate matches", type="primary", disabled=not selected, key="bulk_go"):
            with st.spinner("Generating matches…"):
                result = hooks.generate_bulk_matches(
                    ctx, selected, min_match_score=min_score, auto_recommend=auto
                )
            _notify(result)


def page_candidates() -> None:
    ctx = _ctx()
    st.header("Candidate search")
    jobs = hooks.employer_jobs(ctx).data or []
    _bulk_matching_panel(ctx, jobs)

    c1, c2, c3 = st.columns(3)
    skills = c1.text_input("Skills (comma separated)")
    location = c2.text_input("Location")
    level = c3.selectbox("Experience level", ("",) + EXPERIENCE_LEVELS, format_func=_choice_label)
    c4, c5 = st.columns(2)
    min_years = c4.number_input("Minimum years", min_value=0, value=None)
    min_comm = c5.slider("Minimum communication score", 0, 100, 0, step=5)

    filters = {
        "skills": skills.strip() or None,
        "location": location.strip() or None,
        "experience_level": level or None,
        "min_experience_years": min_years,
        "min_communication_score": min_comm or None,
        "limit": 50,
    }
    result = hooks.candidate_search(ctx, filters)
    if not _notify(result):
        return
    if not result.data:
        st.info("No candidates match these filters. Try relaxing the requirements.")
        return
    st.caption(f"{len(result.data)} candidates")
    for match in result.data:
        _candidate_card(match, ctx, jobs, scope="search")


# ── Page: Interviews ─────────────────────────────────────────────────────


def page_interviews() -> None:
    ctx = _ctx()
    st.header("Interviews")
    result = hooks.interviews(ctx)
    if not _notify(result):
        return
    if not result.data:
        st.info("No interviews scheduled.")
        return
    current_day = None
    for interview in result.data:
        day = interview.interview_date.date()
        if day != current_day:
            st.subheader(f"{day:%A, %B %d %Y}")
            current_day = day
        icon = "📅" if interview.status == "scheduled" else "✔️"
        st.markdown(
            f"{icon} **{interview.interview_date:%H:%M}** · {interview.candidate_name} "
            f"({interview.candidate_email}) · {interview.job_title} · {format_status(interview.interview_type)}"
        )
        if interview.notes:
            st.caption(interview.notes)


# ── Page: Settings ───────────────────────────────────────────────────────


def page_settings() -> None:
    ctx = _ctx()
    st.header("Settings")

    st.subheader("Appearance")
    dark = st.toggle("Dark mode", value=ctx.theme.is_dark_mode)
    if dark != ctx.theme.is_dark_mode:
        ctx.theme.set_theme(dark)
        st.rerun()

    st.divider()
    st.subheader("Profile")
    result = hooks.profile(ctx)
    if _notify(result):
        user = result.data
        with st.form("profile"):
            c1, c2 = st.columns(2)
            first_name = c1.text_input("First name", value=user.first_name)
            last_name = c2.text_input("Last name", value=user.last_name)
            phone = st.text_input("Phone", value=user.phone or "")
            company_name = None
            if user.user_type == "employer":
                company_name = st.text_input("Company name", value=user.company_name or "")
            saved = st.form_submit_button("Save profile")
        if saved:
            changes = {"first_name": first_name, "last_name": last_name, "phone": phone or None}
            if company_name is not None:
                changes["company_name"] = company_name
            outcome = hooks.run_mutation(
                ctx, lambda: ctx.auth_service.update_profile(changes),
                success="Profile updated", fallback="Failed to update profile",
                invalidate=[("profile",)],
            )
            _notify(outcome)

    with st.form("password"):
        st.markdown("**Change password**")
        current = st.text_input("Current password", type="password")
        new = st.text_input("New password", type="password")
        changed = st.form_submit_button("Change password")
    if changed:
        _notify(hooks.run_mutation(
            ctx, lambda: ctx.auth_service.change_password(current, new),
            success="Password changed", fallback="Failed to change password",
        ))

    st.divider()
    if st.button("Sign out", type="primary"):
        ctx.logout()
        st.session_state.pop("create_form", None)
        st.session_state.pop("edit_forms", None)
        st.rerun()


# ── Main ─────────────────────────────────────────────────────────────────


def _inject_css() -> None:
    st.markdown(_BASE_CSS, unsafe_allow_html=True)
    st.markdown(_DARK_CSS if _ctx().theme.is_dark_mode else _LIGHT_CSS, unsafe_allow_html=True)


def _sidebar_status() -> None:
    ctx = _ctx()
    with st.sidebar:
        st.markdown(f"### {APP_NAME}")
        user = ctx.auth.current_user
        if user:
            st.caption(f"{user.full_name} · {format_status(user.user_type)}")
        st.caption(f"API: {ctx.settings.api_base_url}")


def _wrap(page):
    def run() -> None:
        _inject_css()
        _sidebar_status()
        _show_flash()
        page()

    run.__name__ = page.__name__
    return run


def _pages() -> list:
    ctx = _ctx()
    if not ctx.auth.is_authenticated:
        return [st.Page(_wrap(page_login), title="Sign in", icon="🔑", url_path="login", default=True)]
    settings = st.Page(_wrap(page_settings), title="Settings", icon="⚙️", url_path="settings")
    if ctx.auth.user_type == "employer":
        return [
            st.Page(_wrap(page_employer_dashboard), title="Dashboard", icon="📊",
                    url_path="dashboard", default=True),
            st.Page(_wrap(page_job_postings), title="Job postings", icon="📋", url_path="jobs"),
            st.Page(_wrap(page_candidates), title="Candidates", icon="🔎", url_path="candidates"),
            st.Page(_wrap(page_interviews), title="Interviews", icon="📅", url_path="interviews"),
            settings,
        ]
    return [
        st.Page(_wrap(page_employee_dashboard), title="Dashboard", icon="🏠",
                url_path="dashboard", default=True),
        st.Page(_wrap(page_resumes), title="Resumes & voice", icon="📄", url_path="resumes"),
        st.Page(_wrap(page_jobs), title="Jobs", icon="💼", url_path="jobs"),
        st.Page(_wrap(page_applications), title="Applications", icon="📨", url_path="applications"),
        st.Page(_wrap(page_matches), title="Matches", icon="✨", url_path="matches"),
        st.Page(_wrap(page_skills_analysis), title="Skills analysis", icon="🧭", url_path="skills"),
        settings,
    ]


_start_session()
nav = st.navigation(_pages())
nav.run()
