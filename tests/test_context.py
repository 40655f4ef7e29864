from airesume import hooks
from airesume.context import AppContext
from airesume.storage import AUTH_STORAGE_KEY

EMPLOYER = {"id": 1, "email": "hr@acme.test", "user_type": "employer"}


def test_contexts_do_not_share_a_login(settings):
    with AppContext(settings) as first, AppContext(settings) as second:
        first.auth.login(EMPLOYER, "employer-token")

        third = AppContext(settings).open()

        assert not second.auth.is_authenticated
        assert not third.auth.is_authenticated
        assert third.auth.token is None
        third.close()


def test_logout_in_one_context_leaves_others_signed_in(settings):
    with AppContext(settings) as first, AppContext(settings) as second:
        first.auth.login(EMPLOYER, "first-token")
        second.auth.login({**EMPLOYER, "id": 2}, "second-token")

        first.logout()

        assert not first.auth.is_authenticated
        assert second.auth.token == "second-token"


def test_unauthorized_response_only_signs_out_its_own_context(settings, session):
    session.add("GET", "/api/auth/me", (401, {"detail": "Token expired"}))
    with AppContext(settings, session=session) as first, AppContext(settings) as second:
        first.auth.login(EMPLOYER, "stale-token")
        second.auth.login(EMPLOYER, "fresh-token")

        assert not hooks.profile(first).ok

        assert not first.auth.is_authenticated
        assert second.auth.is_authenticated


def test_theme_is_per_context(settings):
    with AppContext(settings) as first, AppContext(settings) as second:
        first.theme.set_theme(True)
        assert second.theme.is_dark_mode is False


def test_local_context_restores_session_from_disk(settings):
    with AppContext.local(settings) as first:
        first.auth.login(EMPLOYER, "employer-token")

    with AppContext.local(settings) as again:
        assert again.auth.is_authenticated
        assert again.auth.token == "employer-token"
        assert again.storage.contains(AUTH_STORAGE_KEY)
    assert (settings.storage_dir / "auth-storage.json").exists()
