from airesume.errors import (
    ApiError,
    ClientValidationError,
    ForbiddenError,
    describe_error,
    error_for_status,
    flatten_validation_detail,
    role_restricted_message,
)


def test_validation_detail_is_flattened():
    detail = [
        {"loc": ["body", "salary_min"], "msg": "must be positive"},
        {"loc": ["body", "title"], "msg": "field required"},
    ]
    assert flatten_validation_detail(detail) == (
        "body.salary_min: must be positive, body.title: field required"
    )


def test_describe_error_prefers_server_detail():
    exc = ApiError("x", status_code=422, body={"detail": [{"loc": ["body", "title"], "msg": "too short"}]})
    assert describe_error(exc, "fallback") == "Validation error: body.title: too short"

    exc = ApiError("x", status_code=400, body={"detail": "Email already registered"})
    assert describe_error(exc, "fallback") == "Email already registered"

    exc = ApiError("x", status_code=400, body={"message": "Quota exceeded"})
    assert describe_error(exc, "fallback") == "Quota exceeded"


def test_describe_error_falls_back_for_unknown_bodies():
    assert describe_error(ApiError("x", status_code=502, body="<html>"), "Failed") == "Failed"
    assert describe_error(ApiError("x", body={"detail": []}), "Failed") == "Failed"
    assert describe_error(ApiError("x"), "Failed") == "Failed"


def test_describe_local_errors():
    assert describe_error(ClientValidationError("bad file"), "Failed") == "bad file"
    assert describe_error(RuntimeError(), "Failed") == "Failed"


def test_role_restricted_message():
    assert role_restricted_message(ForbiddenError("x", status_code=403), "only employees", "broken") == "only employees"
    assert role_restricted_message(ApiError("x", status_code=500), "only employees", "broken") == "broken"


def test_error_for_status():
    assert error_for_status(403) is ForbiddenError
    assert error_for_status(418) is ApiError
