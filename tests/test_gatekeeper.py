import pytest

from Gatekeeper.decisions import (
    Allowed,
    Blocked,
    DirectAccessBlocked,
    Forbidden,
    OriginForbidden,
    PassedThrough,
    PreflightAccepted,
)
from Gatekeeper.gatekeeper import (
    AuthGuard,
    CorsPolicy,
    Gatekeeper,
    OriginValidationStage,
    PassThrough,
    PreflightStage,
    RequestDescriptor,
)

PATTERNS = ("example.com", "*.example.com", "good.com")


@pytest.fixture
def gatekeeper():
    return Gatekeeper()


def decide(gatekeeper, method="GET", target="/", origin=None, **kwargs):
    request = RequestDescriptor(method=method, target=target, origin=origin, **kwargs)
    return gatekeeper.decide(request, lambda: PATTERNS)


class TestAuthGuard:
    def test_originless_api_request_is_blocked(self, gatekeeper):
        decision = decide(gatekeeper, target="/wp-json/wp/v2/posts")
        assert isinstance(decision, Blocked)
        assert decision.status_code == 403
        error = decision.error()
        assert isinstance(error, DirectAccessBlocked)
        assert error.to_body() == {
            "code": "rest_forbidden",
            "message": "Direct access not allowed.",
            "data": {"status": 403},
        }

    def test_namespace_anywhere_in_target_is_guarded(self, gatekeeper):
        assert isinstance(decide(gatekeeper, target="/?next=/wp-json/x"), Blocked)

    def test_empty_origin_counts_as_absent(self, gatekeeper):
        assert isinstance(decide(gatekeeper, target="/wp-json", origin=""), Blocked)

    def test_earlier_auth_result_is_not_overridden(self, gatekeeper):
        decision = decide(gatekeeper, target="/wp-json/wp/v2/posts", already_decided=True)
        assert isinstance(decision, PassedThrough)

    def test_custom_namespace(self):
        gatekeeper = Gatekeeper.from_settings({"API_NAMESPACE": "/api"})
        assert isinstance(decide(gatekeeper, target="/api/items"), Blocked)
        assert isinstance(decide(gatekeeper, target="/wp-json/items"), PassedThrough)


class TestPreflight:
    def test_options_returns_fixed_headers(self, gatekeeper):
        decision = decide(gatekeeper, method="OPTIONS", target="/wp-json/wp/v2/posts", origin="https://example.com")
        assert isinstance(decision, PreflightAccepted)
        assert decision.status_code == 200
        assert decision.headers == {
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
            "Access-Control-Allow-Headers": "Authorization, Content-Type, X-Requested-With",
            "Access-Control-Max-Age": "86400",
        }

    def test_preflight_skips_origin_validation(self, gatekeeper):
        decision = decide(gatekeeper, method="OPTIONS", target="/wp-json/x", origin="https://notallowed.com")
        assert isinstance(decision, PreflightAccepted)

    def test_originless_preflight_outside_namespace(self, gatekeeper):
        assert isinstance(decide(gatekeeper, method="OPTIONS", target="/health"), PreflightAccepted)

    def test_guard_runs_before_preflight(self, gatekeeper):
        # OPTIONS to the bare namespace without an Origin never reaches the preflight stage
        assert isinstance(decide(gatekeeper, method="OPTIONS", target="/wp-json"), Blocked)


class TestOriginValidation:
    def test_allowed_origin_is_echoed(self, gatekeeper):
        decision = decide(gatekeeper, target="/wp-json/wp/v2/posts", origin="https://sub.example.com")
        assert isinstance(decision, Allowed)
        assert decision.headers["Access-Control-Allow-Origin"] == "https://sub.example.com"
        assert decision.headers["Access-Control-Allow-Credentials"] == "true"
        assert decision.headers["Vary"] == "Origin"
        assert decision.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"
        assert decision.status_code is None

    def test_unknown_origin_is_forbidden(self, gatekeeper):
        request = RequestDescriptor("GET", "/wp-json/x", "https://notallowed.com")
        decision = gatekeeper.decide(request, lambda: ["good.com"])
        assert isinstance(decision, Forbidden)
        error = decision.error()
        assert isinstance(error, OriginForbidden)
        assert error.to_body()["data"] == {"status": 403, "origin": "https://notallowed.com"}

    def test_origin_is_checked_outside_the_namespace(self, gatekeeper):
        assert isinstance(decide(gatekeeper, target="/health", origin="https://evil.com"), Forbidden)

    def test_empty_allow_list_forbids_every_origin(self, gatekeeper):
        request = RequestDescriptor("POST", "/wp-json/x", "https://example.com")
        assert isinstance(gatekeeper.decide(request, lambda: []), Forbidden)


def test_originless_request_outside_namespace_passes(gatekeeper):
    assert isinstance(decide(gatekeeper, target="/health"), PassedThrough)


def test_allow_list_is_read_once_per_decision(gatekeeper):
    calls = []

    def provider():
        calls.append(1)
        return PATTERNS

    gatekeeper.decide(RequestDescriptor("GET", "/wp-json/x", "https://example.com"), provider)
    assert len(calls) == 1


def test_stage_order_is_configurable():
    policy = CorsPolicy(allow_methods=("GET",), allow_headers=("Content-Type",), max_age=60)
    gatekeeper = Gatekeeper([PreflightStage(), AuthGuard(), OriginValidationStage(), PassThrough()], policy)
    decision = decide(gatekeeper, method="OPTIONS", target="/wp-json")
    assert isinstance(decision, PreflightAccepted)
    assert decision.headers["Access-Control-Max-Age"] == "60"
    assert decision.headers["Access-Control-Allow-Methods"] == "GET"


def test_empty_pipeline_passes_through():
    assert isinstance(decide(Gatekeeper(stages=[]), target="/wp-json"), PassedThrough)


def test_skipped_stages_leave_the_guard_in_place(gatekeeper):
    skip = ("preflight", "origin-validation")
    request = RequestDescriptor("GET", "/admin/page", "https://evil.com")
    assert isinstance(gatekeeper.decide(request, lambda: PATTERNS, skip), PassedThrough)
    guarded = RequestDescriptor("GET", "/admin/page?next=/wp-json/x")
    assert isinstance(gatekeeper.decide(guarded, lambda: PATTERNS, skip), Blocked)
