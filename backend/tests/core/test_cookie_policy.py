"""Cookie policy — secure detection, dev lax fallback, production domain.

Invariants:
    - secure ⇔ own protocol https or any forwarded value == https (trimmed, case-insensitive)
    - never same_site="none" with secure=False
    - development over plain HTTP → lax / not secure / no domain
"""

import pytest

from app.core.cookie_policy import (
    CookieOptions, RequestSignals, decide, is_secure_request,
)
from app.core.domain_types import DeploymentMode


# --- is_secure_request ------------------------------------------------------

def test_https_protocol_is_secure():
    assert is_secure_request(RequestSignals(protocol="https"))


def test_plain_http_without_forwarded_header_is_not_secure():
    assert not is_secure_request(RequestSignals(protocol="http"))


@pytest.mark.parametrize("header", [
    "https",
    "HTTPS",
    " https ",
    "http, https",
    "http,HTTPS",
])
def test_forwarded_proto_list_containing_https_is_secure(header):
    assert is_secure_request(RequestSignals(protocol="http", forwarded_proto=(header,)))


@pytest.mark.parametrize("header", ["http", "http, ws", "httpss", ""])
def test_forwarded_proto_without_https_is_not_secure(header):
    assert not is_secure_request(RequestSignals(protocol="http", forwarded_proto=(header,)))


def test_repeated_forwarded_headers_are_all_considered():
    signals = RequestSignals(protocol="http", forwarded_proto=("http", "https"))
    assert is_secure_request(signals)


# --- decide -----------------------------------------------------------------

def test_development_over_http_falls_back_to_lax():
    options = decide(RequestSignals(protocol="http"), DeploymentMode.DEVELOPMENT)
    assert options == CookieOptions(
        http_only=True, path="/", same_site="lax", secure=False, domain=None,
    )


def test_development_behind_https_proxy_uses_none_and_secure():
    signals = RequestSignals(protocol="http", forwarded_proto=("https",))
    options = decide(signals, DeploymentMode.DEVELOPMENT)
    assert options.same_site == "none"
    assert options.secure is True
    assert options.domain is None


def test_development_hosted_sets_platform_domain():
    options = decide(
        RequestSignals(protocol="https"), DeploymentMode.DEVELOPMENT, hosted=True,
    )
    assert options.domain == ".csb.app"


def test_production_always_secure_with_domain():
    options = decide(RequestSignals(protocol="http"), DeploymentMode.PRODUCTION)
    assert options == CookieOptions(
        http_only=True, path="/", same_site="none", secure=True, domain=".csb.app",
    )


def test_production_uses_configured_domain_suffix():
    options = decide(
        RequestSignals(protocol="https"), DeploymentMode.PRODUCTION,
        domain_suffix=".example.app",
    )
    assert options.domain == ".example.app"


def test_test_mode_over_https_has_no_domain():
    options = decide(RequestSignals(protocol="https"), DeploymentMode.TEST)
    assert options.secure is True
    assert options.domain is None


@pytest.mark.parametrize("mode", list(DeploymentMode))
@pytest.mark.parametrize("signals", [
    RequestSignals(protocol="http"),
    RequestSignals(protocol="https"),
    RequestSignals(protocol="http", forwarded_proto=("http",)),
    RequestSignals(protocol="http", forwarded_proto=("HTTPS, http",)),
])
@pytest.mark.parametrize("hosted", [False, True])
def test_never_same_site_none_without_secure(mode, signals, hosted):
    options = decide(signals, mode, hosted=hosted)
    assert not (options.same_site == "none" and options.secure is False)
    assert options.http_only is True
    assert options.path == "/"


def test_as_cookie_kwargs_maps_to_starlette_names():
    options = CookieOptions(
        http_only=True, path="/", same_site="lax", secure=False,
    )
    assert options.as_cookie_kwargs() == {
        "httponly": True, "path": "/", "samesite": "lax",
        "secure": False, "domain": None,
    }
