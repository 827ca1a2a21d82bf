from datetime import datetime, timezone
import httpx
import pytest
from pydantic import ValidationError
from websentinel.core.engine import FAMILIES, analyze, normalize_headers
from websentinel.core.history import InMemoryHistoryStore

FULL = {
    "Content-Security-Policy": "default-src 'self'; script-src 'self'; object-src 'none'",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=()",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Embedder-Policy": "require-corp",
}

SAMPLES = [
    {},
    FULL,
    {"strict-transport-security": "max-age=3600", "x-frame-options": "ALLOWALL"},
    {"content-security-policy": "frame-ancestors 'none'", "x-content-type-options": "nosniff"},
    {"cross-origin-embedder-policy": "require-corp", "referrer-policy": "unsafe-url"},
]


def test_all_missing_is_attention_required():
    report = analyze("example.com", {})
    assert report.total_score == 0
    assert report.risk_level == "High"
    assert report.risk_label == "Attention Required"
    assert "HSTS, Frame Protection, Sniffing Protection" in report.risk_description
    assert all(h.status == "missing" for h in report.headers.values())


def test_fully_hardened_is_low_risk_with_full_score():
    report = analyze("example.com", FULL)
    assert report.total_score == 20
    assert report.max_total_score == 20
    assert report.risk_level == "Low"
    assert report.risk_label == "Low Risk"
    assert all(h.status == "secure" for h in report.headers.values())


@pytest.mark.parametrize("headers", SAMPLES)
def test_report_shape_and_score_bounds(headers):
    report = analyze("example.com", headers)
    assert tuple(report.headers) == FAMILIES
    assert len(FAMILIES) == 7
    assert sum(h.max_score for h in report.headers.values()) == 20
    for h in report.headers.values():
        assert h.status in ("secure", "weak", "missing")
        assert 0 <= h.score <= h.max_score
        if h.status == "missing":
            assert h.value is None and h.score == 0
    assert report.total_score == min(20, sum(h.score for h in report.headers.values()))


def test_frame_ancestors_satisfies_frame_protection():
    headers = {
        "content-security-policy": "frame-ancestors 'self'",
        "strict-transport-security": "max-age=31536000",
        "x-content-type-options": "nosniff",
    }
    report = analyze("example.com", headers)
    xfo = report.headers["X-Frame-Options"]
    assert (xfo.status, xfo.score) == ("missing", 0)
    assert report.risk_level == "Low"


def test_weak_hsts_is_medium_risk():
    headers = dict(FULL, **{"Strict-Transport-Security": "max-age=3600"})
    report = analyze("example.com", headers)
    assert report.risk_level == "Medium"
    assert report.risk_label == "Medium Risk"
    assert report.total_score == 16


def test_weak_xfo_is_medium_unless_frame_ancestors():
    base = {
        "strict-transport-security": "max-age=31536000",
        "x-content-type-options": "nosniff",
        "x-frame-options": "ALLOW-FROM https://a.example",
    }
    assert analyze("example.com", base).risk_level == "Medium"
    mitigated = dict(base, **{"content-security-policy": "frame-ancestors 'self'"})
    assert analyze("example.com", mitigated).risk_level == "Low"


def test_missing_xcto_names_sniffing_protection():
    headers = {"strict-transport-security": "max-age=31536000", "x-frame-options": "DENY"}
    report = analyze("example.com", headers)
    assert report.risk_label == "Attention Required"
    assert report.risk_description.endswith("missing: Sniffing Protection.")


def test_header_names_are_case_insensitive():
    lower = analyze("example.com", {k.lower(): v for k, v in FULL.items()})
    upper = analyze("example.com", {k.upper(): v for k, v in FULL.items()})
    assert lower.headers == upper.headers
    assert analyze("example.com", httpx.Headers(FULL)).total_score == 20


def test_analysis_is_repeatable_apart_from_timestamp():
    a = analyze("example.com", SAMPLES[2])
    b = analyze("example.com", SAMPLES[2])
    assert a.headers == b.headers
    assert (a.total_score, a.risk_level, a.risk_label) == (b.total_score, b.risk_level, b.risk_label)


def test_url_and_timestamp_pass_through():
    ts = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    report = analyze("  Not A URL  ", {}, timestamp=ts)
    assert report.url == "  Not A URL  "
    assert report.timestamp == ts


def test_report_is_immutable():
    report = analyze("example.com", {})
    with pytest.raises(ValidationError):
        report.total_score = 5
    with pytest.raises(TypeError):
        report.headers.pop("X-Frame-Options")
    with pytest.raises(TypeError):
        report.headers["X-Frame-Options"] = report.headers["Content-Security-Policy"]
    with pytest.raises(TypeError):
        del report.headers["Content-Security-Policy"]
    with pytest.raises(TypeError):
        report.headers.clear()
    with pytest.raises(ValidationError):
        report.headers["Strict-Transport-Security"].score = 6
    assert tuple(report.headers) == FAMILIES


def test_stored_report_headers_cannot_be_changed_by_callers():
    store = InMemoryHistoryStore()
    report = analyze("example.com", FULL)
    store.save(report)
    with pytest.raises(TypeError):
        report.headers.pop("Cross-Origin-Isolation")
    assert len(store.load()[0].headers) == 7
    assert store.load()[0].model_dump(by_alias=True)["headers"]["X-Frame-Options"]["score"] == 1


def test_json_uses_camel_case_keys():
    data = analyze("example.com", FULL).model_dump(mode="json", by_alias=True)
    assert {"url", "totalScore", "maxTotalScore", "riskLevel", "riskLabel",
            "riskDescription", "headers", "timestamp"} <= set(data)
    assert set(data["headers"]["Strict-Transport-Security"]) == {
        "status", "value", "score", "maxScore", "recommendation", "description"}


def test_normalize_headers():
    assert normalize_headers({"X-Frame-Options": "DENY"}) == {"x-frame-options": "DENY"}
    assert normalize_headers({"X-Frame-Options": None}) == {}
    assert normalize_headers({b"X-Frame-Options": b"DENY"}) == {"x-frame-options": "DENY"}


def test_none_value_is_an_absent_header():
    headers = {
        "Strict-Transport-Security": None,
        "X-Frame-Options": None,
        "X-Content-Type-Options": "nosniff",
    }
    report = analyze("example.com", headers)
    hsts = report.headers["Strict-Transport-Security"]
    assert (hsts.status, hsts.value, hsts.score) == ("missing", None, 0)
    assert report.headers["X-Frame-Options"].status == "missing"
    assert report.risk_label == "Attention Required"
    assert report.risk_description.endswith("missing: HSTS, Frame Protection.")


def test_bytes_headers_are_decoded():
    report = analyze("example.com", {
        b"X-Content-Type-Options": b"nosniff",
        b"Strict-Transport-Security": b"max-age=31536000",
    })
    xcto = report.headers["X-Content-Type-Options"]
    assert (xcto.status, xcto.value) == ("secure", "nosniff")
    assert report.headers["Strict-Transport-Security"].value == "max-age=31536000"
