import logging
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional, Tuple
from websentinel.core.config import Settings
from websentinel.core.http import client_for, fetch_headers, normalize_target
from websentinel.models.schemas import HeaderAnalysis, SecurityReport, MAX_TOTAL_SCORE
from websentinel.checks.hsts import HSTSCheck
from websentinel.checks.isolation import CrossOriginIsolationCheck
from websentinel.checks.headers import (
    CSPCheck,
    XFrameOptionsCheck,
    XContentTypeOptionsCheck,
    ReferrerPolicyCheck,
    PermissionsPolicyCheck,
    has_frame_ancestors,
)

logger = logging.getLogger(__name__)

CSP = CSPCheck()
HSTS = HSTSCheck()
XFO = XFrameOptionsCheck()
XCTO = XContentTypeOptionsCheck()
REFERRER = ReferrerPolicyCheck()
PERMISSIONS = PermissionsPolicyCheck()
ISOLATION = CrossOriginIsolationCheck()

CHECKS = [CSP, HSTS, XFO, XCTO, REFERRER, PERMISSIONS, ISOLATION]
FAMILIES = tuple(c.key for c in CHECKS)


def _text(v) -> str:
    # raw header bytes are latin-1, as httpx decodes them
    return v.decode("latin-1") if isinstance(v, (bytes, bytearray)) else str(v)


def normalize_headers(raw: Mapping[str, str]) -> Dict[str, str]:
    """Lower-case names; a None value means the header was not sent."""
    return {_text(name).lower(): _text(value) for name, value in raw.items() if value is not None}


def score_from(results: Mapping[str, HeaderAnalysis]) -> int:
    return min(MAX_TOTAL_SCORE, sum(r.score for r in results.values()))


def classify_risk(results: Mapping[str, HeaderAnalysis], frame_ancestors: bool) -> Tuple[str, str, str]:
    """
    Risk is driven by the three critical protections only: HSTS, framing
    (X-Frame-Options or CSP frame-ancestors) and MIME sniffing. Hardening
    headers affect the score, never the risk level.

    Returns (riskLevel, riskLabel, riskDescription).
    """
    has_hsts = results[HSTS.key].status != "missing"
    has_xfo = results[XFO.key].status != "missing" or frame_ancestors
    has_xcto = results[XCTO.key].status != "missing"

    hsts_weak = results[HSTS.key].status == "weak"
    xfo_weak = results[XFO.key].status == "weak" and not frame_ancestors

    risk = ("High", "High Risk", "One or more critical security headers are missing.")

    if has_hsts and has_xfo and has_xcto:
        if hsts_weak or xfo_weak:
            risk = ("Medium", "Medium Risk",
                    "Core security headers are present but have minor configuration weaknesses.")
        else:
            risk = ("Low", "Low Risk",
                    "Core security protections are enabled. Some advanced hardening headers are missing.")
    elif not has_hsts or not has_xfo or not has_xcto:
        missing = [name for name, present in (("HSTS", has_hsts),
                                              ("Frame Protection", has_xfo),
                                              ("Sniffing Protection", has_xcto)) if not present]
        risk = ("High", "Attention Required",
                f"One or more critical core protections are missing: {', '.join(missing)}.")
    return risk


def analyze(url: str, headers: Mapping[str, str], timestamp: Optional[datetime] = None) -> SecurityReport:
    """
    Score the security headers of one HTTP response. Pure and total: absent
    headers are scored, never rejected.
    """
    h = normalize_headers(headers)
    frame_ancestors = has_frame_ancestors(h)

    results = {
        CSP.key: CSP.evaluate(h),
        HSTS.key: HSTS.evaluate(h),
        XFO.key: XFO.evaluate(h, has_frame_ancestors=frame_ancestors),
        XCTO.key: XCTO.evaluate(h),
        REFERRER.key: REFERRER.evaluate(h),
        PERMISSIONS.key: PERMISSIONS.evaluate(h),
        ISOLATION.key: ISOLATION.evaluate(h),
    }
    level, label, description = classify_risk(results, frame_ancestors)

    return SecurityReport(
        url=url,
        total_score=score_from(results),
        max_total_score=MAX_TOTAL_SCORE,
        risk_level=level,
        risk_label=label,
        risk_description=description,
        headers=results,
        timestamp=timestamp or datetime.now(timezone.utc),
    )


async def run_scan(url: str, settings: Optional[Settings] = None) -> SecurityReport:
    target = normalize_target(url)
    async with client_for(settings) as client:
        headers = await fetch_headers(client, target)
    report = analyze(target, headers)
    logger.info("Analyzed %s: score %d/%d, risk %s",
                target, report.total_score, report.max_total_score, report.risk_level)
    return report
