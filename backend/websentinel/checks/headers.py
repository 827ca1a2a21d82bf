from typing import Mapping, Optional
from websentinel.models.schemas import HeaderAnalysis

# Checks read from a mapping whose names are already lower-cased
# (see websentinel.core.engine.normalize_headers).


def _analysis_base(check, status: str, value: Optional[str], score: int,
                   recommendation: str) -> HeaderAnalysis:
    return HeaderAnalysis(
        status=status,          # secure / weak / missing
        value=value,
        score=score,
        max_score=check.max_score,
        recommendation=recommendation,
        description=check.description,
    )


def has_frame_ancestors(headers: Mapping[str, str]) -> bool:
    csp = headers.get("content-security-policy") or ""
    return "frame-ancestors" in csp


class CSPCheck:
    key = "Content-Security-Policy"
    max_score = 8
    description = "Controls which resources the browser is allowed to load."

    def evaluate(self, headers: Mapping[str, str]) -> HeaderAnalysis:
        csp = headers.get("content-security-policy")
        if not csp:
            return _analysis_base(self, "missing", None, 0,
                                  "Implement a strict CSP to prevent XSS and data injection attacks.")

        core = [d in csp for d in ("default-src", "script-src", "object-src")]
        narrow = "frame-ancestors" in csp or "require-trusted-types-for" in csp

        if all(core):
            return _analysis_base(self, "secure", csp, 8, "Excellent CSP configuration.")
        if any(core):
            return _analysis_base(self, "weak", csp, 5,
                                  "Your CSP is partial. Add missing default-src, script-src, or object-src.")
        if narrow:
            return _analysis_base(self, "weak", csp, 2,
                                  "CSP only covers specific protections. Enhance it with a default policy.")
        return _analysis_base(self, "weak", csp, 2,
                              "Your CSP is weak. Ensure default-src, script-src, and object-src are defined.")


class XFrameOptionsCheck:
    key = "X-Frame-Options"
    max_score = 1
    description = "Prevents clickjacking."

    def evaluate(self, headers: Mapping[str, str], has_frame_ancestors: bool = False) -> HeaderAnalysis:
        xfo = headers.get("x-frame-options")
        if not xfo:
            if has_frame_ancestors:
                return _analysis_base(self, "missing", None, 0, "Missing, but mitigated by CSP frame-ancestors.")
            return _analysis_base(self, "missing", None, 0, "Set to DENY or SAMEORIGIN.")

        upper = xfo.upper()
        if "DENY" in upper or "SAMEORIGIN" in upper:
            return _analysis_base(self, "secure", xfo, 1, "Frame protection active.")
        return _analysis_base(self, "weak", xfo, 0, "Use DENY or SAMEORIGIN.")


class XContentTypeOptionsCheck:
    key = "X-Content-Type-Options"
    max_score = 1
    description = "Prevents MIME-sniffing."

    def evaluate(self, headers: Mapping[str, str]) -> HeaderAnalysis:
        xcto = headers.get("x-content-type-options")
        if xcto and xcto.lower() == "nosniff":
            return _analysis_base(self, "secure", xcto, 1, "Secure.")
        # binary header: anything but nosniff counts as not sent
        return _analysis_base(self, "missing", None, 0, "Set to nosniff.")


class ReferrerPolicyCheck:
    key = "Referrer-Policy"
    max_score = 1
    description = "Controls referrer information."
    safe = {"no-referrer", "same-origin", "strict-origin", "strict-origin-when-cross-origin"}

    def evaluate(self, headers: Mapping[str, str]) -> HeaderAnalysis:
        rp = headers.get("referrer-policy")
        if not rp:
            return _analysis_base(self, "missing", None, 0, "Implement a secure policy.")

        # fallback lists: one safe token is enough
        policies = [p.strip() for p in rp.lower().split(",")]
        if any(p in self.safe for p in policies):
            return _analysis_base(self, "secure", rp, 1, "Secure.")
        return _analysis_base(self, "weak", rp, 0, "Use strict-origin-when-cross-origin.")


class PermissionsPolicyCheck:
    key = "Permissions-Policy"
    max_score = 1
    description = "Restricts browser features."

    def evaluate(self, headers: Mapping[str, str]) -> HeaderAnalysis:
        pp = headers.get("permissions-policy")
        if pp:
            return _analysis_base(self, "secure", pp, 1, "Secure.")
        return _analysis_base(self, "missing", None, 0, "Define a policy.")
