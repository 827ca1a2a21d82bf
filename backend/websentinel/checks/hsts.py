import re
from typing import Mapping, Optional
from websentinel.models.schemas import HeaderAnalysis

ONE_YEAR = 31536000
_MAX_AGE = re.compile(r"max-age=(\d+)", re.IGNORECASE)


def parse_max_age(header: str) -> int:
    """Return the max-age directive in seconds, 0 when absent or unparseable."""
    match = _MAX_AGE.search(header)
    return int(match.group(1)) if match else 0


class HSTSCheck:
    key = "Strict-Transport-Security"
    max_score = 6
    description = "Forces the browser to use HTTPS only."

    def _analysis(self, status: str, value: Optional[str], score: int, recommendation: str) -> HeaderAnalysis:
        return HeaderAnalysis(
            status=status,
            value=value,
            score=score,
            max_score=self.max_score,
            recommendation=recommendation,
            description=self.description,
        )

    def evaluate(self, headers: Mapping[str, str]) -> HeaderAnalysis:
        hsts = headers.get("strict-transport-security")
        if not hsts:
            return self._analysis("missing", None, 0, "Enable HSTS with a long max-age (e.g., 1 year).")

        max_age = parse_max_age(hsts)
        has_sub = "includesubdomains" in hsts.lower()

        if max_age >= ONE_YEAR:
            if has_sub:
                return self._analysis("secure", hsts, 6, "HSTS is correctly configured.")
            return self._analysis("secure", hsts, 6, "Secure, but adding includeSubDomains is recommended.")
        return self._analysis("weak", hsts, 2, "Ensure max-age is ≥ 31536000 (1 year).")
