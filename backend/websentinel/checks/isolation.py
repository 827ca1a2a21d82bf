from typing import Mapping, Optional
from websentinel.models.schemas import HeaderAnalysis


class CrossOriginIsolationCheck:
    """
    Synthetic family: COOP and COEP only isolate the browsing context together,
    so they are scored as one unit.
    """
    key = "Cross-Origin-Isolation"
    max_score = 2
    description = "Process isolation."

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
        coop = headers.get("cross-origin-opener-policy")
        coep = headers.get("cross-origin-embedder-policy")
        if not coop and not coep:
            return self._analysis("missing", None, 0, "Set COOP: same-origin and COEP: require-corp.")

        combined = f"COOP: {coop or 'None'}, COEP: {coep or 'None'}"
        if coep and "require-corp" in coep and coop == "same-origin":
            return self._analysis("secure", combined, 2, "Secure.")
        return self._analysis("weak", combined, 0, "Set COOP: same-origin and COEP: require-corp.")
