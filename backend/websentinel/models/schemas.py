from datetime import datetime
from typing import Literal, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Status = Literal["secure", "weak", "missing"]
RiskLevel = Literal["Low", "Medium", "High"]

MAX_TOTAL_SCORE = 20


class ReadOnlyHeaders(dict):
    """Per-family results of a report; a dict for serialization, but not writable."""

    def _readonly(self, *args, **kwargs):
        raise TypeError("report headers are read-only")

    __setitem__ = __delitem__ = __ior__ = _readonly
    pop = popitem = clear = update = setdefault = _readonly

    def __reduce__(self):
        return (type(self), (dict(self),))


class _Wire(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class HeaderAnalysis(_Wire):
    status: Status
    value: Optional[str] = None
    score: int = Field(ge=0)
    max_score: int = Field(ge=0)
    recommendation: str
    description: str

    @model_validator(mode="after")
    def check_consistency(self):
        if self.score > self.max_score:
            raise ValueError(f"score {self.score} exceeds maxScore {self.max_score}")
        if self.status == "missing" and (self.value is not None or self.score != 0):
            raise ValueError("a missing header carries no value and scores 0")
        return self


class SecurityReport(_Wire):
    url: str
    total_score: int = Field(ge=0, le=MAX_TOTAL_SCORE)
    max_total_score: int = MAX_TOTAL_SCORE
    risk_level: RiskLevel
    risk_label: str
    risk_description: str
    headers: Dict[str, HeaderAnalysis]
    timestamp: datetime

    @field_validator("headers", mode="after")
    @classmethod
    def freeze_headers(cls, v):
        return ReadOnlyHeaders(v)


class AnalyzeRequest(BaseModel):
    url: str  # bare domain or full URL
