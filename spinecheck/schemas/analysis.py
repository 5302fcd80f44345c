from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

INCONCLUSIVE_ANGLE = -1.0


class Classification(str, Enum):
    NORMAL = "Normal"
    MILD = "Mild"
    HIGH_RISK = "High-Risk"
    INCONCLUSIVE = "Inconclusive"

    @classmethod
    def parse(cls, value: str) -> "Classification":
        """Case-insensitive lookup; raises ValueError for unknown values."""
        needle = value.strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        raise ValueError(f"unknown classification: {value!r}")


class PreparedImage(BaseModel):
    data: str  # base64, no data: header
    mime_type: str = "image/jpeg"
    width: int
    height: int

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class ModelVerdict(BaseModel):
    """The exact two-field record the model must return."""

    model_config = ConfigDict(extra="forbid")

    cobbAngle: float = Field(allow_inf_nan=False)
    classification: str


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cobb_angle: float = Field(alias="cobbAngle", allow_inf_nan=False)
    classification: Classification
    captured_at: str = Field(alias="date")

    @model_validator(mode="after")
    def _check_angle(self) -> "AnalysisResult":
        if self.classification is Classification.INCONCLUSIVE:
            if self.cobb_angle != INCONCLUSIVE_ANGLE:
                raise ValueError("Inconclusive results must carry the -1 angle sentinel")
        elif self.cobb_angle < 0:
            raise ValueError("cobb angle must be non-negative")
        return self

    @property
    def is_inconclusive(self) -> bool:
        return self.classification is Classification.INCONCLUSIVE


class HistoryRecord(AnalysisResult):
    timestamp: float


class Interpretation(BaseModel):
    tier: str
    text_key: str
    text: str
