import sys
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, model_validator

_FLOAT_INT_LIMIT = int(sys.float_info.max)

# Record numbers must stay representable as finite floats.
RecordInt = Annotated[int, Field(ge=-_FLOAT_INT_LIMIT, le=_FLOAT_INT_LIMIT)]
RecordModel = dict[str, str | RecordInt | FiniteFloat | None]


class NormalizationMethod(str, Enum):
    min_max = "min_max"
    z_score = "z_score"


class NumericRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: FiniteFloat
    max: FiniteFloat

    @model_validator(mode="after")
    def bounds_validate(self) -> "NumericRange":
        if self.min > self.max:
            raise ValueError("min must not exceed max")
        return self


class FilterCriteria(BaseModel):
    """Active filter selections; empty fields place no constraint."""

    model_config = ConfigDict(frozen=True)

    brands: list[str] = Field(default_factory=list)
    filament_types: list[str] = Field(default_factory=list)
    base_materials: list[str] = Field(default_factory=list)
    fiber_blends: list[str] = Field(default_factory=list)
    search_text: str = ""
    numeric_ranges: dict[str, NumericRange] = Field(default_factory=dict)


class ColumnSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    mean: float
    median: float
    variance: float
    std_dev: float
    q1: float
    q3: float
    min: float
    max: float
    count: int


class IngestionReport(BaseModel):
    sheet_name: str
    columns: list[str]
    numeric_columns: list[str]
    row_count: int
    source_row_count: int
    dropped: dict[str, int]
    checksum_sha256: str
    size_bytes: int
    column_stats: dict[str, ColumnSummary]
    anomalies: dict[str, Any]
    records: list[RecordModel]


class RecordsPayload(BaseModel):
    records: list[RecordModel]


class FilterRequest(RecordsPayload):
    criteria: FilterCriteria = Field(default_factory=FilterCriteria)


class ComparisonRequest(RecordsPayload):
    n: int = Field(default=3, ge=1, le=50)


class ScatterRequest(RecordsPayload):
    x_column: str = Field(min_length=1)
    y_column: str = Field(min_length=1)


class ColumnRange(BaseModel):
    min: float
    max: float


class FacetsResponse(BaseModel):
    brands: list[str]
    filament_types: list[str]
    base_materials: list[str]
    fiber_blends: list[str]
    numeric_ranges: dict[str, ColumnRange]


class ValuesPayload(BaseModel):
    values: list[FiniteFloat]


class NormalizeRequest(ValuesPayload):
    method: NormalizationMethod = NormalizationMethod.min_max


class PairedValuesPayload(BaseModel):
    x: list[FiniteFloat]
    y: list[FiniteFloat]

    @model_validator(mode="after")
    def lengths_validate(self) -> "PairedValuesPayload":
        if len(self.x) != len(self.y):
            raise ValueError("x and y must have the same length")
        return self


class CorrelationResponse(BaseModel):
    correlation: float


class ValuesResponse(BaseModel):
    values: list[float]


class OutliersResponse(BaseModel):
    outliers: list[bool]
