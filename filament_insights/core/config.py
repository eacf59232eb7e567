"""Application configuration loaded from environment variables."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MEDIA_TYPE = "application/vnd.ms-excel"


class IngestionConfig(BaseModel):
    """Structural assumptions and allow-lists used by the ingestion pipeline.

    Defaults describe the filament test export: a title row, a header row at
    index 1, then data rows whose column 1 holds the brand.
    """

    model_config = ConfigDict(frozen=True)

    # Decoding
    max_file_size_bytes: int = Field(default=50 * 1024 * 1024, gt=0)
    allowed_media_types: tuple[str, ...] = (XLSX_MEDIA_TYPE, XLS_MEDIA_TYPE)
    sheet_keyword: str = "filament"
    sheet_excluded_keyword: str = "flexible"
    header_row_index: int = Field(default=1, ge=0)
    min_row_count: int = Field(default=3, ge=1)

    # Row filtering
    identifier_column_index: int = Field(default=1, ge=0)
    min_meaningful_cells: int = Field(default=2, ge=0)
    non_data_markers: tuple[str, ...] = (
        "new rows",
        "orange bg",
        "metadata",
        "header",
        "note:",
        "comment",
    )

    # Record mapping
    numeric_precision: int = Field(default=10, ge=0)
    max_string_length: int = Field(default=1000, gt=0)
    url_column_keywords: tuple[str, ...] = ("link", "url")
    allowed_url_schemes: tuple[str, ...] = ("http", "https")
    trusted_hosts: tuple[str, ...] = ("youtube.com", "youtu.be", "www.youtube.com")

    # Record acceptance
    identifying_columns: tuple[str, ...] = ("Brand", "Filament type", "Material", "Type")
    min_populated_fields: int = Field(default=3, ge=0)

    # Dataset validation
    max_rows: int = Field(default=10_000, gt=0)
    max_column_name_length: int = Field(default=100, gt=0)
    suspicious_column_fragments: tuple[str, ...] = ("<", ">", "script")
    measurement_keywords: tuple[str, ...] = ("tensile", "layer", "izod")
    quality_sample_size: int = Field(default=100, gt=0)
    max_numeric_magnitude: float = 1e10
    max_quality_string_length: int = Field(default=500, gt=0)
    max_reported_issues: int = Field(default=5, ge=0)

    # Filtering and aggregation
    brand_column: str = "Brand"
    filament_type_column: str = "Filament type"
    base_column: str = "Base"
    fibers_column: str = "Fibers"
    search_columns: tuple[str, ...] = ("Brand", "Filament type", "Base", "Fibers")
    base_material_columns: tuple[str, ...] = ("Base", "Base Material", "Material")
    group_column_limit: int = Field(default=5, gt=0)
    score_columns: tuple[str, ...] = ("Tensile (kg)", "Layer adhesion (kg)")
    comparison_column_limit: int = Field(default=6, gt=0)
    comparison_min_numeric_columns: int = Field(default=3, ge=0)


DEFAULT_INGESTION_CONFIG = IngestionConfig()


class Settings(BaseSettings):
    """Typed settings object shared by the API and library callers."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="console", alias="LOG_FORMAT")
    service_name: str = Field(default="filament-insights", alias="SERVICE_NAME")
    environment: str = Field(default="local", alias="ENVIRONMENT")
    upload_chunk_size: int = Field(default=1024 * 1024, gt=0, alias="UPLOAD_CHUNK_SIZE")

    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)


settings = Settings()
