"""Configuration model for the matching and fixing engine."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..lint_logging import get_logger

logger = get_logger()

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class EngineConfig(BaseModel):
    """Engine configuration with validation.

    Field names are snake_case; config files use the camelCase aliases.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Cache windows
    index_ttl_seconds: float = Field(default=5.0, ge=0, alias="indexTtlSeconds")
    library_ttl_seconds: float = Field(default=30.0, ge=0, alias="libraryTtlSeconds")

    # Cooperative scheduling
    scan_yield_batch: int = Field(default=50, ge=1, le=10000, alias="scanYieldBatch")

    # Value verification
    name_match_absolute_tolerance: float = Field(
        default=1.0, ge=0, alias="nameMatchAbsoluteTolerance"
    )
    name_match_relative_tolerance: float = Field(
        default=0.05, ge=0, le=1, alias="nameMatchRelativeTolerance"
    )
    close_value_max_diff: float = Field(default=1.0, ge=0, alias="closeValueMaxDiff")

    # Candidate scoring
    context_score: int = Field(default=10, ge=0, alias="contextScore")
    exact_name_score: int = Field(default=20, ge=0, alias="exactNameScore")
    suffix_name_score: int = Field(default=15, ge=0, alias="suffixNameScore")
    min_suffix_segments: int = Field(default=2, ge=1, alias="minSuffixSegments")

    # Suggestions
    max_delta_e: float = Field(default=10.0, gt=0, alias="maxDeltaE")

    # Logging
    log_level: str = Field(default="INFO", alias="logLevel")
    log_format: str = Field(default="text", alias="logFormat")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        level = str(v).upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(VALID_LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: Any) -> str:
        if v not in ("text", "json"):
            raise ValueError("log format must be 'text' or 'json'")
        return v

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase dictionary used in config files."""
        return self.model_dump(by_alias=True)
