"""
Directory trigger configuration.

Values arrive in-process from whatever loads job configuration; this module
only validates them.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import InvalidConfigError

DEFAULT_CHECK_INTERVAL = 2.0


class TriggerConfig(BaseModel):
    """
    Trigger configuration.

    check_interval is the pause in seconds between the end of one scan
    tick and the start of the next.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    job_id: str = Field(..., description="Owning job identifier")
    trigger_id: Optional[str] = Field(
        default=None, description="Trigger name (defaults to dir-trigger-<job_id>)"
    )
    check_interval: float = Field(
        default=DEFAULT_CHECK_INTERVAL, gt=0, description="Seconds between scan ticks"
    )
    follow_symlinks: bool = Field(
        default=False, description="Descend into symlinked directories and match symlinked files"
    )
    skip_hidden: bool = Field(
        default=False, description="Skip files and directories starting with '.'"
    )
    job_properties: Dict[str, str] = Field(
        default_factory=dict, description="Copied onto every emitted job"
    )

    @field_validator("job_id")
    @classmethod
    def validate_job_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("job_id must not be empty")
        return v

    @model_validator(mode="after")
    def default_trigger_id(self) -> "TriggerConfig":
        if not self.trigger_id:
            object.__setattr__(self, "trigger_id", f"dir-trigger-{self.job_id}")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TriggerConfig":
        """
        Build a config from a plain dict.

        Raises:
            InvalidConfigError: With one message per failing field
        """
        if data is None:
            raise InvalidConfigError(["trigger configuration is missing"])
        try:
            return cls(**data)
        except ValidationError as e:
            errors: List[str] = []
            for err in e.errors():
                location = ".".join(str(part) for part in err["loc"]) or "config"
                errors.append(f"{location}: {err['msg']}")
            raise InvalidConfigError(errors) from e
