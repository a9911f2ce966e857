"""Models for run diagnostics."""

import uuid
from typing import Optional

from pydantic import BaseModel, Field

from .enums import ErrorSeverity, IssueKind


class ProcessingError(BaseModel):
    """Record of a processing error or warning."""

    error_id: str = Field(..., description="Unique error identifier")
    severity: ErrorSeverity = Field(..., description="Error severity level")
    stage: str = Field(..., description="Pipeline stage where error occurred")
    message: str = Field(..., description="Error message")
    details: dict | None = Field(None, description="Additional error details")
    recoverable: bool = Field(default=True, description="Whether processing continued")

    @classmethod
    def warning(cls, stage: str, message: str, **details) -> "ProcessingError":
        """Build a recoverable warning for a degraded unit of work."""
        return cls(
            error_id=f"{stage}_err_{uuid.uuid4().hex[:8]}",
            severity=ErrorSeverity.WARNING,
            stage=stage,
            message=message,
            details=details or None,
            recoverable=True,
        )


class IntegrityIssue(BaseModel):
    """A data-quality problem in generated output. Never fatal."""

    kind: IssueKind = Field(..., description="Issue classification")
    model_id: str = Field(..., description="Model the issue was found in")
    subject_id: Optional[str] = Field(None, description="View, story or relationship ID")
    message: str = Field(..., description="Human-readable description")
    details: dict = Field(default_factory=dict)

    model_config = {"protected_namespaces": ()}
