"""
PublicDashboard Forms — Validation of create/modify dashboard input.

Form data arrives as a flat mapping of strings from the admin console.
Validation failures carry one entry per field so the form can be
redisplayed with messages next to the offending inputs.
"""

from __future__ import annotations

from typing import Any, Collection, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from publicdashboard.engine.errors import DashboardValidationError

VALIDATION_ATTRIBUTES_PREFIX = "publicdashboard.model.entity.dashboard.attribute."


class DashboardForm(BaseModel):
    """Editable fields of a dashboard record."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(default="", max_length=255)
    component_type_id: str = Field(min_length=1, max_length=100)

    @field_validator("component_type_id")
    @classmethod
    def validate_component_type_id(cls, v: str) -> str:
        if any(ch.isspace() for ch in v):
            raise ValueError("component id must not contain whitespace")
        return v


def _field_errors(error: ValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in error.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
        errors.append({
            "field": field,
            "label": f"{VALIDATION_ATTRIBUTES_PREFIX}{field}",
            "message": err.get("msg", "invalid value"),
        })
    return errors


def validate_dashboard_form(
    data: Mapping[str, Any],
    allowed_components: Optional[Collection[str]] = None,
) -> DashboardForm:
    """
    Validate raw form data.

    Args:
        data:               Submitted form values.
        allowed_components: When given, the component id must be one of these.

    Raises:
        DashboardValidationError with field-level ``validation_errors``.
    """
    try:
        form = DashboardForm(**{k: data[k] for k in ("name", "component_type_id") if k in data})
    except ValidationError as e:
        raise DashboardValidationError(
            "Dashboard form is invalid",
            validation_errors=_field_errors(e),
        ) from e

    if allowed_components is not None and form.component_type_id not in allowed_components:
        raise DashboardValidationError(
            "Dashboard form is invalid",
            validation_errors=[{
                "field": "component_type_id",
                "label": f"{VALIDATION_ATTRIBUTES_PREFIX}component_type_id",
                "message": f"unknown dashboard component '{form.component_type_id}'",
            }],
        )
    return form
