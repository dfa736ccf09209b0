"""
modules/validation package — data quality guards on provider payloads and plan requests.
"""
from modules.validation.ingestion_validator import (
    PlanRequest,
    ValidationResult,
    validate_place,
    validate_plan_request,
    filter_valid,
)

__all__ = [
    "PlanRequest",
    "ValidationResult",
    "validate_place",
    "validate_plan_request",
    "filter_valid",
]
