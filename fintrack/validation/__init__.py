"""Validation package."""

from fintrack.validation.validator import AMOUNT_EPSILON, RecordValidator

__all__ = ["AMOUNT_EPSILON", "RecordValidator"]
