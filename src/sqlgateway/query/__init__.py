"""Query pipeline for SQLGateway.

Stages, in the order a natural-language request passes through them:
    1. Prompt Builder - Renders live schema and fixed rules into a prompt
    2. Sanitizer - Recovers one bare statement from generated text
    3. Validator - Safety gate plus keyword classification
    4. Executor - Runs the statement and shapes the result

Literal SQL skips the first two stages.
"""

from sqlgateway.query.executor import QueryExecutor
from sqlgateway.query.prompt import PromptBuilder
from sqlgateway.query.sanitizer import clean
from sqlgateway.query.validator import (
    QuerySafetyGate,
    QueryValidator,
    ValidationResult,
    classify,
)

__all__ = [
    "PromptBuilder",
    "clean",
    "QuerySafetyGate",
    "QueryValidator",
    "ValidationResult",
    "classify",
    "QueryExecutor",
]
