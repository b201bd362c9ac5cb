"""cc-dispatch: argument classification and remote-eligibility decisions for distributed compilation."""

__version__ = "0.1.0"

from cc_dispatch.api import ArgumentClassifier, classify_argv
from cc_dispatch.config import Settings
from cc_dispatch.models.job import (
    Argument,
    ArgumentType,
    ClassificationResult,
    CompileJob,
    Language,
)
from cc_dispatch.rules import Rule, RuleTable, create_default_table

__all__ = [
    "Argument",
    "ArgumentClassifier",
    "ArgumentType",
    "ClassificationResult",
    "CompileJob",
    "Language",
    "Rule",
    "RuleTable",
    "Settings",
    "classify_argv",
    "create_default_table",
]
