"""Argumentation core — frameworks, semantics, brute-force engine."""
from .bridge import FrameworkBridge
from .engine import SemanticsEngine
from .errors import (
    ArgumentationError,
    CancellationToken,
    CancelledError,
    InvalidReferenceError,
    SolverResourceError,
    UnsupportedConfigurationError,
)
from .models import (
    Argument,
    ArgumentationFramework,
    Attack,
    Extension,
    Label,
    Labelling,
    Semantics,
)
from .subsets import SubsetEnumerator

__all__ = [
    "FrameworkBridge",
    "SemanticsEngine",
    "SubsetEnumerator",
    "ArgumentationError",
    "CancellationToken",
    "CancelledError",
    "InvalidReferenceError",
    "SolverResourceError",
    "UnsupportedConfigurationError",
    "Argument",
    "ArgumentationFramework",
    "Attack",
    "Extension",
    "Label",
    "Labelling",
    "Semantics",
]
