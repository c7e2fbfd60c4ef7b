"""argsem — extension-based semantics for abstract argumentation frameworks."""
from .argumentation import (
    Argument,
    ArgumentationError,
    ArgumentationFramework,
    Attack,
    CancellationToken,
    CancelledError,
    Extension,
    FrameworkBridge,
    InvalidReferenceError,
    Label,
    Labelling,
    Semantics,
    SemanticsEngine,
    SolverResourceError,
    SubsetEnumerator,
    UnsupportedConfigurationError,
)
from .models import (
    AcceptanceMode,
    AcceptanceStatus,
    FrameworkDocument,
    ReasonerConfig,
    ReasoningResult,
    SatBackend,
    Strategy,
)
from .reasoner import Reasoner, accepts, extensions

__version__ = "0.1.0"

__all__ = [
    "Argument",
    "ArgumentationError",
    "ArgumentationFramework",
    "Attack",
    "CancellationToken",
    "CancelledError",
    "Extension",
    "FrameworkBridge",
    "InvalidReferenceError",
    "Label",
    "Labelling",
    "Semantics",
    "SemanticsEngine",
    "SolverResourceError",
    "SubsetEnumerator",
    "UnsupportedConfigurationError",
    "AcceptanceMode",
    "AcceptanceStatus",
    "FrameworkDocument",
    "ReasonerConfig",
    "ReasoningResult",
    "SatBackend",
    "Strategy",
    "Reasoner",
    "accepts",
    "extensions",
]
