"""SAT bridge — solver interface, backends and semantics encodings."""
from .encoder import FrameworkEncoding, SatExtensionSolver
from .solver import (
    DimacsSolver,
    PySatSolver,
    SatSolver,
    parse_competition_output,
    to_dimacs,
)

__all__ = [
    "FrameworkEncoding",
    "SatExtensionSolver",
    "DimacsSolver",
    "PySatSolver",
    "SatSolver",
    "parse_competition_output",
    "to_dimacs",
]
