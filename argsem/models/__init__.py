"""
models — Configuration and exchange schemas

These Pydantic models are the contract with collaborators outside the
core: parsers hand frameworks in as ``FrameworkDocument``s, writers and
services take ``ReasoningResult``s out. ``ReasonerConfig`` carries the
strategy and SAT backend selection explicitly into every ``Reasoner``.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator


# ── Enums ────────────────────────────────────────────────────────

class Strategy(str, Enum):
    BRUTE_FORCE = "brute_force"
    SAT = "sat"


class SatBackend(str, Enum):
    PYSAT = "pysat"
    DIMACS = "dimacs"


class AcceptanceMode(str, Enum):
    CREDULOUS = "credulous"
    SCEPTICAL = "sceptical"


class AcceptanceStatus(str, Enum):
    """Ternary answer: in every extension, in some, or in none."""
    ACCEPTED = "accepted"
    UNDECIDED = "undecided"
    REJECTED = "rejected"


# ── Configuration ────────────────────────────────────────────────

DEFAULT_STRATEGY = Strategy.BRUTE_FORCE
DEFAULT_SAT_BACKEND = SatBackend.PYSAT
DEFAULT_SAT_SOLVER = "minisat22"
DEFAULT_BRUTE_FORCE_WARN = 20


class ReasonerConfig(BaseModel):
    strategy: Strategy = DEFAULT_STRATEGY
    sat_backend: SatBackend = DEFAULT_SAT_BACKEND
    sat_solver: str = DEFAULT_SAT_SOLVER
    sat_binary: Optional[str] = None
    sat_binary_args: list[str] = Field(default_factory=list)
    sat_timeout: Optional[float] = Field(default=None, gt=0)
    brute_force_warn_threshold: int = Field(default=DEFAULT_BRUTE_FORCE_WARN, ge=0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReasonerConfig":
        """
        Read ARGSEM_STRATEGY, ARGSEM_SAT_BACKEND, ARGSEM_SAT_SOLVER,
        ARGSEM_SAT_BINARY, ARGSEM_SAT_ARGS (space separated) and
        ARGSEM_BRUTE_FORCE_WARN; unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        values: dict = {}
        if env.get("ARGSEM_STRATEGY"):
            values["strategy"] = env["ARGSEM_STRATEGY"]
        if env.get("ARGSEM_SAT_BACKEND"):
            values["sat_backend"] = env["ARGSEM_SAT_BACKEND"]
        if env.get("ARGSEM_SAT_SOLVER"):
            values["sat_solver"] = env["ARGSEM_SAT_SOLVER"]
        if env.get("ARGSEM_SAT_BINARY"):
            values["sat_binary"] = env["ARGSEM_SAT_BINARY"]
        if env.get("ARGSEM_SAT_ARGS"):
            values["sat_binary_args"] = env["ARGSEM_SAT_ARGS"].split()
        if env.get("ARGSEM_BRUTE_FORCE_WARN"):
            values["brute_force_warn_threshold"] = env["ARGSEM_BRUTE_FORCE_WARN"]
        return cls(**values)


# ── Framework documents ──────────────────────────────────────────

class AttackRecord(BaseModel):
    attackers: list[str] = Field(..., min_length=1)
    target: str

    @field_validator("attackers", mode="before")
    @classmethod
    def single_attacker(cls, v):
        if isinstance(v, str):
            return [v]
        return v


class FrameworkDocument(BaseModel):
    """
    Serialised framework: argument names plus attacks. An attack may be
    given as a record or as a plain ``[attacker, target]`` pair.
    """
    arguments: list[str] = Field(default_factory=list)
    attacks: list[AttackRecord] = Field(default_factory=list)

    @field_validator("arguments")
    @classmethod
    def validate_names(cls, v: list[str]) -> list[str]:
        if any(not name for name in v):
            raise ValueError("Argument names must be non-empty")
        if len(set(v)) != len(v):
            raise ValueError("Argument names must be unique")
        return v

    @field_validator("attacks", mode="before")
    @classmethod
    def pairs_to_records(cls, v):
        records = []
        for item in v or []:
            if isinstance(item, (list, tuple)):
                if len(item) != 2:
                    raise ValueError(f"Attack pair needs two entries: {item!r}")
                item = {"attackers": item[0], "target": item[1]}
            records.append(item)
        return records


# ── Results ──────────────────────────────────────────────────────

class ExtensionRecord(BaseModel):
    semantics: str
    arguments: list[str] = Field(default_factory=list)


class ReasoningResult(BaseModel):
    semantics: str
    strategy: Strategy
    extensions: list[ExtensionRecord] = Field(default_factory=list)
    framework_summary: dict = Field(default_factory=dict)
    resolution_time_ms: float = 0.0

    @property
    def count(self) -> int:
        return len(self.extensions)


class AcceptanceResult(BaseModel):
    argument: str
    semantics: str
    mode: AcceptanceMode
    accepted: bool
    strategy: Strategy
    resolution_time_ms: float = 0.0
