"""Formula mutation engine: resolve, plan, patch and validate a version bump."""

from .alias import AliasRename, AliasVersionSync
from .audit import AuditRunner
from .differ import FormulaDiff, FormulaDiffer
from .patcher import ApplyMode, PatchApplier, PatchResult
from .planner import ReplacementPlanBuilder
from .resolver import SpecUpdate, UpdateRequest, VersionSpecResolver
from .rules import MutationPlan, ReplacementRule
from .safety import SafetyCheck, VersionSafetyCheck

__all__ = [
    "AliasRename",
    "AliasVersionSync",
    "AuditRunner",
    "FormulaDiff",
    "FormulaDiffer",
    "ApplyMode",
    "PatchApplier",
    "PatchResult",
    "ReplacementPlanBuilder",
    "SpecUpdate",
    "UpdateRequest",
    "VersionSpecResolver",
    "MutationPlan",
    "ReplacementRule",
    "SafetyCheck",
    "VersionSafetyCheck",
]
