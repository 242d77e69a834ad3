from ninja_to_soong.models.edge import BuildEdge, LinkLibraries, Rule, RuleCommand, RuleKind
from ninja_to_soong.models.module import PropKind, SoongModule, prop_kind
from ninja_to_soong.models.package import SoongPackage

__all__ = [
    "BuildEdge",
    "LinkLibraries",
    "PropKind",
    "Rule",
    "RuleCommand",
    "RuleKind",
    "SoongModule",
    "SoongPackage",
    "prop_kind",
]
