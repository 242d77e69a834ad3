"""ninja-to-soong: translate ninja build graphs into Android.bp modules."""

from ninja_to_soong.exceptions import ConverterError
from ninja_to_soong.generator import ModuleGenerator, generate_package
from ninja_to_soong.merger import PackageMerger
from ninja_to_soong.models import SoongModule, SoongPackage
from ninja_to_soong.project import ModuleRequest, Project

__version__ = "0.1.0"

__all__ = [
    "ConverterError",
    "ModuleGenerator",
    "ModuleRequest",
    "PackageMerger",
    "Project",
    "SoongModule",
    "SoongPackage",
    "generate_package",
]
