from ninja_to_soong.adapters.base import NinjaTarget
from ninja_to_soong.adapters.cmake import CmakeNinjaTarget
from ninja_to_soong.adapters.gn import GnNinjaTarget
from ninja_to_soong.adapters.meson import MesonNinjaTarget
from ninja_to_soong.adapters.registry import get_adapter, list_adapters, register_adapter

__all__ = [
    "CmakeNinjaTarget",
    "GnNinjaTarget",
    "MesonNinjaTarget",
    "NinjaTarget",
    "get_adapter",
    "list_adapters",
    "register_adapter",
]
