"""Adapter registry: generator name -> adapter class."""

from __future__ import annotations

import logging

from ninja_to_soong.adapters.base import NinjaTarget
from ninja_to_soong.adapters.cmake import CmakeNinjaTarget
from ninja_to_soong.adapters.gn import GnNinjaTarget
from ninja_to_soong.adapters.meson import MesonNinjaTarget

logger = logging.getLogger(__name__)

_ADAPTERS: dict[str, type[NinjaTarget]] = {}


def register_adapter(adapter: type[NinjaTarget]) -> None:
    _ADAPTERS[adapter.name] = adapter
    logger.debug("Registered adapter: %s", adapter.name)


def get_adapter(name: str) -> type[NinjaTarget]:
    """Return the adapter class for a generator name (``cmake``, ``meson``, ``gn``)."""
    try:
        return _ADAPTERS[name]
    except KeyError:
        raise ValueError(f"unknown generator '{name}' (expected one of: {', '.join(list_adapters())})") from None


def list_adapters() -> list[str]:
    return sorted(_ADAPTERS)


for _adapter in (CmakeNinjaTarget, MesonNinjaTarget, GnNinjaTarget):
    register_adapter(_adapter)
