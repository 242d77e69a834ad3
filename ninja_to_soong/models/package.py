"""SoongPackage: the modules of one Android.bp file plus its package/license blocks."""

from __future__ import annotations

import logging
from pathlib import Path

from ninja_to_soong.exceptions import ConverterError
from ninja_to_soong.models.module import PropValue, SoongModule

logger = logging.getLogger(__name__)

BANNER = """//
// This file has been auto-generated by ninja-to-soong
//
// ******************************
// *** DO NOT MODIFY MANUALLY ***
// ******************************
//
"""


class SoongPackage:
    """Ordered collection of modules rendered as one blueprint file."""

    def __init__(
        self,
        license_name: str,
        license_kinds: list[str] | None = None,
        license_text: list[str] | None = None,
        default_visibility: list[str] | None = None,
    ) -> None:
        self.license_name = license_name
        self.license_kinds = list(license_kinds or [])
        self.license_text = list(license_text or [])
        self.visibility = list(default_visibility or [])
        self.modules: list[SoongModule] = []
        self.raw_prefix = ""
        self.raw_suffix = ""
        self.gen_deps: list[str] = []
        self.gen_libs: list[str] = []

    def add_module(self, module: SoongModule) -> SoongPackage:
        self.modules.append(module)
        return self

    def add_modules(self, modules: list[SoongModule]) -> SoongPackage:
        self.modules.extend(modules)
        return self

    def add_visibilities(self, visibilities: list[str]) -> SoongPackage:
        self.visibility.extend(visibilities)
        return self

    def get_module(self, name: str) -> SoongModule | None:
        for module in self.modules:
            if module.name == name:
                return module
        return None

    def pop_module(self, name: str) -> SoongModule | None:
        for idx, module in enumerate(self.modules):
            if module.name == name:
                return self.modules.pop(idx)
        return None

    def module_names(self) -> list[str]:
        return [module.name for module in self.modules if module.name is not None]

    def get_props(self, module_name: str, props: list[str]) -> dict[str, PropValue]:
        """Return the requested properties of a module, skipping absent ones."""
        module = self.get_module(module_name)
        if module is None:
            raise ConverterError(f"could not find module '{module_name}'")
        return {prop: module.props[prop] for prop in props if prop in module.props}

    def get_gen_deps(self) -> list[str]:
        return sorted(set(self.gen_deps))

    def get_gen_libs(self) -> list[str]:
        return sorted(set(self.gen_libs))

    def _header_modules(self) -> list[SoongModule]:
        package = SoongModule("package")
        package.add_prop("default_visibility", sorted(set(self.visibility)))
        package.add_prop("default_applicable_licenses", [self.license_name])
        license_module = (
            SoongModule("license")
            .add_prop("name", self.license_name)
            .add_prop("visibility", [":__subpackages__"])
            .add_prop("license_kinds", self.license_kinds)
            .add_prop("license_text", self.license_text)
        )
        return [package, license_module]

    def render(self) -> str:
        parts = [BANNER, self.raw_prefix]
        for module in self._header_modules() + self.modules:
            parts.append("\n")
            parts.append(module.render())
        parts.append(self.raw_suffix)
        return "".join(parts)

    def write(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render())
        logger.info("Wrote %d modules to %s", len(self.modules), path)
        return path
