"""Package merger: fold per-architecture packages into one with ``arch`` overrides."""

from __future__ import annotations

import structlog

from ninja_to_soong.exceptions import PolicyViolation
from ninja_to_soong.models.module import PropKind, PropValue, SoongModule, prop_kind
from ninja_to_soong.models.package import SoongPackage

log = structlog.get_logger("ninja_to_soong.merger")


class PackageMerger:
    """
    Merge N architecture-specific packages describing the same modules.
    Values shared by every architecture are hoisted into the module itself;
    the rest stay under ``arch: { <arch>: { ... } }``.
    """

    @staticmethod
    def merge_props(
        name: str, values: list[tuple[str, PropValue | None]]
    ) -> tuple[PropValue | None, dict[str, PropValue]]:
        """Merge one property across architectures.

        Args:
            name: Property name (for error messages).
            values: (arch, value) pairs, value is None where the property is absent.

        Returns:
            (common value or None, {arch: arch-specific value})
        """
        present = [(arch, value) for arch, value in values if value is not None]
        kinds = {prop_kind(value) for _, value in present}
        if len(kinds) > 1:
            raise PolicyViolation(
                f"property '{name}' mixes kinds across architectures: "
                + ", ".join(sorted(kind.value for kind in kinds))
            )
        if not kinds:
            return None, {}
        kind = kinds.pop()

        if kind is PropKind.NESTED:
            raise PolicyViolation(f"cannot merge nested property '{name}'")

        if kind is PropKind.STR_SET:
            sets = [(arch, set(value or [])) for arch, value in values]
            common = set.intersection(*(s for _, s in sets))
            per_arch = {arch: sorted(s - common) for arch, s in sets if s - common}
            return sorted(common), per_arch

        # Bool and Str: hoisted only when every architecture has the same value.
        if len(present) == len(values) and len({value for _, value in present}) == 1:
            return present[0][1], {}
        return None, dict(present)

    @classmethod
    def merge_modules(cls, modules: list[tuple[str, SoongModule]]) -> SoongModule:
        kinds = {module.kind for _, module in modules}
        name = modules[0][1].name
        if len(kinds) != 1:
            raise PolicyViolation(f"module '{name}' has different types across architectures: {sorted(kinds)}")

        prop_names: list[str] = []
        for _, module in modules:
            for prop in module.prop_names():
                if prop not in prop_names:
                    prop_names.append(prop)

        merged = SoongModule(kinds.pop())
        arch_props: dict[str, dict[str, PropValue]] = {arch: {} for arch, _ in modules}
        for prop in prop_names:
            common, per_arch = cls.merge_props(prop, [(arch, module.get_prop(prop)) for arch, module in modules])
            if common is not None and common != []:
                merged.add_prop(prop, common)
            for arch, value in per_arch.items():
                arch_props[arch][prop] = value

        if any(arch_props.values()):
            merged.add_prop("arch", {arch: props for arch, props in arch_props.items() if props})
        return merged

    @classmethod
    def merge(cls, packages: list[tuple[str, SoongPackage]], merged: SoongPackage) -> SoongPackage:
        """Merge *packages* ((arch, package) pairs) into *merged*.

        Every module must exist in every architecture's package.
        """
        if not packages:
            raise ValueError("No packages to merge")

        names = sorted({name for _, package in packages for name in package.module_names()})
        for name in names:
            modules = []
            for arch, package in packages:
                module = package.get_module(name)
                if module is None:
                    raise PolicyViolation(f"module '{name}' is missing for architecture '{arch}'")
                modules.append((arch, module))
            merged.add_module(cls.merge_modules(modules))

        for _, package in packages:
            merged.gen_deps.extend(package.gen_deps)
            merged.gen_libs.extend(package.gen_libs)

        log.info("merger.merged", archs=[arch for arch, _ in packages], modules=len(names))
        return merged
