"""Module generation engine: walk the target graph and emit Soong modules."""

from __future__ import annotations

from typing import Iterable

import structlog

from ninja_to_soong.adapters.base import NinjaTarget
from ninja_to_soong.exceptions import GraphError
from ninja_to_soong.generator.command import parse_copy_command, rewrite_command
from ninja_to_soong.models.edge import BuildEdge, RuleCommand, RuleKind
from ninja_to_soong.models.module import SoongModule
from ninja_to_soong.models.package import SoongPackage
from ninja_to_soong.ninja.graph import TargetGraph
from ninja_to_soong.paths import (
    canonicalize_path,
    file_ext,
    file_stem,
    is_under,
    path_to_id,
    strip_prefix,
)
from ninja_to_soong.project import ModuleRequest, Project

log = structlog.get_logger("ninja_to_soong.engine")

OBJECT_MODULE_TYPES = {
    RuleKind.SHARED_LIBRARY: "cc_library_shared",
    RuleKind.STATIC_LIBRARY: "cc_library_static",
    RuleKind.BINARY: "cc_binary",
}


class ModuleGenerator:
    """
    Turns the edges reachable from a set of requests into Soong modules.
    One instance per package; not reusable across runs because it records
    the generated dependencies and libraries it encounters.
    """

    def __init__(
        self,
        adapter: type[NinjaTarget],
        graph: TargetGraph,
        project: Project,
        src_path: str,
        build_path: str,
        ndk_path: str = "",
        requests: Iterable[ModuleRequest] = (),
    ) -> None:
        self.adapter = adapter
        self.graph = graph
        self.project = project
        self.src_path = src_path.rstrip("/")
        self.build_path = build_path.rstrip("/")
        self.ndk_path = ndk_path.rstrip("/")
        requests = list(requests)
        self.frontier = sorted(r.path for r in requests)
        self.requests = {self._build_rel(r.path): r for r in requests}
        self.deps: list[str] = []
        self.libs: list[str] = []

    # --- naming -----------------------------------------------------------

    def _build_rel(self, path: str) -> str:
        """Build-relative form of a ninja path (``./a/../b.so`` -> ``b.so``)."""
        return strip_prefix(canonicalize_path(path, self.build_path), self.build_path)

    def _src_rel(self, path: str) -> str:
        return strip_prefix(canonicalize_path(path, self.build_path), self.src_path)

    def module_name(self, path: str) -> str:
        request = self.requests.get(self._build_rel(path))
        if request is not None and request.name:
            return request.name
        return path_to_id(f"{self.project.get_name()}/{self._build_rel(path)}")

    def edge_module_name(self, edge: BuildEdge) -> str:
        return self.module_name(edge.outputs[0])

    def _module_type(self, edge: BuildEdge, default: str) -> str:
        request = self.requests.get(self._build_rel(edge.outputs[0]))
        if request is not None and request.module_type:
            return request.module_type
        return self.project.map_module_name(edge.outputs[0], default)

    # --- traversal --------------------------------------------------------

    def filter_target(self, edge: BuildEdge) -> bool:
        target = edge.outputs[0]
        if self.ndk_path and is_under(canonicalize_path(target, self.build_path), self.ndk_path):
            return False
        return self.project.filter_target(target)

    def generate(self) -> list[SoongModule]:
        modules: list[SoongModule] = []

        def visit(edge: BuildEdge) -> bool:
            if not self.filter_target(edge):
                log.debug("engine.target_filtered", target=edge.outputs[0])
                return False
            target = self.adapter(edge)
            rule = target.get_rule()
            if rule.kind in OBJECT_MODULE_TYPES:
                modules.append(self.generate_object(OBJECT_MODULE_TYPES[rule.kind], target))
            elif rule.kind is RuleKind.CUSTOM_COMMAND:
                if rule.command is None:
                    log.debug("engine.self_reconfiguration_skipped", target=edge.outputs[0])
                    return False
                modules.append(self.generate_custom_command(target, rule.command))
            elif rule.kind is RuleKind.SYMBOLIC_LINK:
                modules.append(self.generate_simple_genrule(target, symlink=True))
            elif rule.kind is RuleKind.UNCLASSIFIED:
                raise GraphError(f"unsupported rule '{edge.rule}'", edge)
            return True

        visited = self.graph.traverse_from(self.frontier, visit)
        log.info(
            "engine.generated",
            project=self.project.get_name(),
            requests=len(self.frontier),
            edges_visited=len(visited),
            modules=len(modules),
        )
        return modules

    # --- property helpers -------------------------------------------------

    def _sources(self, sources: list[str]) -> list[str]:
        result = []
        for source in sources:
            if not self.project.filter_source(source):
                continue
            if is_under(source, self.build_path):
                self.deps.append(strip_prefix(source, self.build_path))
            result.append(strip_prefix(source, self.src_path))
        return result

    def _includes(self, includes: list[str]) -> list[str]:
        return [strip_prefix(inc, self.src_path) for inc in includes if self.project.filter_include(inc)]

    def _defines(self, defines: list[str]) -> list[str]:
        return [f"-D{define}" for define in defines if self.project.filter_define(define)]

    def _cflags(self, cflags: list[str]) -> list[str]:
        return [flag for flag in cflags if self.project.filter_cflag(flag)]

    def _link_flags(self, flags: list[str]) -> list[str]:
        return [flag for flag in flags if self.project.filter_link_flag(flag)]

    def _libs(self, libs: list[str], module_name: str) -> list[str]:
        names = []
        for lib in libs:
            if not self.project.filter_lib(lib):
                continue
            if "/" not in lib and lib.startswith("lib") and not file_ext(lib):
                name = lib
            elif self.ndk_path and is_under(canonicalize_path(lib, self.build_path), self.ndk_path):
                name = file_stem(lib)
            else:
                rel = self._build_rel(lib)
                mapped = self.project.map_lib(rel)
                name = mapped if mapped is not None else self.module_name(rel)
                if name == module_name:
                    continue
                if mapped is None:
                    self.libs.append(rel)
            if name != module_name:
                names.append(name)
        return names

    def _generated_headers(self, edge: BuildEdge) -> list[str]:
        outputs: list[str] = []

        def collect(node: BuildEdge) -> bool:
            rule = self.adapter(node).get_rule()
            if rule.kind is RuleKind.CUSTOM_COMMAND:
                if rule.command is None:
                    return False
                outputs.extend(node.outputs)
            return True

        self.graph.traverse_from(edge.outputs, collect)

        names = []
        for header in outputs:
            if not self.project.filter_gen_header(header):
                self.deps.append(self._build_rel(header))
                continue
            producer = self.graph.get(header)
            if producer is None:
                continue
            names.append(self.edge_module_name(producer))
        return sorted(set(names))

    # --- module builders --------------------------------------------------

    def generate_object(self, kind: str, target: NinjaTarget) -> SoongModule:
        """Build a cc_library_shared / cc_library_static / cc_binary module."""
        edge = target.edge
        target_path = edge.outputs[0]
        module_name = self.edge_module_name(edge)

        sources: list[str] = []
        includes: list[str] = []
        cflags: list[str] = []
        shared_libs: list[str] = []
        static_libs: list[str] = []
        whole_static_libs: list[str] = []

        def add_libs(node: NinjaTarget) -> None:
            libs = node.get_link_libraries()
            shared_libs.extend(self._libs(libs.shared, module_name))
            static_libs.extend(self._libs(libs.static, module_name))
            whole_static_libs.extend(self._libs(libs.static_whole, module_name))

        for input_path in edge.inputs:
            input_edge = self.graph.get(input_path)
            if input_edge is None:
                raise GraphError(f"unsupported input '{input_path}' for {kind}", edge)
            input_target = self.adapter(input_edge)
            add_libs(input_target)
            sources.extend(self._sources(input_target.get_sources(self.build_path)))
            includes.extend(self._includes(input_target.get_includes(self.build_path)))
            cflags.extend(self._defines(input_target.get_defines()))
            cflags.extend(self._cflags(input_target.get_cflags()))

        includes.extend(self._includes(target.get_includes(self.build_path)))
        cflags.extend(self._defines(target.get_defines()))
        cflags.extend(self._cflags(target.get_cflags()))
        cflags.extend(self.project.extend_cflags(target_path))

        generated_headers = self._generated_headers(edge)
        version_script, link_flags = target.get_link_flags()
        add_libs(target)
        shared_libs.extend(self.project.extend_shared_libs(target_path))

        request = self.requests.get(self._build_rel(target_path))
        stem = request.stem if request is not None and request.stem else self.project.get_target_stem(target_path)

        module = SoongModule(self._module_type(edge, kind)).add_prop("name", module_name)
        if stem:
            module.add_prop("stem", stem)
        if version_script:
            module.add_prop("version_script", self._src_rel(version_script))
        module.add_prop("srcs", sources)
        module.add_prop("cflags", cflags)
        module.add_prop("ldflags", self._link_flags(link_flags))
        module.add_prop("shared_libs", shared_libs)
        module.add_prop("static_libs", static_libs)
        module.add_prop("whole_static_libs", whole_static_libs)
        module.add_prop("local_include_dirs", includes)
        module.add_prop("header_libs", self.project.get_target_header_libs(target_path))
        module.add_prop("generated_headers", generated_headers)
        if self.project.optimize_target_for_size(target_path):
            module.add_prop("optimize_for_size", True)
        return self.project.extend_module(target_path, module)

    def _classify_command_inputs(self, inputs: list[str]) -> tuple[list[str], dict[str, str]]:
        """Split inputs into source files and references to other modules."""
        sources: list[str] = []
        deps: dict[str, str] = {}
        prefixes = [
            (canonicalize_path(prefix, self.build_path), dep) for prefix, dep in self.project.get_deps_prefix()
        ]
        for raw in inputs:
            path = canonicalize_path(raw, self.build_path)
            for prefix, dep in prefixes:
                if is_under(path, prefix):
                    deps[raw] = path_to_id(f"{dep}/{strip_prefix(path, prefix)}")
                    break
            else:
                if is_under(path, self.build_path):
                    rel = strip_prefix(path, self.build_path)
                    producer = self.graph.get(raw) or self.graph.get(rel)
                    deps[raw] = self.edge_module_name(producer) if producer else self.module_name(rel)
                    self.deps.append(rel)
                else:
                    sources.append(raw)
        return sources, deps

    def generate_custom_command(self, target: NinjaTarget, command: RuleCommand) -> SoongModule:
        """Build a cc_genrule, or a plain copy genrule for two-argument copies."""
        edge = target.edge
        if command.rsp_file is None and parse_copy_command(command.command) is not None:
            if len(edge.inputs) == 1 and len(edge.outputs) == 1:
                return self.generate_simple_genrule(target)

        raw_inputs = edge.inputs + edge.implicit_deps
        override = self.project.parse_custom_command_inputs(raw_inputs)
        if override is None:
            extra_srcs: list[str] = []
            source_inputs, deps = self._classify_command_inputs(raw_inputs)
        else:
            extra_srcs, source_inputs, deps = override

        inputs_map: dict[str, str] = {}
        for raw in source_inputs:
            rel = self._src_rel(raw)
            inputs_map[raw] = rel
            inputs_map[canonicalize_path(raw, self.build_path)] = rel
        deps_map: dict[str, str] = {}
        for raw, name in deps.items():
            deps_map[raw] = name
            deps_map[canonicalize_path(raw, self.build_path)] = name
            deps_map[self._build_rel(raw)] = name
        outputs_map = {
            self._build_rel(output): self.project.map_cmd_output(self._build_rel(output)) for output in edge.outputs
        }

        srcs = list(extra_srcs) + [inputs_map[raw] for raw in source_inputs]
        anchor = self.project.get_genrule_anchor()
        if anchor is None:
            anchor = next((src for src in srcs if "/" not in src), None)

        cmd, used_anchor = rewrite_command(
            command,
            build_path=self.build_path,
            src_path=self.src_path,
            outputs=outputs_map,
            inputs=inputs_map,
            deps=deps_map,
            anchor=anchor,
        )
        if used_anchor is not None:
            srcs.append(used_anchor)
        srcs.extend(f":{name}" for name in deps.values())

        module = (
            SoongModule(self._module_type(edge, "cc_genrule"))
            .add_prop("name", self.edge_module_name(edge))
            .add_prop("cmd", cmd)
            .add_prop("srcs", srcs)
            .add_prop("out", list(outputs_map.values()))
        )
        return self.project.extend_module(edge.outputs[0], module)

    def generate_simple_genrule(self, target: NinjaTarget, symlink: bool = False) -> SoongModule:
        """Copy or symlink genrule: exactly one input and one output."""
        edge = target.edge
        action = "symlink" if symlink else "copy"
        if len(edge.inputs) != 1 or len(edge.outputs) != 1:
            raise GraphError(f"{action} needs exactly one input and one output", edge)
        input_path = edge.inputs[0]
        producer = self.graph.get(input_path)
        src = f":{self.edge_module_name(producer)}" if producer is not None else self._src_rel(input_path)
        out = self.project.map_cmd_output(self._build_rel(edge.outputs[0]))
        new_genrule = SoongModule.new_symlink_genrule if symlink else SoongModule.new_copy_genrule
        module = new_genrule(self.edge_module_name(edge), src, out)
        module.kind = self._module_type(edge, module.kind)
        return self.project.extend_module(edge.outputs[0], module)


def generate_package(
    edges: list[BuildEdge],
    adapter: type[NinjaTarget],
    project: Project,
    requests: Iterable[ModuleRequest],
    src_path: str,
    build_path: str,
    ndk_path: str = "",
    package: SoongPackage | None = None,
) -> SoongPackage:
    """Generate every module reachable from *requests* into a SoongPackage."""
    if package is None:
        package = SoongPackage(license_name=f"{project.get_name()}_license")
    generator = ModuleGenerator(
        adapter,
        TargetGraph(edges),
        project,
        src_path=src_path,
        build_path=build_path,
        ndk_path=ndk_path,
        requests=requests,
    )
    package.add_modules(generator.generate())
    package.gen_deps.extend(generator.deps)
    package.gen_libs.extend(generator.libs)
    return package
