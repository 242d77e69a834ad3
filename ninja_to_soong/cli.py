"""CLI entry point: ninja-to-soong.

Subcommands:
    ninja-to-soong create-project -o project.json    # Generate project file template
    ninja-to-soong parse out/ --generator cmake      # Summarize a build.ninja
    ninja-to-soong run project.json                  # Generate Android.bp from a project file
"""

from __future__ import annotations

import json
import sys
from collections import Counter
from pathlib import Path

import click

from ninja_to_soong.adapters.registry import get_adapter, list_adapters
from ninja_to_soong.configure import configure, ninja_build
from ninja_to_soong.core.logging import setup_logging
from ninja_to_soong.exceptions import ConverterError
from ninja_to_soong.gen_deps import copy_gen_deps, write_gen_deps
from ninja_to_soong.generator import generate_package
from ninja_to_soong.merger import PackageMerger
from ninja_to_soong.models.package import SoongPackage
from ninja_to_soong.ninja.parser import parse_build_ninja
from ninja_to_soong.project_config import ConfigProject, ProjectConfig

GEN_DEPS_FILE = "generated_deps.txt"

_PROJECT_TEMPLATE = {
    "name": "example",
    "generator": "cmake",
    "src_path": "./src",
    "build_path": "./out",
    "ndk_path": "",
    "targets": [
        {"path": "libexample.so"},
    ],
    "license": {
        "kinds": ["SPDX-license-identifier-Apache-2.0"],
        "texts": ["LICENSE"],
    },
    "visibility": [],
    "ignore_targets": [],
    "ignore_cflags": [],
    "lib_map": {},
    "output": "Android.bp",
}


def _new_package(config: ProjectConfig) -> SoongPackage:
    return SoongPackage(
        license_name=config.license.name or f"{config.name}_license",
        license_kinds=config.license.kinds,
        license_text=config.license.texts,
        default_visibility=config.visibility,
    )


def build_package(config: ProjectConfig, run_configure: bool = False) -> SoongPackage:
    """Generate the package described by *config*, merging architectures if needed."""
    adapter = get_adapter(config.generator)
    project = ConfigProject(config)
    requests = config.requests()

    packages: list[tuple[str | None, SoongPackage]] = []
    for arch, build_path in config.build_paths():
        if run_configure:
            args = config.configure.args if config.configure else []
            configure(config.generator, config.src_path, build_path, config.ndk_path, args)
        edges = parse_build_ninja(build_path, indent=adapter.indent)
        package = _new_package(config) if arch is None else SoongPackage(license_name="")
        generate_package(
            edges,
            adapter,
            project,
            requests,
            src_path=config.src_path,
            build_path=build_path,
            ndk_path=config.ndk_path,
            package=package,
        )
        if run_configure:
            ninja_build(build_path, package.get_gen_deps())
        packages.append((arch, package))

    if len(packages) == 1 and packages[0][0] is None:
        return packages[0][1]
    return PackageMerger.merge([(arch, package) for arch, package in packages], _new_package(config))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """ninja-to-soong: generate Android.bp files from ninja build graphs."""
    setup_logging(level="DEBUG" if verbose else None)


@main.command("create-project")
@click.option("-o", "--output", default="project.json", help="Output file path")
def create_project(output: str) -> None:
    """Generate a project file template."""
    Path(output).write_text(json.dumps(_PROJECT_TEMPLATE, indent=2) + "\n")
    click.echo(f"Project template written to {output}")
    click.echo("Edit the file, then run: ninja-to-soong run " + output)


@main.command("parse")
@click.argument("build_dir", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--generator",
    required=True,
    type=click.Choice(list_adapters()),
    help="Tool that generated build.ninja",
)
def parse(build_dir: str, generator: str) -> None:
    """Parse BUILD_DIR/build.ninja and print edge counts per rule kind."""
    adapter = get_adapter(generator)
    try:
        edges = parse_build_ninja(build_dir, indent=adapter.indent)
        counts = Counter(adapter(edge).get_rule().kind.value for edge in edges)
    except ConverterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Edges: {len(edges)}")
    for kind, count in sorted(counts.items()):
        click.echo(f"  {kind}: {count}")


@main.command("run")
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", default=None, help="Blueprint path (overrides the project file)")
@click.option("--copy-deps", default=None, help="Copy generated dependencies into this directory")
@click.option("--configure/--no-configure", "run_configure", default=False, help="Run the configure step first")
def run(project_file: str, output: str | None, copy_deps: str | None, run_configure: bool) -> None:
    """Generate an Android.bp from a project file."""
    try:
        config = ProjectConfig.load(project_file)
        package = build_package(config, run_configure=run_configure)
    except ConverterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    blueprint = package.write(output or config.output)
    gen_deps = package.get_gen_deps()
    write_gen_deps(blueprint.parent / GEN_DEPS_FILE, gen_deps)

    click.echo(f"Wrote {len(package.modules)} modules to {blueprint}")
    click.echo(f"Generated dependencies: {len(gen_deps)}")

    if copy_deps:
        build_paths = [path for _, path in config.build_paths()]
        copied = copy_gen_deps(gen_deps, build_paths[0], copy_deps)
        click.echo(f"Copied {len(copied)} generated dependencies to {copy_deps}")
