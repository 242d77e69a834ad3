"""Run the upstream build-configuration tools that produce build.ninja."""

from __future__ import annotations

import logging
import subprocess

from ninja_to_soong.core.config import get_settings
from ninja_to_soong.exceptions import ConfigureError

logger = logging.getLogger(__name__)

ANDROID_ABI = "arm64-v8a"
ANDROID_CPU = "arm64"
ANDROID_PLATFORM = "35"


def run_tool(args: list[str], cwd: str | None = None) -> subprocess.CompletedProcess:
    """Run an external tool, raising ConfigureError when it fails."""
    logger.info("Running: %s", " ".join(args))
    try:
        return subprocess.run(
            args,
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise ConfigureError(f"{args[0]} not found: {e}") from e
    except subprocess.CalledProcessError as e:
        raise ConfigureError(f"{args[0]} failed with exit code {e.returncode}:\n{e.stderr}") from e


def cmake_configure(src_path: str, build_path: str, ndk_path: str = "", args: list[str] | None = None) -> bool:
    """Configure a CMake project for Android with the Ninja generator.

    Returns False when skipped through N2S_SKIP_GEN_NINJA.
    """
    if get_settings().skip_gen_ninja:
        logger.info("Skipping cmake configure of %s", src_path)
        return False
    command = ["cmake", "-B", build_path, "-S", src_path, "-G", "Ninja", "-DCMAKE_BUILD_TYPE=Release"]
    if ndk_path:
        command += [
            f"-DCMAKE_TOOLCHAIN_FILE={ndk_path}/build/cmake/android.toolchain.cmake",
            f"-DANDROID_ABI={ANDROID_ABI}",
            f"-DANDROID_PLATFORM={ANDROID_PLATFORM}",
        ]
    run_tool(command + list(args or []))
    return True


def meson_setup(src_path: str, build_path: str, args: list[str] | None = None) -> bool:
    if get_settings().skip_gen_ninja:
        logger.info("Skipping meson setup of %s", src_path)
        return False
    run_tool(["meson", "setup", "--reconfigure", build_path, src_path] + list(args or []))
    return True


def gn_gen(src_path: str, build_path: str, args: list[str] | None = None) -> bool:
    """Run ``gn gen`` from the source tree with ``target_os="android"``."""
    if get_settings().skip_gen_ninja:
        logger.info("Skipping gn gen of %s", src_path)
        return False
    gn_args = ['target_os="android"', f'target_cpu="{ANDROID_CPU}"'] + list(args or [])
    run_tool(["gn", "gen", build_path, f"--args={' '.join(gn_args)}"], cwd=src_path)
    return True


def ninja_build(build_path: str, targets: list[str]) -> bool:
    """Build *targets* so that generated files exist before they are copied."""
    if get_settings().skip_build or not targets:
        logger.info("Skipping ninja build in %s", build_path)
        return False
    run_tool(["ninja", "-C", build_path] + list(targets))
    return True


def configure(
    generator: str,
    src_path: str,
    build_path: str,
    ndk_path: str = "",
    args: list[str] | None = None,
) -> bool:
    if generator == "cmake":
        return cmake_configure(src_path, build_path, ndk_path, args)
    if generator == "meson":
        return meson_setup(src_path, build_path, args)
    if generator == "gn":
        return gn_gen(src_path, build_path, args)
    raise ConfigureError(f"no configure step for generator '{generator}'")
