from ninja_to_soong.ninja.graph import TargetGraph
from ninja_to_soong.ninja.parser import parse_build_ninja, parse_ninja_file, parse_ninja_text

__all__ = ["TargetGraph", "parse_build_ninja", "parse_ninja_file", "parse_ninja_text"]
