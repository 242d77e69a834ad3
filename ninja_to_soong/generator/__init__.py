from ninja_to_soong.generator.engine import ModuleGenerator, generate_package

__all__ = ["ModuleGenerator", "generate_package"]
