from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

# Generator factories build a ClientGenerator from a PipelineConfig
GeneratorFactory = Callable[..., object]


class GeneratorRegistry:
    _registry: Dict[str, GeneratorFactory] = {}

    @classmethod
    def register(cls, name: str, factory: GeneratorFactory) -> None:
        cls._registry[name] = factory

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._registry.pop(name, None)

    @classmethod
    def get(cls, name: str) -> Optional[GeneratorFactory]:
        return cls._registry.get(name)

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(sorted(cls._registry.keys()))


# Bootstrap built-ins so the default config works out-of-the-box
def _bootstrap_defaults() -> None:
    from idl_pilot.adapters.anchorpy.adapter import AnchorPyGenerator
    from idl_pilot.adapters.command.adapter import CommandGenerator

    GeneratorRegistry.register("command", lambda cfg: CommandGenerator(cfg.generator_command))
    GeneratorRegistry.register("anchorpy", lambda cfg: AnchorPyGenerator())


_bootstrap_defaults()
