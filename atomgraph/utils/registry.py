"""
Registry pattern for atomgraph.
Maps names to factories so components can be chosen by name from config
or the command line. Registries are plain objects: create one, fill it,
pass it to whoever needs it.
"""

from typing import Any, Callable, Dict, List
import logging

logger = logging.getLogger(__name__)


class Registry:
    """
    A named store of factories (classes or functions).
    """
    def __init__(self, name: str):
        self.name = name
        self._registry: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str, factory: Callable[..., Any] = None) -> Callable:
        """
        Register ``factory`` under ``name``; usable as a decorator.
        Usage:
            @features.register("Block")
            class BlockDescriptor:
                pass
        """
        def inner_wrapper(wrapped: Callable[..., Any]) -> Callable[..., Any]:
            if name in self._registry:
                logger.warning(f"Overwriting existing registration for '{name}' in {self.name} registry.")
            self._registry[name] = wrapped
            return wrapped

        if factory is not None:
            return inner_wrapper(factory)
        return inner_wrapper

    def get(self, name: str) -> Callable[..., Any]:
        """
        Retrieve a factory by name.
        """
        if name not in self._registry:
            raise KeyError(f"'{name}' not found in {self.name} registry. Available: {self.names()}")
        return self._registry[name]

    def build(self, name: str, **kwargs) -> Any:
        """
        Call a registered factory with provided kwargs.
        """
        factory = self.get(name)
        return factory(**kwargs)

    def names(self) -> List[str]:
        return list(self._registry.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._registry

    def __len__(self) -> int:
        return len(self._registry)
