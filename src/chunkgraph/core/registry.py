"""
Module Registry.

Flattens the chunk/concatenation hierarchy into one path-keyed table so a
module can be found by ``file_name`` no matter which chunk or wrapper holds it.
The registry is built in a single phase and is read-only afterwards.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional

from .types import Chunk, Module

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """
    Read-only lookup of every module reachable from a set of chunks.

    Real modules (``Normal``/``External``) and concatenation wrappers are kept
    in separate indexes. Wrappers are never real modules; they are indexed
    only so that a reason pointing at one can be recognised and resolved.
    """

    def __init__(self, modules: Mapping[str, Module], wrappers: Mapping[str, Module]):
        self._modules: Mapping[str, Module] = MappingProxyType(dict(modules))
        self._wrappers: Mapping[str, Module] = MappingProxyType(dict(wrappers))

    @classmethod
    def build(cls, chunks: Iterable[Chunk]) -> "ModuleRegistry":
        """
        Depth-first walk over every chunk, descending into wrappers.

        First occurrence of a ``file_name`` wins. Modules without a
        ``file_name`` cannot be addressed and are skipped.
        """
        modules: Dict[str, Module] = {}
        wrappers: Dict[str, Module] = {}

        for chunk in chunks:
            if not chunk.id:
                continue
            stack = list(reversed(chunk.modules))
            while stack:
                module = stack.pop()
                if module.is_concatenated:
                    if module.file_name and module.file_name not in wrappers:
                        wrappers[module.file_name] = module
                    stack.extend(reversed(module.sub_modules))
                    continue
                if not module.file_name:
                    logger.debug(f"Skipping unnamed module {module.id!r} in chunk {chunk.id}")
                    continue
                if module.file_name not in modules:
                    modules[module.file_name] = module

        collisions = modules.keys() & wrappers.keys()
        if collisions:
            logger.warning(
                f"{len(collisions)} path(s) name both a module and a concatenation wrapper: "
                f"{sorted(collisions)[:5]}"
            )

        return cls(modules, wrappers)

    @property
    def modules(self) -> Mapping[str, Module]:
        return self._modules

    @property
    def wrappers(self) -> Mapping[str, Module]:
        return self._wrappers

    def get(self, file_name: str) -> Optional[Module]:
        """Real module by path, or None."""
        return self._modules.get(file_name)

    def lookup(self, file_name: str) -> Optional[Module]:
        """Real module or concatenation wrapper by path, real modules first."""
        module = self._modules.get(file_name)
        if module is None:
            module = self._wrappers.get(file_name)
        return module

    def is_wrapper(self, file_name: str) -> bool:
        return file_name not in self._modules and file_name in self._wrappers

    def __contains__(self, file_name: object) -> bool:
        return file_name in self._modules

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)
