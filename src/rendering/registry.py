"""Name-based lookup of transform stage factories."""

import logging
from typing import Dict, List

from .errors import StageNotFoundError
from .stages import (
    StageFactory,
    external_links_stage,
    heading_links_stage,
    lazy_images_stage,
)

logger = logging.getLogger(__name__)


class StageRegistry:
    """Maps stage names to stage factories.

    Example:
        >>> registry = StageRegistry()
        >>> registry.register("shout", shout_stage)
        >>> factory = registry.get("shout")
    """

    def __init__(self):
        self._factories: Dict[str, StageFactory] = {}

    def register(self, name: str, factory: StageFactory) -> None:
        if name in self._factories:
            logger.debug(f"Replacing transform stage '{name}'")
        self._factories[name] = factory

    def get(self, name: str) -> StageFactory:
        """Return the factory registered under a name.

        Raises:
            StageNotFoundError: If no factory has that name
        """
        try:
            return self._factories[name]
        except KeyError:
            raise StageNotFoundError(name) from None

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories


default_registry = StageRegistry()
default_registry.register('external-links', external_links_stage)
default_registry.register('lazy-images', lazy_images_stage)
default_registry.register('heading-links', heading_links_stage)
