"""Resolution of configured generator tables."""

import importlib
import logging
from typing import Mapping

from .sync.errors import ConfigError
from .sync.protocols import GeneratorFn

__all__ = ["load_generator", "load_generators"]

logger = logging.getLogger(__name__)


def load_generator(path: str) -> GeneratorFn:
    """Import a generator from a ``"package.module:function"`` path.

    Raises:
        ConfigError: If the path is malformed or does not name a callable
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Generator path '{path}' must look like 'package.module:function'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Could not import generator module '{module_name}': {e}") from e

    target = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigError(f"Generator '{path}' not found: {e}") from e
    if not callable(target):
        raise ConfigError(f"Generator '{path}' is not callable")
    return target


def load_generators(paths: Mapping[str, str]) -> dict[str, GeneratorFn]:
    """Resolve a name -> path table, keeping its order."""
    table = {name: load_generator(path) for name, path in paths.items()}
    logger.debug(f"Loaded generators: {list(table)}")
    return table
