"""Virtual machine factory lookup."""

from __future__ import annotations

import importlib
import logging
from typing import Callable

from st80.common.config import Config
from st80.common.errors import VmFactoryError
from st80.vm.backend import VirtualMachine

logger = logging.getLogger(__name__)

VmFactory = Callable[[Config], VirtualMachine]


def vmFactory_load(factory_path: str | None) -> VmFactory:
    """
    Import the VM factory named in the config.

    Args:
        factory_path: Reference in `package.module:callable` form.

    Returns:
        Factory callable.

    Raises:
        VmFactoryError: If the reference is missing, malformed or not importable.
    """
    if not factory_path:
        raise VmFactoryError(
            "No virtual machine configured. Set vm.factory in config.yml "
            "(e.g. 'mypackage.vm:machine_create')"
        )
    if ":" not in factory_path:
        raise VmFactoryError(f"vm.factory must be in format module:callable, got '{factory_path}'")

    module_name: str
    attribute_name: str
    module_name, attribute_name = factory_path.split(":", 1)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise VmFactoryError(f"Cannot import VM module '{module_name}': {exc}") from exc

    factory = getattr(module, attribute_name, None)
    if not callable(factory):
        raise VmFactoryError(f"VM factory '{factory_path}' is not a callable")
    return factory


def virtualMachine_create(config: Config) -> VirtualMachine:
    """
    Create the collaborator bundle for one session.

    Args:
        config: Loaded config.

    Returns:
        Virtual machine bundle.

    Raises:
        VmFactoryError: If the factory cannot be loaded or returns garbage.
    """
    factory: VmFactory = vmFactory_load(config.vm.factory)
    logger.debug("Creating virtual machine via %s", config.vm.factory)
    machine = factory(config)
    if not isinstance(machine, VirtualMachine):
        raise VmFactoryError(
            f"VM factory '{config.vm.factory}' returned {type(machine).__name__}, "
            "expected VirtualMachine"
        )
    return machine
