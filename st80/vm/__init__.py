"""Contracts of the virtual machine collaborators."""

from st80.vm.backend import (
    ClockDevice,
    Engine,
    ObjectMemory,
    PersistentPeripheral,
    StatusConsumer,
    StopSignal,
    VirtualMachine,
)
from st80.vm.factory import virtualMachine_create, vmFactory_load

__all__ = [
    "ClockDevice",
    "Engine",
    "ObjectMemory",
    "PersistentPeripheral",
    "StatusConsumer",
    "StopSignal",
    "VirtualMachine",
    "virtualMachine_create",
    "vmFactory_load",
]
