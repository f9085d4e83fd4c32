"""Pytest configuration and shared fixtures for st80 tests

This module provides fake virtual machine collaborators and image/disk
file layouts used across the unit tests.
"""

import pytest
import logging
import threading
from pathlib import Path
from typing import List, Optional

from st80.common.config import Config, ConfigLoader
from st80.vm.backend import StopSignal, VirtualMachine


class FakeMemory:
    """Object memory that records loads and saves"""

    def __init__(self) -> None:
        self.loaded: List[str] = []
        self.saved: List[Optional[str]] = []
        self.save_error: Optional[Exception] = None

    def image_load(self, path: str) -> None:
        if not Path(path).is_file():
            raise FileNotFoundError(f"No such image: {path}")
        self.loaded.append(path)

    def image_save(self, path: Optional[str]) -> None:
        if self.save_error is not None:
            raise self.save_error
        self.saved.append(path)


class FakeEngine:
    """Engine whose run behavior is chosen per test

    By default `run` returns `quit_reason` immediately. With `wait_for_stop`
    it polls its stop signal the way a real engine does at safe points;
    `stop_request` only counts calls. With `honor_stop` False it keeps
    blocking even after the signal is set (until `release` is set).
    """

    def __init__(self) -> None:
        self.quit_reason: Optional[str] = "quit from image"
        self.fault: Optional[BaseException] = None
        self.wait_for_stop: bool = False
        self.honor_stop: bool = True
        self.stop_signal: StopSignal = StopSignal()
        self.release: threading.Event = threading.Event()
        self.started: threading.Event = threading.Event()
        self.resumed_from: object = None
        self.stop_calls: int = 0
        self.status_consumer = None
        self.consumer_history: list = []

    def firstContext_get(self) -> object:
        return "first-context"

    def run(self, resume_context: object) -> Optional[str]:
        self.resumed_from = resume_context
        self.started.set()
        if self.status_consumer is not None:
            self.status_consumer("running")
        if self.fault is not None:
            raise self.fault
        if self.wait_for_stop:
            if self.honor_stop:
                self.stop_signal.wait(5.0)
            else:
                self.release.wait(5.0)
            return "stopped"
        return self.quit_reason

    def stop_request(self) -> None:
        self.stop_calls += 1

    def statusConsumer_set(self, consumer) -> None:
        self.status_consumer = consumer
        self.consumer_history.append(consumer)

    def stats_write(self, stream) -> None:
        stream.write("bytecodes executed: 42\n")


class FakeClock:
    """Clock device that records the parameters it receives"""

    def __init__(self) -> None:
        self.local_time: Optional[tuple] = None
        self.adjustment: Optional[int] = None

    def localTimeParameters_set(self, offset_minutes: int, dst_first_day: int, dst_last_day: int) -> None:
        self.local_time = (offset_minutes, dst_first_day, dst_last_day)

    def timeAdjustment_set(self, minutes: int) -> None:
        self.adjustment = minutes


class FakePeripheral:
    """Persisting collaborator that records the attached handle"""

    def __init__(self) -> None:
        self.handles: list = []

    def backingStore_attach(self, handle) -> None:
        self.handles.append(handle)


class FakeHandle:
    """Backing store handle with scripted save results"""

    def __init__(self, format_name: str = "alto", save_result: bool = True) -> None:
        self.format_name: str = format_name
        self.save_result: bool = save_result
        self.save_error: Optional[Exception] = None
        self.disk_saves: int = 0
        self.snapshots: int = 0
        self.renamed_to: Optional[str] = None

    def snapshotTarget_rename(self, name: str) -> None:
        self.renamed_to = name

    def snapshot_save(self) -> bool:
        self.snapshots += 1
        return True

    def diskChanges_save(self) -> bool:
        self.disk_saves += 1
        if self.save_error is not None:
            raise self.save_error
        return self.save_result


@pytest.fixture
def fake_memory() -> FakeMemory:
    return FakeMemory()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fake_handle() -> FakeHandle:
    return FakeHandle()


@pytest.fixture
def fake_machine(fake_engine: FakeEngine, fake_memory: FakeMemory) -> VirtualMachine:
    """VM bundle of fakes with one persisting peripheral"""
    return VirtualMachine(
        engine=fake_engine,
        memory=fake_memory,
        clock=FakeClock(),
        peripherals=[FakePeripheral()],
        stop_signal=fake_engine.stop_signal,
    )


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
    """Directory with `world.im` only; tests add disk files as needed"""
    (tmp_path / "world.im").write_bytes(b"IMAGE")
    return tmp_path


@pytest.fixture
def sample_config() -> Config:
    """Load the sample configuration shipped with the repository

    Returns:
        Config object with sample values
    """
    config_path = Path(__file__).parent.parent / "config.yml"
    if not config_path.exists():
        pytest.skip("config.yml not found - required for this test")
    return ConfigLoader.config_load(config_path)


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)


# Markers for test organization
def pytest_configure(config) -> None:
    """Register custom pytest markers used by this test suite."""
    config.addinivalue_line("markers", "requires_x11: mark test as requiring X11 display")
