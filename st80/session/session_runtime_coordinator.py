"""
Session runtime coordinator.

This module orchestrates one emulator session from command-line tokens to
exit code. It composes option validation, backing-store resolution, display
geometry negotiation, collaborator wiring and the blocking engine run, and
hands the first termination event to the shutdown coordinator.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable, Sequence, TextIO

from st80 import __version__
from st80.common.config import Config
from st80.common.errors import ImageNotFoundError, ResolutionError
from st80.common.runtime_models import OptionsParseResult, SessionOptions
from st80.common.settings import settings
from st80.common.types import (
    DisplayGeometry,
    DisplayMode,
    EngineFault,
    EngineQuit,
    ExitCode,
    ShutdownOutcome,
    TerminationEvent,
)
from st80.display.display import DisplayManager, ScreenProbe
from st80.display.geometry import geometry_negotiate
from st80.session.bootstrap import (
    backingStore_attach,
    clockParameters_apply,
    configFromArgs_load,
    loggingWithConfig_setup,
    sessionOptionsWithWarnings_parse,
    virtualMachine_initialize,
)
from st80.session.close_request import (
    CloseDecider,
    CloseRequestChannel,
    CloseRequestWorker,
    ConsoleCloseDecider,
    SignalBridge,
)
from st80.session.session_logging import sessionName_set
from st80.session.shutdown import ProcessExit, ShutdownCoordinator
from st80.session.state import SessionState, SessionStateMachine
from st80.session.status_line import StatusLine
from st80.store.backend import BackingStoreHandle
from st80.store.resolver import PROBE_CHAIN, StoreProbe, backingStore_resolve
from st80.vm.backend import VirtualMachine

__all__ = [
    "SessionController",
    "session_run",
]

logger = logging.getLogger(__name__)

MachineFactory = Callable[[Config], VirtualMachine]
LoggingSetup = Callable[[str, str, str | None], None]


class SessionController:
    """Drives one session through its lifecycle states."""

    def __init__(
        self,
        config: Config,
        machine_factory: MachineFactory = virtualMachine_initialize,
        screen_probe: ScreenProbe | None = None,
        close_decider: CloseDecider | None = None,
        probes: Sequence[StoreProbe] = PROBE_CHAIN,
        signals_enabled: bool = True,
        process_exit: ProcessExit = os._exit,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize session controller.

        Args:
            config:
                Loaded config.
            machine_factory:
                Creates the engine, memory and peripheral collaborators.
            screen_probe:
                Physical screen size source; X11 when None.
            close_decider:
                Answers close requests; terminal prompt when None.
            probes:
                Disk-format probes in priority order.
            signals_enabled:
                Translate SIGINT/SIGTERM into close requests while running.
            process_exit:
                Hard exit used when the engine ignores a stop request.
            output:
                Stream for usage text and exit diagnostics; stdout when None.
        """
        self._config: Config = config
        self._machine_factory: MachineFactory = machine_factory
        self._screen_probe: ScreenProbe | None = screen_probe
        self._close_decider: CloseDecider = close_decider or ConsoleCloseDecider()
        self._probes: Sequence[StoreProbe] = probes
        self._signals_enabled: bool = signals_enabled
        self._process_exit: ProcessExit = process_exit
        self._output: TextIO | None = output

        self._state: SessionStateMachine = SessionStateMachine()
        self._close_channel: CloseRequestChannel = CloseRequestChannel()
        self._status_line: StatusLine = StatusLine()
        self._options: SessionOptions | None = None
        self._handle: BackingStoreHandle | None = None
        self._geometry: DisplayGeometry | None = None
        self._coordinator: ShutdownCoordinator | None = None

    @property
    def state(self) -> SessionState:
        return self._state.state

    @property
    def close_channel(self) -> CloseRequestChannel:
        """Channel the windowing layer posts close requests to"""
        return self._close_channel

    @property
    def status_line(self) -> StatusLine:
        return self._status_line

    @property
    def options(self) -> SessionOptions | None:
        return self._options

    @property
    def geometry(self) -> DisplayGeometry | None:
        return self._geometry

    @property
    def backing_store(self) -> BackingStoreHandle | None:
        return self._handle

    @property
    def outcome(self) -> ShutdownOutcome | None:
        return self._coordinator.outcome if self._coordinator is not None else None

    def start(self, tokens: Sequence[str]) -> ExitCode:
        """
        Run a session from command-line tokens to its end.

        Args:
            tokens: Session tokens (image path and `--option` tokens).

        Returns:
            Process exit code.
        """
        result: OptionsParseResult = sessionOptionsWithWarnings_parse(list(tokens), self._config)
        if result.options is None:
            self.usage_print()
            self._state.transition(SessionState.STOPPED)
            return ExitCode.NO_WORK
        options: SessionOptions = result.options
        self._options = options
        sessionName_set(options.image_path)

        self._state.transition(SessionState.RESOLVING)
        machine: VirtualMachine = self._machine_factory(self._config)
        try:
            self._handle = backingStore_resolve(
                options.image_path,
                machine.memory,
                self._config.store,
                probes=self._probes,
                report_stream=self._output,
            )
        except ImageNotFoundError as exc:
            # Probe diagnostics were already printed
            logger.debug("Backing store resolution found nothing: %s", exc)
            self._state.transition(SessionState.STOPPED)
            return ExitCode.FAULT
        except ResolutionError as exc:
            logger.error("Backing store resolution failed: %s", exc)
            self._state.transition(SessionState.STOPPED)
            return ExitCode.FAULT

        self._state.transition(SessionState.NEGOTIATING)
        self._geometry = geometry_negotiate(options.display_mode, self.screenProbe_get(options))
        logger.info(
            "Display: %sx%s (%s words, %s)",
            self._geometry.width,
            self._geometry.height,
            self._geometry.word_capacity,
            "full screen" if self._geometry.fullscreen else "windowed",
        )

        self._state.transition(SessionState.CONFIGURING)
        coordinator: ShutdownCoordinator = self.collaborators_configure(options, machine, self._handle)
        return self.engine_run(options, machine, coordinator)

    def usage_print(self) -> None:
        """Print the missing-image error and usage."""
        stream: TextIO = self._output or sys.stdout
        print("error: missing image (base)filename, aborting", file=stream)
        print(f"\n{settings.USAGE_TEXT}", file=stream)

    def screenProbe_get(self, options: SessionOptions) -> ScreenProbe | None:
        """
        Select the screen size source for full-screen negotiation.

        Args:
            options: Session options.

        Returns:
            Screen probe, or None for windowed sessions.
        """
        if options.display_mode != DisplayMode.FULLSCREEN:
            return None
        if self._screen_probe is not None:
            return self._screen_probe
        return DisplayManager(display_name=self._config.display.display)

    def collaborators_configure(
        self,
        options: SessionOptions,
        machine: VirtualMachine,
        handle: BackingStoreHandle,
    ) -> ShutdownCoordinator:
        """
        One-time wiring of clock, backing store and shutdown policy.

        Args:
            options: Session options.
            machine: VM collaborators.
            handle: Resolved backing store.

        Returns:
            Shutdown coordinator for the session.
        """
        clockParameters_apply(
            machine.clock,
            options.tz_offset_minutes,
            options.dst_first_day,
            options.dst_last_day,
            options.time_adjust_minutes,
        )
        backingStore_attach(machine.peripherals, handle)
        if options.status_line:
            machine.engine.statusConsumer_set(self._status_line.text_set)

        self._coordinator = ShutdownCoordinator(
            handle=handle,
            engine=machine.engine,
            stats_at_end=options.stats_at_end,
            stop_grace_seconds=self._config.session.stop_grace_seconds,
            stop_signal=machine.stop_signal,
            session_state=self._state,
            process_exit=self._process_exit,
            output=self._output,
        )
        return self._coordinator

    def engine_run(
        self,
        options: SessionOptions,
        machine: VirtualMachine,
        coordinator: ShutdownCoordinator,
    ) -> ExitCode:
        """
        Run the engine on the calling thread and shut down afterwards.

        Args:
            options: Session options.
            machine: VM collaborators.
            coordinator: Shutdown coordinator.

        Returns:
            Process exit code.
        """
        worker: CloseRequestWorker = CloseRequestWorker(
            channel=self._close_channel,
            decider=self._close_decider,
            sink=coordinator,
        )
        signal_bridge: SignalBridge = SignalBridge(self._close_channel)

        self._state.transition(SessionState.RUNNING)
        worker.start()
        if self._signals_enabled:
            signal_bridge.install()

        event: TerminationEvent
        try:
            resume_context = machine.engine.firstContext_get()
            logger.info("Engine running. Press Ctrl+C to close.")
            reason: str | None = machine.engine.run(resume_context)
            event = EngineQuit(reason=reason or "engine quit")
        except Exception as exc:
            event = EngineFault(error=exc)
        finally:
            coordinator.engineIdle_mark()
            signal_bridge.restore()
            if options.status_line:
                machine.engine.statusConsumer_set(None)
                self._status_line.reset()

        coordinator.terminationEvent_handle(event)
        coordinator.completion_wait()
        worker.stop()
        self._state.transition(SessionState.STOPPED)

        outcome: ShutdownOutcome | None = coordinator.outcome
        if outcome is None:
            return ExitCode.FAULT
        return outcome.exit_code


def session_run(
    args: argparse.Namespace,
    tokens: Sequence[str],
    logging_setup: LoggingSetup,
) -> ExitCode:
    """
    Load config, set up logging and run one session.

    Args:
        args:
            Parsed launcher arguments.
        tokens:
            Session tokens.
        logging_setup:
            Runtime logging setup routine.

    Returns:
        Process exit code.
    """
    config: Config = configFromArgs_load(args)
    loggingWithConfig_setup(args, config, logging_setup)
    logger.info("st80 launcher v%s", __version__)
    controller: SessionController = SessionController(config)
    return controller.start(tokens)
