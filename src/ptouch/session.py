"""
Print Session for P-Touch Printers.

Runs one print job over an open transport: the fixed command sequence
from the raster command reference, the raster line transfer, and the
completion poll. The transport only needs two blocking methods:

    write(data: bytes) -> None
    read(length: int) -> bytes

both of which raise ptouch.exceptions.TimeoutError on a short transfer.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from .commands import Commands
from .compression import compress
from .device import (
    RASTER_LINE_BYTES,
    STATUS_FRAME_LENGTH,
    AdvancedMode,
    CompressionMode,
    Mode,
    PrintInfo,
    StatusType,
    VariousMode,
)
from .exceptions import DeviceError, PrintError, TimeoutError
from .responses import Status

log = logging.getLogger(__name__)


class SessionState(Enum):
    """Steps of a print session, in the order they are entered."""
    IDLE = "idle"
    MODE_SET = "mode_set"
    STATUS_NOTIFY_ENABLED = "status_notify_enabled"
    PRINT_INFO_SET = "print_info_set"
    VARIOUS_MODE_SET = "various_mode_set"
    ADVANCED_MODE_SET = "advanced_mode_set"
    MARGIN_SET = "margin_set"
    COMPRESSION_MODE_SET = "compression_mode_set"
    TRANSFERRING = "transferring"
    PRINT_ISSUED = "print_issued"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded fixed-interval retry for the completion poll.

    Attributes:
        max_attempts: Number of status reads before giving up
        interval: Seconds to sleep between reads
    """
    max_attempts: int = 10
    interval: float = 1.0


class PrintSession:
    """
    One-shot print job state machine.

    The session never reorders or repeats a step: any failure moves it
    to FAILED and the exception propagates to the caller.
    """

    BLANK_LINE = bytes(RASTER_LINE_BYTES)

    def __init__(
        self,
        transport,
        compression: CompressionMode = CompressionMode.NONE,
        various_mode: VariousMode = VariousMode.AUTO_CUT,
        advanced_mode: AdvancedMode = AdvancedMode.NO_CHAIN,
        margin: int = 0,
        feed: bool = True,
        retry: RetryPolicy = RetryPolicy(),
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Configure a print session.

        Args:
            transport: Open connection with write() and read()
            compression: Send raster lines uncompressed or TIFF compressed
            various_mode: Flags for the various-mode command
            advanced_mode: Flags for the advanced-mode command
            margin: Feed margin in dots
            feed: Finish with print-and-feed (True) or print (False)
            retry: Completion poll bounds
            sleep: Blocking sleep, replaceable in tests
        """
        self.transport = transport
        self.compression = compression
        self.various_mode = various_mode
        self.advanced_mode = advanced_mode
        self.margin = margin
        self.feed = feed
        self.retry = retry
        self._sleep = sleep
        self._state = SessionState.IDLE
        self.last_status: Optional[Status] = None

    @property
    def state(self) -> SessionState:
        return self._state

    def _enter(self, state: SessionState) -> None:
        log.debug("Session state: %s -> %s", self._state.value, state.value)
        self._state = state

    def _send(self, data: bytes) -> None:
        log.debug("TX: %s", data.hex() if len(data) < 50 else data[:50].hex() + "...")
        self.transport.write(data)

    def run(self, lines: Sequence[bytes], info: PrintInfo) -> Status:
        """
        Execute the print job.

        Args:
            lines: Raster lines in column order, RASTER_LINE_BYTES each
            info: Print information (raster_count should match len(lines))

        Returns:
            The status frame that reported completion

        Raises:
            PrintError: If the session was already run
            DeviceError: If the printer reports an error while printing
            TimeoutError: On a short write, or if printing does not
                complete within the retry policy
        """
        if self._state is not SessionState.IDLE:
            raise PrintError(f"Print session already used (state: {self._state.value})")

        if info.raster_count != len(lines):
            log.warning(
                "Print info raster count (%d) does not match line count (%d)",
                info.raster_count,
                len(lines),
            )

        try:
            self._configure(info)
            self._transfer(lines)
            self._send(Commands.print_and_feed() if self.feed else Commands.print())
            self._enter(SessionState.PRINT_ISSUED)
            status = self._poll()
        except Exception:
            self._enter(SessionState.FAILED)
            raise

        self._enter(SessionState.COMPLETED)
        return status

    def _configure(self, info: PrintInfo) -> None:
        self._send(Commands.switch_mode(Mode.RASTER))
        self._enter(SessionState.MODE_SET)

        self._send(Commands.set_status_notify(True))
        self._enter(SessionState.STATUS_NOTIFY_ENABLED)

        self._send(Commands.set_print_info(info))
        self._enter(SessionState.PRINT_INFO_SET)

        self._send(Commands.set_various_mode(self.various_mode))
        self._enter(SessionState.VARIOUS_MODE_SET)

        self._send(Commands.set_advanced_mode(self.advanced_mode))
        self._enter(SessionState.ADVANCED_MODE_SET)

        self._send(Commands.set_margin(self.margin))
        self._enter(SessionState.MARGIN_SET)

        self._send(Commands.set_compression_mode(self.compression))
        self._enter(SessionState.COMPRESSION_MODE_SET)

    def _transfer(self, lines: Sequence[bytes]) -> None:
        self._enter(SessionState.TRANSFERRING)
        log.info("Transferring %d raster lines", len(lines))

        for line in lines:
            if self.compression == CompressionMode.TIFF:
                if line == self.BLANK_LINE:
                    self._send(Commands.raster_zero())
                else:
                    self._send(Commands.raster_transfer(compress(line)))
            else:
                self._send(Commands.raster_transfer(line))

    def _poll(self) -> Status:
        self._enter(SessionState.POLLING)

        for attempt in range(self.retry.max_attempts):
            if attempt > 0:
                self._sleep(self.retry.interval)

            try:
                frame = self.transport.read(STATUS_FRAME_LENGTH)
            except TimeoutError as e:
                log.debug("Poll %d/%d: no status (%s)", attempt + 1, self.retry.max_attempts, e)
                continue

            status = Status.parse(frame)
            if status is None:
                log.debug("Poll %d/%d: short status frame (%d bytes)",
                          attempt + 1, self.retry.max_attempts, len(frame))
                continue

            self.last_status = status

            if status.has_errors:
                log.error("Print error: %r %r", status.error1, status.error2)
                raise DeviceError(status.error1, status.error2)

            if status.status_type == StatusType.PHASE_CHANGE:
                log.info("Phase change: %s", status.phase.name)
            elif status.status_type == StatusType.COMPLETED:
                log.info("Print completed")
                return status
            else:
                log.debug("Poll %d/%d: %s", attempt + 1, self.retry.max_attempts,
                          status.status_type.name)

        raise TimeoutError(
            f"Print did not complete after {self.retry.max_attempts} status polls"
        )
