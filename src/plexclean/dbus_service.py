"""D-Bus service for GUI communication.

D-Bus methods use PascalCase per D-Bus convention, and type signatures
like "s" and "(tttt)" are D-Bus protocol types, not Python syntax.

Scans and deletions run on the session's worker thread; their callbacks
are marshalled onto the asyncio loop before any signal is emitted.
"""

from __future__ import annotations

import asyncio
import json
import logging

from dbus_next.aio import MessageBus
from dbus_next.service import ServiceInterface, method, signal
from dbus_next import BusType

from plexclean.core.session import CleanupSession, SessionStateError
from plexclean.models.clean_result import DeletionOutcome
from plexclean.models.scan_result import ScanReport, StatsSnapshot
from plexclean.settings import Settings
from plexclean.storage import DeletionLog

log = logging.getLogger(__name__)

_BUS_NAME = "io.github.plexclean"
_OBJECT_PATH = "/io/github/plexclean"
_INTERFACE = "io.github.plexclean.Manager"


# noinspection PyPep8Naming
class PlexCleanDBusService(ServiceInterface):
    """D-Bus service interface for plexclean."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__(_INTERFACE)
        self._loop = loop
        settings = Settings.instance()
        self._session = CleanupSession(classifier=settings.classifier(), options=settings.scan_options())

    def _post(self, fn, *args) -> None:
        self._loop.call_soon_threadsafe(fn, *args)

    @method()
    def Scan(self, path: "s") -> "s":  # type: ignore[override]
        """Start scanning a directory. Progress and result arrive as signals."""

        def on_progress(snap: StatsSnapshot) -> None:
            self._post(
                self.ScanProgress,
                snap.files_scanned,
                snap.dirs_scanned,
                snap.unwanted_count,
                snap.unwanted_bytes,
            )

        def on_complete(report: ScanReport) -> None:
            self._post(self.ScanFinished, json.dumps(report.as_dict()))

        self._session.start_scan(path, on_progress=on_progress, on_complete=on_complete)
        return json.dumps({"state": self._session.state.value})

    @method()
    def Delete(self) -> "s":  # type: ignore[override]
        """Delete the candidates of the last completed scan."""
        deletion_log = DeletionLog()
        log_path = deletion_log.open()

        def on_progress(done: int, total: int) -> None:
            self._post(self.DeleteProgress, done, total)

        def on_complete(outcome: DeletionOutcome) -> None:
            deletion_log.close()
            data = outcome.as_dict()
            data["log_file"] = str(log_path)
            self._post(self.DeleteFinished, json.dumps(data))

        try:
            self._session.start_delete(on_progress=on_progress, on_complete=on_complete)
        except SessionStateError as exc:
            deletion_log.close()
            return json.dumps({"error": str(exc)})
        return json.dumps({"state": self._session.state.value, "log_file": str(log_path)})

    @method()
    def Cancel(self) -> "s":  # type: ignore[override]
        """Request cancellation of the running scan or deletion."""
        self._session.cancel()
        return json.dumps({"state": self._session.state.value})

    @method()
    def GetState(self) -> "s":  # type: ignore[override]
        """Current session state and live statistics as JSON."""
        return json.dumps(
            {
                "state": self._session.state.value,
                "root": self._session.root,
                "stats": self._session.snapshot().as_dict(),
            }
        )

    @signal()
    def ScanProgress(self, files: int, dirs: int, unwanted: int, unwanted_bytes: int) -> "(tttt)":  # type: ignore[override]
        return [files, dirs, unwanted, unwanted_bytes]

    @signal()
    def ScanFinished(self, report_json: str) -> "s":  # type: ignore[override]
        return report_json

    @signal()
    def DeleteProgress(self, done: int, total: int) -> "(tt)":  # type: ignore[override]
        return [done, total]

    @signal()
    def DeleteFinished(self, outcome_json: str) -> "s":  # type: ignore[override]
        return outcome_json


async def run_service() -> None:
    """Start the D-Bus service."""
    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    service = PlexCleanDBusService(asyncio.get_running_loop())
    bus.export(_OBJECT_PATH, service)
    await bus.request_name(_BUS_NAME)
    log.info("D-Bus service started on %s", _BUS_NAME)
    await bus.wait_for_disconnect()


def start_service() -> None:
    """Entry point to start the D-Bus service."""
    asyncio.run(run_service())
