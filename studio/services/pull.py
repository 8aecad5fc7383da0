"""Model pull orchestration: stream the runtime's progress, then verify presence.

Each pull gets its own ``PullChannel`` identified by an operation id. Progress
records from the runtime are normalized into ``PullProgressEvent`` values; the
channel closes after exactly one terminal event. Whether the model ended up
installed is decided by re-listing the runtime's models, never by trusting a
status string from the stream.
"""

import asyncio
import re
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field

import httpx
import structlog

from studio.core.exceptions import PullInProgressError
from studio.schemas.pull import PullPhase, PullProgressEvent
from studio.services.runtime.client import RuntimeClient
from studio.services.runtime.installer import InstallationManager
from studio.services.runtime.supervisor import ServerSupervisor
from studio.services.status import StatusCallback, notify

logger = structlog.get_logger()

_PERCENT_RE = re.compile(r"(\d{1,3}(?:\.\d+)?)\s*%")
MAX_RETAINED_CHANNELS = 32


def _as_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _percent(completed: int | None, total: int | None, status: str) -> float | None:
    if completed is not None and total:
        return round(min(max(completed / total * 100, 0.0), 100.0), 1)
    match = _PERCENT_RE.search(status)
    if match:
        value = float(match.group(1))
        if 0 <= value <= 100:
            return value
    return None


def _phase_for(status: str, has_progress: bool) -> PullPhase:
    lower = status.lower()
    if lower.startswith("verifying"):
        return PullPhase.VERIFYING
    if lower.startswith("writing") or lower.startswith("removing"):
        return PullPhase.WRITING
    if "manifest" in lower:
        return PullPhase.MANIFEST
    if has_progress or lower.startswith("pulling") or lower.startswith("downloading"):
        return PullPhase.DOWNLOADING
    # The runtime's own "success" marker is informational only; the terminal
    # event comes from the presence check.
    return PullPhase.STATUS


def normalize_record(record: dict, operation_id: str, model_id: str) -> PullProgressEvent:
    """Map one raw progress record onto the structured event type."""
    if record.get("error"):
        return PullProgressEvent(
            operation_id=operation_id,
            model_id=model_id,
            phase=PullPhase.STATUS,
            status=str(record["error"]),
        )

    digest = record.get("digest") if isinstance(record.get("digest"), str) else None
    status = str(record.get("status") or digest or "")
    completed = _as_int(record.get("completed"))
    total = _as_int(record.get("total"))
    percent = _percent(completed, total, status)
    if status.lower() == "success":
        percent = 100.0
    return PullProgressEvent(
        operation_id=operation_id,
        model_id=model_id,
        phase=_phase_for(status, completed is not None and bool(total)),
        status=status,
        percent=percent,
        completed=completed,
        total=total,
        digest=digest,
    )


def model_present(model_id: str, installed: frozenset[str]) -> bool:
    """Installed-set membership; an untagged id matches its ``:latest`` tag."""
    if model_id in installed:
        return True
    return ":" not in model_id and f"{model_id}:latest" in installed


class PullChannel:
    """Ordered, single-consumer event stream for one pull operation."""

    _CLOSED = object()

    def __init__(self, model_id: str, operation_id: str | None = None):
        self.model_id = model_id
        self.operation_id = operation_id or uuid.uuid4().hex
        self.last_event: PullProgressEvent | None = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._has_reader = False

    @property
    def closed(self) -> bool:
        return self._closed

    def claim_reader(self) -> bool:
        """Reserve the channel for one consumer. False if already taken."""
        if self._has_reader:
            return False
        self._has_reader = True
        return True

    def publish(self, event: PullProgressEvent) -> None:
        if self._closed:
            return
        self.last_event = event
        self._queue.put_nowait(event)
        if event.terminal:
            self.close()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(self._CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> PullProgressEvent:
        item = await self._queue.get()
        if item is self._CLOSED:
            # Leave the sentinel for any later iteration attempt.
            self._queue.put_nowait(item)
            raise StopAsyncIteration
        return item


@dataclass
class _PullJob:
    channel: PullChannel
    on_status: StatusCallback | None = None
    stream_task: asyncio.Task | None = None
    cancel_requested: bool = False
    last_status: str = ""
    last_error: str | None = None
    events: int = field(default=0)


class PullOrchestrator:
    def __init__(
        self,
        runtime: RuntimeClient,
        supervisor: ServerSupervisor,
        installer: InstallationManager,
        local_runtime: bool = True,
    ):
        self._runtime = runtime
        self._supervisor = supervisor
        self._installer = installer
        self._local_runtime = local_runtime
        self._active: dict[str, _PullJob] = {}
        self._channels: OrderedDict[str, PullChannel] = OrderedDict()
        self._tasks: set[asyncio.Task] = set()

    # ── Queries ──────────────────────────────────────────────────────────────

    def is_pulling(self, model_id: str) -> bool:
        return model_id in self._active

    def channel(self, operation_id: str) -> PullChannel | None:
        return self._channels.get(operation_id)

    # ── Entry points ─────────────────────────────────────────────────────────

    def start(self, model_id: str) -> PullChannel:
        """Begin a pull in the background and return its progress channel."""
        job = self._register(model_id, on_status=None)
        task = asyncio.create_task(self._run(model_id, job), name=f"pull-{model_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job.channel

    async def pull(self, model_id: str, on_status: StatusCallback | None = None) -> bool:
        """Pull inline, forwarding status strings; True iff the model is now installed."""
        job = self._register(model_id, on_status=on_status)
        return await self._run(model_id, job)

    def cancel(self, model_id: str) -> bool:
        """Sever the stream of an in-flight pull. The presence check still runs."""
        job = self._active.get(model_id)
        if job is None:
            return False
        job.cancel_requested = True
        if job.stream_task is not None and not job.stream_task.done():
            job.stream_task.cancel()
        logger.info("pull_cancel_requested", model=model_id, operation_id=job.channel.operation_id)
        return True

    # ── Internals ────────────────────────────────────────────────────────────

    def _register(self, model_id: str, on_status: StatusCallback | None) -> _PullJob:
        existing = self._active.get(model_id)
        if existing is not None:
            raise PullInProgressError(model_id, existing.channel.operation_id)
        channel = PullChannel(model_id)
        job = _PullJob(channel=channel, on_status=on_status)
        self._active[model_id] = job
        self._channels[channel.operation_id] = channel
        while len(self._channels) > MAX_RETAINED_CHANNELS:
            self._channels.popitem(last=False)
        return job

    def _emit(self, job: _PullJob, event: PullProgressEvent) -> None:
        job.events += 1
        if event.status:
            job.last_status = event.status
        job.channel.publish(event)
        if event.status:
            notify(job.on_status, event.status, model=event.model_id)

    def _status_event(self, job: _PullJob, phase: PullPhase, status: str, percent: float | None = None):
        return PullProgressEvent(
            operation_id=job.channel.operation_id,
            model_id=job.channel.model_id,
            phase=phase,
            status=status,
            percent=percent,
        )

    async def _prepare_runtime(self, job: _PullJob) -> bool:
        def forward(message: str) -> None:
            self._emit(job, self._status_event(job, PullPhase.PREPARING, message))

        if not self._installer.is_installed():
            forward("Ollama not installed. Installing…")
            outcome = await self._installer.install(forward)
            if not outcome.success:
                job.last_error = outcome.message or "Ollama installation failed."
                return False

        forward("Ensuring Ollama server is running…")
        if not await self._supervisor.ensure_running(forward):
            job.last_error = "Failed to start Ollama server."
            return False
        return True

    async def _consume(self, model_id: str, job: _PullJob) -> None:
        operation_id = job.channel.operation_id
        try:
            async for record in self._runtime.stream_pull(model_id):
                event = normalize_record(record, operation_id, model_id)
                if record.get("error"):
                    job.last_error = event.status
                self._emit(job, event)
        except httpx.HTTPStatusError as e:
            job.last_error = f"Download failed: runtime returned {e.response.status_code}"
            logger.warning("pull_stream_rejected", model=model_id, status=e.response.status_code)
        except httpx.HTTPError as e:
            job.last_error = f"Download interrupted: {e}"
            logger.warning("pull_stream_failed", model=model_id, error=str(e))

    async def _run(self, model_id: str, job: _PullJob) -> bool:
        logger.info("pull_started", model=model_id, operation_id=job.channel.operation_id)
        self._emit(job, self._status_event(job, PullPhase.PREPARING, f"Preparing to download {model_id}…", 0.0))
        try:
            if self._local_runtime and not await self._prepare_runtime(job):
                self._finish(job, present=False)
                return False

            if not job.cancel_requested:
                job.stream_task = asyncio.create_task(self._consume(model_id, job))
                await asyncio.wait({job.stream_task})

            present = model_present(model_id, await self._runtime.installed_set())
            self._finish(job, present=present)
            return present
        finally:
            if job.stream_task is not None and not job.stream_task.done():
                job.stream_task.cancel()
            self._active.pop(model_id, None)
            job.channel.close()

    def _finish(self, job: _PullJob, present: bool) -> None:
        model_id = job.channel.model_id
        if present:
            event = self._status_event(job, PullPhase.SUCCESS, f"{model_id} is ready", 100.0)
        elif job.cancel_requested:
            event = self._status_event(job, PullPhase.CANCELLED, "Download cancelled")
        else:
            message = job.last_error or job.last_status or "Download failed"
            event = self._status_event(job, PullPhase.ERROR, message)
        logger.info(
            "pull_finished",
            model=model_id,
            operation_id=job.channel.operation_id,
            present=present,
            cancelled=job.cancel_requested,
            events=job.events,
        )
        self._emit(job, event)
