# edit_history/dispatch.py
"""
Host notifications -> per-path serialized task queues.

Each document path gets its own asyncio.Queue and worker; a task runs to
completion before the next one for the same path starts. A rename sits in
the queues of both its paths. Everything runs on one event loop, nothing
here is thread safe.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from .paths import normalize_path


@dataclass
class HistoryEvent:
    id: int
    kind: str                         # "modify", "rename", "delete"
    path: str
    old_path: Optional[str] = None    # rename only
    content: Optional[str] = None     # modify only; None = read from disk
    mtime_ms: Optional[int] = None
    force: bool = False
    result: Any = None
    error: Optional[BaseException] = None
    done: asyncio.Event = field(default_factory=asyncio.Event)
    # Queues that still have to reach this event before it runs
    waiting: int = 1


class EditDispatcher:
    def __init__(self, store, log=None, on_result=None):
        self.store = store
        self.log = log or logger
        # Called with each finished event (status line, notices...)
        self.on_result = on_result
        self._queues: Dict[str, asyncio.Queue] = {}
        self._workers: Dict[str, asyncio.Task] = {}
        self._next_id = 1
        self.history: List[HistoryEvent] = []

    # -------- public API -----------------------------------------------------

    def modify(self, path: str, content: Optional[str] = None,
               mtime_ms: Optional[int] = None, force: bool = False) -> HistoryEvent:
        return self._submit(HistoryEvent(self._take_id(), "modify", normalize_path(path),
                                         content=content, mtime_ms=mtime_ms, force=force))

    def rename(self, old_path: str, new_path: str) -> HistoryEvent:
        # Queued on both paths: it runs once everything submitted earlier for
        # either document is done, and later edits of either one wait for it
        old_path, new_path = normalize_path(old_path), normalize_path(new_path)
        return self._submit(HistoryEvent(self._take_id(), "rename", new_path, old_path=old_path))

    def delete(self, path: str) -> HistoryEvent:
        return self._submit(HistoryEvent(self._take_id(), "delete", normalize_path(path)))

    async def wait(self, event: HistoryEvent):
        await event.done.wait()
        if event.error is not None:
            raise event.error
        return event.result

    async def drain(self, path: Optional[str] = None):
        """Wait until the queue of `path` (or every queue) is empty."""
        if path is not None:
            q = self._queues.get(normalize_path(path))
            if q is not None:
                await q.join()
            return
        for q in list(self._queues.values()):
            await q.join()

    async def close(self):
        await self.drain()
        for task in self._workers.values():
            task.cancel()
        await asyncio.gather(*self._workers.values(), return_exceptions=True)
        self._workers.clear()
        self._queues.clear()

    # -------- internals ------------------------------------------------------

    def _take_id(self) -> int:
        i = self._next_id
        self._next_id += 1
        return i

    def _queue_for(self, path: str) -> asyncio.Queue:
        q = self._queues.get(path)
        if q is None:
            q = self._queues[path] = asyncio.Queue()
            self._workers[path] = asyncio.get_running_loop().create_task(self._worker(path, q))
        return q

    def _submit(self, event: HistoryEvent) -> HistoryEvent:
        paths = [event.path]
        if event.old_path is not None and event.old_path != event.path:
            paths.append(event.old_path)
        event.waiting = len(paths)
        self.history.append(event)
        # All queues get the event in the same call, so any two queues see
        # shared events in submission order
        for path in paths:
            q = self._queue_for(path)
            q.put_nowait(event)
            self.log.debug(f"[enqueue] id={event.id} {event.kind} {path} pending={q.qsize()}")
        return event

    async def _worker(self, path: str, q: asyncio.Queue):
        while True:
            event = await q.get()
            try:
                event.waiting -= 1
                if event.waiting > 0:
                    # The last queue to reach it runs it; hold this path until then
                    await event.done.wait()
                    continue
                try:
                    await self._run(event)
                finally:
                    event.done.set()
            finally:
                q.task_done()

    async def _run(self, event: HistoryEvent):
        try:
            if event.kind == "modify":
                event.result = self.store.on_modify(event.path, event.content,
                                                    event.mtime_ms, force=event.force)
            elif event.kind == "rename":
                event.result = self.store.on_rename(event.old_path, event.path)
            elif event.kind == "delete":
                event.result = self.store.on_delete(event.path)
            else:
                raise ValueError(f"Unknown event kind {event.kind!r}")
        except Exception as e:
            self.log.exception(f"Event {event.id} ({event.kind} {event.path}) failed")
            event.error = e
            return
        if self.on_result is not None:
            self.on_result(event)
        # Let other paths' workers run between tasks
        await asyncio.sleep(0)
