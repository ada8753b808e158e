"""
Fan domains out to a fixed pool of spin workers and fan their results back
in to a single writer.

    lines -> feeder -> [domains queue] -> N workers -> [results queue] -> gatherer -> sink

Both queues are bounded. Each queue is closed with ``None`` sentinels: one
per worker once the input is exhausted, then one for the gatherer after the
last worker has returned.
"""
import asyncio
from typing import Callable, Iterable, List, Optional

from . import log
from .slots import Slots
from .spin import Oracle, expand
from .telemetry import Telemetry

DEFAULT_WORKERS = 8

Sink = Callable[[str], None]

_EOF = object()


async def feeder(lines: Iterable[str], domains: asyncio.Queue, workers: int):
    it = iter(lines)
    while True:
        # reading may block (stdin); keep the loop free for workers meanwhile
        line = await asyncio.to_thread(next, it, _EOF)
        if line is _EOF:
            break
        domain = line.strip().lower()
        if not domain:
            continue
        await domains.put(domain)
    for _ in range(workers):
        await domains.put(None)


async def worker(domains: asyncio.Queue, results: asyncio.Queue, slots: Slots,
                 resolves: Optional[Oracle], telemetry: Optional[Telemetry]):
    while True:
        domain = await domains.get()
        try:
            if domain is None:
                return
            # fresh seen set per domain, inside expand()
            await expand(domain, slots, results.put, resolves)
            if telemetry is not None:
                telemetry.count('domains')
        finally:
            domains.task_done()


async def gatherer(results: asyncio.Queue, sink: Sink, telemetry: Optional[Telemetry]) -> int:
    written = 0
    while True:
        result = await results.get()
        try:
            if result is None:
                return written
            sink(result)
            written += 1
            if telemetry is not None:
                telemetry.count('emitted')
        finally:
            results.task_done()


async def _supervise(tasks: List[asyncio.Task], until: List[asyncio.Task]):
    """Wait until every task in *until* is done, raising the first failure."""
    while True:
        for t in tasks:
            if t.done() and not t.cancelled() and t.exception() is not None:
                raise t.exception()
        if all(t.done() for t in until):
            return
        await asyncio.wait([t for t in tasks if not t.done()], return_when=asyncio.FIRST_COMPLETED)


async def dispatch(lines: Iterable[str], slots: Slots, sink: Sink, workers: int = DEFAULT_WORKERS,
                   resolves: Optional[Oracle] = None, telemetry: Optional[Telemetry] = None) -> int:
    """Spin every domain in *lines* and hand each result to *sink*.

    *sink* is only ever called from the gatherer task, one line at a time.
    If any task fails the others are cancelled and the error is re-raised.
    Returns the number of results written.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    domains = asyncio.Queue(maxsize=workers)
    results = asyncio.Queue(maxsize=workers)

    feed = asyncio.create_task(feeder(lines, domains, workers))
    pool = [
        asyncio.create_task(worker(domains, results, slots, resolves, telemetry))
        for _ in range(workers)
    ]
    gather = asyncio.create_task(gatherer(results, sink, telemetry))
    tasks = [feed, *pool, gather]

    try:
        await _supervise(tasks, until=[feed, *pool])
        # all workers returned; nothing else will be put on results
        tasks.append(asyncio.create_task(results.put(None)))
        await _supervise(tasks, until=[gather])
        return gather.result()
    finally:
        pending = [t for t in tasks if not t.done()]
        if pending:
            log.warn(f"cancelling {len(pending)} unfinished tasks")
            for t in pending:
                t.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
