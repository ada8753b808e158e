import asyncio
from collections import deque, defaultdict

METRICS_WINDOW = 1000

LOOKUP_OUTCOMES = ('success', 'timeout', 'error')


class Telemetry:
    def __init__(self, window: int = METRICS_WINDOW):
        self.samples = deque(maxlen=window)
        self.counts = defaultdict(int)
        self.lock = asyncio.Lock()

    async def record(self, lat_ms: float, outcome: str):
        async with self.lock:
            self.samples.append((lat_ms, outcome))
            self.counts[outcome] += 1

    def count(self, key: str, n: int = 1):
        self.counts[key] += n

    async def snapshot(self):
        async with self.lock:
            data = list(self.samples)
            counts = dict(self.counts)
        lookups = sum(counts.get(k, 0) for k in LOOKUP_OUTCOMES)
        snap = {
            'p50': None, 'p90': None,
            'success': counts.get('success', 0),
            'timeout': counts.get('timeout', 0),
            'error': counts.get('error', 0),
            'lookups': lookups,
            'domains': counts.get('domains', 0),
            'emitted': counts.get('emitted', 0),
            'success_rate': counts.get('success', 0)/lookups if lookups else 0.0,
            'timeout_rate': counts.get('timeout', 0)/lookups if lookups else 0.0,
        }
        if data:
            lats = sorted(x for x, _ in data)
            n = len(lats)
            def q(p):
                i = min(n-1, max(0, int(p*(n-1))))
                return lats[i]
            snap['p50'] = q(0.50)
            snap['p90'] = q(0.90)
        return snap

    async def summary(self, duration: float) -> str:
        snap = await self.snapshot()
        duration = max(1e-6, duration)
        line = (f"duration={duration:.2f}s domains={snap['domains']} emitted={snap['emitted']} "
                f"avg_per_sec={snap['emitted'] / duration:.2f}")
        if snap['lookups']:
            p90 = snap['p90'] if snap['p90'] is not None else -1
            line += (f" lookups={snap['lookups']} p90={p90:.0f}ms "
                     f"success={snap['success_rate']:.0%} timeouts={snap['timeout_rate']:.0%}")
        return line
