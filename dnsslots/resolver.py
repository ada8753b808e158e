"""
DNS existence check for spun names, via dnspython's dns.asyncresolver.

An oracle answers one question: does the name have at least one A record on
the given resolver. NXDOMAIN and empty answers are a plain "no"; timeouts
and other failures are raised so the caller decides what they mean.
"""
import asyncio
import functools
import time
from typing import Optional, Tuple

import dns.asyncresolver as aresolver
import dns.exception
import dns.resolver as dresolver  # exceptions here

from .telemetry import Telemetry

GOOGLE_DNS = "8.8.8.8:53"
DNS_PORT = 53
DEFAULT_TIMEOUT = 2.0


def parse_address(address: str) -> Tuple[str, int]:
    """Split "host", "host:port", "[v6]:port" or a bare IPv6 address."""
    address = address.strip()
    if address.startswith('['):
        host, sep, rest = address[1:].partition(']')
        if not sep:
            raise ValueError(f"bad resolver address: {address}")
        if rest.startswith(':'):
            return host, int(rest[1:])
        return host, DNS_PORT
    if address.count(':') == 1:
        host, port = address.split(':')
        return host, int(port)
    return address, DNS_PORT


def make_resolver(address: str, timeout: float) -> aresolver.Resolver:
    host, port = parse_address(address)
    r = aresolver.Resolver(configure=False)
    r.port = port
    r.nameservers = [host]
    r.timeout = timeout
    r.lifetime = timeout
    r.retry_servfail = False
    return r


class DNSOracle:
    def __init__(self, address: str = GOOGLE_DNS, timeout: float = DEFAULT_TIMEOUT,
                 telemetry: Optional[Telemetry] = None,
                 resolver: Optional[aresolver.Resolver] = None):
        self.address = address
        self.timeout = timeout
        self.telemetry = telemetry
        self.resolver = resolver if resolver is not None else make_resolver(address, timeout)

    async def _record(self, t0: float, outcome: str):
        if self.telemetry is not None:
            lat = (time.perf_counter() - t0) * 1000
            await self.telemetry.record(lat, outcome)

    async def __call__(self, fqdn: str) -> bool:
        t0 = time.perf_counter()
        try:
            ans = await asyncio.wait_for(
                self.resolver.resolve(fqdn, 'A', lifetime=self.timeout, search=False),
                timeout=self.timeout + 0.5
            )
        except (dresolver.NXDOMAIN, dresolver.NoAnswer):
            await self._record(t0, 'success')
            return False
        except (asyncio.TimeoutError, dns.exception.Timeout, dresolver.LifetimeTimeout, dresolver.NoNameservers):
            await self._record(t0, 'timeout')
            raise
        except Exception:
            await self._record(t0, 'error')
            raise
        await self._record(t0, 'success')
        return len(ans) > 0


@functools.lru_cache(maxsize=16)
def _oracle(resolver_address: str, timeout: float) -> DNSOracle:
    return DNSOracle(resolver_address, timeout)


async def resolves(fqdn: str, resolver_address: str = GOOGLE_DNS, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """One-shot check for library callers.

    Oracles are cached per address and timeout. The command line builds its
    own DNSOracle so lookups feed the run's Telemetry.
    """
    return await _oracle(resolver_address, timeout)(fqdn)
