"""
dns-slots command line.

Usage:
  dns-slots [options...] < domains-file
"""
import argparse
import asyncio
import io
import os
import sys
import time
from typing import Iterable, List, Optional

from . import __version__, log
from .config import Config
from .dispatcher import Sink, dispatch
from .errors import DNSSlotsError, SlotInvariantError
from .resolver import DNSOracle, parse_address
from .slots import Slots, load_slots
from .telemetry import Telemetry

EXIT_STARTUP = 1
EXIT_FAULT = 70
EXIT_INTERRUPTED = 130
EXIT_BROKEN_PIPE = 141


def _workers(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return n


def _timeout(value: str) -> float:
    t = float(value)
    if t <= 0:
        raise argparse.ArgumentTypeError("must be positive")
    return t


def _resolver(value: str) -> str:
    try:
        parse_address(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    return value


def build_parser() -> argparse.ArgumentParser:
    defaults = Config()
    parser = argparse.ArgumentParser(
        prog='dns-slots',
        usage='%(prog)s [options...] < domains-file',
        description='Spin domain names read from stdin through a slot machine of '
                    'substitution candidates.',
    )
    parser.add_argument('-o', dest='output_file', metavar='output-file', default=None,
                        help='File to output slot machine results. Default is stdout.')
    parser.add_argument('-s', dest='slots_file', metavar='slots-file', default=defaults.slots_file,
                        help='File that contains the options for each slot. Default is the bundled small.yml.')
    parser.add_argument('-w', dest='workers', type=_workers, default=defaults.workers,
                        help=f'Number of parallelized workers. Default is {defaults.workers}.')
    parser.add_argument('-v', dest='verbose', action='store_true',
                        help='Run in verbose mode.')
    parser.add_argument('-d', dest='resolve_dns', action='store_true',
                        help='Do a DNS lookup on each slot machine result and output only those with DNS records.')
    parser.add_argument('-r', dest='resolver', type=_resolver, default=defaults.resolver,
                        help=f'Resolver address used with -d. Default is {defaults.resolver}.')
    parser.add_argument('-t', dest='timeout', type=_timeout, default=defaults.timeout,
                        help=f'Per-lookup timeout in seconds. Default is {defaults.timeout}.')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def parse_config(argv: Optional[List[str]] = None) -> Config:
    ns = build_parser().parse_args(argv)
    return Config(**vars(ns))


async def spin_all(conf: Config, slots: Slots, lines: Iterable[str], sink: Sink) -> int:
    telemetry = Telemetry()
    resolves = None
    if conf.resolve_dns:
        resolves = DNSOracle(conf.resolver, conf.timeout, telemetry=telemetry)
        log.info(f"filtering on A records from {conf.resolver}")

    start_time = time.perf_counter()
    written = await dispatch(lines, slots, sink, conf.workers, resolves, telemetry)
    if log.is_verbose():
        log.stats(await telemetry.summary(time.perf_counter() - start_time))
    return written


def run(conf: Config, lines: Iterable[str]) -> int:
    slots = load_slots(conf.slots_path)
    log.info(f"loaded {len(slots)} slots from {conf.slots_file}")

    if conf.output_file:
        try:
            out = open(conf.output_file, 'w', encoding='utf-8')
        except OSError as e:
            raise DNSSlotsError(f"cannot open output file {conf.output_file}: {e}") from e
    else:
        out = sys.stdout

    def sink(line: str):
        out.write(line + '\n')
        if out is sys.stdout:
            out.flush()

    try:
        return asyncio.run(spin_all(conf, slots, lines, sink))
    finally:
        if out is not sys.stdout:
            out.close()


def read_domains():
    """stdin as text, undecodable bytes replaced rather than fatal."""
    buffer = getattr(sys.stdin, 'buffer', None)
    if buffer is None:
        return sys.stdin
    return io.TextIOWrapper(buffer, encoding='utf-8', errors='replace')


def _silence_stdout():
    # the reader went away (`| head`); keep the interpreter's final flush quiet
    try:
        fd = sys.stdout.fileno()
        os.dup2(os.open(os.devnull, os.O_WRONLY), fd)
    except (OSError, ValueError, AttributeError):
        pass


def main(argv: Optional[List[str]] = None) -> int:
    conf = parse_config(argv)
    log.set_verbose(conf.verbose)
    try:
        run(conf, read_domains())
    except SlotInvariantError as e:
        log.fatal(f"failed to spin slots: {e}")
        return EXIT_FAULT
    except DNSSlotsError as e:
        log.error(str(e))
        return EXIT_STARTUP
    except BrokenPipeError:
        _silence_stdout()
        return EXIT_BROKEN_PIPE
    except OSError as e:
        log.error(f"i/o error: {e}")
        return EXIT_STARTUP
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    return 0
