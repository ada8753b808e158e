import sys

_verbose = False


def set_verbose(on: bool):
    global _verbose
    _verbose = bool(on)


def is_verbose() -> bool:
    return _verbose


def _write(tag: str, msg: str):
    sys.stderr.write(f"[{tag}] {msg}\n"); sys.stderr.flush()


def info(msg: str):
    if _verbose:
        _write("info", msg)


def warn(msg: str):
    if _verbose:
        _write("warn", msg)


def stats(msg: str):
    if _verbose:
        _write("stats", msg)


def error(msg: str):
    _write("error", msg)


def fatal(msg: str):
    _write("fatal", msg)
