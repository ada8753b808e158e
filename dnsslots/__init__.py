"""
dns-slots: spin domain names through slot machines of environment, region
and tier tokens, optionally keeping only the variants that resolve.
"""
from .errors import DNSSlotsError, SlotInvariantError, SlotsFileError
from .slots import build_slots, load_slots, match_slots
from .spin import expand, spin
from .tokenizer import join, tokenize

__version__ = "0.1.0"

__all__ = [
    "DNSSlotsError", "SlotInvariantError", "SlotsFileError",
    "build_slots", "load_slots", "match_slots",
    "expand", "spin", "join", "tokenize",
]
