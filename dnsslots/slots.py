"""
Slot catalog loading and token matching.

A catalog maps a slot name ("env", "region", ...) to the frozen set of
values that may stand in that slot. It is built once at startup and shared
read-only by every worker.
"""
from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Tuple, Union

import yaml

from .errors import SlotsFileError

Slots = Mapping[str, FrozenSet[str]]

DEFAULT_SLOTS_FILE = Path(__file__).parent / 'data' / 'small.yml'


def build_slots(mapping: Mapping[str, Iterable]) -> Slots:
    return MappingProxyType({
        str(name): frozenset(str(v) for v in values)
        for name, values in mapping.items()
    })


def load_slots(path: Union[str, Path]) -> Slots:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SlotsFileError(f"cannot read slots file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SlotsFileError(f"cannot parse slots file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SlotsFileError(f"{path}: top level must map slot names to lists")
    for name, values in data.items():
        if not isinstance(values, list):
            raise SlotsFileError(f"{path}: slot {name!r} must be a list, got {type(values).__name__}")
        for v in values:
            if isinstance(v, (dict, list)) or v is None:
                raise SlotsFileError(f"{path}: slot {name!r} has a non-scalar value {v!r}")
    return build_slots(data)


def match_slots(tokens: List[str], slots: Slots) -> Tuple[List[str], List[int], int]:
    """Find the replaceable token positions.

    Returns the matched slot names and token indices (parallel lists, in
    ascending index order) and the product of the matched slot sizes. A token
    found in several slots is claimed by the first one declared.
    """
    names: List[str] = []
    indices: List[int] = []
    combinations = 1

    for idx, token in enumerate(tokens):
        for name, values in slots.items():
            if token in values:
                names.append(name)
                indices.append(idx)
                combinations *= len(values)
                break

    return names, indices, combinations
