"""
The slot machine.

Starting from a tokenized domain, substitute one matched position per level
with every candidate of its slot, emitting each distinct outcome once. The
unmodified domain always comes out first.
"""
from typing import Awaitable, Callable, List, Optional, Set, Tuple

from . import log
from .errors import SlotInvariantError
from .slots import Slots, match_slots
from .tokenizer import join, tokenize

Emit = Callable[[str], Awaitable[None]]
Oracle = Callable[[str], Awaitable[bool]]


async def admit(outcome: str, resolves: Optional[Oracle]) -> bool:
    if resolves is None:
        return True
    try:
        return bool(await resolves(outcome))
    except Exception as e:
        # a failed lookup only drops this outcome
        log.warn(f"lookup failed for {outcome}: {e!r}")
        return False


async def spin(tokens: List[str], names: List[str], indices: List[int], slots: Slots,
               seen: Set[str], emit: Emit, resolves: Optional[Oracle] = None) -> int:
    """Emit every variant of *tokens* reachable through the matched slots.

    *names* and *indices* are consumed head first: level ``n`` of the search
    substitutes ``indices[n]`` with each value of ``slots[names[n]]``. The
    walk uses an explicit stack whose visiting order is that of the plain
    recursion (parent before children, candidates in sorted order).

    *seen* is shared by everything spun from one input domain and keeps each
    outcome to a single emission. Expansion is memoized on
    ``(outcome, level)``, so a branch that reproduces its parent's string is
    still expanded at the deeper level.

    Returns the number of outcomes emitted.
    """
    depth = min(len(names), len(indices))
    emitted = 0
    expanded: Set[Tuple[str, int]] = set()
    stack = [(list(tokens), 0)]

    while stack:
        current, level = stack.pop()
        # lists equal in outcome and level differ only before indices[level],
        # so their subtrees emit the same names
        outcome = join(current)
        if (outcome, level) in expanded:
            continue
        expanded.add((outcome, level))

        if outcome not in seen:
            seen.add(outcome)
            if await admit(outcome, resolves):
                await emit(outcome)
                emitted += 1

        if level >= depth:
            continue

        name, idx = names[level], indices[level]
        try:
            values = slots[name]
        except KeyError:
            raise SlotInvariantError(f"matched slot {name!r} is not in the catalog") from None

        children = []
        for v in sorted(values):
            child = list(current)
            child[idx] = v
            children.append(child)
        for child in reversed(children):
            stack.append((child, level + 1))

    return emitted


async def expand(domain: str, slots: Slots, emit: Emit, resolves: Optional[Oracle] = None) -> int:
    tokens = tokenize(domain)
    names, indices, combinations = match_slots(tokens, slots)
    if names:
        log.info(f"{domain}: slots {', '.join(names)} ({combinations} combinations)")
    return await spin(tokens, names, indices, slots, set(), emit, resolves)
