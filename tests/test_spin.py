import itertools

import pytest

from dnsslots.errors import SlotInvariantError
from dnsslots.slots import build_slots, match_slots
from dnsslots.spin import expand, spin
from dnsslots.tokenizer import tokenize


class Collector:
    def __init__(self):
        self.results = []

    async def __call__(self, outcome):
        self.results.append(outcome)


def all_variants(envs, localities):
    return {f"{e}-{l}.example.com" for e, l in itertools.product(envs, localities)}


@pytest.mark.asyncio
async def test_dev_local_full_expansion(slots):
    emit = Collector()
    count = await expand("dev-local.example.com", slots, emit)

    assert count == 8
    assert emit.results == [
        "dev-local.example.com",
        "dev-remote.example.com",
        "prd-local.example.com",
        "prd-remote.example.com",
        "stg-local.example.com",
        "stg-remote.example.com",
        "uat-local.example.com",
        "uat-remote.example.com",
    ]
    assert set(emit.results) == all_variants(["dev", "uat", "stg", "prd"], ["local", "remote"])


@pytest.mark.asyncio
async def test_original_comes_first(slots):
    for domain in ("uat-remote.example.com", "remote.stg.example.com", "prd.example.com"):
        emit = Collector()
        await expand(domain, slots, emit)
        assert emit.results[0] == domain


@pytest.mark.asyncio
async def test_no_matches_emits_original_only(slots):
    emit = Collector()
    assert await expand("www.example.com", slots, emit) == 1
    assert emit.results == ["www.example.com"]


@pytest.mark.asyncio
async def test_converging_paths_emit_once():
    catalog = build_slots({"side": ["x", "y"]})
    emit = Collector()
    await expand("x.y", catalog, emit)

    assert len(emit.results) == len(set(emit.results))
    assert set(emit.results) == {"x.y", "x.x", "y.y", "y.x"}
    assert emit.results[0] == "x.y"


@pytest.mark.asyncio
async def test_shared_candidates_between_slots():
    catalog = build_slots({"a": ["x", "y"], "b": ["y", "z"]})
    emit = Collector()
    await expand("x-z", catalog, emit)

    assert sorted(emit.results) == sorted({"x-z", "x-y", "y-z", "y-y"})


@pytest.mark.asyncio
async def test_outcomes_only_substitute_matched_positions(slots):
    emit = Collector()
    await expand("dev.local.dev.example.com", slots, emit)

    for outcome in emit.results:
        tokens = tokenize(outcome)
        assert tokens[6:] == ["example", ".", "com"]
        assert tokens[0] in slots["env"]
        assert tokens[2] in slots["locality"]
        assert tokens[4] in slots["env"]
    assert len(emit.results) == 4 * 2 * 4


@pytest.mark.asyncio
async def test_dns_filter_keeps_resolving_names(slots):
    async def only_original(name):
        return name == "dev-local.example.com"

    emit = Collector()
    count = await expand("dev-local.example.com", slots, emit, resolves=only_original)

    assert count == 1
    assert emit.results == ["dev-local.example.com"]


@pytest.mark.asyncio
async def test_lookup_errors_are_treated_as_misses(slots):
    lookups = []

    async def flaky(name):
        lookups.append(name)
        if name.startswith("dev-"):
            raise OSError("network unreachable")
        return True

    emit = Collector()
    await expand("dev-local.example.com", slots, emit, resolves=flaky)

    assert len(lookups) == 8
    assert sorted(emit.results) == sorted(
        all_variants(["uat", "stg", "prd"], ["local", "remote"]))


@pytest.mark.asyncio
async def test_seen_set_is_shared_with_caller(slots):
    tokens = tokenize("dev-local.example.com")
    names, indices, _ = match_slots(tokens, slots)
    seen = {"dev-local.example.com", "prd-remote.example.com"}
    emit = Collector()

    count = await spin(tokens, names, indices, slots, seen, emit)

    assert count == 6
    assert "dev-local.example.com" not in emit.results
    assert "prd-remote.example.com" not in emit.results
    assert seen == all_variants(["dev", "uat", "stg", "prd"], ["local", "remote"])


@pytest.mark.asyncio
async def test_caller_tokens_are_not_mutated(slots):
    tokens = tokenize("dev-local.example.com")
    names, indices, _ = match_slots(tokens, slots)
    await spin(tokens, names, indices, slots, set(), Collector())
    assert tokens == ["dev", "-", "local", ".", "example", ".", "com"]


@pytest.mark.asyncio
async def test_missing_slot_is_a_fault(slots):
    with pytest.raises(SlotInvariantError, match="ghost"):
        await spin(tokenize("dev.example.com"), ["ghost"], [0], slots, set(), Collector())


@pytest.mark.asyncio
async def test_candidates_with_separators_lose_nothing():
    catalog = build_slots({
        "first": ["a", "x", "x-y"],
        "second": ["b", "z", "y-z"],
        "third": ["c", "d"],
    })
    emit = Collector()
    await expand("a-b.c", catalog, emit)

    # "x-y" + "z" and "x" + "y-z" join to the same name on different tokens
    expected = {
        f"{v1}-{v2}.{v3}"
        for v1, v2, v3 in itertools.product(catalog["first"], catalog["second"], catalog["third"])
    }
    assert "x-y-z.d" in expected
    assert len(emit.results) == len(set(emit.results))
    assert set(emit.results) == expected
