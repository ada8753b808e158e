import pytest

from dnsslots import log
from dnsslots.slots import build_slots


@pytest.fixture(autouse=True)
def quiet():
    log.set_verbose(False)
    yield
    log.set_verbose(False)


@pytest.fixture
def slots():
    return build_slots({
        "env": ["dev", "uat", "stg", "prd"],
        "locality": ["local", "remote"],
    })


@pytest.fixture
def slots_file(tmp_path):
    path = tmp_path / "slots.yml"
    path.write_text(
        "env:\n"
        "  - dev\n"
        "  - uat\n"
        "  - stg\n"
        "  - prd\n"
        "locality: [local, remote]\n"
    )
    return path
