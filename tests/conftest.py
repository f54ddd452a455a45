from __future__ import annotations

import pytest

from onboarding.core.mnemonic import codec
from tests.helpers.harness import RegistrationHarness

# fixed entropy so failures are reproducible
ALICE_ENTROPY = bytes(range(16))
BOB_ENTROPY = bytes(range(100, 116))


@pytest.fixture
def alice_phrase() -> str:
    return codec.generate(16, "english", entropy=ALICE_ENTROPY)


@pytest.fixture
def bob_phrase() -> str:
    return codec.generate(16, "english", entropy=BOB_ENTROPY)


@pytest.fixture
def harness():
    h = RegistrationHarness.make()
    yield h
    h.close()


@pytest.fixture
def make_harness():
    made = []

    def _make(**kw):  # noqa: ANN003
        h = RegistrationHarness.make(**kw)
        made.append(h)
        return h

    yield _make
    for h in made:
        h.close()
