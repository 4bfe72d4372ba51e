import pytest

from pgp_workbench.config import WorkbenchConfig
from pgp_workbench.tests.keys import PASSPHRASE, KeyPair, make_key


@pytest.fixture(scope="session")
def alice() -> KeyPair:
    return KeyPair.of(make_key("Alice", "alice@example.com"))


@pytest.fixture(scope="session")
def bob() -> KeyPair:
    return KeyPair.of(make_key("Bob", "bob@example.com"))


@pytest.fixture(scope="session")
def carol_protected() -> KeyPair:
    return KeyPair.of(make_key("Carol", "carol@example.com", passphrase=PASSPHRASE))


@pytest.fixture
def inline_config() -> WorkbenchConfig:
    return WorkbenchConfig(run_in_thread=False)
