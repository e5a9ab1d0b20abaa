import pytest


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt work factor so hashing does not dominate test time."""
    monkeypatch.setattr("utils.credentials.BCRYPT_ROUNDS", 4)
