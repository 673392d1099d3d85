"""Shared fixtures for journal tests."""

import pytest

from mindspace.features.journaling.models import Identity

from tests.fakes import TOKEN, USER_ID, FakeEnrichment, FakeStorage


@pytest.fixture
def identity() -> Identity:
    return Identity(user_id=USER_ID, email="user@example.com", access_token=TOKEN)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def enrichment() -> FakeEnrichment:
    return FakeEnrichment()
