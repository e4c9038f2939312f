import pytest
from unittest.mock import AsyncMock, MagicMock

from src.adapter.repositories.in_memory import InMemoryStore
from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from tests.utils.clock import FakeClock


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def memory_uow(store):
    return InMemoryUnitOfWork(store)
