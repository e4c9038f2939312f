from src.adapter.repositories.in_memory import (
    InMemoryAuditEventRepository,
    InMemorySessionRepository,
    InMemoryStore,
)
from src.app.services.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """
    UnitOfWork over an InMemoryStore.

    Every repository write is applied immediately, so commit and rollback
    only record that they were called.
    """

    def __init__(self, store: InMemoryStore = None):
        self.store = store if store is not None else InMemoryStore()
        self.committed = False

    async def __aenter__(self):
        self.sessions = InMemorySessionRepository(self.store)
        self.audit_events = InMemoryAuditEventRepository(self.store)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        self.committed = True

    async def rollback(self):
        pass
