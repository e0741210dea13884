from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.application.interfaces.transaction_manager import TransactionManager


class NoopTransactionManager(TransactionManager):
    """Sin transacciones: la atomicidad en memoria la dan los locks de cada repo."""

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
