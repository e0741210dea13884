from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol


class TransactionManager(Protocol):
    """
    Unidad de trabajo de los casos de uso.

    Todo lo que ocurre dentro de start() se confirma junto o se revierte
    junto; las llamadas al proveedor de pagos van siempre fuera.
    """

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
