from abc import ABC, abstractmethod

from app.utils.singleton import AbstractSingleton


class MissingDatabaseConfigError(Exception):
    pass


class BaseDBConnectionService(ABC, metaclass=AbstractSingleton):
    db = None

    @abstractmethod
    async def _connect(self, **kwargs):
        raise NotImplementedError()

    async def connect(self):
        if self.db is None:
            return await self._connect()
        return self.db

    async def disconnect(self):
        self.db = None
