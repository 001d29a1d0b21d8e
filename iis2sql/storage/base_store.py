from abc import ABC, abstractmethod


class StorageError(RuntimeError):
    """A statement the database refused to execute."""

    def __init__(self, message, statement=None):
        super().__init__(message)
        self.statement = statement

    @property
    def line_number(self):
        return self.statement.line_number if self.statement is not None else None


class BaseLogStore(ABC):

    @abstractmethod
    def table_exists(self, table) -> bool:
        pass

    @abstractmethod
    def create_table(self, table, columns):
        pass

    @abstractmethod
    def ensure_columns(self, table, columns):
        """Add any of ``columns`` the table does not have yet."""
        pass

    @abstractmethod
    def insert(self, statement):
        pass

    @abstractmethod
    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
