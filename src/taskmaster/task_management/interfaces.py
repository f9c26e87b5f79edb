"""Abstract interfaces for task management system."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """
    Abstract interface for a flat key-value byte store.

    Task persistence only reads and writes its own key through ``get`` and
    ``set``. ``delete`` and ``keys`` exist for maintenance tooling that resets
    a store or lists what it holds without knowing the task blob layout.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the store.

        Opens the underlying connection and creates any schema the store
        needs. Calling it more than once is harmless.

        Raises:
            StorageError: If the store cannot be opened
            SchemaError: If the schema cannot be created
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """
        Read the value stored under a key.

        Args:
            key: Key to look up

        Returns:
            Stored bytes, or None if the key is absent

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes) -> None:
        """
        Store a value under a key, overwriting any previous value.

        Args:
            key: Key to write
            value: Bytes to store

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            StorageError: If the delete fails
        """
        pass

    @abstractmethod
    async def keys(self) -> list[str]:
        """Return all stored keys in sorted order."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection."""
        pass
