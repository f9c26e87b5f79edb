"""Custom exceptions for task management functionality."""


class TaskManagementError(Exception):
    """Base exception for task management errors."""

    pass


class ManagerNotInitializedError(TaskManagementError):
    """Exception raised when the state manager is mutated before loading."""

    pass


class PersistenceError(TaskManagementError):
    """Base exception for failures reported by the persistence adapter."""

    pass


class DecodeError(PersistenceError):
    """Exception raised when a stored blob does not match the task schema."""

    pass


class EncodeError(PersistenceError):
    """Exception raised when the task collection cannot be serialized."""

    pass


class StorageError(PersistenceError):
    """Exception raised for key-value store related errors."""

    pass


class SchemaError(StorageError):
    """Exception raised for key-value store schema errors."""

    pass
