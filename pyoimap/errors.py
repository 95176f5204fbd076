from typing import Any


class ContainerError(Exception):
    pass


class KeyNotFoundError(ContainerError, KeyError):
    def __init__(self, key: Any) -> None:  # noqa: ANN401
        super().__init__(key)
        self.key = key


class InvalidPositionError(ContainerError, ValueError):
    pass


class ErasedEntryError(InvalidPositionError):
    def __init__(self) -> None:
        super().__init__("position refers to an erased entry")


class EndPositionError(InvalidPositionError):
    def __init__(self) -> None:
        super().__init__("cannot dereference an end position")


class ConfigurationError(ContainerError, ValueError):
    pass


class InconsistentContainerError(ContainerError):
    pass
