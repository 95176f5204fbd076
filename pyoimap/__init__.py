from pyoimap.configurations import Configurations
from pyoimap.errors import (
    ConfigurationError,
    ContainerError,
    InconsistentContainerError,
    InvalidPositionError,
    KeyNotFoundError,
)
from pyoimap.maps import InsertionHashMap, InsertionHashMultimap, InsertionMap, InsertionMultimap
from pyoimap.positions import (
    IndexIterator,
    IndexPosition,
    Position,
    ReverseIndexIterator,
    ReverseSequenceIterator,
    SequenceIterator,
)

__all__ = [
    "ConfigurationError",
    "Configurations",
    "ContainerError",
    "InconsistentContainerError",
    "IndexIterator",
    "IndexPosition",
    "InsertionHashMap",
    "InsertionHashMultimap",
    "InsertionMap",
    "InsertionMultimap",
    "InvalidPositionError",
    "KeyNotFoundError",
    "Position",
    "ReverseIndexIterator",
    "ReverseSequenceIterator",
    "SequenceIterator",
]
