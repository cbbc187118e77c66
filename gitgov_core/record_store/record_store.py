"""
Record Store Interface

Generic key/value persistence for structured records, implemented over the
filesystem, process memory and the GitHub contents API.

USAGE NOTES:
- IDs are validated before any I/O: empty IDs and IDs containing "..", "/"
  or "\\" are rejected. A single "." is allowed ("human.camilo").
- An optional IdEncoder maps IDs to storage-safe file names; list() always
  returns decoded IDs.
- get() returns None for a missing record; delete() of a missing record is
  a no-op.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar

V = TypeVar("V")  # record value
R = TypeVar("R")  # write result
O = TypeVar("O")  # write options


class InvalidIdError(ValueError):
    """A record ID was rejected before any I/O took place."""


class ConfigurationError(Exception):
    """A store was used without a dependency the operation requires."""


class IdEncoder(ABC):
    """Reversible mapping between record IDs and storage names."""

    @abstractmethod
    def encode(self, record_id: str) -> str:
        pass

    @abstractmethod
    def decode(self, encoded: str) -> str:
        pass


class ColonIdEncoder(IdEncoder):
    """Maps ":" to "_".

    Raw IDs containing "_" are rejected by encode(), otherwise decode() could
    not tell them apart from encoded colons.
    """

    def encode(self, record_id: str) -> str:
        if "_" in record_id:
            raise InvalidIdError(f'Invalid ID: "{record_id}". IDs cannot contain "_" with the colon encoder')
        return record_id.replace(":", "_")

    def decode(self, encoded: str) -> str:
        return encoded.replace("_", ":")


DEFAULT_ID_ENCODER = ColonIdEncoder()


class Serializer(ABC):
    @abstractmethod
    def stringify(self, value: Any) -> str:
        pass

    @abstractmethod
    def parse(self, text: str) -> Any:
        pass


class JsonSerializer(Serializer):
    def stringify(self, value: Any) -> str:
        return json.dumps(value, indent=2)

    def parse(self, text: str) -> Any:
        return json.loads(text)


DEFAULT_SERIALIZER = JsonSerializer()


@dataclass
class RecordEntry(Generic[V]):
    id: str
    value: V


def validate_id(record_id: str) -> None:
    """Reject IDs that are empty or could escape the store's directory.

    Raises:
        InvalidIdError: If the ID is empty or contains "..", "/" or "\\"
    """
    if not record_id or not isinstance(record_id, str):
        raise InvalidIdError("ID must be a non-empty string")
    if ".." in record_id or "/" in record_id or "\\" in record_id:
        raise InvalidIdError(f'Invalid ID: "{record_id}". IDs cannot contain /, \\, or ..')


class RecordStore(ABC, Generic[V, R, O]):
    """Abstract record store parameterized by value, write-result and write-options types."""

    @abstractmethod
    async def get(self, record_id: str) -> Optional[V]:
        pass

    @abstractmethod
    async def put(self, record_id: str, value: V, opts: Optional[O] = None) -> R:
        pass

    @abstractmethod
    async def put_many(self, entries: List[RecordEntry[V]], opts: Optional[O] = None) -> R:
        """Write several records; backends with Git history do it in one commit."""
        pass

    @abstractmethod
    async def delete(self, record_id: str, opts: Optional[O] = None) -> R:
        pass

    @abstractmethod
    async def list(self) -> List[str]:
        pass

    @abstractmethod
    async def exists(self, record_id: str) -> bool:
        pass
