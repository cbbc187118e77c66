"""Filesystem RecordStore: one file per record under a base directory."""

import asyncio
import logging
import os
from typing import List, Optional, TypeVar

from common.config.config import RECORD_FILE_EXTENSION
from gitgov_core.record_store.record_store import (
    DEFAULT_SERIALIZER,
    IdEncoder,
    RecordEntry,
    RecordStore,
    Serializer,
    validate_id,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")


class FsRecordStore(RecordStore[V, None, None]):
    """Stores each record at ``<base_path>/<encoded id><extension>``."""

    def __init__(
        self,
        base_path: str,
        extension: str = RECORD_FILE_EXTENSION,
        serializer: Optional[Serializer] = None,
        create_if_missing: bool = True,
        id_encoder: Optional[IdEncoder] = None,
    ):
        """Initialize the store.

        Args:
            base_path: Directory holding the record files
            extension: File extension including the dot
            serializer: Value <-> text conversion (JSON, indent 2, by default)
            create_if_missing: Create ``base_path`` on first write
            id_encoder: Optional ID <-> file name mapping
        """
        self.base_path = base_path
        self.extension = extension
        self.serializer = serializer or DEFAULT_SERIALIZER
        self.create_if_missing = create_if_missing
        self.id_encoder = id_encoder

    def _file_path(self, record_id: str) -> str:
        validate_id(record_id)
        file_id = self.id_encoder.encode(record_id) if self.id_encoder else record_id
        return os.path.join(self.base_path, f"{file_id}{self.extension}")

    async def get(self, record_id: str) -> Optional[V]:
        file_path = self._file_path(record_id)

        def _read() -> Optional[str]:
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    return f.read()
            except FileNotFoundError:
                return None

        content = await asyncio.to_thread(_read)
        if content is None:
            return None
        return self.serializer.parse(content)

    async def put(self, record_id: str, value: V, opts: None = None) -> None:
        file_path = self._file_path(record_id)
        content = self.serializer.stringify(value)

        def _write() -> None:
            if self.create_if_missing:
                os.makedirs(os.path.dirname(file_path), exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(content)

        await asyncio.to_thread(_write)
        logger.debug(f"Wrote record {record_id} to {file_path}")

    async def put_many(self, entries: List[RecordEntry[V]], opts: None = None) -> None:
        for entry in entries:
            self._file_path(entry.id)
        for entry in entries:
            await self.put(entry.id, entry.value)

    async def delete(self, record_id: str, opts: None = None) -> None:
        file_path = self._file_path(record_id)

        def _unlink() -> None:
            try:
                os.remove(file_path)
            except FileNotFoundError:
                pass

        await asyncio.to_thread(_unlink)

    async def list(self) -> List[str]:
        def _listdir() -> List[str]:
            try:
                return os.listdir(self.base_path)
            except FileNotFoundError:
                return []

        names = await asyncio.to_thread(_listdir)
        ids = [
            name[:len(name) - len(self.extension)]
            for name in sorted(names)
            if name.endswith(self.extension)
        ]
        if self.id_encoder:
            return [self.id_encoder.decode(i) for i in ids]
        return ids

    async def exists(self, record_id: str) -> bool:
        return await asyncio.to_thread(os.path.isfile, self._file_path(record_id))
