"""Async facade over a backend's file, session, storage and AI calls."""

import asyncio
from typing import Any, Dict, Optional, Tuple

from .config import MAX_STORAGE_BYTES

# Lookup order when a name is resolved without its namespace
FILE_NAMESPACES = ("documents", "images")


def format_bytes(size: int) -> str:
    """Human readable size: whole KB below one MB, one decimal MB above."""
    if size == 0:
        return "0 KB"
    kb = size / 1024
    if kb < 1024:
        return f"{round(kb)} KB"
    return f"{kb / 1024:.1f} MB"


class FileSessionClient:
    """Runs blocking backend calls in a worker thread so the event loop keeps going."""

    def __init__(self, backend, max_storage: int = MAX_STORAGE_BYTES):
        self.backend = backend
        self.max_storage = max_storage

    async def _call(self, func, *args):
        return await asyncio.to_thread(func, *args)

    async def get_files(self) -> Dict[str, Dict[str, Any]]:
        return await self._call(self.backend.get_files)

    async def find_file(self, name: str) -> Optional[Tuple[str, Dict[str, Any]]]:
        """
        Resolve a file name across both namespaces.

        Returns:
            (namespace, entry) for the first match, documents before images,
            or None when the name is unknown
        """
        files = await self.get_files()
        for namespace in FILE_NAMESPACES:
            entry = (files.get(namespace) or {}).get(name)
            if entry is not None:
                return namespace, entry
        return None

    async def save_file(self, file_type: str, name: str, content: str) -> None:
        await self._call(self.backend.save_file, file_type, name, content)

    async def delete_file(self, file_type: str, name: str) -> None:
        await self._call(self.backend.delete_file, file_type, name)

    async def list_sessions(self) -> Dict[str, Any]:
        return await self._call(self.backend.list_sessions)

    async def save_session(self, state: Dict[str, Any]) -> str:
        return await self._call(self.backend.save_session, state)

    async def load_session(self, session_id: str) -> Dict[str, Any]:
        return await self._call(self.backend.load_session, session_id)

    async def delete_session(self, session_id: str) -> None:
        await self._call(self.backend.delete_session, session_id)

    async def storage_usage(self) -> int:
        return await self._call(self.backend.get_storage_usage)

    async def storage_summary(self) -> str:
        used = await self.storage_usage()
        return f"{format_bytes(used)} / {format_bytes(self.max_storage)}"

    async def chat(self, prompt: str) -> str:
        return await self._call(self.backend.chat, prompt)

    async def generate_image(self, prompt: str) -> Optional[str]:
        return await self._call(self.backend.generate_image, prompt)

    async def google_search(self, query: str) -> Dict[str, Any]:
        return await self._call(self.backend.google_search, query)
