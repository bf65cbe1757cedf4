import asyncio
import os
import secrets
import time
from pathlib import Path
from typing import AsyncIterator

import aiofiles
import aiofiles.os

from errors import NotFoundError, StorageError
from logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


class BlobStore:
    def __init__(self, root: Path, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.root = Path(root)
        self.chunk_size = chunk_size

    def ensure_root(self) -> None:
        if not self.root.exists():
            logger.info(f"Creating recordings storage directory at {self.root}")
        self.root.mkdir(parents=True, exist_ok=True)

    def resolve(self, relative_path: str) -> Path:
        return self.root / relative_path

    @staticmethod
    def generate_name(extension: str) -> str:
        if extension and not extension.startswith("."):
            extension = f".{extension}"
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"recording-{unique_suffix}{extension}"

    async def write(self, name: str, source) -> int:
        final_path = self.resolve(name)
        temp_path = final_path.with_name(f".{final_path.name}.part")
        size_bytes = 0

        logger.info(f"Writing blob {name} to {final_path}")
        try:
            async with aiofiles.open(temp_path, 'wb') as out_file:
                while chunk := await source.read(self.chunk_size):
                    await out_file.write(chunk)
                    size_bytes += len(chunk)
                await out_file.flush()
                await asyncio.get_running_loop().run_in_executor(None, os.fsync, out_file.fileno())
            await aiofiles.os.replace(temp_path, final_path)
        except OSError as e:
            logger.exception(f"Error writing blob {name} to {final_path}")
            await self._discard(temp_path)
            raise StorageError(f"Error saving file: {e}") from e
        except Exception:
            logger.exception(f"Upload of blob {name} was interrupted")
            await self._discard(temp_path)
            raise

        logger.debug(f"Blob {name} written, {size_bytes} bytes")
        return size_bytes

    async def exists(self, relative_path: str) -> bool:
        return await aiofiles.os.path.isfile(self.resolve(relative_path))

    async def size(self, relative_path: str) -> int:
        try:
            return await aiofiles.os.path.getsize(self.resolve(relative_path))
        except FileNotFoundError as e:
            raise NotFoundError(f"Blob {relative_path} not found") from e
        except OSError as e:
            raise StorageError(f"Could not stat blob {relative_path}: {e}") from e

    async def open_range(self, relative_path: str, start: int, end: int) -> AsyncIterator[bytes]:
        """Open the blob now and return an iterator over bytes ``[start, end]``.

        Opening eagerly means a blob deleted after the caller's existence check
        fails here with NotFoundError instead of midway through a response.
        """
        path = self.resolve(relative_path)
        try:
            handle = await aiofiles.open(path, 'rb')
        except FileNotFoundError as e:
            raise NotFoundError(f"Blob {relative_path} not found") from e
        except OSError as e:
            raise StorageError(f"Could not open blob {relative_path}: {e}") from e
        return self._iter_range(handle, start, end)

    async def _iter_range(self, handle, start: int, end: int) -> AsyncIterator[bytes]:
        try:
            await handle.seek(start)
            remaining = end - start + 1
            while remaining > 0:
                chunk = await handle.read(min(self.chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
        finally:
            await handle.close()

    async def delete(self, relative_path: str) -> bool:
        path = self.resolve(relative_path)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.info(f"Blob {relative_path} already absent at {path}")
            return False
        except OSError as e:
            raise StorageError(f"Could not remove blob {relative_path}: {e}") from e
        logger.info(f"Removed blob {relative_path}")
        return True

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception(f"Could not remove temporary file {path}")
