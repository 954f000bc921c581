"""File-backed cache for catalogs, content records and stream lists.

Keys look like ``catalog:tamil``, ``content:<id>`` or ``streams:<id>``; each key
maps to one JSON file. Batches are staged as ``.tmp`` files beside their final
paths and only renamed into place once every file of the batch has been written,
so readers only ever see a complete previous or next generation of a file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote, unquote

import aiofiles
import orjson

from indiastreamz.core.exceptions import CacheWriteError
from indiastreamz.core.logger import logger
from indiastreamz.core.models import settings

FAMILY_DIRECTORIES = {
    "catalog": "catalogs",
    "content": "contents",
    "streams": "streams",
}
FILE_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"


@dataclass
class CacheEntry:
    value: Any
    generation: int
    mtime_ns: Optional[int] = None


def split_key(key: str):
    family, separator, name = key.partition(":")
    if not separator or family not in FAMILY_DIRECTORIES or not name:
        raise ValueError(f"Invalid cache key: {key!r}")
    return family, name


class FileCache:
    def __init__(self, cache_dir: str = None, validate_mtime: bool = None):
        self.root = Path(cache_dir or settings.CACHE_DIR)
        self.validate_mtime = (
            settings.CACHE_VALIDATE_MTIME if validate_mtime is None else validate_mtime
        )
        self.generation = 0
        self._generations: dict[str, int] = {}
        self._memory: dict[str, CacheEntry] = {}

    def directory(self, family: str) -> Path:
        return self.root / FAMILY_DIRECTORIES[family]

    def path_for(self, key: str) -> Path:
        family, name = split_key(key)
        return self.directory(family) / f"{quote(name, safe='-_.')}{FILE_SUFFIX}"

    def _ensure_directories(self):
        for family in FAMILY_DIRECTORIES:
            self.directory(family).mkdir(parents=True, exist_ok=True)

    def key_generation(self, key: str) -> int:
        return self._generations.get(key, 0)

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def keys(self, family: str) -> list[str]:
        directory = self.directory(family)
        if not directory.is_dir():
            return []
        return sorted(
            f"{family}:{unquote(path.name[: -len(FILE_SUFFIX)])}"
            for path in directory.iterdir()
            if path.name.endswith(FILE_SUFFIX)
        )

    def stats(self) -> dict:
        return {
            "generation": self.generation,
            "memory_entries": len(self._memory),
            **{family: len(self.keys(family)) for family in FAMILY_DIRECTORIES},
        }

    async def read(self, key: str):
        path = self.path_for(key)
        generation = self.key_generation(key)

        entry = self._memory.get(key)
        if entry is not None and entry.generation == generation:
            if not self.validate_mtime:
                return entry.value

            try:
                if path.stat().st_mtime_ns == entry.mtime_ns:
                    return entry.value
            except FileNotFoundError:
                self._memory.pop(key, None)
                return None

        try:
            mtime_ns = path.stat().st_mtime_ns
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except FileNotFoundError:
            self._memory.pop(key, None)
            return None
        except OSError as e:
            logger.error(f"Failed to read cache file {path}: {e}")
            return None

        try:
            value = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            logger.error(f"Corrupted cache file {path}: {e}")
            return None

        self._memory[key] = CacheEntry(value, generation, mtime_ns)
        return value

    async def _write_temp(self, path: Path, value):
        try:
            data = orjson.dumps(value, option=orjson.OPT_INDENT_2)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except (OSError, TypeError) as e:
            raise CacheWriteError(f"Failed to stage {path}: {e}") from e

    def _batch_items(self, catalogs: dict, contents: dict, streams: dict):
        for family, items in (
            ("catalog", catalogs),
            ("content", contents),
            ("streams", streams),
        ):
            for name, value in (items or {}).items():
                if family == "catalog" and not value:
                    logger.log(
                        "CACHE", f"Skipping empty catalog {name}, keeping cached data"
                    )
                    continue
                yield f"{family}:{name}", value

    def _remove_final_files(self, keep: set):
        for family in FAMILY_DIRECTORIES:
            directory = self.directory(family)
            for path in directory.iterdir():
                if path.name.endswith(FILE_SUFFIX) and path not in keep:
                    path.unlink(missing_ok=True)

    async def write_batch(
        self,
        catalogs: dict = None,
        contents: dict = None,
        streams: dict = None,
        replace: bool = False,
    ) -> bool:
        """Atomically commit a batch of catalogs, content records and stream lists.

        Returns False, leaving every final file untouched, if any file of the
        batch cannot be staged. With ``replace`` every other cache file is
        removed right before the staged files are renamed into place.

        The guarantee covers staging only. A rename that fails during the
        commit leaves the files renamed before it in place, so readers may see
        a mix of the two generations until the next successful batch.
        """
        staged = []
        try:
            self._ensure_directories()
            for key, value in self._batch_items(catalogs, contents, streams):
                final_path = self.path_for(key)
                temp_path = final_path.with_name(final_path.name + TEMP_SUFFIX)
                staged.append((key, temp_path, final_path))
                await self._write_temp(temp_path, value)
        except (CacheWriteError, OSError) as e:
            logger.error(f"Cache batch aborted, previous generation kept: {e}")
            for _, temp_path, _ in staged:
                temp_path.unlink(missing_ok=True)
            return False

        # renames are not rolled back; keys committed so far still get a new generation
        committed = []
        try:
            if replace:
                self._remove_final_files({final_path for _, _, final_path in staged})
                self._memory.clear()

            for key, temp_path, final_path in staged:
                os.replace(temp_path, final_path)
                committed.append(key)
        except OSError as e:
            logger.error(
                f"Cache commit failed after {len(committed)}/{len(staged)} files: {e}"
            )
            for _, temp_path, _ in staged:
                temp_path.unlink(missing_ok=True)
            return False
        finally:
            if committed:
                self._bump_generation(committed)

        logger.log(
            "CACHE",
            f"Committed generation {self.generation}: {len(staged)} files{' (full replacement)' if replace else ''}",
        )
        return True

    async def write_batch_replace(
        self, catalogs: dict = None, contents: dict = None, streams: dict = None
    ) -> bool:
        return await self.write_batch(catalogs, contents, streams, replace=True)

    def _bump_generation(self, keys: list[str]):
        self.generation += 1
        for key in keys:
            self._generations[key] = self.generation
            self._memory.pop(key, None)

    async def clear(self) -> bool:
        try:
            for family in FAMILY_DIRECTORIES:
                directory = self.directory(family)
                if not directory.is_dir():
                    continue
                for path in directory.iterdir():
                    if path.name.endswith((FILE_SUFFIX, TEMP_SUFFIX)):
                        path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to clear cache: {e}")
            return False
        finally:
            self._memory.clear()

        logger.log("CACHE", f"Cleared cache at {self.root}")
        return True


file_cache = FileCache()
