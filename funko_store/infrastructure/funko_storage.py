"""Funko Storage - one directory per user, one pretty-printed JSON file per record.

Invariants:
    - Layout is <root>/<user>/<id>.json; the directory listing is the only index
    - The user directory is created on demand before every operation
    - load_all() skips unreadable or undecodable record files and ignores entries
      without the .json suffix; only a directory failure fails the listing
    - save() overwrites in place (full replacement); create vs update is decided
      by the caller's existence check
    - delete() reports absence and OS errors identically (False)
    - No cache: every call goes back to the filesystem

Design Decisions:
    - asyncio.to_thread for each filesystem call: every IO step is a suspension
      point and never blocks other connections on the event loop
    - load_all fans out one read per directory entry and joins with
      asyncio.as_completed: the result is ready only after every entry (read or
      skipped) has reported; list order is completion order
    - User names that are empty or escape the root are rejected as unavailable
      storage rather than touching paths outside the root
"""

import asyncio
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from funko_store.core.errors import ErrorContext, StorageUnavailableError
from funko_store.schemas.funko import Funko

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


class FunkoStorage:
    """Filesystem-backed collection store keyed by (user, funko id)."""

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve()

    def user_path(self, user: str) -> Path:
        """Directory holding `user`'s records. Does not touch the filesystem."""
        try:
            path = (self.root / user).resolve() if user else self.root
        except (ValueError, OSError) as e:
            raise StorageUnavailableError(
                f"invalid user name {user!r}: {e}", "resolve",
                ErrorContext(user=user),
            ) from e
        if path.parent != self.root:
            raise StorageUnavailableError(
                f"invalid user name {user!r}", "resolve",
                ErrorContext(user=user),
            )
        return path

    def record_path(self, user: str, funko_id: int) -> Path:
        return self.user_path(user) / f"{funko_id}{RECORD_SUFFIX}"

    async def ensure_user_directory(self, user: str) -> Path:
        """Create the user's directory if absent and return its absolute path."""
        path = self.user_path(user)
        try:
            await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(
                f"Could not create directory {path}: {e}",
                extra={"usuario": user},
            )
            raise StorageUnavailableError(
                str(e), "mkdir", ErrorContext(user=user),
            ) from e
        return path

    async def load_all(self, user: str) -> list[Funko]:
        """Every decodable record in the user's collection, in no particular order."""
        path = await self.ensure_user_directory(user)
        try:
            entries = await asyncio.to_thread(os.listdir, path)
        except OSError as e:
            logger.error(
                f"Could not list directory {path}: {e}",
                extra={"usuario": user},
            )
            raise StorageUnavailableError(
                str(e), "listdir", ErrorContext(user=user),
            ) from e

        funkos: list[Funko] = []
        reads = [self._read_entry(path / name, user) for name in entries]
        for finished in asyncio.as_completed(reads):
            funko = await finished
            if funko is not None:
                funkos.append(funko)
        logger.debug(
            f"Loaded {len(funkos)} of {len(entries)} entries",
            extra={"usuario": user},
        )
        return funkos

    async def save(self, user: str, funko: Funko) -> bool:
        """Write `funko` to <id>.json, replacing any existing file."""
        try:
            await self.ensure_user_directory(user)
        except StorageUnavailableError:
            return False
        target = self.record_path(user, funko.id)
        content = json.dumps(funko.to_wire(), indent=2, ensure_ascii=False)
        try:
            await asyncio.to_thread(target.write_text, content, encoding="utf-8")
        except OSError as e:
            logger.error(
                f"Could not write {target}: {e}",
                extra={"usuario": user, "funko_id": funko.id},
            )
            return False
        return True

    async def delete(self, user: str, funko_id: int) -> bool:
        """Remove <id>.json. False when it is absent or cannot be removed."""
        try:
            await self.ensure_user_directory(user)
        except StorageUnavailableError:
            return False
        target = self.record_path(user, funko_id)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            logger.info(
                f"Nothing to delete at {target}",
                extra={"usuario": user, "funko_id": funko_id},
            )
            return False
        except OSError as e:
            logger.error(
                f"Could not delete {target}: {e}",
                extra={"usuario": user, "funko_id": funko_id},
            )
            return False
        return True

    async def _read_entry(self, entry: Path, user: str) -> Funko | None:
        """Decode one directory entry. None for non-records and corrupt files."""
        if entry.suffix != RECORD_SUFFIX:
            return None
        try:
            content = await asyncio.to_thread(entry.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                f"Skipping unreadable record {entry.name}: {e}",
                extra={"usuario": user},
            )
            return None
        try:
            return Funko.model_validate_json(content)
        except ValidationError as e:
            logger.warning(
                f"Skipping corrupt record {entry.name}: {e.error_count()} error(s)",
                extra={"usuario": user},
            )
            return None
