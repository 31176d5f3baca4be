"""
Resolve Service

This service handles the lookup side of the attribution flow: a Telegram
bot receives a code as its start parameter and exchanges it for the click
attribution captured at redirect time.

Lookup order:
1. Format check (no crypto, no I/O)
2. Signature check (no I/O); forged codes look like unknown codes
3. Cache, then storage; storage hits are written back to the cache

Design Decisions:
- Resolution is recorded once; the storage update is conditional so only
  one caller flips a code to resolved
- Local and cached state change only after storage accepted the update
- One-time codes are deleted from storage and cache after resolution
"""

import logging
from typing import Optional

from tg_redirect.core.exceptions import (
    CodeFormatError,
    CodeNotFoundError,
    CodeSignatureError,
    StorageError,
)
from tg_redirect.core.types import ClickAttribution, CodeMapping
from tg_redirect.core.utils import utc_now_iso
from tg_redirect.core.validators import sanitize_code_for_log
from tg_redirect.db.interface import AttributionStorage
from tg_redirect.services.code_cache import CodeCache
from tg_redirect.services.code_codec import CodeCodec

logger = logging.getLogger(__name__)


class ResolveService:
    """
    Service for resolving attribution codes.

    Usage:
        service = ResolveService(storage, codec, cache, one_time_codes=False)
        attribution = await service.resolve(code)
        mapping = await service.status(code)
    """

    def __init__(
        self,
        storage: AttributionStorage,
        codec: CodeCodec,
        cache: CodeCache,
        one_time_codes: bool = False,
    ):
        self.storage = storage
        self.codec = codec
        self.cache = cache
        self.one_time_codes = one_time_codes

    def _check_code(self, code: str) -> None:
        if not self.codec.is_well_formed(code):
            logger.info(f"Invalid code format: {sanitize_code_for_log(code)!r}")
            raise CodeFormatError(code)

        if not self.codec.verify(code):
            # Possible probing or forgery
            logger.warning(f"Invalid code signature: {sanitize_code_for_log(code)!r}")
            raise CodeSignatureError(code)

    async def _lookup(self, code: str) -> CodeMapping:
        self._check_code(code)

        mapping = self.cache.get(code)
        if mapping is not None:
            return mapping

        try:
            mapping = await self.storage.get_code(code)
        except Exception as e:
            logger.error(f"Failed to fetch code {sanitize_code_for_log(code)!r}: {e}", exc_info=True)
            raise StorageError("failed to fetch code", original_error=e)

        if mapping is None:
            logger.info(f"Code not found: {sanitize_code_for_log(code)!r}")
            raise CodeNotFoundError(code)

        self.cache.set(code, mapping)
        return mapping

    async def resolve(self, code: str) -> ClickAttribution:
        """
        Resolve a code and consume it.

        Marks the mapping resolved on first use and, with one-time codes,
        deletes it afterwards.

        Returns:
            The click attribution stored for the code

        Raises:
            CodeFormatError: Malformed code
            CodeSignatureError: Signature mismatch (a CodeNotFoundError)
            CodeNotFoundError: No mapping for the code
            StorageError: Storage read failed
        """
        mapping = await self._lookup(code)
        was_resolved = mapping.resolved

        if not mapping.resolved:
            mapping = await self._mark_resolved(mapping)

        if self.one_time_codes:
            await self._delete(code)

        logger.info(
            f"Code resolved: code={sanitize_code_for_log(code)!r} "
            f"slug={mapping.attribution.slug} was_resolved={was_resolved}"
        )
        return mapping.attribution

    async def status(self, code: str) -> CodeMapping:
        """
        Look up a code without consuming it.

        Returns:
            The mapping, including resolution state

        Raises:
            Same as resolve()
        """
        return await self._lookup(code)

    async def _mark_resolved(self, mapping: CodeMapping) -> CodeMapping:
        resolved_at = utc_now_iso()
        try:
            transitioned = await self.storage.mark_resolved(mapping.code, resolved_at)
        except Exception as e:
            logger.error(
                f"Failed to mark code {sanitize_code_for_log(mapping.code)!r} as resolved: {e}",
                exc_info=True
            )
            return mapping

        if transitioned:
            mapping.resolved = True
            mapping.resolved_at = resolved_at
            self.cache.set(mapping.code, mapping)
            return mapping

        # Another caller resolved (or deleted) it first; follow storage
        current = await self._refresh(mapping.code)
        return current if current is not None else mapping

    async def _refresh(self, code: str) -> Optional[CodeMapping]:
        try:
            current = await self.storage.get_code(code)
        except Exception as e:
            logger.error(f"Failed to re-read code {sanitize_code_for_log(code)!r}: {e}", exc_info=True)
            self.cache.delete(code)
            return None

        if current is None:
            self.cache.delete(code)
        else:
            self.cache.set(code, current)
        return current

    async def _delete(self, code: str) -> None:
        try:
            await self.storage.delete_code(code)
        except Exception as e:
            logger.error(f"Failed to delete one-time code {sanitize_code_for_log(code)!r}: {e}", exc_info=True)
            return
        self.cache.delete(code)
        logger.info(f"One-time code deleted: {sanitize_code_for_log(code)!r}")
