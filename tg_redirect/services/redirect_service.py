"""
Redirect Service

This service handles the click side of the attribution flow:
- Looks up the slug's destination
- Issues and stores an attribution code for bot destinations
- Builds the outbound Telegram URL
- Logs every click
- Flags crawler and link-preview clicks (they are redirected like any other)

Design Decisions:
- Redirect availability beats attribution completeness: storage failures
  are logged and the click still redirects
- Public and invite destinations never get a code; there is no later
  lookup for them
- Collaborators (extractors, device and bot classifiers, IP hashing) are injectable so the
  flow can be tested without HTTP
"""

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from tg_redirect.core.exceptions import SlugNotFoundError
from tg_redirect.core.types import ClickAttribution, ClickLog, CodeMapping, DeviceInfo, UTMParams
from tg_redirect.core.utils import generate_request_id, hash_ip as salted_hash_ip, utc_now_iso
from tg_redirect.core.validators import extract_extra_params, extract_utm_params
from tg_redirect.db.interface import AttributionStorage
from tg_redirect.services.code_codec import CodeCodec
from tg_redirect.services.shim import build_deep_link, build_redirect_url
from tg_redirect.services.slugs import SlugConfig, SlugRegistry
from tg_redirect.services.user_agent import is_bot, parse_user_agent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClickOutcome:
    """Result of handling one click."""
    redirect_url: str
    deep_link: str
    request_id: str
    slug_config: SlugConfig
    device: DeviceInfo
    code: Optional[str] = None
    start_param: Optional[str] = None
    attribution_stored: bool = False
    use_shim: bool = False
    is_bot: bool = False


class RedirectService:
    """
    Service for handling ad clicks.

    Usage:
        service = RedirectService(storage, codec, slugs, ip_hash_salt=settings.IP_HASH_SALT)
        outcome = await service.handle_click("sales-bot", query, client_ip, user_agent)
    """

    def __init__(
        self,
        storage: AttributionStorage,
        codec: CodeCodec,
        slugs: SlugRegistry,
        ip_hash_salt: str = "",
        extract_utm: Callable[[Mapping[str, str]], UTMParams] = extract_utm_params,
        extract_extra: Callable[[Mapping[str, str]], dict[str, str]] = extract_extra_params,
        classify_device: Callable[[Optional[str]], DeviceInfo] = parse_user_agent,
        detect_bot: Callable[[Optional[str]], bool] = is_bot,
        hash_ip: Optional[Callable[[Optional[str]], str]] = None,
    ):
        self.storage = storage
        self.codec = codec
        self.slugs = slugs
        self.extract_utm = extract_utm
        self.extract_extra = extract_extra
        self.classify_device = classify_device
        self.detect_bot = detect_bot
        self.hash_ip = hash_ip or (lambda ip: salted_hash_ip(ip, ip_hash_salt))

    async def handle_click(
        self,
        slug: str,
        query: Mapping[str, str],
        client_ip: Optional[str],
        user_agent: Optional[str],
    ) -> ClickOutcome:
        """
        Process one click.

        Args:
            slug: Path segment identifying the redirect rule
            query: Raw query parameters
            client_ip: Client IP (hashed before storage)
            user_agent: Raw User-Agent header

        Returns:
            ClickOutcome with the destination and whether a shim page is needed

        Raises:
            SlugNotFoundError: If the slug is unknown or inactive
        """
        slug_config = self.slugs.get(slug)
        if slug_config is None:
            raise SlugNotFoundError(slug)

        request_id = generate_request_id()
        timestamp = utc_now_iso()
        user_agent = user_agent or ""
        ip_hash = self.hash_ip(client_ip)
        device = self.classify_device(user_agent)
        utm = self.extract_utm(query)
        extra_params = self.extract_extra(query)

        bot_request = self.detect_bot(user_agent)
        if bot_request:
            # Crawlers and link previewers still get the redirect
            logger.info(f"Bot request detected: slug={slug} request_id={request_id} user_agent={user_agent[:200]!r}")

        code = None
        start_param = None
        attribution_stored = False

        if slug_config.type == "bot":
            if slug_config.default_start_param:
                # Fixed start parameter configured: no per-click attribution
                start_param = slug_config.default_start_param
            else:
                code = self.codec.generate()
                mapping = CodeMapping(
                    code=code,
                    attribution=ClickAttribution(
                        slug=slug,
                        timestamp=timestamp,
                        utm=utm,
                        extra_params=extra_params,
                        ip_hash=ip_hash,
                        user_agent=user_agent,
                        device=device,
                        request_id=request_id,
                    ),
                    bot_username=slug_config.destination,
                    created_at=timestamp,
                    resolved=False,
                )
                attribution_stored = await self._store_mapping(mapping)
                if attribution_stored:
                    start_param = code
                else:
                    code = None

        redirect_url = build_redirect_url(slug_config.type, slug_config.destination, start_param)

        await self._log_click(
            ClickLog(
                request_id=request_id,
                slug=slug,
                timestamp=timestamp,
                ip_hash=ip_hash,
                user_agent=user_agent,
                redirect_target=redirect_url,
                code=code,
                query_params={**utm.present(), **extra_params},
            )
        )

        logger.info(
            f"Processing redirect: slug={slug} request_id={request_id} "
            f"type={slug_config.type} mode={slug_config.mode} "
            f"device={device.type} has_code={code is not None}"
        )

        return ClickOutcome(
            redirect_url=redirect_url,
            deep_link=build_deep_link(slug_config.type, slug_config.destination, start_param),
            request_id=request_id,
            slug_config=slug_config,
            device=device,
            code=code,
            start_param=start_param,
            attribution_stored=attribution_stored,
            use_shim=slug_config.mode == "shim",
            is_bot=bot_request,
        )

    async def _store_mapping(self, mapping: CodeMapping) -> bool:
        try:
            await self.storage.store_code(mapping)
        except Exception as e:
            logger.warning(
                f"Failed to store code mapping for slug={mapping.attribution.slug} "
                f"request_id={mapping.attribution.request_id}: {e}",
                exc_info=True
            )
            return False
        return True

    async def _log_click(self, entry: ClickLog) -> None:
        try:
            await self.storage.log_click(entry)
        except Exception as e:
            logger.warning(
                f"Failed to log click for slug={entry.slug} request_id={entry.request_id}: {e}",
                exc_info=True
            )
