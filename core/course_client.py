# core/course_client.py
import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
import httpx
from config.settings import settings
from model.curriculum import ItemKind, WorkItem
from util.constants import ExternalURIs
from util.errors import RemoteError, TranscriptUnavailable
from util.timing import timed
from util.types import CaptionPayload, CurriculumEntryPayload, CurriculumPagePayload

logger = logging.getLogger(__name__)

VIDEO_ASSET = "Video"


def _to_work_item(entry: CurriculumEntryPayload) -> WorkItem:
    kind = ItemKind.from_upstream(entry.get("_class"))
    asset = entry.get("asset") or {}
    asset_type = asset.get("asset_type") if asset else None
    return WorkItem(
        kind=kind,
        id=int(entry["id"]),
        title=str(entry.get("title") or ""),
        ordinal=int(entry.get("sort_order") or 0),
        hasVideoAsset=kind is ItemKind.lecture and asset_type == VIDEO_ASSET,
        assetType=asset_type,
    )


def pick_caption_track(
    captions: Optional[Sequence[CaptionPayload]], locales: Sequence[str]
) -> CaptionPayload:
    """
    First caption whose `locale_id` or `language` is in `locales` and which has a URL.
    Raises TranscriptUnavailable when there is none.
    """
    if not captions or not isinstance(captions, list):
        raise TranscriptUnavailable("no captions")
    wanted = set(locales)
    for c in captions:
        if not isinstance(c, dict) or not c.get("url"):
            continue
        if c.get("locale_id") in wanted or c.get("language") in wanted:
            return c
    raise TranscriptUnavailable("no english caption track")


class CourseClient:
    """
    Read-only client for the course service.

    Every lookup is preceded by a random pause inside the throttle window so a
    long run does not look like a scraper. There are no retries here; the
    pipeline decides what to do with a failed item.
    """

    def __init__(
        self,
        *,
        base_url: str = settings.UPSTREAM_BASE_URL,
        cookie: Optional[str] = settings.UPSTREAM_COOKIE,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECONDS,
        throttle: tuple[float, float] = (
            settings.THROTTLE_MIN_SECONDS,
            settings.THROTTLE_MAX_SECONDS,
        ),
        page_size: int = settings.CURRICULUM_PAGE_SIZE,
        caption_locales: Sequence[str] = tuple(settings.CAPTION_LOCALES),
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._cookie = cookie
        self._timeout = httpx.Timeout(timeout, connect=min(timeout, 10.0))
        self._throttle_window = throttle
        self._page_size = page_size
        self._caption_locales = tuple(caption_locales)
        self._transport = transport
        self._sleep = sleep

    def _session(self) -> httpx.AsyncClient:
        headers = {"accept": "application/json"}
        if self._cookie:
            headers["cookie"] = self._cookie
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    def _cdn(self) -> httpx.AsyncClient:
        # Caption files live on a CDN; the session cookie stays with the API host.
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _throttle(self) -> None:
        low, high = self._throttle_window
        await self._sleep(random.uniform(low, max(low, high)))

    async def fetch_curriculum(self, course_id: int) -> List[WorkItem]:
        url: Optional[str] = ExternalURIs.CURRICULUM.format(course_id=course_id)
        params: Optional[Dict[str, Any]] = {
            "curriculum_types": "chapter,lecture,quiz",
            "page_size": self._page_size,
            "fields[lecture]": "title,asset",
            "fields[chapter]": "title",
        }
        items: List[WorkItem] = []
        with timed(logger, "course.curriculum", course=course_id):
            async with self._session() as client:
                # Follow `next` links; upstream order is the processing order.
                while url:
                    await self._throttle()
                    try:
                        res = await client.get(url, params=params)
                    except httpx.RequestError as e:
                        logger.error("course.curriculum.request_error err=%s", type(e).__name__)
                        raise RemoteError(f"Curriculum request failed: {type(e).__name__}") from e
                    if res.status_code // 100 != 2:
                        logger.error("course.curriculum.bad_status %d", res.status_code)
                        raise RemoteError(f"Curriculum API Error: {res.status_code}")
                    try:
                        data: CurriculumPagePayload = res.json()
                    except ValueError as e:
                        raise RemoteError("Curriculum API returned invalid JSON") from e

                    items.extend(_to_work_item(r) for r in data.get("results") or [])
                    url, params = data.get("next"), None

        logger.info("course.curriculum.items course=%d count=%d", course_id, len(items))
        return items

    async def fetch_transcript(self, course_id: int, lecture_id: int) -> Optional[str]:
        """
        Raw WebVTT document of the lecture's English captions, or None when the
        lecture is not accessible or has no usable captions.
        Raises RemoteError only if the lecture lookup itself cannot be sent.
        """
        await self._throttle()
        url = ExternalURIs.LECTURE.format(course_id=course_id, lecture_id=lecture_id)
        params = {"fields[lecture]": "asset", "fields[asset]": "captions"}
        try:
            async with self._session() as client:
                res = await client.get(url, params=params)
        except httpx.RequestError as e:
            logger.error("course.lecture.request_error lecture=%d err=%s", lecture_id, type(e).__name__)
            raise RemoteError(f"Lecture request failed: {type(e).__name__}") from e

        if res.status_code // 100 != 2:
            # Usually no access or not a video lecture
            logger.info("course.lecture.unavailable lecture=%d status=%d", lecture_id, res.status_code)
            return None

        try:
            captions = ((res.json() or {}).get("asset") or {}).get("captions")
            track = pick_caption_track(captions, self._caption_locales)
        except (ValueError, AttributeError):
            logger.warning("course.lecture.bad_payload lecture=%d", lecture_id)
            return None
        except TranscriptUnavailable as e:
            logger.info("course.lecture.no_captions lecture=%d reason=%s", lecture_id, e)
            return None

        try:
            async with self._cdn() as cdn:
                vtt = await cdn.get(track["url"])
        except httpx.RequestError as e:
            logger.warning("course.captions.request_error lecture=%d err=%s", lecture_id, type(e).__name__)
            return None
        if vtt.status_code // 100 != 2:
            logger.warning("course.captions.bad_status lecture=%d status=%d", lecture_id, vtt.status_code)
            return None
        return vtt.text
