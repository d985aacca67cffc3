import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from resume_tailor.core.sessions import get_session_store
from resume_tailor.taxonomy import get_default_taxonomy

logger = logging.getLogger(__name__)

PURGE_INTERVAL_S = 300


@asynccontextmanager
async def lifespan(app):
    get_default_taxonomy()
    store = get_session_store()

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = store.purge_expired()
                if deleted:
                    logger.info("session_retention_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover - defensive guard
                logger.warning("session_retention_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=PURGE_INTERVAL_S)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
