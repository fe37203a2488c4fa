from dataclasses import dataclass

import sqlalchemy.ext.asyncio as sa_aio
from async_lru import alru_cache
from loguru import logger

from llm_evals_viewer.db import get_async_db_engine, get_sessionmaker
from llm_evals_viewer.records import EvalStore
from llm_evals_viewer.settings import settings


@dataclass
class ViewerApp:
    sessionmaker: sa_aio.async_sessionmaker[sa_aio.AsyncSession]
    store: EvalStore


@alru_cache
async def make_viewer_app() -> ViewerApp:
    sessionmaker = get_sessionmaker()
    logger.info(f"LLM evals viewer using {get_async_db_engine().url.render_as_string(hide_password=True)}")
    if settings.debug:
        logger.debug(f"Settings: {settings.model_dump(exclude={'db_conn_uri'})}")

    return ViewerApp(
        sessionmaker=sessionmaker,
        store=EvalStore(sessionmaker=sessionmaker),
    )
