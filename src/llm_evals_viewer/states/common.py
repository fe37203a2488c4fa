import os

import reflex as rx

from llm_evals_viewer.app import ViewerApp, make_viewer_app
from llm_evals_viewer.settings import settings


async def get_viewer_app() -> ViewerApp:
    return await make_viewer_app()


class AppVersionState(rx.State):
    version: str = f"`{os.environ.get('VERSION', 'unspecified_version')}`"  # md-formatted
    debug_mode: bool = settings.debug
