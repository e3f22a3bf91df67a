"""
watchtrigger service: one directory trigger behind an HTTP adapter.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI

from watchtrigger.routes import trigger as trigger_routes
from watchtrigger.triggers import DirectoryTrigger, TriggerConfig


def create_app(
    config: Union[TriggerConfig, Dict[str, Any]],
    trigger: Optional[DirectoryTrigger] = None,
) -> FastAPI:
    """
    Build the service app.

    The trigger is initialized immediately so configuration errors surface
    here; the scan loop runs for the lifetime of the app.

    Raises:
        InvalidConfigError: If the configuration is invalid
    """
    trigger = trigger or DirectoryTrigger()
    trigger.init(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        trigger.start()
        try:
            yield
        finally:
            trigger.stop()
            trigger.join()

    app = FastAPI(title="watchtrigger", version="0.1.0", lifespan=lifespan)
    app.state.trigger = trigger
    app.include_router(trigger_routes.router)
    return app
