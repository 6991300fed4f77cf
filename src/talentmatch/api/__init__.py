"""HTTP surface — FastAPI app factory and server entry point."""

from __future__ import annotations

import logging

from talentmatch.api.app import create_app
from talentmatch.config import MatchingConfig

__all__ = ["create_app", "run"]


def run(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Serve the API with uvicorn, configured from the environment."""
    import uvicorn
    from dotenv import find_dotenv, load_dotenv

    load_dotenv(find_dotenv(usecwd=True))
    config = MatchingConfig.from_env()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Starting TalentMatch: %s", config.summary())
    uvicorn.run(create_app(config=config), host=host, port=port)
