# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
FastAPI application for the Box Pusher Environment.

This module creates an HTTP server that exposes the BoxPusherEnvironment
over HTTP endpoints, making it compatible with BoxPusherEnv.

Usage:
    # Development (with auto-reload):
    uvicorn envs.boxpusher_env.server.app:app --reload --host 0.0.0.0 --port 8000

    # Production:
    uvicorn envs.boxpusher_env.server.app:app --host 0.0.0.0 --port 8000

    # Or run directly:
    python -m envs.boxpusher_env.server.app
"""

import logging
import os
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from ..errors import CodecError, InvalidGridError, InvalidLevelNameError, LevelNotFoundError, StoreError
from ..models import BoxPusherAction, BoxPusherObservation, Difficulty
from .boxpusher_environment import BoxPusherEnvironment
from .config import ServerConfig
from .leaderboard_store import LeaderboardStore
from .level_library import LevelLibrary
from .progress_store import ProgressStore

config = ServerConfig.from_env()

# Setup logging to file
os.makedirs(config.log_dir, exist_ok=True)
log_file = config.log_dir / "boxpusher_server.log"

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_file),
        logging.StreamHandler()  # Keep logging to console as well
    ]
)
logger = logging.getLogger(__name__)


class ResetRequest(BaseModel):
    level_name: Optional[str] = None
    difficulty: str = Difficulty.EASY.value
    seed: Optional[int] = None
    resume: bool = True


class StepRequest(BaseModel):
    direction: str


def build_environment(config: ServerConfig) -> BoxPusherEnvironment:
    progress = ProgressStore(config.save_dir)
    leaderboard = LeaderboardStore(config.ranking_file)
    library = LevelLibrary(config.levels_dir, progress_store=progress, leaderboard_store=leaderboard)
    return BoxPusherEnvironment(library, progress, leaderboard)


def serialize_observation(observation: BoxPusherObservation) -> Dict[str, Any]:
    return {
        "observation": asdict(observation),
        "done": observation.done,
        "points": observation.points,
    }


def create_app(env: BoxPusherEnvironment) -> FastAPI:
    """
    Build the HTTP app around one environment.

    Args:
        env: The environment every request operates on

    Returns:
        FastAPI application
    """
    app = FastAPI(title="Box Pusher Environment")

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "healthy"}

    @app.post("/reset")
    def reset(request: Optional[ResetRequest] = None) -> Dict[str, Any]:
        request = request or ResetRequest()
        try:
            observation = env.reset(
                level_name=request.level_name,
                difficulty=Difficulty.parse(request.difficulty),
                seed=request.seed,
                resume=request.resume,
            )
        except LevelNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except (CodecError, InvalidGridError, InvalidLevelNameError, ValueError) as e:
            logger.error(f"Reset failed: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        return serialize_observation(observation)

    @app.post("/step")
    def step(request: StepRequest) -> Dict[str, Any]:
        try:
            action = BoxPusherAction(direction=request.direction.lower())
            observation = env.step(action)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except StoreError as e:
            logger.error(f"Step failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return serialize_observation(observation)

    @app.post("/restart")
    def restart() -> Dict[str, Any]:
        try:
            observation = env.restart()
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return serialize_observation(observation)

    @app.get("/state")
    def state() -> Dict[str, Any]:
        return asdict(env.state)

    @app.get("/leaderboard/{level_name}")
    def leaderboard(level_name: str) -> Dict[str, Any]:
        try:
            records = env.leaderboard_store.get_records(level_name)
        except CodecError as e:
            logger.error(f"Leaderboard of {level_name!r} is unreadable: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        except StoreError as e:
            logger.error(f"Leaderboard of {level_name!r} is unreadable: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return {
            "level_name": level_name,
            "records": [
                {
                    "moves": record.moves_taken,
                    "points": record.points,
                    "date": record.timestamp.isoformat(),
                }
                for record in records
            ],
        }

    @app.on_event("startup")
    async def startup_event():
        logger.info("Box Pusher server starting up.")

    @app.on_event("shutdown")
    def shutdown_event():
        logger.info("Box Pusher server shutting down.")

    return app


# Create the environment instance
env = build_environment(config)

# Create the app with the environment's endpoints
app = create_app(env)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.host, port=config.port)
