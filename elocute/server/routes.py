"""
ELOCUTE API Routes
==================

HTTP endpoints over the word registry.

    GET  /health
    POST /words/{name}            create a word
    POST /words/{name}/model      train with a reference feature matrix
    POST /words/{name}/evaluate   classify an attempt
    GET  /words/{name}/status     cluster diagnostics

Feature matrices travel as JSON lists of frames. Endpoints are plain
functions: FastAPI runs them on its thread pool, so a long DTW never
blocks the event loop.

Usage:
    ELOCUTE_CONFIG=config.yaml uvicorn elocute.server.routes:app --port 8080
    ELOCUTE_CONFIG=config.yaml python -m elocute.server.routes --port 8080
"""

import logging
import os
import time
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from elocute import __version__
from elocute.config import load_config
from elocute.core.node import NodeInfo
from elocute.server.handler import WordRegistry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


class WordRequest(BaseModel):
    version: str = '1'


class AttemptRequest(BaseModel):
    features: List[List[float]]
    recorder: str = 'unknown'
    recorder_age: str = 'unknown'
    recorder_sex: str = 'unknown'
    recorded_date: Optional[str] = None
    descriptions: List[str] = Field(default_factory=list)

    def info(self) -> NodeInfo:
        return NodeInfo(
            recorder=self.recorder,
            recorder_age=self.recorder_age,
            recorder_sex=self.recorder_sex,
            recorded_date=self.recorded_date or time.strftime('%Y-%m-%d %H:%M:%S'),
        )


def create_app(registry: Optional[WordRegistry] = None) -> FastAPI:
    if registry is None:
        registry = WordRegistry(load_config(os.environ.get('ELOCUTE_CONFIG')))

    app = FastAPI(
        title="ELOCUTE",
        description="Pronunciation attempt clustering and remediation",
        version=__version__,
    )

    @app.get("/health")
    def health():
        """Health check."""
        return {
            "status": "ok",
            "version": __version__,
            "words": len(registry),
        }

    @app.post("/words/{name}")
    def create_word(name: str, request: Optional[WordRequest] = None):
        word = registry.create(name, version=(request or WordRequest()).version)
        return {"name": word.name, "version": word.info.version, "registered": word.info.registered_date}

    @app.post("/words/{name}/model")
    def train(name: str, request: AttemptRequest):
        try:
            return registry.train(name, request.features, request.info())
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown word: {name}")
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

    @app.post("/words/{name}/evaluate")
    def evaluate(name: str, request: AttemptRequest):
        start = time.time()
        try:
            report = registry.evaluate(name, request.features, request.info(), request.descriptions)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown word: {name}")
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        report['duration'] = time.time() - start
        return report

    @app.get("/words/{name}/status")
    def status(name: str):
        try:
            return registry.status(name)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown word: {name}")

    return app


app = create_app()


def main():
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="ELOCUTE API Server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind")
    parser.add_argument("--port", type=int, default=8080, help="Port (default: 8080)")
    parser.add_argument("--reload", action="store_true", help="Auto-reload on changes")
    args = parser.parse_args()

    logger.info(f"Starting ELOCUTE API at http://{args.host}:{args.port}")

    uvicorn.run(
        "elocute.server.routes:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
