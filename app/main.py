from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from league_repo import LeagueRepo
from app.api.router import api_router

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="League draft server")


@app.on_event("startup")
def _startup_init_db() -> None:
    # Schema is applied once per process; every request opens its own connection.
    db_path = os.environ.get("LEAGUE_DB_PATH")
    if not db_path:
        raise RuntimeError("LEAGUE_DB_PATH is required (no default db_path).")
    with LeagueRepo(db_path) as repo:
        repo.init_db()
    logger.info("DB_READY db_path=%s", db_path)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "8000")))
