# server.py
# Purpose: Minimal HTTP server - JSON records API, /data static files, index.html fallback.
# Run: python server.py   (PORT / HOST from the environment, default 0.0.0.0:3000)

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

import config
from data_loader import DataLoadError, load_demographics

logger = logging.getLogger(__name__)


def _resolve_data_file(data_dir: Path, file_path: str) -> Optional[Path]:
    """File inside data_dir, or None (missing, or the path escapes data_dir)."""
    root = data_dir.resolve()
    candidate = (root / file_path).resolve()
    if root != candidate and root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


def create_app(
    csv_source: Optional[str] = None,
    data_dir: Optional[Path] = None,
    index_html: Optional[Path] = None,
) -> FastAPI:
    csv_source = csv_source or config.DEMOGRAPHICS_CSV
    data_dir = Path(data_dir or config.DATA_DIR)
    index_html = Path(index_html or config.INDEX_HTML)

    app = FastAPI(title="Danish Demographics Dashboard")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )

    @app.get(config.API_RECORDS_PATH)
    def municipality_demographics():
        try:
            df = load_demographics(csv_source)
        except DataLoadError as e:
            logger.error("Failed to load demographics: %s", e)
            raise HTTPException(status_code=503, detail="Failed to fetch data") from e
        return df.to_dict(orient="records")

    @app.get("/data/{file_path:path}")
    def data_file(file_path: str):
        path = _resolve_data_file(data_dir, file_path)
        if path is None:
            raise HTTPException(status_code=404, detail="Not found")
        if path.suffix.lower() == ".csv":
            return FileResponse(path, media_type="text/csv")
        return FileResponse(path)

    @app.get("/{full_path:path}")
    def spa_fallback(full_path: str):
        if not index_html.is_file():
            raise HTTPException(status_code=404, detail="index.html not found")
        return FileResponse(index_html, media_type="text/html")

    return app


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Server running at http://localhost:%d/", config.PORT)
    logger.info("Serving data from: %s", config.DATA_DIR)
    uvicorn.run(create_app(), host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
