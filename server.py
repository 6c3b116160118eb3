import asyncio
import traceback
import uuid
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field, HttpUrl

from csv_generator import POPCITES_FILENAME, CSVGenerator
from extractor import DEFAULT_BASE_URL, PublicationExtractor
from metrics import enrich_records
from scraper import MissingInputError, ScholarProfileScraper

BASE_DIR = Path(__file__).parent
ARTIFACT_DIR = BASE_DIR / "artifacts"
EXPORT_DIR = ARTIFACT_DIR / "exports"

EXPORT_DIR.mkdir(parents=True, exist_ok=True)

app = FastAPI(title="Scholar Profile Exporter")

app.mount("/artifacts", StaticFiles(directory=ARTIFACT_DIR), name="artifacts")

ExportKind = Literal["csv", "popcites", "bibtex"]


class SnapshotExportRequest(BaseModel):
    html: str = Field(..., min_length=1)
    base_url: str = DEFAULT_BASE_URL


class ScrapeRequest(BaseModel):
    profile_url: HttpUrl
    formats: List[ExportKind] = Field(default_factory=lambda: ["csv"], min_length=1)
    load_all: bool = False
    max_clicks: int = Field(200, ge=0, le=1000)


jobs: Dict[str, Dict[str, Any]] = {}


def _records_from_snapshot(request: SnapshotExportRequest):
    records = PublicationExtractor.extract_records(request.html, request.base_url)
    if not records:
        raise HTTPException(
            status_code=400,
            detail="No publication rows found. Make sure the page contains the publications table.",
        )
    return records


def _download(content: str, filename: str, media_type: str = "text/csv; charset=utf-8") -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/api/export/publications")
async def export_publications(request: SnapshotExportRequest) -> Response:
    records = _records_from_snapshot(request)
    return _download(
        CSVGenerator.generate_publications_csv(records),
        CSVGenerator.publications_filename(),
    )


@app.post("/api/export/popcites")
async def export_popcites(request: SnapshotExportRequest) -> Response:
    records = _records_from_snapshot(request)
    return _download(
        CSVGenerator.generate_popcites_csv(enrich_records(records)),
        POPCITES_FILENAME,
    )


@app.post("/api/scrape")
async def start_scrape(request: ScrapeRequest) -> Dict[str, str]:
    profile_url = str(request.profile_url)
    if not ScholarProfileScraper.extract_user_id(profile_url):
        raise HTTPException(
            status_code=400,
            detail="Google Scholar profile URL must look like "
                   "'https://scholar.google.com/citations?user=ID'.",
        )

    job_id = uuid.uuid4().hex
    jobs[job_id] = {
        "status": "queued",
        "message": "Request accepted",
        "stage": "",
        "percentage": 0,
        "result": None,
        "error": None,
    }

    asyncio.create_task(
        run_export_job(
            job_id=job_id,
            profile_url=profile_url,
            formats=list(request.formats),
            load_all=request.load_all,
            max_clicks=request.max_clicks,
        )
    )

    return {"job_id": job_id}


@app.get("/api/status/{job_id}")
async def export_status(job_id: str) -> Dict[str, Any]:
    job = jobs.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


async def run_export_job(
    job_id: str,
    profile_url: str,
    formats: List[str],
    load_all: bool,
    max_clicks: int,
    scraper: Optional[ScholarProfileScraper] = None,
) -> None:
    job = jobs[job_id]

    def progress_handler(stage: str, current: int, total: int, percentage: float) -> None:
        job["stage"] = stage
        percent_value = round(min(100.0, max(0.0, percentage)))
        job["percentage"] = percent_value
        job["message"] = f"{stage}… {percent_value}% complete"

    job["status"] = "running"
    job["message"] = "Opening profile…"
    job["percentage"] = 5

    user_id = ScholarProfileScraper.extract_user_id(profile_url)
    job_dir = EXPORT_DIR / f"{user_id}_{job_id}"

    if scraper is None:
        scraper = ScholarProfileScraper(
            max_clicks=max_clicks,
            progress_handler=progress_handler,
        )

    try:
        paths = await scraper.export_profile(profile_url, formats, job_dir, load_all=load_all)

        job["status"] = "completed"
        job["message"] = f"Export complete. Wrote {len(paths)} file(s)."
        job["percentage"] = 100
        job["stage"] = "Completed"
        job["result"] = {
            "user_id": user_id,
            "profile_url": profile_url,
            "files": [
                f"/artifacts/{path.relative_to(ARTIFACT_DIR).as_posix()}" for path in paths
            ],
        }
    except MissingInputError as exc:
        job["status"] = "failed"
        job["error"] = str(exc)
        job["message"] = str(exc)
        job["percentage"] = 100
    except Exception as exc:  # pylint: disable=broad-except
        traceback.print_exc()
        job["status"] = "failed"
        job["error"] = str(exc)
        job["message"] = "Export failed. Check server logs for details."
        job["percentage"] = 100


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the API with uvicorn"""
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
