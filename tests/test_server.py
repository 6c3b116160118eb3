import asyncio

import pytest
from fastapi.testclient import TestClient

import server
from scraper import MissingInputError

client = TestClient(server.app)


def test_export_popcites_returns_attachment(profile_html):
    response = client.post("/api/export/popcites", json={"html": profile_html})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="PoPCites.csv"' in response.headers["content-disposition"]
    assert response.text.split("\n")[0].startswith("Cites,Authors,Title,Year,Source")
    assert len(response.text.split("\n")) == 4


def test_export_publications_returns_attachment(profile_html):
    response = client.post(
        "/api/export/publications",
        json={"html": profile_html, "base_url": "https://scholar.google.de"},
    )

    assert response.status_code == 200
    assert "google_scholar_publications_" in response.headers["content-disposition"]
    assert "https://scholar.google.de/scholar?cites=333" in response.text


def test_export_without_rows_is_a_client_error(empty_profile_html):
    response = client.post("/api/export/popcites", json={"html": empty_profile_html})

    assert response.status_code == 400
    assert "No publication rows" in response.json()["detail"]


def test_export_rejects_empty_snapshot():
    response = client.post("/api/export/publications", json={"html": ""})
    assert response.status_code == 422


def test_scrape_requires_profile_user():
    response = client.post("/api/scrape", json={"profile_url": "https://scholar.google.com/citations"})
    assert response.status_code == 400


def test_scrape_rejects_unknown_format():
    response = client.post(
        "/api/scrape",
        json={"profile_url": "https://scholar.google.com/citations?user=abc", "formats": ["xlsx"]},
    )
    assert response.status_code == 422


def test_status_of_unknown_job():
    response = client.get("/api/status/does-not-exist")
    assert response.status_code == 404


class FakeScraper:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def export_profile(self, profile_url, kinds, output_dir, load_all=False):
        self.calls.append((profile_url, list(kinds), output_dir, load_all))
        if self.error:
            raise self.error
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / "PoPCites.csv"
        path.write_text("Cites", encoding="utf-8")
        return [path]


@pytest.fixture
def artifact_dirs(tmp_path, monkeypatch):
    monkeypatch.setattr(server, "ARTIFACT_DIR", tmp_path)
    monkeypatch.setattr(server, "EXPORT_DIR", tmp_path / "exports")
    return tmp_path


def _new_job(job_id):
    server.jobs[job_id] = {"status": "queued", "result": None, "error": None}
    return server.jobs[job_id]


def test_run_export_job_records_files(artifact_dirs):
    job = _new_job("job-ok")
    fake = FakeScraper()

    asyncio.run(server.run_export_job(
        job_id="job-ok",
        profile_url="https://scholar.google.com/citations?user=abc",
        formats=["popcites"],
        load_all=True,
        max_clicks=10,
        scraper=fake,
    ))

    assert job["status"] == "completed"
    assert job["percentage"] == 100
    assert job["result"]["user_id"] == "abc"
    assert job["result"]["files"] == ["/artifacts/exports/abc_job-ok/PoPCites.csv"]
    assert fake.calls[0][3] is True


def test_run_export_job_reports_missing_input(artifact_dirs):
    job = _new_job("job-missing")

    asyncio.run(server.run_export_job(
        job_id="job-missing",
        profile_url="https://scholar.google.com/citations?user=abc",
        formats=["csv"],
        load_all=False,
        max_clicks=10,
        scraper=FakeScraper(error=MissingInputError("No publication rows found.")),
    ))

    assert job["status"] == "failed"
    assert job["message"] == "No publication rows found."


def test_run_export_job_reports_unexpected_errors(artifact_dirs):
    job = _new_job("job-error")

    asyncio.run(server.run_export_job(
        job_id="job-error",
        profile_url="https://scholar.google.com/citations?user=abc",
        formats=["csv"],
        load_all=False,
        max_clicks=10,
        scraper=FakeScraper(error=RuntimeError("browser crashed")),
    ))

    assert job["status"] == "failed"
    assert job["error"] == "browser crashed"
    assert "Check server logs" in job["message"]


def test_run_serves_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(server.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    server.run(port=9001)

    assert calls == [(server.app, {"host": "127.0.0.1", "port": 9001})]
