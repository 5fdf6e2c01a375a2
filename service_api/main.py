# service_api/main.py

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from flood_control.config import AnalysisConfig
from flood_control.file_io import write_workbook
from flood_control.runner import AnalysisOutput, run_analysis

log = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"service": "flood-control-api", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/config")
def show_config():
    """Show the analysis defaults this service runs with."""
    cfg = _build_config()
    return {
        "year_from": cfg.year_from,
        "year_to": cfg.year_to,
        "min_contractor_projects": cfg.min_contractor_projects,
        "contractor_report_size": cfg.contractor_report_size,
        "high_delay_threshold_days": cfg.high_delay_threshold_days,
        "baseline_year": cfg.baseline_year,
    }


def _safe_remove(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    except OSError as e:
        log.warning("Could not remove temp file %s: %s", path, e)


def _save_upload_to_tmp(file: UploadFile) -> str:
    if not file.filename:
        raise HTTPException(status_code=400, detail="Missing filename")

    tmp_in = tempfile.NamedTemporaryFile(
        suffix=f"_{Path(file.filename).name}",
        delete=False,
    )
    in_path = tmp_in.name
    tmp_in.close()

    try:
        with open(in_path, "wb") as f:
            shutil.copyfileobj(file.file, f)
    finally:
        file.file.close()

    return in_path


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring non-integer %s=%r", name, raw)
        return None


def _build_config(
    year_from: Optional[int] = None,
    year_to: Optional[int] = None,
    min_projects: Optional[int] = None,
    top: Optional[int] = None,
) -> AnalysisConfig:
    """Build AnalysisConfig from environment variables, then per-request overrides."""
    cfg = AnalysisConfig()

    overrides = {
        "year_from": (year_from, "FLOOD_YEAR_FROM"),
        "year_to": (year_to, "FLOOD_YEAR_TO"),
        "min_contractor_projects": (min_projects, "FLOOD_MIN_PROJECTS"),
        "contractor_report_size": (top, "FLOOD_TOP_N"),
    }
    for attr, (request_value, env_name) in overrides.items():
        value = request_value if request_value is not None else _env_int(env_name)
        if value is not None:
            setattr(cfg, attr, value)

    return cfg


def _run(in_path: str, cfg: AnalysisConfig) -> AnalysisOutput:
    try:
        cfg.validate()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    output = run_analysis(in_path, cfg)
    if output.ingestion.failed:
        raise HTTPException(status_code=400, detail=f"Dataset could not be read: {output.ingestion.source_error}")
    return output


def _build_response(output: AnalysisOutput) -> Dict[str, Any]:
    tables = output.tables()
    return {
        "summary": output.summary_dict(),
        "rejection_reasons": dict(output.ingestion.rejection_reasons),
        "regional_efficiency": tables["regional_efficiency"].round(2).to_dict(orient="records"),
        "contractor_ranking": tables["contractor_ranking"].round(2).to_dict(orient="records"),
        "annual_trends": tables["annual_trends"].round(2).to_dict(orient="records"),
    }


@app.post("/analyze")
async def analyze_json(
    file: UploadFile = File(...),
    year_from: Optional[int] = None,
    year_to: Optional[int] = None,
    min_projects: Optional[int] = None,
    top: Optional[int] = None,
):
    in_path = _save_upload_to_tmp(file)

    try:
        output = _run(in_path, _build_config(year_from, year_to, min_projects, top))
        return JSONResponse(content=_build_response(output))

    except HTTPException:
        raise
    except Exception as e:
        log.exception("Analysis failed")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {e}")
    finally:
        _safe_remove(in_path)


@app.post("/analyze_download")
async def analyze_download(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    year_from: Optional[int] = None,
    year_to: Optional[int] = None,
    min_projects: Optional[int] = None,
    top: Optional[int] = None,
):
    in_path = _save_upload_to_tmp(file)

    tmp_out = tempfile.NamedTemporaryFile(suffix="_flood_control_reports.xlsx", delete=False)
    out_path = tmp_out.name
    tmp_out.close()

    background_tasks.add_task(_safe_remove, in_path)
    background_tasks.add_task(_safe_remove, out_path)

    try:
        output = _run(in_path, _build_config(year_from, year_to, min_projects, top))
        write_workbook(output.tables(), output.summary_dict(), out_path)

    except HTTPException:
        _safe_remove(in_path)
        _safe_remove(out_path)
        raise
    except Exception as e:
        _safe_remove(in_path)
        _safe_remove(out_path)
        log.exception("Analysis failed")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {e}")

    return FileResponse(
        out_path,
        filename="flood_control_reports.xlsx",
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        background=background_tasks,
    )
