from functools import lru_cache

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile

from .catalog import load_catalog
from .config import Settings, load_settings
from .errors import MalformedRow
from .logging_setup import configure_logging
from .models import HealthResponse, NormalizeResponse, RenormalizeResponse, RunReport
from .normalize import normalize_csv_bytes
from .notify import Notifier, build_notifier
from .pipeline import refresh_normalization, update_entire_dataset
from .store import CsvTableStore, TableStore

app = FastAPI(
    title="error-dashboard",
    description="Aggregates program error trackers and normalizes grade, subject and level columns",
    version="0.1.0",
)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings are read and logging configured once per process."""
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_dir)
    return settings


def get_store(settings: Settings = Depends(get_settings)) -> TableStore:
    return CsvTableStore(settings.sources_dir, settings.output_path, settings.status_path)


def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:
    return build_notifier(settings)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/update", response_model=RunReport)
def update(
    settings: Settings = Depends(get_settings),
    store: TableStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        sources = load_catalog(settings.catalog_path)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Invalid source catalog: {e}")
    return update_entire_dataset(store, sources, notifier, settings)


@app.post("/renormalize", response_model=RenormalizeResponse)
def renormalize(store: TableStore = Depends(get_store)):
    try:
        table = refresh_normalization(store)
    except MalformedRow as e:
        raise HTTPException(status_code=422, detail=e.message)
    return {"rows": len(table)}


@app.post("/normalize", response_model=NormalizeResponse)
async def normalize_csv(file: UploadFile = File(...)):
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    try:
        return normalize_csv_bytes(raw)
    except MalformedRow as e:
        raise HTTPException(status_code=422, detail=e.message)
