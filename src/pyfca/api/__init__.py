"""REST API for uploading and reading athlete datasets."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, File, HTTPException, UploadFile

from pyfca.api.schemas import (
    AthleteResponse,
    DatasetSummaryResponse,
    IngestionResponse,
    RecordListResponse,
    RemovalResponse,
)
from pyfca.config import AppSettings, get_dataset
from pyfca.errors import IngestionError, UnknownDatasetError
from pyfca.ingest import build_service
from pyfca.models import IngestionEntry


logger = logging.getLogger(__name__)


def _dataset_or_404(dataset_type: str):
    try:
        return get_dataset(dataset_type)
    except UnknownDatasetError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def create_app(db_path: Path | str | None = None) -> FastAPI:
    app = FastAPI(title="pyfca datasets")
    settings = AppSettings.from_env()
    service = build_service(db_path if db_path is not None else settings.db_path)
    app.state.service = service

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/datasets", response_model=list[DatasetSummaryResponse])
    async def list_datasets() -> list[DatasetSummaryResponse]:
        responses: list[DatasetSummaryResponse] = []
        for summary in service.summary():
            dataset = get_dataset(summary.dataset)
            responses.append(
                DatasetSummaryResponse(
                    dataset=summary.dataset,
                    title=summary.title,
                    description=dataset.description,
                    example_file=dataset.example_file,
                    columns=list(dataset.columns),
                    loaded=summary.loaded,
                    records=summary.records,
                    file_name=summary.file_name,
                    last_update=summary.last_update,
                )
            )
        return responses

    @app.post("/datasets/{dataset_type}", response_model=IngestionResponse)
    async def upload_dataset(dataset_type: str, file: UploadFile = File(...)) -> IngestionResponse:
        dataset = _dataset_or_404(dataset_type)
        try:
            result = await service.ingest_upload(file, dataset.key)
        except IngestionError as exc:
            logger.info("Rejected upload %s for %s: %s", file.filename, dataset.key, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        finally:
            await file.close()
        return IngestionResponse(
            entry=result.entry,
            records=result.report.total_records,
            invalid_numeric_cells=result.report.invalid_numeric_cells,
        )

    @app.get("/datasets/{dataset_type}", response_model=IngestionEntry)
    async def get_dataset_entry(dataset_type: str) -> IngestionEntry:
        dataset = _dataset_or_404(dataset_type)
        entry = service.get_entry(dataset.key)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"No {dataset.key} file loaded")
        return entry

    @app.delete("/datasets/{dataset_type}", response_model=RemovalResponse)
    async def remove_dataset(dataset_type: str) -> RemovalResponse:
        dataset = _dataset_or_404(dataset_type)
        return RemovalResponse(dataset=dataset.key, removed=service.remove_dataset(dataset.key))

    @app.get("/records/{dataset_type}", response_model=RecordListResponse)
    async def list_records(dataset_type: str) -> RecordListResponse:
        dataset = _dataset_or_404(dataset_type)
        records = service.get_records(dataset.key)
        return RecordListResponse(
            dataset=dataset.key,
            records=[record.model_dump(by_alias=True) for record in records],
        )

    @app.get("/athletes/{athlete_id}", response_model=AthleteResponse)
    async def athlete_detail(athlete_id: str) -> AthleteResponse:
        store = service.records
        player = store.player_by_id(athlete_id) or store.player_by_name(athlete_id)
        return AthleteResponse(
            athlete_id=athlete_id,
            player=player,
            injuries=store.injuries_by_player(athlete_id),
            evaluations=store.evaluations_by_player(athlete_id),
            latest_evaluation=store.latest_evaluation_by_player(athlete_id),
            gps=store.gps_by_player(athlete_id),
            statistics=store.statistics_by_player(athlete_id),
        )

    return app
