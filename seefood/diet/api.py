# -*- coding: utf-8 -*-
"""Diet — API endpoints (photo analysis + daily log)."""

from __future__ import annotations

import datetime as dt
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from ..config import Settings, settings
from ..vision.errors import AnalysisError, CompressionFailed, EmptyResponse, InvalidImage
from ..vision.images import load_image
from ..vision.service import FoodAnalyzer, build_analyzer
from .models import (
    AnalyzeResponse,
    DailyLog,
    FoodItem,
    MealCreateRequest,
    MealEntry,
    MealUpdateRequest,
    NutritionTotals,
    SummaryResponse,
)
from .storage import DailyLogStore, MealNotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/diet", tags=["Diet"])

# Problems with the photo itself; everything else is an upstream failure.
_UNPROCESSABLE = (InvalidImage, CompressionFailed, EmptyResponse)


def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=None)
def _store_for(root: Path) -> DailyLogStore:
    return DailyLogStore(root)


def get_store(cfg: Settings = Depends(get_settings)) -> DailyLogStore:
    return _store_for(cfg.logs_dir)


def get_analyzer(cfg: Settings = Depends(get_settings)) -> FoodAnalyzer:
    return build_analyzer(cfg)


def _analysis_http_error(exc: AnalysisError) -> HTTPException:
    status = 422 if isinstance(exc, _UNPROCESSABLE) else 502
    return HTTPException(status_code=status, detail=exc.to_dict())


@router.post("/analyze", response_model=AnalyzeResponse, summary="Estimate nutrition from a meal photo")
def analyze(
    file: UploadFile = File(...),
    cfg: Settings = Depends(get_settings),
    analyzer: FoodAnalyzer = Depends(get_analyzer),
):
    max_bytes = cfg.max_upload_bytes
    data = file.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise HTTPException(status_code=413, detail=f"Image too large: > {max_bytes} bytes")

    request_id = str(uuid4())
    try:
        image = load_image(data)
    except AnalysisError as exc:
        raise _analysis_http_error(exc) from exc

    run = analyzer.execute(image)
    if run.error is not None:
        logger.info("analysis %s failed: %s", request_id, run.error.kind)
        raise _analysis_http_error(run.error) from run.error

    totals = NutritionTotals(
        calories=sum(r.calories for r in run.records),
        protein=sum(r.protein for r in run.records),
        carbs=sum(r.carbs for r in run.records),
        fats=sum(r.fats for r in run.records),
    )
    return AnalyzeResponse(
        request_id=request_id,
        items=run.records,
        totals=totals,
        image_id=run.records[0].id if run.image_path is not None else None,
    )


@router.get("/logs", response_model=List[DailyLog], summary="All daily logs, newest first")
def list_logs(store: DailyLogStore = Depends(get_store)):
    return store.list_logs()


@router.get("/logs/{day}", response_model=DailyLog, summary="Daily log for one day")
def get_log(day: dt.date, store: DailyLogStore = Depends(get_store)):
    return store.get(day) or DailyLog(date=day)


@router.get("/logs/{day}/by-type", response_model=Dict[str, List[MealEntry]], summary="Meals grouped by meal type")
def get_meals_by_type(day: dt.date, store: DailyLogStore = Depends(get_store)):
    return {meal_type.value: meals for meal_type, meals in store.meals_by_type(day).items()}


@router.delete("/logs/{day}", summary="Delete a day with all its meals")
def delete_log(day: dt.date, store: DailyLogStore = Depends(get_store)):
    if not store.delete_log(day):
        raise HTTPException(status_code=404, detail=f"No log for {day}")
    return {"status": "ok"}


@router.post("/logs/{day}/meals", response_model=MealEntry, summary="Add a meal to a day")
def create_meal(
    day: dt.date,
    request: MealCreateRequest,
    cfg: Settings = Depends(get_settings),
    store: DailyLogStore = Depends(get_store),
):
    meal = MealEntry(
        meal_type=request.meal_type,
        items=[FoodItem.from_record(r, request.servings) for r in request.items],
    )
    if request.timestamp is not None:
        meal.timestamp = request.timestamp
    if request.image_id is not None:
        image_path = cfg.images_dir / f"{request.image_id}.jpg"
        if image_path.exists():
            meal.image_path = str(image_path)
        else:
            logger.warning("image %s not found; meal saved without photo", request.image_id)
    try:
        store.add_meal(day, meal)
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save meal: {exc}") from exc
    return meal


@router.patch("/meals/{meal_id}", response_model=MealEntry, summary="Edit a saved meal")
def update_meal(meal_id: UUID, request: MealUpdateRequest, store: DailyLogStore = Depends(get_store)):
    items = None
    if request.items is not None:
        items = [FoodItem.from_record(r, request.servings) for r in request.items]
    try:
        return store.update_meal(meal_id, items=items, meal_type=request.meal_type)
    except MealNotFound as exc:
        raise HTTPException(status_code=404, detail=f"Meal not found: {meal_id}") from exc


@router.delete("/meals/{meal_id}", summary="Delete a meal")
def delete_meal(meal_id: UUID, store: DailyLogStore = Depends(get_store)):
    try:
        store.delete_meal(meal_id)
    except MealNotFound as exc:
        raise HTTPException(status_code=404, detail=f"Meal not found: {meal_id}") from exc
    return {"status": "ok"}


@router.get("/summary", response_model=SummaryResponse, summary="Per-day nutrition totals for charts")
def summary(
    start: dt.date = Query(..., description="YYYY-MM-DD"),
    end: dt.date = Query(..., description="YYYY-MM-DD"),
    store: DailyLogStore = Depends(get_store),
):
    try:
        totals, days = store.summary(start, end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SummaryResponse(start=start, end=end, totals=totals, days=days)
