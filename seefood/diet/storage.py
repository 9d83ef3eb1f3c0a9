# -*- coding: utf-8 -*-
"""Diet — JSON file storage, one file per calendar day.

Deleting a meal removes its food items and saved photo; deleting a day does the
same for every meal in it.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from .models import DailyLog, DailyNutritionSummary, FoodItem, MealEntry, MealType, NutritionTotals

logger = logging.getLogger(__name__)


class MealNotFound(KeyError):
    pass


class DailyLogStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self._lock = threading.RLock()

    def _path(self, day: dt.date) -> Path:
        return self.root / f"{day.isoformat()}.json"

    def _ensure_dir(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _read(self, path: Path) -> Optional[DailyLog]:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return DailyLog.model_validate(raw)
        except (OSError, ValueError) as exc:
            logger.warning("skipping unreadable daily log %s: %s", path, exc)
            return None

    def save(self, log: DailyLog) -> None:
        with self._lock:
            self._ensure_dir()
            fp = self._path(log.date)
            tmp = fp.with_suffix(".json.tmp")
            tmp.write_text(log.model_dump_json(indent=2), encoding="utf-8")
            tmp.replace(fp)

    def get(self, day: dt.date) -> Optional[DailyLog]:
        fp = self._path(day)
        if not fp.exists():
            return None
        return self._read(fp)

    def fetch_or_create(self, day: dt.date) -> DailyLog:
        with self._lock:
            existing = self.get(day)
            if existing is not None:
                return existing
            log = DailyLog(date=day)
            self.save(log)
            logger.debug("created daily log for %s", day)
            return log

    def list_logs(self) -> List[DailyLog]:
        """All logs, newest day first."""
        if not self.root.exists():
            return []
        logs: List[DailyLog] = []
        for fp in sorted(self.root.glob("*.json"), reverse=True):
            log = self._read(fp)
            if log is not None:
                logs.append(log)
        return logs

    def add_meal(self, day: dt.date, meal: MealEntry) -> DailyLog:
        with self._lock:
            log = self.fetch_or_create(day)
            log.meals.append(meal)
            self.save(log)
            logger.debug("added meal %s to %s", meal.id, day)
            return log

    def find_meal(self, meal_id: UUID) -> Tuple[DailyLog, MealEntry]:
        for log in self.list_logs():
            for meal in log.meals:
                if meal.id == meal_id:
                    return log, meal
        raise MealNotFound(str(meal_id))

    def update_meal(
        self,
        meal_id: UUID,
        *,
        items: Optional[List[FoodItem]] = None,
        meal_type: Optional[MealType] = None,
    ) -> MealEntry:
        with self._lock:
            log, meal = self.find_meal(meal_id)
            if items is not None:
                meal.items = items
            if meal_type is not None:
                meal.meal_type = meal_type
            self.save(log)
            return meal

    def delete_meal(self, meal_id: UUID) -> None:
        with self._lock:
            log, meal = self.find_meal(meal_id)
            log.meals = [m for m in log.meals if m.id != meal_id]
            self.save(log)
            _remove_image(meal)
            logger.debug("deleted meal %s", meal_id)

    def delete_log(self, day: dt.date) -> bool:
        with self._lock:
            log = self.get(day)
            if log is None:
                return False
            for meal in log.meals:
                _remove_image(meal)
            self._path(day).unlink(missing_ok=True)
            logger.debug("deleted daily log %s (%d meals)", day, len(log.meals))
            return True

    def meals_by_type(self, day: dt.date) -> Dict[MealType, List[MealEntry]]:
        log = self.get(day)
        if log is None:
            return {}
        return log.meals_by_type()

    def summary(self, start: dt.date, end: dt.date) -> Tuple[NutritionTotals, List[DailyNutritionSummary]]:
        if end < start:
            raise ValueError("end must not be before start")
        totals = NutritionTotals()
        days: List[DailyNutritionSummary] = []
        for log in reversed(self.list_logs()):
            if not start <= log.date <= end:
                continue
            day_totals = log.totals()
            totals = totals + day_totals
            days.append(DailyNutritionSummary(date=log.date, totals=day_totals, meal_count=len(log.meals)))
        return totals, days


def _remove_image(meal: MealEntry) -> None:
    if not meal.image_path:
        return
    try:
        Path(meal.image_path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("could not remove image %s: %s", meal.image_path, exc)
