# -*- coding: utf-8 -*-
"""Diet — Pydantic models for the per-day meal log."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, computed_field

from ..vision.models import NutritionRecord


class MealType(str, Enum):
    breakfast = "Breakfast"
    lunch = "Lunch"
    dinner = "Dinner"
    snack = "Snack"
    other = "Other"


class NutritionTotals(BaseModel):
    calories: int = Field(0, ge=0)
    protein: int = Field(0, ge=0)
    carbs: int = Field(0, ge=0)
    fats: int = Field(0, ge=0)

    def __add__(self, other: "NutritionTotals") -> "NutritionTotals":
        return NutritionTotals(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fats=self.fats + other.fats,
        )


class FoodItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, description="Food name, e.g. 'Cheese Pizza'")
    calories: int = Field(0, ge=0)
    protein: int = Field(0, ge=0, description="grams")
    carbs: int = Field(0, ge=0, description="grams")
    fats: int = Field(0, ge=0, description="grams")

    @classmethod
    def from_record(cls, record: NutritionRecord, servings: int = 1) -> "FoodItem":
        """Copy an analysed record, multiplying every amount by the serving count."""
        if servings < 1:
            raise ValueError("servings must be >= 1")
        return cls(
            name=record.name,
            calories=record.calories * servings,
            protein=record.protein * servings,
            carbs=record.carbs * servings,
            fats=record.fats * servings,
        )


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class MealEntry(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    timestamp: dt.datetime = Field(default_factory=_utc_now)
    meal_type: MealType = MealType.other
    items: List[FoodItem] = Field(default_factory=list)
    image_path: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_calories(self) -> int:
        return sum(i.calories for i in self.items)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_protein(self) -> int:
        return sum(i.protein for i in self.items)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_carbs(self) -> int:
        return sum(i.carbs for i in self.items)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_fats(self) -> int:
        return sum(i.fats for i in self.items)

    def totals(self) -> NutritionTotals:
        return NutritionTotals(
            calories=self.total_calories,
            protein=self.total_protein,
            carbs=self.total_carbs,
            fats=self.total_fats,
        )


class DailyLog(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    date: dt.date
    meals: List[MealEntry] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_calories(self) -> int:
        return sum(m.total_calories for m in self.meals)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_protein(self) -> int:
        return sum(m.total_protein for m in self.meals)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_carbs(self) -> int:
        return sum(m.total_carbs for m in self.meals)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_fats(self) -> int:
        return sum(m.total_fats for m in self.meals)

    def totals(self) -> NutritionTotals:
        total = NutritionTotals()
        for meal in self.meals:
            total = total + meal.totals()
        return total

    def meals_by_type(self) -> Dict[MealType, List[MealEntry]]:
        grouped: Dict[MealType, List[MealEntry]] = {}
        for meal in self.meals:
            grouped.setdefault(meal.meal_type, []).append(meal)
        return grouped


# ---- API payloads ----


class AnalyzeResponse(BaseModel):
    request_id: str
    items: List[NutritionRecord]
    totals: NutritionTotals
    image_id: Optional[UUID] = Field(None, description="Key of the saved photo; pass back when creating the meal")


class MealCreateRequest(BaseModel):
    meal_type: MealType = MealType.other
    items: List[NutritionRecord] = Field(..., min_length=1)
    servings: int = Field(1, ge=1, le=50)
    timestamp: Optional[dt.datetime] = None
    image_id: Optional[UUID] = None


class MealUpdateRequest(BaseModel):
    meal_type: Optional[MealType] = None
    items: Optional[List[NutritionRecord]] = Field(None, min_length=1)
    servings: int = Field(1, ge=1, le=50)


class DailyNutritionSummary(BaseModel):
    date: dt.date
    totals: NutritionTotals
    meal_count: int = Field(0, ge=0)


class SummaryResponse(BaseModel):
    start: dt.date
    end: dt.date
    totals: NutritionTotals
    days: List[DailyNutritionSummary]
