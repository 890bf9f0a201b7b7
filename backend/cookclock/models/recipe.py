from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, conint, confloat, field_validator, model_validator


def seconds(minutes: int) -> int:
    return minutes * 60


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


DIFFICULTY_WEIGHT = {Difficulty.EASY: 1, Difficulty.MEDIUM: 2, Difficulty.HARD: 3}


class Ingredient(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)
    quantity: confloat(gt=0)
    unit: str = Field(..., min_length=1)

    @field_validator("name", "unit")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class CookSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: conint(ge=40, le=200)
    speed: conint(ge=1, le=5)


class _BaseStep(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=lambda: uuid4().hex)
    description: str = ""
    duration_minutes: conint(strict=True, gt=0)

    @property
    def duration_sec(self) -> int:
        return seconds(self.duration_minutes)


class CookingStep(_BaseStep):
    type: Literal["cooking"] = "cooking"
    cooking_settings: CookSettings


class InstructionStep(_BaseStep):
    type: Literal["instruction"] = "instruction"
    ingredient_ids: List[str] = Field(..., min_length=1)


# extra="forbid" keeps a cooking step from carrying ingredient ids and vice versa
Step = Annotated[Union[CookingStep, InstructionStep], Field(discriminator="type")]


class RecipeTotals(BaseModel):
    total_time_minutes: int
    total_duration_sec: int
    total_ingredients: int
    complexity_score: int


class Recipe(BaseModel):
    """
    Immutable recipe definition. Validated once, then only read by the
    session engine.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    title: str
    cuisine: Optional[str] = None
    difficulty: Difficulty = Difficulty.EASY
    ingredients: List[Ingredient] = []
    steps: List[Step] = Field(..., min_length=1)
    is_favorite: bool = False

    @field_validator("title")
    @classmethod
    def _title_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError("Title must be at least 3 characters")
        return value

    @field_validator("cuisine")
    @classmethod
    def _cuisine_blank_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _check_references(self) -> "Recipe":
        step_ids = [s.id for s in self.steps]
        if len(set(step_ids)) != len(step_ids):
            raise ValueError("Step ids must be unique within a recipe")

        known = {ing.id for ing in self.ingredients}
        for step in self.steps:
            if isinstance(step, InstructionStep):
                missing = [i for i in step.ingredient_ids if i not in known]
                if missing:
                    raise ValueError(f"Step {step.id} references unknown ingredients: {missing}")
        return self

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def total_duration_sec(self) -> int:
        return sum(s.duration_sec for s in self.steps)

    def step_duration_sec(self, index: int) -> int:
        return self.steps[index].duration_sec

    def remaining_after(self, index: int) -> int:
        """Seconds in all steps strictly after `index`."""
        return sum(s.duration_sec for s in self.steps[index + 1:])

    def totals(self) -> RecipeTotals:
        total_minutes = sum(s.duration_minutes for s in self.steps)
        return RecipeTotals(
            total_time_minutes=total_minutes,
            total_duration_sec=seconds(total_minutes),
            total_ingredients=len(self.ingredients),
            complexity_score=DIFFICULTY_WEIGHT[self.difficulty] * len(self.steps),
        )
