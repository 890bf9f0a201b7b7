import pytest

from backend.cookclock.models.recipe import CookingStep, CookSettings, Ingredient, InstructionStep, Recipe


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def build_recipe(*minutes: int, recipe_id: str = "soup", title: str = "Beef soup") -> Recipe:
    """Alternates cooking and instruction steps with the given durations."""
    ingredients = [Ingredient(id="beef", name="Beef", quantity=500, unit="g")]
    steps = []
    for i, m in enumerate(minutes):
        if i % 2 == 0:
            steps.append(CookingStep(id=f"s{i}", description=f"step {i}", duration_minutes=m,
                                     cooking_settings=CookSettings(temperature=100, speed=2)))
        else:
            steps.append(InstructionStep(id=f"s{i}", description=f"step {i}", duration_minutes=m,
                                         ingredient_ids=["beef"]))
    return Recipe(id=recipe_id, title=title, ingredients=ingredients, steps=steps)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_recipe():
    return build_recipe
