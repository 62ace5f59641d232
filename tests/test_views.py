import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import pytest

from recipe_catalog.client.api import RecipeApiError
from recipe_catalog.client.debounce import Debouncer
from recipe_catalog.client.views import RecipeDetailView, RecipeListView
from recipe_catalog.schemas import Ingredient, Recipe


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_recipe(title, **kwargs):
    return Recipe(id=title.lower(), title=title, created_at=NOW, updated_at=NOW, **kwargs)


class FakeApi:
    """Stands in for RecipeApi; per-term delays let responses arrive out of order."""

    def __init__(self, recipes=(), delays=None, error=None):
        self.recipes = list(recipes)
        self.delays = delays or {}
        self.error = error
        self.calls = []

    async def get_all_recipes(self, search_term=""):
        self.calls.append(search_term)
        await asyncio.sleep(self.delays.get(search_term, 0))
        if self.error:
            raise self.error
        return [r for r in self.recipes if search_term.lower() in r.title.lower()]

    async def get_recipe_by_id(self, recipe_id):
        if self.error:
            raise self.error
        for r in self.recipes:
            if r.id == recipe_id:
                return r
        raise RecipeApiError("Recipe not found", 404)


@pytest.mark.asyncio
async def test_debouncer_fires_once_with_last_value():
    calls = []

    async def record(value):
        calls.append(value)

    debouncer = Debouncer(record, delay=0.2)
    for value in ("p", "pi", "pie"):
        debouncer.trigger(value)
        await asyncio.sleep(0.01)
    assert calls == []
    assert debouncer.pending
    await asyncio.sleep(0.4)
    await debouncer.wait()
    assert calls == ["pie"]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_debouncer_cancel_drops_pending_call():
    calls = []

    async def record(value):
        calls.append(value)

    async with Debouncer(record, delay=0.02) as debouncer:
        debouncer.trigger("soup")
    await asyncio.sleep(0.05)
    assert calls == []


@pytest.mark.asyncio
async def test_list_view_load_and_render():
    view = RecipeListView(FakeApi([make_recipe("Unique Cake", rating=3, tags=["sweet"])]))
    assert view.loading
    await view.load()
    assert not view.loading
    assert view.error is None
    html = view.render()
    assert "Unique Cake" in html
    assert "#sweet" in html
    assert html.count("star-filled") == 3
    assert 'data-debounce-ms="300"' in html


@pytest.mark.asyncio
async def test_list_view_empty_state():
    view = RecipeListView(FakeApi())
    await view.search("nothing")
    assert "No recipes found." in view.render()


@pytest.mark.asyncio
async def test_list_view_error_state():
    view = RecipeListView(FakeApi(error=RecipeApiError("Network Error")))
    await view.load()
    assert not view.loading
    html = view.render()
    # the error replaces the results area only, the search box stays
    assert 'id="search"' in html
    assert html.index('id="results"') < html.index("Error: Network Error")


@pytest.mark.asyncio
async def test_list_view_debounced_search():
    api = FakeApi([make_recipe("Unique Cake"), make_recipe("Unique Pie")])
    view = RecipeListView(api, debounce=0.05)
    await view.load()
    for term in ("c", "ca", "cake"):
        view.on_search(term)
    await asyncio.sleep(0.2)
    await view.settle()
    assert api.calls == ["", "cake"]
    assert [r.title for r in view.recipes] == ["Unique Cake"]


@pytest.mark.asyncio
async def test_list_view_ignores_stale_response():
    api = FakeApi(
        [make_recipe("Unique Cake"), make_recipe("Unique Pie")],
        delays={"slow": 0.05, "pie": 0},
    )
    view = RecipeListView(api)
    slow = asyncio.ensure_future(view.search("slow"))
    await asyncio.sleep(0)
    await view.search("pie")
    await slow
    assert view.search_term == "pie"
    assert [r.title for r in view.recipes] == ["Unique Pie"]
    assert not view.loading


@pytest.mark.asyncio
async def test_closed_list_view_ignores_results():
    api = FakeApi([make_recipe("Unique Cake")], delays={"": 0.02})
    view = RecipeListView(api, debounce=0.01)
    pending = asyncio.ensure_future(view.load())
    view.on_search("cake")
    view.close()
    await pending
    await asyncio.sleep(0.03)
    assert view.recipes == []
    assert api.calls == [""]


@pytest.mark.asyncio
async def test_detail_view_renders_recipe():
    recipe = make_recipe(
        "Stir Fry",
        rating=5,
        notes="Serve hot",
        instructions=["Slice", "Fry"],
        ingredients=[
            Ingredient(id="i2", name="soy sauce", amount="1/4", unit="cup", order=2),
            Ingredient(id="i1", name="chicken", amount="1.5", unit="lb", order=1),
        ],
    )
    view = RecipeDetailView(FakeApi([recipe]))
    await view.load("stir fry")
    html = view.render()
    assert "1/4 cup soy sauce" in html
    assert html.index("1.5 lb chicken") < html.index("1/4 cup soy sauce")
    assert "<li>Slice</li>" in html
    assert "Serve hot" in html
    assert html.count("star-filled") == 5


@pytest.mark.asyncio
async def test_detail_view_not_found():
    view = RecipeDetailView(FakeApi())
    await view.load("missing")
    assert view.recipe is None
    assert view.error.status_code == 404
    assert "Error: Recipe not found" in view.render()
