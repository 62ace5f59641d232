# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `recipe_catalog` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import httpx
import pytest
from fastapi.testclient import TestClient  # noqa: E402

from recipe_catalog.app import create_app
from recipe_catalog.client.api import RecipeApi
from recipe_catalog.client.web import create_web_app, parse_ingredients
from recipe_catalog.config import Settings
from recipe_catalog.repository import RecipeRepository


SEED_FILE = Path(__file__).resolve().parent.parent / "data" / "recipes.json"
COOKIES_ID = "a1b2c3d4-e5f6-7890-1234-567890abcdef"


@pytest.fixture
def repo():
    return RecipeRepository.from_seed(SEED_FILE)


@pytest.fixture
def client(repo):
    settings = Settings(seed_on_startup=False)
    api_app = create_app(repository=repo, settings=settings)
    api = RecipeApi(
        client=httpx.AsyncClient(
            transport=httpx.ASGITransport(app=api_app),
            base_url="http://testserver/api/v1",
        )
    )
    return TestClient(create_web_app(api=api, settings=settings))


def test_parse_ingredients_ignores_blank_lines():
    ings = parse_ingredients("2 | cups | flour\n\n1/4|cup|soy sauce\nsalt\n")
    assert [(i.amount, i.unit, i.name, i.order) for i in ings] == [
        ("2", "cups", "flour", 1),
        ("1/4", "cup", "soy sauce", 2),
        ("", "", "salt", 3),
    ]


def test_list_page(client):
    res = client.get("/")
    assert res.status_code == 200
    assert "Classic Chocolate Chip Cookies" in res.text
    assert "Spicy Chicken Stir-Fry" in res.text
    assert "/static/js/search.js" in res.text


def test_list_page_search(client):
    res = client.get("/?q=broccoli")
    assert "Spicy Chicken Stir-Fry" in res.text
    assert "Classic Chocolate Chip Cookies" not in res.text

    res = client.get("/?q=tofu")
    assert "No recipes found." in res.text


def test_detail_page(client):
    res = client.get(f"/recipes/{COOKIES_ID}")
    assert res.status_code == 200
    assert "2.25 cups all-purpose flour" in res.text
    assert "Great with a glass of milk!" in res.text


def test_detail_page_not_found(client):
    res = client.get("/recipes/does-not-exist")
    assert res.status_code == 404
    assert "Error: Recipe not found" in res.text


def test_create_recipe_via_form(client, repo):
    res = client.post(
        "/recipes/new",
        data={
            "title": "FormRecipe",
            "prep_time": "10",
            "servings": "",
            "tags": "quick, easy",
            "ingredients": "1 | cup | rice\n\n2 | cups | water\n",
            "instructions": "rinse\n\nboil\n",
            "is_favorite": "true",
        },
        follow_redirects=False,
    )
    assert res.status_code == 303
    created = repo.search("FormRecipe")[0]
    assert res.headers["location"] == f"/recipes/{created.id}"
    assert created.prep_time == 10
    assert created.servings == 1
    assert created.tags == ["quick", "easy"]
    assert [i.name for i in created.ingredients] == ["rice", "water"]
    assert created.instructions == ["rinse", "boil"]
    assert created.is_favorite is True


def test_create_recipe_form_without_title(client, repo):
    res = client.post("/recipes/new", data={"title": "  "})
    assert res.status_code == 400
    assert "Error: Title is required" in res.text
    assert len(repo) == 2


def test_edit_recipe_via_form(client, repo):
    res = client.get(f"/recipes/{COOKIES_ID}/edit")
    assert res.status_code == 200
    assert "2.25 | cups | all-purpose flour" in res.text

    res = client.post(
        f"/recipes/{COOKIES_ID}/edit",
        data={"title": "Changed", "ingredients": "1 | cup | oats", "instructions": "mix"},
        follow_redirects=False,
    )
    assert res.status_code == 303
    recipe = repo.get(COOKIES_ID)
    assert recipe.title == "Changed"
    assert [i.name for i in recipe.ingredients] == ["oats"]
    # unchecked checkbox clears the favourite flag
    assert recipe.is_favorite is False
    assert recipe.prep_time == 15


def test_delete_recipe_via_form(client, repo):
    res = client.post(f"/recipes/{COOKIES_ID}/delete", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/"
    assert len(repo) == 1

    res = client.post(f"/recipes/{COOKIES_ID}/delete")
    assert res.status_code == 404


def test_create_recipe_form_with_out_of_range_numbers(client, repo):
    res = client.post(
        "/recipes/new",
        data={"title": "Odd Numbers", "rating": "9", "prep_time": "-1", "cook_time": "soon"},
        follow_redirects=False,
    )
    assert res.status_code == 303
    created = repo.search("Odd Numbers")[0]
    assert created.rating is None
    assert created.prep_time == 0
    assert created.cook_time == 0
