from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from ..config import Settings, get_settings
from ..log import configure_logging
from ..schemas import IngredientIn, Recipe, RecipeCreate
from .api import RecipeApi, RecipeApiError
from .views import RecipeDetailView, RecipeListView, templates

static_dir = Path(__file__).resolve().parents[2] / "static"


def get_api(request: Request) -> RecipeApi:
    return request.app.state.api


def _lines(text: str) -> List[str]:
    # blank lines in the textareas are ignored
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def parse_ingredients(text: str) -> List[IngredientIn]:
    """Parse one ingredient per line as ``amount | unit | name``.

    A line without ``|`` is taken as the name alone.
    """
    ingredients = []
    for order, line in enumerate(_lines(text), start=1):
        parts = [p.strip() for p in line.split("|")]
        if len(parts) >= 3:
            amount, unit, name = parts[0], parts[1], " ".join(parts[2:])
        elif len(parts) == 2:
            amount, unit, name = parts[0], "", parts[1]
        else:
            amount, unit, name = "", "", parts[0]
        ingredients.append(IngredientIn(name=name, amount=amount, unit=unit, order=order))
    return ingredients


def format_ingredients(recipe: Optional[Recipe]) -> str:
    if recipe is None:
        return ""
    return "\n".join(
        f"{ing.amount} | {ing.unit} | {ing.name}"
        for ing in sorted(recipe.ingredients, key=lambda i: i.order)
    )


def recipe_form(
    title: str = Form(""),
    description: str = Form(""),
    image_url: str = Form(""),
    prep_time: str = Form(""),
    cook_time: str = Form(""),
    servings: str = Form(""),
    difficulty: str = Form(""),
    category: str = Form(""),
    tags: str = Form(""),
    rating: str = Form(""),
    ingredients: str = Form(""),
    instructions: str = Form(""),
    notes: str = Form(""),
    is_favorite: bool = Form(False),
) -> RecipeCreate:
    """Read the create/edit form into a request body for the API.

    Number fields arrive as text; anything that is not a usable number is
    left unset so the API applies its defaults.
    """
    return RecipeCreate(
        title=title.strip(),
        description=description,
        image_url=image_url,
        prep_time=prep_time,
        cook_time=cook_time,
        servings=servings,
        difficulty=difficulty,
        category=category,
        tags=[t.strip() for t in tags.split(",") if t.strip()],
        rating=rating,
        ingredients=parse_ingredients(ingredients),
        instructions=_lines(instructions),
        notes=notes,
        is_favorite=is_favorite,
    )


def render_form(
    recipe: Optional[Recipe] = None,
    action: str = "/recipes/new",
    error: Optional[str] = None,
    status_code: int = 200,
) -> HTMLResponse:
    html = templates.get_template("recipe_form.html").render(
        recipe=recipe,
        action=action,
        error=error,
        ingredients_text=format_ingredients(recipe),
    )
    return HTMLResponse(html, status_code=status_code)


def create_web_app(
    api: Optional[RecipeApi] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """Build the HTML front end that talks to the recipe API over HTTP."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.api.aclose()

    app = FastAPI(title="Recipe Catalog", lifespan=lifespan)
    app.state.api = api if api is not None else RecipeApi(settings.api_url)
    app.state.settings = settings
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    debounce = settings.search_debounce_ms / 1000

    @app.get("/favicon.ico")
    def favicon():
        fav = static_dir / "img" / "favicon.ico"
        if fav.exists():
            return FileResponse(str(fav), media_type="image/x-icon")
        empty_svg = "<svg xmlns='http://www.w3.org/2000/svg' width='1' height='1'></svg>"
        return HTMLResponse(content=empty_svg, media_type="image/svg+xml")

    @app.get("/", response_class=HTMLResponse)
    async def recipe_list(request: Request, q: str = ""):
        view = RecipeListView(get_api(request), debounce=debounce)
        try:
            await view.search(q)
            return HTMLResponse(view.render())
        finally:
            view.close()

    @app.get("/recipes/new", response_class=HTMLResponse)
    async def new_recipe_form():
        return render_form()

    @app.post("/recipes/new", response_class=HTMLResponse)
    async def create_recipe(
        request: Request, data: RecipeCreate = Depends(recipe_form)
    ):
        try:
            created = await get_api(request).create_recipe(data)
        except RecipeApiError as exc:
            return render_form(error=exc.message, status_code=exc.status_code or 502)
        return RedirectResponse(f"/recipes/{created.id}", status_code=303)

    @app.get("/recipes/{recipe_id}", response_class=HTMLResponse)
    async def recipe_detail(request: Request, recipe_id: str):
        view = RecipeDetailView(get_api(request))
        await view.load(recipe_id)
        status_code = 200
        if view.error is not None:
            status_code = view.error.status_code or 502
        return HTMLResponse(view.render(), status_code=status_code)

    @app.get("/recipes/{recipe_id}/edit", response_class=HTMLResponse)
    async def edit_recipe_form(request: Request, recipe_id: str):
        view = RecipeDetailView(get_api(request))
        await view.load(recipe_id)
        if view.recipe is None:
            return HTMLResponse(view.render(), status_code=view.error.status_code or 502)
        return render_form(view.recipe, action=f"/recipes/{recipe_id}/edit")

    @app.post("/recipes/{recipe_id}/edit", response_class=HTMLResponse)
    async def edit_recipe(
        request: Request,
        recipe_id: str,
        data: RecipeCreate = Depends(recipe_form),
    ):
        try:
            await get_api(request).update_recipe(recipe_id, data)
        except RecipeApiError as exc:
            return HTMLResponse(
                f"Error: {exc.message}", status_code=exc.status_code or 502
            )
        return RedirectResponse(f"/recipes/{recipe_id}", status_code=303)

    @app.post("/recipes/{recipe_id}/delete")
    async def delete_recipe(request: Request, recipe_id: str):
        try:
            await get_api(request).delete_recipe(recipe_id)
        except RecipeApiError as exc:
            return HTMLResponse(
                f"Error: {exc.message}", status_code=exc.status_code or 502
            )
        return RedirectResponse("/", status_code=303)

    return app
