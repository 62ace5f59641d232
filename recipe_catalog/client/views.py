from pathlib import Path
from typing import List, Optional

from fastapi.templating import Jinja2Templates

from ..schemas import Recipe
from .api import RecipeApi, RecipeApiError
from .debounce import Debouncer

TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


class RecipeListView:
    """State behind the recipe list page: search, loading, error, results.

    Every fetch gets a sequence number and only the newest one may write
    back, so a slow response to an old search never replaces the results
    of a later one. Once closed the view ignores whatever is still in
    flight.
    """

    template_name = "recipe_list.html"

    def __init__(self, api: RecipeApi, *, debounce: float = 0.3):
        self.api = api
        self.recipes: List[Recipe] = []
        self.loading = True
        self.error: Optional[RecipeApiError] = None
        self.search_term = ""
        self.debounce_ms = round(debounce * 1000)
        self._debouncer = Debouncer(self.search, delay=debounce)
        self._latest = 0
        self._closed = False

    async def load(self) -> None:
        self._latest += 1
        ticket = self._latest
        self.loading = True
        self.error = None
        try:
            recipes = await self.api.get_all_recipes(self.search_term)
        except RecipeApiError as exc:
            if self._current(ticket):
                self.error = exc
                self.loading = False
            return
        if self._current(ticket):
            self.recipes = recipes
            self.loading = False

    async def search(self, term: str) -> None:
        self.search_term = term
        await self.load()

    def on_search(self, term: str) -> None:
        """Debounced entry point for keystrokes in the search box.

        For callers that keep one view alive across keystrokes. The web
        front end renders a fresh view per request and calls ``search``
        directly; its typing is debounced in the browser by
        ``static/js/search.js`` with the same delay.
        """
        self._debouncer.trigger(term)

    async def settle(self) -> None:
        await self._debouncer.wait()

    def close(self) -> None:
        self._closed = True
        self._debouncer.cancel()

    def _current(self, ticket: int) -> bool:
        return not self._closed and ticket == self._latest

    def render(self) -> str:
        return templates.get_template(self.template_name).render(view=self)


class RecipeDetailView:
    template_name = "recipe_detail.html"

    def __init__(self, api: RecipeApi):
        self.api = api
        self.recipe: Optional[Recipe] = None
        self.loading = True
        self.error: Optional[RecipeApiError] = None

    async def load(self, recipe_id: str) -> None:
        self.loading = True
        self.error = None
        try:
            self.recipe = await self.api.get_recipe_by_id(recipe_id)
        except RecipeApiError as exc:
            self.recipe = None
            self.error = exc
        finally:
            self.loading = False

    def render(self) -> str:
        return templates.get_template(self.template_name).render(view=self)
