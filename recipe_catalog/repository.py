import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

import structlog

from .errors import RecipeNotFoundError, RecipeValidationError
from .recipes import load_recipes
from .schemas import (
    Difficulty,
    Ingredient,
    IngredientIn,
    Recipe,
    RecipeCreate,
    RecipeUpdate,
)

logger = structlog.get_logger(__name__)

# Replaced on update only when the new value is truthy.
SCALAR_FIELDS = (
    "title",
    "description",
    "image_url",
    "prep_time",
    "cook_time",
    "servings",
    "difficulty",
    "category",
    "rating",
    "notes",
)
# Replaced whenever supplied, an empty list included.
LIST_FIELDS = ("tags", "instructions")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class RecipeRepository:
    """The recipe collection, held in process memory.

    Storage order is insertion order; a delete closes the gap. Every
    operation takes the same lock, so handlers running on FastAPI's thread
    pool never interleave their reads and writes.
    """

    def __init__(
        self,
        recipes: Iterable[Recipe] = (),
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ):
        self._recipes: List[Recipe] = list(recipes)
        self._lock = threading.Lock()
        self._clock = clock
        self._new_id = id_factory

    @classmethod
    def from_seed(cls, path, **kwargs) -> "RecipeRepository":
        repo = cls(**kwargs)
        repo.reset(repo.build_seed(load_recipes(path)))
        return repo

    def __len__(self) -> int:
        with self._lock:
            return len(self._recipes)

    def build_seed(self, items: Iterable[dict]) -> List[Recipe]:
        """Turn raw seed dicts into recipes, applying the create defaults."""
        recipes = []
        for item in items:
            fields = RecipeCreate.model_validate(item)
            if not fields.title:
                raise RecipeValidationError()
            recipes.append(self._build(fields, recipe_id=item.get("id")))
        return recipes

    def reset(self, recipes: Iterable[Recipe] = ()) -> None:
        recipes = list(recipes)
        with self._lock:
            self._recipes = recipes
        logger.info("collection_reset", count=len(recipes))

    def search(self, query: Optional[str] = None) -> List[Recipe]:
        with self._lock:
            recipes = list(self._recipes)
        if not query:
            return recipes
        term = query.lower()
        return [
            r
            for r in recipes
            if term in r.title.lower()
            or any(term in ing.name.lower() for ing in r.ingredients)
        ]

    def get(self, recipe_id: str) -> Recipe:
        with self._lock:
            return self._recipes[self._index(recipe_id)]

    def create(self, fields: RecipeCreate) -> Recipe:
        if not fields.title:
            logger.warning("recipe_rejected", reason="missing title")
            raise RecipeValidationError()
        recipe = self._build(fields)
        with self._lock:
            self._recipes.append(recipe)
        logger.info("recipe_created", recipe_id=recipe.id, title=recipe.title)
        return recipe

    def update(self, recipe_id: str, fields: RecipeUpdate) -> Recipe:
        changes = {}
        for name in SCALAR_FIELDS:
            value = getattr(fields, name)
            if value:
                changes[name] = value
        for name in LIST_FIELDS:
            value = getattr(fields, name)
            if value is not None:
                changes[name] = list(value)
        if fields.ingredients is not None:
            changes["ingredients"] = self._ingredients(fields.ingredients)
        if fields.is_favorite is not None:
            changes["is_favorite"] = fields.is_favorite

        with self._lock:
            index = self._index(recipe_id)
            changes["updated_at"] = self._clock()
            updated = self._recipes[index].model_copy(update=changes)
            self._recipes[index] = updated
        logger.info(
            "recipe_updated",
            recipe_id=recipe_id,
            fields=sorted(k for k in changes if k != "updated_at"),
        )
        return updated

    def delete(self, recipe_id: str) -> None:
        with self._lock:
            del self._recipes[self._index(recipe_id)]
        logger.info("recipe_deleted", recipe_id=recipe_id)

    def _index(self, recipe_id: str) -> int:
        # caller holds the lock
        for i, r in enumerate(self._recipes):
            if r.id == recipe_id:
                return i
        logger.warning("recipe_not_found", recipe_id=recipe_id)
        raise RecipeNotFoundError(recipe_id)

    def _ingredients(self, items: Iterable[IngredientIn]) -> List[Ingredient]:
        return [
            Ingredient(
                id=ing.id or self._new_id(),
                name=ing.name,
                amount=ing.amount,
                unit=ing.unit,
                order=ing.order,
            )
            for ing in items
        ]

    def _build(self, fields: RecipeCreate, recipe_id: Optional[str] = None) -> Recipe:
        now = self._clock()
        return Recipe(
            id=recipe_id or self._new_id(),
            title=fields.title,
            description=fields.description or None,
            image_url=fields.image_url or None,
            prep_time=fields.prep_time or 0,
            cook_time=fields.cook_time or 0,
            servings=fields.servings or 1,
            difficulty=fields.difficulty or Difficulty.easy,
            category=fields.category or "lunch",
            tags=list(fields.tags or []),
            rating=fields.rating or None,
            ingredients=self._ingredients(fields.ingredients or []),
            instructions=list(fields.instructions or []),
            notes=fields.notes or None,
            is_favorite=fields.is_favorite or False,
            created_at=now,
            updated_at=now,
        )
