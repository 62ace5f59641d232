class RecipeError(Exception):
    """Base for errors the API turns into ``{"message": ...}`` responses."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class RecipeValidationError(RecipeError):
    status_code = 400
    message = "Title is required"


class RecipeNotFoundError(RecipeError):
    status_code = 404
    message = "Recipe not found"

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__()
