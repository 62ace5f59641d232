import uvicorn

from .config import get_settings


def main():
    """Run the recipe API."""
    settings = get_settings()
    # log_config=None leaves logging to structlog
    uvicorn.run(
        "recipe_catalog.app:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


def web():
    """Run the HTML front end against the API at ``RECIPES_API_URL``."""
    settings = get_settings()
    uvicorn.run(
        "recipe_catalog.client.web:create_web_app",
        factory=True,
        host=settings.host,
        port=settings.web_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
