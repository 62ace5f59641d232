from typing import Any, List, Optional, Union

import httpx
import structlog
from pydantic import BaseModel

from ..config import get_settings
from ..schemas import Recipe, RecipeCreate, RecipeUpdate

logger = structlog.get_logger(__name__)

RecipeData = Union[RecipeCreate, RecipeUpdate, dict]


class RecipeApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Request failed with status code {response.status_code}"


def _payload(data: RecipeData) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    return data


class RecipeApi:
    """Async client for the recipe API.

    ``base_url`` defaults to the ``api_url`` setting. Pass ``client`` to
    reuse an existing ``httpx.AsyncClient`` (tests hand in one bound to an
    ASGI transport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        base_url = base_url or get_settings().api_url
        self.client = (
            httpx.AsyncClient(
                base_url=base_url,
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
            if client is None
            else client
        )

    async def __aenter__(self) -> "RecipeApi":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self.client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            logger.error(
                "recipe_api_error",
                method=method,
                url=url,
                status_code=exc.response.status_code,
                message=message,
            )
            raise RecipeApiError(message, exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            logger.error("recipe_api_unreachable", method=method, url=url, error=str(exc))
            raise RecipeApiError(str(exc) or type(exc).__name__) from exc
        return resp

    async def get_all_recipes(self, search_term: str = "") -> List[Recipe]:
        resp = await self._request("GET", "/recipes", params={"q": search_term})
        return [Recipe.model_validate(r) for r in resp.json()]

    async def get_recipe_by_id(self, recipe_id: str) -> Recipe:
        resp = await self._request("GET", f"/recipes/{recipe_id}")
        return Recipe.model_validate(resp.json())

    async def create_recipe(self, data: RecipeData) -> Recipe:
        resp = await self._request("POST", "/recipes", json=_payload(data))
        return Recipe.model_validate(resp.json())

    async def update_recipe(self, recipe_id: str, data: RecipeData) -> Recipe:
        resp = await self._request("PUT", f"/recipes/{recipe_id}", json=_payload(data))
        return Recipe.model_validate(resp.json())

    async def delete_recipe(self, recipe_id: str) -> None:
        await self._request("DELETE", f"/recipes/{recipe_id}")
