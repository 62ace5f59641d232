import time
import uuid
from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import schemas
from .config import Settings, get_settings
from .errors import RecipeError, RecipeValidationError
from .log import configure_logging
from .recipes import load_recipes
from .repository import RecipeRepository

logger = structlog.get_logger(__name__)

ERROR_RESPONSES = {
    404: {"model": schemas.Message, "description": "Recipe not found"},
}


def get_repository(request: Request) -> RecipeRepository:
    return request.app.state.repository


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Seed the collection once at startup unless it was handed in pre-filled
    settings: Settings = app.state.settings
    repo: RecipeRepository = app.state.repository
    if settings.seed_on_startup and len(repo) == 0:
        repo.reset(repo.build_seed(load_recipes(settings.seed_file)))
        logger.info("seed_loaded", path=str(settings.seed_file), count=len(repo))
    yield


router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("", response_model=List[schemas.Recipe])
def list_recipes(
    q: Optional[str] = None, repo: RecipeRepository = Depends(get_repository)
):
    return repo.search(q)


@router.get("/{recipe_id}", response_model=schemas.Recipe, responses=ERROR_RESPONSES)
def get_recipe(recipe_id: str, repo: RecipeRepository = Depends(get_repository)):
    return repo.get(recipe_id)


@router.post(
    "",
    response_model=schemas.Recipe,
    status_code=201,
    responses={400: {"model": schemas.Message, "description": "Title is required"}},
)
def create_recipe(
    recipe: Optional[schemas.RecipeCreate] = None,
    repo: RecipeRepository = Depends(get_repository),
):
    return repo.create(recipe or schemas.RecipeCreate())


@router.put("/{recipe_id}", response_model=schemas.Recipe, responses=ERROR_RESPONSES)
def update_recipe(
    recipe_id: str,
    recipe: Optional[schemas.RecipeUpdate] = None,
    repo: RecipeRepository = Depends(get_repository),
):
    return repo.update(recipe_id, recipe or schemas.RecipeUpdate())


@router.delete(
    "/{recipe_id}",
    status_code=204,
    response_class=Response,
    responses=ERROR_RESPONSES,
)
def delete_recipe(recipe_id: str, repo: RecipeRepository = Depends(get_repository)):
    repo.delete(recipe_id)
    return Response(status_code=204)


async def recipe_error_handler(request: Request, exc: RecipeError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    # a create without a title reports that before anything else in the body
    body = exc.body
    if request.method == "POST" and isinstance(body, dict) and not body.get("title"):
        logger.warning("recipe_rejected", reason="missing title")
        return await recipe_error_handler(request, RecipeValidationError())
    problems = []
    for err in exc.errors():
        # drop the leading "body"/"query" from the location
        loc = ".".join(str(p) for p in err.get("loc", ())[1:])
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "; ".join(problems) or "Invalid request"
    logger.warning("request_invalid", path=request.url.path, message=message)
    return JSONResponse(status_code=400, content={"message": message})


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    response.headers["X-Request-ID"] = request_id
    return response


def create_app(
    repository: Optional[RecipeRepository] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="Recipe Catalog API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository if repository is not None else RecipeRepository()

    # Allow CORS for the browser client (adjust origins for production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    app.add_exception_handler(RecipeError, recipe_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/health")
    def health(repo: RecipeRepository = Depends(get_repository)):
        return {"status": "healthy", "recipes": len(repo)}

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
