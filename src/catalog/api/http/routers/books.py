"""Book catalog router: list, create, edit and delete books."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from loguru import logger
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from starlette.responses import RedirectResponse

from src.catalog.api.http.deps import (
    get_catalog_service,
    get_executor,
    get_response_cache,
)
from src.catalog.api.http.flash import Flash, pop_flash, redirect_home
from src.catalog.api.http.forms import BookForm, FormView, bind_form, submitted_values
from src.catalog.core.models import Page
from src.catalog.core.services import (
    BookCatalogService,
    CachedResponse,
    OperationTimeoutError,
    ResponseCache,
    TimeoutExecutor,
)
from src.catalog.entities.service.book import Book, BookStoreError
from src.catalog.runtime.context import get_config

R = TypeVar("R")

router = APIRouter(tags=["books"])


class BookListView(BaseModel):
    """Rendered book list."""

    page: Page[Book]
    order_by: int
    filter: str
    flash: Flash | None = None


def _order_by(order_by: int | None) -> int:
    return order_by if order_by is not None else get_config().catalog.default_order_by


async def _guarded(
    executor: TimeoutExecutor, process: str, fn: Callable[..., R], *args: Any, **kwargs: Any
) -> R:
    """Run a store call under the executor's deadline; a timeout becomes a 500."""
    try:
        return await executor.run(fn, *args, **kwargs)
    except OperationTimeoutError as e:
        logger.error("Problem found in book {} process", process)
        raise HTTPException(status_code=500, detail=str(e)) from e


def _list_books(
    catalog: BookCatalogService, page: int, order_by: int, filter: str
) -> Page[Book]:
    return catalog.list(
        page=page,
        page_size=get_config().catalog.page_size,
        order_by=order_by,
        filter=f"%{filter}%",
    )


def cache_key(prefix: str, page: int, order_by: int, filter: str) -> str:
    query = urlencode(sorted({"page": page, "orderBy": order_by, "filter": filter}.items()))
    return f"{prefix}:{query}"


async def _cached(
    cache: ResponseCache,
    key: str,
    ttl_seconds: int | None,
    render: Callable[[], Any],
) -> Response:
    """Serve ``key`` from the cache, rendering and storing it on a miss."""
    try:
        hit = await cache.get(key)
    except RuntimeError:
        logger.warning("Response cache unavailable; rendering {} uncached", key)
        hit = None
    if hit is not None:
        logger.debug("Response cache hit for {}", key)
        return Response(
            content=hit.body,
            status_code=hit.status_code,
            media_type=hit.media_type,
            headers={"X-Cache": "HIT"},
        )

    view: BookListView = await render()
    response = Response(
        content=view.model_dump_json(),
        media_type="application/json",
        headers={"X-Cache": "MISS"},
    )
    try:
        await cache.set(
            key,
            CachedResponse(
                status_code=response.status_code,
                media_type=response.media_type,
                body=response.body.decode("utf-8"),
            ),
            ttl_seconds,
        )
    except RuntimeError:
        logger.warning("Response cache unavailable; {} not stored", key)
    return response


@router.get("/", include_in_schema=False)
async def index() -> RedirectResponse:
    """Redirect to the book list."""
    return redirect_home()


@router.get("/books", response_model=BookListView)
async def list_books(
    request: Request,
    response: Response,
    page: int = Query(default=0, ge=0, description="Current page number (starts from 0)"),
    order_by: int | None = Query(default=None, alias="orderBy"),
    filter: str = Query(default="", description="Filter applied on book names"),
    catalog: BookCatalogService = Depends(get_catalog_service),
    executor: TimeoutExecutor = Depends(get_executor),
) -> BookListView:
    """Display the paginated list of books (asynchronous, with a deadline)."""
    order_by = _order_by(order_by)
    books = await _guarded(executor, "list", _list_books, catalog, page, order_by, filter)
    return BookListView(
        page=books, order_by=order_by, filter=filter, flash=pop_flash(request, response)
    )


@router.get("/books/cached", response_model=BookListView)
async def list_books_cached(
    page: int = Query(default=0, ge=0),
    order_by: int | None = Query(default=None, alias="orderBy"),
    filter: str = Query(default=""),
    catalog: BookCatalogService = Depends(get_catalog_service),
    executor: TimeoutExecutor = Depends(get_executor),
    cache: ResponseCache = Depends(get_response_cache),
) -> Response:
    """Display the paginated list of books (cached, asynchronous, with a deadline)."""
    order_by = _order_by(order_by)

    async def render() -> BookListView:
        books = await _guarded(executor, "list", _list_books, catalog, page, order_by, filter)
        return BookListView(page=books, order_by=order_by, filter=filter)

    return await _cached(
        cache,
        cache_key("asynchronous", page, order_by, filter),
        get_config().cache.asynchronous_ttl_seconds,
        render,
    )


@router.get("/books/sync", response_model=BookListView)
def list_books_sync(
    request: Request,
    response: Response,
    page: int = Query(default=0, ge=0),
    order_by: int | None = Query(default=None, alias="orderBy"),
    filter: str = Query(default=""),
    catalog: BookCatalogService = Depends(get_catalog_service),
) -> BookListView:
    """Display the paginated list of books (synchronous, blocking, no deadline)."""
    order_by = _order_by(order_by)
    books = _list_books(catalog, page, order_by, filter)
    return BookListView(
        page=books, order_by=order_by, filter=filter, flash=pop_flash(request, response)
    )


@router.get("/books/sync/cached", response_model=BookListView)
async def list_books_sync_cached(
    page: int = Query(default=0, ge=0),
    order_by: int | None = Query(default=None, alias="orderBy"),
    filter: str = Query(default=""),
    catalog: BookCatalogService = Depends(get_catalog_service),
    cache: ResponseCache = Depends(get_response_cache),
) -> Response:
    """Display the paginated list of books (cached, blocking, no deadline)."""
    order_by = _order_by(order_by)

    async def render() -> BookListView:
        books = await run_in_threadpool(_list_books, catalog, page, order_by, filter)
        return BookListView(page=books, order_by=order_by, filter=filter)

    return await _cached(
        cache,
        cache_key("synchronous", page, order_by, filter),
        get_config().cache.synchronous_ttl_seconds,
        render,
    )


@router.get("/books/all", response_model=list[Book])
async def all_books(
    catalog: BookCatalogService = Depends(get_catalog_service),
    executor: TimeoutExecutor = Depends(get_executor),
) -> list[Book]:
    """Every book, ordered by name."""
    return await _guarded(executor, "catalog", catalog.find_all)


@router.get("/books/new", response_model=FormView)
async def create_form() -> FormView:
    """Display the new book form."""
    return FormView()


@router.post("/books", response_model=None)
async def save_book(
    request: Request,
    catalog: BookCatalogService = Depends(get_catalog_service),
    executor: TimeoutExecutor = Depends(get_executor),
) -> Response:
    """Handle the new book form submission."""
    data = await request.form()
    form, errors = bind_form(data)
    if form is None:
        view = FormView(values=submitted_values(data), errors=errors)
        return Response(view.model_dump_json(), status_code=400, media_type="application/json")

    book = form.to_book()
    try:
        book_id = await _guarded(executor, "save", catalog.insert, book)
    except BookStoreError:
        logger.exception("Book {} could not be stored", book.name)
        return redirect_home("error", f"Book {book.name} has not been created")

    if book_id is None:
        msg = f"Book {book.name} has not been created"
        logger.info(msg)
        return redirect_home("error", msg)

    msg = f"Book {book.name} has been created"
    logger.info(msg)
    return redirect_home("success", msg)


@router.get("/books/{book_id}/edit", response_model=FormView)
async def edit_form(
    book_id: int,
    catalog: BookCatalogService = Depends(get_catalog_service),
    executor: TimeoutExecutor = Depends(get_executor),
) -> FormView:
    """Display the edit form of an existing book."""
    book = await _guarded(executor, "edit", catalog.find_by_id, book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return FormView(id=book_id, values=BookForm.from_book(book))


@router.post("/books/{book_id}", response_model=None)
async def update_book(
    book_id: int,
    request: Request,
    catalog: BookCatalogService = Depends(get_catalog_service),
    executor: TimeoutExecutor = Depends(get_executor),
) -> Response:
    """Handle the edit form submission."""
    data = await request.form()
    form, errors = bind_form(data)
    if form is None:
        view = FormView(id=book_id, values=submitted_values(data), errors=errors)
        return Response(view.model_dump_json(), status_code=400, media_type="application/json")

    book = form.to_book(book_id)
    try:
        updated = await _guarded(executor, "update", catalog.update, book_id, book)
    except BookStoreError:
        logger.exception("Book {} could not be updated", book_id)
        return redirect_home("error", f"Book {book.name} has not been updated")

    if updated == 0:
        return redirect_home("error", f"Book {book_id} was not found")
    return redirect_home("success", f"Book {book.name} has been updated")


@router.post("/books/{book_id}/delete", response_model=None)
async def delete_book(
    book_id: int,
    catalog: BookCatalogService = Depends(get_catalog_service),
    executor: TimeoutExecutor = Depends(get_executor),
) -> Response:
    """Handle book deletion."""
    try:
        deleted = await _guarded(executor, "delete", catalog.delete, book_id)
    except BookStoreError:
        logger.exception("Book {} could not be deleted", book_id)
        return redirect_home("error", "Book has not been deleted")

    if deleted == 0:
        return redirect_home("error", f"Book {book_id} was not found")
    return redirect_home("success", "Book has been deleted")
