"""FastAPI web application for taskboard."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlencode

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Form, Query, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskboard import __version__
from taskboard.api import role_actions
from taskboard.api.errors import ApiError, InvalidInput, StoreError, Unauthorized
from taskboard.auth.dependencies import (
    get_caller,
    get_current_user_id,
    get_identity_client,
    get_session_user_id,
)
from taskboard.auth.roles import require_admin
from taskboard.database.database import get_db, init_db
from taskboard.database.repository import TaskRepository
from taskboard.integrations.clerk import ClerkClient, IdentityProviderError
from taskboard.models.task import DeleteResult, Task, TaskCreate
from taskboard.models.user import Caller

load_dotenv()

logger = logging.getLogger(__name__)

SIGN_IN_URL = os.getenv("SIGN_IN_URL", "/sign-in")
CLERK_PUBLISHABLE_KEY = os.getenv("CLERK_PUBLISHABLE_KEY", "")
CLERK_FRONTEND_API = os.getenv("CLERK_FRONTEND_API", "")

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="taskboard API",
    description="Personal task tracking with role-based admin controls",
    version=__version__,
    lifespan=lifespan,
)


def _sign_in_redirect(next_path: str) -> RedirectResponse:
    return RedirectResponse(f"{SIGN_IN_URL}?{urlencode({'redirect_url': next_path})}", status_code=303)


def _admin_url(search: Optional[str] = None) -> str:
    return f"/admin?{urlencode({'search': search})}" if search else "/admin"


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # The task API reports malformed bodies in its own {"error": ...} shape.
    if request.url.path.startswith("/api/"):
        return JSONResponse({"error": "Invalid request body"}, status_code=400)
    return await request_validation_exception_handler(request, exc)


@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized):
    # No explanation is given; non-admins simply land on the home page.
    if not exc.authenticated:
        if request.method != "GET":
            # Role actions are form posts; come back to the directory instead.
            return _sign_in_redirect("/admin")
        next_path = request.url.path
        if request.url.query:
            next_path = f"{next_path}?{request.url.query}"
        return _sign_in_redirect(next_path)
    return RedirectResponse("/", status_code=303)


@app.exception_handler(IdentityProviderError)
async def identity_provider_error_handler(request: Request, exc: IdentityProviderError):
    return HTMLResponse("<h1>Identity provider unavailable</h1><p>Please try again later.</p>", status_code=502)


# ---------------------------------------------------------------------------
# Task API
# ---------------------------------------------------------------------------

@app.get("/api/tasks", response_model=List[Task])
def list_tasks(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's tasks."""
    try:
        return TaskRepository(db).get_all(user_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching tasks: {e}")
        raise StoreError(str(e))


@app.post("/api/tasks", response_model=Task)
def create_task(
    payload: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a task owned by the caller."""
    name = payload.name.strip() if isinstance(payload.name, str) else ""
    if not name:
        raise InvalidInput("Task name is required")
    try:
        return TaskRepository(db).create(user_id, name)
    except SQLAlchemyError as e:
        logger.error(f"Error creating task: {e}")
        raise StoreError(str(e))


@app.delete("/api/tasks", response_model=DeleteResult)
def delete_task(
    task_id: Optional[str] = Query(None, alias="id"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete one of the caller's tasks.

    The delete is filtered on both the task ID and the caller, so a task that
    is missing or owned by someone else is a no-op that still succeeds.
    """
    if not task_id:
        raise InvalidInput("Task ID is required")
    try:
        TaskRepository(db).delete(user_id, task_id)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting task: {e}")
        raise StoreError(str(e))
    return DeleteResult(success=True)


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------

@app.get("/", response_class=HTMLResponse)
def home(request: Request, user_id: Optional[str] = Depends(get_session_user_id)):
    """Landing page."""
    return templates.TemplateResponse(request, "home.html", {"signed_in": user_id is not None})


@app.get("/sign-in", response_class=HTMLResponse)
def sign_in(request: Request, redirect_url: str = Query("/")):
    """Mount the identity provider's hosted sign-in widget."""
    # Only same-site paths are accepted as post-sign-in targets.
    if not redirect_url.startswith("/") or redirect_url.startswith("//"):
        redirect_url = "/"
    return templates.TemplateResponse(
        request,
        "sign_in.html",
        {
            "publishable_key": CLERK_PUBLISHABLE_KEY,
            "frontend_api": CLERK_FRONTEND_API,
            "redirect_url": redirect_url,
        },
    )


@app.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request, caller: Optional[Caller] = Depends(get_caller)):
    """Welcome page for signed-in users."""
    if caller is None:
        return _sign_in_redirect(request.url.path)
    return templates.TemplateResponse(request, "dashboard.html", {"caller": caller})


@app.get("/task", response_class=HTMLResponse)
def task_page(request: Request, user_id: Optional[str] = Depends(get_session_user_id)):
    """Client-rendered task list; all data flows through /api/tasks."""
    return templates.TemplateResponse(request, "task.html", {"signed_in": user_id is not None})


@app.get("/admin", response_class=HTMLResponse)
def admin_dashboard(
    request: Request,
    search: Optional[str] = Query(None),
    caller: Optional[Caller] = Depends(get_caller),
    client: ClerkClient = Depends(get_identity_client),
):
    """User directory search with per-user role management."""
    require_admin(caller)

    query = search.strip() if search is not None else None
    if search is not None and (not query or query != search):
        # Blank searches (including an empty value) drop the parameter; padded ones are trimmed.
        return RedirectResponse(_admin_url(query), status_code=303)

    # No search term means no directory query at all, not "match everyone".
    users = client.search_users(query) if query else []
    return templates.TemplateResponse(request, "admin.html", {"query": query, "users": users})


@app.post("/admin/make-admin")
def make_admin(
    user_id: Optional[str] = Form(None, alias="id"),
    role: Optional[str] = Form(None),
    search: Optional[str] = Form(None),
    caller: Optional[Caller] = Depends(get_caller),
    client: ClerkClient = Depends(get_identity_client),
):
    role_actions.set_role(caller, client, user_id, role)
    return RedirectResponse(_admin_url(search), status_code=303)


@app.post("/admin/make-moderator")
def make_moderator(
    user_id: Optional[str] = Form(None, alias="id"),
    role: Optional[str] = Form(None),
    search: Optional[str] = Form(None),
    caller: Optional[Caller] = Depends(get_caller),
    client: ClerkClient = Depends(get_identity_client),
):
    role_actions.set_role(caller, client, user_id, role)
    return RedirectResponse(_admin_url(search), status_code=303)


@app.post("/admin/remove-role")
def remove_user_role(
    user_id: Optional[str] = Form(None, alias="id"),
    search: Optional[str] = Form(None),
    caller: Optional[Caller] = Depends(get_caller),
    client: ClerkClient = Depends(get_identity_client),
):
    role_actions.remove_role(caller, client, user_id)
    return RedirectResponse(_admin_url(search), status_code=303)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
