"""
Dashboard server for the Articles Admin.
Provides a web interface to create, edit, delete and browse articles
stored in the remote articles service.
"""
import html
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from articles_admin.article_store import ArticleStore, FetchStatus
from articles_admin.articles_api import ArticlesAPI
from articles_admin.config import Config
from articles_admin.dashboard_view import DashboardFeatures, DashboardView

# Configure dashboard logger
logger = logging.getLogger('dashboard')
logger.setLevel(logging.INFO)

# Add console handler if not already present
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)


def sanitize_log_input(value: str) -> str:
    """
    Sanitize user input for logging to prevent log injection attacks.
    Removes newlines and other control characters that could be used for log forging.

    Args:
        value: The user input to sanitize

    Returns:
        Sanitized string safe for logging
    """
    if not isinstance(value, str):
        value = str(value)
    sanitized = value.replace('\n', '_').replace('\r', '_').replace('\t', '_')
    # Truncate to reasonable length to prevent log flooding
    return sanitized[:200]


def _e(value: Any) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def _redirect_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


# ================== RENDERING ==================
def render_photos(view: DashboardView, article: Dict[str, Any]) -> str:
    """Render an article's photo strip, truncated per the view's photo limit."""
    shown, hidden = view.visible_photos(article)
    if not shown:
        return '<span class="no-photos">No photos</span>'

    parts = []
    for photo in shown:
        src = view.photo_src(photo)
        img = f'<img class="thumb" src="{_e(src)}" alt="{_e(article.get("title"))}">'
        if view.features.lightbox:
            parts.append(
                '<form method="post" action="/photos/preview" class="inline">'
                f'<input type="hidden" name="url" value="{_e(src)}">'
                f'<button type="submit" class="thumb-btn">{img}</button></form>'
            )
        else:
            parts.append(f'<a href="{_e(src)}" target="_blank">{img}</a>')
    if hidden:
        parts.append(f'<span class="more-photos">+{hidden}</span>')
    return '<div class="photos">' + "".join(parts) + '</div>'


def render_row_actions(article: Dict[str, Any]) -> str:
    """Render the edit and delete buttons for one article."""
    article_id = _e(article.get("id"))
    return f"""
        <div class="actions">
            <form method="post" action="/articles/{article_id}/edit" class="inline">
                <button type="submit" class="btn btn-edit">Edit</button>
            </form>
            <form method="post" action="/articles/{article_id}/delete" class="inline">
                <button type="submit" class="btn btn-delete">Delete</button>
            </form>
        </div>"""


def render_listing(view: DashboardView) -> str:
    """Render the article collection in the configured layout."""
    articles = view.store.articles
    if not articles:
        return """
        <div class="empty-state">
            <div class="empty-state-icon">📭</div>
            <p>No articles found</p>
        </div>"""

    layout = view.features.listing
    if layout == "table":
        rows = "".join(
            f"""
            <tr>
                <td>{_e(a.get("id"))}</td>
                <td>{_e(a.get("title"))}</td>
                <td>{_e(a.get("summary"))}</td>
                <td>{render_photos(view, a)}</td>
                <td>{render_row_actions(a)}</td>
            </tr>"""
            for a in articles
        )
        return f"""
        <table class="articles-table">
            <thead><tr><th>ID</th><th>Title</th><th>Summary</th><th>Photos</th><th>Actions</th></tr></thead>
            <tbody>{rows}</tbody>
        </table>"""

    if layout == "cards":
        cards = "".join(
            f"""
            <div class="article-card">
                <h2>{_e(a.get("title"))}</h2>
                {render_photos(view, a)}
                <p>{_e(a.get("summary"))}</p>
                {render_row_actions(a)}
            </div>"""
            for a in articles
        )
        return f'<div class="card-grid">{cards}</div>'

    items = "".join(
        f"""
        <li class="article-item">
            <h2>{_e(a.get("title"))}</h2>
            {render_photos(view, a)}
            <p>{_e(a.get("summary"))}</p>
            {render_row_actions(a)}
        </li>"""
        for a in articles
    )
    return f'<ul class="article-list">{items}</ul>'


def render_modal(view: DashboardView) -> str:
    """Render the create/edit modal if it is open."""
    if not view.modal_open or view.draft is None:
        return ""
    draft = view.draft
    heading = f"Edit Article #{_e(view.editing_id)}" if view.editing_id is not None else "Create Article"
    selected = ""
    if draft.photos:
        names = ", ".join(_e(name) for name, _, _ in draft.photos)
        selected = f'<p class="selected-files">Selected: {names}</p>'
    return f"""
    <div class="overlay">
        <div class="modal">
            <h2>{heading}</h2>
            <form method="post" action="/articles/submit" enctype="multipart/form-data">
                <input type="text" name="title" placeholder="Title" value="{_e(draft.title)}" required>
                <input type="text" name="summary" placeholder="Summary" value="{_e(draft.summary)}">
                <textarea name="content" placeholder="Content" required>{_e(draft.content)}</textarea>
                <input type="file" name="photos" multiple accept="image/*">
                {selected}
                <div class="actions">
                    <button type="submit" class="btn btn-save">Save</button>
                    <button type="submit" class="btn btn-cancel" formaction="/modal/cancel" formnovalidate>Cancel</button>
                </div>
            </form>
        </div>
    </div>"""


def render_dialogs(view: DashboardView) -> str:
    """Render the confirmation dialogs and the lightbox that are showing."""
    parts = []
    if view.delete_target_id is not None:
        parts.append(f"""
    <div class="overlay">
        <div class="dialog">
            <p>Delete article #{_e(view.delete_target_id)}? This cannot be undone.</p>
            <div class="actions">
                <form method="post" action="/delete/confirm" class="inline">
                    <button type="submit" class="btn btn-delete">Delete</button>
                </form>
                <form method="post" action="/delete/cancel" class="inline">
                    <button type="submit" class="btn btn-cancel">Cancel</button>
                </form>
            </div>
        </div>
    </div>""")
    if view.edit_target_id is not None:
        parts.append(f"""
    <div class="overlay">
        <div class="dialog">
            <p>Edit article #{_e(view.edit_target_id)}?</p>
            <div class="actions">
                <form method="post" action="/edit/confirm" class="inline">
                    <button type="submit" class="btn btn-edit">Edit</button>
                </form>
                <form method="post" action="/edit/cancel" class="inline">
                    <button type="submit" class="btn btn-cancel">Cancel</button>
                </form>
            </div>
        </div>
    </div>""")
    if view.preview_url:
        parts.append(f"""
    <div class="overlay">
        <div class="lightbox">
            <img src="{_e(view.preview_url)}" alt="Preview">
            <form method="post" action="/photos/preview/close">
                <button type="submit" class="btn btn-cancel">Close</button>
            </form>
        </div>
    </div>""")
    return "".join(parts)


def render_notifications(notifications: List[Dict[str, str]]) -> str:
    """Render toasts for the given notifications."""
    return "".join(
        f'<div class="toast toast-{_e(n["level"])}">{_e(n["message"])}</div>'
        for n in notifications
    )


def render_dashboard(view: DashboardView) -> str:
    """Render the full dashboard page. Consumes pending notifications."""
    store = view.store
    if store.status == FetchStatus.LOADING:
        body = '<div class="loading">Loading...</div>'
    elif store.status == FetchStatus.FAILED:
        body = f"""
        <div class="error-banner">
            <p>{_e(store.error)}</p>
            <form method="post" action="/refresh"><button type="submit" class="btn">Retry</button></form>
        </div>""" + render_listing(view)
    else:
        body = render_listing(view)

    return """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Articles Admin</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
            background: #f5f5f5;
            color: #333;
        }
        .header {
            background: #fff;
            border-bottom: 1px solid #ddd;
            padding: 1rem 2rem;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            display: flex;
            justify-content: space-between;
            align-items: center;
        }
        .header h1 { font-size: 1.5rem; }
        .container { max-width: 1200px; margin: 2rem auto; padding: 0 1rem; }
        .inline { display: inline; }
        .btn {
            padding: 0.5rem 1rem;
            border: none;
            border-radius: 4px;
            cursor: pointer;
            font-size: 0.875rem;
            font-weight: 500;
            background: #007bff;
            color: #fff;
        }
        .btn-edit { background: #007bff; }
        .btn-delete { background: #dc3545; }
        .btn-cancel { background: #6c757d; }
        .btn-save { background: #28a745; }
        .actions { display: flex; gap: 0.5rem; margin-top: 0.5rem; }
        .articles-table { width: 100%; background: #fff; border-collapse: collapse; }
        .articles-table th, .articles-table td { padding: 0.75rem; border-bottom: 1px solid #eee; text-align: left; vertical-align: top; }
        .card-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(280px, 1fr)); gap: 1rem; }
        .article-card, .article-item {
            background: #fff;
            border-radius: 8px;
            padding: 1.5rem;
            margin-bottom: 1rem;
            box-shadow: 0 1px 3px rgba(0,0,0,0.1);
            list-style: none;
        }
        .photos { display: flex; gap: 0.5rem; align-items: center; flex-wrap: wrap; }
        .thumb { width: 8rem; height: 5rem; object-fit: cover; border-radius: 4px; }
        .thumb-btn { border: none; background: none; cursor: zoom-in; }
        .more-photos, .no-photos { font-size: 0.875rem; color: #666; }
        .overlay {
            position: fixed; inset: 0;
            background: rgba(0,0,0,0.5);
            display: flex; align-items: center; justify-content: center;
        }
        .modal, .dialog, .lightbox { background: #fff; border-radius: 8px; padding: 1.5rem; max-width: 90vw; }
        .modal { width: 40rem; }
        .modal input[type=text], .modal textarea {
            width: 100%; padding: 0.5rem; margin-bottom: 0.5rem;
            border: 1px solid #ddd; border-radius: 4px; font-family: inherit;
        }
        .modal textarea { min-height: 150px; }
        .lightbox img { max-width: 80vw; max-height: 80vh; display: block; margin-bottom: 1rem; }
        .toast { padding: 0.75rem 1rem; border-radius: 4px; margin-bottom: 0.5rem; }
        .toast-success { background: #d4edda; color: #155724; }
        .toast-error { background: #f8d7da; color: #721c24; }
        .error-banner { background: #f8d7da; color: #721c24; padding: 1rem; border-radius: 4px; margin-bottom: 1rem; }
        .empty-state, .loading { text-align: center; padding: 3rem; color: #666; }
        .empty-state-icon { font-size: 3rem; margin-bottom: 1rem; }
    </style>
</head>
<body>
    <div class="header">
        <h1>Articles Admin</h1>
        <form method="post" action="/articles/new"><button type="submit" class="btn btn-save">Create</button></form>
    </div>
    <div class="container">
        """ + render_notifications(view.pop_notifications()) + body + """
    </div>
    """ + render_modal(view) + render_dialogs(view) + """
</body>
</html>
"""


def create_dashboard_app(
    config: Optional[Config] = None,
    store: Optional[ArticleStore] = None,
    articles_api: Optional[ArticlesAPI] = None,
    features: Optional[DashboardFeatures] = None,
    view: Optional[DashboardView] = None
) -> FastAPI:
    """
    Create a dashboard FastAPI application.

    Args:
        config: Optional configuration (defaults to environment-backed Config)
        store: Optional article store (defaults to one built on articles_api)
        articles_api: Optional articles service client (defaults to config base URL)
        features: Optional feature switches (defaults to config values)
        view: Optional fully built view; overrides the other collaborators

    Returns:
        FastAPI application instance
    """
    app = FastAPI()  # pylint: disable=redefined-outer-name

    if view is None:
        config = config or Config()
        if articles_api is None:
            articles_api = ArticlesAPI(base_url=config.articles_api_base_url)
        if store is None:
            store = ArticleStore(articles_api)
        if features is None:
            features = DashboardFeatures.from_config(config)
        view = DashboardView(
            store=store,
            articles_api=articles_api,
            media_base_url=config.media_base_url,
            features=features,
        )
    app.state.view = view

    # ================== DASHBOARD UI ==================
    @app.get("/", response_class=HTMLResponse)
    def dashboard_home():
        """Dashboard home page."""
        logger.info("GET /")
        view.mount()
        return HTMLResponse(content=render_dashboard(view))

    @app.get("/api/articles")
    async def get_articles():
        """Get the current store state."""
        logger.info("GET /api/articles")
        return view.store.snapshot()

    @app.post("/refresh")
    def refresh_articles():
        """Re-fetch the article list."""
        logger.info("POST /refresh")
        view.refresh()
        return _redirect_home()

    # ================== CREATE / EDIT ==================
    @app.post("/articles/new")
    async def open_create_modal():
        """Open the create modal with an empty draft."""
        logger.info("POST /articles/new")
        view.open_create()
        return _redirect_home()

    @app.post("/articles/submit")
    def submit_article(
        title: str = Form(""),
        summary: str = Form(""),
        content: str = Form(""),
        photos: Optional[List[UploadFile]] = File(None)
    ):
        """Save the modal form as a new or updated article."""
        logger.info("POST /articles/submit")
        if not view.modal_open:
            view.submit()
            logger.warning("POST /articles/submit - 303 No open form, nothing sent")
            return _redirect_home()

        view.update_draft(title=title, summary=summary, content=content)

        # Browsers send an empty part when no file was chosen
        chosen = [p for p in photos or [] if p.filename]
        if chosen:
            files = []
            for upload in chosen:
                data = upload.file.read()
                files.append((upload.filename, data, upload.content_type or "application/octet-stream"))
            view.select_files(files)

        if view.submit():
            logger.info("POST /articles/submit - 303 Saved")
        else:
            logger.warning("POST /articles/submit - 303 Save failed, modal kept open")
        return _redirect_home()

    @app.post("/modal/cancel")
    async def cancel_modal():
        """Close the modal and discard the draft."""
        logger.info("POST /modal/cancel")
        view.cancel_modal()
        return _redirect_home()

    @app.post("/articles/{article_id}/edit")
    async def edit_article(article_id: int):
        """Start editing an article."""
        logger.info(f"POST /articles/{sanitize_log_input(article_id)}/edit")
        try:
            view.request_edit(article_id)
        except KeyError as e:
            logger.warning(f"POST /articles/{sanitize_log_input(article_id)}/edit - 404 Article not found")
            raise HTTPException(status_code=404, detail="Article not found") from e
        return _redirect_home()

    @app.post("/edit/confirm")
    async def confirm_edit():
        """Open the modal for the article awaiting edit confirmation."""
        logger.info("POST /edit/confirm")
        view.confirm_edit()
        return _redirect_home()

    @app.post("/edit/cancel")
    async def cancel_edit():
        """Dismiss the edit confirmation dialog."""
        logger.info("POST /edit/cancel")
        view.cancel_edit()
        return _redirect_home()

    # ================== DELETE ==================
    @app.post("/articles/{article_id}/delete")
    async def delete_article(article_id: int):
        """Ask for confirmation before deleting an article."""
        logger.info(f"POST /articles/{sanitize_log_input(article_id)}/delete")
        view.request_delete(article_id)
        return _redirect_home()

    @app.post("/delete/confirm")
    def confirm_delete():
        """Delete the article awaiting confirmation."""
        logger.info("POST /delete/confirm")
        if view.confirm_delete():
            logger.info("POST /delete/confirm - 303 Deleted")
        else:
            logger.warning("POST /delete/confirm - 303 Nothing deleted")
        return _redirect_home()

    @app.post("/delete/cancel")
    async def cancel_delete():
        """Dismiss the delete confirmation dialog."""
        logger.info("POST /delete/cancel")
        view.cancel_delete()
        return _redirect_home()

    # ================== LIGHTBOX ==================
    @app.post("/photos/preview")
    async def preview_photo(url: str = Form(...)):
        """Show a photo in the lightbox."""
        logger.info(f"POST /photos/preview {sanitize_log_input(url)}")
        view.preview_photo(url)
        return _redirect_home()

    @app.post("/photos/preview/close")
    async def close_preview():
        """Hide the lightbox."""
        logger.info("POST /photos/preview/close")
        view.close_preview()
        return _redirect_home()

    return app


# Create the default app instance for production use
app = create_dashboard_app()


if __name__ == "__main__":
    import sys
    import uvicorn

    config = Config()

    # Allow command-line argument to override environment variable
    port = config.dashboard_port
    host = config.dashboard_host

    if len(sys.argv) > 1:
        try:
            port = int(sys.argv[1])
        except ValueError:
            print(f"Invalid port number: {sys.argv[1]}")
            sys.exit(1)

    print(f"Starting Articles Admin Dashboard on http://{host}:{port}")
    print(f"Articles service: {config.articles_api_base_url}")
    print("Press Ctrl+C to stop")

    uvicorn.run(app, host=host, port=port, log_level="info")
