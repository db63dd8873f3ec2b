"""
Development articles service for running the dashboard end to end.
Implements the articles REST contract in memory and serves uploaded photos.
"""
import logging
import os
import re
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Response, UploadFile
from fastapi.staticfiles import StaticFiles

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    """Derive a URL slug from an article title."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def create_mock_backend(upload_dir: str = "uploads") -> FastAPI:
    """
    Create the development articles service.

    Args:
        upload_dir: Directory uploaded photos are written to and served from

    Returns:
        FastAPI application instance
    """
    app = FastAPI()  # pylint: disable=redefined-outer-name
    os.makedirs(upload_dir, exist_ok=True)

    # ================== STATE MANAGEMENT ==================
    state: Dict[str, Any] = {"articles": [], "next_id": 1}

    def find_article(article_id: int) -> Dict[str, Any]:
        for article in state["articles"]:
            if article["id"] == article_id:
                return article
        raise HTTPException(status_code=404, detail="Article not found")

    async def save_photos(photos: Optional[List[UploadFile]]) -> List[Dict[str, str]]:
        """Write uploads to disk unchanged and return their photo records."""
        saved = []
        for upload in photos or []:
            if not upload.filename:
                continue
            name = f"{secrets.token_hex(8)}_{os.path.basename(upload.filename)}"
            with open(os.path.join(upload_dir, name), "wb") as f:
                f.write(await upload.read())
            saved.append({"url": f"/uploads/{name}"})
        return saved

    # ================== ARTICLES API ==================
    @app.get("/api/articles")
    async def list_articles():
        """List every article in the paginated-resource envelope."""
        return {"data": {"data": state["articles"]}}

    @app.post("/api/articles", status_code=201)
    async def create_article(
        title: str = Form(...),
        summary: str = Form(""),
        content: str = Form(...),
        photos: Optional[List[UploadFile]] = File(None, alias="photos[]")
    ):
        """Create an article."""
        article = {
            "id": state["next_id"],
            "title": title,
            "slug": slugify(title),
            "summary": summary,
            "content": content,
            "published_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "photos": await save_photos(photos),
        }
        state["next_id"] += 1
        state["articles"].append(article)
        logger.info("Created article %s", article["id"])
        return article

    @app.put("/api/articles/{article_id}")
    async def update_article(
        article_id: int,
        title: str = Form(...),
        summary: str = Form(""),
        content: str = Form(...),
        photos: Optional[List[UploadFile]] = File(None, alias="photos[]")
    ):
        """Update an article's fields and append any new photos."""
        article = find_article(article_id)
        article.update({
            "title": title,
            "slug": slugify(title),
            "summary": summary,
            "content": content,
        })
        article["photos"].extend(await save_photos(photos))
        logger.info("Updated article %s", article_id)
        return article

    @app.delete("/api/articles/{article_id}")
    async def delete_article(article_id: int):
        """Delete an article."""
        article = find_article(article_id)
        state["articles"].remove(article)
        logger.info("Deleted article %s", article_id)
        return Response(status_code=204)

    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")
    return app


if __name__ == "__main__":
    import uvicorn
    from articles_admin.config import Config

    config = Config()
    port = config.mock_backend_port
    upload_dir = config.mock_upload_dir

    print(f"Starting development articles service on http://127.0.0.1:{port}")
    print(f"Upload directory: {os.path.abspath(upload_dir)}")
    print("Press Ctrl+C to stop")

    uvicorn.run(create_mock_backend(upload_dir=upload_dir), host="127.0.0.1", port=port, log_level="info")
