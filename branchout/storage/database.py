from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from branchout.models.types import ContentItem, ContentStatus, PlatformPost, PostStatus

logger = logging.getLogger(__name__)

_CONTENT_COLUMNS = "id, user_id, title, original_content, content_type, status, created_at"
_POST_COLUMNS = (
    "p.id, p.content_id, p.platform, p.adapted_content, p.character_count, "
    "p.status, p.created_at, p.posted_at"
)
_UPDATABLE_CONTENT_FIELDS = ("title", "original_content", "status")


def _timestamp(value: datetime | None = None) -> str:
    """UTC ISO-8601 text, so stored timestamps sort chronologically."""
    if value is None:
        value = datetime.now(timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class Database:
    """SQLite store for content items and their platform posts.

    Every read and write takes the owning ``user_id`` and filters on it in
    SQL; rows that belong to someone else behave as if they did not exist.
    """

    def __init__(self, db_path: str = "branchout.db") -> None:
        self._db_path = db_path
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._create_tables()

    def _create_tables(self) -> None:
        with self._lock:
            cursor = self._conn.cursor()
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS content (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT,
                    original_content TEXT NOT NULL,
                    content_type TEXT,
                    status TEXT,
                    created_at TEXT
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS platform_posts (
                    id TEXT PRIMARY KEY,
                    content_id TEXT NOT NULL REFERENCES content(id) ON DELETE CASCADE,
                    platform TEXT,
                    adapted_content TEXT,
                    character_count INTEGER,
                    status TEXT,
                    created_at TEXT,
                    posted_at TEXT
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS platform_settings (
                    user_id TEXT,
                    platform TEXT,
                    is_active INTEGER,
                    PRIMARY KEY (user_id, platform)
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS metrics (
                    id TEXT PRIMARY KEY,
                    metric_name TEXT,
                    value INTEGER,
                    timestamp TEXT
                )
                """
            )
            self._conn.commit()

    # -- content ----------------------------------------------------------

    def save_content(self, item: ContentItem) -> None:
        with self._lock:
            self._conn.execute(
                f"INSERT INTO content ({_CONTENT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    item.id,
                    item.user_id,
                    item.title,
                    item.original_content,
                    item.content_type,
                    ContentStatus(item.status).value,
                    _timestamp(item.created_at),
                ),
            )
            self._conn.commit()

    def get_content(self, content_id: str, user_id: str) -> dict | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_CONTENT_COLUMNS} FROM content WHERE id = ? AND user_id = ?",
                (content_id, user_id),
            ).fetchone()
            if row is None:
                return None
            content = dict(row)
            content["platform_posts"] = self._posts_for(content_id)
        return content

    def list_content(
        self,
        user_id: str,
        status: str | None = None,
        search: str | None = None,
    ) -> list[dict]:
        query = f"SELECT {_CONTENT_COLUMNS} FROM content WHERE user_id = ?"
        params: list[Any] = [user_id]
        if status:
            query += " AND status = ?"
            params.append(status)
        if search:
            query += " AND (LOWER(COALESCE(title, '')) LIKE ? OR LOWER(original_content) LIKE ?)"
            pattern = f"%{search.lower()}%"
            params.extend([pattern, pattern])
        query += " ORDER BY created_at DESC, rowid DESC"

        with self._lock:
            rows = self._conn.execute(query, params).fetchall()
            items = [dict(row) for row in rows]
            for item in items:
                item["platform_posts"] = self._posts_for(item["id"])
        return items

    def update_content(self, content_id: str, user_id: str, **fields: Any) -> dict | None:
        updates = {k: v for k, v in fields.items() if k in _UPDATABLE_CONTENT_FIELDS and v is not None}
        if "status" in updates:
            updates["status"] = ContentStatus(updates["status"]).value

        if updates:
            assignments = ", ".join(f"{column} = ?" for column in updates)
            with self._lock:
                self._conn.execute(
                    f"UPDATE content SET {assignments} WHERE id = ? AND user_id = ?",
                    (*updates.values(), content_id, user_id),
                )
                self._conn.commit()
        return self.get_content(content_id, user_id)

    def delete_content(self, content_id: str, user_id: str) -> bool:
        with self._lock:
            cursor = self._conn.execute(
                "DELETE FROM content WHERE id = ? AND user_id = ?",
                (content_id, user_id),
            )
            self._conn.commit()
            return cursor.rowcount > 0

    # -- platform posts ---------------------------------------------------

    def save_platform_post(self, post: PlatformPost) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO platform_posts "
                "(id, content_id, platform, adapted_content, character_count, "
                "status, created_at, posted_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    post.id,
                    post.content_id,
                    post.platform,
                    post.adapted_content,
                    post.character_count,
                    PostStatus(post.status).value,
                    _timestamp(post.created_at),
                    _timestamp(post.posted_at) if post.posted_at else None,
                ),
            )
            self._conn.commit()

    def get_platform_posts(self, content_id: str, user_id: str) -> list[dict] | None:
        """Posts for a content item, or None when the item is not the user's."""
        with self._lock:
            owned = self._conn.execute(
                "SELECT 1 FROM content WHERE id = ? AND user_id = ?",
                (content_id, user_id),
            ).fetchone()
            if owned is None:
                return None
            return self._posts_for(content_id)

    def get_platform_post(self, post_id: str, user_id: str) -> dict | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_POST_COLUMNS} FROM platform_posts p "
                "JOIN content c ON c.id = p.content_id "
                "WHERE p.id = ? AND c.user_id = ?",
                (post_id, user_id),
            ).fetchone()
        return dict(row) if row is not None else None

    def update_platform_post(
        self,
        post_id: str,
        user_id: str,
        adapted_content: str,
        character_count: int,
    ) -> bool:
        """Rewrite a pending post. Posted ones are left untouched."""
        with self._lock:
            cursor = self._conn.execute(
                "UPDATE platform_posts SET adapted_content = ?, character_count = ? "
                "WHERE id = ? AND status = 'pending' AND content_id IN "
                "(SELECT id FROM content WHERE user_id = ?)",
                (adapted_content, character_count, post_id, user_id),
            )
            self._conn.commit()
            return cursor.rowcount > 0

    def mark_posted(self, post_id: str, user_id: str) -> bool:
        with self._lock:
            cursor = self._conn.execute(
                "UPDATE platform_posts SET status = 'posted', posted_at = ? "
                "WHERE id = ? AND status = 'pending' AND content_id IN "
                "(SELECT id FROM content WHERE user_id = ?)",
                (_timestamp(), post_id, user_id),
            )
            self._conn.commit()
            return cursor.rowcount > 0

    def _posts_for(self, content_id: str) -> list[dict]:
        rows = self._conn.execute(
            f"SELECT {_POST_COLUMNS} FROM platform_posts p "
            "WHERE p.content_id = ? ORDER BY p.created_at DESC, p.rowid DESC",
            (content_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    # -- platform settings ------------------------------------------------

    def set_platform_active(self, user_id: str, platform: str, active: bool) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO platform_settings (user_id, platform, is_active) VALUES (?, ?, ?) "
                "ON CONFLICT(user_id, platform) DO UPDATE SET is_active = excluded.is_active",
                (user_id, platform, int(active)),
            )
            self._conn.commit()

    def get_inactive_platforms(self, user_id: str, platforms: list[str]) -> set[str]:
        if not platforms:
            return set()
        placeholders = ", ".join("?" for _ in platforms)
        with self._lock:
            rows = self._conn.execute(
                "SELECT platform FROM platform_settings "
                f"WHERE user_id = ? AND is_active = 0 AND platform IN ({placeholders})",
                (user_id, *platforms),
            ).fetchall()
        return {row["platform"] for row in rows}

    def log_metric(self, metric_name: str, value: int) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO metrics (id, metric_name, value, timestamp) "
                "VALUES (?, ?, ?, ?)",
                (
                    str(uuid.uuid4()),
                    metric_name,
                    value,
                    _timestamp(),
                ),
            )
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            try:
                self._conn.commit()
                self._conn.close()
                logger.info("Database connection closed")
            except Exception as exc:
                logger.error("Error closing database: %s", exc)
