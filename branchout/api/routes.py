from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from branchout.errors import InputError, RemoteUnavailable
from branchout.generators.thread_generator import twitter_length
from branchout.models.types import (
    ContentItem,
    ContentStatus,
    Platform,
    PlatformPost,
    PlatformResult,
    Tone,
    flatten_adapted_content,
    normalize_platform_id,
    resolve_platform,
    split_adapted_content,
)

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)


def _get_database():
    return current_app.config["DATABASE"]


def _get_adapter():
    return current_app.config["ADAPTER"]


def _get_completer():
    return current_app.config.get("COMPLETER")


def _get_publisher():
    return current_app.config.get("PUBLISHER")


def _current_user_id() -> str | None:
    # Set by the authenticating gateway in front of this service.
    user_id = request.headers.get("X-User-Id", "").strip()
    return user_id or None


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _is_adapted_content(value) -> bool:
    if isinstance(value, str):
        return True
    return isinstance(value, list) and all(isinstance(part, str) for part in value)


def _unauthorized() -> tuple:
    return jsonify({"error": "Authentication required"}), 401


def _content_not_found() -> tuple:
    return jsonify({"error": "Content not found"}), 404


def _results_json(results: dict[str, PlatformResult]) -> dict:
    return {platform: result.to_dict() for platform, result in results.items()}


def _build_post(content_id: str, platform: str, result: PlatformResult) -> PlatformPost:
    flat = flatten_adapted_content(result.adapted_content)
    return PlatformPost(
        id=str(uuid.uuid4()),
        content_id=content_id,
        platform=platform,
        adapted_content=flat,
        character_count=twitter_length(flat),
        created_at=datetime.now(tz=timezone.utc),
    )


@api.route("/health", methods=["GET"])
def health() -> tuple:
    return jsonify({"status": "ok"}), 200


@api.route("/adapt", methods=["POST"])
def adapt() -> tuple:
    data = _json_body()
    if not data:
        return jsonify({"error": "Request body must be JSON"}), 400

    try:
        results = _get_adapter().adapt(
            data.get("content"),
            data.get("platforms"),
            data.get("tone", Tone.PROFESSIONAL.value),
            data.get("style", "engaging"),
        )
        return jsonify({"amplifiedContent": _results_json(results)}), 200
    except InputError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:
        logger.exception("Error in adapt: %s", exc)
        return jsonify({"error": str(exc)}), 500


# -- content ------------------------------------------------------------------


@api.route("/content", methods=["GET"])
def list_content() -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    try:
        status = request.args.get("status")
        if status == "all":
            status = None
        items = _get_database().list_content(
            user_id, status=status, search=request.args.get("search")
        )
        return jsonify({"content": items}), 200
    except Exception as exc:
        logger.exception("Error listing content: %s", exc)
        return jsonify({"error": "Internal server error"}), 500


@api.route("/content/<content_id>", methods=["GET"])
def get_content(content_id: str) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    content = _get_database().get_content(content_id, user_id)
    if content is None:
        return _content_not_found()
    return jsonify({"content": content}), 200


@api.route("/content", methods=["POST"])
def create_content() -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    data = _json_body()
    original = data.get("originalContent")
    if not original or not str(original).strip():
        return jsonify({"error": "Content is required"}), 400

    try:
        item = ContentItem(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=data.get("title"),
            original_content=original,
            content_type=data.get("contentType", "post"),
            created_at=datetime.now(tz=timezone.utc),
        )
        db = _get_database()
        db.save_content(item)
        return jsonify({"content": db.get_content(item.id, user_id)}), 201
    except Exception as exc:
        logger.exception("Error creating content: %s", exc)
        return jsonify({"error": "Internal server error"}), 500


@api.route("/content/<content_id>", methods=["PUT"])
def update_content(content_id: str) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    data = _json_body()
    status = data.get("status")
    if status is not None and status not in {s.value for s in ContentStatus}:
        return jsonify({"error": f"Invalid status {status!r}"}), 400

    try:
        content = _get_database().update_content(
            content_id,
            user_id,
            title=data.get("title"),
            original_content=data.get("originalContent"),
            status=status,
        )
        if content is None:
            return _content_not_found()
        return jsonify({"content": content}), 200
    except Exception as exc:
        logger.exception("Error updating content %s: %s", content_id, exc)
        return jsonify({"error": "Internal server error"}), 500


@api.route("/content/<content_id>", methods=["DELETE"])
def delete_content(content_id: str) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    if not _get_database().delete_content(content_id, user_id):
        return _content_not_found()
    return jsonify({"message": "Content deleted successfully"}), 200


@api.route("/content/<content_id>/platforms", methods=["GET"])
def get_platform_posts(content_id: str) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    posts = _get_database().get_platform_posts(content_id, user_id)
    if posts is None:
        return _content_not_found()
    return jsonify({"platformPosts": posts}), 200


# -- amplification ------------------------------------------------------------


@api.route("/amplify/<content_id>/amplify", methods=["POST"])
def amplify(content_id: str) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    data = _json_body()
    platforms = data.get("platforms")
    if not platforms or not isinstance(platforms, list):
        return jsonify({"error": "Platforms array is required"}), 400
    if not all(isinstance(p, str) and p.strip() for p in platforms):
        return jsonify({"error": "Platform identifiers must be non-empty strings"}), 400

    db = _get_database()
    content = db.get_content(content_id, user_id)
    if content is None:
        return _content_not_found()

    try:
        requested = [normalize_platform_id(p) for p in platforms]
        inactive = db.get_inactive_platforms(user_id, requested)
        active = [p for p in requested if p not in inactive]
        if not active:
            return jsonify({"error": "No active platforms selected"}), 400

        results = _get_adapter().adapt(
            content["original_content"],
            active,
            data.get("tone", Tone.PROFESSIONAL.value),
            data.get("style", "engaging"),
        )

        saved: list[dict] = []
        for platform, result in results.items():
            if not result.ok:
                continue
            post = _build_post(content_id, platform, result)
            db.save_platform_post(post)
            saved.append(db.get_platform_post(post.id, user_id))

        db.log_metric("adaptations_generated", len(saved))
        return jsonify({
            "amplifiedContent": _results_json(results),
            "platformPosts": saved,
        }), 200
    except InputError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:
        logger.exception("Error amplifying content %s: %s", content_id, exc)
        return jsonify({"error": "Failed to amplify content", "details": str(exc)}), 500


def _remote_action(content_id: str, action) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    completer = _get_completer()
    if completer is None:
        return jsonify({"error": "Remote completion is not configured"}), 503

    content = _get_database().get_content(content_id, user_id)
    if content is None:
        return _content_not_found()

    try:
        return action(completer, content)
    except RemoteUnavailable as exc:
        logger.error("Remote call failed for content %s: %s", content_id, exc)
        return jsonify({"error": str(exc)}), 502


@api.route("/amplify/<content_id>/hashtags", methods=["POST"])
def generate_hashtags(content_id: str) -> tuple:
    data = _json_body()
    try:
        count = int(data.get("count", 10))
    except (TypeError, ValueError):
        return jsonify({"error": "count must be an integer"}), 400

    def _action(completer, content):
        hashtags = completer.generate_hashtags(
            content["original_content"],
            data.get("platform", Platform.INSTAGRAM.value),
            count,
        )
        return jsonify({"hashtags": hashtags}), 200

    return _remote_action(content_id, _action)


@api.route("/amplify/<content_id>/improve", methods=["POST"])
def improve_content(content_id: str) -> tuple:
    data = _json_body()
    feedback = data.get("feedback")
    if not feedback:
        return jsonify({"error": "Feedback is required"}), 400

    def _action(completer, content):
        improved = completer.improve(content["original_content"], feedback)
        return jsonify({"improvedContent": improved}), 200

    return _remote_action(content_id, _action)


@api.route("/amplify/<content_id>/analyze", methods=["GET"])
def analyze_content(content_id: str) -> tuple:
    def _action(completer, content):
        return jsonify({"analysis": completer.analyze_tone(content["original_content"])}), 200

    return _remote_action(content_id, _action)


@api.route("/amplify/platform-posts/<post_id>", methods=["PUT"])
def update_platform_post(post_id: str) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    data = _json_body()
    adapted = data.get("adaptedContent")
    if adapted is None:
        return jsonify({"error": "adaptedContent is required"}), 400
    if not _is_adapted_content(adapted):
        return jsonify({"error": "adaptedContent must be a string or a list of strings"}), 400

    db = _get_database()
    post = db.get_platform_post(post_id, user_id)
    if post is None:
        return jsonify({"error": "Platform post not found"}), 404

    flat = flatten_adapted_content(adapted)
    if not db.update_platform_post(post_id, user_id, flat, twitter_length(flat)):
        return jsonify({"error": "Platform post has already been posted"}), 409
    return jsonify({"platformPost": db.get_platform_post(post_id, user_id)}), 200


@api.route("/amplify/platform-posts/<post_id>/publish", methods=["POST"])
def publish_platform_post(post_id: str) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    db = _get_database()
    post = db.get_platform_post(post_id, user_id)
    if post is None:
        return jsonify({"error": "Platform post not found"}), 404
    if resolve_platform(post["platform"]) is not Platform.TWITTER:
        return jsonify({"error": "Only Twitter/X posts can be published"}), 400
    if post["status"] != "pending":
        return jsonify({"error": "Platform post has already been posted"}), 409

    publisher = _get_publisher()
    if publisher is None:
        return jsonify({"error": "Publishing is not configured"}), 503

    try:
        tweet_ids = publisher.post_thread(split_adapted_content(post["adapted_content"]))
        db.mark_posted(post_id, user_id)
        db.log_metric("threads_posted", 1)
        return jsonify({"status": "posted", "postId": post_id, "tweetIds": tweet_ids}), 200
    except Exception as exc:
        logger.exception("Error publishing platform post %s: %s", post_id, exc)
        return jsonify({"error": str(exc)}), 500


@api.route("/platform-settings/<platform>", methods=["PUT"])
def update_platform_setting(platform: str) -> tuple:
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    data = _json_body()
    is_active = data.get("isActive")
    if not isinstance(is_active, bool):
        return jsonify({"error": "isActive must be a boolean"}), 400

    platform_id = normalize_platform_id(platform)
    _get_database().set_platform_active(user_id, platform_id, is_active)
    return jsonify({"platform": platform_id, "isActive": is_active}), 200
