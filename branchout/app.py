from __future__ import annotations

import logging
import signal
import sys
from wsgiref.simple_server import make_server

import tweepy
from flask import Flask
from flask_cors import CORS

from branchout.api.routes import api
from branchout.config.logging import setup_logging
from branchout.config.settings import Settings, load_settings
from branchout.processors.adapter import Adapter
from branchout.processors.completion import RemoteCompleter
from branchout.publishers.twitter_publisher import TwitterPublisher
from branchout.storage.database import Database

logger = logging.getLogger(__name__)


def create_flask_app(
    settings: Settings,
    database: Database,
    adapter: Adapter,
    completer: RemoteCompleter | None = None,
    publisher: TwitterPublisher | None = None,
) -> Flask:
    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": settings.cors_origins}})

    app.config["SETTINGS"] = settings
    app.config["DATABASE"] = database
    app.config["ADAPTER"] = adapter
    app.config["COMPLETER"] = completer
    app.config["PUBLISHER"] = publisher

    app.register_blueprint(api, url_prefix="/api")
    return app


def build_completer(settings: Settings) -> RemoteCompleter | None:
    if not settings.remote_enabled:
        logger.warning("ANTHROPIC_API_KEY not set, adapting with local templates only")
        return None
    return RemoteCompleter(
        api_key=settings.anthropic_api_key,
        model=settings.model,
        max_tokens=settings.max_tokens,
        timeout=settings.remote_timeout_seconds,
    )


def build_publisher(settings: Settings) -> TwitterPublisher | None:
    if not settings.publishing_enabled:
        logger.info("X credentials not set, publishing disabled")
        return None
    creds = settings.x_credentials
    client = tweepy.Client(
        consumer_key=creds["X_API_KEY"],
        consumer_secret=creds["X_API_SECRET"],
        access_token=creds["X_ACCESS_TOKEN"],
        access_token_secret=creds["X_ACCESS_TOKEN_SECRET"],
    )
    return TwitterPublisher(client)


def main() -> None:
    settings = load_settings()
    setup_logging(log_file=settings.log_file)
    logger.info("Starting BranchOut...")

    database = Database(settings.database_path)
    completer = build_completer(settings)
    adapter = Adapter(completer=completer, remote_timeout=settings.remote_timeout_seconds)
    publisher = build_publisher(settings)

    app = create_flask_app(settings, database, adapter, completer, publisher)

    def _shutdown(sig: int, _frame: object) -> None:
        logger.info("Received signal %s, shutting down...", sig)
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    server = make_server(settings.host, settings.port, app)
    logger.info("Server starting on http://%s:%d", settings.host, settings.port)
    try:
        server.serve_forever()
    finally:
        database.close()


if __name__ == "__main__":
    main()
