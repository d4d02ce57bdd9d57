import os
import logging
from flask import Flask, abort, jsonify, render_template, request, send_file, send_from_directory
from werkzeug.exceptions import HTTPException
from core.errors import CatalogError, ThumbnailError, ValidationError
from core.photo_catalog import PhotoCatalog
from core.thumbnail_cache import ThumbnailCache
from core.validation import parse_count, validate_date_key, validate_filename
from . import protocol

logger = logging.getLogger(__name__)


def create_app(catalog: PhotoCatalog, thumbnail_cache: ThumbnailCache, config_manager) -> Flask:
    """Build the Flask application around already-constructed services."""
    app = Flask(__name__)
    photo_root = catalog.scanner.photo_root
    default_amount = config_manager.get("latest.default_amount", 3)

    @app.route("/")
    @app.route("/<page>")
    def index(page=None):
        result = catalog.get_page(page)
        if result is None:
            abort(404)
        return render_template(
            "index.html",
            dates=result.entries,
            current_page=result.number,
            total_pages=result.total_pages,
        )

    @app.route("/latest")
    def latest():
        amount = parse_count(request.args.get("amount"), default=default_amount)
        photos = catalog.list_recent_photos(amount)
        response = protocol.LatestPhotosResponse(
            latest=[protocol.LatestPhotoEntry.from_photo(p) for p in photos]
        )
        return jsonify(response.model_dump())

    @app.route("/view/<date>/<filename>")
    def view(date, filename):
        photo_view = catalog.get_photo(date, filename)
        if photo_view is None:
            abort(404)
        return render_template(
            "view.html",
            photo=photo_view.photo,
            previous_photo=photo_view.previous,
            next_photo=photo_view.next,
        )

    @app.route("/thumbnails/<date>/<filename>")
    def thumbnail(date, filename):
        stream = thumbnail_cache.get_thumbnail(date, filename)
        return send_file(stream, mimetype="image/jpeg", max_age=86400)

    @app.route("/photos/<date>/<filename>")
    def original(date, filename):
        validate_date_key(date)
        validate_filename(filename)
        return send_from_directory(os.path.join(photo_root, date), filename)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        logger.debug(f"Rejected request {request.path}: {e}")
        return "404 not found", 404

    @app.errorhandler(ThumbnailError)
    def handle_thumbnail_error(e):
        if e.is_not_found:
            return "404 not found", 404
        logger.error(f"Thumbnail generation failed for {request.path}: {e}")
        return "500 internal server error", 500

    @app.errorhandler(CatalogError)
    def handle_catalog_error(e):
        logger.error(f"Catalog unavailable while serving {request.path}: {e}")
        return "500 internal server error", 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.error(f"Unhandled error serving {request.method} {request.path}: {e}", exc_info=e)
        return "500 internal server error", 500

    return app
