"""
HTTP API for ETF Insight.

A Flask app that:
1. Accepts holdings and price panel CSV uploads
2. Serves derived views (latest prices, enriched holdings,
   valuation series, top holdings)
3. Serves the last persisted price file

Usage:
    etf-insight serve --port 3001
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from etf_insight.config import configure_logging
from etf_insight.data import (
    CsvParseError,
    DataLoadError,
    PriceFileStore,
    parse_holdings,
    parse_price_panel,
)
from etf_insight.models import HoldingsUpload, PricesUpload, ServerConfig
from etf_insight.portfolio import (
    build_latest_price_index,
    compute_valuation_series,
    enrich_holdings,
    latest_prices,
    parse_sort_field,
    parse_sort_order,
    parse_top_n,
    sort_holdings,
    top_holdings,
)
from etf_insight.state import AppState, MissingSnapshotError


logger = logging.getLogger(__name__)


class UploadRejected(Exception):
    """Raised when an upload is not an acceptable CSV file part."""
    pass


def create_app(
    config: Optional[ServerConfig] = None,
    state: Optional[AppState] = None,
) -> Flask:
    """
    Build the Flask application.

    Restores the persisted price file, if any, into the price snapshot.

    Args:
        config: Server configuration (defaults to ServerConfig())
        state: Snapshot state (defaults to a fresh AppState)

    Returns:
        Configured Flask app
    """
    config = config or ServerConfig()
    state = state or AppState()
    price_files = PriceFileStore(config.upload_dir)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes
    app.extensions["etf_insight.state"] = state
    CORS(app)

    restore_prices(state, price_files)

    @app.route("/api/upload/etf", methods=["POST"])
    def upload_etf():
        """Replace the holdings snapshot with an uploaded CSV."""
        filename, content = _read_csv_upload()
        try:
            holdings = parse_holdings(content)
        except CsvParseError as e:
            logger.warning(f"Rejected ETF upload {filename}: {e}")
            return jsonify({
                "error": "Failed to parse ETF CSV file",
                "details": str(e),
            }), 400

        upload = HoldingsUpload(
            holdings=tuple(holdings),
            filename=filename,
            uploaded_at=datetime.now(timezone.utc),
        )
        state.holdings.set(upload)
        logger.info(f"Loaded {len(holdings)} holdings from {filename}")

        return jsonify({
            "message": "ETF file uploaded successfully",
            "data": upload.to_dict(),
        })

    @app.route("/api/upload/prices", methods=["POST"])
    def upload_prices():
        """Replace the price snapshot and persist the raw file."""
        filename, content = _read_csv_upload()
        try:
            panel = parse_price_panel(content)
        except CsvParseError as e:
            logger.warning(f"Rejected prices upload {filename}: {e}")
            return jsonify({
                "error": "Failed to parse prices CSV file",
                "details": str(e),
            }), 400

        price_files.save(content)
        state.prices.set(PricesUpload(
            panel=panel,
            filename=filename,
            uploaded_at=datetime.now(timezone.utc),
        ))
        logger.info(
            f"Loaded {len(panel.prices)} price observations for "
            f"{len(panel.constituents)} constituents from {filename}"
        )

        return jsonify({
            "message": "Prices file uploaded successfully",
            "data": panel.to_dict(),
        })

    @app.route("/api/prices")
    def get_prices():
        """Serve the current price panel."""
        return jsonify(state.require_prices().panel.to_dict())

    @app.route("/api/prices/latest")
    def get_latest_prices():
        """Serve the latest price per constituent."""
        panel = state.require_prices().panel
        index = build_latest_price_index(panel.prices)
        return jsonify({
            "latestPrices": {
                constituent: float(price)
                for constituent, price in latest_prices(index).items()
            },
        })

    @app.route("/api/holdings/enriched")
    def get_enriched_holdings():
        """Serve holdings joined with latest prices, sorted."""
        holdings, prices = state.require_both()
        index = build_latest_price_index(prices.panel.prices)
        enriched = enrich_holdings(holdings.holdings, index)

        sorted_holdings = sort_holdings(
            enriched,
            parse_sort_field(request.args.get("sort")),
            parse_sort_order(request.args.get("order")),
        )
        return jsonify({"holdings": [h.to_dict() for h in sorted_holdings]})

    @app.route("/api/etf-price-series")
    def get_price_series():
        """Serve the portfolio valuation series."""
        holdings, prices = state.require_both()
        series = compute_valuation_series(holdings.holdings, prices.panel.prices)
        return jsonify({"series": [point.to_dict() for point in series]})

    @app.route("/api/holdings/top")
    def get_top_holdings():
        """Serve the largest holdings by dollar size."""
        holdings, prices = state.require_both()
        index = build_latest_price_index(prices.panel.prices)
        top = top_holdings(
            holdings.holdings,
            index,
            parse_top_n(request.args.get("n")),
        )
        return jsonify({"top": [entry.to_dict() for entry in top]})

    @app.route("/api/health")
    def health():
        return jsonify({
            "status": "ok",
            "hasHoldings": state.holdings.get() is not None,
            "hasPrices": state.prices.get() is not None,
        })

    @app.route("/api/stats")
    def stats():
        """Summarize which snapshots are loaded and their sizes."""
        holdings = state.holdings.get()
        prices = state.prices.get()
        return jsonify({
            "hasHoldings": holdings is not None,
            "holdingsCount": len(holdings.holdings) if holdings else 0,
            "hasPrices": prices is not None,
            "pricesCount": len(prices.panel.prices) if prices else 0,
            "constituentsCount": len(prices.panel.constituents) if prices else 0,
            "dateRange": prices.panel.date_range.to_dict() if prices else None,
        })

    @app.route("/prices.csv")
    def get_prices_file():
        """Serve the last persisted raw price file."""
        content = price_files.load()
        if content is None:
            return jsonify({"error": "prices.csv not found"}), 404
        return Response(content, mimetype="text/csv")

    _register_error_handlers(app)
    return app


def restore_prices(state: AppState, price_files: PriceFileStore) -> bool:
    """
    Load the persisted price file into the price snapshot.

    Args:
        state: Snapshot state to populate
        price_files: Store holding the persisted file

    Returns:
        True if a price panel was restored
    """
    try:
        content = price_files.load()
        if content is None:
            return False
        panel = parse_price_panel(content)
    except DataLoadError as e:
        logger.warning(f"Failed to load prices from disk: {e}")
        return False

    state.prices.set(PricesUpload(panel=panel, filename=price_files.path.name))
    logger.info(f"Loaded prices data from disk ({len(panel.prices)} records)")
    return True


def _read_csv_upload() -> tuple[str, bytes]:
    """
    Get the uploaded "file" part of the current request.

    Returns:
        Tuple of (filename, file bytes)

    Raises:
        UploadRejected: If the part is missing or not a .csv file
    """
    upload = request.files.get("file")
    if upload is None or not upload.filename or not upload.filename.endswith(".csv"):
        raise UploadRejected("Invalid CSV file")
    return upload.filename, upload.read()


def _register_error_handlers(app: Flask) -> None:
    """Map exceptions to JSON error responses."""

    @app.errorhandler(UploadRejected)
    def handle_upload_rejected(e: UploadRejected):
        logger.warning(f"Rejected upload: {e}")
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(MissingSnapshotError)
    def handle_missing_snapshot(e: MissingSnapshotError):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e: RequestEntityTooLarge):
        return jsonify({"error": "File too large"}), 413

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description}), e.code
        logger.exception("Unexpected error while handling request")
        return jsonify({"error": "Internal server error"}), 500


def run_server(config: ServerConfig) -> None:
    """Configure logging and run the development server."""
    configure_logging(config.log_level)
    app = create_app(config)
    logger.info(f"Server running on http://{config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=False)
