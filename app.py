"""
Image Transformer API
Python/Flask service using numpy lookup tables and Pillow for the image bytes.

Endpoints:
  POST /process/<filter>/<x>,<y>,<w>,<h>  – Filter a region of the posted image.
       <filter> is grayscale, sepia or threshold(0-100).

The response body is the filtered region in the format it was posted in, or
204 when the region does not overlap the image.
"""

import io
import logging

from flask import Flask, current_app, g, jsonify, request, send_file
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, MethodNotAllowed
from werkzeug.http import HTTP_STATUS_CODES

from image_transformer import codec
from image_transformer.admission import AdmissionGate, ThrottlingOptions
from image_transformer.clipping import clip
from image_transformer.color_table import TABLE_SIZE
from image_transformer.config import DefaultConfig
from image_transformer.errors import InvalidFilterError, InvalidImageError
from image_transformer.filters import parse_filter
from image_transformer.image import ArgbImage
from image_transformer.processor import apply_filter
from image_transformer.routing import (
    ALLOWED_METHOD, METHOD_NOT_ALLOWED, RouteMatch, RouteMismatch, resolve,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

logger = logging.getLogger(__name__)

# Routed to the view so the router decides 404 vs 405; any other method is
# sent through the router by the MethodNotAllowed handler
ROUTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _route_mismatch(outcome: RouteMismatch):
    resp = jsonify({"error": HTTP_STATUS_CODES[outcome.status]})
    resp.status_code = outcome.status
    if outcome.status == 405:
        resp.headers["Allow"] = ALLOWED_METHOD
    return resp


def _process(route: RouteMatch):
    """Validate, decode, clip and filter. Errors propagate to the handlers."""
    spec = parse_filter(route.filter_token)
    image = codec.decode(request.get_data(cache=False), current_app.config["MAX_IMAGE_DIMENSION"])

    region = clip(route.rect, image.width, image.height)
    if region is None:
        return "", 204

    logger.debug("Filter begin: %s on %s", spec.kind.value, region)
    pixels = apply_filter(image.region(region), region.width, region.height, spec)
    result = ArgbImage.from_flat(pixels, region.width, region.height, image.format)
    logger.debug("Filter end: %dx%d", region.width, region.height)

    return send_file(io.BytesIO(codec.encode(result)), mimetype=codec.mimetype(result))


def create_app(overrides=None) -> Flask:
    """Build the service. *overrides* wins over defaults and the environment."""
    app = Flask(__name__)
    app.config.from_object(DefaultConfig)
    app.config.from_prefixed_env("IMAGE_TRANSFORMER")
    if overrides:
        app.config.update(overrides)
    CORS(app)

    logging.getLogger().setLevel(app.config["LOG_LEVEL"])

    gate = AdmissionGate(ThrottlingOptions.from_config(app.config))
    app.extensions["admission_gate"] = gate

    @app.before_request
    def admission():
        signature = gate.signature(request.query_string.decode("latin-1"), request.remote_addr)
        decision = gate.admit(signature)
        if decision.admitted:
            g.admission_slot = decision.holds_slot
            return None
        resp = jsonify({"error": HTTP_STATUS_CODES.get(gate.options.status, "Throttled")})
        resp.status_code = gate.options.status
        resp.headers["Retry-After"] = gate.retry_after_header(decision)
        return resp

    @app.teardown_request
    def release_slot(exc):
        if g.pop("admission_slot", False):
            gate.leave()

    @app.errorhandler(InvalidFilterError)
    @app.errorhandler(InvalidImageError)
    def bad_request(exc):
        logger.info("Rejected %s: %s", request.path, exc)
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(MethodNotAllowed)
    def unrouted_method(exc):
        outcome = resolve(request.method, request.path)
        if not isinstance(outcome, RouteMismatch):
            outcome = METHOD_NOT_ALLOWED
        return _route_mismatch(outcome)

    @app.errorhandler(HTTPException)
    def http_error(exc):
        return jsonify({"error": exc.name}), exc.code

    @app.route("/", defaults={"path": ""}, methods=ROUTED_METHODS, provide_automatic_options=False)
    @app.route("/<path:path>", methods=ROUTED_METHODS, provide_automatic_options=False)
    def dispatch(path):
        outcome = resolve(request.method, request.path)
        if isinstance(outcome, RouteMismatch):
            return _route_mismatch(outcome)
        return _process(outcome)

    logger.info("Colour tables ready (%d entries each)", TABLE_SIZE)
    return app


app = create_app()


if __name__ == "__main__":
    logger.info("Server running at http://%s:%s", app.config["HOST"], app.config["PORT"])
    app.run(debug=False, host=app.config["HOST"], port=app.config["PORT"], threaded=True)
