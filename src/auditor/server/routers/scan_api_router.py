import asyncio
import logging

from flask import Blueprint, jsonify, request, current_app
from pydantic import ValidationError

from auditor.model import ScanRequest
from auditor.services.report_format_service import issue_type_table
from crawler.errors import ErrorKind, ScanError
from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

scan_api_router = Blueprint('scan_api_router', __name__)

# HTTP status returned for each scan failure kind
STATUS_BY_KIND = {
    ErrorKind.INVALID_URL: 400,
    ErrorKind.BLOCKED: 403,
    ErrorKind.UNREACHABLE_HOST: 404,
    ErrorKind.NOT_HTML: 422,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.TLS_ERROR: 502,
    ErrorKind.HTTP_ERROR: 502,
    ErrorKind.INTERNAL: 500,
}


# --- HELPER FUNCTIONS ---

def get_scan_controller():
    """Retrieves the scan controller from the Flask application context."""
    controller = current_app.config.get('SCAN_CONTROLLER')
    if not controller:
        raise RuntimeError("ScanController is not set in app.config['SCAN_CONTROLLER']")
    return controller


def error_response(error: ScanError):
    return jsonify(error.to_dict()), STATUS_BY_KIND.get(error.kind, 500)


# --- API ROUTES ---

@scan_api_router.route('/scan', methods=['POST'])
def scan():
    """
    Runs a scan for `{"url": ..., "mode": "single" | "full"}`.
    A URL without a scheme is tried over https.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return error_response(ScanError(ErrorKind.INVALID_URL, "Request body must be a JSON object."))

    try:
        scan_request = ScanRequest.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"Rejected scan request {payload!r}: {e}")
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "body"
        return error_response(ScanError(ErrorKind.INVALID_URL, f"Invalid '{field}': {first.get('msg')}"))

    url = UrlUtils.ensure_scheme(scan_request.url.strip())

    try:
        result = asyncio.run(get_scan_controller().scan(url, scan_request.mode))
    except ScanError as e:
        logger.info(f"Scan of {url} failed: {e.kind.value}")
        return error_response(e)

    return jsonify(result.to_dict())


@scan_api_router.route('/issue-types', methods=['GET'])
def get_issue_types():
    """Label and description per issue category."""
    return jsonify(issue_type_table())
