"""
Flask application for the Faculty Roles dashboard.

Provides:
- A listings page with a client-side division filter
- JSON endpoints for roles, divisions and pre-filled interest form links
- Token-protected admin endpoints for the (optional) form provisioner
- A submission trigger that notifies HR

Stack: Flask + Tailwind CSS (CDN)
"""

import logging
import os
import sys
import uuid
from functools import wraps
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify, render_template, request
from pydantic import ValidationError

# Load environment variables
load_dotenv()

# Project root on the path so `src` and `version` import from any run context
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
try:
    from version import __version__
    APP_VERSION = __version__
except ImportError:
    APP_VERSION = "dev"

from src.common.config import Config
from src.common.logger import get_logger, setup_logging
from src.services import get_dashboard_service

try:
    from models import PrefillQuery, SubmissionPayload
except ImportError:
    from frontend.models import PrefillQuery, SubmissionPayload

app = Flask(__name__)

setup_logging(level=os.getenv("LOG_LEVEL", "INFO"), format=os.getenv("LOG_FORMAT", "simple"))
logger = logging.getLogger(__name__)

flask_secret_key = os.getenv("FLASK_SECRET_KEY")
if not flask_secret_key:
    logger.warning("FLASK_SECRET_KEY not set. Generating random key (sessions will not persist between restarts)")
    flask_secret_key = os.urandom(24).hex()
app.secret_key = flask_secret_key

app.config["ADMIN_TOKEN"] = Config.ADMIN_TOKEN
app.config["PAGE_TITLE"] = Config.PAGE_TITLE

# Identity header set by the hosting platform's auth proxy (IAP)
IDENTITY_HEADER = "X-Goog-Authenticated-User-Email"
ADMIN_TOKEN_HEADER = "X-Admin-Token"


@app.context_processor
def inject_version():
    """Inject version info into all templates."""
    return {"version": APP_VERSION}


def request_logger(component: str):
    """Logger tagged with a per-request id."""
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
    return get_logger(__name__, request_id=request_id, component=component)


def current_user_email() -> Optional[str]:
    """Signed-in user's email from the platform identity header, if any."""
    raw = request.headers.get(IDENTITY_HEADER, "").strip()
    if not raw:
        return None
    # IAP prefixes the value with the identity provider
    return raw.split(":", 1)[-1] or None


def admin_required(f):
    """
    Decorator to require the admin token for routes.

    Returns JSON 401 if the token is missing or wrong, and 403 if no admin
    token is configured at all.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("ADMIN_TOKEN")
        if not expected:
            return jsonify({"error": "Admin access is not configured"}), 403
        if request.headers.get(ADMIN_TOKEN_HEADER) != expected:
            return jsonify({"error": "Not authenticated"}), 401
        return f(*args, **kwargs)
    return decorated_function


def forms_required(f):
    """404 for form endpoints while form provisioning is disabled."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_dashboard_service().forms_enabled:
            return jsonify({"error": "Form provisioning is disabled"}), 404
        return f(*args, **kwargs)
    return decorated_function


# ============================================================================
# Pages
# ============================================================================

@app.route("/")
def index():
    """Listings page."""
    service = get_dashboard_service()
    listings = service.list_open_roles()
    request_logger("listings").info(f"Rendering {len(listings)} faculty roles")
    return render_template(
        "index.html",
        page_title=current_app.config["PAGE_TITLE"],
        listings=listings,
        divisions=sorted({listing.division for listing in listings if listing.division}),
    )


# ============================================================================
# API Endpoints
# ============================================================================

@app.route("/api/roles", methods=["GET"])
def api_roles():
    roles = get_dashboard_service().list_open_roles()
    return jsonify({"roles": [role.to_dict() for role in roles], "count": len(roles)})


@app.route("/api/divisions", methods=["GET"])
def api_divisions():
    return jsonify({"divisions": get_dashboard_service().list_divisions()})


@app.route("/api/form/url", methods=["GET"])
@forms_required
def api_form_url():
    return jsonify({"url": get_dashboard_service().get_form_url()})


@app.route("/api/form/prefill", methods=["GET"])
@forms_required
def api_form_prefill():
    try:
        query = PrefillQuery(**request.args.to_dict())
    except ValidationError as e:
        return jsonify({"error": "Invalid request", "details": e.errors()}), 400

    url = get_dashboard_service().prefilled_url(query.role_title, query.division, current_user_email())
    return jsonify({"url": url})


@app.route("/api/form/roles", methods=["GET"])
@forms_required
def api_form_roles():
    """Open roles, each with a pre-filled interest form link for the current user."""
    roles = get_dashboard_service().listings_with_prefilled_urls(current_user_email())
    return jsonify({"roles": roles, "count": len(roles)})


@app.route("/api/profile/me", methods=["GET"])
def api_my_profile():
    email = current_user_email()
    if not email:
        return jsonify({"error": "No signed-in user"}), 401
    return jsonify(get_dashboard_service().resolve_profile(email).to_dict())


# ============================================================================
# Admin Endpoints
# ============================================================================

@app.route("/api/admin/form/provision", methods=["POST"])
@admin_required
@forms_required
def api_admin_provision_form():
    log = request_logger("form")
    info = get_dashboard_service().provision_form()
    if not info.is_available:
        log.error("Form provisioning failed")
        return jsonify({"error": "Form provisioning failed", **info.to_dict()}), 502
    log.info(f"Provisioned form {info.form_id}")
    return jsonify(info.to_dict())


@app.route("/api/admin/form/info", methods=["GET"])
@admin_required
@forms_required
def api_admin_form_info():
    return jsonify(get_dashboard_service().management_info())


@app.route("/api/admin/responses/sync", methods=["POST"])
@admin_required
@forms_required
def api_admin_sync_responses():
    return jsonify(get_dashboard_service().sync_responses())


@app.route("/api/admin/responses/notify-latest", methods=["POST"])
@admin_required
@forms_required
def api_admin_notify_latest_response():
    if not get_dashboard_service().notify_latest_response():
        return jsonify({"notified": False, "error": "No stored response could be sent to HR"}), 404
    request_logger("notifications").info("Re-sent HR notification for the latest response")
    return jsonify({"notified": True})


@app.route("/api/admin/system-check", methods=["GET"])
@admin_required
def api_admin_system_check():
    return jsonify(get_dashboard_service().system_check())


@app.route("/api/notifications/submission", methods=["POST"])
@admin_required
def api_submission_notification():
    """Response-submission trigger: email HR about one submission."""
    try:
        payload = SubmissionPayload(**(request.get_json(silent=True) or {}))
    except ValidationError as e:
        return jsonify({"error": "Invalid request", "details": e.errors()}), 400

    get_dashboard_service().notify_hr(payload.answers)
    request_logger("notifications").info("Submission notification processed")
    return jsonify({"status": "accepted"}), 202


@app.route("/health", methods=["GET"])
def public_health_check():
    """
    Public health endpoint for external monitoring.

    No authentication required. Returns minimal info.
    """
    return jsonify({
        "status": "healthy",
        "version": APP_VERSION,
        "form_provisioning": Config.ENABLE_FORM_PROVISIONING,
    })


if __name__ == "__main__":
    logger.info(Config.summary())
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG", "false").lower() == "true")
