import logging
import os

from core.models import JobRequest, QuoteValidationError, service_variants

from flask import Flask, Response, request

from services.pricing_config import load_pricing_config
from services.quote_service import QuoteService

# Setup
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("JobQuotes")
app = Flask(__name__)

# Config
INTERNAL_KEY = os.getenv("INTERNAL_API_KEY")
PRICING_CONFIG = load_pricing_config()

quote_service = QuoteService(PRICING_CONFIG)


# ==========================
#  QUOTING API
# ==========================
@app.route("/quote", methods=["POST"])
def create_quote():
    key = request.headers.get("X-Internal-API-Key")
    if not key or key != INTERNAL_KEY:
        return Response("Unauthorized", 403)

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return {"error": "Expected a JSON object"}, 400

    try:
        job = JobRequest.from_payload(data)
        breakdown = quote_service.quote(job)
    except QuoteValidationError as exc:
        logger.info("Rejected quote request: %s", exc)
        return {"error": str(exc)}, 400

    return {
        "service_name": PRICING_CONFIG.display_name(job.service_type),
        "breakdown": breakdown.to_job_fields(),
        "line_items": [{"label": label, "amount": amount} for label, amount in quote_service.line_items(breakdown)],
        "formatted_total": breakdown.formatted_total,
        "formatted_estimated_time": breakdown.formatted_estimated_time,
    }, 200


@app.route("/prices", methods=["GET"])
def list_prices():
    return {"prices": quote_service.starting_prices(), "text": quote_service.get_formatted_prices()}, 200


@app.route("/variants/<service_type>", methods=["GET"])
def list_variants(service_type: str):
    variants = [{"id": variant_id, "label": label} for variant_id, label in service_variants(service_type)]
    return {"service_type": service_type, "variants": variants}, 200


@app.route("/health", methods=["GET"])
def health_check():
    return "OK", 200


# === RUN SERVER ===
if __name__ == "__main__":
    # Use the PORT environment variable if available, otherwise 5000
    port = int(os.environ.get("PORT", 5000))
    # '0.0.0.0' is required for Docker containers to be accessible
    app.run(host="0.0.0.0", port=port)
