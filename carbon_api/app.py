# carbon_api/app.py
from flask import Flask, jsonify, request
from flask_cors import CORS
from dotenv import load_dotenv
import logging, os
from datetime import datetime, timezone

from .footprint import compute_footprint, trees_needed
from .store import JsonDocumentStore
from .validation import ValidationError, parse_calculation_request

load_dotenv()

# ---------- Paths for local JSON "database" ----------
DATA_DIR = os.getenv('DATA_DIR', os.path.join(os.path.dirname(__file__), 'data'))
CALCULATIONS_FILE = os.getenv('CALCULATIONS_FILE', os.path.join(DATA_DIR, 'calculations.json'))
DEFAULT_HISTORY_LIMIT = int(os.getenv('DEFAULT_HISTORY_LIMIT', '10'))

COLLECTION = 'emissionCalculations'


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace('+00:00', 'Z')

def error_response(message, status, error=None):
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = str(error)
    return jsonify(body), status

def _paging_arg(name, default):
    raw = request.args.get(name, default)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")
    if value < 0:
        raise ValidationError(f"{name} must not be negative")
    return value


def create_app(config=None):
    app = Flask(__name__)
    CORS(app)
    app.logger.setLevel(logging.INFO)
    app.config.update(
        CALCULATIONS_FILE=CALCULATIONS_FILE,
        DEFAULT_HISTORY_LIMIT=DEFAULT_HISTORY_LIMIT,
    )
    if config:
        app.config.update(config)

    store = JsonDocumentStore(app.config['CALCULATIONS_FILE'])
    app.extensions['calculation_store'] = store

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc):
        return error_response(str(exc), 400)

    # ---------- Routes ----------

    @app.get('/health')
    def health():
        return {"status": "OK", "timestamp": utc_now_iso()}, 200

    @app.post('/api/calculate-carbon')
    def calculate_carbon():
        """
        Validate a shipment, compute its footprint and persist the calculation.
        Body: quantity, unit, tonnesPerUnit, transportMode, fuelTypes, cooledTransport,
              origin, destination, originCoords {lat,lng}, destinationCoords {lat,lng},
              [userId], [originDetails], [destinationDetails]
        """
        calc, fields = parse_calculation_request(request.get_json(silent=True))
        try:
            result = compute_footprint(calc)
            now = utc_now_iso()
            record = dict(fields)
            record.update(result.as_record())
            record['calculatedAt'] = now
            record['createdAt'] = now
            calc_id = store.put(COLLECTION, record)
        except Exception as exc:
            app.logger.exception("Error calculating carbon footprint")
            return error_response("Failed to calculate carbon footprint", 500, exc)

        app.logger.info("Calculation %s: %.2f kg CO2 (%s)", calc_id, record['carbonFootprint'], record['transportMode'])
        return jsonify({
            "success": True,
            "message": "Calculation completed successfully",
            "data": {
                "id": calc_id,
                "carbonFootprint": record['carbonFootprint'],
                "totalWeight": record['totalWeight'],
                "distance": record['distance'],
                "emissionFactor": record['emissionFactor'],
                "treesNeeded": record['treesNeeded'],
                "transportMode": record['transportMode'],
                "cooledTransport": record['cooledTransport'],
            }
        }), 200

    @app.get('/api/calculations/<user_id>')
    def get_calculations(user_id):
        """User history, newest first. Optional: ?limit=NN&offset=NN"""
        limit = _paging_arg('limit', app.config['DEFAULT_HISTORY_LIMIT'])
        offset = _paging_arg('offset', 0)
        try:
            docs = store.query(COLLECTION, where={'userId': user_id}, order_by='calculatedAt',
                               descending=True, limit=limit, offset=offset)
        except Exception as exc:
            app.logger.exception("Error fetching calculations")
            return error_response("Failed to fetch calculations", 500, exc)

        calculations = [{"id": doc_id, **doc} for doc_id, doc in docs]
        return jsonify({"success": True, "data": calculations, "count": len(calculations)}), 200

    @app.get('/api/calculation/<calc_id>')
    def get_calculation(calc_id):
        try:
            doc = store.get(COLLECTION, calc_id)
        except Exception as exc:
            app.logger.exception("Error fetching calculation")
            return error_response("Failed to fetch calculation", 500, exc)
        if doc is None:
            return error_response("Calculation not found", 404)
        return jsonify({"success": True, "data": {"id": calc_id, **doc}}), 200

    @app.delete('/api/calculation/<calc_id>')
    def delete_calculation(calc_id):
        """Delete a calculation; body must carry the owner's userId."""
        data = request.get_json(silent=True) or {}
        user_id = data.get('userId')
        try:
            doc = store.get(COLLECTION, calc_id)
            if doc is None:
                return error_response("Calculation not found", 404)
            if doc.get('userId') != user_id:
                return error_response("Unauthorized to delete this calculation", 403)
            store.delete(COLLECTION, calc_id)
        except Exception as exc:
            app.logger.exception("Error deleting calculation")
            return error_response("Failed to delete calculation", 500, exc)
        return jsonify({"success": True, "message": "Calculation deleted successfully"}), 200

    @app.get('/api/stats/<user_id>')
    def get_stats(user_id):
        """Aggregate footprint, distance, weight and per-mode counts for a user."""
        try:
            docs = store.query(COLLECTION, where={'userId': user_id})
        except Exception as exc:
            app.logger.exception("Error fetching stats")
            return error_response("Failed to fetch statistics", 500, exc)

        total_footprint = sum(d.get('carbonFootprint') or 0 for _, d in docs)
        total_distance = sum(d.get('distance') or 0 for _, d in docs)
        total_weight = sum(d.get('totalWeight') or 0 for _, d in docs)
        count = len(docs)
        transport_modes = {}
        for _, d in docs:
            mode = d.get('transportMode')
            if mode:
                transport_modes[mode] = transport_modes.get(mode, 0) + 1

        return jsonify({
            "success": True,
            "data": {
                "totalCarbonFootprint": round(total_footprint, 2),
                "totalDistance": round(total_distance, 2),
                "totalWeight": round(total_weight, 2),
                "calculationCount": count,
                "averageCarbonPerCalculation": round(total_footprint / count, 2) if count else 0,
                "transportModes": transport_modes,
                "treesNeeded": trees_needed(total_footprint),
            }
        }), 200

    return app


app = create_app()

# ---------- Entrypoint for local run (Render uses Gunicorn) ----------
if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port)
