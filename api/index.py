from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config
from settlement import compute_balances, compute_share, compute_transfers
from snapshot import (
    PayloadError,
    ReferentialError,
    parse_balances,
    parse_legacy_expenses,
    parse_snapshot,
    validate_references,
)


def _money(value):
    # round() keeps the sign of zero; adding 0.0 turns -0.0 into 0.0
    return round(value, 2) + 0.0


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        raise PayloadError("Request body must be JSON")
    return data


def _load_snapshot(data):
    participants, expenses = parse_snapshot(data)
    # Everything past this point assumes every id refers to a participant
    validate_references(participants, expenses)
    return participants, expenses


def _summarize(participants, expenses):
    balances = compute_balances(participants, expenses)
    shares = {person.id: _money(compute_share(person.id, expenses)) for person in participants}
    return balances, shares


def _describe(transfers):
    lines = [f"{t.debtor} owes {t.creditor} ${t.amount:.2f}" for t in transfers]
    return lines if len(lines) > 0 else ["No debts found!"]


def register_routes(app):
    # --- 1. HEALTH CHECK ROUTE ---
    @app.route('/api', methods=['GET'])
    def health_check():
        return jsonify({"status": "healthy", "message": "Backend is running!"})

    # --- 2. CALCULATION ROUTE ---
    # Matches the path in the vercel.json rewrite
    @app.route('/api/calculate', methods=['POST'])
    def calculate():
        data = _json_body()

        # Bare list of {payer, amount, involved}: answer with display strings
        if isinstance(data, list):
            participants, expenses = parse_legacy_expenses(data)
            transfers = compute_transfers(compute_balances(participants, expenses))
            return jsonify(_describe(transfers))

        participants, expenses = _load_snapshot(data)
        balances, shares = _summarize(participants, expenses)
        transfers = compute_transfers(balances)

        app.logger.debug(
            "Settled %d participants, %d expenses into %d transfers",
            len(participants), len(expenses), len(transfers),
        )
        return jsonify({
            "balances": {person: _money(amount) for person, amount in balances.items()},
            "shares": shares,
            "transfers": [dict(t.to_dict(), amount=_money(t.amount)) for t in transfers],
        })

    # --- 3. BALANCES ONLY ---
    @app.route('/api/balances', methods=['POST'])
    def balances():
        participants, expenses = _load_snapshot(_json_body())
        balances, shares = _summarize(participants, expenses)
        return jsonify({
            "balances": {person: _money(amount) for person, amount in balances.items()},
            "shares": shares,
        })

    # --- 4. TRANSFERS FROM PRECOMPUTED BALANCES ---
    @app.route('/api/transfers', methods=['POST'])
    def transfers():
        transfers = compute_transfers(parse_balances(_json_body()))
        return jsonify({
            "transfers": [dict(t.to_dict(), amount=_money(t.amount)) for t in transfers],
        })


def register_error_handlers(app):
    @app.errorhandler(PayloadError)
    @app.errorhandler(ReferentialError)
    def bad_request(e):
        app.logger.warning("Rejected request to %s: %s", request.path, e)
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(Exception)
    def unexpected(e):
        # 404, 405, 413 and friends keep their own status code
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description}), e.code

        app.logger.exception("Unhandled error on %s", request.path)
        return jsonify({"error": str(e)}), 500


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Balance maps are ordered by participant; keep that order in responses
    app.json.sort_keys = False

    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})  # Allows the React frontend to call us

    register_routes(app)
    register_error_handlers(app)
    return app


app = create_app()

# Serverless hosts import `app` and never run this block
if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'], port=app.config['PORT'])
