"""
FLASK APP - OTP BACKEND SERVER
==============================

Builds the Flask app, enables CORS and registers the OTP routes.

Run locally:
    flask --app backend.app run --port 5000
"""
from flask import Flask, jsonify
from flask_cors import CORS

from backend.config import Config
from backend.routes import otp_bp
from core.base32 import DecodePolicy
from core.errors import OtpError
from core.log_handler import configure


def create_app(overrides=None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Fail at start-up rather than on the first decode request
    app.config["DECODE_POLICY"] = DecodePolicy(app.config["DECODE_POLICY"])

    log = configure(app.config["LOG_LEVEL"])

    # Allow a frontend on another origin to call the API
    origins = app.config["CORS_ORIGINS"]
    if origins == "*":
        CORS(app)
    else:
        CORS(app, origins=[o.strip() for o in origins.split(",") if o.strip()])

    app.register_blueprint(otp_bp)

    @app.errorhandler(OtpError)
    def handle_otp_error(e):
        log.info("Rejected request: %s", e)
        return jsonify({"error": str(e), "type": type(e).__name__}), 400

    # JSON strings may carry lone surrogates that cannot become UTF-8 bytes
    @app.errorhandler(UnicodeError)
    def handle_unicode_error(e):
        log.info("Rejected request with unencodable text: %s", e)
        return jsonify({"error": "Text fields must be valid Unicode", "type": "InvalidText"}), 400

    @app.route('/', methods=['GET'])
    def index():
        return jsonify({
            "service": "otp-toolkit",
            "issuer": app.config["ISSUER"],
            "decode_policy": app.config["DECODE_POLICY"].value,
            "endpoints": sorted(
                str(rule) for rule in app.url_map.iter_rules() if rule.endpoint != "static"
            ),
        })

    log.debug("App created (decode_policy=%s)", app.config["DECODE_POLICY"].value)
    return app


if __name__ == '__main__':
    create_app().run(debug=True, host='127.0.0.1', port=5000)
