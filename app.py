import logging

from flask import Flask, request, jsonify, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Settings
from errors import RelayError, InternalError, ValidationError
from reply_mailbox import InMemoryMailbox, Mailbox
from relay import WebhookRelay

logger = logging.getLogger(__name__)

CSP_POLICY = (
    "default-src 'self'; "
    "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
    "font-src 'self' https://fonts.gstatic.com; "
    "script-src 'self'; "
    "img-src 'self' data: https:; "
    "connect-src 'self'; "
    "frame-src 'self' https://www.youtube.com"
)


def create_app(settings: Settings = None, mailbox: Mailbox = None, relay: WebhookRelay = None) -> Flask:
    settings = settings or Settings.from_env()
    mailbox = mailbox if mailbox is not None else InMemoryMailbox()
    relay = relay or WebhookRelay(settings)

    app = Flask(__name__, static_folder="public")
    app.config["MAX_CONTENT_LENGTH"] = settings.max_body_bytes
    app.config["RELAY_SETTINGS"] = settings
    app.extensions["chat_relay"] = relay
    CORS(app, resources={r"/api/*": {"origins": settings.allowed_origin}}, supports_credentials=True)

    # ----------------------------
    # Errors
    # ----------------------------
    @app.errorhandler(RelayError)
    def handle_relay_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(404)
    def handle_not_found(e):
        # unknown page paths get the widget page; api and asset misses stay 404
        if request.method == "GET" and not request.path.startswith(("/api/", "/static/")):
            return send_from_directory(app.static_folder, "index.html")
        return jsonify({"error": e.description}), 404

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Server error")
        err = InternalError()
        return jsonify(err.to_dict()), err.status_code

    @app.after_request
    def security_headers(response):
        response.headers["Content-Security-Policy"] = CSP_POLICY
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

    # ----------------------------
    # API endpoints
    # ----------------------------
    @app.route('/health')
    def health():
        return "ok", 200, {"Content-Type": "text/plain; charset=utf-8"}

    @app.route('/api/chat', methods=['POST'])
    def api_chat():
        data = request.get_json(silent=True)
        relay.submit(data)
        return jsonify({"success": True})

    @app.route('/api/callback', methods=['GET', 'POST'])
    def api_callback():
        # n8n posts JSON; the query-string form is kept for manual testing
        data = request.get_json(silent=True) if request.method == 'POST' else None
        if not isinstance(data, dict):
            data = request.args
        session_id = data.get('sessionId')
        reply = data.get('response')
        if not isinstance(session_id, str) or not isinstance(reply, str):
            raise ValidationError("sessionId and response required")
        mailbox.deposit(session_id, reply)
        return jsonify({"success": True})

    @app.route('/api/response', methods=['GET'])
    def api_response():
        session_id = request.args.get('sessionId', '')
        if not session_id:
            return jsonify({"message": None})
        return jsonify({"message": mailbox.retrieve(session_id)})

    # ----------------------------
    # Widget page
    # ----------------------------
    @app.route('/')
    def home():
        return send_from_directory(app.static_folder, "index.html")

    return app


app = create_app()


def main():
    settings = app.config["RELAY_SETTINGS"]
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not settings.webhook_url:
        logger.warning("WEBHOOK_URL is not set; /api/chat will answer 500")
    logger.info("Chat relay listening on http://%s:%d", settings.host, settings.port)
    try:
        app.run(host=settings.host, port=settings.port)
    finally:
        app.extensions["chat_relay"].close()


if __name__ == "__main__":
    main()
