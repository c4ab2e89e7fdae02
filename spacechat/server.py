import logging
from typing import Optional

from flask import Flask, Response, jsonify, request

from spacechat.graph.graph import Orchestrator, build_orchestrator

logger = logging.getLogger(__name__)

ROOT_TEXT = "API Server - Only /llm/analyze-intent endpoint is available"


def validate_request(body) -> Optional[str]:
    if not body or not isinstance(body, dict):
        return "Request body is required"

    message = body.get("message")
    if not message or not isinstance(message, str):
        return "Message is required and must be a string"
    if not message.strip():
        return "Message cannot be empty"

    session_id = body.get("session_id")
    if not session_id or not isinstance(session_id, str):
        return "Session ID is required and must be a string"
    return None


def failure(message: str, status: int = 400):
    return jsonify({"status": "FAILURE", "error": [{"message": message}]}), status


def create_app(orchestrator: Optional[Orchestrator] = None) -> Flask:
    app = Flask(__name__)

    if orchestrator is None:
        from spacechat.db import SessionLocal
        from spacechat.providers.openai_gateway import ChatOpenAIGateway
        from spacechat.providers.sql_store import SqlKeyValueStore

        orchestrator = build_orchestrator(SqlKeyValueStore(SessionLocal), ChatOpenAIGateway())

    @app.get("/")
    def index():
        return Response(ROOT_TEXT, status=200, content_type="text/plain")

    @app.route("/llm/analyze-intent", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    def analyze_intent():
        if request.method != "POST":
            return Response("Method not allowed", status=405)

        body = request.get_json(force=True, silent=True)
        error = validate_request(body)
        if error:
            return failure(error)

        try:
            payload = orchestrator.handle_message(body["session_id"], body["message"].strip())
        except Exception:
            logger.exception("Error processing intent analysis request")
            return failure("Failed to process intent analysis request")
        return jsonify(payload)

    @app.errorhandler(404)
    def not_found(_e):
        return Response(ROOT_TEXT, status=404, content_type="text/plain")

    return app


if __name__ == "__main__":
    from spacechat import init_db
    from spacechat.config import HOST, LOG_LEVEL, PORT

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Create tables (simple dev mode)
    init_db()
    create_app().run(host=HOST, port=PORT, debug=True)
