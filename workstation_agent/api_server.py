"""REST backend: accounts, files, sessions, storage and the AI proxy, all under /api."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, g, jsonify, request

from .ai_service import AIService
from .config import MAX_REQUEST_BYTES, SERVER_HOST, SERVER_PORT
from .exceptions import AIServiceError, AIServiceUnavailableError, InvalidRequestError, StoreError
from .store import UserStore

logger = logging.getLogger(__name__)


def _json_body() -> Dict[str, Any]:
	data = request.get_json(silent=True)
	return data if isinstance(data, dict) else {}


def _bearer_token() -> str:
	header = request.headers.get("Authorization", "")
	scheme, _, token = header.partition(" ")
	if scheme.lower() != "bearer":
		return ""
	return token.strip()


def create_app(store: Optional[UserStore] = None, ai_service: Optional[AIService] = None) -> Flask:
	"""
	Build the Flask app.

	Args:
		store: User store (a fresh in-memory one when omitted)
		ai_service: AI proxy backend (built from config when omitted)
	"""
	app = Flask("workstation_agent_api")
	app.config["MAX_CONTENT_LENGTH"] = MAX_REQUEST_BYTES
	store = store if store is not None else UserStore()
	ai_service = ai_service if ai_service is not None else AIService()
	app.extensions["workstation_store"] = store
	app.extensions["workstation_ai"] = ai_service

	# CORS for browser clients on other origins
	@app.after_request
	def add_cors_headers(response):
		response.headers["Access-Control-Allow-Origin"] = "*"
		response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
		response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
		return response

	@app.errorhandler(StoreError)
	def handle_store_error(e: StoreError):
		return jsonify({"message": str(e)}), e.status

	@app.errorhandler(AIServiceUnavailableError)
	def handle_ai_unavailable(e: AIServiceUnavailableError):
		return jsonify({"message": f"AI service is unavailable. Server-side error: {e}"}), 503

	@app.errorhandler(AIServiceError)
	def handle_ai_error(e: AIServiceError):
		return jsonify({"message": str(e)}), 500

	def authenticate() -> str:
		g.username = store.authenticate(_bearer_token())
		return g.username

	def require_ai() -> None:
		if not ai_service.available:
			raise AIServiceUnavailableError(ai_service.initialization_error)

	# Public routes

	@app.get("/api/health")
	def health():
		return jsonify({
			"status": "ok",
			"timestamp": datetime.now(timezone.utc).isoformat(),
			"aiStatus": "ok" if ai_service.available else "error",
			"aiError": ai_service.initialization_error,
		})

	@app.post("/api/signup")
	def signup():
		data = _json_body()
		store.signup(data.get("username"), data.get("password"))
		logger.info("Created user %s", data.get("username"))
		return jsonify({"message": "User created successfully."}), 201

	@app.post("/api/login")
	def login():
		data = _json_body()
		username = data.get("username")
		token = store.login(username, data.get("password"))
		return jsonify({
			"message": "Login successful.",
			"token": token,
			"data": store.export_data(username),
		})

	@app.post("/api/logout")
	def logout():
		authenticate()
		store.logout(_bearer_token())
		return jsonify({"message": "Logged out."})

	# Files

	@app.get("/api/files")
	def get_files():
		return jsonify(store.get_files(authenticate()))

	@app.post("/api/files")
	def save_file():
		username = authenticate()
		data = _json_body()
		store.save_file(username, data.get("type"), data.get("name"), data.get("content"))
		return jsonify({"message": "File saved successfully."}), 201

	@app.delete("/api/files/<file_type>/<path:name>")
	def delete_file(file_type: str, name: str):
		store.delete_file(authenticate(), file_type, name)
		return jsonify({"message": "File deleted successfully."})

	# Sessions

	@app.get("/api/sessions")
	def list_sessions():
		return jsonify({"sessions": store.list_sessions(authenticate())})

	@app.post("/api/sessions")
	def save_session():
		username = authenticate()
		session_id = store.save_session(username, request.get_json(silent=True))
		return jsonify({"message": "Session saved successfully.", "id": session_id}), 201

	@app.get("/api/sessions/<session_id>")
	def get_session(session_id: str):
		return jsonify(store.get_session(authenticate(), session_id))

	@app.delete("/api/sessions/<session_id>")
	def delete_session(session_id: str):
		store.delete_session(authenticate(), session_id)
		return jsonify({"message": "Session deleted successfully."})

	# Storage

	@app.get("/api/storage")
	def storage():
		return jsonify({"used": store.storage_used(authenticate())})

	# AI proxy

	@app.post("/api/ai/chat")
	def ai_chat():
		authenticate()
		require_ai()
		prompt = _json_body().get("prompt")
		if not isinstance(prompt, str) or not prompt:
			raise InvalidRequestError("Prompt is required.")
		return jsonify({"decision": ai_service.decide(prompt)})

	@app.post("/api/ai/generate-image")
	def ai_generate_image():
		authenticate()
		require_ai()
		prompt = _json_body().get("prompt")
		if not isinstance(prompt, str) or not prompt:
			raise InvalidRequestError("Prompt is required.")
		return jsonify({"base64ImageBytes": ai_service.generate_image(prompt)})

	@app.post("/api/ai/google-search")
	def ai_google_search():
		authenticate()
		require_ai()
		query = _json_body().get("query")
		if not isinstance(query, str) or not query:
			raise InvalidRequestError("Query is required.")
		result = ai_service.search(query)
		return jsonify({"summary": result["summary"], "sources": result["sources"]})

	return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, app: Optional[Flask] = None) -> None:
	"""Serve the API in the foreground until interrupted."""
	app = app or create_app()
	host = host or SERVER_HOST
	port = port or SERVER_PORT
	logger.info("Server is running on http://%s:%d", host, port)
	logger.info("Data is stored in-memory and will be lost on restart.")
	app.run(host=host, port=port, debug=False, use_reloader=False, threaded=True)

