from flask import Flask, request, jsonify, make_response
from flask_cors import CORS
from offer_engine import ImportRejected, OfferSession
from offer_engine.config import Settings
from offer_engine.models import FileUpload
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = Settings.from_env()

app = Flask(__name__)

# Enable CORS so the offer builder front end can call the local host
CORS(app)

# The single local session
session = OfferSession.from_settings(settings)


def _download(body: str, file_name: str):
    response = make_response(body)
    response.headers['Content-Type'] = 'application/json'
    response.headers['Content-Disposition'] = f'attachment; filename="{file_name}"'
    return response


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Offer Builder Engine API",
        "version": "1.0",
        "environment": settings.environment,
        "endpoints": {
            "session": "/session [GET, PATCH]",
            "steps": "/session/next, /session/back [POST]",
            "attachments": "/session/attachments [POST], /session/attachments/<id> [DELETE]",
            "save": "/session/save, /session/save_as [POST]",
            "autosave": "/session/autosave [DELETE]",
            "drafts": "/drafts [GET], /drafts/<id> [PATCH, DELETE], /drafts/<id>/load [POST]",
            "export": "/session/export, /drafts/export [GET]",
            "import": "/session/import, /drafts/import [POST]",
            "document": "/session/document [GET]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


@app.route("/session", methods=["GET"])
def get_session():
    return jsonify(session.to_dict()), 200


@app.route("/session", methods=["PATCH"])
def update_session():
    """Apply field edits to the live draft"""
    changes = request.get_json(silent=True)
    if not isinstance(changes, dict) or not changes:
        return jsonify({"error": "No field changes provided", "status": "failed"}), 400
    try:
        session.update(**changes)
    except ValueError as e:
        logger.error(f"Rejected edit: {str(e)}")
        return jsonify({"error": str(e), "status": "validation_failed"}), 400
    return jsonify(session.to_dict()), 200


@app.route("/session/next", methods=["POST"])
def next_step():
    session.next()
    return jsonify(session.to_dict()), 200


@app.route("/session/back", methods=["POST"])
def previous_step():
    session.back()
    return jsonify(session.to_dict()), 200


@app.route("/session/attachments", methods=["POST"])
def add_attachments():
    files = [
        FileUpload(name=f.filename or "attachment", data=f.read(), type=f.mimetype or "application/octet-stream")
        for f in request.files.getlist("files")
    ]
    if not files:
        return jsonify({"error": "No files provided", "status": "failed"}), 400
    added = session.add_attachments(files)
    return jsonify({
        "attachments": [a.to_dict() | {"status": a.status} for a in added],
        "session": session.to_dict()
    }), 200


@app.route("/session/attachments/<attachment_id>", methods=["DELETE"])
def remove_attachment(attachment_id):
    if not session.remove_attachment(attachment_id):
        return jsonify({"error": "Attachment not found", "status": "failed"}), 404
    return jsonify(session.to_dict()), 200


@app.route("/session/save", methods=["POST"])
def save_draft():
    body = request.get_json(silent=True) or {}
    saved = session.save(body.get("name"))
    if saved is None:
        return jsonify({"error": "Draft could not be saved", "status": "failed"}), 500
    return jsonify(session.to_dict()), 200


@app.route("/session/save_as", methods=["POST"])
def save_draft_as():
    body = request.get_json(silent=True) or {}
    name = body.get("name")
    if not isinstance(name, str) or not name.strip():
        return jsonify({"error": "A draft name is required", "status": "validation_failed"}), 400
    if session.save_as(name) is None:
        return jsonify({"error": "Draft could not be saved", "status": "failed"}), 500
    return jsonify(session.to_dict()), 200


@app.route("/session/autosave", methods=["DELETE"])
def clear_autosave():
    session.clear_autosave()
    return jsonify({"status": "ok"}), 200


@app.route("/drafts", methods=["GET"])
def list_drafts():
    return jsonify({"drafts": [m.to_dict() for m in session.list_drafts()]}), 200


@app.route("/drafts/<draft_id>/load", methods=["POST"])
def load_draft(draft_id):
    if session.load(draft_id) is None:
        return jsonify({"error": "Draft not found", "status": "failed"}), 404
    return jsonify(session.to_dict()), 200


@app.route("/drafts/<draft_id>", methods=["PATCH"])
def rename_draft(draft_id):
    body = request.get_json(silent=True) or {}
    name = body.get("name")
    if not isinstance(name, str) or not name.strip():
        return jsonify({"error": "A draft name is required", "status": "validation_failed"}), 400
    if not session.rename(draft_id, name.strip()):
        return jsonify({"error": "Draft not found", "status": "failed"}), 404
    return jsonify({"drafts": [m.to_dict() for m in session.list_drafts()]}), 200


@app.route("/drafts/<draft_id>", methods=["DELETE"])
def delete_draft(draft_id):
    if not session.delete(draft_id):
        return jsonify({"error": "Draft not found", "status": "failed"}), 404
    return jsonify({"drafts": [m.to_dict() for m in session.list_drafts()]}), 200


@app.route("/session/export", methods=["GET"])
def export_draft():
    name = session.draft.name or "offer-draft"
    return _download(session.export_json(), f"{name}.json")


@app.route("/drafts/export", methods=["GET"])
def export_catalog():
    return _download(session.export_catalog_json(), "offer-drafts-backup.json")


@app.route("/session/import", methods=["POST"])
def import_draft():
    try:
        session.import_json(request.get_data(as_text=True))
    except ImportRejected as e:
        logger.error(f"Import rejected: {str(e)}")
        return jsonify({"error": str(e), "status": "validation_failed"}), 400
    return jsonify(session.to_dict()), 200


@app.route("/drafts/import", methods=["POST"])
def import_catalog():
    try:
        restored = session.restore_catalog_json(request.get_data(as_text=True))
    except ImportRejected as e:
        logger.error(f"Backup rejected: {str(e)}")
        return jsonify({"error": str(e), "status": "validation_failed"}), 400
    return jsonify({
        "restored": restored,
        "drafts": [m.to_dict() for m in session.list_drafts()]
    }), 200


@app.route("/session/document", methods=["GET"])
def generate_document():
    """Static offer summary for printing; changes nothing"""
    try:
        if request.args.get("format") == "text":
            response = make_response(session.render_document())
            response.headers['Content-Type'] = 'text/plain; charset=utf-8'
            return response
        return jsonify(session.generate_document().to_dict()), 200
    except Exception as e:
        logger.error(f"Document error: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "failed"
        }), 500


if __name__ == "__main__":
    app.run(host=settings.host, port=settings.port, debug=False)
