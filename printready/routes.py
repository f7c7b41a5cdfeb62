"""
Flask routes for the Print-Ready Output Generator
Thin JSON boundary around the print job runner
"""

import io
import uuid

from flask import Blueprint, current_app, jsonify, request, send_file
from loguru import logger

from .errors import PrintReadyError, ValidationError, DecodeError, CapacityError
from .schemas import describe_request, parse_generate_request


bp = Blueprint('main', __name__)


def get_job_runner():
    """The process-wide runner created by the app factory."""
    return current_app.extensions['printready_runner']


def error_response(error: PrintReadyError):
    return jsonify(error.to_dict()), error.status_code


@bp.route('/api/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'message': 'Server is running'})


@bp.route('/api/generate-pdf', methods=['POST'])
def generate_pdf():
    """Generate a print-ready PDF from a GenerateRequest JSON body"""
    request_id = uuid.uuid4().hex[:8]

    # Outside the try so an oversized body still reaches the 413 handler
    payload = request.get_json(silent=True)

    try:
        generate_request = parse_generate_request(payload)
        job = generate_request.to_print_job()

        logger.info(f"Request {request_id} accepted: {describe_request(generate_request)}")

        document = get_job_runner().run(job)

    except (ValidationError, DecodeError) as e:
        logger.warning(f"Request {request_id} rejected: {e}")
        return error_response(e)

    except CapacityError as e:
        logger.warning(f"Request {request_id} refused, server busy: {e}")
        return error_response(e)

    except PrintReadyError as e:
        logger.error(f"Request {request_id} failed: {e}")
        return error_response(e)

    except Exception as e:
        logger.exception(f"Unexpected error in request {request_id}: {e}")
        return jsonify({
            'error_type': 'InternalError',
            'message': 'Failed to generate print file',
            'details': {'request_id': request_id},
            'suggestions': ['Contact support if the problem persists']
        }), 500

    download_name = generate_request.download_name(current_app.config.get('DEFAULT_FILENAME', 'print-ready.pdf'))
    logger.info(f"Request {request_id} complete: {download_name} ({len(document)} bytes)")

    return send_file(
        io.BytesIO(document),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=download_name
    )


@bp.app_errorhandler(413)
def request_too_large(error):
    limit = current_app.config.get('MAX_CONTENT_LENGTH')
    error = ValidationError(
        "Request body is too large",
        details={'max_content_length': limit},
        suggestions=["Upload a smaller image or compress it before sending"]
    )
    return jsonify(error.to_dict()), 413
