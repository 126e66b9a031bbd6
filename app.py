"""
Flask server for the PDF field burner.

This application exposes two endpoints:

* ``/api/burn-fields`` – accepts a multipart upload with a ``pdf`` file and a
  ``fields`` JSON array of placements, burns the fields into the document and
  streams back the signed PDF.  The SHA-256 fingerprints of the original and
  signed documents are returned in the ``X-Original-Hash`` and
  ``X-Signed-Hash`` response headers.
* ``/health`` – liveness probe.

Placement, rendering and auditing all live in :mod:`field_burner`; this module
only translates HTTP to and from it.

Before running this script, install the required dependencies:

```
pip install Flask PyPDF2 reportlab Pillow
```
"""

import json
import logging
import os
from io import BytesIO
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request, send_file
from werkzeug.utils import secure_filename

from field_burner import config
from field_burner.audit import AuditSink, JsonlAuditSink, MemoryAuditSink
from field_burner.contracts import FieldType, parse_placements
from field_burner.dates import to_display_date
from field_burner.engine import FieldInjectionEngine
from field_burner.errors import DocumentLoadError, DocumentSerializationError, InvalidPlacementError

logger = logging.getLogger(__name__)

# Data URLs for drawn signatures travel inside the ``fields`` form value.
MAX_FORM_MEMORY_BYTES = 10 * 1024 * 1024


def default_audit_sink() -> AuditSink:
    if config.AUDIT_LOG_PATH is not None:
        return JsonlAuditSink(config.AUDIT_LOG_PATH)
    logger.warning('AUDIT_LOG_PATH is not set; audit records are kept in memory only')
    return MemoryAuditSink()


def _truthy(value: Optional[str]) -> bool:
    return str(value).lower() in ['1', 'true', 'on', 'yes']


def _display_dates(items: Any) -> Any:
    """Convert ``YYYY-MM-DD`` date values to the burned ``DD/MM/YYYY`` format."""
    if not isinstance(items, list):
        return items
    converted: List[Any] = []
    for item in items:
        if isinstance(item, dict) and item.get('type') == FieldType.DATE.value:
            item = dict(item, value=to_display_date(item.get('value')))
        converted.append(item)
    return converted


def create_app(engine: Optional[FieldInjectionEngine] = None) -> Flask:
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_UPLOAD_MB * 1024 * 1024
    app.config['MAX_FORM_MEMORY_SIZE'] = MAX_FORM_MEMORY_BYTES
    if engine is None:
        engine = FieldInjectionEngine(audit_sink=default_audit_sink())

    @app.route('/health')
    def health() -> Any:
        return jsonify({'status': 'ok'})

    @app.route('/api/burn-fields', methods=['POST'])
    def burn_fields() -> Any:
        """
        Burn the submitted placements into the uploaded PDF.

        The multipart body must contain a ``pdf`` file and a ``fields`` JSON
        array.  Set ``normalizeDates`` to convert ``YYYY-MM-DD`` date values
        on the server instead of in the client.
        """
        uploaded = request.files.get('pdf')
        if not uploaded or uploaded.filename == '':
            return jsonify({'error': 'No PDF file uploaded.'}), 400
        fields_json = request.form.get('fields')
        if not fields_json:
            return jsonify({'error': 'Missing fields payload.'}), 400
        try:
            submitted = json.loads(fields_json)
        except ValueError as e:
            return jsonify({'error': f'Invalid fields payload: {e}'}), 400
        payload = submitted
        if _truthy(request.form.get('normalizeDates')):
            payload = _display_dates(payload)
        try:
            placements = parse_placements(payload)
        except InvalidPlacementError as e:
            return jsonify({'error': str(e)}), 400

        original_name = secure_filename(uploaded.filename) or 'document.pdf'
        try:
            result = engine.process(
                uploaded.read(),
                placements,
                document_name=original_name,
                submitted_fields=submitted,
            )
        except DocumentLoadError as e:
            logger.warning('Rejected %s: %s', original_name, e)
            return jsonify({'error': str(e)}), 422
        except DocumentSerializationError as e:
            logger.error('Failed to serialize %s: %s', original_name, e)
            return jsonify({'error': str(e)}), 500

        stem, _ = os.path.splitext(original_name)
        response = send_file(
            BytesIO(result.output_bytes),
            mimetype='application/pdf',
            as_attachment=True,
            download_name=f'signed-{stem}.pdf',
        )
        headers: Dict[str, str] = {
            'X-Original-Hash': result.original_hash,
            'X-Signed-Hash': result.signed_hash,
            'X-Fields-Skipped': str(len(result.summary.skipped)),
        }
        response.headers.update(headers)
        return response

    return app


def main() -> None:
    """Entry point for running the Flask app."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app = create_app()
    app.run(host='0.0.0.0', port=config.PORT, debug=False)


if __name__ == '__main__':
    main()
