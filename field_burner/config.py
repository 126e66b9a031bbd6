"""
Settings for the field burner, read once from the environment.

* ``PORT`` – port the Flask server binds to (default ``5000``).
* ``LOG_LEVEL`` – root logging level (default ``INFO``).
* ``AUDIT_LOG_PATH`` – JSON-lines file audit records are appended to.  When
  unset, records are kept in memory for the lifetime of the process.
* ``MAX_UPLOAD_MB`` – upper bound on a request body (default ``50``).
* ``TEXT_FONT_NAME`` / ``TEXT_FONT_SIZE`` – standard font used for text and
  date fields (default Helvetica at 10pt).
"""

import os
from pathlib import Path
from typing import Optional

PORT = int(os.environ.get('PORT', '5000'))
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

_audit_log_path = os.environ.get('AUDIT_LOG_PATH')
AUDIT_LOG_PATH: Optional[Path] = Path(_audit_log_path) if _audit_log_path else None

MAX_UPLOAD_MB = int(os.environ.get('MAX_UPLOAD_MB', '50'))

TEXT_FONT_NAME = os.environ.get('TEXT_FONT_NAME', 'Helvetica')
TEXT_FONT_SIZE = float(os.environ.get('TEXT_FONT_SIZE', '10'))
