"""
Global state of the document service
Shared resources accessible across the API routers
"""
from typing import Optional

from evalmate.core.document import DocumentFile

# Document file, opened at startup
DOCUMENT: Optional[DocumentFile] = None
