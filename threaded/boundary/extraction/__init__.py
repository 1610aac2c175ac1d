"""
Document-extraction backends.

Exports:
  - DatalabClient: Files (pdf, docx, xlsx, ...) to markdown
  - JinaReaderClient: Public URLs to markdown
"""

from threaded.boundary.extraction.datalab_client import DatalabClient
from threaded.boundary.extraction.jina_client import JinaReaderClient

__all__ = ["DatalabClient", "JinaReaderClient"]
