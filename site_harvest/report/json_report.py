# site_harvest/report/json_report.py

"""
JSON output of a crawl session.

:func:`render_json` writes a combined document to a file;
:class:`JsonFileStorage` is the file-based storage collaborator of the engine.
"""
import json
import uuid
from pathlib import Path

from site_harvest.aggregator import CombinedDocument
from site_harvest.collaborators import StoredDocument
from site_harvest.utils import extract_host

_MISSING_TITLE = "No title found"


def render_json(document: CombinedDocument, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Save *document* as JSON at *output_path*.

    :param document: combined document of a crawl session
    :param output_path: path of the JSON file
    :param pretty: indent the output
    :return: Path of the written file

    Example:
    ```python
    from site_harvest.report.json_report import render_json
    path = render_json(document, 'reports/example.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document.json(pretty=pretty), encoding='utf-8')
    return output


class JsonFileStorage:
    """Stores each document as ``<directory>/<document_id>.json``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def save(self, document: CombinedDocument, owner_id: str) -> StoredDocument:
        self.directory.mkdir(parents=True, exist_ok=True)
        document_id = uuid.uuid4().hex
        payload = {'document_id': document_id, 'owner_id': owner_id, 'document': document.as_dict()}
        path = self.directory / f'{document_id}.json'
        with path.open('w', encoding='utf-8') as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        return StoredDocument(document_id=document_id, display_name=self._display_name(document))

    @staticmethod
    def _display_name(document: CombinedDocument) -> str:
        if document.title and document.title != _MISSING_TITLE:
            return document.title
        return extract_host(document.url) or document.url
