"""
Key-value storage for user templates.

The recognizer only needs three operations from its store: get, set and
delete of a byte payload under a key. User templates are encoded as a JSON
list of {'label', 'points': [{'x', 'y'}, ...]} records.
"""

import json
import logging
import os
import re
import threading
from typing import Dict, Iterable, List, Optional

from ..config.settings import HandwriteConfig
from ..exceptions import TemplateReadError
from ..utils.stroke_utils import DataValidator, PathUtils

logger = logging.getLogger(__name__)


class MemoryTemplateStore:
    """Process-local store, mostly useful for tests and ephemeral sessions."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes):
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str):
        with self._lock:
            self._data.pop(key, None)


class FileTemplateStore:
    """Stores each key as a file inside a directory."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path_for(self, key: str) -> str:
        safe_name = re.sub(r'[^A-Za-z0-9._-]', '_', key)
        return os.path.join(self.directory, f"{safe_name}.json")

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        if not os.path.exists(path):
            return None
        with open(path, 'rb') as f:
            return f.read()

    def set(self, key: str, value: bytes):
        os.makedirs(self.directory, exist_ok=True)
        path = self._path_for(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, 'wb') as f:
            f.write(value)
        os.replace(tmp_path, path)

    def delete(self, key: str):
        path = self._path_for(key)
        if os.path.exists(path):
            os.remove(path)


def encode_templates(templates: Iterable) -> bytes:
    """Serialize templates to the stored JSON payload."""
    data = []
    for template in templates:
        data.append({
            'label': template.label,
            'points': PathUtils.convert_points_to_dict(template.points)
        })
    return json.dumps(data).encode('utf-8')


def decode_templates(payload: bytes,
                     num_points: int = HandwriteConfig.NUM_POINTS) -> List:
    """
    Deserialize a stored payload into templates.

    Args:
        payload: Bytes previously produced by encode_templates
        num_points: Point count every stored template must have

    Returns:
        Templates in stored order; individually invalid records are skipped

    Raises:
        TemplateReadError: If the payload is not a JSON list
    """
    from ..recognition.template_bank import DigitTemplate

    try:
        data = json.loads(payload.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise TemplateReadError(f"Could not decode stored templates: {e}") from e

    if not isinstance(data, list):
        raise TemplateReadError("Invalid template format, expected a list of templates")

    templates = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(f"Skipping template {i}: not a dictionary")
            continue

        label = item.get('label')
        if label not in HandwriteConfig.DIGITS:
            logger.warning(f"Skipping template {i}: invalid label {label!r}")
            continue

        points_data = item.get('points')
        if not isinstance(points_data, list) or len(points_data) != num_points:
            logger.warning(f"Skipping template {i} ('{label}'): expected {num_points} points")
            continue

        try:
            points = tuple(DataValidator.parse_point(p) for p in points_data)
        except ValueError as e:
            logger.warning(f"Skipping template {i} ('{label}'): {e}")
            continue

        templates.append(DigitTemplate(label, points))

    return templates
