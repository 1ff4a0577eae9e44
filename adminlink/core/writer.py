"""Streaming GeoJSON output with a running bounding box."""
import json
import os
from pathlib import Path
from typing import Optional

from adminlink.core.models import BoundingBox, ResolvedRecord
from adminlink.utils.logging import log_structured

_HEADER = '{"type":"FeatureCollection","features":[\n'


class StreamingFeatureWriter:
    """
    Writes resolved records one at a time into a FeatureCollection.

    Records go to ``<destination>.partial`` and the finished document is moved
    onto ``destination`` by ``close()``; the destination is only ever a
    complete, parseable document. The dataset ``bbox`` is the union of all
    appended record boxes and is omitted when no record had a finite box.

    Usage:
        with StreamingFeatureWriter(path) as writer:
            writer.append(record)
    """

    def __init__(self, destination: Path):
        self.destination = Path(destination)
        self.partial_path = self.destination.with_name(self.destination.name + ".partial")
        self.bbox = BoundingBox.empty()
        self.count = 0
        self._handle = None

    def open(self) -> "StreamingFeatureWriter":
        if self._handle is not None:
            raise RuntimeError(f"Writer for {self.destination} is already open")
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        self._handle = open(self.partial_path, "w", encoding="utf-8")
        self._handle.write(_HEADER)
        self.bbox = BoundingBox.empty()
        self.count = 0
        return self

    def append(self, record: ResolvedRecord) -> None:
        """Serialize one record and widen the running bounding box."""
        if self._handle is None:
            raise RuntimeError("append() called on a writer that is not open")
        if self.count:
            self._handle.write(",\n")
        self._handle.write(json.dumps(record.to_geojson(), ensure_ascii=False, allow_nan=False))
        self.count += 1
        self.bbox = self.bbox.union(record.bbox)

    def close(self) -> Optional[BoundingBox]:
        """
        Finish the document and move it onto the destination.

        Returns:
            The dataset bounding box, or None when it was never finite
        """
        if self._handle is None:
            raise RuntimeError("close() called on a writer that is not open")
        bbox = self.bbox if self.bbox.is_finite() else None
        self._handle.write("\n]")
        if bbox is not None:
            self._handle.write(',"bbox":' + json.dumps(bbox.as_list()))
        self._handle.write("}")
        self._handle.close()
        self._handle = None
        os.replace(self.partial_path, self.destination)

        log_structured(
            "info",
            f"Output written to {self.destination}",
            path=str(self.destination),
            features=self.count,
            bbox=bbox.as_list() if bbox is not None else None,
        )
        return bbox

    def abort(self) -> None:
        """Drop the partial document; the destination is left untouched."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        if self.partial_path.exists():
            self.partial_path.unlink()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.abort()
            return False
        self.close()
        return False
