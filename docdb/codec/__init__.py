"""
Codec module for docdb.

This module provides the two export/import byte formats:
- JsonCodec: JSON arrays/objects of {id, data}
- SqlTextCodec: CREATE TABLE / INSERT INTO statements, one per line

Both work at collection scope and whole-store scope.

How to change safely:
    - Register new codecs in CODECS
    - Keep filenames <collection>.<ext> and database.<ext>
"""

from __future__ import annotations

from typing import Dict, Union

from .base import (
    BatchMode,
    Codec,
    CollectionBatch,
    ExportFormat,
    ExportPayload,
    ImportSummary,
)
from .json_codec import JsonCodec
from .sql_codec import SqlTextCodec

CODECS: Dict[ExportFormat, Codec] = {
    ExportFormat.JSON: JsonCodec(),
    ExportFormat.SQL: SqlTextCodec(),
}


def get_codec(fmt: Union[ExportFormat, str]) -> Codec:
    """Get the codec for a format.

    Raises:
        ValueError: If the format is unknown
    """
    return CODECS[ExportFormat(fmt)]


__all__ = [
    "BatchMode",
    "Codec",
    "CollectionBatch",
    "ExportFormat",
    "ExportPayload",
    "ImportSummary",
    "JsonCodec",
    "SqlTextCodec",
    "CODECS",
    "get_codec",
]
