"""Streaming reader for dump files.

A dump file is one root element whose children are self-closing rows
carrying all their data in attributes:

    <posts>
      <row Id="1" PostTypeId="1" Score="10" ... />
      ...
    </posts>

Rows are yielded one at a time and discarded immediately, so files of any
size are read in constant memory.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import IO, Iterator, TypeVar

from stackdump.db.codec import ATTRIBUTE_PREFIX, DecodableRecord
from stackdump.db.records import RecordDecodeError


R = TypeVar("R", bound=DecodableRecord)

AttributePairs = list[tuple[str, str]]


def iter_attribute_records(source: IO[bytes] | str | Path) -> Iterator[AttributePairs]:
    """Yield each row as ``[("@Name", raw_value), ...]`` in document order.

    Raises:
        RecordDecodeError: If the document is not well-formed
    """
    depth = 0
    root: ET.Element | None = None
    try:
        for event, element in ET.iterparse(source, events=("start", "end")):
            if event == "start":
                depth += 1
                if depth == 1:
                    root = element
                continue

            depth -= 1
            if depth == 1:
                yield [(ATTRIBUTE_PREFIX + key, value) for key, value in element.attrib.items()]
                if root is not None:
                    root.clear()
    except ET.ParseError as e:
        raise RecordDecodeError(f"malformed document: {e}") from e


def read_records(path: Path, record_type: type[R]) -> Iterator[R]:
    """Yield typed records from a dump file."""
    with open(path, "rb") as f:
        for pairs in iter_attribute_records(f):
            yield record_type.from_fields(pairs)
