"""
callbridge/parsers/call_parser.py
Parses SMS Backup & Restore call log XML files (calls-*.xml).

Streaming ET.iterparse, no record count cap. Encoding is detected by BOM:
UTF-8-BOM, UTF-16-LE/BE, else UTF-8. Unreadable or malformed files raise
so the caller can treat the whole store as failed; a single bad <call>
element is skipped.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, List
import logging
import re
import io

from callbridge.models.record import CallRecord

logger = logging.getLogger(__name__)

BOM_UTF8 = b'\xef\xbb\xbf'
BOM_UTF16_LE = b'\xff\xfe'
BOM_UTF16_BE = b'\xfe\xff'

CALL_FILE_GLOB = 'calls-*.xml'


def _read_xml_text(path: Path) -> str:
    raw = path.read_bytes()
    if raw.startswith(BOM_UTF8):
        return raw[len(BOM_UTF8):].decode('utf-8', errors='replace')
    if raw.startswith(BOM_UTF16_LE):
        return raw[len(BOM_UTF16_LE):].decode('utf-16-le', errors='replace')
    if raw.startswith(BOM_UTF16_BE):
        return raw[len(BOM_UTF16_BE):].decode('utf-16-be', errors='replace')
    try:
        return raw.decode('utf-8', errors='strict')
    except UnicodeDecodeError:
        return raw.decode('utf-8', errors='replace')


def _strip_stylesheet(content: str) -> str:
    return re.sub(r'<\?xml-stylesheet[^?]*\?>', '', content)


def iter_call_file(path: Path, since_ms: int = 0) -> Iterator[CallRecord]:
    """
    Yield calls from one backup file in file order, keeping only
    those with date >= since_ms.
    Raises OSError / ET.ParseError when the file itself is unusable.
    """
    try:
        content = _strip_stylesheet(_read_xml_text(path))
    except OSError as e:
        logger.error(f"File read error {path.name}: {e}")
        raise

    stream = io.StringIO(content)
    try:
        for _event, el in ET.iterparse(stream, events=('end',)):
            if el.tag.lower() != 'call':
                continue
            try:
                rec = _element_to_record(el)
            except (TypeError, ValueError) as e:
                logger.debug(f"Skipped call element: {e}")
                continue
            finally:
                el.clear()
            if rec.timestamp_ms >= since_ms:
                yield rec
    except ET.ParseError as e:
        logger.error(f"XML parse error in {path.name}: {e}")
        raise


def parse_call_file(path: Path, since_ms: int = 0) -> List[CallRecord]:
    records = list(iter_call_file(path, since_ms))
    logger.info(f"Parsed {len(records)} calls from {path.name}")
    return records


def parse_call_directory(directory: Path, since_ms: int = 0) -> List[CallRecord]:
    """All calls from every calls-*.xml in directory, files in name order."""
    if not directory.is_dir():
        raise FileNotFoundError(f"Call backup directory not found: {directory}")

    all_records: List[CallRecord] = []
    for path in sorted(directory.glob(CALL_FILE_GLOB)):
        all_records.extend(parse_call_file(path, since_ms))
    return all_records


def _element_to_record(el: ET.Element) -> CallRecord:
    return CallRecord(
        number       = el.get('number', '') or '',
        timestamp_ms = int(el.get('date', '0') or '0'),
        call_type    = int(el.get('type', '1') or '1'),
        duration_sec = int(el.get('duration', '0') or '0'),
    )
