"""
callbridge/stores/xml_store.py
Call log read from an SMS Backup & Restore export directory (calls-*.xml).
"""

import logging
from pathlib import Path
from typing import List

from callbridge.models.record import CallRecord
from callbridge.parsers.call_parser import parse_call_directory
from callbridge.stores.base import CallLogStore

logger = logging.getLogger(__name__)


class XmlBackupCallLogStore(CallLogStore):

    name = 'xml'

    def __init__(self, xml_dir: Path):
        self.xml_dir = Path(xml_dir)

    def query_since(self, timestamp_ms: int) -> List[CallRecord]:
        records = parse_call_directory(self.xml_dir, since_ms=timestamp_ms)
        # stable: equal timestamps keep file order
        records.sort(key=lambda r: r.timestamp_ms, reverse=True)
        logger.debug(f"{len(records)} calls since {timestamp_ms} from {self.xml_dir}")
        return records
