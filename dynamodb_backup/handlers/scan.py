"""
Paginated Table Scan

ScanPaginator walks a whole table one Scan page at a time, following
LastEvaluatedKey. Each non-empty page is handed to the caller before the
next request is issued, so memory stays bounded to one page and a caller
that blocks inside on_page (e.g. on a full StreamSink) throttles the scan.

The walk is a plain loop: stack depth does not grow with the number of
pages.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..core import DynamoDBGateway
from ..exceptions import DynamoDBBackupError

logger = logging.getLogger(__name__)

PageCallback = Callable[[List[Dict[str, Any]]], None]
DoneCallback = Callable[[Optional[Exception]], None]


class ScanState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    DELIVERING = "delivering"
    COMPLETE = "complete"
    FAILED = "failed"


class ScanPaginator:
    """Full-table scan driver for one table."""

    def __init__(self, gateway: DynamoDBGateway):
        self.gateway = gateway
        self.state = ScanState.IDLE
        self.pages_delivered = 0
        self.items_delivered = 0

    def scan(
        self,
        table_name: str,
        page_limit: int,
        on_page: PageCallback,
        on_done: DoneCallback
    ) -> None:
        """
        Scan table_name to the end.

        DynamoDB Operation: Scan with Limit, following ExclusiveStartKey

        Args:
            table_name: Table to scan
            page_limit: Limit passed with every request
            on_page: Called synchronously with each non-empty page of raw items
            on_done: Called exactly once, with None on completion or the error
                that stopped the scan. Pages already delivered are not retracted.

        Errors raised by the gateway or by on_page (format errors, a closed
        sink) stop the scan and are passed to on_done; nothing is retried.
        """
        start_key: Optional[Dict[str, Any]] = None

        try:
            while True:
                self.state = ScanState.REQUESTING
                response = self.gateway.scan(table_name, page_limit, start_key)

                items = response.get('Items', [])
                if items:
                    self.state = ScanState.DELIVERING
                    on_page(items)
                    self.pages_delivered += 1
                    self.items_delivered += len(items)
                    logger.debug(
                        f"Scan of {table_name}: page {self.pages_delivered} with {len(items)} items "
                        f"({self.items_delivered} total)"
                    )

                start_key = response.get('LastEvaluatedKey')
                if not start_key:
                    break
        except DynamoDBBackupError as e:
            self.state = ScanState.FAILED
            logger.error(f"Scan of {table_name} failed after {self.pages_delivered} pages: {e}")
            on_done(e)
            return

        self.state = ScanState.COMPLETE
        logger.debug(f"Scan of {table_name} complete: {self.items_delivered} items")
        on_done(None)
