"""
Table Discovery and Throughput Sampling

- TableEnumerator: pages through ListTables
- ThroughputSampler: derives a per-request scan Limit from a table's
  provisioned read capacity
"""

import logging
import math
from typing import Any, Dict, List, Optional

from ..core import DynamoDBGateway

logger = logging.getLogger(__name__)


class TableEnumerator:
    """Lists every table name in the account/region."""

    def __init__(self, gateway: DynamoDBGateway):
        self.gateway = gateway

    def list_tables(self) -> List[str]:
        """
        Return all table names in service order.

        DynamoDB Operation: ListTables, following LastEvaluatedTableName

        Raises:
            ServiceError: If any page fails; names gathered so far are discarded
        """
        tables: List[str] = []
        last_table: Optional[str] = None
        pages = 0

        while True:
            response = self.gateway.list_tables(last_table)
            tables.extend(response.get('TableNames', []))
            pages += 1
            last_table = response.get('LastEvaluatedTableName')
            if not last_table:
                break

        logger.debug(f"Listed {len(tables)} tables in {pages} pages")
        return tables


def sample_limit(read_capacity_units: int, fraction: float) -> int:
    """Scan page size for a fraction of provisioned read capacity, never below 1.

    >>> sample_limit(1000, 0.25)
    250
    >>> sample_limit(3, 0.25)
    1
    """
    return max(math.floor(read_capacity_units * fraction), 1)


class ThroughputSampler:
    """
    Derives the scan Limit for a table from its provisioned read capacity.

    Capacity is read once, when the table's export starts. The limit caps
    items per page, so it approximates rather than guarantees the consumed
    fraction of capacity.
    """

    def __init__(
        self,
        gateway: DynamoDBGateway,
        fraction: float = 0.25,
        read_capacity_override: Optional[int] = None
    ):
        """
        Args:
            gateway: Gateway used for DescribeTable
            fraction: Share of read capacity to consume, in (0, 1]
            read_capacity_override: Capacity assumed for tables reporting none
        """
        self.gateway = gateway
        self.fraction = fraction
        self.read_capacity_override = read_capacity_override

    def read_capacity(self, table_description: Dict[str, Any]) -> int:
        """Provisioned read capacity units of a described table."""
        capacity = table_description.get('ProvisionedThroughput', {}).get('ReadCapacityUnits', 0) or 0
        if capacity == 0 and self.read_capacity_override:
            logger.debug(
                f"Table {table_description.get('TableName')} reports no read capacity; "
                f"using override of {self.read_capacity_override}"
            )
            return self.read_capacity_override
        return capacity

    def limit_for_description(self, table_description: Dict[str, Any]) -> int:
        return sample_limit(self.read_capacity(table_description), self.fraction)

    def limit_for(self, table_name: str) -> int:
        """
        Describe the table and return its scan Limit.

        Raises:
            ServiceError: If DescribeTable fails
        """
        limit = self.limit_for_description(self.gateway.describe_table(table_name))
        logger.debug(f"Scan limit for {table_name}: {limit} items per page")
        return limit
