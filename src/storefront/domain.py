"""Storefront bounded context for pricing, ordering and fulfilment of printed goods.

Orders are standard CQRS aggregates. Every command handler runs inside a
Protean unit of work, so an item mutation and the recomputed order totals,
or a payment confirmation and the order promotion, commit together.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="storefront")

logger = get_logger(__name__)

storefront = Domain(name="storefront")
