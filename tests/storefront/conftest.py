import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        from storefront.config import reset_pricing_policy
        from storefront.payment.gateway import reset_gateway

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()

        reset_gateway()
        reset_pricing_policy()


# ---------------------------------------------------------------------------
# Shared catalogue and customer data
# ---------------------------------------------------------------------------
@pytest.fixture
def material():
    from protean import current_domain

    from storefront.catalogue.material import Material

    material = Material(name="PLA", color="white", price_factor=1.0)
    current_domain.repository_for(Material).add(material)
    return material


@pytest.fixture
def product():
    from protean import current_domain

    from storefront.catalogue.product import Product

    product = Product(name="Desk Vase", base_price=20.0)
    current_domain.repository_for(Product).add(product)
    return product


@pytest.fixture
def variant(product, material):
    """A variant priced at 20 with 10 units in stock."""
    from protean import current_domain

    from storefront.catalogue.variant import Variant

    variant = Variant(product_id=product.id, material_id=material.id, name="Small", stock=10)
    current_domain.repository_for(Variant).add(variant)
    return variant


@pytest.fixture
def address():
    """A shipping address belonging to cust-001."""
    from protean import current_domain

    from storefront.customer.address import Address

    address = Address(user_id="cust-001", recipient="Mai Tran", line1="12 Ly Thuong Kiet", city="Hanoi")
    current_domain.repository_for(Address).add(address)
    return address


@pytest.fixture
def sale10():
    """SALE10: ten percent off, valid until tomorrow."""
    from datetime import UTC, datetime, timedelta

    from protean import current_domain

    from storefront.voucher.voucher import Voucher

    voucher = Voucher(code="SALE10", discount=0.1, expires_at=datetime.now(UTC) + timedelta(days=1))
    current_domain.repository_for(Voucher).add(voucher)
    return voucher
