"""Variant lookup used by everything that needs a live price."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.material import Material
from storefront.catalogue.pricing import variant_price
from storefront.catalogue.product import Product
from storefront.catalogue.variant import Variant


@dataclass(frozen=True)
class VariantQuote:
    variant_id: str
    price: float
    stock: int

    def ensure_in_stock(self, quantity: int) -> None:
        """Reject a request for more units than the variant has on hand."""
        if quantity > self.stock:
            raise ValidationError(
                {"quantity": [f"Requested quantity {quantity} exceeds available stock {self.stock}"]}
            )


class VariantCatalog:
    """Resolve a variant to its current price and stock."""

    def quote(self, variant_id) -> VariantQuote:
        try:
            variant = current_domain.repository_for(Variant).get(variant_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError(f"Variant {variant_id} not found") from None

        product = current_domain.repository_for(Product).get(variant.product_id)
        material = current_domain.repository_for(Material).get(variant.material_id)

        price = variant_price(
            base_price=product.base_price,
            variant_volume=variant.volume,
            print_file_volume=product.print_file_volume,
            price_factor=material.price_factor,
            price_per_mm3=material.price_per_mm3,
        )
        return VariantQuote(variant_id=str(variant.id), price=price, stock=variant.stock or 0)
