"""Variant aggregate: one product printed in one material at one volume."""

from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String

from storefront.catalogue.events import VariantStockAdjusted
from storefront.domain import storefront


@storefront.aggregate
class Variant:
    product_id: Identifier(required=True)
    material_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    stock: Integer(default=0, min_value=0)
    volume: Float(min_value=0.0)

    def adjust_stock(self, delta: int, reason: str | None = None) -> None:
        new_stock = (self.stock or 0) + delta
        if new_stock < 0:
            raise ValidationError({"stock": [f"Stock cannot go below zero (current {self.stock}, change {delta})"]})

        previous = self.stock
        self.stock = new_stock

        self.raise_(
            VariantStockAdjusted(
                variant_id=str(self.id),
                previous_stock=previous,
                new_stock=new_stock,
                reason=reason,
            )
        )
