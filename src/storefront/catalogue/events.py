"""Domain events for the catalogue aggregates."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new printable model was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    base_price: Float(required=True)


@storefront.event(part_of="Variant")
class VariantCreated:
    """A product became orderable in a material and volume."""

    __version__ = 1

    variant_id: Identifier(required=True)
    product_id: Identifier(required=True)
    material_id: Identifier(required=True)
    stock: Integer(required=True)


@storefront.event(part_of="Variant")
class VariantStockAdjusted:
    """The stock on hand for a variant was changed by an administrator."""

    __version__ = 1

    variant_id: Identifier(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    reason: String()
