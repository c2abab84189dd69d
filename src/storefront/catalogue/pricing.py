"""Variant pricing from material and print volume.

A product carries a base price for its reference print file. A variant is the
same model printed at a different volume in a given material, so its price is
the base price scaled by the volume ratio and the material's price factor.
Products without a base price are priced purely per cubic millimetre.

Every call site (variant lookup, cart listing, order placement, order-item changes) quotes
through ``variant_price`` so a customer never sees two prices for one variant.
"""


def variant_price(
    base_price: float,
    variant_volume: float | None = None,
    print_file_volume: float | None = None,
    price_factor: float | None = None,
    price_per_mm3: float | None = None,
) -> float:
    """Return the unit price of a variant.

    Missing or zero optional inputs count as absent: the volume ratio and the
    price factor then fall back to 1.0.
    """
    base_price = base_price or 0.0

    if base_price == 0 and price_per_mm3 and variant_volume:
        return price_per_mm3 * variant_volume

    ratio = 1.0
    if variant_volume and print_file_volume:
        ratio = variant_volume / print_file_volume

    return base_price * ratio * (price_factor or 1.0)
