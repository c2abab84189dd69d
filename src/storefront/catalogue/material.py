from protean.fields import Float, String

from storefront.domain import storefront


@storefront.aggregate
class Material:
    """A printing material (PLA, resin, ...) and how it scales variant prices."""

    name: String(required=True, max_length=100)
    color: String(max_length=50)
    price_factor: Float(default=1.0, min_value=0.0)
    price_per_mm3: Float(min_value=0.0)
