from datetime import datetime

from protean.fields import DateTime, Float, String, Text

from storefront.domain import storefront


@storefront.aggregate
class Product:
    """A printable model.

    ``print_file_volume`` is the volume of the reference print file that
    ``base_price`` was set for; variants scale from it.
    """

    name: String(required=True, max_length=255)
    description: Text()
    base_price: Float(required=True, min_value=0.0)
    print_file_volume: Float(min_value=0.0)
    created_at: DateTime(default=datetime.now)
