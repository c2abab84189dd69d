"""Catalogue administration: materials, products, variants and stock.

All commands here are admin-only.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.events import ProductCreated, VariantCreated
from storefront.catalogue.material import Material
from storefront.catalogue.product import Product
from storefront.catalogue.variant import Variant
from storefront.domain import storefront
from storefront.shared.authorization import Actor, Authorizer


@storefront.command(part_of="Material")
class CreateMaterial:
    actor_id: Identifier(required=True)
    actor_role: String(max_length=20)
    name: String(required=True, max_length=100)
    color: String(max_length=50)
    price_factor: Float(min_value=0.0)
    price_per_mm3: Float(min_value=0.0)


@storefront.command(part_of="Product")
class CreateProduct:
    actor_id: Identifier(required=True)
    actor_role: String(max_length=20)
    name: String(required=True, max_length=255)
    description: Text()
    base_price: Float(required=True, min_value=0.0)
    print_file_volume: Float(min_value=0.0)


@storefront.command(part_of="Variant")
class CreateVariant:
    actor_id: Identifier(required=True)
    actor_role: String(max_length=20)
    product_id: Identifier(required=True)
    material_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    stock: Integer(default=0, min_value=0)
    volume: Float(min_value=0.0)


@storefront.command(part_of="Variant")
class AdjustVariantStock:
    actor_id: Identifier(required=True)
    actor_role: String(max_length=20)
    variant_id: Identifier(required=True)
    delta: Integer(required=True)
    reason: String(max_length=255)


@storefront.command_handler(part_of=Material)
class MaterialCommandHandler:
    @handle(CreateMaterial)
    def create_material(self, command):
        Authorizer.assert_admin(Actor.from_command(command))

        kwargs = {"name": command.name, "color": command.color, "price_per_mm3": command.price_per_mm3}
        if command.price_factor is not None:
            kwargs["price_factor"] = command.price_factor

        material = Material(**kwargs)
        current_domain.repository_for(Material).add(material)
        return str(material.id)


@storefront.command_handler(part_of=Product)
class ProductCommandHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        Authorizer.assert_admin(Actor.from_command(command))

        product = Product(
            name=command.name,
            description=command.description,
            base_price=command.base_price,
            print_file_volume=command.print_file_volume,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                name=product.name,
                base_price=product.base_price,
            )
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)


@storefront.command_handler(part_of=Variant)
class VariantCommandHandler:
    @handle(CreateVariant)
    def create_variant(self, command):
        Authorizer.assert_admin(Actor.from_command(command))

        # Both references must resolve; ObjectNotFoundError surfaces as a 404
        current_domain.repository_for(Product).get(command.product_id)
        current_domain.repository_for(Material).get(command.material_id)

        variant = Variant(
            product_id=command.product_id,
            material_id=command.material_id,
            name=command.name,
            stock=command.stock or 0,
            volume=command.volume,
        )
        variant.raise_(
            VariantCreated(
                variant_id=str(variant.id),
                product_id=str(variant.product_id),
                material_id=str(variant.material_id),
                stock=variant.stock,
            )
        )
        current_domain.repository_for(Variant).add(variant)
        return str(variant.id)

    @handle(AdjustVariantStock)
    def adjust_stock(self, command):
        Authorizer.assert_admin(Actor.from_command(command))

        repo = current_domain.repository_for(Variant)
        variant = repo.get(command.variant_id)
        variant.adjust_stock(command.delta, reason=command.reason)
        repo.add(variant)
