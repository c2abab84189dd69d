"""FastAPI routes for catalogue administration, variant lookup and addresses."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import actor_fields, current_actor
from storefront.api.schemas import (
    AddressIdResponse,
    AdjustStockRequest,
    CreateMaterialRequest,
    CreateProductRequest,
    CreateVariantRequest,
    MaterialIdResponse,
    ProductIdResponse,
    RegisterAddressRequest,
    StatusResponse,
    VariantIdResponse,
    VariantResponse,
)
from storefront.catalogue.catalog import VariantCatalog
from storefront.catalogue.management import AdjustVariantStock, CreateMaterial, CreateProduct, CreateVariant
from storefront.catalogue.variant import Variant
from storefront.customer.address import RegisterAddress
from storefront.shared.authorization import Actor

# ---------------------------------------------------------------------------
# Catalogue Router
# ---------------------------------------------------------------------------
catalogue_router = APIRouter(tags=["catalogue"])


@catalogue_router.post("/materials", status_code=201, response_model=MaterialIdResponse)
async def create_material(body: CreateMaterialRequest, actor: Actor = Depends(current_actor)) -> MaterialIdResponse:
    command = CreateMaterial(**actor_fields(actor), **body.model_dump())
    return MaterialIdResponse(material_id=current_domain.process(command, asynchronous=False))


@catalogue_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest, actor: Actor = Depends(current_actor)) -> ProductIdResponse:
    command = CreateProduct(**actor_fields(actor), **body.model_dump())
    return ProductIdResponse(product_id=current_domain.process(command, asynchronous=False))


@catalogue_router.post("/variants", status_code=201, response_model=VariantIdResponse)
async def create_variant(body: CreateVariantRequest, actor: Actor = Depends(current_actor)) -> VariantIdResponse:
    command = CreateVariant(**actor_fields(actor), **body.model_dump())
    return VariantIdResponse(variant_id=current_domain.process(command, asynchronous=False))


@catalogue_router.patch("/variants/{variant_id}/stock", response_model=StatusResponse)
async def adjust_variant_stock(
    variant_id: str,
    body: AdjustStockRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    command = AdjustVariantStock(**actor_fields(actor), variant_id=variant_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="stock_adjusted")


@catalogue_router.get("/variants/{variant_id}", response_model=VariantResponse)
async def get_variant(variant_id: str) -> VariantResponse:
    """A variant with the price an order placed now would capture."""
    quote = VariantCatalog().quote(variant_id)
    variant = current_domain.repository_for(Variant).get(variant_id)
    return VariantResponse(
        id=str(variant.id),
        product_id=str(variant.product_id),
        material_id=str(variant.material_id),
        name=variant.name,
        stock=quote.stock,
        volume=variant.volume,
        price=quote.price,
    )


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.post("", status_code=201, response_model=AddressIdResponse)
async def register_address(body: RegisterAddressRequest, actor: Actor = Depends(current_actor)) -> AddressIdResponse:
    command = RegisterAddress(**actor_fields(actor), **body.model_dump())
    return AddressIdResponse(address_id=current_domain.process(command, asynchronous=False))
