"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderLineSchema(BaseModel):
    variant_id: str
    quantity: int = Field(ge=1)


class PaymentDetailsSchema(BaseModel):
    method: str | None = None
    status: str | None = None
    amount: float | None = Field(default=None, ge=0)
    transaction_id: str | None = None


class ShipmentDetailsSchema(BaseModel):
    carrier: str | None = None
    tracking_no: str | None = None
    status: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    address_id: str
    items: list[OrderLineSchema]
    user_id: str | None = None
    voucher_code: str | None = None
    payment: PaymentDetailsSchema | None = None
    shipment: ShipmentDetailsSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "address_id": "addr-001",
                    "items": [{"variant_id": "var-001", "quantity": 2}],
                    "voucher_code": "SALE10",
                }
            ]
        }
    }


class UpdateOrderRequest(BaseModel):
    """Partial update. Sending ``"voucher_code": null`` removes the order's voucher."""

    address_id: str | None = None
    status: str | None = None
    items: list[OrderLineSchema] | None = None
    voucher_code: str | None = None
    payment: PaymentDetailsSchema | None = None
    shipment: ShipmentDetailsSchema | None = None


class AddOrderItemRequest(BaseModel):
    order_id: str
    variant_id: str
    quantity: int = Field(ge=1)


class UpdateOrderItemRequest(BaseModel):
    variant_id: str | None = None
    quantity: int | None = Field(default=None, ge=1)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    variant_id: str
    quantity: int = Field(ge=1)
    note: str | None = None


class UpdateCartItemRequest(BaseModel):
    quantity: int | None = Field(default=None, ge=1)
    note: str | None = None


# ---------------------------------------------------------------------------
# Payment / Shipment Request Schemas
# ---------------------------------------------------------------------------
class RecordPaymentRequest(BaseModel):
    order_id: str
    method: str
    status: str | None = None
    amount: float | None = Field(default=None, ge=0)
    transaction_id: str | None = None


class UpdatePaymentRequest(PaymentDetailsSchema):
    pass


class RecordShipmentRequest(ShipmentDetailsSchema):
    order_id: str


class UpdateShipmentRequest(ShipmentDetailsSchema):
    pass


# ---------------------------------------------------------------------------
# Voucher / Catalogue / Address Request Schemas
# ---------------------------------------------------------------------------
class IssueVoucherRequest(BaseModel):
    code: str
    discount: float
    expires_at: datetime
    is_active: bool = True


class UpdateVoucherRequest(BaseModel):
    code: str | None = None
    discount: float | None = None
    expires_at: datetime | None = None
    is_active: bool | None = None


class CreateMaterialRequest(BaseModel):
    name: str
    color: str | None = None
    price_factor: float | None = Field(default=None, ge=0)
    price_per_mm3: float | None = Field(default=None, ge=0)


class CreateProductRequest(BaseModel):
    name: str
    description: str | None = None
    base_price: float = Field(ge=0)
    print_file_volume: float | None = Field(default=None, ge=0)


class CreateVariantRequest(BaseModel):
    product_id: str
    material_id: str
    name: str
    stock: int = Field(default=0, ge=0)
    volume: float | None = Field(default=None, ge=0)


class AdjustStockRequest(BaseModel):
    delta: int
    reason: str | None = None


class RegisterAddressRequest(BaseModel):
    recipient: str
    line1: str
    city: str
    phone: str | None = None
    country: str | None = None
    is_default: bool = False
    user_id: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    id: str
    order_id: str
    variant_id: str
    quantity: int
    price: float


class PaymentResponse(BaseModel):
    id: str
    order_id: str
    method: str
    status: str
    amount: float
    transaction_id: str | None = None
    paid_at: datetime | None = None


class ShipmentResponse(BaseModel):
    id: str
    order_id: str
    carrier: str | None = None
    tracking_no: str | None = None
    status: str
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None


class OrderResponse(BaseModel):
    id: str
    user_id: str
    address_id: str
    status: str
    sub_total: float
    shipping_fee: float
    tax_amount: float
    discount_amount: float
    total_amount: float
    currency: str
    voucher_id: str | None = None
    items: list[OrderItemResponse]
    payment: PaymentResponse | None = None
    shipment: ShipmentResponse | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CartItemResponse(BaseModel):
    id: str
    variant_id: str
    quantity: int
    note: str | None = None
    price: float
    line_total: float
    stock: int


class CartResponse(BaseModel):
    id: str | None = None
    user_id: str
    items: list[CartItemResponse]
    sub_total: float


class CartItemIdResponse(BaseModel):
    item_id: str


class VoucherResponse(BaseModel):
    id: str
    code: str
    discount: float
    expires_at: datetime
    is_active: bool


class VariantResponse(BaseModel):
    id: str
    product_id: str
    material_id: str
    name: str
    stock: int
    volume: float | None = None
    price: float


class MaterialIdResponse(BaseModel):
    material_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class VariantIdResponse(BaseModel):
    variant_id: str


class AddressIdResponse(BaseModel):
    address_id: str


class CheckoutUrlResponse(BaseModel):
    url: str


class GatewayReturnResponse(BaseModel):
    success: bool
    code: str | None = None
    payment_id: str | None = None
    message: str


class GatewayAckResponse(BaseModel):
    RspCode: str
    Message: str


class StatusResponse(BaseModel):
    status: str
