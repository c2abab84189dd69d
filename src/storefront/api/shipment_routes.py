"""FastAPI routes for shipments."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import actor_fields, current_actor
from storefront.api.presenters import present_shipment
from storefront.api.schemas import (
    RecordShipmentRequest,
    ShipmentResponse,
    StatusResponse,
    UpdateShipmentRequest,
)
from storefront.order.queries import get_shipment_for, list_shipments_for
from storefront.shared.authorization import Actor
from storefront.shipment.tracking import DeleteShipment, RecordShipment, UpdateShipment

shipment_router = APIRouter(prefix="/shipment", tags=["shipments"])


@shipment_router.post("", status_code=201, response_model=ShipmentResponse)
async def record_shipment(body: RecordShipmentRequest, actor: Actor = Depends(current_actor)) -> ShipmentResponse:
    """Attach the shipment for an order; its status drives the order's status."""
    command = RecordShipment(**actor_fields(actor), **body.model_dump())
    shipment_id = current_domain.process(command, asynchronous=False)
    return present_shipment(get_shipment_for(actor, shipment_id))


@shipment_router.get("", response_model=list[ShipmentResponse])
async def list_shipments(
    status: str | None = None,
    actor: Actor = Depends(current_actor),
) -> list[ShipmentResponse]:
    return [present_shipment(s) for s in list_shipments_for(actor, status=status)]


@shipment_router.get("/{shipment_id}", response_model=ShipmentResponse)
async def get_shipment(shipment_id: str, actor: Actor = Depends(current_actor)) -> ShipmentResponse:
    return present_shipment(get_shipment_for(actor, shipment_id))


@shipment_router.patch("/{shipment_id}", response_model=ShipmentResponse)
async def update_shipment(
    shipment_id: str,
    body: UpdateShipmentRequest,
    actor: Actor = Depends(current_actor),
) -> ShipmentResponse:
    command = UpdateShipment(**actor_fields(actor), shipment_id=shipment_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return present_shipment(get_shipment_for(actor, shipment_id))


@shipment_router.delete("/{shipment_id}", response_model=StatusResponse)
async def delete_shipment(shipment_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(DeleteShipment(**actor_fields(actor), shipment_id=shipment_id), asynchronous=False)
    return StatusResponse(status="deleted")
