"""FastAPI routes for vouchers."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import actor_fields, current_actor
from storefront.api.presenters import present_voucher
from storefront.api.schemas import IssueVoucherRequest, StatusResponse, UpdateVoucherRequest, VoucherResponse
from storefront.shared.authorization import Actor
from storefront.voucher.management import DeleteVoucher, IssueVoucher, UpdateVoucher
from storefront.voucher.voucher import Voucher

voucher_router = APIRouter(prefix="/vouchers", tags=["vouchers"])


@voucher_router.post("", status_code=201, response_model=VoucherResponse)
async def issue_voucher(body: IssueVoucherRequest, actor: Actor = Depends(current_actor)) -> VoucherResponse:
    command = IssueVoucher(**actor_fields(actor), **body.model_dump())
    voucher_id = current_domain.process(command, asynchronous=False)
    return present_voucher(current_domain.repository_for(Voucher).get(voucher_id))


@voucher_router.get("", response_model=list[VoucherResponse])
async def list_vouchers(is_active: bool | None = None) -> list[VoucherResponse]:
    """Redeemable vouchers by default; ``is_active=false`` lists the deactivated ones."""
    repo = current_domain.repository_for(Voucher)
    if is_active is False:
        vouchers = repo.inactive()
    else:
        vouchers = repo.redeemable(now=datetime.now(UTC))
    return [present_voucher(v) for v in vouchers]


@voucher_router.get("/{voucher_id}", response_model=VoucherResponse)
async def get_voucher(voucher_id: str) -> VoucherResponse:
    return present_voucher(current_domain.repository_for(Voucher).get(voucher_id))


@voucher_router.patch("/{voucher_id}", response_model=VoucherResponse)
async def update_voucher(
    voucher_id: str,
    body: UpdateVoucherRequest,
    actor: Actor = Depends(current_actor),
) -> VoucherResponse:
    command = UpdateVoucher(**actor_fields(actor), voucher_id=voucher_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return present_voucher(current_domain.repository_for(Voucher).get(voucher_id))


@voucher_router.delete("/{voucher_id}", response_model=StatusResponse)
async def delete_voucher(voucher_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(DeleteVoucher(**actor_fields(actor), voucher_id=voucher_id), asynchronous=False)
    return StatusResponse(status="deleted")
