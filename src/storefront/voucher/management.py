"""Voucher administration: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.authorization import Actor, Authorizer
from storefront.utils.logging import get_logger
from storefront.voucher.events import VoucherIssued, VoucherUpdated
from storefront.voucher.voucher import Voucher, validate_voucher_terms

logger = get_logger(__name__)


@storefront.command(part_of="Voucher")
class IssueVoucher:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    code = String(required=True, max_length=50)
    discount = Float(required=True)
    expires_at = DateTime(required=True)
    is_active = Boolean(default=True)


@storefront.command(part_of="Voucher")
class UpdateVoucher:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    voucher_id = Identifier(required=True)
    code = String(max_length=50)
    discount = Float()
    expires_at = DateTime()
    is_active = Boolean()


@storefront.command(part_of="Voucher")
class DeleteVoucher:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    voucher_id = Identifier(required=True)


@storefront.command_handler(part_of=Voucher)
class VoucherCommandHandler:
    @handle(IssueVoucher)
    def issue_voucher(self, command):
        Authorizer.assert_admin(Actor.from_command(command))
        validate_voucher_terms(discount=command.discount, expires_at=command.expires_at)

        repo = current_domain.repository_for(Voucher)
        if repo.find_by_code(command.code) is not None:
            raise ValidationError({"code": [f"Voucher code {command.code} already exists"]})

        voucher = Voucher(
            code=command.code,
            discount=command.discount,
            expires_at=command.expires_at,
            is_active=True if command.is_active is None else command.is_active,
        )
        voucher.raise_(
            VoucherIssued(
                voucher_id=str(voucher.id),
                code=voucher.code,
                discount=voucher.discount,
                expires_at=voucher.expires_at,
            )
        )
        repo.add(voucher)

        logger.info("voucher_issued", voucher_id=str(voucher.id), code=voucher.code)
        return str(voucher.id)

    @handle(UpdateVoucher)
    def update_voucher(self, command):
        Authorizer.assert_admin(Actor.from_command(command))
        validate_voucher_terms(discount=command.discount, expires_at=command.expires_at)

        repo = current_domain.repository_for(Voucher)
        voucher = repo.get(command.voucher_id)

        if command.code and command.code != voucher.code:
            clash = repo.find_by_code(command.code)
            if clash is not None and str(clash.id) != str(voucher.id):
                raise ValidationError({"code": [f"Voucher code {command.code} already exists"]})
            voucher.code = command.code
        if command.discount is not None:
            voucher.discount = command.discount
        if command.expires_at is not None:
            voucher.expires_at = command.expires_at
        if command.is_active is not None:
            voucher.is_active = command.is_active

        voucher.raise_(
            VoucherUpdated(
                voucher_id=str(voucher.id),
                code=voucher.code,
                discount=voucher.discount,
                expires_at=voucher.expires_at,
                is_active=str(voucher.is_active),
            )
        )
        repo.add(voucher)

    @handle(DeleteVoucher)
    def delete_voucher(self, command):
        Authorizer.assert_admin(Actor.from_command(command))

        repo = current_domain.repository_for(Voucher)
        voucher = repo.get(command.voucher_id)
        repo._dao.delete(voucher)
        logger.info("voucher_deleted", voucher_id=str(command.voucher_id))
