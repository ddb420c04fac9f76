# clinic_core/pricing/services.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from clinic_core.audit import codes
from clinic_core.audit.services import AuditService
from clinic_core.catalog.selectors import get_vaccine, vaccines_by_ids
from clinic_core.common.api.exceptions import ConflictError, TenantIsolationError
from clinic_core.pricing.models import DiscountKind, PriceCampaign, PriceTable, VaccinePrice
from clinic_core.pricing.selectors import get_campaign, get_price_table, get_vaccine_price
from clinic_core.tenants.models import Tenant

logger = logging.getLogger(__name__)


def _validate_window(start_date: date | None, end_date: date | None) -> None:
    if start_date is None:
        raise ValidationError({"start_date": "This field is required."})
    if end_date is not None and end_date < start_date:
        raise ValidationError({"end_date": "end_date must be on or after start_date."})


def _non_negative_int(value, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError({field_name: "A valid integer is required."})
    if parsed < 0:
        raise ValidationError({field_name: "Must be >= 0"})
    return parsed


def _apply_changes(obj, changes: Dict[str, Any], allowed: Iterable[str]) -> List[str]:
    updated: List[str] = []
    for key in allowed:
        if key in changes:
            setattr(obj, key, changes[key])
            updated.append(key)
    return updated


class PriceTableService:
    """
    Price table registry writes. The single-default invariant is kept by a locked
    clear-then-set inside one transaction (backed by a partial unique constraint).
    """

    @staticmethod
    def _lock_tenant_tables(*, tenant_id: UUID) -> List[PriceTable]:
        # the tenant row serializes default changes even before the first table exists
        list(Tenant.objects.select_for_update().filter(id=tenant_id).values_list("id", flat=True))
        return list(PriceTable.objects.select_for_update().filter(tenant_id=tenant_id).order_by("id"))

    @staticmethod
    def _clear_default_locked(*, tenant_id: UUID, keep_id: int | None = None) -> Optional[int]:
        qs = PriceTable.objects.filter(tenant_id=tenant_id, is_default=True)
        if keep_id is not None:
            qs = qs.exclude(id=keep_id)
        previous = qs.values_list("id", flat=True).first()
        qs.update(is_default=False)
        return previous

    @staticmethod
    def _log_default_change(
        *, table: PriceTable, previous_default_id: int | None, actor_user_id: int | None
    ) -> None:
        logger.info(
            "Default price table changed tenant=%s table=%s previous=%s",
            table.tenant_id,
            table.id,
            previous_default_id,
        )
        AuditService.log(
            event_code=codes.PRICE_TABLE_DEFAULT_CHANGED,
            entity_type="PriceTable",
            entity_id=table.id,
            tenant_id=table.tenant_id,
            actor_user_id=actor_user_id,
            metadata={"previous_default_id": previous_default_id},
        )

    @staticmethod
    @transaction.atomic
    def create(
        *,
        tenant_id: UUID,
        name: str,
        description: str = "",
        is_default: bool = False,
        is_active: bool = True,
        actor_user_id: int | None = None,
    ) -> PriceTable:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "This field is required."})
        if is_default and not is_active:
            raise ValidationError({"is_default": "An inactive price table cannot be the default."})

        previous_default_id = None
        if is_default:
            PriceTableService._lock_tenant_tables(tenant_id=tenant_id)
            previous_default_id = PriceTableService._clear_default_locked(tenant_id=tenant_id)

        try:
            with transaction.atomic():
                table = PriceTable.objects.create(
                    tenant_id=tenant_id,
                    name=name,
                    description=description or "",
                    is_default=is_default,
                    is_active=is_active,
                )
        except IntegrityError:
            if not is_default:
                raise
            logger.warning("Concurrent default price table creation tenant=%s", tenant_id)
            raise ConflictError("Another default price table was created concurrently. Please retry.")

        AuditService.log(
            event_code=codes.PRICE_TABLE_CREATED,
            entity_type="PriceTable",
            entity_id=table.id,
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
            metadata={"name": table.name, "is_default": table.is_default},
        )
        if is_default:
            PriceTableService._log_default_change(
                table=table,
                previous_default_id=previous_default_id,
                actor_user_id=actor_user_id,
            )
        return table

    @staticmethod
    @transaction.atomic
    def update(
        *,
        tenant_id: UUID,
        price_table_id: int,
        changes: Dict[str, Any],
        actor_user_id: int | None = None,
    ) -> PriceTable:
        """
        Partial update. Supported keys: name, description, is_active, is_default.
        Deactivating the default table also clears its default flag.
        """
        PriceTableService._lock_tenant_tables(tenant_id=tenant_id)
        table = get_price_table(tenant_id=tenant_id, price_table_id=price_table_id)

        if "name" in changes:
            changes = {**changes, "name": (changes["name"] or "").strip()}
            if not changes["name"]:
                raise ValidationError({"name": "This field may not be blank."})

        update_fields = _apply_changes(table, changes, ("name", "description", "is_active"))

        wants_default = changes.get("is_default")
        if wants_default is True and not table.is_active:
            raise ValidationError({"is_default": "An inactive price table cannot be the default."})

        previous_default_id = None
        became_default = False
        if wants_default is True and not table.is_default:
            previous_default_id = PriceTableService._clear_default_locked(tenant_id=tenant_id, keep_id=table.id)
            table.is_default = True
            became_default = True
            update_fields.append("is_default")
        elif (wants_default is False or not table.is_active) and table.is_default:
            table.is_default = False
            update_fields.append("is_default")

        if update_fields:
            table.save(update_fields=sorted(set(update_fields)) + ["updated_at"])
            AuditService.log(
                event_code=codes.PRICE_TABLE_UPDATED,
                entity_type="PriceTable",
                entity_id=table.id,
                tenant_id=tenant_id,
                actor_user_id=actor_user_id,
                metadata={"fields": sorted(set(update_fields))},
            )

        if became_default:
            PriceTableService._log_default_change(
                table=table,
                previous_default_id=previous_default_id,
                actor_user_id=actor_user_id,
            )
        return table

    @staticmethod
    @transaction.atomic
    def set_default(*, tenant_id: UUID, price_table_id: int, actor_user_id: int | None = None) -> PriceTable:
        """
        Make a table the tenant default. Idempotent.
        All tenant tables are row-locked so two concurrent toggles serialize and
        exactly one default remains.
        """
        PriceTableService._lock_tenant_tables(tenant_id=tenant_id)
        table = get_price_table(tenant_id=tenant_id, price_table_id=price_table_id)

        if not table.is_active:
            raise ValidationError({"is_default": "An inactive price table cannot be the default."})

        # idempotent no-op
        if table.is_default:
            return table

        previous_default_id = PriceTableService._clear_default_locked(tenant_id=tenant_id, keep_id=table.id)
        table.is_default = True
        table.save(update_fields=["is_default", "updated_at"])

        PriceTableService._log_default_change(
            table=table,
            previous_default_id=previous_default_id,
            actor_user_id=actor_user_id,
        )
        return table

    @staticmethod
    @transaction.atomic
    def delete(*, tenant_id: UUID, price_table_id: int, actor_user_id: int | None = None) -> None:
        """
        Removes the table and its price rows. Existing budgets keep their copies.
        """
        table = get_price_table(tenant_id=tenant_id, price_table_id=price_table_id)
        table_id = table.id
        was_default = table.is_default
        table.delete()

        logger.info("Price table deleted tenant=%s table=%s was_default=%s", tenant_id, table_id, was_default)
        AuditService.log(
            event_code=codes.PRICE_TABLE_DELETED,
            entity_type="PriceTable",
            entity_id=table_id,
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
            metadata={"was_default": was_default},
        )


class VaccinePriceService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        tenant_id: UUID,
        price_table_id: int,
        vaccine_id: int,
        price,
        start_date: date,
        end_date: date | None = None,
        is_active: bool = True,
        actor_user_id: int | None = None,
    ) -> VaccinePrice:
        table = get_price_table(tenant_id=tenant_id, price_table_id=price_table_id)
        vaccine = get_vaccine(tenant_id=tenant_id, vaccine_id=vaccine_id)
        price = _non_negative_int(price, "price")
        _validate_window(start_date, end_date)

        row = VaccinePrice.objects.create(
            tenant_id=tenant_id,
            price_table=table,
            vaccine_id=vaccine.id,
            price=price,
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
        )

        AuditService.log(
            event_code=codes.VACCINE_PRICE_CREATED,
            entity_type="VaccinePrice",
            entity_id=row.id,
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
            metadata={"price_table_id": table.id, "vaccine_id": vaccine.id, "price": price},
        )
        return row

    @staticmethod
    @transaction.atomic
    def update(
        *,
        tenant_id: UUID,
        vaccine_price_id: int,
        changes: Dict[str, Any],
        actor_user_id: int | None = None,
    ) -> VaccinePrice:
        """
        Partial update. Supported keys: price, start_date, end_date, is_active.
        The table and vaccine of a price row never change.
        """
        row = get_vaccine_price(tenant_id=tenant_id, vaccine_price_id=vaccine_price_id)

        if "price" in changes:
            changes = {**changes, "price": _non_negative_int(changes["price"], "price")}

        update_fields = _apply_changes(row, changes, ("price", "start_date", "end_date", "is_active"))
        _validate_window(row.start_date, row.end_date)

        if update_fields:
            row.save(update_fields=update_fields + ["updated_at"])
            AuditService.log(
                event_code=codes.VACCINE_PRICE_UPDATED,
                entity_type="VaccinePrice",
                entity_id=row.id,
                tenant_id=tenant_id,
                actor_user_id=actor_user_id,
                metadata={"fields": update_fields},
            )
        return row

    @staticmethod
    @transaction.atomic
    def delete(*, tenant_id: UUID, vaccine_price_id: int, actor_user_id: int | None = None) -> None:
        row = get_vaccine_price(tenant_id=tenant_id, vaccine_price_id=vaccine_price_id)
        row_id = row.id
        row.delete()

        AuditService.log(
            event_code=codes.VACCINE_PRICE_DELETED,
            entity_type="VaccinePrice",
            entity_id=row_id,
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
        )


class PriceCampaignService:
    @staticmethod
    def _normalize_vaccine_ids(*, tenant_id: UUID, vaccine_ids) -> List[int]:
        ids: List[int] = []
        for raw in vaccine_ids or []:
            try:
                vid = int(raw)
            except (TypeError, ValueError):
                raise ValidationError({"vaccine_ids": "Vaccine ids must be integers."})
            if vid not in ids:
                ids.append(vid)

        try:
            vaccines_by_ids(tenant_id=tenant_id, vaccine_ids=ids)
        except TenantIsolationError:
            raise TenantIsolationError({"vaccine_ids": "One or more vaccines do not belong to this tenant."})
        return sorted(ids)

    @staticmethod
    def _validate_discount(*, kind: str, value) -> int:
        if kind not in DiscountKind.values:
            raise ValidationError({"discount_kind": f"Invalid discount kind. Allowed: {list(DiscountKind.values)}"})
        value = _non_negative_int(value, "discount_value")
        if kind == DiscountKind.PERCENT and value > 100:
            raise ValidationError({"discount_value": "Percent discount must be between 0 and 100."})
        return value

    @staticmethod
    @transaction.atomic
    def create(
        *,
        tenant_id: UUID,
        name: str,
        discount_kind: str,
        discount_value,
        start_date: date,
        end_date: date | None = None,
        vaccine_ids: Iterable[int] | None = None,
        description: str = "",
        is_active: bool = True,
        actor_user_id: int | None = None,
    ) -> PriceCampaign:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "This field is required."})

        discount_value = PriceCampaignService._validate_discount(kind=discount_kind, value=discount_value)
        _validate_window(start_date, end_date)
        ids = PriceCampaignService._normalize_vaccine_ids(tenant_id=tenant_id, vaccine_ids=vaccine_ids)

        campaign = PriceCampaign.objects.create(
            tenant_id=tenant_id,
            name=name,
            description=description or "",
            discount_kind=discount_kind,
            discount_value=discount_value,
            vaccine_ids=ids,
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
        )

        AuditService.log(
            event_code=codes.CAMPAIGN_CREATED,
            entity_type="PriceCampaign",
            entity_id=campaign.id,
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
            metadata={
                "discount_kind": campaign.discount_kind,
                "discount_value": campaign.discount_value,
                "vaccine_ids": ids,
            },
        )
        return campaign

    @staticmethod
    @transaction.atomic
    def update(
        *,
        tenant_id: UUID,
        campaign_id: int,
        changes: Dict[str, Any],
        actor_user_id: int | None = None,
    ) -> PriceCampaign:
        campaign = get_campaign(tenant_id=tenant_id, campaign_id=campaign_id)
        changes = dict(changes)

        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise ValidationError({"name": "This field may not be blank."})
        if "vaccine_ids" in changes:
            changes["vaccine_ids"] = PriceCampaignService._normalize_vaccine_ids(
                tenant_id=tenant_id,
                vaccine_ids=changes["vaccine_ids"],
            )

        update_fields = _apply_changes(
            campaign,
            changes,
            (
                "name",
                "description",
                "discount_kind",
                "discount_value",
                "vaccine_ids",
                "start_date",
                "end_date",
                "is_active",
            ),
        )
        campaign.discount_value = PriceCampaignService._validate_discount(
            kind=campaign.discount_kind,
            value=campaign.discount_value,
        )
        _validate_window(campaign.start_date, campaign.end_date)

        if update_fields:
            campaign.save(update_fields=update_fields + ["updated_at"])
            AuditService.log(
                event_code=codes.CAMPAIGN_UPDATED,
                entity_type="PriceCampaign",
                entity_id=campaign.id,
                tenant_id=tenant_id,
                actor_user_id=actor_user_id,
                metadata={"fields": update_fields},
            )
        return campaign

    @staticmethod
    @transaction.atomic
    def set_active(
        *,
        tenant_id: UUID,
        campaign_id: int,
        is_active: bool | None = None,
        actor_user_id: int | None = None,
    ) -> PriceCampaign:
        """
        is_active=None flips the current flag.
        """
        campaign = PriceCampaign.objects.select_for_update().filter(tenant_id=tenant_id, id=campaign_id).first()
        if campaign is None:
            raise TenantIsolationError({"campaign": f"Campaign {campaign_id} not found for this tenant."})

        target = (not campaign.is_active) if is_active is None else bool(is_active)
        if campaign.is_active == target:
            return campaign

        campaign.is_active = target
        campaign.save(update_fields=["is_active", "updated_at"])

        AuditService.log(
            event_code=codes.campaign_toggle_code(target),
            entity_type="PriceCampaign",
            entity_id=campaign.id,
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
        )
        return campaign

    @staticmethod
    @transaction.atomic
    def delete(*, tenant_id: UUID, campaign_id: int, actor_user_id: int | None = None) -> None:
        campaign = get_campaign(tenant_id=tenant_id, campaign_id=campaign_id)
        campaign_pk = campaign.id
        campaign.delete()

        AuditService.log(
            event_code=codes.CAMPAIGN_DELETED,
            entity_type="PriceCampaign",
            entity_id=campaign_pk,
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
        )
