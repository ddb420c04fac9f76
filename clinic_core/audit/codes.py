# clinic_core/audit/codes.py
PRICE_TABLE_CREATED = "price_table.created"
PRICE_TABLE_UPDATED = "price_table.updated"
PRICE_TABLE_DELETED = "price_table.deleted"
PRICE_TABLE_DEFAULT_CHANGED = "price_table.default_changed"

VACCINE_PRICE_CREATED = "vaccine_price.created"
VACCINE_PRICE_UPDATED = "vaccine_price.updated"
VACCINE_PRICE_DELETED = "vaccine_price.deleted"

CAMPAIGN_CREATED = "campaign.created"
CAMPAIGN_UPDATED = "campaign.updated"
CAMPAIGN_ACTIVATED = "campaign.activated"
CAMPAIGN_DEACTIVATED = "campaign.deactivated"
CAMPAIGN_DELETED = "campaign.deleted"

BUDGET_CREATED = "budget.created"

EVENT_CODES = frozenset(
    {
        PRICE_TABLE_CREATED,
        PRICE_TABLE_UPDATED,
        PRICE_TABLE_DELETED,
        PRICE_TABLE_DEFAULT_CHANGED,
        VACCINE_PRICE_CREATED,
        VACCINE_PRICE_UPDATED,
        VACCINE_PRICE_DELETED,
        CAMPAIGN_CREATED,
        CAMPAIGN_UPDATED,
        CAMPAIGN_ACTIVATED,
        CAMPAIGN_DEACTIVATED,
        CAMPAIGN_DELETED,
        BUDGET_CREATED,
    }
)


def campaign_toggle_code(is_active: bool) -> str:
    return CAMPAIGN_ACTIVATED if is_active else CAMPAIGN_DEACTIVATED
