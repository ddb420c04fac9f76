# clinic_core/budgets/constants.py

# A budget stays valid for this many calendar days after creation.
BUDGET_VALIDITY_DAYS = 7

BUDGET_NUMBER_PREFIX = "ORC"

# Fresh number allocations tried before giving up with 409.
MAX_NUMBER_ALLOCATION_ATTEMPTS = 5
