RARITY_KEYS = ["common", "rare", "ultraRare"]

# How many coins one pull costs
PULL_COST = 1000
DEFAULT_REFUND_PERCENT = 0.5
DEFAULT_STARTING_CURRENCY = 5000

# The higher the number, the more likely you are to pull an item of this rarity
DEFAULT_RARITY_MAPPING = {
    "common": 10,
    "rare": 5,
    "ultraRare": 1,
}

# Fatal errors = config not safe to load into a picker
FATAL_MISSING_FIELDS = ["id", "itemPool", "pullCost", "refundPercent", "rarityMapping"]
FATAL_MISSING_ITEM_FIELDS = ["id", "rarity"]

# Soft warnings = safe, but imperfect
OPTIONAL_ITEM_FIELDS = ["name"]

SIMULATION_LIMIT = 100_000
