"""Android purchase-funnel automation over UI-tree queries and tiered input channels."""

__version__ = "0.1.0"
