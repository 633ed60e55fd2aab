"""Business logic for the cafeteria inventory.

Subpackages:
- reference: per-capita, household-measure, yield and nutrition tables
- planning: meal planning engine and measure conversions
- reporting: nutrition estimates and balance reconstruction
- inventory: expiration, low stock and history views
- receiving: goods-receipt intake
"""
__all__ = ["reference", "planning", "reporting", "inventory", "receiving"]
