"""Core business logic layer.

Subpackages:
- costing: recipe cost engine and recipe usage runs
- supplies: food supply stock analysis helpers
- reporting: recipe popularity and usage statistics
"""
__all__ = ["costing", "supplies", "reporting"]
