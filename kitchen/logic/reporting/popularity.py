"""Recipe usage statistics and the popular-recipes ranking."""
from typing import Dict, Any, Iterable, List

from kitchen.domain.Recipe import Recipe
from kitchen.domain.RecipeUsage import RecipeUsage
from kitchen.utilities.constants import POPULAR_RECIPES_LIMIT


def compute_usage_stats(usages: Iterable[RecipeUsage]) -> Dict[str, Dict[str, Any]]:
    """Group usage records by recipe.

    Returns structure:
    {
      '<recipe_id>': { 'usage_count': int, 'last_used': iso timestamp or None,
                       'total_servings': float, 'total_profit': float },
      ...
    }
    """
    stats: Dict[str, Dict[str, Any]] = {}
    for usage in usages:
        entry = stats.setdefault(usage.recipe_id, {
            'usage_count': 0, 'last_used': None, 'total_servings': 0.0, 'total_profit': 0.0,
        })
        entry['usage_count'] += 1
        entry['total_servings'] += usage.servings_used or 0
        entry['total_profit'] += usage.profit or 0
        if entry['last_used'] is None or usage.created_at > entry['last_used']:
            entry['last_used'] = usage.created_at
    return stats


def empty_usage_stats() -> Dict[str, Any]:
    return {'usage_count': 0, 'last_used': None, 'total_servings': 0.0, 'total_profit': 0.0}


def popular_recipes(recipes: Iterable[Recipe], usages: Iterable[RecipeUsage],
                    limit: int = POPULAR_RECIPES_LIMIT) -> List[Recipe]:
    """Recipes ordered by usage count (most used first); ties keep the most recently used first."""
    stats = compute_usage_stats(usages)
    ordered = sorted(recipes, key=lambda r: r.name.lower())
    # stable sorts: name, then recency, then count
    ordered.sort(key=lambda r: (stats.get(r.id) or empty_usage_stats())['last_used'] or '', reverse=True)
    ordered.sort(key=lambda r: (stats.get(r.id) or empty_usage_stats())['usage_count'], reverse=True)
    return ordered[:limit]
