import unittest
from datetime import date
from kitchen.domain.FoodSupply import FoodSupplyItem
from kitchen.domain.Recipe import Recipe
from kitchen.domain.RecipeIngredient import (
    FoodIngredient, SubrecipeIngredient, ingredient_from_dict, normalize_waste_percentage
)
from kitchen.domain.RecipeUsage import RecipeUsage


class TestIngredientLines(unittest.TestCase):

    def test_camel_case_food_line(self):
        ing = ingredient_from_dict({"type": "food", "foodSupplyId": "fs-1", "quantity": "500", "wastePercentage": "10"})
        self.assertIsInstance(ing, FoodIngredient)
        self.assertEqual(ing.food_supply_id, "fs-1")
        self.assertEqual(ing.quantity, 500.0)
        self.assertEqual(ing.waste_percentage, 10.0)

    def test_waste_is_clamped(self):
        self.assertEqual(normalize_waste_percentage(150), 100.0)
        self.assertEqual(normalize_waste_percentage(-5), 0.0)
        self.assertEqual(normalize_waste_percentage("abc"), 0.0)
        self.assertEqual(normalize_waste_percentage(None), 0.0)

    def test_subrecipe_line_inferred_and_defaults_to_one(self):
        ing = ingredient_from_dict({"subRecipeId": "sauce", "quantity": 0})
        self.assertIsInstance(ing, SubrecipeIngredient)
        self.assertEqual(ing.quantity, 1.0)
        ing = ingredient_from_dict({"type": "subrecipe", "sub_recipe_id": "sauce", "quantity": "2.5"})
        self.assertEqual(ing.quantity, 2.5)


class TestRecipeEntity(unittest.TestCase):

    def test_round_trip_keeps_snapshot(self):
        recipe = Recipe.from_dict({
            "id": "r1", "name": "Chicken Alfredo Pasta", "servings": 4, "totalCost": 35, "costPerServing": 8.75,
            "sellingPrice": 45, "isSubrecipe": False,
            "ingredients": [{"type": "food", "foodSupplyId": "fs-1", "quantity": 500}],
        })
        again = Recipe.from_dict(recipe.to_dict())
        self.assertEqual(again.total_cost, 35.0)
        self.assertEqual(again.cost_per_serving, 8.75)
        self.assertEqual(again.selling_price, 45.0)
        self.assertTrue(again.uses_food_supply("fs-1"))
        self.assertFalse(again.uses_subrecipe("fs-1"))

    def test_missing_selling_price_stays_none(self):
        self.assertIsNone(Recipe.from_dict({"id": "r", "name": "x"}).selling_price)

    def test_string_flags_are_parsed(self):
        self.assertFalse(Recipe.from_dict({"id": "r", "is_subrecipe": "false"}).is_subrecipe)
        self.assertFalse(Recipe.from_dict({"id": "r", "isSubrecipe": "0"}).is_subrecipe)
        self.assertTrue(Recipe.from_dict({"id": "r", "is_subrecipe": "True"}).is_subrecipe)

    def test_subrecipe_drops_stored_selling_price(self):
        sauce = Recipe.from_dict({"id": "s", "isSubrecipe": True, "sellingPrice": 20})
        self.assertIsNone(sauce.selling_price)

    def test_apply_cost_snapshot_touches_updated_at(self):
        recipe = Recipe(id="r", name="x", created_at="2025-01-01T00:00:00+00:00")
        recipe.apply_cost_snapshot(12.0, 6.0)
        self.assertEqual(recipe.total_cost, 12.0)
        self.assertNotEqual(recipe.updated_at, recipe.created_at)


class TestFoodSupplyItem(unittest.TestCase):

    def test_from_dict_accepts_camel_case_and_dates(self):
        item = FoodSupplyItem.from_dict({"id": "fs-1", "name": "Cream", "unit": "ml", "pricePerUnit": "0.032",
                                         "quantity": 2000, "expirationDate": "2025-03-01"})
        self.assertEqual(item.price_per_unit, 0.032)
        self.assertEqual(item.expiration_date, date(2025, 3, 1))
        self.assertEqual(item.to_dict()["expiration_date"], "01-03-2025")

    def test_category_is_lowercased(self):
        self.assertEqual(FoodSupplyItem.from_dict({"id": "x", "category": " Dairy "}).category, "dairy")
        self.assertEqual(FoodSupplyItem.from_dict({"id": "x"}).category, "other")

    def test_negative_price_is_floored(self):
        self.assertEqual(FoodSupplyItem.from_dict({"id": "x", "pricePerUnit": -3}).price_per_unit, 0.0)

    def test_adjust_quantity(self):
        item = FoodSupplyItem("fs-1", "Chicken", "g", 0.03, 500)
        item.adjust_quantity(-200)
        self.assertEqual(item.quantity, 300)
        self.assertAlmostEqual(item.stock_value(), 9.0)


class TestRecipeUsageRecord(unittest.TestCase):

    def test_from_dict_ignores_unknown_keys(self):
        usage = RecipeUsage.from_dict({"recipe_id": "r1", "servings_used": 2, "profit": 3.5, "extra": True})
        self.assertEqual(usage.recipe_id, "r1")
        self.assertTrue(usage.id)
        self.assertEqual(usage.to_dict()["profit"], 3.5)


if __name__ == '__main__':
    unittest.main()
