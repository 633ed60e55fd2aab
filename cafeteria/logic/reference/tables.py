"""Static reference data for school meal planning.

Per-capita targets are RAW grams per student. Nutrition values are per
100 g of the food as eaten (cooked for rice, beans, pasta and corn
couscous), which is why YIELD_FACTORS is applied before the lookup.

All tables are keyed by stable ingredient code; INGREDIENT_CODES maps the
display names used by inventory items onto those codes.
"""
from typing import Final, NamedTuple, Tuple

from cafeteria.domain.Segment import Segment

S_INF, S_FUN, S_EJA = Segment.INFANTIL, Segment.FUNDAMENTAL, Segment.EJA


class HouseholdMeasure(NamedTuple):
    unit: str
    grams: float


class NutritionFact(NamedTuple):
    kcal: float
    protein: float
    carbs: float
    fat: float
    reference_amount: float = 100


class MenuTemplate(NamedTuple):
    id: str
    name: str
    ingredients: Tuple[str, ...]


INGREDIENT_CODES: Final[dict[str, str]] = {
    'Rice': 'rice',
    'Pasta': 'pasta',
    'Bread': 'bread',
    'Biscuit': 'biscuit',
    'Corn Flour': 'corn_flour',
    'Beans': 'beans',
    'Beef': 'beef',
    'Chicken': 'chicken',
    'Fish': 'fish',
    'Egg': 'egg',
    'Powdered Milk': 'milk_powder',
    'Banana': 'banana',
    'Apple': 'apple',
    'Watermelon': 'watermelon',
    'Oil': 'oil',
    'Salt': 'salt',
    'Sugar': 'sugar',
}

PER_CAPITA_RULES: Final[dict[str, dict[Segment, float]]] = {
    # Cereals, tubers and derivatives (raw)
    'rice': {S_INF: 20, S_FUN: 30, S_EJA: 40},
    'pasta': {S_INF: 50, S_FUN: 60, S_EJA: 65},
    'bread': {S_INF: 50, S_FUN: 50, S_EJA: 50},  # 1 unit
    'biscuit': {S_INF: 30, S_FUN: 30, S_EJA: 30},  # ~6 units
    'corn_flour': {S_INF: 30, S_FUN: 40, S_EJA: 50},
    # Legumes and proteins
    'beans': {S_INF: 15, S_FUN: 25, S_EJA: 30},
    'beef': {S_INF: 100, S_FUN: 120, S_EJA: 140},
    'chicken': {S_INF: 100, S_FUN: 120, S_EJA: 140},
    'fish': {S_INF: 80, S_FUN: 100, S_EJA: 120},
    'egg': {S_INF: 50, S_FUN: 50, S_EJA: 100},  # 1 unit ~50g
    # Dairy
    'milk_powder': {S_INF: 20, S_FUN: 25, S_EJA: 30},
    # Fruit (edible portion)
    'banana': {S_INF: 86, S_FUN: 86, S_EJA: 86},
    'apple': {S_INF: 130, S_FUN: 130, S_EJA: 130},
    'watermelon': {S_INF: 150, S_FUN: 200, S_EJA: 200},
    # Basic seasoning
    'oil': {S_INF: 5, S_FUN: 5, S_EJA: 5},
    'salt': {S_INF: 1, S_FUN: 2, S_EJA: 2},
    'sugar': {S_INF: 10, S_FUN: 15, S_EJA: 15},
}

HOUSEHOLD_CONVERSION: Final[dict[str, HouseholdMeasure]] = {
    # Raw, for stock withdrawal
    'rice': HouseholdMeasure('Tea Cup(s)', 180),
    'beans': HouseholdMeasure('Tea Cup(s)', 160),
    'corn_flour': HouseholdMeasure('Cup(s)', 130),
    'milk_powder': HouseholdMeasure('Tablespoon(s)', 26),
    # Seasoning
    'oil': HouseholdMeasure('Tablespoon(s)', 15),
    'salt': HouseholdMeasure('Teaspoon(s)', 5),
    'sugar': HouseholdMeasure('Tablespoon(s)', 15),
    # Units / portions
    'pasta': HouseholdMeasure('Pack 500g', 500),
    'beef': HouseholdMeasure('Portion(s)', 120),
    'chicken': HouseholdMeasure('Piece(s)', 120),
    'fish': HouseholdMeasure('Fillet(s)', 100),
    'egg': HouseholdMeasure('Unit(s)', 50),
    'banana': HouseholdMeasure('Unit(s)', 86),
    'apple': HouseholdMeasure('Unit(s)', 130),
    'bread': HouseholdMeasure('Unit(s)', 50),
    'biscuit': HouseholdMeasure('Unit(s)', 5),
}

# Raw -> cooked weight multipliers
YIELD_FACTORS: Final[dict[str, float]] = {
    'rice': 3.7,
    'beans': 3.8,
    'pasta': 2.5,
    'corn_flour': 2.5,
    'milk_powder': 1,
    'beef': 0.75,
    'chicken': 0.75,
    'fish': 0.8,
    'egg': 1,
    'banana': 1,
    'bread': 1,
    'biscuit': 1,
}

NUTRITIONAL_DATA: Final[dict[str, NutritionFact]] = {
    'rice': NutritionFact(128, 2.5, 28.1, 0.2),  # cooked
    'beans': NutritionFact(76, 4.8, 13.6, 0.5),  # cooked
    'pasta': NutritionFact(158, 5.8, 30.9, 0.9),  # cooked
    'corn_flour': NutritionFact(113, 2.2, 25.3, 0.7),  # cooked couscous
    'bread': NutritionFact(300, 8.0, 58.6, 3.1),
    'biscuit': NutritionFact(432, 10.1, 68.7, 14.4),
    'beef': NutritionFact(200, 26.0, 0, 8.0),
    'chicken': NutritionFact(190, 29.0, 0, 7.0),
    'fish': NutritionFact(130, 20.0, 0, 4.0),
    'egg': NutritionFact(146, 13.0, 0.8, 10.0),
    'milk_powder': NutritionFact(497, 25.4, 39.2, 26.9),
    'banana': NutritionFact(98, 1.3, 26.0, 0.1),
    'apple': NutritionFact(56, 0.3, 14.0, 0),
    'oil': NutritionFact(884, 0, 0, 100),
    'sugar': NutritionFact(387, 0, 99, 0),
    'salt': NutritionFact(0, 0, 0, 0),
}

AVAILABLE_MENUS: Final[Tuple[MenuTemplate, ...]] = (
    MenuTemplate('m1', 'Basic (Rice, Beans and Beef)', ('Rice', 'Beans', 'Beef', 'Oil', 'Salt')),
    MenuTemplate('m2', 'Chicken and Rice', ('Rice', 'Chicken', 'Oil', 'Salt')),
    MenuTemplate('m3', 'Pasta with Beef', ('Pasta', 'Beef', 'Oil', 'Salt')),
    MenuTemplate('m4', 'Fish with Rice', ('Rice', 'Fish', 'Oil', 'Salt')),
    MenuTemplate('m5', 'Milk Porridge', ('Powdered Milk', 'Sugar')),
    MenuTemplate('m6', 'Omelette with Rice', ('Rice', 'Egg', 'Oil', 'Salt')),
    MenuTemplate('m7', 'Snack: Fruit (Banana)', ('Banana',)),
    MenuTemplate('m8', 'Corn Couscous with Egg', ('Corn Flour', 'Egg', 'Oil', 'Salt')),
)

DEFAULT_CATEGORIES: Final[Tuple[str, ...]] = ('Cleaning', 'Non-Perishable', 'Perishable')

INITIAL_INVENTORY: Final[Tuple[dict, ...]] = (
    {'id': '1', 'name': 'Rice', 'category': 'Non-Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 20,
     'standardMeasure': 'Tea Cup(s)', 'measureWeight': 180, 'code': 'rice'},
    {'id': '2', 'name': 'Beans', 'category': 'Non-Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 15,
     'standardMeasure': 'Tea Cup(s)', 'measureWeight': 160, 'code': 'beans'},
    {'id': '3', 'name': 'Pasta', 'category': 'Non-Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 10,
     'standardMeasure': 'Pack 500g', 'measureWeight': 500, 'code': 'pasta'},
    {'id': '4', 'name': 'Beef', 'category': 'Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 10, 'code': 'beef'},
    {'id': '5', 'name': 'Chicken', 'category': 'Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 10,
     'code': 'chicken'},
    {'id': '6', 'name': 'Fish', 'category': 'Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 5, 'code': 'fish'},
    {'id': '7', 'name': 'Powdered Milk', 'category': 'Non-Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 5,
     'standardMeasure': 'Tablespoon(s)', 'measureWeight': 26, 'code': 'milk_powder'},
    {'id': '8', 'name': 'Oil', 'category': 'Non-Perishable', 'quantity': 0, 'unit': 'L', 'minStock': 5,
     'standardMeasure': 'Tablespoon(s)', 'measureWeight': 15, 'code': 'oil'},
    {'id': '9', 'name': 'Salt', 'category': 'Non-Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 2,
     'standardMeasure': 'Teaspoon(s)', 'measureWeight': 5, 'code': 'salt'},
    {'id': '10', 'name': 'Egg', 'category': 'Perishable', 'quantity': 0, 'unit': 'un', 'minStock': 30,
     'standardMeasure': 'Unit(s)', 'measureWeight': 50, 'code': 'egg'},
    {'id': '11', 'name': 'Banana', 'category': 'Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 10,
     'code': 'banana'},
    {'id': '12', 'name': 'Apple', 'category': 'Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 10,
     'code': 'apple'},
    {'id': '13', 'name': 'Sugar', 'category': 'Non-Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 5,
     'standardMeasure': 'Tablespoon(s)', 'measureWeight': 15, 'code': 'sugar'},
    {'id': '14', 'name': 'Corn Flour', 'category': 'Non-Perishable', 'quantity': 0, 'unit': 'kg', 'minStock': 5,
     'standardMeasure': 'Cup(s)', 'measureWeight': 130, 'code': 'corn_flour'},
)

DEFAULT_UTENSILS: Final[Tuple[str, ...]] = (
    'Large Industrial Pot',
    'Medium Pot',
    'Frying Pan',
    'Ladle',
    'Skimmer',
    'Rice Spoon',
    'Cutting Knife',
    'Cutting Board',
    'Blender',
    'Peeler',
    'Baking Tray',
    'Plastic Basin',
)

__all__ = [
    'HouseholdMeasure', 'NutritionFact', 'MenuTemplate', 'INGREDIENT_CODES', 'PER_CAPITA_RULES',
    'HOUSEHOLD_CONVERSION', 'YIELD_FACTORS', 'NUTRITIONAL_DATA', 'AVAILABLE_MENUS',
    'DEFAULT_CATEGORIES', 'INITIAL_INVENTORY', 'DEFAULT_UTENSILS',
]
