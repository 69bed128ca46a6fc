"""
Ingredient taxonomy.

Static tables used by the diet compatibility checker:

- ingredient term -> food groups
- diet -> forbidden food groups
- food group -> allergen tag

Terms are written in singular form; the checker folds plurals when
matching. Multi-word terms win over the single words they contain,
so "peanut butter" is never read as dairy butter.
"""

from __future__ import annotations

from typing import Final

# ingredient term -> food groups
INGREDIENT_GROUPS: Final[dict[str, tuple[str, ...]]] = {
    # Meat and poultry
    "beef": ("meat",),
    "ground beef": ("meat",),
    "steak": ("meat",),
    "pork": ("meat",),
    "bacon": ("meat",),
    "ham": ("meat",),
    "lamb": ("meat",),
    "mutton": ("meat",),
    "veal": ("meat",),
    "venison": ("meat",),
    "chicken": ("meat",),
    "turkey": ("meat",),
    "duck": ("meat",),
    "sausage": ("meat",),
    "salami": ("meat",),
    "pepperoni": ("meat",),
    "prosciutto": ("meat",),
    "chorizo": ("meat",),
    "meatball": ("meat",),
    "hamburger": ("meat", "grains", "gluten"),
    "hot dog": ("meat", "grains", "gluten"),
    "jerky": ("meat",),
    "gelatin": ("animal_byproducts",),
    # Fish
    "fish": ("fish",),
    "salmon": ("fish",),
    "tuna": ("fish",),
    "cod": ("fish",),
    "trout": ("fish",),
    "sardine": ("fish",),
    "anchovy": ("fish",),
    "mackerel": ("fish",),
    "halibut": ("fish",),
    "tilapia": ("fish",),
    "sea bass": ("fish",),
    "haddock": ("fish",),
    "herring": ("fish",),
    "sushi": ("fish", "grains"),
    # Shellfish
    "shrimp": ("shellfish",),
    "prawn": ("shellfish",),
    "crab": ("shellfish",),
    "lobster": ("shellfish",),
    "clam": ("shellfish",),
    "mussel": ("shellfish",),
    "oyster": ("shellfish",),
    "scallop": ("shellfish",),
    "squid": ("shellfish",),
    "calamari": ("shellfish",),
    "octopus": ("shellfish",),
    # Dairy
    "milk": ("dairy",),
    "cheese": ("dairy",),
    "butter": ("dairy",),
    "cream": ("dairy",),
    "yogurt": ("dairy",),
    "yoghurt": ("dairy",),
    "greek yogurt": ("dairy",),
    "mozzarella": ("dairy",),
    "parmesan": ("dairy",),
    "cheddar": ("dairy",),
    "feta": ("dairy",),
    "ricotta": ("dairy",),
    "mascarpone": ("dairy",),
    "ghee": ("dairy",),
    "whey": ("dairy",),
    "kefir": ("dairy",),
    "buttermilk": ("dairy",),
    "sour cream": ("dairy",),
    "cream cheese": ("dairy",),
    "ice cream": ("dairy", "sweeteners"),
    "custard": ("dairy", "eggs", "sweeteners"),
    "milk chocolate": ("dairy", "sweeteners"),
    # Eggs
    "egg": ("eggs",),
    "omelette": ("eggs",),
    "omelet": ("eggs",),
    "mayonnaise": ("eggs",),
    "meringue": ("eggs", "sweeteners"),
    # Grains containing gluten
    "bread": ("grains", "gluten"),
    "toast": ("grains", "gluten"),
    "pasta": ("grains", "gluten"),
    "spaghetti": ("grains", "gluten"),
    "noodle": ("grains", "gluten"),
    "wheat": ("grains", "gluten"),
    "flour": ("grains", "gluten"),
    "couscous": ("grains", "gluten"),
    "bagel": ("grains", "gluten"),
    "croissant": ("grains", "gluten", "dairy"),
    "pizza": ("grains", "gluten", "dairy"),
    "cracker": ("grains", "gluten"),
    "barley": ("grains", "gluten"),
    "rye": ("grains", "gluten"),
    "seitan": ("gluten",),
    "pancake": ("grains", "gluten", "eggs", "dairy"),
    "waffle": ("grains", "gluten", "eggs", "dairy"),
    "cookie": ("grains", "gluten", "sweeteners"),
    "cake": ("grains", "gluten", "eggs", "sweeteners"),
    "muffin": ("grains", "gluten", "eggs", "sweeteners"),
    "beer": ("gluten",),
    "soy sauce": ("soy", "gluten"),
    # Grains without gluten
    "rice": ("grains",),
    "brown rice": ("grains",),
    "oat": ("grains",),
    "oatmeal": ("grains",),
    "quinoa": ("grains",),
    "corn": ("grains", "starches"),
    "popcorn": ("grains",),
    "tortilla": ("grains",),
    "cereal": ("grains",),
    "granola": ("grains", "sweeteners"),
    "millet": ("grains",),
    "buckwheat": ("grains",),
    "rice cake": ("grains",),
    # Starches
    "potato": ("starches",),
    "sweet potato": ("starches",),
    "fries": ("starches",),
    "french fries": ("starches",),
    "yam": ("starches",),
    "cassava": ("starches",),
    # High sugar fruits
    "banana": ("high_sugar_fruits",),
    "apple": ("high_sugar_fruits",),
    "grape": ("high_sugar_fruits",),
    "mango": ("high_sugar_fruits",),
    "pineapple": ("high_sugar_fruits",),
    "orange": ("high_sugar_fruits",),
    "pear": ("high_sugar_fruits",),
    "cherry": ("high_sugar_fruits",),
    "date": ("high_sugar_fruits",),
    "fig": ("high_sugar_fruits",),
    "raisin": ("high_sugar_fruits",),
    "watermelon": ("high_sugar_fruits",),
    "peach": ("high_sugar_fruits",),
    "kiwi": ("high_sugar_fruits",),
    "orange juice": ("high_sugar_fruits", "sweeteners"),
    # Low carb fruits
    "strawberry": ("low_carb_fruits",),
    "raspberry": ("low_carb_fruits",),
    "blueberry": ("low_carb_fruits",),
    "blackberry": ("low_carb_fruits",),
    "berry": ("low_carb_fruits",),
    "lemon": ("low_carb_fruits",),
    "lime": ("low_carb_fruits",),
    "tomato": ("low_carb_fruits",),
    "avocado": ("low_carb_fruits", "healthy_fats"),
    "olive": ("healthy_fats",),
    # Vegetables
    "broccoli": ("vegetables",),
    "spinach": ("vegetables",),
    "kale": ("vegetables",),
    "lettuce": ("vegetables",),
    "salad": ("vegetables",),
    "cucumber": ("vegetables",),
    "carrot": ("vegetables",),
    "pepper": ("vegetables",),
    "bell pepper": ("vegetables",),
    "onion": ("vegetables",),
    "garlic": ("vegetables",),
    "zucchini": ("vegetables",),
    "cauliflower": ("vegetables",),
    "cabbage": ("vegetables",),
    "celery": ("vegetables",),
    "mushroom": ("vegetables",),
    "asparagus": ("vegetables",),
    "green bean": ("vegetables",),
    "eggplant": ("vegetables",),
    "beet": ("vegetables",),
    # Legumes
    "bean": ("legumes",),
    "black bean": ("legumes",),
    "kidney bean": ("legumes",),
    "lentil": ("legumes",),
    "chickpea": ("legumes",),
    "pea": ("legumes",),
    "hummus": ("legumes", "sesame"),
    # Soy
    "soy": ("soy",),
    "soya": ("soy",),
    "tofu": ("soy", "legumes"),
    "tempeh": ("soy", "legumes"),
    "edamame": ("soy", "legumes"),
    "miso": ("soy",),
    "soy milk": ("soy",),
    # Tree nuts
    "nut": ("nuts",),
    "almond": ("nuts",),
    "walnut": ("nuts",),
    "cashew": ("nuts",),
    "pistachio": ("nuts",),
    "hazelnut": ("nuts",),
    "pecan": ("nuts",),
    "macadamia": ("nuts",),
    "brazil nut": ("nuts",),
    "almond milk": ("nuts",),
    "almond butter": ("nuts",),
    "nutella": ("nuts", "dairy", "sweeteners"),
    "pesto": ("nuts", "dairy"),
    # Peanuts
    "peanut": ("peanuts", "legumes"),
    "peanut butter": ("peanuts", "legumes"),
    # Sesame
    "sesame": ("sesame",),
    "tahini": ("sesame",),
    # Fats
    "olive oil": ("healthy_fats",),
    "coconut": ("healthy_fats",),
    "coconut milk": ("healthy_fats",),
    "coconut oil": ("healthy_fats",),
    "oil": ("healthy_fats",),
    # Sweeteners
    "sugar": ("sweeteners",),
    "honey": ("sweeteners", "honey"),
    "syrup": ("sweeteners",),
    "maple syrup": ("sweeteners",),
    "chocolate": ("sweeteners",),
    "dark chocolate": ("sweeteners",),
    "candy": ("sweeteners",),
    "soda": ("sweeteners",),
    "jam": ("sweeteners", "high_sugar_fruits"),
    # Neutral
    "water": ("neutral",),
    "coffee": ("neutral",),
    "tea": ("neutral",),
    "salt": ("neutral",),
    "vinegar": ("neutral",),
    "herb": ("neutral",),
    "spice": ("neutral",),
}

# diet -> forbidden food groups
DIET_FORBIDDEN_GROUPS: Final[dict[str, frozenset[str]]] = {
    "vegan": frozenset(
        {"meat", "fish", "shellfish", "dairy", "eggs", "honey", "animal_byproducts"}
    ),
    "vegetarian": frozenset({"meat", "fish", "shellfish", "animal_byproducts"}),
    "pescatarian": frozenset({"meat", "animal_byproducts"}),
    "keto": frozenset({"grains", "starches", "high_sugar_fruits", "sweeteners", "legumes"}),
    "paleo": frozenset({"grains", "dairy", "starches", "legumes"}),
    "gluten-free": frozenset({"gluten"}),
    "dairy-free": frozenset({"dairy"}),
    "nut-free": frozenset({"nuts", "peanuts"}),
}

# food group -> allergen tag
GROUP_ALLERGENS: Final[dict[str, str]] = {
    "nuts": "nuts",
    "peanuts": "peanuts",
    "dairy": "dairy",
    "gluten": "gluten",
    "shellfish": "shellfish",
    "fish": "fish",
    "eggs": "eggs",
    "soy": "soy",
    "sesame": "sesame",
}

SUPPORTED_DIETS: Final[frozenset[str]] = frozenset(DIET_FORBIDDEN_GROUPS)
SUPPORTED_ALLERGENS: Final[frozenset[str]] = frozenset(GROUP_ALLERGENS.values())

DIET_ALIASES: Final[dict[str, str]] = {
    "plant-based": "vegan",
    "veggie": "vegetarian",
    "pescetarian": "pescatarian",
    "ketogenic": "keto",
    "low-carb": "keto",
    "glutenfree": "gluten-free",
    "celiac": "gluten-free",
    "coeliac": "gluten-free",
    "lactose-free": "dairy-free",
    "dairyfree": "dairy-free",
    "nutfree": "nut-free",
}

ALLERGEN_ALIASES: Final[dict[str, str]] = {
    "nut": "nuts",
    "nut-free": "nuts",
    "tree-nut": "nuts",
    "tree-nuts": "nuts",
    "peanut": "peanuts",
    "peanut-free": "peanuts",
    "lactose": "dairy",
    "milk": "dairy",
    "dairy-free": "dairy",
    "wheat": "gluten",
    "gluten-free": "gluten",
    "crustacean": "shellfish",
    "crustaceans": "shellfish",
    "egg": "eggs",
    "soya": "soy",
}
