"""
Reference tables for ingredient recovery.

Plain data: the food lexicon scanned in instruction text, synonym groups,
typical quantities for common pantry items, and contextual amount phrases.
"""

import re

# Multi-word entries are matched before single words, so "olive oil" wins over "oil".
# Water and ice are left out: recipes rarely list them.
FOOD_PHRASES = [
    "all-purpose flour",
    "almond milk",
    "baking powder",
    "baking soda",
    "bay leaf",
    "bell pepper",
    "black pepper",
    "bread crumbs",
    "brown sugar",
    "chicken breast",
    "chicken stock",
    "chicken broth",
    "chili flakes",
    "chili powder",
    "coconut milk",
    "coconut oil",
    "cream cheese",
    "egg yolk",
    "egg white",
    "garlic powder",
    "green onion",
    "ground beef",
    "heavy cream",
    "hot sauce",
    "lemon juice",
    "lemon zest",
    "lime juice",
    "maple syrup",
    "olive oil",
    "onion powder",
    "parmesan cheese",
    "powdered sugar",
    "red pepper flakes",
    "sesame oil",
    "sesame seeds",
    "sour cream",
    "soy sauce",
    "tomato paste",
    "tomato sauce",
    "vanilla extract",
    "vegetable oil",
    "vegetable stock",
    "worcestershire sauce",
]

FOOD_WORDS = [
    "almond", "apple", "avocado", "bacon", "banana", "basil", "bean", "beef",
    "blueberry", "bread", "broccoli", "broth", "butter", "buttermilk", "cabbage",
    "carrot", "cauliflower", "celery", "cheddar", "cheese", "chicken", "chickpea",
    "chive", "chocolate", "cilantro", "cinnamon", "cocoa", "coriander", "corn",
    "cornstarch", "cream", "cucumber", "cumin", "dill", "egg", "eggplant", "feta",
    "flour", "garlic", "ginger", "honey", "kale", "lemon", "lentil", "lettuce",
    "lime", "mayonnaise", "milk", "mint", "mozzarella", "mushroom", "mustard",
    "noodle", "nutmeg", "oat", "oats", "oil", "onion", "oregano", "paprika",
    "parmesan", "parsley", "pasta", "peanut", "pepper", "pork", "potato",
    "prawn", "rice", "rosemary", "sage", "salmon", "salt", "sausage", "scallion",
    "shallot", "shrimp", "spaghetti", "spinach", "stock", "sugar", "thyme",
    "tofu", "tomato", "tortilla", "turmeric", "vanilla", "vinegar", "walnut",
    "yeast", "yogurt", "zucchini",
]

# Names in one group cover each other
SYNONYM_GROUPS = [
    ["scallion", "green onion", "spring onion"],
    ["cilantro", "coriander"],
    ["chickpea", "garbanzo bean"],
    ["zucchini", "courgette"],
    ["eggplant", "aubergine"],
    ["shrimp", "prawn"],
    ["powdered sugar", "confectioners sugar", "icing sugar"],
    ["pasta", "spaghetti", "penne", "linguine", "fettuccine", "macaroni", "noodle"],
    ["pepper", "black pepper", "peppercorn", "ground pepper"],
    ["stock", "broth"],
    ["cheese", "cheddar", "mozzarella", "parmesan", "feta"],
    ["chili flakes", "red pepper flakes"],
    ["bread crumbs", "breadcrumb", "panko"],
    ["oil", "olive oil", "vegetable oil", "canola oil", "cooking oil"],
]

# name -> (quantity, unit, confidence)
COMMON_QUANTITIES: dict[str, tuple[float, str, float]] = {
    "salt": (1, "tsp", 0.8),
    "pepper": (0.5, "tsp", 0.7),
    "black pepper": (0.5, "tsp", 0.7),
    "garlic powder": (1, "tsp", 0.7),
    "onion powder": (1, "tsp", 0.7),
    "paprika": (1, "tsp", 0.6),
    "oregano": (1, "tsp", 0.6),
    "basil": (1, "tsp", 0.6),
    "thyme": (1, "tsp", 0.6),
    "rosemary": (1, "tsp", 0.6),
    "cumin": (1, "tsp", 0.6),
    "cinnamon": (1, "tsp", 0.6),
    "vanilla extract": (1, "tsp", 0.8),
    "baking powder": (1, "tsp", 0.8),
    "baking soda": (0.5, "tsp", 0.8),
    "olive oil": (2, "tbsp", 0.7),
    "vegetable oil": (2, "tbsp", 0.7),
    "butter": (2, "tbsp", 0.7),
    "lemon juice": (1, "tbsp", 0.7),
    "lime juice": (1, "tbsp", 0.7),
    "soy sauce": (1, "tbsp", 0.7),
    "worcestershire sauce": (1, "tsp", 0.6),
    "hot sauce": (0.5, "tsp", 0.5),
}

# (pattern, quantity, unit, confidence); first match wins
CONTEXTUAL_AMOUNTS: list[tuple[re.Pattern, float | None, str, float]] = [
    (re.compile(r"\b(?:pinch|dash)(?:es)?\s+of\b", re.IGNORECASE), 1, "pinch", 0.9),
    (re.compile(r"\bto\s+taste\b", re.IGNORECASE), None, "to taste", 0.8),
    (re.compile(r"\bsprinkle\b", re.IGNORECASE), 1, "pinch", 0.7),
    (re.compile(r"\ba\s+little\b", re.IGNORECASE), 1, "pinch", 0.6),
    (re.compile(r"\ba\s+bit\s+of\b", re.IGNORECASE), 1, "pinch", 0.6),
    (re.compile(r"\bdrizzle\b", re.IGNORECASE), 1, "tbsp", 0.6),
]

# Marks an ingredient as optional when it shares an instruction line with it
OPTIONAL_QUALIFIER_RE = re.compile(r"\b(?:if desired|optional(?:ly)?|to taste)\b", re.IGNORECASE)

# Raises confidence that an unlisted mention is a real ingredient
QUALIFIER_CONTEXT_RE = re.compile(
    r"\b(?:if desired|optional(?:ly)?|to taste|garnish|pinch|dash|sprinkle|drizzle|season(?:ed)? with)\b",
    re.IGNORECASE,
)

# Seasonings that recipes routinely leave out of the steps
PANTRY_STAPLES = {"salt", "pepper", "black pepper", "oil", "olive oil", "vegetable oil", "water"}
