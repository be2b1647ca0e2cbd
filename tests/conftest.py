"""
Pytest configuration and fixtures for Recipe Intake tests.
"""

import io
import os

import pytest

# Set test environment before importing recipe_intake modules
os.environ["INTAKE_ENV"] = "development"
os.environ["INTAKE_LOG_PROMPTS"] = "0"
os.environ["OPENAI_API_KEY"] = ""

from PIL import Image, ImageDraw

from recipe_intake.recipe_import.models import Ingredient


def make_png(width: int = 400, height: int = 300, text: str = "2 cups flour") -> bytes:
    """A small grayscale PNG with some dark text on it."""
    image = Image.new("L", (width, height), color=235)
    draw = ImageDraw.Draw(image)
    draw.text((20, 20), text, fill=20)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def png_factory():
    return make_png


@pytest.fixture
def sample_recipe_text():
    """Pasted recipe text with headers, bullets and numbered steps."""
    return """Garlic Butter Pasta

Serves 4
Prep time: 10 minutes
Cook time: 15 minutes

Ingredients:
- 8 oz spaghetti
- 3 tbsp butter
- 4 cloves garlic, minced
- 1/2 cup parmesan (optional)
- salt to taste

Instructions:
1. Boil the spaghetti until al dente.
2. Melt the butter and cook the garlic for 1 minute.
3. Toss the pasta with the garlic butter and parmesan.
4. Season with salt and pepper.

Nutrition: 450 calories | 15g protein
"""


@pytest.fixture
def flour_ingredients():
    return [Ingredient(name="flour", quantity=2, unit="cup", confidence=0.9)]


@pytest.fixture
def recipe_page_html():
    """A recipe page carrying schema.org JSON-LD inside an @graph."""
    return """<!DOCTYPE html>
<html>
<head>
<title>Best Pancakes | Example Kitchen</title>
<script type="application/ld+json">
{
  "@context": "https://schema.org",
  "@graph": [
    {"@type": "WebPage", "name": "Best Pancakes"},
    {
      "@type": "Recipe",
      "name": "Best Pancakes",
      "description": "Fluffy weekend pancakes.",
      "author": {"@type": "Person", "name": "Sam Baker"},
      "prepTime": "PT10M",
      "cookTime": "PT15M",
      "recipeYield": ["4", "4 servings"],
      "recipeIngredient": ["2 cups flour", "2 eggs", "1 1/2 cups milk", "1 tbsp sugar"],
      "recipeInstructions": [
        {"@type": "HowToStep", "text": "Whisk the flour, sugar, eggs and milk."},
        {"@type": "HowToStep", "text": "Cook on a hot griddle until golden."}
      ],
      "keywords": "breakfast, pancakes",
      "recipeCategory": "Breakfast",
      "nutrition": {"@type": "NutritionInformation", "calories": "320 calories"}
    }
  ]
}
</script>
</head>
<body><h1>Best Pancakes</h1></body>
</html>"""


@pytest.fixture
def microdata_page_html():
    """A recipe page marked up only with schema.org microdata."""
    return """<!DOCTYPE html>
<html>
<head><title>Tomato Toast</title></head>
<body>
<article itemscope itemtype="https://schema.org/Recipe">
  <h1 itemprop="name">Tomato Toast</h1>
  <p itemprop="description">Summer lunch in five minutes.</p>
  <span itemprop="author" itemscope itemtype="https://schema.org/Person"><span itemprop="name">Ana Cook</span></span>
  <meta itemprop="prepTime" content="PT5M">
  <ul>
    <li itemprop="recipeIngredient">2 slices bread</li>
    <li itemprop="recipeIngredient">1 tomato</li>
    <li itemprop="recipeIngredient">1 tbsp olive oil</li>
  </ul>
  <ol>
    <li itemprop="recipeInstructions">Toast the bread.</li>
    <li itemprop="recipeInstructions">Top with sliced tomato and drizzle with oil.</li>
  </ol>
</article>
</body>
</html>"""
