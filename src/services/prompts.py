"""Prompt templates for recipe extraction, remixing and step preparation."""

import json

RECIPE_EXTRACTION_PROMPT = """You are an expert chef. Extract the recipe from this cooking video.

Return ONLY a raw JSON object (no markdown formatting) with this schema:
{
  "title": "Recipe Title",
  "description": "Short description",
  "ingredients": [
    {"name": "item", "amount": "1", "unit": "cup"}
  ],
  "instructions": ["Step 1", "Step 2"],
  "difficulty": "easy" | "medium" | "hard",
  "cookingTime": 30,
  "step0Summary": "Two or three friendly sentences read aloud before cooking starts"
}

Rules:
- cookingTime is the total time in minutes.
- List every ingredient shown or mentioned, in the order it is used.
- Keep each instruction to a single action.
- If the video is not a recipe, return {"title": "", "ingredients": [], "instructions": []}."""


def get_recipe_extraction_prompt(auxiliary_text: str | None = None) -> str:
    """Generate the extraction prompt, with platform text as extra context."""
    if not auxiliary_text:
        return RECIPE_EXTRACTION_PROMPT
    return f"""{RECIPE_EXTRACTION_PROMPT}

Additional context from the post caption (may contain exact quantities):
\"\"\"{auxiliary_text}\"\"\""""


STEP_PREPARATION_SYSTEM_PROMPT = """You are a calm sous chef preparing a cook for each step of a recipe.

For EVERY instruction step, in order, return what the cook should have ready
before starting it.

Respond ONLY with a valid JSON array, one object per step:
[
  {
    "step_index": 0,
    "summary": "One spoken sentence introducing the step",
    "ingredients_needed": ["ingredient", ...],
    "equipment": ["tool", ...],
    "tips": ["short tip", ...]
  }
]"""


def get_step_preparation_prompt(
    title: str, ingredients: list[dict], instructions: list[str]
) -> str:
    """Generate prompt for preparing every step of a recipe."""
    steps_str = "\n".join(f"{i}. {step}" for i, step in enumerate(instructions))
    return f"""Recipe: {title}

Ingredients:
{json.dumps(ingredients, ensure_ascii=False)}

Steps:
{steps_str}

Respond with JSON only."""


REMIX_SYSTEM_PROMPT = """You are a Michelin-starred sous chef adapting a home cook's recipe to their request.

Rules:
- Safety first: refuse changes that would make the dish unsafe to eat and explain why in chefsNote.
- The result must still be edible and cookable with ordinary home equipment.
- Adjust every affected component (quantities, timings, techniques), not just the ingredient list.
- Rewrite the instructions so they match the new ingredients.
- changedIngredients lists the names of ingredients that were added or altered.

Respond ONLY with a raw JSON object (no markdown formatting):
{
  "title": "New Recipe Title",
  "description": "Short description",
  "ingredients": [
    {"name": "item", "amount": "1", "unit": "cup"}
  ],
  "instructions": ["Step 1", "Step 2"],
  "chefsNote": "One or two sentences on what changed and why",
  "changedIngredients": ["item"],
  "difficulty": "easy" | "medium" | "hard",
  "cookingTime": 30
}"""


def get_remix_prompt(recipe: dict, request: str) -> str:
    """Generate prompt for remixing a recipe according to a user's request."""
    return f"""Original recipe:
{json.dumps(recipe, ensure_ascii=False)}

Requested change:
\"\"\"{request}\"\"\"

Respond with JSON only."""
