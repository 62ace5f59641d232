import asyncio
import sys
from pathlib import Path

from recipe_catalog.client.api import RecipeApi
from recipe_catalog.recipes import load_recipes


async def import_recipes(path, api):
    data = load_recipes(path)
    existing = {r.title for r in await api.get_all_recipes()}
    added = 0
    for r in data:
        title = r.get('title')
        if not title or title in existing:
            continue
        await api.create_recipe(r)
        existing.add(title)
        added += 1
    return added


async def main():
    default = Path(__file__).resolve().parents[1] / 'data' / 'recipes.json'
    p = Path(sys.argv[1]) if len(sys.argv) > 1 else default
    if not p.exists():
        print(f'{p} not found')
        return
    async with RecipeApi() as api:
        added = await import_recipes(p, api)
    print(f'Imported {added} recipes')


if __name__ == '__main__':
    asyncio.run(main())
