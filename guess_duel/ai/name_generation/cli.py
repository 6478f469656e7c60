"""
Command-line interface for trying out secret name generation.
"""

import argparse
import asyncio
import logging

from guess_duel.ai.name_generation.generator import NameGenerator
from guess_duel.config import Category, load_settings, names_path
from guess_duel.utils.name_corpus import NameCorpus

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

async def main():
    """Run the name generation CLI."""
    parser = argparse.ArgumentParser(description='Generate secret names for Guess Duel')
    parser.add_argument('--category', type=str, choices=[c.value for c in Category],
                        help='Category to draw from (defaults to the configured one)')
    parser.add_argument('--count', type=int, default=1, help='Number of names to generate')
    parser.add_argument('--exclude', type=str, default=None, help='Name that must not be produced')
    parser.add_argument('--ai-only', action='store_true', help='Skip the local name corpus')

    args = parser.parse_args()

    settings = load_settings()
    settings.ensure_playable()
    category = Category(args.category) if args.category else settings.category

    corpus = None if args.ai_only else NameCorpus.load(names_path())
    generator = NameGenerator(corpus=corpus)

    for i in range(args.count):
        name = await generator.generate(category, args.exclude, settings.provider_config())
        print(f"{i + 1}: {name}")

def run():
    """Console script entry point."""
    asyncio.run(main())

if __name__ == "__main__":
    run()
