"""
CLI tool for managing stored system prompts.

Usage:
    python -m app.cli list
    python -m app.cli show <prompt_id>
    python -m app.cli create --name "Launch" --text "Write a launch tweet." --temperature 0.9
    python -m app.cli delete <prompt_id>
    python -m app.cli seed
    python -m app.cli seed --force
"""
import argparse
import sys
from typing import List, Optional

from app.api.deps import build_prompt_repository
from app.core.config import load_settings
from app.core.exceptions import PostGeneratorException
from app.repositories.prompt_repository import PromptRepository
from app.services.ai.prompt_defaults import BUILTIN_PROMPT_NAME, BUILTIN_SYSTEM_PROMPT


def list_prompts(repository: PromptRepository) -> None:
    """List all prompts."""
    prompts = repository.list_all()

    if not prompts:
        print("No prompts found.")
        print("Run 'python -m app.cli seed' to create the default prompt.")
        return

    print(f"\n{'ID':<38} {'Name':<30} {'Active':<8} {'Updated':<12}")
    print("=" * 90)
    for prompt in prompts:
        active = 'Yes' if prompt.is_active else 'No'
        updated = prompt.updated_at.split('T')[0] if prompt.updated_at else 'N/A'
        name = prompt.name if len(prompt.name) <= 28 else prompt.name[:27] + "…"
        print(f"{prompt.id:<38} {name:<30} {active:<8} {updated:<12}")

    print(f"\nTotal: {len(prompts)} prompt(s)")


def show_prompt(repository: PromptRepository, prompt_id: str) -> None:
    """Show a prompt in full."""
    prompt = repository.require(prompt_id)

    print(f"\nPrompt '{prompt.name}':")
    print("=" * 60)
    print(f"  {'id':<16}: {prompt.id}")
    print(f"  {'active':<16}: {prompt.is_active}")
    print(f"  {'created':<16}: {prompt.created_at}")
    print(f"  {'updated':<16}: {prompt.updated_at}")
    for key, value in prompt.model_config.items():
        print(f"  {key:<16}: {value}")
    print("\n" + prompt.prompt_text)


def create_prompt(repository: PromptRepository, args) -> None:
    """Create a prompt from command-line arguments."""
    model_config = {}
    if args.temperature is not None:
        model_config['temperature'] = args.temperature
    if args.max_output_tokens is not None:
        model_config['maxOutputTokens'] = args.max_output_tokens
    if args.top_p is not None:
        model_config['topP'] = args.top_p
    if args.top_k is not None:
        model_config['topK'] = args.top_k

    prompt = repository.create(name=args.name, prompt_text=args.text, model_config=model_config)
    print(f"\n✓ Prompt '{prompt.name}' created with id {prompt.id}")


def delete_prompt(repository: PromptRepository, prompt_id: str) -> None:
    """Delete a prompt."""
    repository.delete(prompt_id)
    print(f"\n✓ Prompt {prompt_id} deleted")


def seed_prompts(repository: PromptRepository, force: bool = False) -> None:
    """Create the default prompt from the built-in instruction."""
    if repository.count() > 0 and not force:
        print("Prompt store is not empty; nothing to seed. Use --force to add the default prompt anyway.")
        return

    prompt = repository.create(name=BUILTIN_PROMPT_NAME, prompt_text=BUILTIN_SYSTEM_PROMPT)
    print(f"\n✓ Seeded prompt '{prompt.name}' with id {prompt.id}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m app.cli",
        description="Manage stored system prompts"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List all prompts")

    show_parser = subparsers.add_parser("show", help="Show a prompt")
    show_parser.add_argument("prompt_id")

    create_parser = subparsers.add_parser("create", help="Create a prompt")
    create_parser.add_argument("--name", required=True)
    create_parser.add_argument("--text", required=True, help="Prompt text")
    create_parser.add_argument("--temperature", type=float)
    create_parser.add_argument("--max-output-tokens", type=int)
    create_parser.add_argument("--top-p", type=float)
    create_parser.add_argument("--top-k", type=int)

    delete_parser = subparsers.add_parser("delete", help="Delete a prompt")
    delete_parser.add_argument("prompt_id")

    seed_parser = subparsers.add_parser("seed", help="Create the default prompt")
    seed_parser.add_argument("--force", action="store_true", help="Seed even if prompts exist")

    return parser


def main(argv: Optional[List[str]] = None, repository: Optional[PromptRepository] = None) -> int:
    args = build_parser().parse_args(argv)
    if repository is None:
        repository = build_prompt_repository(load_settings())

    try:
        if args.command == "list":
            list_prompts(repository)
        elif args.command == "show":
            show_prompt(repository, args.prompt_id)
        elif args.command == "create":
            create_prompt(repository, args)
        elif args.command == "delete":
            delete_prompt(repository, args.prompt_id)
        elif args.command == "seed":
            seed_prompts(repository, force=args.force)
    except PostGeneratorException as e:
        print(f"\nError: {e.message}", file=sys.stderr)
        return 1

    return 0
