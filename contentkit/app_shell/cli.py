import argparse
import logging
import sys

from contentkit.adapters.sqlite.migrator import SQLiteMigrator
from contentkit.adapters.sqlite.repos import SQLiteContentItemRepo, SQLiteContentModelRepo
from contentkit.api.deps import Settings
from contentkit.components.content import ListItemsInput
from contentkit.components.content import run_list as run_list_items
from contentkit.components.content_models import ListModelsInput
from contentkit.components.content_models import run_list as run_list_models
from contentkit.domain.errors import summarize
from contentkit.rules.loader import load_rules
from contentkit.rules.models import ContentRules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def load_content_rules(settings: Settings) -> ContentRules:
    if not settings.rules_path.exists():
        logger.error(f"Rules file {settings.rules_path} not found.")
        sys.exit(1)
    return load_rules(settings.rules_path).content


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(settings.db_path).run_migrations()
    if applied:
        for name in applied:
            print(f"Applied {name}")
    else:
        print("Database is up to date.")


def handle_models(settings: Settings, args: argparse.Namespace) -> None:
    result = run_list_models(ListModelsInput(), repo=SQLiteContentModelRepo(settings.db_path))
    if not result.models:
        print("No content models.")
        return
    for model in result.models:
        print(f"{model.slug}\t{model.display_name}\t{len(model.fields)} fields")


def handle_items(settings: Settings, args: argparse.Namespace) -> None:
    rules = load_content_rules(settings)
    inp = ListItemsInput(model_slug=args.model, status=args.status, limit=args.limit)
    result = run_list_items(
        inp,
        items=SQLiteContentItemRepo(settings.db_path),
        models=SQLiteContentModelRepo(settings.db_path),
        rules=rules,
    )
    if not result.success:
        logger.error(summarize(result.errors))
        sys.exit(1)

    for item in result.items:
        updated = item.updated_at.isoformat()
        print(f"{item.slug or item.id}\t{item.status}\tv{item.version}\t{updated}")
    print(f"{len(result.items)} of {result.total} items.")


def main() -> None:
    parser = argparse.ArgumentParser(description="ContentKit CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # models
    subparsers.add_parser("models", help="List content models")

    # items
    items_parser = subparsers.add_parser("items", help="List items of a content model")
    items_parser.add_argument("model", help="Model slug")
    items_parser.add_argument(
        "--status", choices=["draft", "published", "archived"], help="Only items in this status"
    )
    items_parser.add_argument("--limit", type=int, help="Maximum number of items to show")

    args = parser.parse_args()

    settings = Settings()

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "models":
        handle_models(settings, args)
    elif args.command == "items":
        handle_items(settings, args)


if __name__ == "__main__":
    main()
