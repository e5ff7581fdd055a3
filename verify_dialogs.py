import sys
import logging
import argparse
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from narrative.dialog import DialogCache, DialogGraph, ConditionEvaluator


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Load and check every dialog document.")
    parser.add_argument("base_path", nargs="?", default="Dialogs", help="Folder with one subfolder per language")
    parser.add_argument("--language", help="Language that must be present")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("DialogVerification")

    cache = DialogCache(args.base_path)
    count = cache.load_all_languages()
    if count == 0:
        logger.error(f"VERIFICATION FAILED: no dialogs loaded from {args.base_path}")
        return 1

    stats = cache.statistics()
    for language, total in stats.languages.items():
        logger.info(f"{language}: {total} dialogs")

    if args.language and not cache.is_language_supported(args.language):
        logger.error(f"VERIFICATION FAILED: language '{args.language}' missing")
        return 1

    # Every authored transition should point at a node that exists
    graph = DialogGraph(ConditionEvaluator())
    problems = 0
    for language in cache.supported_languages:
        for source_id in cache.source_ids(language):
            definition = cache.get_localized(source_id, language)
            ids = {node.id for node in definition.nodes}
            start = graph.resolve_initial(definition)
            if start not in ids:
                logger.warning(f"{language}/{source_id}: start node {start} does not exist")
                problems += 1
            for node in definition.nodes:
                targets = [node.next_id] + [c.next_id for c in node.next_conditions]
                for option in node.options:
                    targets.append(option.next_id)
                    targets.extend(c.next_id for c in option.conditional_next)
                for target in targets:
                    if target > 0 and target not in ids:
                        logger.warning(f"{language}/{source_id}: node {node.id} points at missing node {target}")
                        problems += 1

    if problems:
        logger.error(f"VERIFICATION FAILED: {problems} broken transitions")
        return 1

    logger.info(f"VERIFICATION SUCCESSFUL: {stats.total_definitions} dialogs in {count} languages.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
