"""
List command - prints every interpreter that satisfies the filters.
"""

import logging

from pyconfigkit.cli.utils import build_predicate, build_selector, render

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        0, also when no interpreter matched
    """
    selector = build_selector(args)
    predicate = build_predicate(args)

    configs = list(selector.find_all_matching(predicate, deadline=args.deadline))
    logger.info(f"Found {len(configs)} matching interpreter(s)")

    if configs or args.format != "text":
        print(render(configs, args.format))
    return 0
