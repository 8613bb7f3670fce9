"""
Show command - prints the first interpreter that satisfies the filters.
"""

import logging

from pyconfigkit.cli.utils import build_predicate, build_selector, render
from pyconfigkit.core.exceptions import NoMatchError

logger = logging.getLogger(__name__)

# Exit status when no interpreter satisfies the filters
EXIT_NO_MATCH = 2


def run(args) -> int:
    """
    Run the show command.

    Args:
        args: Parsed command-line arguments

    Returns:
        0 if an interpreter was found, 2 if none matched
    """
    selector = build_selector(args)
    predicate = build_predicate(args)

    try:
        config = selector.find_matching(predicate, deadline=args.deadline)
    except NoMatchError as e:
        logger.error(str(e))
        if args.report and e.report is not None and e.report.outcomes:
            print(e.report.details())
        return EXIT_NO_MATCH

    print(render([config], args.format))
    return 0
