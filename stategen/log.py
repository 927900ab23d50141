"""Logger setup for the generator.

Example:
    from stategen.log import get_logger

    logger = get_logger("processor")
    logger.info("Generated %s", name)
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "stategen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a stategen logger, configuring the root stategen logger once.

    Diagnostics go to stderr so generated output written to stdout stays clean.
    """
    root = logging.getLogger(_LOGGER_NAME)
    if not root.handlers:
        root.setLevel(logging.INFO)
        root.propagate = False
        root.addHandler(
            RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
        )
    return root if name is None else root.getChild(name)


def set_verbose(verbose: bool) -> None:
    """Switch stategen diagnostics between INFO and DEBUG."""
    get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)
