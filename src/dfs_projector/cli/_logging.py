import logging
import sys

# HTTP client chatter is only useful when debugging a provider.
_NOISY_LOGGERS = ("httpx", "httpcore")
_PACKAGE = "dfs_projector"


def _level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr so tables and JSON on stdout stay clean.

    ``verbose`` wins over ``quiet``. Only the projector's own loggers drop to
    DEBUG; HTTP libraries stay at WARNING unless verbose.
    """
    level = _level(verbose=verbose, quiet=quiet)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s", datefmt="%H:%M:%S"))
    root.addHandler(handler)

    logging.getLogger(_PACKAGE).setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
