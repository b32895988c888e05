import logging


COLORS = {
    "DEBUG": "\033[36m",  # cyan
    "INFO": "\033[32m",  # green
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[1;31m",  # bold red
}
COLOR_RESET = "\033[0m"

_handler = None


class ColorFormatter(logging.Formatter):
    def format(self, record):
        # Work on a copy so other handlers still see the plain level name.
        record = logging.makeLogRecord(record.__dict__)
        color = COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname}{COLOR_RESET}"
        return super().format(record)


def setup_logging(debug: bool = False, color: bool = True):
    global _handler
    if _handler is not None:
        logging.root.removeHandler(_handler)

    _handler = logging.StreamHandler()
    formatter = ColorFormatter if color else logging.Formatter
    _handler.setFormatter(formatter("%(levelname)s %(message)s"))
    logging.root.addHandler(_handler)
    logging.root.setLevel(logging.DEBUG if debug else logging.INFO)
    return _handler
