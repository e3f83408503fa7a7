"""
Print messages to terminal depending on a given verbosity level.

Similar to the Python logging module. Meant to be used as a singleton via `output`:
all modules of sdsvoting report through `sdsvoting.output.output`, so a single call of
`output.set_verbosity()` controls how much is printed.

The verbosity levels and what is reported on each level:

- CRITICAL
- ERROR
- WARNING (default, nothing is printed by computations)
- INFO: lotteries returned by social decision schemes, whether a lottery is ex-post
  efficient or SD-efficient, whether an axiom holds for a profile
- DETAILS: witnesses and counterexamples, i.e., dominating alternatives and lotteries,
  manipulations and permutations violating anonymity or neutrality
- DEBUG: LP objective values and solver status codes
- DEBUG2: sizes of linear programs and raw solver solutions

With a `logging.Logger` attached (see `Output.set_logger()`), messages are additionally
forwarded to this logger irrespective of the verbosity.
"""

import textwrap

# should match the values defined in the logging module!
CRITICAL = 50
ERROR = 40
WARNING = 30
INFO = 20
DETAILS = 15
DEBUG = 10
DEBUG2 = 5

DEFAULT = WARNING

WIDTH = 70  # default line width for output

VERBOSITY_TO_NAME = {
    CRITICAL: "CRITICAL",
    ERROR: "ERROR",
    WARNING: "WARNING",
    INFO: "INFO",
    DETAILS: "DETAILS",
    DEBUG: "DEBUG",
    DEBUG2: "DEBUG2",
}


class Output:
    """
    Handling the output based on the current verbosity level.

    Inspired by ``logging.Logger()``: a verbosity level is stored and only messages with at
    least this importance are printed.

    Parameters
    ----------
        verbosity : int
            Verbosity level, one of the constants defined in this module.

        logger : logging.Logger, optional
             Optional logger.

             All messages are passed on to this logger (independently of `verbosity`),
             DETAILS and DEBUG2 are logged as DEBUG.
    """

    def __init__(self, verbosity=DEFAULT, logger=None):
        self.verbosity = verbosity
        self.logger = logger

    def set_verbosity(self, verbosity=DEFAULT):
        """
        Set verbosity level.

        Parameters
        ----------
            verbosity : int
                Verbosity level.
        """
        if verbosity not in VERBOSITY_TO_NAME:
            raise ValueError(f"Unknown verbosity level {verbosity}.")
        self.verbosity = verbosity

    def set_logger(self, logger=None):
        """
        Forward all messages to `logger` (or stop forwarding if `logger` is None).

        Parameters
        ----------
            logger : logging.Logger, optional
                The logger.
        """
        self.logger = logger

    def _print(self, verbosity, msg, wrap, indent):
        if verbosity >= self.verbosity:
            if wrap:
                msg = "\n".join(
                    textwrap.fill(
                        line,
                        width=WIDTH,
                        break_long_words=False,
                        initial_indent=indent,
                        subsequent_indent=indent,
                    )
                    for line in msg.split("\n")
                )
            print(msg)

        if self.logger:
            self.logger.log(verbosity if verbosity not in (DETAILS, DEBUG2) else DEBUG, msg)

    def debug2(self, msg, wrap=True, indent=""):
        """Print a message with verbosity level DEBUG2."""
        self._print(DEBUG2, msg, wrap, indent)

    def debug(self, msg, wrap=True, indent=""):
        """Print a message with verbosity level DEBUG."""
        self._print(DEBUG, msg, wrap, indent)

    def details(self, msg, wrap=True, indent=""):
        """
        Print a message with verbosity level DETAILS.

        Parameters
        ----------
            msg : str
                The message.

            wrap : bool, optional
                Wrap the message at `WIDTH` characters (if too long).

            indent : str, optional
                Indent each line with the this string.
        """
        self._print(DETAILS, msg, wrap, indent)

    def info(self, msg, wrap=True, indent=""):
        """
        Print a message with verbosity level INFO.

        Parameters
        ----------
            msg : str
                The message.

            wrap : bool, optional
                Wrap the message at `WIDTH` characters (if too long).

            indent : str, optional
                Indent each line with the this string.
        """
        self._print(INFO, msg, wrap, indent)

    def warning(self, msg, wrap=True, indent=""):
        """Print a message with verbosity level WARNING."""
        self._print(WARNING, msg, wrap, indent)

    def error(self, msg, wrap=True, indent=""):
        """Print a message with verbosity level ERROR."""
        self._print(ERROR, msg, wrap, indent)

    def critical(self, msg, wrap=True, indent=""):
        """Print a message with verbosity level CRITICAL."""
        self._print(CRITICAL, msg, wrap, indent)


output = Output()
