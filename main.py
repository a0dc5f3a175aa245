import logging
import signal

from rich.console import Console

from switchyard import *

logger = logging.getLogger("yo")

console = Console(highlight=False)
builder = ProgramBuilder("yo", 'A tool that prints "yo"', version="v0.1.0", commit="ef2f64f", stdout=console)
builder.flag("-d", descr="enable debug logging")


@builder.before
def setup(context):
    if context.flags["d"]:
        configure_logging(logging.DEBUG)


@builder.action
def greet(context, args):
    # On ^C or SIGTERM, cancel the dispatch context.
    def interrupt(signum, frame):
        logger.info("Received %s, exiting.", signal.Signals(signum).name)
        context.cancel()

    signal.signal(signal.SIGINT, interrupt)
    signal.signal(signal.SIGTERM, interrupt)

    console.print("yo")


if __name__ == '__main__':
    raise SystemExit(builder.build().main())
