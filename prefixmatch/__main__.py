import logging
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import IO, List, Mapping, Optional, Sequence

from prefixmatch_log import LogFormat, LogLevel, basic_config

from .config import Config
from .counters import get_statistics
from .exceptions import PrefixMatchError
from .matcher import MatchStrategy
from .service import PrefixMatchService


log = logging.getLogger("prefixmatch")

executable = Path(sys.executable)
module_name = "prefixmatch"

SAMPLE_PREFIXES = ("foo", "tru", "true", "apple", "app", "a", "mobile")
NO_MATCH = "<none>"
EXIT_COMMANDS = frozenset(("exit", "quit"))
PROMPT = "prefixmatch> "
EXIT_INTERRUPTED = 130

HELP = """\
Commands:
  <string>         match a single string, e.g. truecaller
  <s1>, <s2>, ...  match comma separated strings concurrently
  stats            show lookup statistics
  help             show this help message
  exit             quit the application"""


parser = ArgumentParser(
    prog=f"{executable.name} -m {module_name}",
    description="Interactive longest prefix matching. Defaults are taken "
                "from PREFIXMATCH_* environment variables.",
)
parser.add_argument(
    "-f", "--prefix-file",
    help="File with prefixes, one per line (default: built-in sample)",
)
parser.add_argument(
    "-S", "--strategy", choices=MatchStrategy.choices(),
    help="Matching strategy",
)
parser.add_argument(
    "-p", "--pool-size", type=int, help="Batch worker pool size",
)
parser.add_argument(
    "-t", "--shutdown-timeout", type=float,
    help="Seconds to wait for the worker pool on exit",
)
parser.add_argument(
    "-l", "--log-level", choices=LogLevel.choices(), help="Logging level",
)
parser.add_argument(
    "-F", "--log-format", choices=LogFormat.choices(),
    help="Logging format",
)


def format_match(match: Optional[str]) -> str:
    return NO_MATCH if match is None else repr(match)


def format_batch(results: Mapping[str, Optional[str]]) -> str:
    rows = [(repr(key), format_match(value)) for key, value in results.items()]
    input_width = max([20] + [len(key) + 2 for key, _ in rows])
    match_width = max([20] + [len(value) + 2 for _, value in rows])

    row_format = "{:<%d} | {:<%d}" % (input_width, match_width)
    separator = "-" * (input_width + match_width + 3)

    lines = [row_format.format("Input string", "Matched prefix"), separator]
    lines.extend(row_format.format(key, value) for key, value in rows)
    lines.append(separator)
    return "\n".join(lines)


def format_statistics() -> str:
    return "\n".join(
        f"{kind.__name__}[{name or '-'}].{metric} = {value}"
        for kind, name, metric, value in sorted(
            get_statistics(), key=lambda x: (x.kind.__name__, x.metric),
        )
    )


def split_batch(line: str) -> List[str]:
    return list(dict.fromkeys(filter(None, map(str.strip, line.split(",")))))


def process_line(
    service: PrefixMatchService, line: str, stdout: IO[str],
) -> bool:
    """ Handles one REPL line, returns ``False`` when the REPL must stop """
    line = line.strip()
    command = line.lower()

    if not line:
        return True

    if command in EXIT_COMMANDS:
        return False

    if command == "help":
        print(HELP, file=stdout)
        return True

    if command == "stats":
        print(format_statistics(), file=stdout)
        return True

    try:
        if "," in line:
            inputs = split_batch(line)
            if not inputs:
                print(
                    "Error: no strings provided for batch match", file=stdout,
                )
                return True

            log.debug("Processing batch of %d strings", len(inputs))
            print(format_batch(service.match_batch(inputs)), file=stdout)
        else:
            match = service.match(line)
            print(
                f"Longest prefix for {line!r}: {format_match(match)}",
                file=stdout,
            )
    except PrefixMatchError as e:
        log.debug("Lookup failed", exc_info=True)
        print(f"Error: {e}", file=stdout)

    return True


def repl(
    service: PrefixMatchService,
    stdin: IO[str] = sys.stdin, stdout: IO[str] = sys.stdout,
) -> None:
    interactive = stdin.isatty()
    print(HELP, file=stdout)

    while True:
        if interactive:
            print(PROMPT, end="", file=stdout, flush=True)

        line = stdin.readline()
        if not line:
            break

        if not process_line(service, line, stdout):
            break

    print("Goodbye!", file=stdout)


def main(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    stdin: IO[str] = sys.stdin,
    stdout: IO[str] = sys.stdout,
) -> int:
    arguments = parser.parse_args(argv)

    try:
        config = Config.from_env(environ).override(
            prefix_file=arguments.prefix_file,
            strategy=arguments.strategy,
            pool_size=arguments.pool_size,
            shutdown_timeout=arguments.shutdown_timeout,
            log_level=arguments.log_level,
            log_format=arguments.log_format,
        )
    except PrefixMatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    basic_config(level=config.log_level, log_format=config.log_format)

    try:
        service = PrefixMatchService.from_config(
            config, default_prefixes=SAMPLE_PREFIXES,
        )
    except PrefixMatchError as e:
        log.error("Failed to initialize: %s", e)
        return 1

    with service:
        try:
            repl(service, stdin=stdin, stdout=stdout)
        except KeyboardInterrupt:
            log.warning("Interrupted, shutting down...")
            return EXIT_INTERRUPTED

    return 0


if __name__ == "__main__":
    sys.exit(main())
