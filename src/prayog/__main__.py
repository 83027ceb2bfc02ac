## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# prayog — Interactive read-evaluate-print session for a PHP-flavoured scripting language.
#

import sys
import logging
from pathlib import Path
from dataclasses import dataclass

import click

from .config import Config
from .errors import PrayogSyntaxError
from .parser import parse, format_parse_error_context
from .runtime import Runtime
from .evaluator import Evaluator, Value, Failure, ExitRequested, failure_from_exception
from .formatting import Formatter, write_without_ansi
from .input import ReadlineInput, StreamInput
from .repl import Repl


@dataclass(frozen=True)
class RuntimeConfig:
    verbose: int
    plain: bool
    session: Config


class PrayogRunner:
    def __init__(self, config: RuntimeConfig):
        self.verbose = config.verbose
        self.plain = config.plain
        self.config = config.session

        if self.plain:
            sys.stdout.write = write_without_ansi(sys.stdout.write)
            sys.stderr.write = write_without_ansi(sys.stderr.write)
        if self.verbose:
            logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                                format='%(levelname)s %(name)s: %(message)s')
        sys.setrecursionlimit(max(sys.getrecursionlimit(), 10_000))

        self.evaluator = Evaluator(Runtime(), config=self.config)
        self.formatter = Formatter(self.config.color_output)
        self.failure = False

    def _report(self, failure: Failure, filename: str, source: str, exc: Exception | None = None) -> None:
        print(self.formatter.format_error(failure), file=sys.stderr)
        if isinstance(exc, PrayogSyntaxError) and source.strip():
            print(format_parse_error_context(filename, exc.line, exc.column, exc.token, source=source), file=sys.stderr)
        self.failure = True

    def execute_file(self, source: str, filename: str) -> None:
        """Whole file as one statement unit, so its own `return` decides the value."""
        try:
            parse(source, filename=filename)
        except PrayogSyntaxError as exc:
            return self._report(failure_from_exception(exc), filename, source, exc)
        if isinstance(outcome := self.evaluator.evaluate(source, as_statement=True), Failure):
            self._report(outcome, filename, source)

    def execute_code(self, code: str) -> None:
        outcome = self.evaluator.evaluate(code)
        match outcome:
            case Value(value=value):
                print(self.formatter.format(value))
            case Failure():
                self._report(outcome, '<INPUT>', code)
            case ExitRequested():
                raise SystemExit(0)

    def repl(self) -> None:
        if sys.stdin.isatty():
            source = ReadlineInput(self.config.get_history_file())
        else:
            source = StreamInput(sys.stdin)
        Repl(source, config=self.config, evaluator=self.evaluator, formatter=self.formatter).start()

    def finalize(self) -> int:
        return 1 if self.failure else 0


@click.group(invoke_without_command=True)
@click.option('--verbose', '-v', default=0, count=True, help='Log session debug traces to stderr.')
@click.option('--plain', '-p', is_flag=True, help='Strip ANSI color codes from all output.')
@click.option('--prompt', default=None, help='Prompt shown before each new unit.')
@click.option('--history-file', default=None, type=click.Path(dir_okay=False), help='File used to persist line history.')
@click.option('--welcome', default=None, help='Replace the welcome message printed when the session starts.')
@click.pass_context
def cli(ctx: click.Context, verbose: int, plain: bool, prompt: str | None, history_file: str | None,
        welcome: str | None) -> None:
    options = {'prompt': prompt} if prompt is not None else {}
    session = Config(history_file=history_file, color_output=not plain, welcome_message=welcome, **options)
    ctx.ensure_object(dict)
    ctx.obj['config'] = RuntimeConfig(verbose=verbose, plain=plain, session=session)

    if ctx.invoked_subcommand is None:
        ctx.invoke(run_repl)


@cli.command('run-repl')
@click.pass_context
def run_repl(ctx: click.Context) -> None:
    runner = PrayogRunner(ctx.obj['config'])
    runner.repl()
    ctx.exit(runner.finalize())


@cli.command('run-file')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def run_file(ctx: click.Context, script) -> None:
    runner = PrayogRunner(ctx.obj['config'])
    filename = '<STDIN>' if script.name == '<stdin>' else script.name
    runner.execute_file(script.read(), filename)
    ctx.exit(runner.finalize())


@cli.command('run-code')
@click.argument('snippets', nargs=-1, required=True)
@click.pass_context
def run_code(ctx: click.Context, snippets: tuple[str, ...]) -> None:
    runner = PrayogRunner(ctx.obj['config'])
    for code in snippets:
        runner.execute_code(code)
    ctx.exit(runner.finalize())


def main(argv: list[str] | None = None) -> None:
    a = list(sys.argv[1:] if argv is None else argv)
    g, r, i = [], [], 0
    while i < len(a):
        if a[i] in ('--prompt', '--history-file', '--welcome') and i + 1 < len(a):
            g += a[i:i+2]; i += 2
        elif a[i] in ('--plain', '-p') or a[i].startswith('--prompt=') or a[i].startswith('--history-file=') \
                or a[i].startswith('--welcome=') or (a[i].startswith('-v') and set(a[i][1:]) == {'v'}) or a[i] == '--verbose':
            g.append(a[i]); i += 1
        else:
            r.append(a[i]); i += 1

    if r and r[0] in cli.commands:
        cmd, tail = r[0], r[1:]
    elif len(r) == 0:
        cmd, tail = ('run-file', ['-']) if not sys.stdin.isatty() else ('run-repl', [])
    elif '--repl' in r or '-r' in r:
        cmd, tail = 'run-repl', []
    elif r[0] in ('-c', '--command'):
        cmd, tail = 'run-code', r[1:]
    elif r == ['-'] or (len(r) == 1 and Path(r[0]).is_file()):
        cmd, tail = 'run-file', r
    else:
        raise SystemExit(f"Unknown arguments: {' '.join(r)}")

    cli.main(args=[*g, cmd, *tail], prog_name='prayog')


if __name__ == "__main__":
    main()
