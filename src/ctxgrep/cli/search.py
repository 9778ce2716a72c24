"""CLI search command for ctxgrep"""

import sys

import click
from pydantic import ValidationError

from ctxgrep.__version__ import __version__
from ctxgrep.aggregator import OutputSink, render_file_result
from ctxgrep.errors import PatternError
from ctxgrep.matcher import PatternMatcher
from ctxgrep.models import FileResult, SearchConfig, SearchReport
from ctxgrep.scheduler import SearchCallbacks, run_search
from ctxgrep.source import InputSource
from ctxgrep.utils import configure_logging


def build_sources(files: tuple[str, ...]) -> list[InputSource]:
    """
    Inputs in command-line order; standard input when no file is named.

    Standard input is one stream, so it is read once even when `-` is given
    several times.
    """
    if not files:
        return [InputSource.stdin()]

    sources = []
    stdin_seen = False
    for path in files:
        source = InputSource.from_path(path)
        if source.is_stdin:
            if stdin_seen:
                continue
            stdin_seen = True
        sources.append(source)
    return sources


def report_skipped(path: str, reason: str) -> None:
    click.echo(f'warning: {path}: {reason}', err=True)


def make_result_handler(
    config: SearchConfig,
    matcher: PatternMatcher,
    sink: OutputSink,
    show_file_name: bool,
    colorize: bool,
):
    """
    Build the per-file callback that renders and writes one block.

    Runs in the worker thread: the block is rendered without holding any lock,
    then written through the sink in one locked write. Read failures go to
    stderr after the block, never inside it.
    """
    blank_line_after = show_file_name and not config.list_files_only

    def on_file_result(result: FileResult) -> None:
        block = render_file_result(result, config, matcher, show_file_name=show_file_name, colorize=colorize)
        sink.write_block(block, blank_line_after=blank_line_after)
        if result.error is not None:
            click.echo(f'warning: {result.error}', err=True)

    return on_file_result


def exit_code_for(report: SearchReport) -> int:
    if report.failed or report.cancelled:
        return 1
    return 0


@click.command(context_settings=dict(max_content_width=100, help_option_names=['-h', '--help']))
@click.argument('pattern', type=str)
@click.argument('files', nargs=-1, type=str)
@click.option('--regexp', '-R', 'use_regex', is_flag=True, help='Match pattern as a regular expression')
@click.option('--ignore-case', '-i', is_flag=True, help='Ignore case when matching')
@click.option('--invert-match', '-v', 'invert', is_flag=True, help='Select non-matching lines')
@click.option('--list', '-l', 'list_files', is_flag=True, help='Only list files where a match is found')
@click.option('--context', '-C', type=click.IntRange(min=0), help='Show N lines of context on each side')
@click.option('--before', '-B', type=click.IntRange(min=0), help='Show N lines before each match')
@click.option('--after', '-A', type=click.IntRange(min=0), help='Show N lines after each match')
@click.option('--line-number', '-n', is_flag=True, help='Prefix each line with its line number')
@click.option('--with-filename', '-H', is_flag=True, help='Always print file names')
@click.option('--no-filename', '-f', is_flag=True, help="Don't print file names")
@click.option('--only-matching', '-o', is_flag=True, help='Print only the matched parts of lines')
@click.option('--no-color', '-c', is_flag=True, help="Don't colorize anything")
@click.option('--json', 'output_json', is_flag=True, help='Output results as JSON')
@click.option('--fail-fast', is_flag=True, help='Stop all files after the first read failure')
@click.option('--debug', '-D', is_flag=True, help='Show debug information on stderr')
@click.version_option(__version__, '-V', '--version', prog_name='ctxgrep')
def search_command(
    pattern,
    files,
    use_regex,
    ignore_case,
    invert,
    list_files,
    context,
    before,
    after,
    line_number,
    with_filename,
    no_filename,
    only_matching,
    no_color,
    output_json,
    fail_fast,
    debug,
):
    """
    Search FILES for lines matching PATTERN, with surrounding context.

    Files are searched concurrently; output for each file is printed as one
    uninterrupted block. With no FILES, or when a file is '-', standard input
    is read.

    \b
    Examples:
        ctxgrep error app.log                    # Literal substring
        ctxgrep -R 'err(or)?s?' a.log b.log      # Regular expression
        ctxgrep -i -C 2 -n timeout *.log         # Context and line numbers
        ctxgrep -l TODO src/*.py                 # Only list matching files
        cat app.log | ctxgrep -v DEBUG           # Standard input, inverted
    """
    configure_logging(debug)

    if with_filename and no_filename:
        click.echo('❌ Error: --with-filename and --no-filename are mutually exclusive', err=True)
        sys.exit(1)

    before_ctx, after_ctx = SearchConfig.resolve_context(context, before, after)
    show_file_names = True if with_filename else False if no_filename else None

    try:
        config = SearchConfig(
            pattern=pattern,
            use_regex=use_regex,
            ignore_case=ignore_case,
            invert=invert,
            before_context=before_ctx,
            after_context=after_ctx,
            list_files_only=list_files,
            show_line_numbers=line_number,
            show_file_names=show_file_names,
            only_matching=only_matching,
        )
        matcher = PatternMatcher.from_config(config)
    except PatternError as e:
        click.echo(f'❌ Error: {e}', err=True)
        sys.exit(1)
    except ValidationError as e:
        click.echo(f'❌ Error: invalid options: {e.errors()[0]["msg"]}', err=True)
        sys.exit(1)

    sources = build_sources(files)
    colorize = not no_color and not output_json and sys.stdout.isatty()
    show_file_name = config.file_names_shown(len(sources))

    callbacks = SearchCallbacks(on_file_skipped=report_skipped)
    if not output_json:
        sink = OutputSink(colorize=colorize)
        callbacks.on_file_result = make_result_handler(config, matcher, sink, show_file_name, colorize)

    try:
        report = run_search(sources, config, matcher=matcher, callbacks=callbacks, fail_fast=fail_fast)
    except KeyboardInterrupt:
        click.echo('❌ Interrupted', err=True)
        sys.exit(130)

    if output_json:
        click.echo(report.model_dump_json(indent=2))

    sys.exit(exit_code_for(report))


if __name__ == '__main__':
    search_command()
