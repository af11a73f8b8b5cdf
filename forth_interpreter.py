''' Forth evaluator : command line and interactive interpreter '''

import sys
import logging
from typing import Iterable, Optional, TextIO
import click
import colorama
from colorama import Fore as fg

from atoms import Error, ParseError, ParseIncomplete
from patterns import OperationPattern
from execution import DEFAULT_MAX_DEPTH, Report, run

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

class Interpreter:
    ''' The interactive interpreter. Every submitted program runs on a fresh stack and dictionary. '''

    PROMPT = fg.LIGHTWHITE_EX + '>> ' + fg.RESET
    PROMPT_CONTINUED = fg.LIGHTWHITE_EX + '.. ' + fg.RESET
    EXIT_WORDS = ('bye', 'exit')
    HELP_WORDS = ('help',)

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, showstack: bool = True,
                 out: Optional[TextIO] = None) -> None:
        self.max_depth = max_depth
        self.showstack = showstack
        self.out = out

    def print(self, *parts: object) -> None:
        print(*parts, file=self.out if self.out is not None else sys.stdout)

    def welcome(self) -> None:
        self.print(f'Welcome to the {fg.LIGHTWHITE_EX}Forth evaluator{fg.RESET}.')
        self.print(f'Type {fg.YELLOW}help{fg.RESET} for available operations, {fg.YELLOW}bye{fg.RESET} to leave.\n')
        self.print(f'Example:{fg.LIGHTBLACK_EX}  : square DUP * ; 1 3 square . .{fg.RESET}')

    def help(self) -> None:
        self.print(fg.LIGHTBLACK_EX + 'OPERATIONS' + fg.RESET)
        for word, opcode in OperationPattern.OPERATIONS.items():
            self.print(f'  {fg.YELLOW}{word}{fg.RESET}\r\t\t{fg.GREEN}( {OperationPattern.DESCRIPTIONS[opcode]} ){fg.RESET}')
        self.print(fg.LIGHTBLACK_EX + 'DEFINITIONS' + fg.RESET)
        self.print(f'  : {fg.MAGENTA}name{fg.RESET} ... ;\r\t\t{fg.GREEN}( defines a new word ){fg.RESET}')

    def print_stack(self, report: Report) -> None:
        self.print(fg.LIGHTBLACK_EX + 'STACK' + fg.RESET)
        values = report.stack[::-1]
        i = len(values)
        if i > 10:
            self.print(f'{fg.LIGHTBLACK_EX}  {i} :{fg.RESET}\r\t\t{fg.CYAN}{values[0]}{fg.RESET}')
            self.print(f'{fg.LIGHTBLACK_EX}  ...\r\t\t...{fg.RESET}')
            i = 10
        for value in values[-10:]:
            self.print(f'{fg.LIGHTBLACK_EX}  {i} :{fg.RESET}\r\t\t{fg.CYAN}{value}{fg.RESET}')
            i -= 1

    def print_report(self, report: Report) -> None:
        if len(report.printed) > 0: self.print(f'  = {" ".join(report.printed)}')
        if report.error is not None: self.print(report.format_error())
        if self.showstack: self.print_stack(report)

    def execute(self, text: str) -> Report:
        report = run(text, self.max_depth)
        self.print_report(report)
        return report

    def loop(self, read=input) -> None:
        self.welcome()
        while True:
            try:
                line = read(Interpreter.PROMPT)
                if line.strip().lower() in Interpreter.EXIT_WORDS: break
                if line.strip().lower() in Interpreter.HELP_WORDS: self.help(); continue
                if line.strip() == '': continue
                self.continue_program(line, read)
            except EOFError:
                break
            except Error as error:
                self.print(error.render())
            except KeyboardInterrupt:
                self.print(f'\n{fg.LIGHTRED_EX}Interrupted:{fg.RESET} input discarded')
        self.print('\nSee you soon !\n')

    def continue_program(self, text: str, read) -> None:
        while True:
            try:
                self.execute(text)
                return
            except ParseIncomplete:
                text += '\n' + read(Interpreter.PROMPT_CONTINUED)

def run_programs(programs: Iterable[str], max_depth: int, showstack: bool, color: Optional[bool] = None) -> int:
    ''' Runs each program in isolation. Returns the exit status. '''
    status = 0
    for text in programs:
        try:
            report = run(text, max_depth)
        except ParseError as error:
            click.echo(error.render(), err=True, color=color)
            status = 1
            continue
        click.echo(report.output, color=color)
        if showstack: click.echo(' '.join(f'{value}' for value in reversed(report.stack)), color=color)
        if report.error is not None: status = 1
    return status

@click.command()
@click.argument('files', nargs=-1, type=click.File('r'))
@click.option('-e', '--execute', 'programs', multiple=True, help='Program text to run, may be repeated.')
@click.option('--max-depth', default=DEFAULT_MAX_DEPTH, show_default=True, type=click.IntRange(min=1),
              envvar='FORTH_MAX_DEPTH', help='Maximum nesting of user word calls.')
@click.option('--show-stack/--hide-stack', default=None, envvar='FORTH_SHOW_STACK',
              help='Print the final stack after each program (default: shown in the REPL only).')
@click.option('--color/--no-color', default=True, envvar='FORTH_COLOR', help='Colored output.')
@click.option('-v', '--verbose', is_flag=True, help='Log parsing and evaluation details.')
def main(files, programs, max_depth, show_stack, color, verbose):
    ''' Runs Forth programs from FILES or -e options, or starts an interactive interpreter. '''
    if verbose:
        logging.basicConfig(format='%(levelname)s %(name)s: %(message)s', level=logging.DEBUG, stream=sys.stderr)
    sources = [file.read() for file in files] + list(programs)
    if len(sources) > 0:
        log.debug('running %d programs', len(sources))
        sys.exit(run_programs(sources, max_depth, bool(show_stack), None if color else False))
    colorama.init(strip=not color)
    Interpreter(max_depth, show_stack if show_stack is not None else True).loop()

if __name__ == '__main__':
    main()
