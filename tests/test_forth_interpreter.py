import io

import pytest
from click.testing import CliRunner

from forth_interpreter import Interpreter, main


def feed(*lines):
    ''' Fake input() returning the given lines, then EOF. '''
    pending = list(lines)
    def read(prompt):
        if not pending: raise EOFError
        return pending.pop(0)
    return read


def test_cli_runs_inline_programs():
    result = CliRunner().invoke(main, ['-e', ': square DUP * ; 1 3 square . .', '-e', '1 2 + .'])
    assert result.exit_code == 0
    assert result.output.splitlines() == ['9 1', '3']


def test_cli_runtime_error_sets_exit_status():
    result = CliRunner().invoke(main, ['-e', '1 2 3 . . . .'])
    assert result.exit_code == 1
    assert result.output.strip() == '3 2 1 RuntimeError: The stack is empty.'


def test_cli_parse_error_goes_to_stderr():
    result = CliRunner().invoke(main, ['-e', ': name ;'])
    assert result.exit_code == 1
    assert 'ParseError: Definition body can not be empty.' in result.output


def test_cli_runs_files(tmp_path):
    program = tmp_path / 'program.fs'
    program.write_text(': half 2 SWAP / ;\n8 half .\n7 half .\n')
    result = CliRunner().invoke(main, [str(program)])
    assert result.exit_code == 0
    assert result.output.strip() == '4.0 3.5'


def test_cli_shows_final_stack():
    result = CliRunner().invoke(main, ['--show-stack', '-e', '1 2 3 .'])
    assert result.output.splitlines() == ['3', '1 2']


def test_cli_max_depth_from_environment():
    result = CliRunner().invoke(main, ['-e', ': f 1 f ; f'], env={'FORTH_MAX_DEPTH': '3'})
    assert result.exit_code == 1
    assert result.output.strip() == "RuntimeError: Maximum word nesting depth exceeded in 'f'."


def test_cli_rejects_invalid_max_depth():
    result = CliRunner().invoke(main, ['--max-depth', '0', '-e', '1'])
    assert result.exit_code == 2


def test_cli_starts_interpreter_without_programs():
    result = CliRunner().invoke(main, ['--no-color'], input='1 2 + .\nbye\n')
    assert result.exit_code == 0
    assert '= 3' in result.output
    assert 'See you soon' in result.output


def test_interpreter_runs_each_program_on_fresh_state():
    out = io.StringIO()
    Interpreter(showstack=False, out=out).loop(feed(': w 5 ;', 'w .'))
    text = out.getvalue()
    assert "Unknown word 'w'" in text


def test_interpreter_continues_unclosed_definitions():
    out = io.StringIO()
    Interpreter(showstack=False, out=out).loop(feed(': square', 'DUP * ; 4 square .'))
    assert '= 16' in out.getvalue()


def test_interpreter_reports_parse_errors_and_goes_on():
    out = io.StringIO()
    Interpreter(showstack=False, out=out).loop(feed('@oops', '2 .'))
    text = out.getvalue()
    assert "Unrecognized word '@oops'." in text
    assert '= 2' in text


def test_interpreter_shows_stack():
    out = io.StringIO()
    Interpreter(showstack=True, out=out).loop(feed('7 8'))
    text = out.getvalue()
    assert 'STACK' in text
    assert '7' in text and '8' in text


def test_interpreter_help_and_exit():
    out = io.StringIO()
    Interpreter(out=out).loop(feed('help', 'exit', '1 .'))
    text = out.getvalue()
    assert 'OPERATIONS' in text and 'SWAP' in text
    assert '= 1' not in text


@pytest.mark.parametrize('line', ['', '   '])
def test_interpreter_skips_blank_lines(line):
    out = io.StringIO()
    Interpreter(showstack=False, out=out).loop(feed(line, '5 .'))
    assert '= 5' in out.getvalue()
