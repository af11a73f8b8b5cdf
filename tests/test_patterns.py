import sys

import pytest

from atoms import Opcode, StackOp, ParseError, ParseIncomplete, push, store, search
from parsing import Success
from patterns import parse, number, operation, name, definition, evaluation_reference, statement


def test_number_parses_signed_integers():
    assert number(['42']) == Success(push(42), ())
    assert number(['-1', 'x']) == Success(push(-1), ('x',))
    assert number(['+7']) == Success(push(7), ())
    for word in ['1.5', '1e3', '0x10', '-', '12a', '1_000']:
        assert not number([word])


@pytest.mark.skipif(getattr(sys, 'get_int_max_str_digits', lambda: 0)() == 0, reason='no integer string conversion limit')
def test_number_rejects_literals_with_too_many_digits():
    assert not number(['9' * (sys.get_int_max_str_digits() + 1)])


def test_operation_is_case_insensitive():
    assert operation(['dup']) == Success(StackOp(Opcode.DUPLICATE), ())
    assert operation(['Swap']) == Success(StackOp(Opcode.SWAP), ())
    assert not operation(['square'])


def test_name_grammar():
    assert name(['_word1']) == Success('_word1', ())
    assert not name(['1word'])
    assert not name(['wo-rd'])
    assert name(['over']) == Success('over', ())
    assert name(['1word']).message == "Invalid word name '1word'."


def test_definitions_may_use_built_in_names():
    assert parse(': dup 1 ;') == (store('dup', [push(1)]),)
    assert parse(': Over 2 ;') == (store('Over', [push(2)]),)


def test_evaluation_reference_is_a_search():
    assert evaluation_reference(['square', '.']) == Success(search('square'), ('.',))


def test_definition_parser():
    result = definition([':', 'double', '2', '*', ';', '5'])
    assert result == Success(store('double', [push(2), StackOp(Opcode.MULTIPLY)]), ('5',))


def test_statement_reports_unrecognized_words():
    failure = statement(['@x'])
    assert failure.message == "Unrecognized word '@x'."
    assert failure.word == '@x'


def test_parse_stack_operations():
    assert parse('1 + - * / DUP DROP SWAP OVER .') == (
        push(1),
        StackOp(Opcode.ADD),
        StackOp(Opcode.SUBSTRACT),
        StackOp(Opcode.MULTIPLY),
        StackOp(Opcode.DIVIDE),
        StackOp(Opcode.DUPLICATE),
        StackOp(Opcode.DROP),
        StackOp(Opcode.SWAP),
        StackOp(Opcode.OVER),
        StackOp(Opcode.POP),
    )
    assert parse('-1 0 1') == (push(-1), push(0), push(1))


def test_parse_references():
    assert parse('word1 word2') == (search('word1'), search('word2'))


def test_parse_definitions():
    assert parse(': example 1 DUP * ;') == (
        store('example', [push(1), StackOp(Opcode.DUPLICATE), StackOp(Opcode.MULTIPLY)]),
    )
    assert parse(': name 300 ;') == (store('name', [push(300)]),)


def test_parse_definitions_within_definitions():
    assert parse(': by4 : by2 DUP + ; by2 by2 ;') == (
        store('by4', [
            store('by2', [StackOp(Opcode.DUPLICATE), StackOp(Opcode.ADD)]),
            search('by2'),
            search('by2'),
        ]),
    )


def test_parse_multiline_programs():
    assert parse(': square DUP * ;\n3 square .') == (
        store('square', [StackOp(Opcode.DUPLICATE), StackOp(Opcode.MULTIPLY)]),
        push(3),
        search('square'),
        StackOp(Opcode.POP),
    )


def test_parse_empty_program():
    assert parse('') == ()
    assert parse(' \n ') == ()


def test_definitions_can_not_be_empty():
    with pytest.raises(ParseError) as info:
        parse(': name ;')
    assert info.value.message == 'Definition body can not be empty.'
    assert info.value.word == ';'


@pytest.mark.parametrize('text, word, message', [
    ('@invalid program', '@invalid', "Unrecognized word '@invalid'."),
    ('1 2 ; 3', ';', "Unrecognized word ';'."),
    ('1 2.5 +', '2.5', "Unrecognized word '2.5'."),
    (': 1x 2 ;', '1x', "Invalid word name '1x'."),
    (': f 1 @x ;', '@x', "Expected ';' but found '@x'."),
])
def test_parse_errors_name_the_offending_word(text, word, message):
    with pytest.raises(ParseError) as info:
        parse(text)
    assert not isinstance(info.value, ParseIncomplete)
    assert info.value.word == word
    assert info.value.message == message


@pytest.mark.parametrize('text', [':', ': f', ': f 1 2', ': f : g 1 ;'])
def test_unclosed_definitions_are_incomplete(text):
    with pytest.raises(ParseIncomplete) as info:
        parse(text)
    assert info.value.word is None


def test_parse_is_idempotent():
    text = ': by4 : by2 DUP + ; by2 by2 ; 3 by4 .'
    assert parse(text) == parse(text)
