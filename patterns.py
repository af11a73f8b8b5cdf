''' Forth grammar, assembled from the parser combinators '''

import re
import logging
from typing import Dict, Optional, Tuple
from atoms import Opcode, StackOp, Token, ParseError, ParseIncomplete, push, store, search
from parsing import Terminal, Keyword, Any, Sequence, Repeat, RepeatOnce, Discard, Transform, Forward
from parsing import Failure, Result, Words, tokenize

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

class NumberPattern(Terminal):
    ''' Optionally signed decimal integer. '''
    expected = 'a number'
    PATTERN = re.compile(r'[+-]?[0-9]+')
    def match(self, word: str) -> Optional[StackOp]:
        if NumberPattern.PATTERN.fullmatch(word) is None: return None
        try: return push(int(word))
        except ValueError: return None  # more digits than int() converts

class OperationPattern(Terminal):
    ''' Built-in operations. Case insensitive. '''
    expected = 'an operation'
    OPERATIONS: Dict[str, Opcode] = {
        '+': Opcode.ADD, '-': Opcode.SUBSTRACT, '*': Opcode.MULTIPLY, '/': Opcode.DIVIDE,
        'DUP': Opcode.DUPLICATE, 'DROP': Opcode.DROP, 'SWAP': Opcode.SWAP, 'OVER': Opcode.OVER,
        '.': Opcode.POP,
    }
    DESCRIPTIONS: Dict[Opcode, str] = {
        Opcode.ADD: 'a b -- b+a', Opcode.SUBSTRACT: 'a b -- b-a', Opcode.MULTIPLY: 'a b -- b*a',
        Opcode.DIVIDE: 'a b -- b/a', Opcode.DUPLICATE: 'a -- a a', Opcode.DROP: 'a --',
        Opcode.SWAP: 'a b -- b a', Opcode.OVER: 'a b -- a b a', Opcode.POP: 'a --  , print a',
    }
    def match(self, word: str) -> Optional[StackOp]:
        opcode = OperationPattern.OPERATIONS.get(word.upper())
        return StackOp(opcode) if opcode is not None else None

class NamePattern(Terminal):
    ''' User word name. Letters, digits and underscores, not starting with a digit. '''
    expected = 'a word name'
    PATTERN = re.compile(r'[a-zA-Z_][a-zA-Z0-9_]*')
    def match(self, word: str) -> Optional[str]:
        return word if NamePattern.PATTERN.fullmatch(word) is not None else None
    def reject(self, word: str) -> str: return f"Invalid word name '{word}'."

class DefinitionStart(Keyword):
    ''' The opening colon. Last alternative tried for any word, hence its message. '''
    def __init__(self) -> None: super().__init__(':')
    def reject(self, word: str) -> str: return f"Unrecognized word '{word}'."

class DefinitionBody(RepeatOnce):
    ''' At least one token up to the closing semicolon. '''
    def apply(self, words: Words) -> Result:
        result = super().apply(words)
        if not result and result.word == ';': return Failure('Definition body can not be empty.', ';')
        if not result and result.word is None: return Failure("Unexpected end of input, expected ';' to close the definition.")
        return result

number = NumberPattern()
operation = OperationPattern()
name = NamePattern()
stack_op = Any(operation, number)
evaluation_reference = Transform(name, search)
definition = Forward('definition')
dictionary_op = Any(evaluation_reference, definition)
statement = Any(stack_op, dictionary_op)
definition.define(Transform(
    Sequence(Discard(DefinitionStart()), name, DefinitionBody(statement), Discard(Keyword(';'))),
    lambda matches: store(matches[0], matches[1])))
program = Repeat(statement)

def failure_to_error(failure: Failure) -> ParseError:
    if failure.word is None: return ParseIncomplete(failure.message)
    return ParseError(failure.message, failure.word)

def parse(text: str) -> Tuple[Token, ...]:
    '''
    Parses a whole program into tokens.
    The entire input must be consumed, otherwise the failure met on the first
    unconsumed word is raised as a ParseError (ParseIncomplete at end of input).
    '''
    words = tokenize(text)
    tokens, remainder, failure = program.repeat(words)
    if len(remainder) > 0:
        log.debug('parsing stopped at word %d of %d: %s', len(words) - len(remainder) + 1, len(words), failure.message)
        raise failure_to_error(failure)
    log.debug('parsed %d words into %d tokens', len(words), len(tokens))
    return tuple(tokens)