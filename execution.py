''' Execution engine '''

import logging
import threading
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from atoms import Token, StackOp, DictionaryOp, DictionaryKind, Number, ExecutionError
from intrinsics import Stack
from patterns import parse

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

DEFAULT_MAX_DEPTH = 1000

class Dictionary:
    '''
    User defined words, by name, for one program evaluation.
    Every operation holds the lock for its whole duration. Last write wins.
    '''

    def __init__(self, initial: Optional[Dict[str, Iterable[Token]]] = None) -> None:
        self._lock = threading.Lock()
        self._words: Optional[Dict[str, Tuple[Token, ...]]] = {}
        for name, tokens in (initial or {}).items(): self._words[name] = tuple(tokens)

    def __enter__(self) -> 'Dictionary': return self
    def __exit__(self, *exc_info) -> None: self.close()

    def close(self) -> None:
        with self._lock: self._words = None

    @property
    def closed(self) -> bool: return self._words is None

    def _open_words(self) -> Dict[str, Tuple[Token, ...]]:
        if self._words is None: raise ExecutionError('The dictionary is closed.')
        return self._words

    def store(self, name: str, tokens: Iterable[Token]) -> None:
        with self._lock: self._open_words()[name] = tuple(tokens)
        log.debug('stored word %s', name)

    def search(self, name: str) -> Optional[Tuple[Token, ...]]:
        ''' The tokens stored under name, None if the word is unknown. '''
        with self._lock: return self._open_words().get(name)

    def names(self) -> List[str]:
        with self._lock: return sorted(self._open_words())

    def __contains__(self, name: str) -> bool:
        return self.search(name) is not None

class Evaluator:
    '''
    Runs tokens left to right against a stack and a dictionary.
    Stops at the first ExecutionError, keeping the output produced so far.
    User words are looked up when they are called, and their tokens run in place.
    Calls are kept on an explicit frame stack, bounded by max_depth.
    '''

    def __init__(self, stack: Stack, dictionary: Dictionary, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.stack = stack
        self.dictionary = dictionary
        self.max_depth = max_depth
        self.outputs: List[str] = []
        self.error: Optional[ExecutionError] = None

    def execute(self, token: Token) -> None:
        if isinstance(token, StackOp):
            text = self.stack.execute(token.opcode, *token.args)
            if text != '': self.outputs.append(text)
        else: self.dictionary.store(token.name, token.body)

    def call(self, name: str, depth: int) -> Iterator[Token]:
        tokens = self.dictionary.search(name)
        if tokens is None: raise ExecutionError(f"Unknown word '{name}'")
        if depth > self.max_depth: raise ExecutionError(f"Maximum word nesting depth exceeded in '{name}'.")
        return iter(tokens)

    def run(self, tokens: Iterable[Token]) -> str:
        frames: List[Iterator[Token]] = [iter(tokens)]
        try:
            while len(frames) > 0:
                token = next(frames[-1], None)
                if token is None: frames.pop()
                elif isinstance(token, DictionaryOp) and token.kind is DictionaryKind.SEARCH:
                    frames.append(self.call(token.name, len(frames)))
                else: self.execute(token)
        except ExecutionError as error:
            log.info('evaluation halted: %s', error.message)
            self.error = error
        return self.output()

    def output(self) -> str:
        parts = [*self.outputs]
        if self.error is not None: parts.append(f'{self.error}')
        return ' '.join(parts)

def evaluate(tokens: Iterable[Token], stack: Stack, dictionary: Dictionary, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    ''' Evaluates tokens and returns the output, ending with the runtime error if any. '''
    return Evaluator(stack, dictionary, max_depth).run(tokens)

class Report:
    ''' Everything one program run produced. '''

    def __init__(self, text: str, tokens: Tuple[Token, ...], output: str, printed: List[str],
                 stack: List[Number], words: List[str], error: Optional[ExecutionError]) -> None:
        self.text = text ; self.tokens = tokens ; self.output = output ; self.printed = printed
        self.stack = stack ; self.words = words ; self.error = error

    @property
    def status(self) -> str: return 'error' if self.error is not None else 'done'

    def format_error(self) -> str:
        return self.error.render() if self.error is not None else ''

def run(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Report:
    '''
    Parses and evaluates a program with a private stack and dictionary,
    both released when the run ends, whatever the outcome.
    Raises ParseError before evaluating anything if the program does not parse.
    '''
    tokens = parse(text)
    with Stack() as stack, Dictionary() as dictionary:
        evaluator = Evaluator(stack, dictionary, max_depth)
        output = evaluator.run(tokens)
        return Report(text, tokens, output, evaluator.outputs, stack.values(), dictionary.names(), evaluator.error)
