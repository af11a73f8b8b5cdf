''' Tokens produced by the parser, and errors '''

from enum import Enum
from dataclasses import dataclass
from typing import Tuple, Union, Optional
from colorama import Fore as fg

Number = Union[int, float]

class Error(Exception):
    ''' Abstract. Applicative error. Rendered in red. '''
    label = 'Error'
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
    def __str__(self) -> str: return f'{self.label}: {self.message}'
    def render(self) -> str:
        return f'{fg.LIGHTRED_EX}{self.label}:{fg.RESET} {self.message}'

class ParseError(Error):
    ''' Raised by the parser. Names the offending word, None at end of input. '''
    label = 'ParseError'
    def __init__(self, message: str, word: Optional[str] = None) -> None:
        super().__init__(message)
        self.word = word

class ParseIncomplete(ParseError):
    ''' Raised by the parser when the end of input is reached prematurely. '''

class ExecutionError(Error):
    ''' Raised during evaluation. Halts the running program. '''
    label = 'RuntimeError'

class StackError(ExecutionError):
    ''' Raised by the value stack. '''

class Opcode(Enum):
    ''' Closed set of stack operations. '''
    PUSH = 'push'
    POP = 'pop'
    ADD = 'add'
    SUBSTRACT = 'substract'
    MULTIPLY = 'multiply'
    DIVIDE = 'divide'
    DUPLICATE = 'duplicate'
    DROP = 'drop'
    SWAP = 'swap'
    OVER = 'over'

class DictionaryKind(Enum):
    STORE = 'store'
    SEARCH = 'search'

@dataclass(frozen=True)
class StackOp:
    ''' Operation on the value stack, with its literal arguments. '''
    opcode: Opcode
    args: Tuple[Number, ...] = ()
    def __str__(self) -> str:
        if self.opcode is Opcode.PUSH: return f'{fg.CYAN}{self.args[0]}{fg.RESET}'
        return f'{fg.YELLOW}{self.opcode.value}{fg.RESET}'

@dataclass(frozen=True)
class DictionaryOp:
    '''
    Operation on the word dictionary.
    STORE carries (name, tokens), SEARCH carries (name,).
    '''
    kind: DictionaryKind
    args: tuple

    @property
    def name(self) -> str: return self.args[0]

    @property
    def body(self) -> Tuple['Token', ...]:
        if self.kind is not DictionaryKind.STORE: raise AttributeError('only definitions have a body')
        return self.args[1]

    def __str__(self) -> str:
        if self.kind is DictionaryKind.SEARCH: return f'{fg.MAGENTA}{self.name}{fg.RESET}'
        return f': {fg.MAGENTA}{self.name}{fg.RESET} ' + ' '.join(f'{token}' for token in self.body) + ' ;'

Token = Union[StackOp, DictionaryOp]

def push(value: Number) -> StackOp: return StackOp(Opcode.PUSH, (value,))
def store(name: str, tokens) -> DictionaryOp: return DictionaryOp(DictionaryKind.STORE, (name, tuple(tokens)))
def search(name: str) -> DictionaryOp: return DictionaryOp(DictionaryKind.SEARCH, (name,))
