''' Parser combinator engine '''

from typing import Callable, Iterable, List, Optional, Tuple, Union

Words = Tuple[str, ...]

class Success:
    ''' A parser matched. Holds the match and the unconsumed words. '''
    def __init__(self, match: object, remainder: Words) -> None:
        self.match = match ; self.remainder = remainder
    def __bool__(self) -> bool: return True
    def __eq__(self, other) -> bool:
        return isinstance(other, Success) and (self.match, self.remainder) == (other.match, other.remainder)
    def __repr__(self) -> str: return f'Success({self.match!r}, {self.remainder!r})'

class Failure:
    ''' A parser did not match. Names the offending word, None at end of input. '''
    def __init__(self, message: str, word: Optional[str] = None) -> None:
        self.message = message ; self.word = word
    def __bool__(self) -> bool: return False
    def __eq__(self, other) -> bool:
        return isinstance(other, Failure) and (self.message, self.word) == (other.message, other.word)
    def __repr__(self) -> str: return f'Failure({self.message!r}, {self.word!r})'

Result = Union[Success, Failure]

class Parser:
    '''
    Abstract. A parser turns a sequence of words into a Success or a Failure.
    Parsers hold no mutable state.
    '''
    def apply(self, words: Words) -> Result:
        raise NotImplementedError
    def __call__(self, words: Iterable[str]) -> Result:
        return self.apply(tuple(words))

class Terminal(Parser):
    '''
    Abstract. Matches exactly one word.
    Sub classes implement match(), returning None on rejection, and describe what they expect.
    '''
    expected = 'a word'
    def match(self, word: str) -> Optional[object]:
        raise NotImplementedError
    def reject(self, word: str) -> str:
        return f"Expected {self.expected} but found '{word}'."
    def apply(self, words: Words) -> Result:
        if len(words) == 0: return Failure(f'Unexpected end of input, expected {self.expected}.')
        matched = self.match(words[0])
        if matched is None: return Failure(self.reject(words[0]), words[0])
        return Success(matched, words[1:])

class Keyword(Terminal):
    ''' Matches a given word, exactly. '''
    def __init__(self, text: str) -> None:
        self.text = text ; self.expected = f"'{text}'"
    def match(self, word: str) -> Optional[str]:
        return word if word == self.text else None

class Any(Parser):
    '''
    First alternative wins. Alternatives are tried in order against the same input.
    When all fail, the failure of the last one is returned.
    '''
    def __init__(self, *parsers: Parser) -> None:
        if len(parsers) == 0: raise ValueError('Any needs at least one parser')
        self.parsers = parsers
    def apply(self, words: Words) -> Result:
        result: Result = Failure('no alternative')
        for parser in self.parsers:
            result = parser.apply(words)
            if result: return result
        return result

class Sequence(Parser):
    '''
    Applies parsers one after the other, each on the remainder of the previous one.
    Collects the non-empty matches. All or nothing: the first failure is returned as is.
    '''
    def __init__(self, *parsers: Parser) -> None:
        self.parsers = parsers
    def apply(self, words: Words) -> Result:
        matches: List[object] = []
        for parser in self.parsers:
            result = parser.apply(words)
            if not result: return result
            if result.match is not None and result.match != []: matches.append(result.match)
            words = result.remainder
        return Success(matches, words)

class Repeat(Parser):
    ''' Applies a parser as many times as possible. Zero matches is a success. '''
    def __init__(self, parser: Parser) -> None:
        self.parser = parser
    def repeat(self, words: Words) -> Tuple[List[object], Words, Failure]:
        matches: List[object] = []
        while True:
            result = self.parser.apply(words)
            if not result: return matches, words, result
            if result.remainder == words: return matches, words, Failure('no progress', words[0] if words else None)
            matches.append(result.match) ; words = result.remainder
    def apply(self, words: Words) -> Result:
        matches, remainder, _ = self.repeat(words)
        return Success(matches, remainder)

class RepeatOnce(Repeat):
    ''' Same as Repeat, but fails with the inner failure if nothing matched. '''
    def apply(self, words: Words) -> Result:
        matches, remainder, failure = self.repeat(words)
        if len(matches) == 0: return failure
        return Success(matches, remainder)

class Discard(Parser):
    ''' Consumes what the parser matches, but drops the match. '''
    def __init__(self, parser: Parser) -> None:
        self.parser = parser
    def apply(self, words: Words) -> Result:
        result = self.parser.apply(words)
        if not result: return result
        return Success(None, result.remainder)

class Transform(Parser):
    ''' Maps the match of a successful parser through a function. '''
    def __init__(self, parser: Parser, function: Callable[[object], object]) -> None:
        self.parser = parser ; self.function = function
    def apply(self, words: Words) -> Result:
        result = self.parser.apply(words)
        if not result: return result
        return Success(self.function(result.match), result.remainder)

class Forward(Parser):
    ''' Placeholder for a parser defined later. Allows recursive rules. '''
    def __init__(self, label: str = 'forward') -> None:
        self.label = label
        self.parser: Optional[Parser] = None
    def define(self, parser: Parser) -> 'Forward':
        self.parser = parser
        return self
    def apply(self, words: Words) -> Result:
        if self.parser is None: raise ValueError(f'parser {self.label} used before being defined')
        return self.parser.apply(words)

def tokenize(text: str) -> Words:
    ''' Splits source text into words. Any whitespace, newlines included, separates words. '''
    return tuple(text.split())