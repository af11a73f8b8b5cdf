''' Value stack and the intrinsic implementation of every stack operation '''

import threading
from typing import Callable, Dict, Iterable, List, Optional
from atoms import Opcode, Number, StackError, ExecutionError

EMPTY_STACK = 'The stack is empty.'
NOT_ENOUGH_ELEMENTS = 'There are not enough elements in the stack.'
DIVISION_BY_ZERO = 'Division by zero.'
NUMBER_TOO_LARGE = 'Number too large.'

class Intrinsic:
    '''
    Abstract. Implementation of one opcode against a list of values (top is the last item).
    Declares how many elements it consumes, checked before it is applied.
    Returns the output text of the operation, empty if none.
    '''
    table : Dict[Opcode, 'Intrinsic'] = {}
    opcode : Opcode
    arity : int = 0
    def __init_subclass__(cls) -> None:
        if getattr(cls, 'opcode', None) is not None: Intrinsic.table[cls.opcode] = cls()
    def check(self, values: List[Number]) -> None:
        if len(values) >= self.arity: return
        raise StackError(EMPTY_STACK if self.arity == 1 else NOT_ENOUGH_ELEMENTS)
    def apply(self, values: List[Number], *args: Number) -> str:
        ...  # to overload

class BinaryIntrinsic(Intrinsic):
    ''' Abstract. Replaces the two top elements with function(top, second). '''
    arity = 2
    function : Callable[[Number, Number], Number]
    def apply(self, values: List[Number], *args: Number) -> str:
        result = self.function(values[-1], values[-2])
        del values[-2:]
        values.append(result)
        return ''

class Push(Intrinsic):
    opcode = Opcode.PUSH
    def apply(self, values: List[Number], *args: Number) -> str:
        values.append(args[0])
        return ''

class Pop(Intrinsic):
    opcode = Opcode.POP ; arity = 1
    def apply(self, values: List[Number], *args: Number) -> str:
        text = str(values[-1])
        values.pop()
        return text

class Add(BinaryIntrinsic):
    opcode = Opcode.ADD
    function = staticmethod(lambda a, b: a + b)

class Substract(BinaryIntrinsic):
    opcode = Opcode.SUBSTRACT
    function = staticmethod(lambda a, b: a - b)

class Multiply(BinaryIntrinsic):
    opcode = Opcode.MULTIPLY
    function = staticmethod(lambda a, b: a * b)

class Divide(BinaryIntrinsic):
    ''' Always a float quotient, too large for a float is an error. A zero divisor is reported before any arity error. '''
    opcode = Opcode.DIVIDE
    function = staticmethod(lambda a, b: a / b)
    def check(self, values: List[Number]) -> None:
        if len(values) >= 2 and values[-2] == 0: raise StackError(DIVISION_BY_ZERO)
        super().check(values)

class Duplicate(Intrinsic):
    opcode = Opcode.DUPLICATE ; arity = 1
    def apply(self, values: List[Number], *args: Number) -> str:
        values.append(values[-1])
        return ''

class Drop(Intrinsic):
    opcode = Opcode.DROP ; arity = 1
    def apply(self, values: List[Number], *args: Number) -> str:
        values.pop()
        return ''

class Swap(Intrinsic):
    opcode = Opcode.SWAP ; arity = 2
    def apply(self, values: List[Number], *args: Number) -> str:
        values[-1], values[-2] = values[-2], values[-1]
        return ''

class Over(Intrinsic):
    opcode = Opcode.OVER ; arity = 2
    def apply(self, values: List[Number], *args: Number) -> str:
        values.append(values[-2])
        return ''

class Stack:
    '''
    Ordered numeric storage for one program evaluation.
    Every operation holds the lock for its whole duration, so calls are atomic
    with respect to each other. Closing releases the values; later calls fail.
    '''

    def __init__(self, initial: Iterable[Number] = ()) -> None:
        self._lock = threading.Lock()
        self._values: Optional[List[Number]] = [*initial][::-1]

    def __enter__(self) -> 'Stack': return self
    def __exit__(self, *exc_info) -> None: self.close()

    def close(self) -> None:
        with self._lock: self._values = None

    @property
    def closed(self) -> bool: return self._values is None

    def execute(self, opcode: Opcode, *args: Number) -> str:
        intrinsic = Intrinsic.table[opcode]
        with self._lock:
            if self._values is None: raise ExecutionError('The stack is closed.')
            intrinsic.check(self._values)
            # values are left untouched when a result can not be represented
            try: return intrinsic.apply(self._values, *args)
            except (OverflowError, ValueError): raise StackError(NUMBER_TOO_LARGE)

    def push(self, value: Number) -> str: return self.execute(Opcode.PUSH, value)
    def pop(self) -> str: return self.execute(Opcode.POP)
    def add(self) -> str: return self.execute(Opcode.ADD)
    def substract(self) -> str: return self.execute(Opcode.SUBSTRACT)
    def multiply(self) -> str: return self.execute(Opcode.MULTIPLY)
    def divide(self) -> str: return self.execute(Opcode.DIVIDE)
    def duplicate(self) -> str: return self.execute(Opcode.DUPLICATE)
    def drop(self) -> str: return self.execute(Opcode.DROP)
    def swap(self) -> str: return self.execute(Opcode.SWAP)
    def over(self) -> str: return self.execute(Opcode.OVER)

    def values(self) -> List[Number]:
        ''' Snapshot of the values, top first. '''
        with self._lock:
            if self._values is None: raise ExecutionError('The stack is closed.')
            return self._values[::-1]

    def __len__(self) -> int:
        with self._lock: return len(self._values) if self._values is not None else 0