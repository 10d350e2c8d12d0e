"""
Chaincode function dispatch table.

The single place that lists the chaincode functions the gateway may submit,
how many positional arguments each takes, and how the raw submission result
is shaped. Adding a chaincode function means adding an entry here.
"""

from typing import Any, Callable, Sequence
from dataclasses import dataclass

from ledgergate.core.exceptions import InvalidArguments, UnknownFunction


def transaction_id_result(raw: Any) -> dict[str, Any]:
    """Wrap a submission result as {"transactionId": <text>}; undecodable bytes are replaced"""
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")
    return {"transactionId": "" if raw is None else str(raw)}


@dataclass(frozen=True)
class ChaincodeFunction:
    """Dispatch entry for one chaincode function"""
    name: str
    arity: int
    shape_result: Callable[[Any], dict[str, Any]] = transaction_id_result

    def bind(self, args: Sequence[Any]) -> tuple[str, ...]:
        """Check arity and convert arguments to the string form chaincode expects"""
        if isinstance(args, (str, bytes)) or len(args) != self.arity:
            count = "a string" if isinstance(args, (str, bytes)) else str(len(args))
            raise InvalidArguments(
                f"{self.name} expects {self.arity} argument(s), got {count}",
                function=self.name, expected=self.arity)
        return tuple(arg if isinstance(arg, str) else str(arg) for arg in args)


class DispatchTable:
    """Closed mapping from function name to ChaincodeFunction"""

    def __init__(self, functions: Sequence[ChaincodeFunction]):
        self._functions = {function.name: function for function in functions}

    def resolve(self, function_name: str) -> ChaincodeFunction:
        """Look up a function, raising UnknownFunction when absent"""
        function = self._functions.get(function_name) if isinstance(function_name, str) else None
        if function is None:
            raise UnknownFunction(str(function_name))
        return function

    def bind(self, function_name: str, args: Sequence[Any]) -> tuple[ChaincodeFunction, tuple[str, ...]]:
        """Resolve a function and validate its arguments"""
        function = self.resolve(function_name)
        return function, function.bind(args)

    def names(self) -> list[str]:
        return list(self._functions)

    def __contains__(self, function_name: str) -> bool:
        return function_name in self._functions


DEFAULT_DISPATCH_TABLE = DispatchTable([
    ChaincodeFunction("CreateUser", 1),
    ChaincodeFunction("UpdateUser", 2),
    # Legal record operations
    ChaincodeFunction("CreateLegalRecord", 1),
    ChaincodeFunction("UpdateLegalRecord", 2),
])
