import typing
from typing import Any, Callable, Collection, Dict, List, Tuple, Union

Options = List[Tuple[Union[Tuple[str], Tuple[str, str]], Dict[str, Any]]]
DefaultValues = Dict[str, Any]
CommandArgs = List[str]
ConnectionValues = Dict[str, str]

Tags = Collection[str]
HookFunction = Callable[[Any], None]
Document = Dict[str, Any]
AerospikeKey = Tuple[str, str, Union[str, int]]

if hasattr(typing, "override"):  # 3.12+
    override = typing.override
else:  # <=3.11
    _F = typing.TypeVar("_F", bound=typing.Callable[..., typing.Any])

    def override(arg: _F, /) -> _F:
        """Mark a method as overriding a method of its base class (PEP 698).

        Only sets ``__override__`` for runtime introspection; type checkers do the
        actual validation.
        """
        try:
            arg.__override__ = True
        except (AttributeError, TypeError):
            # Read-only attributes (__slots__, builtins) are left untouched.
            pass
        return arg
