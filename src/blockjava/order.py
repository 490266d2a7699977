"""Java operator precedence levels used when inlining sub-expressions.

See https://docs.oracle.com/javase/tutorial/java/nutsandbolts/operators.html
"""

from __future__ import annotations

from enum import IntEnum


class Order(IntEnum):
    ATOMIC = 0              # literals, names
    COLLECTION = 1
    STRING_CONVERSION = 1
    MEMBER = 2              # . []
    FUNCTION_CALL = 2       # ()
    POSTFIX = 3             # expr++ expr--
    EXPONENTIATION = 3
    LOGICAL_NOT = 3         # !
    UNARY_SIGN = 4          # ++expr --expr +expr -expr ~
    MULTIPLICATIVE = 5      # * / %
    ADDITIVE = 6            # + -
    BITWISE_SHIFT = 7       # << >> >>>
    RELATIONAL = 8          # < > <= >= instanceof
    EQUALITY = 9            # == !=
    BITWISE_AND = 10        # &
    BITWISE_XOR = 11        # ^
    BITWISE_OR = 12         # |
    LOGICAL_AND = 13        # &&
    LOGICAL_OR = 14         # ||
    CONDITIONAL = 15        # ? :
    ASSIGNMENT = 16         # = += -= ...
    NONE = 99               # (...)


def needs_parens(inner: Order, outer: Order) -> bool:
    """True when an expression of precedence *inner* must be wrapped to sit
    in an operand position that requires *outer*."""
    return inner > outer


def tighter(order: Order) -> Order:
    """The next tighter-binding level, for the right operand of
    left-associative operators such as ``-`` and ``/``."""
    if order <= Order.ATOMIC or order >= Order.NONE:
        return order
    return Order(order - 1)
