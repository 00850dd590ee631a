from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Number:
    value: int


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class BinOp:
    left: Expr
    op: str
    right: Expr


Expr = Union[Number, Var, BinOp]


@dataclass(frozen=True)
class Let:
    name: str
    value: Expr


@dataclass(frozen=True)
class Print:
    value: Expr


Stmt = Union[Let, Print]


@dataclass(frozen=True)
class Program:
    statements: tuple[Stmt, ...] = ()

    def __iter__(self):
        return iter(self.statements)

    def __len__(self):
        return len(self.statements)
