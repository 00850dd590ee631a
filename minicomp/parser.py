import logging

from .errors import ParseError, location
from .lexer import tokenize
from .nodes import BinOp, Let, Number, Print, Program, Var

log = logging.getLogger(__name__)

INT_MAX = 2 ** 31 - 1

DESCRIPTIONS = {
    'EOF': 'end of input',
    'NUMBER': 'a number',
    'ID': 'an identifier',
    'PLUS': "'+'",
    'MINUS': "'-'",
    'MUL': "'*'",
    'DIV': "'/'",
    'LPAREN': "'('",
    'RPAREN': "')'",
    'SEMI': "';'",
    'ASSIGN': "'='",
    'LET': "'let'",
    'PRINT': "'print'",
}


class Parser:
    """Recursive descent over a fully lexed token list.

    Precedence is layered: expr handles + and -, term handles * and /, and
    both fold to the left. The first structural error raises ParseError.
    """

    def __init__(self, tokens, source=None):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind != 'EOF':
            raise ValueError("token list must end with an EOF token")
        self.source = source
        self.pos = 0

    def consume(self):
        token = self.tokens[self.pos]
        if token.kind != 'EOF':
            self.pos += 1
        return token

    def current_token(self):
        return self.tokens[self.pos]

    def accept(self, kind):
        if self.current_token().kind == kind:
            return self.consume()
        return None

    def expect(self, kind, context):
        token = self.accept(kind)
        if token is None:
            self.error(f"expected {DESCRIPTIONS[kind]} {context}")
        return token

    def error(self, message):
        token = self.current_token()
        found = 'end of input' if token.kind == 'EOF' else f"'{token.text}'"
        where = ''
        if self.source is not None:
            line, col = location(self.source, token.pos)
            where = f"line {line}, column {col}: "
        raise ParseError(f"{where}{message}, found {found}", token)

    def parse(self):
        log.info("Parsing")
        statements = []
        while self.current_token().kind != 'EOF':
            try:
                statement = self.statement()
            except RecursionError:
                self.error("expression nested too deeply")
            if statement is not None:
                statements.append(statement)
        log.debug("Parsed %d statements", len(statements))
        return Program(tuple(statements))

    def statement(self):
        if self.accept('LET'):
            return self.let_statement()
        elif self.accept('PRINT'):
            return self.print_statement()
        elif self.accept('SEMI'):
            return None
        self.error("expected a statement")

    def let_statement(self):
        name = self.expect('ID', "after 'let'").text
        self.expect('ASSIGN', f"after 'let {name}'")
        value = self.expr()
        self.expect('SEMI', "to end the statement")
        return Let(name, value)

    def print_statement(self):
        value = self.expr()
        self.expect('SEMI', "to end the statement")
        return Print(value)

    def expr(self):
        node = self.term()
        while self.current_token().kind in ('PLUS', 'MINUS'):
            op = self.consume().text
            node = BinOp(node, op, self.term())
        return node

    def term(self):
        node = self.factor()
        while self.current_token().kind in ('MUL', 'DIV'):
            op = self.consume().text
            node = BinOp(node, op, self.factor())
        return node

    def factor(self):
        token = self.current_token()
        if token.kind == 'NUMBER':
            digits = token.text.lstrip('0') or '0'
            if len(digits) > len(str(INT_MAX)) or int(digits) > INT_MAX:
                self.error("integer literal out of range")
            value = int(digits)
            self.consume()
            return Number(value)
        elif token.kind == 'ID':
            self.consume()
            return Var(token.text)
        elif token.kind == 'LPAREN':
            self.consume()
            node = self.expr()
            self.expect('RPAREN', "to close '('")
            return node
        self.error("expected an expression")


def parse(source):
    return Parser(tokenize(source), source).parse()
