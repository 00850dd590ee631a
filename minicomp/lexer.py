import logging
import re
from typing import NamedTuple

log = logging.getLogger(__name__)

TOKEN_SPEC = [
    ('SKIP',     r'[ \t\n\r\v\f]+'),
    ('ID',       r'[A-Za-z_][A-Za-z0-9_]*'),
    ('NUMBER',   r'[0-9]+'),
    ('PLUS',     r'\+'),
    ('MINUS',    r'-'),
    ('MUL',      r'\*'),
    ('DIV',      r'/'),
    ('LPAREN',   r'\('),
    ('RPAREN',   r'\)'),
    ('SEMI',     r';'),
    ('ASSIGN',   r'='),
    ('MISMATCH', r'(?s:.)'),
]

KEYWORDS = {
    'let': 'LET',
    'print': 'PRINT',
}

TOKEN_REGEX = re.compile('|'.join('(?P<%s>%s)' % pair for pair in TOKEN_SPEC))


class Token(NamedTuple):
    kind: str
    text: str
    pos: int = 0


class Lexer:
    """Hands out one token per call to next_token().

    Whitespace is skipped. A character that starts no token comes back as a
    MISMATCH token; deciding whether that is an error is left to the parser.
    """

    def __init__(self, source):
        self.source = source
        self.pos = 0

    def next_token(self):
        mo = TOKEN_REGEX.match(self.source, self.pos)
        if mo is not None and mo.lastgroup == 'SKIP':
            self.pos = mo.end()
            mo = TOKEN_REGEX.match(self.source, self.pos)
        if mo is None:
            return Token('EOF', '', len(self.source))

        self.pos = mo.end()
        kind = mo.lastgroup
        value = mo.group()
        if kind == 'ID':
            kind = KEYWORDS.get(value, 'ID')
        return Token(kind, value, mo.start())

    def __iter__(self):
        while True:
            token = self.next_token()
            yield token
            if token.kind == 'EOF':
                return


def tokenize(code):
    log.info("Tokenizing")
    tokens = list(Lexer(code))
    log.debug("Produced %d tokens", len(tokens))
    return tokens
