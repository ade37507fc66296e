"""Recursive descent parser for lscript. Consumes the lexer's token list and produces a tree.Program.

Statement grammar:

```
<program>   ::= <statement>* EOF
<statement> ::= "output" "(" [<expr> ("," <expr>)*] ")" ";"
              | "input" "(" IDENTIFIER ")" ";"
              | "if" "(" <expr> ")" <block> ["else" <block>]
              | "loop" "(" <expr> ")" <block>
              | "{" <statement>* "}"
              | IDENTIFIER "=" <expr> ";"                 ; only when IDENTIFIER is directly followed by "="
              | <expr> ";"                                ; evaluated, value discarded
<block>     ::= "{" <statement>* "}" | <statement>        ; a lone statement is not wrapped in a Block
```

Expressions, lowest to highest binding power; every binary level associates to the left:

```
<expr>           ::= <and> ("||" <and>)*
<and>            ::= <equality> ("&&" <equality>)*
<equality>       ::= <relational> (("==" | "!=") <relational>)*
<relational>     ::= <additive> (("<" | "<=" | ">" | ">=") <additive>)*
<additive>       ::= <multiplicative> (("+" | "-") <multiplicative>)*
<multiplicative> ::= <unary> (("*" | "/") <unary>)*
<unary>          ::= ("!" | "-" | "+") <unary> | <primary>
<primary>        ::= NUMBER | STRING | IDENTIFIER | "(" <expr> ")"
```
"""

from lscript.lang import tree
from lscript.lang.config import FRAMES_PER_TOKEN, recursion_room
from lscript.lang.error import ParseError
from lscript.lang.lexical import TokenKind
from lscript.lang.tree import Operator


OR_OPS = {TokenKind.OR: Operator.OR}
AND_OPS = {TokenKind.AND: Operator.AND}
EQUALITY_OPS = {TokenKind.EQ: Operator.EQ, TokenKind.NE: Operator.NE}
RELATIONAL_OPS = {
    TokenKind.LT: Operator.LT,
    TokenKind.LE: Operator.LE,
    TokenKind.GT: Operator.GT,
    TokenKind.GE: Operator.GE,
}
ADDITIVE_OPS = {TokenKind.PLUS: Operator.PLUS, TokenKind.MINUS: Operator.MINUS}
MULTIPLICATIVE_OPS = {TokenKind.STAR: Operator.MUL, TokenKind.SLASH: Operator.DIV}
UNARY_OPS = {TokenKind.NOT: Operator.NOT, TokenKind.MINUS: Operator.MINUS, TokenKind.PLUS: Operator.PLUS}

# binary levels, lowest binding power first
BINARY_LEVELS = [OR_OPS, AND_OPS, EQUALITY_OPS, RELATIONAL_OPS, ADDITIVE_OPS, MULTIPLICATIVE_OPS]
PRECEDENCE = {kind: level for level, ops in enumerate(BINARY_LEVELS) for kind in ops}


class Parser:
    """Single-use parser over one token list. The list must end with an EOF token, as Lexer.tokenize guarantees."""

    def __init__(self, tokens):
        if not tokens or tokens[-1].kind is not TokenKind.EOF:
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset=0):
        """Token offset positions ahead; stays on EOF past the end."""
        return self.tokens[min(self.pos + offset, len(self.tokens) - 1)]

    def advance(self):
        token = self.peek()
        if token.kind is not TokenKind.EOF:
            self.pos += 1
        return token

    def match(self, kind):
        """Consumes the current token if it is of kind."""
        if self.peek().kind is kind:
            self.advance()
            return True
        return False

    def consume(self, kind, msg):
        """Consumes and returns the current token if it is of kind, otherwise raises ParseError at it."""
        token = self.peek()
        if token.kind is not kind:
            raise ParseError(msg, token)
        return self.advance()

    def parse(self):
        """Parses the whole token list into a Program. The call stack gets room for nesting as deep as the token list
        allows; should it still run out, a ParseError is raised at the token reached.
        """
        statements = []
        with recursion_room(len(self.tokens) * FRAMES_PER_TOKEN):
            try:
                while self.peek().kind is not TokenKind.EOF:
                    statements.append(self.parse_statement())
            except RecursionError:
                raise ParseError("program nested too deeply", self.peek()) from None
        return tree.Program(1, 1, statements)

    # statements

    def parse_statement(self):
        kind = self.peek().kind
        if kind is TokenKind.OUTPUT:
            return self.parse_output()
        elif kind is TokenKind.INPUT:
            return self.parse_input()
        elif kind is TokenKind.IF:
            return self.parse_if()
        elif kind is TokenKind.LOOP:
            return self.parse_loop()
        elif kind is TokenKind.LBRACE:
            return self.parse_block()
        return self.parse_assignment_or_expr_stmt()

    def parse_block(self):
        """Brace-delimited block, or a single statement where no '{' opens one."""
        if self.peek().kind is not TokenKind.LBRACE:
            return self.parse_statement()

        brace = self.advance()
        statements = []
        while self.peek().kind not in (TokenKind.RBRACE, TokenKind.EOF):
            statements.append(self.parse_statement())
        self.consume(TokenKind.RBRACE, "expected '}' to close block")

        return tree.Block(brace.line, brace.col, statements)

    def parse_output(self):
        keyword = self.consume(TokenKind.OUTPUT, "expected 'output'")
        self.consume(TokenKind.LPAREN, "expected '(' after 'output'")

        args = []
        if self.peek().kind is not TokenKind.RPAREN:
            args.append(self.parse_expression())
            while self.match(TokenKind.COMMA):
                args.append(self.parse_expression())

        self.consume(TokenKind.RPAREN, "expected ')'")
        self.consume(TokenKind.SEMI, "expected ';' after 'output(...)'")
        return tree.Output(keyword.line, keyword.col, args)

    def parse_input(self):
        keyword = self.consume(TokenKind.INPUT, "expected 'input'")
        self.consume(TokenKind.LPAREN, "expected '(' after 'input'")
        name = self.consume(TokenKind.IDENTIFIER, "expected identifier in 'input(var)'")
        self.consume(TokenKind.RPAREN, "expected ')'")
        self.consume(TokenKind.SEMI, "expected ';' after 'input(...)'")
        return tree.Input(keyword.line, keyword.col, name.lexeme)

    def parse_if(self):
        keyword = self.consume(TokenKind.IF, "expected 'if'")
        self.consume(TokenKind.LPAREN, "expected '(' after 'if'")
        condition = self.parse_expression()
        self.consume(TokenKind.RPAREN, "expected ')'")

        then_branch = self.parse_block()
        else_branch = self.parse_block() if self.match(TokenKind.ELSE) else None
        return tree.If(keyword.line, keyword.col, condition, then_branch, else_branch)

    def parse_loop(self):
        keyword = self.consume(TokenKind.LOOP, "expected 'loop'")
        self.consume(TokenKind.LPAREN, "expected '(' after 'loop'")
        condition = self.parse_expression()
        self.consume(TokenKind.RPAREN, "expected ')'")

        body = self.parse_block()
        return tree.Loop(keyword.line, keyword.col, condition, body)

    def parse_assignment_or_expr_stmt(self):
        if self.peek().kind is TokenKind.IDENTIFIER and self.peek(1).kind is TokenKind.ASSIGN:
            name = self.advance()
            self.advance()  # '='
            value = self.parse_expression()
            self.consume(TokenKind.SEMI, "expected ';' after assignment")
            return tree.Assign(name.line, name.col, name.lexeme, value)

        start = self.peek()
        expr = self.parse_expression()
        self.consume(TokenKind.SEMI, "expected ';' after expression")
        return tree.ExprStmt(start.line, start.col, expr)

    # expressions

    def parse_expression(self):
        return self.parse_binary()

    def parse_binary(self, min_level=0):
        """Precedence climbing over BINARY_LEVELS. Operators of one level fold to the left in the loop, so a chain
        like 1 + 1 + ... adds no stack depth. Only a tighter level recurses, at most once per level.
        """
        left = self.parse_unary()
        while PRECEDENCE.get(self.peek().kind, -1) >= min_level:
            op_token = self.advance()
            level = PRECEDENCE[op_token.kind]
            right = self.parse_binary(level + 1)
            left = tree.Binary(op_token.line, op_token.col, BINARY_LEVELS[level][op_token.kind], left, right)
        return left

    def parse_unary(self):
        token = self.peek()
        if token.kind in UNARY_OPS:
            self.advance()
            operand = self.parse_unary()
            return tree.Unary(token.line, token.col, UNARY_OPS[token.kind], operand)
        return self.parse_primary()

    def parse_primary(self):
        token = self.peek()
        if token.kind is TokenKind.NUMBER:
            self.advance()
            return tree.IntLiteral(token.line, token.col, token.lexeme)
        elif token.kind is TokenKind.STRING:
            self.advance()
            return tree.StringLiteral(token.line, token.col, token.lexeme)
        elif token.kind is TokenKind.IDENTIFIER:
            self.advance()
            return tree.Variable(token.line, token.col, token.lexeme)
        elif self.match(TokenKind.LPAREN):
            expr = self.parse_expression()
            self.consume(TokenKind.RPAREN, "expected ')'")
            return expr

        raise ParseError("invalid primary expression", token)


def parse(tokens):
    """Convenience wrapper: Program of tokens, raising ParseError on failure."""
    return Parser(tokens).parse()
