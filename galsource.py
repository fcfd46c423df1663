#
# Copyright (c) 2025 Clint Kolodziej
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#

#
# galsource: Lexer and parser for truth table source files
#
#     pin 13 = i0;                              pin number = name, "pin 10, 11 = a, b;" declares several at once
#
#     table(i0, i1 -> and) {                    full table: input bits then the output bit
#         00 0
#         01 0
#         10 0
#         11 1
#     }
#
#     table(i0, i1 -> xor).count { 0110 }       output bits in counting order
#     table(i0, i1 -> or).fill(1) { 00 0 }      rows that aren't listed take the fill value
#     table(i0, i1 -> q).dff { ... }            registered output
#
#     y = (a & !b) | (a ? b);                   boolean function: ! (not), & (and), ? (xor), | (or)
#     q.dff = a & b;
#
#     Comments are // to end of line and /* ... */
#

import pathlib
import re
from collections import namedtuple

import galdnf
from galerrors import ParsingError
from galtables import TruthTable

#
# Constants
#

AND = '&'
OR = '|'
XOR = '?'
NOT = '!'

KEYWORDS = ('pin', 'table', 'count', 'fill', 'dff')

Token = namedtuple('Token', ['kind', 'value', 'line'])

class Lexer:

    COMMENT_LINE = re.compile(r'//[^\n]*')
    COMMENT_BLOCK = re.compile(r'/\*.*?\*/', re.DOTALL)
    COMMENT_OPEN = re.compile(r'/\*')
    WHITESPACE = re.compile(r'[ \t\r\n]+')
    ARROW = re.compile(r'->')
    NUMBER = re.compile(r'[0-9]+')
    IDENTIFIER = re.compile(r'[A-Za-z][A-Za-z0-9_]*')
    SYMBOL = re.compile(r'[&|?!(){},;=.]')

    #
    # lex:
    #   Split source text into tokens, comments and whitespace are dropped, an 'eof' token is always last
    #

    def lex(self, text):

        tokens = []
        line = 1
        position = 0

        while position < len(text):

            if m := self.COMMENT_LINE.match(text, position):
                pass
            elif m := self.COMMENT_BLOCK.match(text, position):
                pass
            elif self.COMMENT_OPEN.match(text, position):
                raise ParsingError("Comment is never closed", line)
            elif m := self.WHITESPACE.match(text, position):
                pass
            elif m := self.ARROW.match(text, position):
                tokens.append(Token('->', m.group(0), line))
            elif m := self.NUMBER.match(text, position):
                tokens.append(self._number(m.group(0), line))
            elif m := self.IDENTIFIER.match(text, position):
                word = m.group(0)
                tokens.append(Token(word if word in KEYWORDS else 'identifier', word, line))
            elif m := self.SYMBOL.match(text, position):
                tokens.append(Token(m.group(0), m.group(0), line))
            else:
                raise ParsingError(f"Unexpected character '{text[position]}'", line)

            line += m.group(0).count('\n')
            position = m.end()

        tokens.append(Token('eof', None, line))

        return tokens

    #
    # _number:
    #   A number starting with 0 is a bit row and may only contain 0 and 1
    #

    @staticmethod
    def _number(digits, line):

        if digits[0] == '0' and set(digits) - {'0', '1'}:
            raise ParsingError(f"Expected only 0 and 1 in bit row '{digits}'", line)

        return Token('number', digits, line)

class Parser:

    def __init__(self, tokens):
        self._tokens = tokens
        self._index = 0
        self._pins_by_name = {}
        self.names_by_pin = {}
        self._configured = {}                                                                           # output pin > line of the table or function that configures it
        self.tables = []

    #
    # Token helpers
    #

    def _peek(self, offset = 0):
        return self._tokens[min(self._index + offset, len(self._tokens) - 1)]

    def _next(self):
        token = self._peek()
        self._index += 1
        return token

    def _accept(self, kind):

        if self._peek().kind == kind:
            return self._next()

        return None

    def _expect(self, kind, what = None):

        token = self._next()

        if token.kind != kind:
            found = 'end of file' if token.kind == 'eof' else f"'{token.value}'"
            raise ParsingError(f"Expected {what or repr(kind)} but found {found}", token.line)

        return token

    def _pin(self, token):

        if token.value not in self._pins_by_name:
            raise ParsingError(f"Pin name '{token.value}' is not declared", token.line)

        return self._pins_by_name[token.value]

    def _bits(self, token):

        if set(token.value) - {'0', '1'}:
            raise ParsingError(f"Expected only 0 and 1 in bit row '{token.value}'", token.line)

        return [ digit == '1' for digit in token.value ]

    def _configure(self, output_pin, line):

        if output_pin in self._configured:
            raise ParsingError(f"Output pin {output_pin} is already configured in line {self._configured[output_pin]}", line)

        self._configured[output_pin] = line

    #
    # parse:
    #   Parse every statement and return the truth tables in source order
    #

    def parse(self):

        while self._peek().kind != 'eof':

            token = self._peek()

            if token.kind == 'pin':
                self._parse_pins()
            elif token.kind == 'table':
                self._parse_table()
            elif token.kind == 'identifier':
                self._parse_function()
            else:
                raise ParsingError(f"Unexpected '{token.value}', expected pin, table or a boolean function", token.line)

        return self.tables

    #
    # _parse_pins:
    #   pin <number>[, <number>...] = <name>[, <name>...];
    #

    def _parse_pins(self):

        keyword = self._expect('pin')
        numbers = [ self._expect('number', 'pin number') ]

        while self._accept(','):
            numbers.append(self._expect('number', 'pin number'))

        self._expect('=', "'='")

        names = [ self._expect('identifier', 'pin name') ]

        while self._accept(','):
            names.append(self._expect('identifier', 'pin name'))

        self._expect(';', "';'")

        if len(numbers) != len(names):
            raise ParsingError(f"{len(numbers)} pin numbers but {len(names)} pin names", keyword.line)

        for number, name in zip(numbers, names):

            pin = int(number.value)

            if name.value in self._pins_by_name:
                raise ParsingError(f"Duplicate pin name '{name.value}'", name.line)

            if pin in self.names_by_pin:
                raise ParsingError(f"Duplicate pin number {pin}", number.line)

            self._pins_by_name[name.value] = pin
            self.names_by_pin[pin] = name.value

    #
    # _check_input_count:
    #   Tables and functions are limited to galdnf.MAX_INPUTS inputs, checked before the table is built
    #

    def _check_input_count(self, input_pins, output, line):

        if len(input_pins) > galdnf.MAX_INPUTS:
            raise ParsingError(f"'{output.value}' has {len(input_pins)} inputs, at most {galdnf.MAX_INPUTS} are supported", line)

    #
    # _parse_table:
    #   table(<inputs> -> <output>)[.count][.fill(<bit>)][.dff] { <rows> }
    #

    def _parse_table(self):

        keyword = self._expect('table')
        self._expect('(', "'('")

        inputs = [ self._expect('identifier', 'input pin name') ]

        while self._accept(','):
            inputs.append(self._expect('identifier', 'input pin name'))

        self._expect('->', "'->'")
        output = self._expect('identifier', 'output pin name')
        self._expect(')', "')'")

        input_pins = [ self._pin(token) for token in inputs ]
        output_pin = self._pin(output)

        if len(set(input_pins)) != len(input_pins):
            raise ParsingError(f"Input pin listed twice in table for '{output.value}'", keyword.line)

        self._check_input_count(input_pins, output, keyword.line)

        #
        # Modifiers
        #

        count = False
        fill = None
        dff = False

        while self._accept('.'):

            token = self._next()

            if token.kind == 'count' and not count:
                count = True
            elif token.kind == 'dff' and not dff:
                dff = True
            elif token.kind == 'fill' and fill is None:
                self._expect('(', "'('")
                value = self._expect('number', 'fill value')
                if value.value not in ('0', '1'):
                    raise ParsingError(f"Fill value must be 0 or 1, got '{value.value}'", value.line)
                fill = value.value == '1'
                self._expect(')', "')'")
            else:
                raise ParsingError(f"Unexpected table modifier '{token.value}'", token.line)

        if count and fill is not None:
            raise ParsingError("A table can't use both count and fill", keyword.line)

        self._expect('{', "'{'")

        rows = []

        while not self._accept('}'):
            rows.append(self._expect('number', 'bit row or }'))

        if count:
            table = self._count_table(rows, len(input_pins), keyword.line)
        else:
            table = self._full_table(rows, len(input_pins), fill, keyword.line)

        self._configure(output_pin, keyword.line)
        self.tables.append(TruthTable(output_pin, dff, input_pins, table))

    def _count_table(self, rows, input_count, line):

        table = []

        for row in rows:
            table.extend(self._bits(row))

        if len(table) != 2 ** input_count:
            raise ParsingError(f"Counting table has {len(table)} output bits, {2 ** input_count} expected", line)

        return table

    def _full_table(self, rows, input_count, fill, line):

        if len(rows) % 2 != 0:
            raise ParsingError("Table rows must be pairs of input bits and an output bit", line)

        table = [ None ] * (2 ** input_count)

        for combination, result in zip(rows[0::2], rows[1::2]):

            bits = self._bits(combination)
            value = self._bits(result)

            if len(bits) != input_count:
                raise ParsingError(f"Input bits '{combination.value}' don't match {input_count} inputs", combination.line)

            if len(value) != 1:
                raise ParsingError(f"Output must be a single bit, got '{result.value}'", result.line)

            index = int(combination.value, 2)

            if table[index] is not None:
                raise ParsingError(f"Input combination '{combination.value}' is listed twice", combination.line)

            table[index] = value[0]

        #
        # Combinations that aren't listed take the fill value, without a fill value every combination must be listed
        #

        missing = [ index for index, value in enumerate(table) if value is None ]

        if missing and fill is None:
            raise ParsingError(f"Table is missing {len(missing)} input combinations, list them or use fill", line)

        return [ fill if value is None else value for value in table ]

    #
    # _parse_function:
    #   <output>[.dff] = <expression>;
    #

    def _parse_function(self):

        output = self._expect('identifier')
        dff = False

        if self._accept('.'):
            self._expect('dff', "'dff'")
            dff = True

        self._expect('=', "'='")

        inputs = []
        tree = self._parse_or(inputs)

        self._expect(';', "';'")

        output_pin = self._pin(output)
        input_pins = [ self._pin(token) for token in inputs ]

        self._check_input_count(input_pins, output, output.line)

        #
        # Evaluate the expression for every input combination, the first input is the most significant bit
        #

        table = []

        for index in range(2 ** len(input_pins)):
            values = { token.value: bool((index >> (len(inputs) - 1 - position)) & 1) for position, token in enumerate(inputs) }
            table.append(evaluate_tree(tree, values))

        self._configure(output_pin, output.line)
        self.tables.append(TruthTable(output_pin, dff, input_pins, table))

    #
    # Expression grammar, lowest precedence first: | then ? then & then !
    #

    def _parse_or(self, inputs):

        tree = self._parse_xor(inputs)

        while self._accept(OR):
            tree = ('or', tree, self._parse_xor(inputs))

        return tree

    def _parse_xor(self, inputs):

        tree = self._parse_and(inputs)

        while self._accept(XOR):
            tree = ('xor', tree, self._parse_and(inputs))

        return tree

    def _parse_and(self, inputs):

        tree = self._parse_unary(inputs)

        while self._accept(AND):
            tree = ('and', tree, self._parse_unary(inputs))

        return tree

    def _parse_unary(self, inputs):

        token = self._next()

        if token.kind == NOT:
            return ('not', self._parse_unary(inputs))

        if token.kind == '(':
            tree = self._parse_or(inputs)
            self._expect(')', "')'")
            return tree

        if token.kind == 'identifier':
            self._pin(token)
            if token.value not in [ known.value for known in inputs ]:
                inputs.append(token)
            return ('pin', token.value)

        if token.kind == 'number' and token.value in ('0', '1'):
            return ('const', token.value == '1')

        found = 'end of file' if token.kind == 'eof' else f"'{token.value}'"
        raise ParsingError(f"Expected a pin name, 0, 1, '!' or '(' but found {found}", token.line)

#
# evaluate_tree:
#   Evaluate a parsed boolean function for a map of pin name > value
#

def evaluate_tree(tree, values):

    kind = tree[0]

    if kind == 'const':
        return tree[1]
    if kind == 'pin':
        return values[tree[1]]
    if kind == 'not':
        return not evaluate_tree(tree[1], values)
    if kind == 'and':
        return evaluate_tree(tree[1], values) and evaluate_tree(tree[2], values)
    if kind == 'or':
        return evaluate_tree(tree[1], values) or evaluate_tree(tree[2], values)
    if kind == 'xor':
        return evaluate_tree(tree[1], values) != evaluate_tree(tree[2], values)

    raise ValueError(f"Unknown expression node '{kind}'")

def parse(text):
    return Parser(Lexer().lex(text)).parse()

def parse_file(path):
    return parse(pathlib.Path(path).read_text())

#
# parse_design:
#   Parse source text once and get both its truth tables and its pin number > pin name map, the names label expression listings
#

def parse_design(text):

    parser = Parser(Lexer().lex(text))
    tables = parser.parse()

    return tables, dict(parser.names_by_pin)

def pin_names(text):
    return parse_design(text)[1]
