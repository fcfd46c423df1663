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
# galdnf: Canonical sum of products (DNF) expressions built from truth tables
#
#     Every true entry of a truth table becomes one product term that names every input pin, the terms are OR'ed together. There is no
#     minimization, an output needs exactly as many product term rows as its table has true entries.
#

from collections import namedtuple

import tqdm

from galerrors import InputCountExceeded, TableLengthMismatch

#
# Constants
#

MAX_INPUTS = 64                                                                                         # maximum input pins of one table

ANDSTR = '&'                                                                                            # string to use for logical AND in expression listings
ORSTR = '#'                                                                                             # string to use for logical OR in expression listings
NOTSTR = '!'                                                                                            # string to use for logical NOT in expression listings

#
# Expression value types
#

Literal = namedtuple('Literal', ['pin', 'inverted'])                                                    # pin value (inverted = False) or its complement (inverted = True)

class ProductTerm(namedtuple('ProductTerm', ['literals'])):

    __slots__ = ()

    def __new__(cls, literals):
        return super().__new__(cls, tuple(literals))

    def pins(self):
        return tuple(literal.pin for literal in self.literals)

class Expression(namedtuple('Expression', ['output_pin', 'enable_flip_flop', 'terms'])):

    __slots__ = ()

    def __new__(cls, output_pin, enable_flip_flop, terms):
        return super().__new__(cls, output_pin, bool(enable_flip_flop), tuple(terms))

    def is_false(self):
        return len(self.terms) == 0

#
# build_term:
#   Build the product term for one input combination, bit j counted from the most significant bit belongs to input_pins[j]
#       Example:
#           bits:       0b10
#           input_pins: [10, 11]
#           returns:    10 & !11
#

def build_term(bits, input_pins):

    count = len(input_pins)

    return ProductTerm(
        Literal(pin, ((bits >> (count - 1 - position)) & 1) == 0)
        for position, pin in enumerate(input_pins)
    )

#
# build:
#   Build the canonical DNF expression for one truth table
#
#   The device configuration isn't consulted for pin membership, tables are expected to be validated already
#

def build(table, config = None):

    input_count = len(table.input_pins)

    if input_count > MAX_INPUTS:
        raise InputCountExceeded(table.output_pin, input_count, MAX_INPUTS)

    if len(table.table) != 2 ** input_count:
        raise TableLengthMismatch(table.output_pin, len(table.table), input_count)

    #
    # One term per true entry, in ascending index order so the output is reproducible
    #

    terms = [ build_term(index, table.input_pins) for index, value in enumerate(table.table) if value ]

    return Expression(table.output_pin, table.enable_flip_flop, terms)

#
# build_all:
#   Build expressions for a list of truth tables, the first failing table aborts the whole batch
#

def build_all(tables, config = None, verbose = False):

    if verbose:
        print("Building DNF expressions...")

    return [ build(table, config) for table in tqdm.tqdm(tables, disable = not verbose) ]

#
# evaluate:
#   Evaluate an expression for a map of pin number > pin value
#

def evaluate(expression, values):

    return any(
        all(bool(values[literal.pin]) != literal.inverted for literal in term.literals)
        for term in expression.terms
    )

#
# format_expression:
#   Render an expression in PLD syntax, one product term per line
#       Example:
#
#           pin23 = pin10 & !pin11
#                 # !pin10 & pin11;
#

def format_expression(expression, pin_names = None):

    pin_names = pin_names or {}

    def name_of(pin):
        return pin_names.get(pin, f"pin{pin}")

    name = name_of(expression.output_pin)

    if expression.enable_flip_flop:
        name += ".dff"

    if expression.is_false():
        return f"{name} = 'b'0;\n"

    lines = []

    for i, term in enumerate(expression.terms):

        line = f' {ANDSTR} '.join(f"{NOTSTR if literal.inverted else ''}{name_of(literal.pin)}" for literal in term.literals)

        #
        # A term without literals comes from a table without inputs, it is always true
        #

        if not line:
            line = "'b'1"

        if i == 0:
            lines.append(f"{name} = {line}")
        else:
            lines.append(f"{' ' * len(name)} {ORSTR} {line}")

    return '\n'.join(lines) + ';\n'
