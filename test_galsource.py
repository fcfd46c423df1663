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

import pytest

import galsource
from galerrors import ParsingError
from galsource import Lexer
from galtables import TruthTable

DESIGN = """
// sample design
pin 10, 11 = a, b;
pin 23 = q;
pin 17 = and;
pin 19 = xor;
pin 18 = or;

/*
 * registered output
 */
table(a, b -> q).dff {
    00 0
    01 0
    10 1
    11 0
}

table(a, b -> and) {
    11 1
    00 0
    01 0
    10 0
}

table(a, b -> xor).count {
    0110
}

table(a, b -> or).fill(1) {
    00 0
}
"""

WIDE_PINS = "pin " + ", ".join(str(pin) for pin in range(1, 67)) + " = " + ", ".join(f"i{n}" for n in range(65)) + ", q;\n"
WIDE_INPUTS = ", ".join(f"i{n}" for n in range(65))

def kinds(text):
    return [ token.kind for token in Lexer().lex(text) ]

def test_lexer_tokens():

    tokens = Lexer().lex("pin 13 = i0; // comment\ntable(i0 -> o).count { 0110 }")

    assert [ (token.kind, token.value) for token in tokens ] == [
        ('pin', 'pin'), ('number', '13'), ('=', '='), ('identifier', 'i0'), (';', ';'),
        ('table', 'table'), ('(', '('), ('identifier', 'i0'), ('->', '->'), ('identifier', 'o'), (')', ')'),
        ('.', '.'), ('count', 'count'), ('{', '{'), ('number', '0110'), ('}', '}'),
        ('eof', None),
    ]
    assert tokens[5].line == 2

def test_lexer_counts_lines_in_block_comments():

    tokens = Lexer().lex("/* one\ntwo\nthree */ pin")

    assert tokens[0].kind == 'pin'
    assert tokens[0].line == 3

def test_lexer_operators():
    assert kinds("!a & b | c ? d") == ['!', 'identifier', '&', 'identifier', '|', 'identifier', '?', 'identifier', 'eof']

@pytest.mark.parametrize("text, line", [
    ("pin 1 = a;\n0103", 2),
    ("pin 1 = a;\n\n$", 3),
    ("/* never closed", 1),
    ("a - b", 1),
    ("pin 1, 14 = a, y;\ny = a[0];", 2),
])
def test_lexer_errors(text, line):

    with pytest.raises(ParsingError) as excinfo:
        Lexer().lex(text)

    assert excinfo.value.line == line

def test_parse_design():

    assert galsource.parse(DESIGN) == [
        TruthTable(23, True, [10, 11], [False, False, True, False]),
        TruthTable(17, False, [10, 11], [False, False, False, True]),
        TruthTable(19, False, [10, 11], [False, True, True, False]),
        TruthTable(18, False, [10, 11], [False, True, True, True]),
    ]

def test_pin_names():
    assert galsource.pin_names(DESIGN) == { 10: "a", 11: "b", 23: "q", 17: "and", 19: "xor", 18: "or" }

def test_count_table_across_rows():

    tables = galsource.parse("pin 1, 2, 3, 14 = a, b, c, y;\ntable(a, b, c -> y).count { 0001 0111 }")

    assert tables[0].table == (False, False, False, True, False, True, True, True)

def test_boolean_functions():

    tables = galsource.parse("""
        pin 2, 3, 4 = a, b, c;
        pin 20 = y;
        pin 21 = z;
        y = a & !b | c;
        z.dff = (a ? b) & 1;
    """)

    assert tables[0] == TruthTable(20, False, [2, 3, 4], [False, True, False, True, True, True, False, True])
    assert tables[1] == TruthTable(21, True, [2, 3], [False, True, True, False])

def test_function_inputs_follow_first_use():

    tables = galsource.parse("pin 2, 3, 14 = a, b, y;\ny = b & !a;")

    assert tables[0].input_pins == (3, 2)
    assert tables[0].table == (False, False, True, False)

def test_precedence():

    # xor binds tighter than or, and tighter than xor
    tables = galsource.parse("pin 2, 3, 4, 14 = a, b, c, y;\ny = a | b ? c & a;")

    for index, value in enumerate(tables[0].table):
        a, b, c = (index >> 2) & 1, (index >> 1) & 1, index & 1
        assert value == bool(a or (b != (c and a)))

def test_constant_function():

    tables = galsource.parse("pin 14 = y;\ny = 1;")

    assert tables[0] == TruthTable(14, False, [], [True])

@pytest.mark.parametrize("text, message, line", [
    ("pin 1 = a;\npin 2 = a;", "Duplicate pin name", 2),
    ("pin 1 = a;\npin 1 = b;", "Duplicate pin number", 2),
    ("pin 1, 2 = a;", "pin names", 1),
    ("pin 14 = y;\ny = x;", "not declared", 2),
    ("pin 1, 14 = a, y;\ntable(a -> y) {\n0 1\n}", "missing", 2),
    ("pin 1, 14 = a, y;\ntable(a -> y) {\n0 1\n0 0\n1 1\n}", "listed twice", 4),
    ("pin 1, 14 = a, y;\ntable(a -> y) {\n00 1\n01 1\n}", "don't match", 3),
    ("pin 1, 14 = a, y;\ntable(a -> y) {\n0 11\n1 0\n}", "single bit", 3),
    ("pin 1, 14 = a, y;\ntable(a -> y).count { 011 }", "output bits", 2),
    ("pin 1, 14 = a, y;\ntable(a -> y).count.fill(0) { 01 }", "both count and fill", 2),
    ("pin 1, 14 = a, y;\ntable(a -> y).fill(2) { 0 1 }", "Fill value", 2),
    ("pin 1, 14 = a, y;\ntable(a -> y).dff.dff { 0 1 1 1 }", "modifier", 2),
    ("pin 1, 14 = a, y;\ntable(a, a -> y).count { 0110 }", "listed twice", 2),
    ("pin 1, 14 = a, y;\ny = a;\ny = !a;", "already configured in line 2", 3),
    ("pin 1, 14 = a, y;\ny = (a & ;", "Expected a pin name", 2),
    ("pin 1, 14 = a, y;\ny = a", "end of file", 2),
    ("pin 1 = a;\n= a;", "Unexpected '='", 2),
    (WIDE_PINS + "table(" + WIDE_INPUTS + " -> q).fill(0) { " + "0" * 65 + " 1 }", "65 inputs, at most 64", 2),
    (WIDE_PINS + "q = " + WIDE_INPUTS.replace(",", " &") + ";", "65 inputs, at most 64", 2),
])
def test_parse_errors(text, message, line):

    with pytest.raises(ParsingError, match = message) as excinfo:
        galsource.parse(text)

    assert excinfo.value.line == line

def test_parse_design_returns_tables_and_names():

    tables, names = galsource.parse_design(DESIGN)

    assert tables == galsource.parse(DESIGN)
    assert names == { 10: "a", 11: "b", 23: "q", 17: "and", 19: "xor", 18: "or" }

def test_parse_file(tmp_path):

    path = tmp_path / "design.txt"
    path.write_text(DESIGN)

    assert galsource.parse_file(path) == galsource.parse(DESIGN)
