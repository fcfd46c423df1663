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

import itertools

import pytest

import galdnf
from galdnf import Expression, Literal, ProductTerm
from galerrors import InputCountExceeded, TableLengthMismatch
from galtables import TruthTable

def all_tables(input_pins, output_pin = 23):
    for values in itertools.product([False, True], repeat = 2 ** len(input_pins)):
        yield TruthTable(output_pin, False, input_pins, values)

def assignment(input_pins, index):
    count = len(input_pins)
    return { pin: bool((index >> (count - 1 - position)) & 1) for position, pin in enumerate(input_pins) }

def test_single_true_entry(g22v10):

    expression = galdnf.build(TruthTable(23, False, [10, 11], [False, False, True, False]), g22v10)

    assert expression == Expression(23, False, [ ProductTerm([ Literal(10, False), Literal(11, True) ]) ])

def test_all_false_table_has_no_terms(g22v10):

    expression = galdnf.build(TruthTable(23, True, [3, 2], [False] * 4), g22v10)

    assert expression.terms == ()
    assert expression.is_false()
    assert expression.enable_flip_flop is True

def test_terms_follow_index_order():

    expression = galdnf.build(TruthTable(17, False, [3, 2, 1], [True, False, False, True, False, False, True, False]))

    assert [ term.literals for term in expression.terms ] == [
        (Literal(3, True), Literal(2, True), Literal(1, True)),
        (Literal(3, True), Literal(2, False), Literal(1, False)),
        (Literal(3, False), Literal(2, False), Literal(1, True)),
    ]

def test_first_input_is_most_significant_bit():

    term = galdnf.build_term(0b100, [7, 8, 9])

    assert term.pins() == (7, 8, 9)
    assert [ literal.inverted for literal in term.literals ] == [False, True, True]

@pytest.mark.parametrize("input_pins", [ [10], [10, 11], [1, 2, 3] ])
def test_expression_reproduces_every_table(input_pins):

    for table in all_tables(input_pins):

        expression = galdnf.build(table)

        assert len(expression.terms) == table.true_count()

        for index, value in enumerate(table.table):
            assert galdnf.evaluate(expression, assignment(input_pins, index)) == value

def test_build_is_deterministic(g22v10):

    table = TruthTable(19, False, [10, 11], [False, True, True, False])

    assert galdnf.build(table, g22v10) == galdnf.build(table, g22v10)

def test_table_without_inputs():

    assert galdnf.build(TruthTable(14, False, [], [True])).terms == (ProductTerm([]),)
    assert galdnf.build(TruthTable(14, False, [], [False])).terms == ()

def test_too_many_inputs():

    with pytest.raises(InputCountExceeded) as excinfo:
        galdnf.build(TruthTable(23, False, list(range(65)), []))

    assert excinfo.value.output_pin == 23
    assert excinfo.value.input_count == 65

def test_table_length_mismatch():

    with pytest.raises(TableLengthMismatch) as excinfo:
        galdnf.build(TruthTable(18, False, [10, 11], [True, False, True]))

    assert excinfo.value.output_pin == 18
    assert "18" in str(excinfo.value)

def test_build_all_stops_at_first_bad_table(g22v10):

    tables = [
        TruthTable(23, False, [10, 11], [False, False, True, False]),
        TruthTable(17, False, [10, 11], [True]),
        TruthTable(19, False, [10, 11], [True, True]),
    ]

    with pytest.raises(TableLengthMismatch) as excinfo:
        galdnf.build_all(tables, g22v10)

    assert excinfo.value.output_pin == 17

def test_build_all_keeps_table_order(g22v10):

    tables = [
        TruthTable(18, False, [10, 11], [False, True, True, True]),
        TruthTable(17, False, [10, 11], [False, False, False, True]),
    ]

    assert [ expression.output_pin for expression in galdnf.build_all(tables, g22v10) ] == [18, 17]

def test_format_expression():

    expression = galdnf.build(TruthTable(19, False, [10, 11], [False, True, True, False]))

    assert galdnf.format_expression(expression, { 10: "a", 11: "b", 19: "xor" }) == (
        "xor = !a & b\n"
        "    # a & !b;\n"
    )

def test_format_registered_and_constant_expressions():

    assert galdnf.format_expression(Expression(23, True, [])) == "pin23.dff = 'b'0;\n"
    assert galdnf.format_expression(Expression(14, False, [ ProductTerm([]) ])) == "pin14 = 'b'1;\n"
