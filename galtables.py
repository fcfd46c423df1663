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
# galtables: Truth table values, table json import/export and pin validation against a device
#
#     Table json format (array of objects):
#
#         [ { "dff": false, "inputPins": [10, 11], "outputPin": 23, "table": [false, false, true, false] } ]
#
#     Entry i of "table" is the output for the input combination whose bits are i, most significant bit = inputPins[0]
#

import json
import pathlib
from collections import namedtuple

import galdnf
from galerrors import InputCountExceeded, ParsingError, TableLengthMismatch, ValidationError

class TruthTable(namedtuple('TruthTable', ['output_pin', 'enable_flip_flop', 'input_pins', 'table'])):

    __slots__ = ()

    def __new__(cls, output_pin, enable_flip_flop, input_pins, table):
        return super().__new__(cls, output_pin, bool(enable_flip_flop), tuple(input_pins), tuple(bool(value) for value in table))

    def true_count(self):
        return sum(1 for value in self.table if value)

#
# tables_from_json:
#   Build truth tables from already decoded table json, checking the shape of every entry
#

def tables_from_json(data):

    if not isinstance(data, list):
        raise ParsingError("Table json must be an array of table objects")

    tables = []

    for index, entry in enumerate(data):

        if not isinstance(entry, dict):
            raise ParsingError(f"Table json entry {index} is not an object")

        missing = [ key for key in ("dff", "inputPins", "outputPin", "table") if key not in entry ]

        if missing:
            raise ParsingError(f"Table json entry {index} is missing {', '.join(missing)}")

        #
        # bool is a subclass of int so it is excluded explicitly for pin numbers
        #

        output_pin = entry["outputPin"]
        input_pins = entry["inputPins"]
        values = entry["table"]

        if not isinstance(output_pin, int) or isinstance(output_pin, bool):
            raise ParsingError(f"Table json entry {index}: outputPin must be a number")

        if not isinstance(input_pins, list) or any(not isinstance(pin, int) or isinstance(pin, bool) for pin in input_pins):
            raise ParsingError(f"Table json entry {index}: inputPins must be an array of numbers")

        if not isinstance(values, list) or any(not isinstance(value, bool) for value in values):
            raise ParsingError(f"Table json entry {index}: table must be an array of booleans")

        if not isinstance(entry["dff"], bool):
            raise ParsingError(f"Table json entry {index}: dff must be a boolean")

        if len(input_pins) > galdnf.MAX_INPUTS:
            raise InputCountExceeded(output_pin, len(input_pins), galdnf.MAX_INPUTS)

        if len(values) != 2 ** len(input_pins):
            raise TableLengthMismatch(output_pin, len(values), len(input_pins))

        tables.append(TruthTable(output_pin, entry["dff"], input_pins, values))

    return tables

def tables_to_json(tables):
    return [
        {
            "dff": table.enable_flip_flop,
            "inputPins": list(table.input_pins),
            "outputPin": table.output_pin,
            "table": list(table.table),
        }
        for table in tables
    ]

def load_tables(path):

    with open(pathlib.Path(path), 'r') as file:

        try:
            data = json.load(file)
        except json.JSONDecodeError as e:
            raise ParsingError(f"Table json '{path}' is not valid json: {e.msg}", e.lineno) from e

    return tables_from_json(data)

def save_tables(tables, path):

    with open(pathlib.Path(path), 'w') as file:
        json.dump(tables_to_json(tables), file, indent = 2)
        file.write('\n')

#
# validate:
#   Check that every pin used by the tables is legal for the device and that no output is configured twice
#

def validate(tables, config):

    legal_inputs = set(config.input_pins())
    legal_outputs = set(config.output_pins())
    configured = set()

    for table in tables:

        if table.output_pin not in legal_outputs:
            raise ValidationError(f"Pin {table.output_pin} can't be used as an output on device '{config.identifier}'", table.output_pin)

        if table.output_pin in configured:
            raise ValidationError(f"Output pin {table.output_pin} is configured by more than one table", table.output_pin)

        configured.add(table.output_pin)

        seen = set()

        for pin in table.input_pins:

            if pin not in legal_inputs:
                raise ValidationError(f"Pin {pin} can't be used as an input on device '{config.identifier}' (table for output pin {table.output_pin})", table.output_pin)

            if pin in seen:
                raise ValidationError(f"Input pin {pin} is listed twice in the table for output pin {table.output_pin}", table.output_pin)

            seen.add(pin)
