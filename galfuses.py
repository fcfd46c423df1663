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
# galfuses: Fuse map generation
#
#     Each output owns a block of AND matrix rows: an optional output enable row followed by its product term rows. A row starts in the
#     disabled pattern (every column connected, so the product term is a contradiction and always false) and a term only disconnects the
#     columns of pins it doesn't use.
#
#         block for output pin 23 (first row 1, 8 term rows):
#
#             row 1      output enable    --------------------------------------------   (all disconnected, always enabled)
#             row 2      term 0           ------------------------------------x----x--   (pin 10 true column, pin 11 complement column)
#             row 3..9   unused           xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx   (disabled)
#

from collections import namedtuple

from galerrors import TooManyTerms, TruthGalError

OutputBlock = namedtuple('OutputBlock', ['output_pin', 'first_fuse', 'fuses', 'mode_bits'])              # fuses: bytes of the block, mode_bits: ((offset, value), ...)

class FuseArray:

    def __init__(self, size, fill = 0, row_length = None):
        self._fuses = bytearray([fill]) * size
        self._row_length = row_length
        self._placed = []                                                                               # (first fuse, end fuse, owner) of every range written with place()

    def __len__(self):
        return len(self._fuses)

    def __getitem__(self, index):
        return self._fuses[index]

    def __eq__(self, other):
        return isinstance(other, FuseArray) and self._fuses == other._fuses

    @property
    def row_length(self):
        return self._row_length

    def get(self, row, column):
        return self._fuses[self._address(row, column)]

    def set(self, index, value):
        self._fuses[index] = 1 if value else 0

    def row(self, row):
        start = self._address(row, 0)
        return bytes(self._fuses[start:start + self._row_length])

    def bits(self):
        return bytes(self._fuses)

    def placed(self):
        return list(self._placed)

    def _address(self, row, column):

        if self._row_length is None:
            raise TruthGalError("Fuse array has no row layout")

        if not 0 <= column < self._row_length:
            raise IndexError(f"Column {column} is outside a row of {self._row_length} fuses")

        return row * self._row_length + column

    #
    # _check_claim:
    #   Refuse a fuse range outside the array or overlapping a range already written or claimed by the same place() call
    #

    def _check_claim(self, first, end, owner, output_pin, claimed):

        if first < 0 or end > len(self._fuses):
            raise TruthGalError(f"Fuses {first}..{end - 1} of {owner} are outside the fuse array", output_pin)

        for placed_first, placed_end, placed_owner in self._placed + claimed:
            if first < placed_end and placed_first < end:
                raise TruthGalError(f"Fuses {first}..{end - 1} of {owner} overlap fuses already written by {placed_owner}", output_pin)

    #
    # place:
    #   Copy an output block and its mode bits into the array, nothing is recorded or written unless every range is free
    #

    def place(self, block):

        owner = f"output pin {block.output_pin}"
        end = block.first_fuse + len(block.fuses)
        ranges = [ (block.first_fuse, end) ] + [ (offset, offset + 1) for offset, _ in block.mode_bits ]
        claimed = []

        for first, last in ranges:
            self._check_claim(first, last, owner, block.output_pin, claimed)
            claimed.append((first, last, owner))

        self._placed.extend(claimed)

        self._fuses[block.first_fuse:end] = block.fuses

        for offset, value in block.mode_bits:
            self._fuses[offset] = value

#
# empty_fuse_array:
#   Create the fuse array for a device with nothing programmed: every matrix row disabled (unused outputs stay tri-stated and global
#   reset/preset rows never fire) and every other fuse at 0
#

def empty_fuse_array(config):

    fuses = FuseArray(config.fuse_count, 0, config.row_length())

    if config.connected_fuse:
        for index in range(config.matrix_fuses):
            fuses.set(index, 1)

    return fuses

#
# write_term_row:
#   Write one product term into a row starting at fuse offset start, pins not named by the term are don't cares (both columns disconnected)
#

def write_term_row(fuses, start, term, config):

    row_length = config.row_length()

    fuses[start:start + row_length] = bytes([config.disconnected_fuse]) * row_length

    for literal in term.literals:
        fuses[start + config.column(literal.pin, literal.inverted)] = config.connected_fuse

#
# mode_bit_values:
#   Get the value of each mode bit for an output, outputs are always active high, registered only when the flip flop is enabled
#

def mode_bit_values(expression, config):

    values = {
        "polarity": config.mode_value("polarity_active_high"),
        "combinatorial": config.mode_value("registered") if expression.enable_flip_flop else config.mode_value("combinatorial"),
    }

    layout = config.mode_bit_layout(expression.output_pin)

    return tuple((layout[name].offset, values[name]) for name in sorted(layout) if name in values)

#
# layout:
#   Lay out one expression into the fuse block of its output pin
#

def layout(expression, config):

    capacity = config.row_capacity(expression.output_pin)

    if len(expression.terms) > capacity:
        raise TooManyTerms(expression.output_pin, len(expression.terms), capacity)

    row_length = config.row_length()
    first_fuse, rows = config.block(expression.output_pin)

    #
    # Every row of the block starts disabled
    #

    fuses = bytearray([config.connected_fuse]) * (rows * row_length)
    row = 0

    #
    # The output enable row has no connected inputs, the term is always true and the output always drives its pin
    #

    if config.output(expression.output_pin).oe_row:
        fuses[0:row_length] = bytes([config.disconnected_fuse]) * row_length
        row = 1

    #
    # Each term takes the next row, the remaining rows stay disabled
    #

    for term in expression.terms:
        write_term_row(fuses, row * row_length, term, config)
        row += 1

    return OutputBlock(expression.output_pin, first_fuse, bytes(fuses), mode_bit_values(expression, config))
