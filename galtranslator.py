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
# galtranslator: Translate truth tables into the complete fuse array of a device
#
#     - Build one DNF expression per truth table
#     - Lay out each expression into the fuse block of its output pin
#     - Place every block into one fuse array in device defined output order
#
#     The first failure aborts the run, the caller never sees a partially programmed fuse array
#

import tqdm

import galdnf
import galfuses

#
# process:
#   Build the fuse array for a list of truth tables on a device
#

def process(tables, config, verbose = False):

    expressions = galdnf.build_all(tables, config, verbose)

    #
    # Lay out every block before touching the array, in table order so the first failing table is the one reported
    #

    if verbose:
        print("Building output pin fuse blocks...")

    blocks = [ galfuses.layout(expression, config) for expression in tqdm.tqdm(expressions, disable = not verbose) ]

    #
    # Two tables for the same output would place the same block twice, place() refuses the overlap
    #

    order = config.outputs_in_order()
    fuses = galfuses.empty_fuse_array(config)

    for block in sorted(blocks, key = lambda block: order.index(block.output_pin)):
        fuses.place(block)

    return fuses
