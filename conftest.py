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

import copy

import pytest

import galdevices

#
# Small device used to check geometry handling that the GAL22V10 profile doesn't exercise: 4 inputs (8 fuse columns), output pin 8 without
# an output enable row, output pin 9 with one, one global row and a connected fuse value that can be flipped
#

TINY_PROFILE = {
    "device_name": "TINY4",
    "pin_count": 10,
    "fuse_count": 68,
    "column_pins": [1, 2, 3, 4],
    "input_pins": [1, 2, 3, 4],
    "output_pins": [8, 9],
    "connected_fuse": 0,
    "outputs": [
        { "pin": 8, "first_row": 0, "term_rows": 2, "oe_row": False, "mode_bits": { "polarity": 64, "combinatorial": 65 } },
        { "pin": 9, "first_row": 2, "term_rows": 4, "oe_row": True, "mode_bits": { "polarity": 66, "combinatorial": 67 } },
    ],
    "mode_values": { "polarity_active_high": 1, "combinatorial": 1, "registered": 0 },
    "global_rows": { "asynchronous_reset": 7 },
    "regions": [ { "name": "mode bits", "offset": 64, "width": 4 } ],
}

@pytest.fixture(scope = "session")
def g22v10():
    return galdevices.get_device("g22v10")

@pytest.fixture
def tiny_profile():
    return copy.deepcopy(TINY_PROFILE)

@pytest.fixture
def tiny(tiny_profile):
    return galdevices.DeviceConfig("tiny4", tiny_profile)
