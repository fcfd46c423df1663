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
# galdevices: Device configuration model
#
#     Device geometry (pin roles, product term rows per output, column layout, mode bits) is loaded from a json profile file so a new
#     device is a data change. A DeviceConfig never changes after it has been loaded.
#

import json
import os
import pathlib
import re
from collections import namedtuple

from galerrors import ProfileError, UnknownDevice, UnknownPin

#
# Constants
#

DEFAULT_PROFILES = 'devices.config'                                                                     # profile file shipped next to this module

#
# Value types describing parts of the geometry
#

OutputGeometry = namedtuple('OutputGeometry', ['pin', 'first_row', 'term_rows', 'oe_row', 'mode_bits'])
ModeBit = namedtuple('ModeBit', ['offset', 'width'])
Region = namedtuple('Region', ['name', 'offset', 'width'])

class DeviceConfig:

    def __init__(self, identifier, profile):

        self._identifier = identifier

        #
        # Copy everything out of the profile into tuples so the configuration can't be changed through the loaded json objects
        #

        try:

            self._device_name = str(profile["device_name"])
            self._pin_count = int(profile["pin_count"])
            self._fuse_count = int(profile["fuse_count"])
            self._column_pins = tuple(int(pin) for pin in profile["column_pins"])
            self._input_pins = tuple(sorted(int(pin) for pin in profile["input_pins"]))
            self._output_pins = tuple(sorted(int(pin) for pin in profile["output_pins"]))
            self._connected_fuse = int(profile["connected_fuse"])
            self._mode_values = dict(profile["mode_values"])

            self._outputs = tuple(
                OutputGeometry(
                    pin = int(output["pin"]),
                    first_row = int(output["first_row"]),
                    term_rows = int(output["term_rows"]),
                    oe_row = bool(output.get("oe_row", False)),
                    mode_bits = tuple((name, int(offset)) for name, offset in output["mode_bits"].items()),
                )
                for output in profile["outputs"]
            )

            self._global_rows = tuple((name, int(row)) for name, row in profile.get("global_rows", {}).items())
            self._regions = tuple(Region(region["name"], int(region["offset"]), int(region["width"])) for region in profile.get("regions", []))

        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ProfileError(f"Device profile '{identifier}' is malformed: {e!r}") from e

        self._outputs_by_pin = { output.pin: output for output in self._outputs }
        self._columns_by_pin = { pin: index * 2 for index, pin in enumerate(self._column_pins) }

        self._check_geometry()

    #
    # _check_geometry:
    #   Make sure output blocks, global rows and mode bits fit in the fuse map without overlapping each other
    #

    def _check_geometry(self):

        name = self._identifier

        if self._connected_fuse not in (0, 1):
            raise ProfileError(f"Device profile '{name}': connected_fuse must be 0 or 1")

        if len(self._columns_by_pin) != len(self._column_pins):
            raise ProfileError(f"Device profile '{name}': duplicate pin in column_pins")

        if len(self._outputs_by_pin) != len(self._outputs):
            raise ProfileError(f"Device profile '{name}': duplicate output pin in outputs")

        for key in ("polarity_active_high", "combinatorial", "registered"):
            if self._mode_values.get(key) not in (0, 1):
                raise ProfileError(f"Device profile '{name}': mode_values.{key} must be 0 or 1")

        #
        # Collect every matrix row owned by an output block or a global row, a row may only have one owner
        #

        owners = {}

        for output in self._outputs:

            if output.pin not in self._output_pins:
                raise ProfileError(f"Device profile '{name}': output block for pin {output.pin} which isn't in output_pins")

            if output.term_rows < 0 or output.first_row < 0:
                raise ProfileError(f"Device profile '{name}': negative row numbers for output pin {output.pin}")

            for row in range(output.first_row, output.first_row + output.term_rows + (1 if output.oe_row else 0)):
                if row in owners:
                    raise ProfileError(f"Device profile '{name}': row {row} used by both {owners[row]} and output pin {output.pin}")
                owners[row] = f"output pin {output.pin}"

        for rowname, row in self._global_rows:
            if row in owners:
                raise ProfileError(f"Device profile '{name}': row {row} used by both {owners[row]} and {rowname}")
            owners[row] = rowname

        self._matrix_rows = max(owners) + 1 if owners else 0

        if self.matrix_fuses > self._fuse_count:
            raise ProfileError(f"Device profile '{name}': {self._matrix_rows} rows of {self.row_length()} fuses exceed fuse_count {self._fuse_count}")

        #
        # Mode bits and regions live after the AND matrix
        #

        offsets = {}

        for output in self._outputs:
            for bitname, offset in output.mode_bits:
                if not self.matrix_fuses <= offset < self._fuse_count:
                    raise ProfileError(f"Device profile '{name}': mode bit {bitname} of output pin {output.pin} at {offset} is outside the mode bit area")
                if offset in offsets:
                    raise ProfileError(f"Device profile '{name}': mode bit {offset} used by both {offsets[offset]} and output pin {output.pin}")
                offsets[offset] = f"output pin {output.pin}"

        for region in self._regions:
            if region.offset < self.matrix_fuses or region.offset + region.width > self._fuse_count:
                raise ProfileError(f"Device profile '{name}': region '{region.name}' is outside the fuse map")

    #
    # Identification and sizes
    #

    @property
    def identifier(self):
        return self._identifier

    @property
    def device_name(self):
        return self._device_name

    @property
    def pin_count(self):
        return self._pin_count

    @property
    def fuse_count(self):
        return self._fuse_count

    @property
    def matrix_rows(self):
        return self._matrix_rows

    @property
    def matrix_fuses(self):
        return self._matrix_rows * self.row_length()

    @property
    def connected_fuse(self):
        return self._connected_fuse

    @property
    def disconnected_fuse(self):
        return 1 - self._connected_fuse

    #
    # Pin sets
    #

    def input_pins(self):
        return self._input_pins

    def output_pins(self):
        return self._output_pins

    def column_pins(self):
        return self._column_pins

    def outputs_in_order(self):
        return tuple(output.pin for output in self._outputs)

    #
    # Rows and columns
    #

    def row_length(self):
        return 2 * len(self._column_pins)

    def output(self, output_pin):

        try:
            return self._outputs_by_pin[output_pin]
        except KeyError:
            raise UnknownPin(output_pin, "output", self._identifier) from None

    def row_capacity(self, output_pin):
        return self.output(output_pin).term_rows

    #
    # block:
    #   Return (first fuse, number of rows) of the fuse block that belongs to an output, the block includes the output enable row
    #

    def block(self, output_pin):

        output = self.output(output_pin)
        rows = output.term_rows + (1 if output.oe_row else 0)

        return output.first_row * self.row_length(), rows

    #
    # column:
    #   Return the column inside a row for a pin, true column first and the complement column right after it
    #

    def column(self, pin, inverted = False):

        try:
            return self._columns_by_pin[pin] + (1 if inverted else 0)
        except KeyError:
            raise UnknownPin(pin, "input", self._identifier) from None

    def mode_bit_layout(self, output_pin):
        return { name: ModeBit(offset, 1) for name, offset in self.output(output_pin).mode_bits }

    def mode_value(self, name):
        return self._mode_values[name]

    def global_rows(self):
        return dict(self._global_rows)

    def regions(self):
        return self._regions

    def __repr__(self):
        return f"DeviceConfig({self._identifier!r}, {self._device_name}, {self._fuse_count} fuses)"

#
# load_devices:
#   Load device profiles from a json configuration file
#

def load_devices(path = None, verbose = False):

    devices = {}

    if path is None:
        path = DEFAULT_PROFILES

    if verbose:
        print(f"Loading device profiles: {path}")

    #
    # Start by assuming the path is a full path, if it isn't a file then look for it in the module directory (default profiles shipped with the software)
    #

    json_path = pathlib.Path(path)

    if not json_path.is_file():

        json_path = pathlib.Path(os.path.join(os.path.dirname(os.path.abspath(__file__)), path))

    try:

        with open(json_path, 'r') as file:

            #
            # Remove single line comments where the line begins with whitespace then a # character (illegal in json so they're removed first)
            #

            comment_pattern = r'^\s*[#]'

            try:
                profiles = json.loads(''.join(line for line in file if not re.match(comment_pattern, line)))
            except json.JSONDecodeError as e:
                raise ProfileError(f"Device profiles in '{json_path}' are not valid json: {e}") from e

            if not isinstance(profiles, dict):
                raise ProfileError(f"Device profiles in '{json_path}' must be a json object keyed by device type")

            for profile in profiles:

                if verbose:
                    print(f"Device profile added: {profile}")

                devices[profile] = DeviceConfig(profile, profiles[profile])

    #
    # A missing file leaves the device list empty, device selection reports it downstream
    #

    except FileNotFoundError:

        print(f"No device profiles found, specified file doesn't exist: '{json_path}'")

    return devices

#
# get_device:
#   Select a device profile by device type
#

def get_device(device_name, path = None, verbose = False):

    devices = load_devices(path, verbose)

    if device_name not in devices:
        raise UnknownDevice(device_name, devices.keys())

    if verbose:
        print(f"Device selected: {device_name}")

    return devices[device_name]
