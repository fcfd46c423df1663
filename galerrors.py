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
# galerrors: Error kinds raised while compiling truth tables into a fuse map
#
#     Every error is terminal for a compilation run, the command line catches TruthGalError at the top level only
#

class TruthGalError(RuntimeError):

    def __init__(self, message, output_pin = None):
        super().__init__(message)
        self.output_pin = output_pin                                                                    # output pin the failure belongs to, None if it isn't tied to one output

#
# Device profile errors
#

class UnknownDevice(TruthGalError):

    def __init__(self, device_name, known = ()):
        known_names = ", ".join(sorted(known)) or "none"
        super().__init__(f"Device detection failed, no device profile with device type '{device_name}' found (known: {known_names})")
        self.device_name = device_name

class UnknownPin(TruthGalError):

    def __init__(self, pin, role, device_name):
        super().__init__(f"Pin {pin} is not an {role} pin of device '{device_name}'", output_pin = pin if role == "output" else None)
        self.pin = pin
        self.role = role

class ProfileError(TruthGalError):
    pass

#
# Translation errors
#

class InputCountExceeded(TruthGalError):

    def __init__(self, output_pin, input_count, maximum):
        super().__init__(f"Table for output pin {output_pin} has {input_count} input pins, at most {maximum} are supported", output_pin)
        self.input_count = input_count

class TableLengthMismatch(TruthGalError):

    def __init__(self, output_pin, table_length, input_count):
        super().__init__(f"Table for output pin {output_pin} has {table_length} entries, {2 ** input_count} expected for {input_count} input pins", output_pin)
        self.table_length = table_length
        self.input_count = input_count

class TooManyTerms(TruthGalError):

    def __init__(self, output_pin, term_count, capacity):
        super().__init__(f"Output pin {output_pin} needs {term_count} product terms but only {capacity} rows are available", output_pin)
        self.term_count = term_count
        self.capacity = capacity

#
# Input errors
#

class ValidationError(TruthGalError):
    pass

class ParsingError(TruthGalError):

    def __init__(self, message, line = None):
        super().__init__(f"{message} in line {line}" if line is not None else message)
        self.line = line
