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
# galjedec: Write a fuse array as a JEDEC (JESD3) fuse file
#
#     <STX>Device: GAL22V10
#     *F0                       default state for fuses not listed
#     *G0                       security fuse off
#     *QF5892                   number of fuses
#     *L0044 1111...            fuse list field: first fuse address and fuse states
#     *C1a2b                    fuse checksum
#     *
#     <ETX>0c4f                 transmission checksum
#

import pathlib

STX = b"\x02"
ETX = b"\x03"

DEFAULT_FUSE = 0                                                                                        # value of fuses that aren't listed in an L field (*F0)

#
# fuse_checksum:
#   16 bit sum of the fuse array read as 8 bit bytes, the lowest fuse address is the least significant bit of each byte
#

def fuse_checksum(bits):

    checksum = 0

    for i in range(0, len(bits), 8):

        byte = 0

        for bit, value in enumerate(bits[i:i + 8]):
            if value:
                byte |= 1 << bit

        checksum += byte

    return checksum & 0xffff

#
# fuse_fields:
#   Split the fuse array into (first fuse, length) fields, one per matrix row, one per declared region and one per uncovered gap
#

def fuse_fields(config):

    row_length = config.row_length()

    fields = [ (row * row_length, row_length) for row in range(config.matrix_rows) ]
    fields.extend((region.offset, region.width) for region in config.regions())
    fields.sort()

    #
    # Fuses that no row or region covers still need a field
    #

    position = 0
    gaps = []

    for first, length in fields:
        if first > position:
            gaps.append((position, first - position))
        position = max(position, first + length)

    if position < config.fuse_count:
        gaps.append((position, config.fuse_count - position))

    return sorted(fields + gaps)

#
# jedec_bytes:
#   Build the complete JEDEC file contents for a fuse array
#

def jedec_bytes(fuses, config):

    bits = fuses.bits()

    if len(bits) != config.fuse_count:
        raise ValueError(f"Fuse array has {len(bits)} fuses, device '{config.identifier}' has {config.fuse_count}")

    address_width = max(4, len(str(config.fuse_count - 1)))

    data = b""

    data += STX
    data += b"Device: %s\r\n" % config.device_name.encode("ascii")

    data += b"*F%d\r\n" % DEFAULT_FUSE
    data += b"*G0\r\n"
    data += b"*QF%d\r\n" % config.fuse_count

    #
    # Only fields that differ from the default fuse state are listed
    #

    for first, length in fuse_fields(config):

        field = bits[first:first + length]

        if any(value != DEFAULT_FUSE for value in field):
            data += b"*L%s %s\r\n" % (str(first).zfill(address_width).encode("ascii"), b"".join(b"1" if value else b"0" for value in field))

    data += b"*C%04x\r\n" % fuse_checksum(bits)

    data += b"*\r\n"
    data += ETX

    #
    # The transmission checksum is a 16 bit sum of all bytes between (and including) the STX and ETX markers
    #

    data += b"%04x" % (sum(data) & 0xffff)

    return data

#
# write_jedec:
#   Write the JEDEC file for a fuse array, the file is only created once the whole contents were produced
#

def write_jedec(fuses, config, path = None):

    data = jedec_bytes(fuses, config)

    if path is not None:
        pathlib.Path(path).write_bytes(data)

    return data
