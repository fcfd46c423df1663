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
# truthgal: Compile truth table source files into JEDEC fuse files for GAL devices
#
#     usage:
#
#         py truthgal.py <options> <source file> <jedec file> <device>
#         py truthgal.py <options> api <tables json file> <jedec file> <device>
#         py truthgal.py <options> api <source file> <tables json file> [device]
#
#     examples:
#
#         py truthgal.py "C:\gal\counter.txt" "C:\gal\counter.jedec" g22v10
#
#         py truthgal.py --listing --devices="C:\gal\custom-devices.config" api "C:\gal\counter.json" "C:\gal\counter.jedec" g22v10
#
#     options:
#
#         Option Name:                           Default Value:         Descrition:
#         =====================================  =====================  ==============================================================================================
#         --devices=<devices config filename>    devices.config         Json formatted file containing device profiles, devices.config is shipped with this software
#                                                                       with g22v10 support, others can be added here
#
#         --listing                                                     Flag to output a separate listing file with the DNF expression of every output pin next
#                                                                       to the jedec file
#

import argparse
import datetime
import pathlib
import sys

import galdevices
import galdnf
import galjedec
import galsource
import galtables
import galtranslator
from galerrors import TruthGalError

#
# Constants
#

SOURCE_ENDINGS = ('txt',)
JEDEC_ENDINGS = ('jedec', 'jed')
TABLES_ENDINGS = ('json',)

#
# get_command_arguments:
#   Get arguments from the command line and check the argument count and file endings for the selected mode
#

def get_command_arguments(argv = None):

    parser = argparse.ArgumentParser(prog = 'truthgal', description = 'Compile truth table source files into JEDEC fuse files for GAL devices')

    parser.add_argument('--devices', dest = 'devices', default = galdevices.DEFAULT_PROFILES, help = 'Json file containing device profiles')
    parser.add_argument('--listing', dest = 'listing', default = False, help = 'Enable DNF expression listing output', action = argparse.BooleanOptionalAction)
    parser.add_argument('arguments', nargs = '+', metavar = 'file', help = '<source> <jedec> <device>, api <tables> <jedec> <device> or api <source> <tables> [device]')

    args = parser.parse_args(argv)

    #
    # api mode, the ending of the first file selects json > jedec or source > json
    #

    if args.arguments[0] == 'api':

        files = args.arguments[1:]

        if len(files) < 2:
            parser.error("invalid argument count")

        ending = file_ending(files[0])

        if ending in TABLES_ENDINGS:

            if len(files) != 3:
                parser.error("invalid argument count")

            check_file_ending(parser, files[1], JEDEC_ENDINGS)
            args.mode = 'tables2jedec'

        elif ending in SOURCE_ENDINGS:

            if len(files) not in (2, 3):
                parser.error("invalid argument count")

            check_file_ending(parser, files[1], TABLES_ENDINGS)
            args.mode = 'source2tables'

        else:

            parser.error(f"invalid file extension {files[0]}")

        args.input = files[0]
        args.output = files[1]
        args.devicetype = files[2] if len(files) == 3 else None

    #
    # Otherwise compile mode
    #

    else:

        if len(args.arguments) != 3:
            parser.error("invalid argument count")

        check_file_ending(parser, args.arguments[0], SOURCE_ENDINGS)
        check_file_ending(parser, args.arguments[1], JEDEC_ENDINGS)

        args.mode = 'compile'
        args.input, args.output, args.devicetype = args.arguments

    return args

def file_ending(filename):
    return pathlib.Path(filename).suffix.lstrip('.').lower()

def check_file_ending(parser, filename, endings):

    if file_ending(filename) not in endings:
        parser.error(f"invalid file extension {filename}, expected {' or '.join('.' + ending for ending in endings)}")

#
# write_listing:
#   Write the DNF expression of every output pin into a listing file next to the jedec file
#

def write_listing(jedec_path, tables, config, pin_names = None):

    listing_path = jedec_path.parent / (jedec_path.stem + '.dnf.txt')
    expressions = galdnf.build_all(tables, config)

    with listing_path.open('wt') as listing:

        listing.write(f"Name {jedec_path.stem};\n")
        listing.write(f"Device {config.device_name};\n")
        listing.write(f"Date {datetime.datetime.now().strftime('%x')};\n")
        listing.write("\n")

        for expression in sorted(expressions, key = lambda expression: config.outputs_in_order().index(expression.output_pin)):

            listing.write(f"/* pin {expression.output_pin}: {len(expression.terms)} of {config.row_capacity(expression.output_pin)} product terms */\n")
            listing.write(galdnf.format_expression(expression, pin_names))
            listing.write("\n")

    print(f"Listing written: {listing_path}")

#
# build_jedec:
#   Translate validated tables into a jedec file, nothing is written unless every output translated
#

def build_jedec(tables, config, output, listing, pin_names = None):

    galtables.validate(tables, config)

    fuses = galtranslator.process(tables, config, verbose = True)

    output_path = pathlib.Path(output)

    galjedec.write_jedec(fuses, config, output_path)

    if listing:
        write_listing(output_path, tables, config, pin_names)

#
# compile_source:
#   Compile mode: source file > jedec file
#

def compile_source(args):

    text = pathlib.Path(args.input).read_text()

    tables, names = galsource.parse_design(text)
    config = galdevices.get_device(args.devicetype, args.devices, verbose = True)

    build_jedec(tables, config, args.output, args.listing, names)

    print(f"compilation successfully, new jedec file was created {args.output}")

#
# tables_to_jedec:
#   api mode: tables json file > jedec file
#

def tables_to_jedec(args):

    tables = galtables.load_tables(args.input)
    config = galdevices.get_device(args.devicetype, args.devices, verbose = True)

    build_jedec(tables, config, args.output, args.listing)

    print(f"new jedec file was created {args.output}")

#
# source_to_tables:
#   api mode: source file > tables json file, validated against the device when one is given
#

def source_to_tables(args):

    tables = galsource.parse_file(args.input)

    if args.devicetype is not None:
        galtables.validate(tables, galdevices.get_device(args.devicetype, args.devices, verbose = True))

    galtables.save_tables(tables, args.output)

    print(f"new table json file was created {args.output}")

#
# main:
#   Run the selected mode, errors are reported on stderr with exit status 1
#

def main(argv = None):

    args = get_command_arguments(argv)

    modes = {
        'compile': compile_source,
        'tables2jedec': tables_to_jedec,
        'source2tables': source_to_tables,
    }

    try:

        modes[args.mode](args)

    except TruthGalError as e:

        print(f"error: {e}", file = sys.stderr)
        return 1

    except OSError as e:

        print(f"error: {e.strerror}: '{e.filename}'", file = sys.stderr)
        return 1

    return 0

if __name__ == '__main__':
    sys.exit(main())
