#!/usr/bin/env python3
'''
Minimal tool to look into, extract and create GoodFeel archives.

 $ gfatool.py l archive.gfa
 $ gfatool.py x archive.gfa outdir/
 $ gfatool.py c archive.gfa file1 file2 ...
'''
import os
import sys
import logging
from pathlib import Path

from gfarch import (
    extract,
    pack_from_files,
    read_table,
)
from gfarch.exceptions import ArchiveException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'usage: {progname} l <archive>')
    print(f'       {progname} x <archive> <output directory>')
    print(f'       {progname} c <archive> <files...>')
    sys.exit(1)


def dump_table(toc):
    print(f'''GFA Header:
  Version:                           {toc.version.name}
  Compression:                       {toc.compression_type.name}
  Start of data:                     0x{toc.data_offset:x}
  Number of entries:                 {len(toc.entries)}''')
    print('''Entries:
  [Nr] Name                             Offset     Stored     Size''')
    for idx, entry in enumerate(toc.entries):
        print(f'''  [{idx: >2d}] {entry.name:<32} 0x{entry.stored_offset:08x} 0x{entry.stored_size:08x} 0x{entry.original_size:08x}''')


def do_list(path):
    dump_table(read_table(Path(path).read_bytes()))


def do_extract(path, outdir):
    outdir = Path(outdir).resolve()
    for name, data in extract(Path(path).read_bytes()):
        destination = (outdir / name).resolve()
        try:
            destination.relative_to(outdir)
        except ValueError:
            logger.warning(f'skipping \'{name}\': it points outside of {outdir}')
            continue
        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f'extracting \'{name}\' ({len(data)} bytes)')
        destination.write_bytes(data)


def do_create(path, files):
    archive = pack_from_files(files)
    Path(path).write_bytes(bytes(archive))
    logger.info(f'created \'{path}\' with {len(files)} entries ({len(archive.raw)} bytes)')


if __name__ == '__main__':
    if len(sys.argv) < 3:
        usage(sys.argv[0])

    command, path = sys.argv[1], sys.argv[2]

    try:
        if command == 'l':
            do_list(path)
        elif command == 'x' and len(sys.argv) == 4:
            do_extract(path, sys.argv[3])
        elif command == 'c' and len(sys.argv) > 3:
            do_create(path, sys.argv[3:])
        else:
            usage(sys.argv[0])
    except (ArchiveException, OSError) as e:
        logger.error(f'{path}: {e}')
        sys.exit(2)
