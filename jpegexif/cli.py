# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for jpegexif

Prints the metadata of one or more JPEG files and optionally saves their
embedded EXIF thumbnails.

Copyright 2025 DNAi inc.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from jpegexif import __version__
from jpegexif.config import ReaderConfig, DEFAULT_MAX_DEPTH
from jpegexif.exceptions import JpegExifError
from jpegexif.jpeg_info import JpegInfo
from jpegexif.jpeg_reader import read_jpeg_file

logger = logging.getLogger(__name__)


def format_output(metadata: dict, format_type: str = "text") -> str:
    """
    Format metadata output based on format type.
    
    Args:
        metadata: Dictionary of metadata
        format_type: Output format ('text' or 'json')
        
    Returns:
        Formatted output string
    """
    if format_type == "json":
        return json.dumps(metadata, indent=2, ensure_ascii=False)
    lines = []
    for tag, value in metadata.items():
        lines.append(f"{tag}: {value}")
    return "\n".join(lines)


def unique_name(name: str, taken: set) -> str:
    """
    Return ``name``, or ``name`` with a ``_2``, ``_3``... index if it is
    already in ``taken``, and mark the result as taken.
    """
    candidate = name
    index = 1
    while candidate in taken:
        index += 1
        candidate = f"{name}_{index}"
    taken.add(candidate)
    return candidate


def save_thumbnail(info: JpegInfo, output_dir: Path, taken: Optional[set] = None) -> Optional[Path]:
    """
    Write the EXIF thumbnail of ``info`` next to the others in ``output_dir``.
    
    Args:
        info: Record holding the thumbnail
        output_dir: Directory receiving the thumbnails
        taken: Thumbnail stems already written in this run, so images with
            the same file stem do not overwrite each other
    
    Returns:
        Path of the written thumbnail, or None if the image has none
    """
    if not info.thumbnail_data:
        return None
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = unique_name(f"{Path(info.file_name).stem}_thumb", taken if taken is not None else set())
    target = output_dir / f"{stem}.jpg"
    target.write_bytes(info.thumbnail_data)
    return target


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='jpegexif',
        description='Read EXIF metadata and crop factor from JPEG files',
    )
    parser.add_argument('files', nargs='+', help='JPEG file(s) to read')
    parser.add_argument('-j', '--json', action='store_true', help='Output metadata in JSON format')
    parser.add_argument('--thumbnail', type=Path, metavar='DIR',
                        help='Save embedded thumbnails into DIR')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH,
                        help='Deepest EXIF directory nesting to follow (default: %(default)s)')
    parser.add_argument('--lenient-bounds', action='store_true',
                        help='Only check the upper bound of sub-directory pointers')
    parser.add_argument('--maker-note-at-blob', action='store_true',
                        help='Walk MakerNote blobs where they are stored instead of at their first value')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Log parser decisions (-vv for debug output)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the ``jpegexif`` command.
    
    Returns:
        0 when every file was read as a JPEG, 1 otherwise
    """
    args = build_parser().parse_args(argv)
    
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')
    
    try:
        config = ReaderConfig(
            max_depth=args.max_depth,
            strict_bounds=not args.lenient_bounds,
            maker_note_at_blob=args.maker_note_at_blob,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    
    format_type = "json" if args.json else "text"
    # (name, metadata) pairs; a path given twice is reported twice
    results = []
    thumbnail_names = set()
    status = 0
    for file_name in args.files:
        try:
            info = read_jpeg_file(file_name, config)
        except JpegExifError as e:
            print(f"Error: {e}", file=sys.stderr)
            status = 1
            continue
        if not info.is_valid:
            print(f"Error: {file_name} is not a JPEG file", file=sys.stderr)
            status = 1
            continue
        logger.info("Read %s in %.3f ms", file_name, info.load_duration.total_seconds() * 1000)
        
        if args.thumbnail:
            target = save_thumbnail(info, args.thumbnail, thumbnail_names)
            if target:
                logger.info("Wrote thumbnail %s", target)
        results.append((file_name, info.to_dict()))
    
    if format_type == "json":
        if results:
            if len(args.files) > 1:
                taken = set()
                output = {unique_name(name, taken): metadata for name, metadata in results}
            else:
                output = results[0][1]
            print(format_output(output, "json"))
    else:
        for file_name, metadata in results:
            if len(args.files) > 1:
                print(f"======== {file_name}")
            print(format_output(metadata))
    return status


if __name__ == "__main__":
    sys.exit(main())
