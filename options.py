import argparse
import os
from typing import List, Optional

VERSION = "1.0"

ACTIONS = ["cat", "size", "cmp", "hash", "hashes", "empty"]


def truepath(s: str):
    return os.path.abspath(os.path.expanduser(s))


class Options:
    def __init__(self, argv: Optional[List[str]] = None):
        parser = argparse.ArgumentParser(
            description="Treats one or more files as a single stream of bytes, opening only one file at a time.")
        parser.add_argument("action",
                            metavar="ACTION",
                            help=f"one of {ACTIONS}. "
                                 "'cat' writes the concatenated files, 'size' prints their total size, "
                                 "'cmp' compares the files with the ones given by --with, "
                                 "'hash' prints a digest, 'hashes' lists hash functions, "
                                 "'empty' exits with 0 if there are no bytes.")
        parser.add_argument("files",
                            metavar="FILE",
                            nargs="*",
                            help="zero or more files, concatenated in the given order.")
        parser.add_argument("-o", "--output",
                            dest="output",
                            metavar="FILE",
                            help="the file to write to with 'cat'. by default output is written to stdout",
                            default=None)
        parser.add_argument("-H", "--hash",
                            dest="hash",
                            metavar="HASH",
                            help="the hash function to use with 'hash' (default 'SHA256')",
                            default="SHA256")
        parser.add_argument("-w", "--with",
                            dest="other_files",
                            action="append",
                            metavar="FILE",
                            help="a file to compare against with 'cmp'. may be given more than once",
                            default=None)
        parser.add_argument("--offset",
                            dest="offset",
                            type=int,
                            metavar="BYTES",
                            help="skip this many bytes of the concatenation first (default 0)",
                            default=0)
        parser.add_argument("--length",
                            dest="length",
                            type=int,
                            metavar="BYTES",
                            help="use at most this many bytes of the concatenation",
                            default=None)
        parser.add_argument("-v", "--verbose",
                            action="store_true",
                            dest="verbose",
                            help="display information to stderr",
                            default=False)
        parser.add_argument("--version",
                            action="version",
                            version=f"%(prog)s {VERSION}")

        args = parser.parse_args(argv)

        self.action: str = args.action
        self.files: List[str] = [truepath(path) for path in args.files]
        self.other_files: List[str] = [truepath(path) for path in args.other_files or []]
        self.output: Optional[str] = None if args.output is None else truepath(args.output)
        self.hash: str = args.hash
        self.offset: int = args.offset
        self.length: Optional[int] = args.length
        self.verbose: bool = args.verbose
