import logging
import sys
from typing import List, Optional

import bytesource
import hashing
from bytesink import FileByteSink
from bytesource import ByteSource
from options import ACTIONS, Options

log = logging.getLogger(__name__)


def make_source(filenames: List[str], offset: int = 0, length: Optional[int] = None) -> ByteSource:
    source = bytesource.files(*filenames)
    if offset != 0 or length is not None:
        source = source.slice(offset, sys.maxsize if length is None else length)
    return source


def run(opt: Options) -> int:
    if opt.action == "hashes":
        print("\n".join(hashing.hash_list()))
        return 0

    source = make_source(opt.files, opt.offset, opt.length)
    log.debug("Source is %r", source)

    if opt.action == "cat":
        if opt.output:
            count = source.copy_to(FileByteSink(opt.output))
        else:
            count = source.copy_to(sys.stdout.buffer)
            sys.stdout.buffer.flush()
        log.info("Copied %d bytes", count)
        return 0
    if opt.action == "size":
        print(source.size())
        return 0
    if opt.action == "cmp":
        other = make_source(opt.other_files, opt.offset, opt.length)
        if source.content_equals(other):
            return 0
        print("The inputs differ.", file=sys.stderr)
        return 1
    if opt.action == "hash":
        print(source.hash(opt.hash).hex())
        return 0
    if opt.action == "empty":
        return 0 if source.is_empty() else 1
    raise ValueError(f"Action must be one of {ACTIONS}. Was '{opt.action}'.")


def main(argv: Optional[List[str]] = None) -> int:
    opt = Options(argv)

    logging.basicConfig(stream=sys.stderr,
                        level=logging.DEBUG if opt.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if opt.action not in ACTIONS:
        print(f"Action must be one of {ACTIONS}. Was '{opt.action}'.", file=sys.stderr)
        return 1

    try:
        return run(opt)
    except ValueError as e:
        print(e, file=sys.stderr)
        return 1
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
