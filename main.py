import sys
from dataclasses import dataclass

from rich.pretty import pprint

from flagbind import *


@dataclass
class Globals:
    verbose: bool = flag("verbose,v", usage="print more", env="DEMO_VERBOSE")
    level: int = flag(usage="compression level", default="6")
    output: str = flag(short=True, usage="output directory", default=".")


@dataclass
class Create:
    force: bool = flag(short=True, usage="overwrite existing files")
    name: str = nonflag(usage="name of the archive")
    files: list[str] = nonflag("FILE", usage="files to add")


def create(options, args):
    record = Create()
    parsed = must_parse(args, record, prog="demo create")
    pprint({"globals": options, "create": parsed.record})


def inspect(args):
    pprint({"inspect": args})


if __name__ == '__main__':
    must_run(sys.argv, Globals(), [
        Command("create", "create a new archive", run_global=create),
        Command("inspect", "list the members of an archive", run=inspect),
    ], resolve=unique_prefix)
