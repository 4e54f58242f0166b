import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

import colorama

from mediashelf.exceptions import MediaShelfError
from mediashelf.utils.logging import get_logger
from mediashelf.web.services.library_service import (
    LibraryService,
    get_library_service,
)

log = get_logger()


@dataclass
class LibraryArgs:
    command: str
    owner: int | None
    file: Path | None
    name: str | None
    email: str | None
    yes: bool


def export_library(
    service: LibraryService, owner_id: int, output_file: Path, yes: bool
) -> int:
    if output_file.exists() and not yes:
        should_overwrite = input(
            f"{colorama.Fore.YELLOW}File '{output_file}' already exists. Do you want to overwrite it? [y/N]: {colorama.Style.RESET_ALL}"
        ).lower()
        if should_overwrite != "y":
            log.info("Library: Exiting...")
            return 1

    snapshot = service.export_library(owner_id)
    output_file.write_text(json.dumps(snapshot.to_payload(), indent=2))
    log.info(
        f"Library: Exported {len(snapshot.media_items)} items and "
        f"{len(snapshot.lists)} lists to '{output_file}'"
    )
    return 0


def import_library(service: LibraryService, owner_id: int, input_file: Path) -> int:
    if not input_file.exists():
        log.error(f"Library: File '{input_file}' does not exist")
        return 1

    try:
        data = json.loads(input_file.read_text())
    except json.JSONDecodeError as e:
        log.error(f"Library: '{input_file}' is not valid JSON: {e}")
        return 1

    result = service.import_library(owner_id, data)
    if not result.ok:
        log.error(f"Library: '{input_file}' was rejected:")
        for error in result.errors:
            log.error(f"  - {error}")
        return 1

    log.success(f"Library: Imported '{input_file}' ({result.stats})")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Export or import a MediaShelf library"
    )
    parser.add_argument(
        "command",
        choices=["export", "import", "create-owner"],
        help="Operation to run",
    )
    parser.add_argument("--owner", "-o", type=int, help="Id of the library owner")
    parser.add_argument(
        "--file",
        "-f",
        type=Path,
        help="Input or output JSON file path for import/export",
    )
    parser.add_argument("--name", "-n", help="Name of the owner to create")
    parser.add_argument("--email", "-e", help="Email of the owner to create")
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Overwrite an existing export file without asking",
    )
    args = LibraryArgs(**vars(parser.parse_args(argv)))
    service = get_library_service()

    if args.command == "create-owner":
        if not args.name:
            parser.error("create-owner requires --name")
        owner_id = service.create_owner(args.name, args.email)
        print(owner_id)
        return 0

    if args.owner is None or args.file is None:
        parser.error(f"{args.command} requires --owner and --file")

    try:
        if args.command == "export":
            return export_library(service, args.owner, args.file, args.yes)
        return import_library(service, args.owner, args.file)
    except MediaShelfError as e:
        log.error(f"Library: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
