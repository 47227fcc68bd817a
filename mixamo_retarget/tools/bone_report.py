"""
Print which Mixamo bones map onto which Tripo bones.

Usage: mixamo-retarget-report --source mixamo.json --target tripo.json [--mapping mapping.json]

Hierarchies are nested {"name": ..., "children": [...]} objects, as dumped by the host engine.
"""
import argparse
import sys

from mixamo_retarget.utils.data_types import Bone
from mixamo_retarget.utils.retarget_tripo import MixamoToTripoConverter
from mixamo_retarget.utils.retarget_utils import load_json, load_bone_mapping


def load_hierarchy(filepath: str) -> Bone:
    return Bone.from_dict(load_json(filepath))


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Mixamo -> Tripo bone correspondence report")
    parser.add_argument("--source", "-s", required=True, help="Mixamo hierarchy JSON")
    parser.add_argument("--target", "-t", required=True, help="Tripo hierarchy JSON")
    parser.add_argument(
        "--mapping",
        "-m",
        default="",
        help="Optional bone mapping file (uses built-in mapping if not provided)",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    converter = MixamoToTripoConverter(bone_mapping=load_bone_mapping(args.mapping))

    try:
        src_root = load_hierarchy(args.source)
        tgt_root = load_hierarchy(args.target)
    except (OSError, ValueError, KeyError) as e:
        print(f"[Retarget] ERROR: could not read hierarchy: {e}")
        return 1

    converter.print_bone_report(src_root, tgt_root)
    return 0


if __name__ == "__main__":
    sys.exit(main())
