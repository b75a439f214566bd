"""
Generate names from the command line and print them as JSON (or CSV).

    python scripts/generate_names.py --family_name 王 --gender male --limit 10
    python scripts/generate_names.py --family_name 欧阳 --gender female --weights 30,30,20,10,10 --csv
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from qiming.data_service import NamingDataLoader
from qiming.errors import QimingError
from qiming.generator import Deadline, GeneratedName, GenerationConfig, NameGenerator
from qiming.weighting import WeightConfig


def parse_weights(value: Optional[str]) -> Optional[WeightConfig]:
    if not value:
        return None
    try:
        parts = [float(p) for p in value.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"weights must be numbers, got '{value}'") from None
    if len(parts) != 5:
        raise argparse.ArgumentTypeError("--weights needs five comma-separated numbers")
    return WeightConfig(*parts)


def to_json(name: GeneratedName) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "full_name": name.full_name,
        "family_name": name.family_name,
        "mid_char": name.mid_char,
        "last_char": name.last_char,
        "grids": name.grids.as_dict(),
        "sancai": {
            "combination": name.sancai.combination,
            "level": name.sancai.level_text,
            "description": name.sancai.description,
        },
        "score": name.score,
        "explanation": name.explanation,
    }
    if name.components is not None:
        payload["components"] = {
            "sancai": name.components.sancai,
            "wuxing": name.components.wuxing,
            "sound": name.components.sound,
            "meaning": name.components.meaning,
            "social": name.components.social,
        }
        payload["weighted_score"] = name.weighted_score
    return payload


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate Chinese given names for a family name.")
    parser.add_argument("--family_name", type=str, required=True, help="Family name, 1-2 characters.")
    parser.add_argument("--gender", type=str, default="male", help="male / female (or 男 / 女).")
    parser.add_argument("--limit", type=int, default=None, help="Page size (default from config: 5).")
    parser.add_argument("--offset", type=int, default=0, help="Page offset into the ranked list.")
    parser.add_argument("--threshold", type=int, default=None, help="Minimum numerology score (default 65).")
    parser.add_argument("--traditional", action="store_true", help="Use traditional stroke counts.")
    parser.add_argument("--avoid", type=str, default="", help="Characters that must not appear, e.g. 刚强.")
    parser.add_argument("--wuxing", type=str, default="", help="Preferred elements for middle/last, e.g. 木火.")
    parser.add_argument(
        "--weights", type=parse_weights, default=None, help="sancai,wuxing,sound,meaning,social weights."
    )
    parser.add_argument("--data_dir", type=str, default=None, help="Directory holding the JSON data files.")
    parser.add_argument("--timeout", type=float, default=None, help="Abort generation after this many seconds.")
    parser.add_argument("--csv", action="store_true", help="Print CSV instead of JSON.")
    parser.add_argument("--verbose", action="store_true", help="Log progress to stderr.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, stream=sys.stderr)

    loader = NamingDataLoader()
    if args.data_dir:
        loader = NamingDataLoader(loader.config.with_data_dir(Path(args.data_dir)))

    try:
        loader.get()
        generator = NameGenerator(loader=loader)
        request = GenerationConfig(
            family_name=args.family_name,
            gender=args.gender,
            score_threshold=args.threshold,
            use_traditional=args.traditional,
            avoided_words=tuple(args.avoid),
            limit=args.limit,
            offset=args.offset,
            weights=args.weights,
            preferred_wuxing=tuple(args.wuxing),
        )
        names = generator.generate(request, Deadline(timeout=args.timeout))
    except QimingError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        loader.shutdown()

    if args.csv:
        print(NameGenerator.export_csv(names))
    else:
        print(json.dumps([to_json(n) for n in names], ensure_ascii=False, indent=2))
