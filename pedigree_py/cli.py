import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .ancestry import WarningLog, ancestor_influence, build_pedigree_tree, flatten_pedigree_tree
from .config import Config, load_config
from .errors import CollaboratorError, NotFoundError, ValidationError
from .fs import json_load, json_save
from .linebreeding import LinebreedingAnalyzer, validate_generations
from .storage import DogStore
from .templating import render_template


def _open_store(cfg: Config) -> DogStore:
    return DogStore(cfg.data_dir)


def _generations(args: argparse.Namespace, cfg: Config) -> int:
    return args.generations if args.generations is not None else cfg.default_generations


def _run_import(args: argparse.Namespace, cfg: Config) -> int:
    records = json_load(Path(args.input))
    if records is None:
        print(f"File not found: {args.input}", file=sys.stderr)
        return 1
    if isinstance(records, dict):
        records = records.get("dogs", [])
    if not isinstance(records, list):
        raise ValidationError(f"{args.input} must hold a list of dog records or an object with a 'dogs' list", field="input")
    store = _open_store(cfg)
    n = store.import_dogs(records)
    print(f"Imported {n} dogs into {cfg.data_dir}")
    return 0


def _run_export(args: argparse.Namespace, cfg: Config) -> int:
    store = _open_store(cfg)
    dogs = [d.to_dict() for d in store.list_dogs()]
    json_save(Path(args.output), {"dogs": dogs})
    print(f"Exported {len(dogs)} dogs to {args.output}")
    return 0


def _print_report(report, as_json: bool, dog=None) -> None:
    if as_json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        sys.stdout.write(render_template("linebreeding_report.txt", {"report": report, "dog": dog}))


def _run_analyze(args: argparse.Namespace, cfg: Config) -> int:
    store = _open_store(cfg)
    report = LinebreedingAnalyzer(store, cfg).analyze(args.sire, args.dam, _generations(args, cfg))
    _print_report(report, args.json)
    return 0


def _run_coi(args: argparse.Namespace, cfg: Config) -> int:
    store = _open_store(cfg)
    report = LinebreedingAnalyzer(store, cfg).analyze_dog(args.dog, _generations(args, cfg))
    _print_report(report, args.json, dog=store.get_dog(args.dog))
    return 0


def _run_pedigree(args: argparse.Namespace, cfg: Config) -> int:
    store = _open_store(cfg)
    gens = validate_generations(_generations(args, cfg), cfg.max_generations)
    warnings = WarningLog()
    tree = build_pedigree_tree(store, args.dog, gens, warnings)
    if tree is None:
        raise NotFoundError(args.dog)
    nodes = flatten_pedigree_tree(tree)
    sys.stdout.write(render_template("pedigree.txt", {"nodes": nodes, "warnings": list(warnings)}))
    return 0


def _run_influence(args: argparse.Namespace, cfg: Config) -> int:
    store = _open_store(cfg)
    gens = validate_generations(_generations(args, cfg), cfg.max_generations)
    if store.get_dog(args.dog) is None:
        raise NotFoundError(args.dog)
    for anc_id, share in ancestor_influence(store, args.dog, gens).items():
        anc = store.get_dog(anc_id)
        label = anc.name if anc is not None and anc.name else anc_id
        print(f"{share * 100:7.3f}%  {label} [{anc_id}]")
    return 0


def _run_serve(args: argparse.Namespace, cfg: Config) -> int:
    import os
    import uvicorn

    # the web app loads its own config from the environment at import
    os.environ["PEDIGREE_DATA_DIR"] = str(cfg.data_dir)
    uvicorn.run("pedigree_py.web.app:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pedigree-py",
        description="Pedigree ancestry and linebreeding (coefficient of inbreeding) analysis",
    )
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--data-dir", help="Directory holding the dog database")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    imp = subparsers.add_parser("import", help="Import dogs from a JSON file")
    imp.add_argument("input", help="JSON file: a list of dog records or {\"dogs\": [...]}")
    imp.set_defaults(func=_run_import)

    exp = subparsers.add_parser("export", help="Export all dogs to a JSON file")
    exp.add_argument("output", help="Destination JSON file")
    exp.set_defaults(func=_run_export)

    analyze = subparsers.add_parser("analyze", help="Linebreeding analysis of a prospective mating")
    analyze.add_argument("sire", help="Sire id")
    analyze.add_argument("dam", help="Dam id")
    analyze.add_argument("-g", "--generations", type=int, help="Generations to analyze (1-10)")
    analyze.add_argument("--json", action="store_true", help="Print the report as JSON")
    analyze.set_defaults(func=_run_analyze)

    coi = subparsers.add_parser("coi", help="Inbreeding coefficient of a recorded dog")
    coi.add_argument("dog", help="Dog id")
    coi.add_argument("-g", "--generations", type=int, help="Generations to analyze (1-10)")
    coi.add_argument("--json", action="store_true", help="Print the report as JSON")
    coi.set_defaults(func=_run_coi)

    ped = subparsers.add_parser("pedigree", help="Print a dog's pedigree tree")
    ped.add_argument("dog", help="Dog id")
    ped.add_argument("-g", "--generations", type=int, help="Generations to show (1-10)")
    ped.set_defaults(func=_run_pedigree)

    infl = subparsers.add_parser("influence", help="Genome share contributed by each ancestor")
    infl.add_argument("dog", help="Dog id")
    infl.add_argument("-g", "--generations", type=int, help="Generations to analyze (1-10)")
    infl.set_defaults(func=_run_influence)

    serve = subparsers.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    serve.set_defaults(func=_run_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        cfg = load_config(args.config)
        if args.data_dir:
            cfg.data_dir = Path(args.data_dir)
        level = logging.DEBUG if args.verbose else getattr(logging, cfg.log_level, logging.INFO)
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
        return args.func(args, cfg)
    except ValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except NotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except CollaboratorError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
