"""Small example script that demonstrates the linebreeding analysis.

Creates a tiny kennel inside `data/example_demo` and prints:
 - the pedigree of a puppy out of a full-sibling mating
 - the linebreeding report for that mating
 - each ancestor's share of the puppy's genome

Run:
    python scripts/example_linebreeding.py
"""
from pathlib import Path
from pprint import pprint
import sys

# Ensure repo root is on sys.path when running this script directly
repo_root = Path(__file__).resolve().parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from pedigree_py.storage import DogStore
from pedigree_py.ancestry import ancestor_influence, build_pedigree_tree, flatten_pedigree_tree
from pedigree_py.linebreeding import analyze_dog_inbreeding, analyze_linebreeding


def build_demo(store: DogStore):
    # Duke x Grace produced Max and Bella; Max x Bella produced Pup
    store.import_dogs([
        {"id": "duke", "name": "Champion Duke", "sex": "Male", "registrationNumber": "AKC123456"},
        {"id": "grace", "name": "Lady Grace", "sex": "Female", "registrationNumber": "AKC654321"},
        {"id": "max", "name": "Max", "sex": "Male", "sireId": "duke", "damId": "grace"},
        {"id": "bella", "name": "Bella", "sex": "Female", "sireId": "duke", "damId": "grace"},
        {"id": "pup", "name": "Pup", "sireId": "max", "damId": "bella"},
    ])


def main():
    data_dir = Path("data") / "example_demo"
    store = DogStore(data_dir)
    build_demo(store)

    print("Pedigree of Pup:")
    for node in flatten_pedigree_tree(build_pedigree_tree(store, "pup", 3)):
        print(f"  {'  ' * node.generation}{node.dog.name}")

    print("\nLinebreeding Max x Bella:")
    report = analyze_linebreeding(store, "max", "bella", generations=4)
    pprint(report.to_dict())

    print("\nInbreeding of Pup:")
    print(f"  COI = {analyze_dog_inbreeding(store, 'pup').inbreeding_coefficient:.4f}")

    print("\nAncestor influence on Pup:")
    for anc_id, share in ancestor_influence(store, "pup", 3).items():
        print(f"  {store.get_dog(anc_id).name:<15} {share:.3f}")

    store.close()


if __name__ == "__main__":
    main()
