from fastapi import Depends, FastAPI, HTTPException, Query
from typing import Any, Dict, Optional
import logging

from .. import storage as storage_mod
from ..ancestry import WarningLog, ancestor_influence, build_pedigree_tree
from ..config import load_config
from ..errors import CollaboratorError, NotFoundError, ValidationError
from ..linebreeding import LinebreedingAnalyzer, validate_generations
from ..lookup import DogLookup
from ..models import DogRef

cfg = load_config()

logging.basicConfig(level=getattr(logging, cfg.log_level, logging.INFO))

app = FastAPI(title="pedigree-py")

# Created on startup rather than at import so that importing the module
# (tests, tooling) never creates a database under the configured data dir.
dog_store: Optional[storage_mod.DogStore] = None


@app.on_event("startup")
def _open_dog_store_on_startup():
    global dog_store
    try:
        dog_store = storage_mod.DogStore(cfg.data_dir)
        logging.info("DogStore initialized at %s", str(cfg.data_dir))
    except CollaboratorError:
        logging.exception("Failed to initialize DogStore on startup")


@app.on_event("shutdown")
def _close_dog_store_on_shutdown():
    if dog_store is not None:
        dog_store.close()


def get_lookup() -> DogLookup:
    if dog_store is None:
        raise HTTPException(status_code=503, detail="Dog storage unavailable")
    return dog_store


def get_store() -> storage_mod.DogStore:
    if dog_store is None:
        raise HTTPException(status_code=503, detail="Dog storage unavailable")
    return dog_store


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    logging.error("Dog lookup failed: %s", exc)
    return HTTPException(status_code=503, detail="Dog lookup unavailable")


@app.get("/api/linebreeding")
def api_linebreeding(
    sire_id: str = Query(..., alias="sireId"),
    dam_id: str = Query(..., alias="damId"),
    generations: Optional[int] = Query(None),
    lookup: DogLookup = Depends(get_lookup),
):
    logging.info("linebreeding analysis requested for sire=%s dam=%s generations=%s", sire_id, dam_id, generations)
    try:
        report = LinebreedingAnalyzer(lookup, cfg).analyze(sire_id, dam_id, generations)
    except (ValidationError, NotFoundError, CollaboratorError) as exc:
        raise _http_error(exc)
    return report.to_dict()


@app.get("/api/dog/{dog_id}")
def api_dog(dog_id: str, lookup: DogLookup = Depends(get_lookup)):
    dog = lookup.get_dog(dog_id)
    if dog is None:
        raise HTTPException(status_code=404, detail="Dog not found")
    return dog.to_dict()


@app.post("/api/dog", status_code=201)
def api_create_dog(data: Dict[str, Any], store: storage_mod.DogStore = Depends(get_store)):
    try:
        dog = DogRef.from_dict(data)
    except ValidationError as exc:
        raise _http_error(exc)
    if store.get_dog(dog.id) is not None:
        raise HTTPException(status_code=409, detail=f"Dog {dog.id} already exists")
    try:
        store.add_dog(dog)
    except CollaboratorError as exc:
        raise _http_error(exc)
    logging.info("Created dog %s", dog.id)
    return dog.to_dict()


@app.put("/api/dog/{dog_id}")
def api_update_dog(dog_id: str, data: Dict[str, Any], store: storage_mod.DogStore = Depends(get_store)):
    if store.get_dog(dog_id) is None:
        raise HTTPException(status_code=404, detail="Dog not found")
    try:
        dog = DogRef.from_dict({**data, "id": dog_id})
        store.update_dog(dog)
    except (ValidationError, CollaboratorError) as exc:
        raise _http_error(exc)
    return dog.to_dict()


@app.get("/api/dog/{dog_id}/inbreeding")
def api_dog_inbreeding(dog_id: str, generations: Optional[int] = None, lookup: DogLookup = Depends(get_lookup)):
    try:
        report = LinebreedingAnalyzer(lookup, cfg).analyze_dog(dog_id, generations)
    except (ValidationError, NotFoundError, CollaboratorError) as exc:
        raise _http_error(exc)
    return report.to_dict()


@app.get("/api/dog/{dog_id}/pedigree")
def api_dog_pedigree(dog_id: str, generations: Optional[int] = None, lookup: DogLookup = Depends(get_lookup)):
    gens = generations if generations is not None else cfg.default_generations
    warnings = WarningLog()
    try:
        validate_generations(gens, cfg.max_generations)
        tree = build_pedigree_tree(lookup, dog_id, gens, warnings)
    except (ValidationError, CollaboratorError) as exc:
        raise _http_error(exc)
    if tree is None:
        raise HTTPException(status_code=404, detail="Dog not found")
    return {"pedigree": tree.to_dict(), "warnings": [w.to_dict() for w in warnings]}


@app.get("/api/dog/{dog_id}/influence")
def api_dog_influence(dog_id: str, generations: Optional[int] = None, lookup: DogLookup = Depends(get_lookup)):
    gens = generations if generations is not None else cfg.default_generations
    try:
        validate_generations(gens, cfg.max_generations)
        if lookup.get_dog(dog_id) is None:
            raise NotFoundError(dog_id)
        shares = ancestor_influence(lookup, dog_id, gens)
    except (ValidationError, NotFoundError, CollaboratorError) as exc:
        raise _http_error(exc)
    return {"dogId": dog_id, "generations": gens, "influence": shares}
