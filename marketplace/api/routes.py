# marketplace/api/routes.py
from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from .. import crud, schemas, services
from ..cache import EstateIdCache
from ..conditions import build_chair_predicates, build_estate_predicates, estate_fingerprint, require_conditions
from ..db import get_db
from ..errors import CacheBackendError, InvalidPayload, InvalidRangeIndex, NoSearchCondition, NotFound
from ..models import Chair
from ..ranges import RangeCatalog
from ..utils import logger

router = APIRouter()

# store offsets and Redis list indexes are signed 64-bit
MAX_INT64 = 2 ** 63 - 1


def get_catalog(request: Request) -> RangeCatalog:
    return request.app.state.catalog


def get_cache(request: Request) -> EstateIdCache:
    return request.app.state.estate_cache


def _bad_request(e: Exception):
    logger.info("Rejected request: %s", e)
    return HTTPException(status_code=400, detail=str(e))


def _internal_error(operation: str, e: Exception):
    logger.exception("%s failed: %s", operation, e)
    return HTTPException(status_code=500, detail="Internal server error")


def _page_offset(page: int, per_page: int) -> int:
    if (page + 1) * per_page > MAX_INT64:
        raise _bad_request(ValueError("page %d with perPage %d is out of range" % (page, per_page)))
    return page * per_page


@router.post("/initialize", response_model=schemas.InitializeResponse)
def initialize(request: Request, db: Session = Depends(get_db), cache: EstateIdCache = Depends(get_cache)):
    try:
        services.initialize(db, cache, request.app.state.settings.fixture_dir)
    except (CacheBackendError, SQLAlchemyError, InvalidPayload, OSError) as e:
        raise _internal_error("initialize", e)
    return {"language": "python"}


# chairs

@router.post("/listings/chair", status_code=status.HTTP_201_CREATED)
def post_chairs(chairs: UploadFile = File(...), db: Session = Depends(get_db)):
    try:
        services.import_chairs(db, chairs.file.read())
    except InvalidPayload as e:
        raise _bad_request(e)
    except SQLAlchemyError as e:
        raise _internal_error("chair import", e)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/listings/chair/search", response_model=schemas.ChairSearchResponse)
def search_chairs(
    page: int = Query(..., ge=0, le=MAX_INT64),
    perPage: int = Query(..., gt=0, le=MAX_INT64),
    priceRangeId: str = "",
    heightRangeId: str = "",
    widthRangeId: str = "",
    depthRangeId: str = "",
    kind: str = "",
    color: str = "",
    features: str = "",
    db: Session = Depends(get_db),
    catalog: RangeCatalog = Depends(get_catalog),
):
    try:
        predicates = require_conditions(build_chair_predicates(
            catalog, priceRangeId, heightRangeId, widthRangeId, depthRangeId, kind, color, features
        ))
    except (InvalidRangeIndex, NoSearchCondition) as e:
        raise _bad_request(e)
    offset = _page_offset(page, perPage)
    try:
        chairs, count = crud.search(db, Chair, predicates, perPage, offset)
    except SQLAlchemyError as e:
        raise _internal_error("chair search", e)
    return {"count": count, "chairs": chairs}


@router.get("/listings/chair/search/condition", response_model=schemas.ChairSearchCondition)
def chair_search_condition(catalog: RangeCatalog = Depends(get_catalog)):
    return catalog.chair


@router.get("/listings/chair/low_priced", response_model=schemas.ChairListResponse)
def low_priced_chairs(db: Session = Depends(get_db)):
    try:
        return {"chairs": crud.low_priced_chairs(db)}
    except SQLAlchemyError as e:
        raise _internal_error("low priced chairs", e)


@router.post("/listings/chair/buy/{chair_id}")
def buy_chair(chair_id: int, payload: schemas.EmailRequest, db: Session = Depends(get_db)):
    try:
        services.buy_chair(db, chair_id)
    except NotFound as e:
        logger.info("buy chair: %s", e)
        raise HTTPException(status_code=404, detail="Chair not found")
    except SQLAlchemyError as e:
        raise _internal_error("buy chair %s" % chair_id, e)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/listings/chair/{chair_id}", response_model=schemas.ChairOut)
def get_chair(chair_id: int, db: Session = Depends(get_db)):
    try:
        return crud.get_chair(db, chair_id)
    except NotFound as e:
        logger.info("chair detail: %s", e)
        raise HTTPException(status_code=404, detail="Chair not found")
    except SQLAlchemyError as e:
        raise _internal_error("chair detail %s" % chair_id, e)


# estates

@router.post("/listings/estate", status_code=status.HTTP_201_CREATED)
def post_estates(estates: UploadFile = File(...), db: Session = Depends(get_db), cache: EstateIdCache = Depends(get_cache)):
    try:
        services.import_estates(db, estates.file.read(), cache)
    except InvalidPayload as e:
        raise _bad_request(e)
    except (SQLAlchemyError, CacheBackendError) as e:
        raise _internal_error("estate import", e)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/listings/estate/search", response_model=schemas.EstateSearchResponse)
def search_estates(
    page: int = Query(..., ge=0, le=MAX_INT64),
    perPage: int = Query(..., gt=0, le=MAX_INT64),
    doorHeightRangeId: str = "",
    doorWidthRangeId: str = "",
    rentRangeId: str = "",
    features: str = "",
    db: Session = Depends(get_db),
    catalog: RangeCatalog = Depends(get_catalog),
    cache: EstateIdCache = Depends(get_cache),
):
    try:
        predicates = build_estate_predicates(catalog, doorHeightRangeId, doorWidthRangeId, rentRangeId, features)
    except InvalidRangeIndex as e:
        raise _bad_request(e)
    fingerprint = estate_fingerprint(doorHeightRangeId, doorWidthRangeId, rentRangeId, features)
    offset = _page_offset(page, perPage)
    try:
        estates, count = cache.search(db, fingerprint, predicates, perPage, offset)
    except NoSearchCondition as e:
        raise _bad_request(e)
    except (CacheBackendError, SQLAlchemyError) as e:
        raise _internal_error("estate search %s" % fingerprint, e)
    return {"count": count, "estates": estates}


@router.get("/listings/estate/search/condition", response_model=schemas.EstateSearchCondition)
def estate_search_condition(catalog: RangeCatalog = Depends(get_catalog)):
    return catalog.estate


@router.get("/listings/estate/low_priced", response_model=schemas.EstateListResponse)
def low_priced_estates(db: Session = Depends(get_db)):
    try:
        return {"estates": crud.low_priced_estates(db)}
    except SQLAlchemyError as e:
        raise _internal_error("low priced estates", e)


@router.post("/listings/estate/nazotte", response_model=schemas.EstateSearchResponse)
def search_estates_nazotte(payload: schemas.Coordinates, db: Session = Depends(get_db)):
    try:
        estates, count = services.search_estates_in_polygon(db, payload.coordinates)
    except InvalidPayload as e:
        raise _bad_request(e)
    except SQLAlchemyError as e:
        raise _internal_error("nazotte search", e)
    return {"count": count, "estates": estates}


@router.post("/listings/estate/req_doc/{estate_id}")
def request_estate_document(estate_id: int, payload: schemas.EmailRequest, db: Session = Depends(get_db)):
    try:
        services.request_estate_document(db, estate_id)
    except NotFound as e:
        logger.info("request document: %s", e)
        raise HTTPException(status_code=404, detail="Estate not found")
    except SQLAlchemyError as e:
        raise _internal_error("request document %s" % estate_id, e)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/listings/estate/{estate_id}", response_model=schemas.EstateOut)
def get_estate(estate_id: int, db: Session = Depends(get_db)):
    try:
        return crud.get_estate(db, estate_id)
    except NotFound as e:
        logger.info("estate detail: %s", e)
        raise HTTPException(status_code=404, detail="Estate not found")
    except SQLAlchemyError as e:
        raise _internal_error("estate detail %s" % estate_id, e)


@router.get("/listings/recommended_estate/{chair_id}", response_model=schemas.EstateListResponse)
def recommended_estates(chair_id: int, db: Session = Depends(get_db)):
    try:
        return {"estates": services.recommended_estates_for_chair(db, chair_id)}
    except InvalidPayload as e:
        raise _bad_request(e)
    except SQLAlchemyError as e:
        raise _internal_error("recommended estates for chair %s" % chair_id, e)
