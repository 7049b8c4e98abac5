from __future__ import annotations

import logging
import os
import tempfile
from typing import List, Optional

import anyio
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from app.crs.diagnostics import describe_pipeline, describe_system, system_kind
from app.crs.errors import (
    CrsError,
    FormatError,
    MissingParameterError,
    ParseError,
    UnknownProjectionError,
    UnsupportedTransformError,
)
from app.crs.model import CoordinateSystem
from app.registry import CoordinateSystemRegistry, RegistryTimeoutError, UnknownSystemError
from app.schemas import (
    CrsResponse,
    GridInspectResponse,
    PipelineLeg,
    PipelineRequest,
    PipelineResponse,
    RegisterRequest,
    ShiftRequest,
    ShiftResponse,
    SystemRef,
    SystemSummary,
    TransformRequest,
    TransformResponse,
    WktParseResponse,
    WktRequest,
)
from ntv2.loader import load_grid_file
from transforms.base import MathTransform

logger = logging.getLogger(__name__)

router = APIRouter()


def get_registry(request: Request) -> CoordinateSystemRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Coordinate system registry not initialised")
    return registry


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, UnknownSystemError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, RegistryTimeoutError):
        return HTTPException(status_code=503, detail=str(exc))
    client_errors = (ParseError, UnknownProjectionError, MissingParameterError, UnsupportedTransformError, FormatError)
    if isinstance(exc, client_errors):
        return HTTPException(status_code=422, detail=f"{type(exc).__name__}: {exc}")
    return HTTPException(status_code=500, detail=f"{type(exc).__name__}: {exc}")


def _resolve(registry: CoordinateSystemRegistry, ref: SystemRef) -> CoordinateSystem:
    if isinstance(ref, str) and not ref.strip().isdigit():
        return registry.reader.parse_coordinate_system(ref)
    return registry.resolve(int(ref))


def _ref_label(ref: SystemRef) -> str:
    return str(ref) if isinstance(ref, int) or str(ref).strip().isdigit() else "wkt"


# -----------------------------
# WKT and registry
# -----------------------------


@router.post("/wkt/parse", response_model=WktParseResponse)
async def parse_wkt(req: WktRequest, registry: CoordinateSystemRegistry = Depends(get_registry)) -> WktParseResponse:
    """Parse a coordinate system or math transform and echo it back in normalised WKT."""
    try:
        parsed = registry.reader.parse(req.wkt)
    except CrsError as exc:
        raise _http_error(exc)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if isinstance(parsed, CoordinateSystem):
        return WktParseResponse(
            kind=system_kind(parsed), wkt=parsed.wkt, summary=SystemSummary(**describe_system(parsed))
        )
    if isinstance(parsed, MathTransform):
        return WktParseResponse(
            kind="math_transform", wkt=parsed.wkt, dim_source=parsed.dim_source, dim_target=parsed.dim_target
        )
    return WktParseResponse(kind=type(parsed).__name__, wkt=parsed.wkt)


@router.get("/crs/{srid}", response_model=CrsResponse)
async def get_crs(srid: int, registry: CoordinateSystemRegistry = Depends(get_registry)) -> CrsResponse:
    try:
        cs = await anyio.to_thread.run_sync(registry.get_coordinate_system, srid)
    except CrsError as exc:
        raise _http_error(exc)
    if cs is None:
        raise HTTPException(status_code=404, detail=f"No coordinate system registered for srid {srid}")
    return CrsResponse(srid=srid, wkt=cs.wkt, summary=SystemSummary(**describe_system(cs)))


@router.post("/crs", response_model=CrsResponse, status_code=201)
async def register_crs(req: RegisterRequest, registry: CoordinateSystemRegistry = Depends(get_registry)) -> CrsResponse:
    try:
        cs = registry.reader.parse_coordinate_system(req.wkt)
    except CrsError as exc:
        raise _http_error(exc)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    srid = req.srid
    if srid is None:
        if not cs.has_authority:
            raise HTTPException(status_code=422, detail="WKT has no AUTHORITY code; provide 'srid'")
        srid = cs.authority_code
    try:
        await anyio.to_thread.run_sync(registry.add, srid, cs)
    except CrsError as exc:
        raise _http_error(exc)
    return CrsResponse(srid=srid, wkt=cs.wkt, summary=SystemSummary(**describe_system(cs)))


@router.delete("/crs/{srid}")
async def delete_crs(srid: int, registry: CoordinateSystemRegistry = Depends(get_registry)):
    try:
        removed = await anyio.to_thread.run_sync(registry.remove, srid)
    except CrsError as exc:
        raise _http_error(exc)
    if not removed:
        raise HTTPException(status_code=404, detail=f"No coordinate system registered for srid {srid}")
    return {"removed": srid}


# -----------------------------
# Transformations
# -----------------------------


@router.post("/transform", response_model=TransformResponse)
async def transform_points(
    req: TransformRequest, request: Request, registry: CoordinateSystemRegistry = Depends(get_registry)
) -> TransformResponse:
    """Transform points between two systems, each given by srid or WKT.

    Evaluation runs in a worker thread; results are cached when Redis is configured.
    """
    settings = getattr(request.app.state, "settings", None)
    max_points = settings.max_points if settings is not None else 100_000
    if len(req.points) > max_points:
        raise HTTPException(status_code=413, detail=f"At most {max_points} points per request")

    cache = getattr(request.app.state, "cache", None)
    source_key, target_key = str(req.source), str(req.target)
    if cache is not None:
        hit = await cache.get_transform(source_key, target_key, req.points)
        if hit is not None:
            cached_points, legs = hit
            return TransformResponse(points=cached_points, legs=legs, cached=True)

    def _run():
        pipeline = registry.factory.create(_resolve(registry, req.source), _resolve(registry, req.target))
        return pipeline, [list(p) for p in pipeline.transform_many(req.points)]

    try:
        pipeline, points = await anyio.to_thread.run_sync(_run)
    except CrsError as exc:
        raise _http_error(exc)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    logger.info(
        "transform.done",
        extra={"source": _ref_label(req.source), "target": _ref_label(req.target), "points": len(points)},
    )

    resp = TransformResponse(points=points, legs=len(pipeline))
    if cache is not None:
        await cache.set_transform(source_key, target_key, req.points, points, resp.legs)
    return resp


@router.post("/transform/pipeline", response_model=PipelineResponse)
async def transform_pipeline(
    req: PipelineRequest, registry: CoordinateSystemRegistry = Depends(get_registry)
) -> PipelineResponse:
    def _run():
        return registry.factory.create(_resolve(registry, req.source), _resolve(registry, req.target))

    try:
        pipeline = await anyio.to_thread.run_sync(_run)
    except CrsError as exc:
        raise _http_error(exc)
    legs = [PipelineLeg(**leg) for leg in describe_pipeline(pipeline)]
    wkt: Optional[str] = None
    if all(leg.wkt is not None for leg in legs):
        wkt = pipeline.wkt
    return PipelineResponse(legs=legs, wkt=wkt)


# -----------------------------
# NTv2 grids
# -----------------------------


@router.post("/ntv2/shift", response_model=ShiftResponse)
async def ntv2_shift(req: ShiftRequest, registry: CoordinateSystemRegistry = Depends(get_registry)) -> ShiftResponse:
    if not os.path.isfile(req.path):
        raise HTTPException(status_code=404, detail=f"Path not found: {req.path}")

    def _run() -> List[Optional[List[float]]]:
        grid_file = registry.factory.grid_cache.get(req.path)
        out: List[Optional[List[float]]] = []
        for lon, lat in req.points:
            shifted = grid_file.transform(lon, lat, req.inverse)
            out.append(None if shifted is None else [shifted[0], shifted[1]])
        return out

    try:
        points = await anyio.to_thread.run_sync(_run)
    except CrsError as exc:
        raise _http_error(exc)
    except PermissionError:
        raise HTTPException(status_code=403, detail=f"Permission denied: {req.path}")
    return ShiftResponse(points=points)


@router.post("/ntv2/inspect", response_model=GridInspectResponse)
async def ntv2_inspect(file: UploadFile = File(None), path: str = Form(None)) -> GridInspectResponse:
    """Header and sub-grid summary of a ``.gsb``/``.gsa`` file, uploaded or given by path."""
    if file and path:
        raise HTTPException(status_code=400, detail="Provide either 'file' or 'path', not both")
    if not file and not path:
        raise HTTPException(status_code=400, detail="No file or path provided")

    tmp_path: Optional[str] = None
    try:
        if file:
            suffix = os.path.splitext(file.filename or "")[1].lower()
            content = await file.read()
            if not content:
                raise HTTPException(status_code=400, detail="Uploaded file is empty")
            # Persist upload to a temp file; the loader picks the reader by extension
            with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
                tmp.write(content)
                tmp_path = tmp.name
            target = tmp_path
        else:
            if not os.path.exists(path):
                raise HTTPException(status_code=404, detail=f"Path not found: {path}")
            if not os.path.isfile(path):
                raise HTTPException(status_code=400, detail=f"Not a regular file: {path}")
            target = path
        try:
            grid_file = await anyio.to_thread.run_sync(load_grid_file, target)
        except FormatError as exc:
            raise HTTPException(status_code=422, detail=f"Invalid NTv2 file: {exc}")
        except PermissionError:
            raise HTTPException(status_code=403, detail=f"Permission denied: {target}")
        summary = grid_file.summary()
        source = file.filename if file else path
        return GridInspectResponse(source=source or "", header=summary["header"], grids=summary["grids"])
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)


__all__ = ["router", "get_registry"]
