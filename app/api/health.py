from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    # Reports store connectivity; never fails so probes can tell "up but degraded" apart
    store = getattr(request.app.state, "store", None)
    if store is None:
        return {"success": True, "status": "degraded", "store": {"backend": None, "connected": False}}

    connected = store.ping()
    return {
        "success": True,
        "status": "ok" if connected else "degraded",
        "store": {"backend": store.backend, "connected": connected},
    }
