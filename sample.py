"""
httproute - REST sample

A small in-memory card store showing method routes, mounts, path
parameters and predicate conditions.
Run with: uv run uvicorn sample:server --reload
"""


import logging

from httproute import JSONResponse, Request, Router, Server, TextResponse, route

# =============================================================================
# Application Setup
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
logger = logging.getLogger("httproute.sample")

cards: dict[str, dict[str, str]] = {
    "1": {"id": "1", "title": "Write docs"},
}


# =============================================================================
# Middleware
# =============================================================================


async def log_request(request: Request, send, call_next) -> None:
    """Log every request before it is routed."""
    logger.info("%s %s", request.method, request.path)
    await call_next()


def is_patch(request: Request) -> bool:
    """PATCH requests, or PUT requests with ``?patch``."""
    return request.method == "PATCH" or (
        request.method == "PUT" and request.get_query("patch") is not None
    )


# =============================================================================
# Routes - Cards
# =============================================================================


async def list_cards(request: Request, send, call_next) -> None:
    await JSONResponse(list(cards.values()))(send)


async def create_card(request: Request, send, call_next) -> None:
    data: dict[str, str] = await request.json() or {}
    card_id = str(len(cards) + 1)
    cards[card_id] = {"id": card_id, "title": data.get("title", "")}
    await JSONResponse(cards[card_id], status_code=201)(send)


async def show_card(request: Request, send, call_next) -> None:
    # pyrefly: ignore [unsupported-operation]
    card = cards.get(request.params["id"])
    if card is None:
        await call_next()
        return
    await JSONResponse(card)(send)


async def patch_card(request: Request, send, call_next) -> None:
    # pyrefly: ignore [unsupported-operation]
    card = cards.get(request.params["id"])
    if card is None:
        await call_next()
        return
    data: dict[str, str] = await request.json() or {}
    card.update({key: value for key, value in data.items() if key != "id"})
    await JSONResponse(card)(send)


async def delete_card(request: Request, send, call_next) -> None:
    # pyrefly: ignore [unsupported-operation]
    cards.pop(request.params["id"], None)
    await TextResponse(None, status_code=204)(send)


api = Router(
    route("GET /cards", list_cards),
    route("POST /cards", create_card),
    route("/cards/:id", Router()
        .route("GET", show_card)
        .route("DELETE", delete_card)
        .route(is_patch, patch_card)),
)

server = Server(Router(log_request, route("/api", api)))


def main() -> None:
    print("""
    httproute sample running on http://127.0.0.1:8000

    Available endpoints:
    - GET    /api/cards       - List cards
    - POST   /api/cards       - Create card
    - GET    /api/cards/:id   - Show card
    - PATCH  /api/cards/:id   - Update card (or PUT ?patch)
    - DELETE /api/cards/:id   - Delete card
    """)

    server.run(
        host="127.0.0.1",
        port=8000,
        log_level="info",
    )


if __name__ == "__main__":
    main()
