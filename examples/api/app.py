"""API — a small JSON REST API with a static docs mount.

CRUD for an in-memory "items" resource. Demonstrates path parameters,
query parameters, request.json() for POST/PUT, status overrides, CORS
preflight handling, and a static directory mount.

Run:
    cd examples/api && python app.py
"""

import threading
from dataclasses import dataclass
from pathlib import Path

from perch import Router

app = Router()
app.enable_cors()
app.mount_static("/docs", Path(__file__).parent / "public", {"quiet": True})


# ---------------------------------------------------------------------------
# In-memory storage
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Item:
    id: int
    title: str
    done: bool = False


_items: dict[int, Item] = {}
_next_id = 1
_lock = threading.Lock()


def _get_next_id() -> int:
    global _next_id
    with _lock:
        n = _next_id
        _next_id += 1
        return n


def _item_id(params: dict[str, str]) -> int | None:
    value = params["item_id"]
    return int(value) if value.isdigit() else None


def _int_query(queries: dict[str, str], key: str, default: int) -> int:
    try:
        return int(queries.get(key, default))
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/api/items")
def list_items(req, res, params, queries):
    """List items with optional limit and offset."""
    limit = min(max(_int_query(queries, "limit", 50), 1), 100)
    offset = max(_int_query(queries, "offset", 0), 0)

    with _lock:
        all_items = sorted(_items.values(), key=lambda x: x.id)
    page = all_items[offset : offset + limit]

    return res.send(
        {
            "data": page,
            "meta": {"limit": limit, "offset": offset, "total": len(all_items)},
        }
    )


@app.get("/api/items/:item_id")
def get_item(req, res, params):
    """Get a single item by ID."""
    item_id = _item_id(params)
    if item_id is None:
        return res.status(400).send({"error": "item_id must be an integer"})
    with _lock:
        item = _items.get(item_id)
    if item is None:
        return res.status(404).send({"error": "Item not found"})
    return res.send(item)


@app.post("/api/items")
async def create_item(req, res):
    """Create an item from a JSON body."""
    data = await req.json()
    title = str(data.get("title", "")).strip()
    if not title:
        return res.status(422).send({"error": "title is required"})
    item = Item(id=_get_next_id(), title=title)
    with _lock:
        _items[item.id] = item
    return res.status(201).set_header("Location", f"/api/items/{item.id}").send(item)


@app.put("/api/items/:item_id")
async def update_item(req, res, params):
    """Replace an item's title and done flag."""
    item_id = _item_id(params)
    if item_id is None:
        return res.status(400).send({"error": "item_id must be an integer"})
    data = await req.json()
    with _lock:
        current = _items.get(item_id)
        if current is None:
            return res.status(404).send({"error": "Item not found"})
        updated = Item(
            id=item_id,
            title=str(data.get("title", current.title)),
            done=bool(data.get("done", current.done)),
        )
        _items[item_id] = updated
    return res.send(updated)


@app.delete("/api/items/:item_id")
def delete_item(req, res, params):
    """Delete an item."""
    item_id = _item_id(params)
    with _lock:
        removed = _items.pop(item_id, None) if item_id is not None else None
    if removed is None:
        return res.status(404).send({"error": "Item not found"})
    return res.status(204).send()


if __name__ == "__main__":
    app.run()
